import taichi as ti

from geompm.utils.constants import ZEROVEC3f, ZEROVEC6f
from geompm.utils.TypeDefination import vec3f, vec6f, vec3u8


@ti.dataclass
class NodalConstraint:
    kind: ti.u8
    tag: int
    fix: vec3u8
    value: vec3f

    @ti.func
    def set_boundary_condition(self, kind, tag, fix, value):
        self.kind = ti.u8(kind)
        self.tag = tag
        self.fix = fix
        self.value = value

    @ti.func
    def clear_boundary_condition(self):
        self.kind = ti.u8(0)
        self.tag = -1
        self.fix = vec3u8(0, 0, 0)
        self.value = ZEROVEC3f


@ti.dataclass
class ParticleConstraint:
    kind: ti.u8
    tag: int
    fix: vec3u8
    value: vec6f

    @ti.func
    def set_boundary_condition(self, kind, tag, fix, value):
        self.kind = ti.u8(kind)
        self.tag = tag
        self.fix = fix
        self.value = value

    @ti.func
    def clear_boundary_condition(self):
        self.kind = ti.u8(0)
        self.tag = -1
        self.fix = vec3u8(0, 0, 0)
        self.value = ZEROVEC6f
