import taichi as ti

from geompm.utils.constants import ZEROVEC6f, ZEROMAT3x3
from geompm.utils.TypeDefination import vec3f, vec6f, mat3x3


@ti.dataclass
class ParticleCloud:
    particleID: int
    bodyID: ti.u8
    materialID: ti.u8
    active: ti.u8
    m: float
    vol0: float
    vol: float
    psize: vec3f
    x: vec3f
    v: vec3f
    stress: vec6f
    strain: vec6f
    strain_rate: vec6f
    velocity_gradient: mat3x3

    @ti.func
    def _set_essential(self, particleID, bodyID, materialID, density, volume, psize, position, velocity, stress):
        self.particleID = particleID
        self.bodyID = ti.u8(bodyID)
        self.materialID = ti.u8(materialID)
        self.active = ti.u8(1)
        self.m = density * volume
        self.vol0 = volume
        self.vol = volume
        self.psize = psize
        self.x = position
        self.v = velocity
        self.stress = stress
        self.strain = ZEROVEC6f
        self.strain_rate = ZEROVEC6f
        self.velocity_gradient = ZEROMAT3x3

    @ti.func
    def _compute_external_force(self, gravity):
        return self.m * gravity

    @ti.func
    def _compute_internal_force(self):
        return -self.vol * self.stress

    @ti.func
    def _update_particle_state(self, dt, alpha, vPIC, vFLIP):
        self.v = alpha * vPIC + (1. - alpha) * (vFLIP * dt[None] + self.v)
        self.x += vPIC * dt[None]

    @ti.func
    def _update_strain(self, strain_rate, dt):
        self.strain_rate = strain_rate
        self.strain += strain_rate * dt[None]

    @ti.func
    def _update_stress(self, stress):
        self.stress = stress

    @ti.func
    def _get_momentum(self):
        return self.m * self.v
