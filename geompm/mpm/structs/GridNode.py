import taichi as ti

from geompm.utils.constants import ZEROVEC3f
from geompm.utils.ScalarFunction import sgn
from geompm.utils.TypeDefination import vec3f


@ti.dataclass
class Nodes:
    m: float
    momentum: vec3f
    force: vec3f
    contact_force: vec3f
    grad_domain: vec3f

    @ti.func
    def _grid_reset(self):
        self.m = 0.
        self.momentum = ZEROVEC3f
        self.force = ZEROVEC3f
        self.contact_force = ZEROVEC3f
        self.grad_domain = ZEROVEC3f

    @ti.func
    def _reset_momentum(self):
        self.momentum = ZEROVEC3f

    @ti.func
    def _update_nodal_mass(self, m):
        self.m += m

    @ti.func
    def _update_nodal_momentum(self, momentum):
        self.momentum += momentum

    @ti.func
    def _compute_nodal_velocity(self):
        self.momentum /= self.m

    @ti.func
    def _update_external_force(self, external_force):
        self.force += external_force

    @ti.func
    def _update_internal_force(self, internal_force):
        self.force += internal_force

    @ti.func
    def _update_domain_gradient(self, gradient):
        self.grad_domain += gradient

    @ti.func
    def _compute_nodal_kinematic(self, damp, dt):
        unbalanced_force = self.force
        velocity = self.momentum
        for d in ti.static(range(3)):
            if velocity[d] * unbalanced_force[d] > 0.:
                unbalanced_force[d] -= damp * ti.abs(unbalanced_force[d]) * sgn(velocity[d])
        acceleration = unbalanced_force / self.m
        self.momentum += acceleration * dt[None]
        self.force = acceleration

    @ti.func
    def _update_contact_force(self, force):
        self.contact_force += force

    @ti.func
    def _contact_force_assemble(self, dt):
        contact_acceleration = self.contact_force / self.m
        self.force += contact_acceleration
        self.momentum += contact_acceleration * dt[None]

    @ti.func
    def _prescribe_velocity(self, d, value, dt):
        # keep the acceleration consistent with the prescribed velocity jump
        previous_velocity = self.momentum[d] - self.force[d] * dt[None]
        self.momentum[d] = value
        self.force[d] = (value - previous_velocity) / dt[None]

    @ti.func
    def _set_velocity(self, d, value):
        self.momentum[d] = value
