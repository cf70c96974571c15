import taichi as ti

from geompm.physics_model.constitutive_model.MaterialKernel import calculate_strain_rate
from geompm.utils.constants import Threshold, ZEROVEC3f, ZEROMAT3x3, FORCE, VELOCITY, STRESS
from geompm.utils.ScalarFunction import is_finite
from geompm.utils.TypeDefination import vec3f
from geompm.utils.VectorFunction import Normalize, outer_product


@ti.func
def shape_mapping(shape_fn, vars):
    return shape_fn * vars


@ti.func
def internal_force_mapping(dshape_fn, fInt):
    return vec3f([dshape_fn[0] * fInt[0] + dshape_fn[1] * fInt[3] + dshape_fn[2] * fInt[5],
                  dshape_fn[1] * fInt[1] + dshape_fn[0] * fInt[3] + dshape_fn[2] * fInt[4],
                  dshape_fn[2] * fInt[2] + dshape_fn[1] * fInt[4] + dshape_fn[0] * fInt[5]])


@ti.kernel
def grid_reset(node: ti.template()):
    for ng, nb in node:
        node[ng, nb]._grid_reset()


@ti.kernel
def grid_momentum_reset(node: ti.template()):
    for ng, nb in node:
        node[ng, nb]._reset_momentum()


# ========================================================= #
#                 Particle to Grid (P2G)                    #
# ========================================================= #
@ti.kernel
def kernel_mass_momentum_p2g(total_nodes: int, particleNum: int, node: ti.template(), particle: ti.template(), LnID: ti.template(), shapefn: ti.template(), node_size: ti.template()):
    for np in range(particleNum):
        if int(particle[np].active) == 1:
            bodyID = int(particle[np].bodyID)
            offset = np * total_nodes
            mass = particle[np].m
            velocity = particle[np].v
            for ln in range(offset, offset + int(node_size[np])):
                nodeID = LnID[ln]
                nmass = shape_mapping(shapefn[ln], mass)
                node[nodeID, bodyID]._update_nodal_mass(nmass)
                node[nodeID, bodyID]._update_nodal_momentum(nmass * velocity)


@ti.kernel
def kernel_momentum_p2g(total_nodes: int, particleNum: int, node: ti.template(), particle: ti.template(), LnID: ti.template(), shapefn: ti.template(), node_size: ti.template()):
    for np in range(particleNum):
        if int(particle[np].active) == 1:
            bodyID = int(particle[np].bodyID)
            offset = np * total_nodes
            mass = particle[np].m
            velocity = particle[np].v
            for ln in range(offset, offset + int(node_size[np])):
                nodeID = LnID[ln]
                nmass = shape_mapping(shapefn[ln], mass)
                node[nodeID, bodyID]._update_nodal_momentum(nmass * velocity)


@ti.kernel
def kernel_force_p2g(total_nodes: int, particleNum: int, gravity: ti.types.vector(3, float), node: ti.template(), particle: ti.template(), particle_constraint: ti.template(),
                     LnID: ti.template(), shapefn: ti.template(), dshapefn: ti.template(), node_size: ti.template()):
    for np in range(particleNum):
        if int(particle[np].active) == 1:
            bodyID = int(particle[np].bodyID)
            offset = np * total_nodes
            fex = particle[np]._compute_external_force(gravity)
            if int(particle_constraint[np].kind) == FORCE:
                for d in ti.static(range(3)):
                    if int(particle_constraint[np].fix[d]) == 1:
                        fex[d] += particle_constraint[np].value[d]
            fInt = particle[np]._compute_internal_force()
            for ln in range(offset, offset + int(node_size[np])):
                nodeID = LnID[ln]
                external_force = shape_mapping(shapefn[ln], fex)
                internal_force = internal_force_mapping(dshapefn[ln], fInt)
                node[nodeID, bodyID]._update_external_force(external_force)
                node[nodeID, bodyID]._update_internal_force(internal_force)


@ti.kernel
def kernel_calc_contact_normal(total_nodes: int, particleNum: int, node: ti.template(), particle: ti.template(), LnID: ti.template(), dshapefn: ti.template(), node_size: ti.template()):
    for np in range(particleNum):
        if int(particle[np].active) == 1:
            bodyID = int(particle[np].bodyID)
            offset = np * total_nodes
            for ln in range(offset, offset + int(node_size[np])):
                grad_domain = dshapefn[ln] * particle[np].vol
                node[LnID[ln], bodyID]._update_domain_gradient(grad_domain)


# ========================================================= #
#                       Grid update                         #
# ========================================================= #
@ti.kernel
def kernel_compute_grid_velocity(cutoff: float, node: ti.template()):
    for ng, nb in node:
        if node[ng, nb].m > cutoff:
            node[ng, nb]._compute_nodal_velocity()


@ti.kernel
def kernel_compute_grid_kinematic(cutoff: float, damp: float, node: ti.template(), dt: ti.template()):
    for ng, nb in node:
        if node[ng, nb].m > cutoff:
            node[ng, nb]._compute_nodal_kinematic(damp, dt)


@ti.kernel
def kernel_calc_friction_contact(cutoff: float, mu: float, dt: ti.template(), node: ti.template()):
    for ng in range(node.shape[0]):
        total_mass, total_momentum, total_grad_domain = 0., ZEROVEC3f, ZEROVEC3f
        contact_body = 0
        for nb in range(node.shape[1]):
            mass = node[ng, nb].m
            if mass > cutoff:
                total_mass += mass
                total_momentum += mass * node[ng, nb].momentum
                total_grad_domain += node[ng, nb].grad_domain
                contact_body += 1

        if contact_body > 1:
            vcm = total_momentum / total_mass
            for nb in range(node.shape[1]):
                mass = node[ng, nb].m
                if mass > cutoff:
                    norm = Normalize(node[ng, nb].grad_domain - (total_grad_domain - node[ng, nb].grad_domain))
                    relative_velocity = node[ng, nb].momentum - vcm
                    is_penetrate = relative_velocity.dot(norm)
                    if is_penetrate > Threshold:
                        cforce = -mass * relative_velocity / dt[None]
                        norm_force = cforce.dot(norm)
                        if mu > Threshold:
                            trial_ft = cforce - norm_force * norm
                            fstick = trial_ft.norm()
                            fslip = mu * ti.abs(norm_force)
                            if fslip < fstick:
                                cforce = norm_force * norm + fslip * (trial_ft / fstick)
                        else:
                            cforce = norm_force * norm
                        node[ng, nb]._update_contact_force(cforce)


@ti.kernel
def kernel_assemble_contact_force(cutoff: float, dt: ti.template(), node: ti.template()):
    for ng, nb in node:
        if node[ng, nb].m > cutoff:
            node[ng, nb]._contact_force_assemble(dt)


@ti.kernel
def kernel_apply_nodal_force_constraint(cutoff: float, node: ti.template(), nodal_constraint: ti.template()):
    # the prescribed nodal force is shared among body layers in proportion to their mass
    for ng in range(node.shape[0]):
        if int(nodal_constraint[ng].kind) == FORCE:
            total_mass = 0.
            for nb in range(node.shape[1]):
                if node[ng, nb].m > cutoff:
                    total_mass += node[ng, nb].m
            if total_mass > cutoff:
                for nb in range(node.shape[1]):
                    if node[ng, nb].m > cutoff:
                        fraction = node[ng, nb].m / total_mass
                        for d in ti.static(range(3)):
                            if int(nodal_constraint[ng].fix[d]) == 1:
                                node[ng, nb].force[d] += fraction * nodal_constraint[ng].value[d]


@ti.kernel
def kernel_apply_nodal_velocity_constraint(cutoff: float, dt: ti.template(), node: ti.template(), nodal_constraint: ti.template()):
    for ng, nb in node:
        if int(nodal_constraint[ng].kind) == VELOCITY and node[ng, nb].m > cutoff:
            for d in ti.static(range(3)):
                if int(nodal_constraint[ng].fix[d]) == 1:
                    node[ng, nb]._prescribe_velocity(d, nodal_constraint[ng].value[d], dt)


@ti.kernel
def kernel_set_nodal_velocity_constraint(cutoff: float, node: ti.template(), nodal_constraint: ti.template()):
    for ng, nb in node:
        if int(nodal_constraint[ng].kind) == VELOCITY and node[ng, nb].m > cutoff:
            for d in ti.static(range(3)):
                if int(nodal_constraint[ng].fix[d]) == 1:
                    node[ng, nb]._set_velocity(d, nodal_constraint[ng].value[d])


# ========================================================= #
#                 Grid to Particle (G2P)                    #
# ========================================================= #
@ti.kernel
def kernel_kinemaitc_g2p(total_nodes: int, alpha: float, periodic: ti.types.vector(3, int), extent: ti.types.vector(3, float), dt: ti.template(), particleNum: int, node: ti.template(),
                         particle: ti.template(), particle_constraint: ti.template(), LnID: ti.template(), shapefn: ti.template(), node_size: ti.template()):
    for np in range(particleNum):
        if int(particle[np].active) == 1:
            vPIC, vFLIP = ZEROVEC3f, ZEROVEC3f
            bodyID = int(particle[np].bodyID)
            offset = np * total_nodes
            for ln in range(offset, offset + int(node_size[np])):
                nodeID = LnID[ln]
                shape_fn = shapefn[ln]
                vPIC += shape_mapping(shape_fn, node[nodeID, bodyID].momentum)
                vFLIP += shape_mapping(shape_fn, node[nodeID, bodyID].force)
            previous_position = particle[np].x
            particle[np]._update_particle_state(dt, alpha, vPIC, vFLIP)

            if int(particle_constraint[np].kind) == VELOCITY:
                for d in ti.static(range(3)):
                    if int(particle_constraint[np].fix[d]) == 1:
                        particle[np].v[d] = particle_constraint[np].value[d]
                        particle[np].x[d] = previous_position[d] + particle_constraint[np].value[d] * dt[None]

            for d in ti.static(range(3)):
                if periodic[d] == 1:
                    particle[np].x[d] -= ti.floor(particle[np].x[d] / extent[d]) * extent[d]


@ti.kernel
def kernel_update_velocity_gradient(total_nodes: int, particleNum: int, dt: ti.template(), node: ti.template(), particle: ti.template(),
                                    LnID: ti.template(), dshapefn: ti.template(), node_size: ti.template()):
    for np in range(particleNum):
        if int(particle[np].active) == 1:
            bodyID = int(particle[np].bodyID)
            velocity_gradient = ZEROMAT3x3
            offset = np * total_nodes
            for ln in range(offset, offset + int(node_size[np])):
                nodeID = LnID[ln]
                gv = node[nodeID, bodyID].momentum
                dshape_fn = dshapefn[ln]
                velocity_gradient += outer_product(dshape_fn, gv)
            particle[np].velocity_gradient = velocity_gradient


@ti.kernel
def kernel_compute_stress_strain(materialID: int, particleNum: int, dt: ti.template(), particle: ti.template(), matProps: ti.template(), stateVars: ti.template()):
    for np in range(particleNum):
        if int(particle[np].materialID) == materialID and int(particle[np].active) == 1:
            velocity_gradient = particle[np].velocity_gradient
            previous_stress = particle[np].stress
            particle[np].vol *= matProps.update_particle_volume(np, velocity_gradient, stateVars, dt)
            particle[np]._update_strain(calculate_strain_rate(velocity_gradient), dt)
            particle[np]._update_stress(matProps.ComputeStress(np, previous_stress, velocity_gradient, stateVars, dt))


@ti.kernel
def kernel_apply_particle_stress_constraint(particleNum: int, particle: ti.template(), particle_constraint: ti.template()):
    for np in range(particleNum):
        if int(particle_constraint[np].kind) == STRESS:
            particle[np]._update_stress(particle_constraint[np].value)


# ========================================================= #
#                      Health check                         #
# ========================================================= #
@ti.kernel
def kernel_check_particle_health(total_nodes: int, cutoff: float, particleNum: int, node: ti.template(), particle: ti.template(), LnID: ti.template(), node_size: ti.template(),
                                 report: ti.types.ndarray()):
    # report = [non-finite velocity, non-finite stress, mass underflow, first failing particle]
    for np in range(particleNum):
        if int(particle[np].active) == 1:
            failure = 0
            for d in ti.static(range(3)):
                if not is_finite(particle[np].v[d]) or not is_finite(particle[np].x[d]):
                    failure = 1
            if failure == 1:
                ti.atomic_add(report[0], 1)
            stress_failure = 0
            for d in ti.static(range(6)):
                if not is_finite(particle[np].stress[d]):
                    stress_failure = 1
            if stress_failure == 1:
                ti.atomic_add(report[1], 1)
                failure = 1

            bodyID = int(particle[np].bodyID)
            offset = np * total_nodes
            deposit = 0
            for ln in range(offset, offset + int(node_size[np])):
                if node[LnID[ln], bodyID].m > cutoff:
                    deposit = 1
            if deposit == 0:
                ti.atomic_add(report[2], 1)
                failure = 1
            if failure == 1:
                ti.atomic_min(report[3], np)
