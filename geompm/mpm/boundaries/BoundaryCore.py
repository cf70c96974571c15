import taichi as ti


@ti.kernel
def kernel_initialize_boundary(constraint: ti.template()):
    for i in constraint:
        constraint[i].clear_boundary_condition()


@ti.kernel
def set_nodal_constraints(constraint: ti.template(), nodeID: ti.types.ndarray(), kind: int, tag: int, fix: ti.types.vector(3, int), value: ti.types.vector(3, float)):
    for offset in range(nodeID.shape[0]):
        constraint[nodeID[offset]].set_boundary_condition(kind, tag, ti.cast(fix, ti.u8), value)


@ti.kernel
def set_particle_constraints(constraint: ti.template(), particleID: ti.types.ndarray(), kind: int, tag: int, fix: ti.types.vector(3, int), value: ti.types.vector(6, float)):
    for offset in range(particleID.shape[0]):
        constraint[particleID[offset]].set_boundary_condition(kind, tag, ti.cast(fix, ti.u8), value)


@ti.kernel
def update_nodal_constraint_value(constraint: ti.template(), tag: int, value: ti.types.vector(3, float)):
    for i in constraint:
        if constraint[i].tag == tag:
            constraint[i].value = value


@ti.kernel
def update_particle_constraint_value(constraint: ti.template(), tag: int, value: ti.types.vector(6, float)):
    for i in constraint:
        if constraint[i].tag == tag:
            constraint[i].value = value
