import taichi as ti

from geompm.utils.ShapeFunctions import ShapeGIMP, GShapeGIMP
from geompm.utils.TypeDefination import vec3f


@ti.func
def calc_base_cell(ielement_size, particle_size, position):
    return ti.floor((position - particle_size) * ielement_size, int)


@ti.func
def shapefn(particle_position, nodal_coords, ielement_size, particle_size):
    shapen0 = ShapeGIMP(particle_position[0], nodal_coords[0], ielement_size[0], particle_size[0])
    shapen1 = ShapeGIMP(particle_position[1], nodal_coords[1], ielement_size[1], particle_size[1])
    shapen2 = ShapeGIMP(particle_position[2], nodal_coords[2], ielement_size[2], particle_size[2])
    return shapen0, shapen1, shapen2


@ti.func
def grad_shapefn(particle_position, nodal_coords, ielement_size, particle_size):
    dshapen0 = GShapeGIMP(particle_position[0], nodal_coords[0], ielement_size[0], particle_size[0])
    dshapen1 = GShapeGIMP(particle_position[1], nodal_coords[1], ielement_size[1], particle_size[1])
    dshapen2 = GShapeGIMP(particle_position[2], nodal_coords[2], ielement_size[2], particle_size[2])
    return dshapen0, dshapen1, dshapen2


@ti.func
def lattice_index(index, cell_num, is_periodic):
    # periodic axes wrap onto the opposite side, clipped axes collapse onto the boundary node
    ip = index
    if is_periodic == 1:
        ip = index % cell_num
    else:
        ip = ti.min(ti.max(index, 0), cell_num)
    return ip


@ti.func
def linearize(ip, jp, kp, gnum):
    return int(ip + jp * gnum[0] + kp * gnum[0] * gnum[1])


@ti.kernel
def global_update(total_nodes: int, influenced_node: int, element_size: ti.types.vector(3, float), ielement_size: ti.types.vector(3, float), cnum: ti.types.vector(3, int),
                  gnum: ti.types.vector(3, int), periodic: ti.types.vector(3, int), particleNum: int, particle: ti.template(), node_size: ti.template(), LnID: ti.template(),
                  shape_fn: ti.template(), dshape_fn: ti.template()):
    for np in range(particleNum):
        activeID = np * total_nodes
        if int(particle[np].active) == 1:
            position, psize = particle[np].x, particle[np].psize
            base_bound = calc_base_cell(ielement_size, psize, position)
            for k in range(base_bound[2], base_bound[2] + influenced_node):
                kp = lattice_index(k, cnum[2], periodic[2])
                for j in range(base_bound[1], base_bound[1] + influenced_node):
                    jp = lattice_index(j, cnum[1], periodic[1])
                    for i in range(base_bound[0], base_bound[0] + influenced_node):
                        ip = lattice_index(i, cnum[0], periodic[0])
                        # weights use the unwrapped node position
                        nodal_coords = vec3f(i, j, k) * element_size
                        shapen0, shapen1, shapen2 = shapefn(position, nodal_coords, ielement_size, psize)
                        shapeval = shapen0 * shapen1 * shapen2
                        if shapeval > 0.:
                            dshapen0, dshapen1, dshapen2 = grad_shapefn(position, nodal_coords, ielement_size, psize)
                            LnID[activeID] = linearize(ip, jp, kp, gnum)
                            shape_fn[activeID] = shapeval
                            dshape_fn[activeID] = vec3f([dshapen0 * shapen1 * shapen2, shapen0 * dshapen1 * shapen2, shapen0 * shapen1 * dshapen2])
                            activeID += 1
        node_size[np] = ti.u8(activeID - np * total_nodes)


@ti.kernel
def kernel_sum_shape_function(total_nodes: int, particleNum: int, node_size: ti.template(), shape_fn: ti.template(), dshape_fn: ti.template(),
                              weight_sum: ti.types.ndarray(), gradient_sum: ti.types.ndarray()):
    for np in range(particleNum):
        offset = np * total_nodes
        weight = 0.
        gradient = vec3f(0., 0., 0.)
        for ln in range(offset, offset + int(node_size[np])):
            weight += shape_fn[ln]
            gradient += dshape_fn[ln]
        weight_sum[np] = weight
        for d in ti.static(range(3)):
            gradient_sum[np, d] = gradient[d]
