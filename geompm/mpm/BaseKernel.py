import taichi as ti

from geompm.utils.TypeDefination import vec3f, vec6f


@ti.kernel
def kernel_add_body_(particle: ti.template(), init_particleNum: int, particle_num: int, bodyID: ti.types.ndarray(), materialID: ti.types.ndarray(), density: ti.types.ndarray(),
                     volume: ti.types.ndarray(), psize: ti.types.ndarray(), position: ti.types.ndarray(), velocity: ti.types.ndarray(), stress: ti.types.ndarray()):
    for np in range(particle_num):
        particleID = init_particleNum + np
        particle_size = vec3f(psize[np, 0], psize[np, 1], psize[np, 2])
        particle_position = vec3f(position[np, 0], position[np, 1], position[np, 2])
        particle_velocity = vec3f(velocity[np, 0], velocity[np, 1], velocity[np, 2])
        particle_stress = vec6f(stress[np, 0], stress[np, 1], stress[np, 2], stress[np, 3], stress[np, 4], stress[np, 5])
        particle[particleID]._set_essential(particleID, bodyID[np], materialID[np], density[np], volume[np], particle_size, particle_position, particle_velocity, particle_stress)


@ti.kernel
def find_max_velocity_(particleNum: int, particle: ti.template()) -> float:
    max_vel = 0.
    for np in range(particleNum):
        if int(particle[np].active) == 1:
            vel = particle[np].v.norm()
            ti.atomic_max(max_vel, vel)
    return max_vel


@ti.kernel
def kernel_compute_total_mass(particleNum: int, particle: ti.template(), bodyID: int) -> float:
    total_mass = 0.
    for np in range(particleNum):
        if int(particle[np].active) == 1 and (bodyID < 0 or int(particle[np].bodyID) == bodyID):
            total_mass += particle[np].m
    return total_mass


@ti.kernel
def kernel_compute_total_momentum(particleNum: int, particle: ti.template(), bodyID: int) -> ti.types.vector(3, float):
    total_momentum = vec3f(0., 0., 0.)
    for np in range(particleNum):
        if int(particle[np].active) == 1 and (bodyID < 0 or int(particle[np].bodyID) == bodyID):
            total_momentum += particle[np]._get_momentum()
    return total_momentum


@ti.kernel
def modify_particle_velocity(factor: int, value: ti.types.vector(3, float), particleNum: int, particle: ti.template(), bodyID: int):
    for np in range(particleNum):
        if int(particle[np].bodyID) == bodyID:
            particle[np].v = factor * particle[np].v + value


@ti.kernel
def modify_particle_stress(factor: int, value: ti.types.vector(6, float), particleNum: int, particle: ti.template(), bodyID: int):
    for np in range(particleNum):
        if int(particle[np].bodyID) == bodyID:
            particle[np].stress = factor * particle[np].stress + value
