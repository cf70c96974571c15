import taichi as ti

from geompm.utils.constants import EYE, ZEROVEC6f
from geompm.utils.TypeDefination import vec3f, vec6f


@ti.func
def calculate_strain_rate(velocity_gradient):
    return vec6f(velocity_gradient[0, 0],
                 velocity_gradient[1, 1],
                 velocity_gradient[2, 2],
                 0.5 * (velocity_gradient[0, 1] + velocity_gradient[1, 0]),
                 0.5 * (velocity_gradient[1, 2] + velocity_gradient[2, 1]),
                 0.5 * (velocity_gradient[0, 2] + velocity_gradient[2, 0]))

@ti.func
def calculate_strain_increment(velocity_gradient, dt):
    return calculate_strain_rate(velocity_gradient) * dt[None]

@ti.func
def calculate_vorticity_rate(velocity_gradient):
    return 0.5 * vec3f(velocity_gradient[1, 0] - velocity_gradient[0, 1],
                       velocity_gradient[2, 1] - velocity_gradient[1, 2],
                       velocity_gradient[0, 2] - velocity_gradient[2, 0])

@ti.func
def calculate_vorticity_increment(velocity_gradient, dt):
    return calculate_vorticity_rate(velocity_gradient) * dt[None]

@ti.func
def Sigrot(stress, dw):
    sigrot = ZEROVEC6f
    sigrot[0] = 2. * (-dw[2] * stress[5] + dw[0] * stress[3])
    sigrot[1] = 2. * (-dw[0] * stress[3] + dw[1] * stress[4])
    sigrot[2] = 2. * (-dw[1] * stress[4] + dw[2] * stress[5])
    sigrot[3] = -dw[2] * stress[4] + dw[1] * stress[5] + dw[0] * (stress[1] - stress[0])
    sigrot[4] = -dw[0] * stress[5] + dw[2] * stress[3] + dw[1] * (stress[2] - stress[1])
    sigrot[5] = -dw[1] * stress[3] + dw[0] * stress[4] + dw[2] * (stress[0] - stress[2])
    return sigrot

@ti.func
def SphericalTensor(tensor):
    return (tensor[0] + tensor[1] + tensor[2]) / 3.

@ti.func
def DeviatoricTensor(tensor):
    sigma = SphericalTensor(tensor)
    return vec6f(tensor[0] - sigma, tensor[1] - sigma, tensor[2] - sigma, tensor[3], tensor[4], tensor[5])

@ti.func
def AssembleStress(sigma, deviatoric_stress):
    return deviatoric_stress + sigma * EYE

@ti.func
def ComputeStressInvariantJ2(stress):
    J2 = ((stress[0] - stress[1]) * (stress[0] - stress[1]) \
        + (stress[1] - stress[2]) * (stress[1] - stress[2]) \
        + (stress[0] - stress[2]) * (stress[0] - stress[2])) / 6. \
        + stress[3] * stress[3] + stress[4] * stress[4] + stress[5] * stress[5]
    return J2

@ti.func
def EquivalentDeviatoricStress(stress):
    J2 = ComputeStressInvariantJ2(stress)
    return ti.sqrt(3 * J2)

@ti.func
def VonMisesStress(stress):
    return EquivalentDeviatoricStress(stress)

@ti.func
def ElasticTensorMultiplyVector(vector, bulk_modulus, shear_modulus):
    a = bulk_modulus + (4./3.) * shear_modulus
    b = bulk_modulus - (2./3.) * shear_modulus
    c = 2. * shear_modulus
    return vec6f([a * vector[0] + b * (vector[1] + vector[2]),
                  a * vector[1] + b * (vector[0] + vector[2]),
                  a * vector[2] + b * (vector[0] + vector[1]),
                  c * vector[3], c * vector[4], c * vector[5]])


# ========================== Constitutive Model Kernel ========================== #
@ti.kernel
def kernel_initial_state_variables(to_beg: int, to_end: int, materialID: int, particle: ti.template(), matProps: ti.template(), stateVars: ti.template()):
    for np in range(to_beg, to_end):
        if int(particle[np].materialID) == materialID:
            matProps._initialize_vars(np, particle, stateVars)

@ti.kernel
def kernel_reset_undamaged_stress(particleNum: int, materialID: int, bodyID: int, particle: ti.template(), matProps: ti.template(), stateVars: ti.template()):
    for np in range(particleNum):
        if int(particle[np].materialID) == materialID and int(particle[np].bodyID) == bodyID:
            matProps._reset_undamaged_stress(np, particle, stateVars)
