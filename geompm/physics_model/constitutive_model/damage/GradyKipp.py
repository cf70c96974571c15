import taichi as ti

from geompm.physics_model.constitutive_model.MaterialKernel import AssembleStress, DeviatoricTensor, SphericalTensor
from geompm.utils.constants import Threshold, ZEROVEC6f
from geompm.utils.ObjectIO import DictIO
from geompm.utils.VectorFunction import voigt_to_tensor


@ti.data_oriented
class GradyKippDamage:
    """
    Grady-Kipp tensile fragmentation model.

    Flaws follow a Weibull distribution ``n = K * strain^M``. A particle starts cracking once its largest
    principal strain exceeds the activation threshold ``(1 / (K * V))^(1/M)``; the crack then grows at
    ``CrackSpeed`` and ``D^(1/3)`` increases by ``c_g * dt / R_s``. The damage variable never decreases.

    The wrapped model integrates ``undamaged_stress``; only the particle stress is degraded by the current damage.
    """
    def __init__(self):
        self.m = 0.
        self.k = 0.
        self.crack_speed = 0.

    def model_initialize(self, damage, sound_speed):
        m = DictIO.GetEssential(damage, 'M')
        k = DictIO.GetEssential(damage, 'K')
        crack_speed = DictIO.GetAlternative(damage, 'CrackSpeed', 0.4 * sound_speed)
        self.add_damage(m, k, crack_speed)

    def add_damage(self, m, k, crack_speed):
        if not m > 0.:
            raise ValueError(f"Damage parameter /M: {m}/ should be positive")
        if not k > 0.:
            raise ValueError(f"Damage parameter /K: {k}/ should be positive")
        if not crack_speed > 0.:
            raise ValueError(f"Damage parameter /CrackSpeed: {crack_speed}/ should be positive")
        self.m = float(m)
        self.k = float(k)
        self.crack_speed = float(crack_speed)

    def print_message(self):
        print(" Damage Model Information ".center(71, '-'))
        print('Damage model: Grady-Kipp')
        print('Weibull modulus M = ', self.m)
        print('Weibull constant K = ', self.k)
        print('Crack speed = ', self.crack_speed, '\n')

    def define_state_vars(self):
        return {'damage': float, 'damage_strain': ti.types.vector(6, float), 'strain_threshold': float, 'crack_radius': float, 'undamaged_stress': ti.types.vector(6, float)}

    @ti.func
    def _initialize_vars(self, np, particle, stateVars):
        stateVars[np].damage = 0.
        stateVars[np].damage_strain = ZEROVEC6f
        stateVars[np].strain_threshold = (1. / (self.k * particle[np].vol0)) ** (1. / self.m)
        stateVars[np].crack_radius = ti.min(particle[np].psize[0], particle[np].psize[1], particle[np].psize[2])
        stateVars[np].undamaged_stress = particle[np].stress

    @ti.func
    def ComputeMaxPrincipalStrain(self, strain):
        eigen_value, _ = ti.sym_eig(voigt_to_tensor(strain))
        return ti.max(eigen_value[0], eigen_value[1], eigen_value[2])

    @ti.func
    def UpdateDamage(self, np, de, stateVars, dt):
        stateVars[np].damage_strain += de
        max_principal_strain = self.ComputeMaxPrincipalStrain(stateVars[np].damage_strain)
        damage = stateVars[np].damage
        if max_principal_strain > stateVars[np].strain_threshold:
            cube_root = damage ** (1. / 3.) + self.crack_speed * dt[None] / stateVars[np].crack_radius
            damage = ti.max(damage, ti.min(cube_root * cube_root * cube_root, 1.))
        stateVars[np].damage = damage
        return damage

    @ti.func
    def ComputeDamagedStress(self, np, stress, de, stateVars, dt):
        damage = self.UpdateDamage(np, de, stateVars, dt)
        sigma = SphericalTensor(stress)
        # cracks cannot carry tension, compression is transmitted through closed cracks
        if sigma > 0.:
            sigma *= 1. - damage
        return AssembleStress(sigma, (1. - damage) * DeviatoricTensor(stress))

    @ti.func
    def RecoverUndamagedStress(self, np, stress, stateVars):
        integrity = 1. - stateVars[np].damage
        sigma = SphericalTensor(stress)
        deviatoric_stress = DeviatoricTensor(stress)
        if integrity > Threshold:
            if sigma > 0.:
                sigma /= integrity
            deviatoric_stress /= integrity
        stateVars[np].undamaged_stress = AssembleStress(sigma, deviatoric_stress)
