import numpy as np
import taichi as ti

from geompm.physics_model.constitutive_model.MaterialKernel import calculate_strain_rate, calculate_strain_increment, calculate_vorticity_increment
from geompm.physics_model.constitutive_model.damage.GradyKipp import GradyKippDamage
from geompm.utils.ObjectIO import DictIO
from geompm.utils.VectorFunction import voigt_tensor_trace


@ti.data_oriented
class MaterialModel:
    def __init__(self):
        self.density = 0.
        self.max_sound_speed = 0.
        self.damage = None
        self.is_damage = False

    def check_positive(self, name, value):
        if not value > 0.:
            raise ValueError(f"Material parameter /{name}: {value}/ should be positive")

    def check_non_negative(self, name, value):
        if not value >= 0.:
            raise ValueError(f"Material parameter /{name}: {value}/ should not be negative")

    def check_range(self, name, value, lower, upper):
        if not (lower < value < upper):
            raise ValueError(f"Material parameter /{name}: {value}/ should lie in ({lower}, {upper})")

    def add_material(self, *args, **kwargs):
        raise NotImplementedError

    def print_message(self, materialID):
        print(" Constitutive Model Information ".center(71, '-'))
        print('Constitutive model = Material Model')
        print("Model ID: ", materialID)
        print("Model density = ",  self.density)

    def model_initialize(self, material):
        raise NotImplementedError

    def choose_damage_model(self, material):
        damage = DictIO.GetAlternative(material, "Damage", None)
        if damage is None:
            return
        if isinstance(damage, str):
            damage = {"Model": damage}
        model_type = DictIO.GetAlternative(damage, "Model", "GradyKipp")
        if model_type == "GradyKipp":
            self.damage = GradyKippDamage()
            self.damage.model_initialize(damage, self.max_sound_speed)
            self.is_damage = True
        else:
            raise RuntimeError(f"Keyword:: /Damage: {model_type}/ is invalid. Only ['GradyKipp'] is available")

    def print_damage_message(self):
        if self.is_damage:
            self.damage.print_message()

    def get_state_vars(self):
        state_vars = self.define_state_vars()
        if self.is_damage:
            state_vars.update(self.damage.define_state_vars())
        return state_vars

    def define_state_vars(self):
        raise NotImplementedError

    def get_sound_speed(self, *args):
        raise NotImplementedError

    @ti.func
    def _initialize_vars(self, np, particle, stateVars):
        self._initialize_state(np, particle, stateVars)
        if ti.static(self.is_damage):
            self.damage._initialize_vars(np, particle, stateVars)

    @ti.func
    def _reset_undamaged_stress(self, np, particle, stateVars):
        if ti.static(self.is_damage):
            self.damage.RecoverUndamagedStress(np, particle[np].stress, stateVars)

    @ti.func
    def _initialize_state(self, np, particle, stateVars):
        raise NotImplementedError

    @ti.func
    def update_particle_volume(self, np, velocity_gradient, stateVars, dt):
        raise NotImplementedError

    @ti.func
    def UpdateStress(self, np, previous_stress, velocity_gradient, stateVars, dt):
        raise NotImplementedError

    @ti.func
    def ComputeStress(self,
                      np,                                                     # particle id
                      previous_stress,                                        # stress of the last step
                      velocity_gradient,                                      # velocity gradient
                      stateVars,                                              # state variables
                      dt                                                      # time step
                     ):
        undamaged_stress = previous_stress
        if ti.static(self.is_damage):
            undamaged_stress = stateVars[np].undamaged_stress
        stress = self.UpdateStress(np, undamaged_stress, velocity_gradient, stateVars, dt)
        if ti.static(self.is_damage):
            stateVars[np].undamaged_stress = stress
            stress = self.damage.ComputeDamagedStress(np, stress, calculate_strain_increment(velocity_gradient, dt), stateVars, dt)
        return stress


@ti.data_oriented
class Solid(MaterialModel):
    def __init__(self):
        super().__init__()
        self.young = 0.
        self.poisson = 0.
        self.shear = 0.
        self.bulk = 0.

    def check_elastic_parameter(self, density, young, poisson):
        self.check_positive("Density", density)
        self.check_positive("YoungModulus", young)
        self.check_range("PoissonRatio", poisson, -1., 0.5)

    def calculate_lame_parameter(self, young, poisson):
        shear = 0.5 * young / (1. + poisson)
        bulk = young / (3. * (1 - 2. * poisson))
        return shear, bulk

    def get_sound_speed(self, density, young, poisson):
        return np.where(density > 0, np.sqrt(young * (1 - poisson) / (1 + poisson) / (1 - 2 * poisson) / density), 0.)

    @ti.func
    def update_particle_volume(self, np, velocity_gradient, stateVars, dt):
        return (ti.Matrix.identity(float, 3) + velocity_gradient * dt[None]).determinant()

    @ti.func
    def UpdateStress(self, np, previous_stress, velocity_gradient, stateVars, dt):
        de = calculate_strain_increment(velocity_gradient, dt)
        dw = calculate_vorticity_increment(velocity_gradient, dt)
        return self.core(np, previous_stress, de, dw, stateVars)

    @ti.func
    def core(self, np, previous_stress, de, dw, stateVars):
        raise NotImplementedError


@ti.data_oriented
class Fluid(MaterialModel):
    def __init__(self):
        super().__init__()
        self.modulus = 0.
        self.viscosity = 0.
        self.element_length = 0.
        self.cl = 0.
        self.cq = 0.

    def get_sound_speed(self, density, modulus):
        return np.where(density > 0, np.sqrt(modulus / density), 0.)

    @ti.func
    def update_particle_volume(self, np, velocity_gradient, stateVars, dt):
        delta_jacobian = 1. + dt[None] * velocity_gradient.trace()
        stateVars[np].rho /= delta_jacobian
        return delta_jacobian

    @ti.func
    def thermodynamic_pressure(self, rho, volumetric_strain):
        return -rho * self.modulus / self.density * volumetric_strain

    @ti.func
    def artifical_viscosity(self, np, volumetric_strain_rate, stateVars):
        # VonNeumann J. 1950, A method for the numerical calculation of hydrodynamic shocks. J. Appl. Phys.
        q = 0.
        if volumetric_strain_rate < 0.:
            q = -stateVars[np].rho * self.cl * self.element_length * volumetric_strain_rate + \
                stateVars[np].rho * self.cq * self.element_length * self.element_length * volumetric_strain_rate * volumetric_strain_rate
        return q

    @ti.func
    def fluid_pressure(self, np, stateVars, strain_rate, dt):
        volumetric_strain_rate = voigt_tensor_trace(strain_rate)
        volumetric_strain_increment = volumetric_strain_rate * dt[None]
        pressure = stateVars[np].pressure + self.thermodynamic_pressure(stateVars[np].rho, volumetric_strain_increment)
        artifical_pressure = self.artifical_viscosity(np, volumetric_strain_rate, stateVars)
        stateVars[np].pressure = pressure
        return pressure + artifical_pressure

    @ti.func
    def UpdateStress(self, np, previous_stress, velocity_gradient, stateVars, dt):
        strain_rate = calculate_strain_rate(velocity_gradient)
        return self.core(np, strain_rate, stateVars, dt)

    @ti.func
    def shear_stress(self, strain_rate):
        raise NotImplementedError

    @ti.func
    def core(self, np, strain_rate, stateVars, dt):
        raise NotImplementedError
