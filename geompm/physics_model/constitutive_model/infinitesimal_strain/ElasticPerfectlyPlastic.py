import taichi as ti

from geompm.physics_model.constitutive_model.MaterialKernel import (AssembleStress, DeviatoricTensor, EquivalentDeviatoricStress, SphericalTensor,
                                                                      VonMisesStress)
from geompm.physics_model.constitutive_model.infinitesimal_strain.ElasPlasticity import PlasticMaterial
from geompm.utils.ObjectIO import DictIO


@ti.data_oriented
class ElasticPerfectlyPlasticModel(PlasticMaterial):
    def __init__(self):
        super().__init__()
        self._yield = 0.

    def model_initialize(self, material):
        density = DictIO.GetAlternative(material, 'Density', 2650)
        young = DictIO.GetEssential(material, 'YoungModulus')
        poisson = DictIO.GetAlternative(material, 'PoissonRatio', 0.3)
        _yield = DictIO.GetEssential(material, 'YieldStress')
        self.add_material(density, young, poisson, _yield)
        self.choose_damage_model(material)

    def add_material(self, density, young, poisson, yield_stress):
        self.check_elastic_parameter(density, young, poisson)
        self.check_positive("YieldStress", yield_stress)
        self.density = density
        self.young = young
        self.poisson = poisson
        self.shear, self.bulk = self.calculate_lame_parameter(self.young, self.poisson)
        self._yield = yield_stress
        self.max_sound_speed = float(self.get_sound_speed(self.density, self.young, self.poisson))

    def print_message(self, materialID):
        print(" Constitutive Model Information ".center(71, '-'))
        print('Constitutive model: Elastic Perfectly Plastic Model')
        print("Model ID: ", materialID)
        print('Density: ', self.density)
        print('Young Modulus: ', self.young)
        print('Poisson Ratio: ', self.poisson)
        print('Yield Stress: ', self._yield, '\n')
        self.print_damage_message()

    def define_state_vars(self):
        return {'estress': float, 'epstrain': float}

    @ti.func
    def _initialize_state(self, np, particle, stateVars):
        stateVars[np].estress = VonMisesStress(particle[np].stress)
        stateVars[np].epstrain = 0.

    # ==================================================== von Mises return mapping ==================================================== #
    @ti.func
    def ComputeShearFunction(self, seqv):
        return seqv - self._yield

    @ti.func
    def core(self, np, previous_stress, de, dw, stateVars):
        trial_stress = self.ComputeTrialStress(previous_stress, de, dw)
        seqv = EquivalentDeviatoricStress(trial_stress)
        updated_stress = trial_stress
        if self.ComputeShearFunction(seqv) > 0.:
            # radial return keeps the direction of the deviatoric stress
            sigma = SphericalTensor(trial_stress)
            deviatoric_stress = DeviatoricTensor(trial_stress) * (self._yield / seqv)
            updated_stress = AssembleStress(sigma, deviatoric_stress)
            stateVars[np].epstrain += (seqv - self._yield) / (3. * self.shear)
        stateVars[np].estress = VonMisesStress(updated_stress)
        return updated_stress
