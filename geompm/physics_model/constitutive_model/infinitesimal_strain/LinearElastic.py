import taichi as ti

from geompm.physics_model.constitutive_model.MaterialKernel import VonMisesStress
from geompm.physics_model.constitutive_model.infinitesimal_strain.ElasPlasticity import ElasticMaterial
from geompm.utils.ObjectIO import DictIO


@ti.data_oriented
class LinearElasticModel(ElasticMaterial):
    def __init__(self):
        super().__init__()

    def model_initialize(self, material):
        density = DictIO.GetAlternative(material, 'Density', 2650)
        young = DictIO.GetEssential(material, 'YoungModulus')
        poisson = DictIO.GetAlternative(material, 'PoissonRatio', 0.3)
        self.add_material(density, young, poisson)
        self.choose_damage_model(material)

    def add_material(self, density, young, poisson):
        self.check_elastic_parameter(density, young, poisson)
        self.density = density
        self.young = young
        self.poisson = poisson

        self.shear, self.bulk = self.calculate_lame_parameter(self.young, self.poisson)
        self.max_sound_speed = float(self.get_sound_speed(self.density, self.young, self.poisson))

    def print_message(self, materialID):
        print(" Constitutive Model Information ".center(71, '-'))
        print('Constitutive model: Elastic Model')
        print("Model ID: ", materialID)
        print('Density: ', self.density)
        print('Young Modulus: ', self.young)
        print('Poisson Ratio: ', self.poisson, '\n')
        self.print_damage_message()

    def define_state_vars(self):
        return {'estress': float}

    @ti.func
    def _initialize_state(self, np, particle, stateVars):
        stateVars[np].estress = VonMisesStress(particle[np].stress)

    # ==================================================== Linear elastic Model ==================================================== #
    @ti.func
    def core(self, np, previous_stress, de, dw, stateVars):
        current_stress = self.ComputeTrialStress(previous_stress, de, dw)
        stateVars[np].estress = VonMisesStress(current_stress)
        return current_stress
