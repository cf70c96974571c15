import taichi as ti

from geompm.physics_model.constitutive_model.MaterialKernel import ElasticTensorMultiplyVector, Sigrot
from geompm.physics_model.constitutive_model.MaterialModel import Solid
from geompm.physics_model.constitutive_model.SoftenModel import LinearSoft, ExponentialSoft
from geompm.utils.ObjectIO import DictIO


@ti.data_oriented
class ElasticMaterial(Solid):
    def __init__(self):
        super().__init__()

    @ti.func
    def ComputeSigrotStress(self, dw, stress):
        return Sigrot(stress, dw)

    @ti.func
    def ComputeElasticStressIncrement(self, de):
        return ElasticTensorMultiplyVector(de, self.bulk, self.shear)

    @ti.func
    def ComputeTrialStress(self, previous_stress, de, dw):
        # Jaumann rotation of the previous stress followed by the elastic predictor
        return previous_stress + self.ComputeSigrotStress(dw, previous_stress) + self.ComputeElasticStressIncrement(de)


@ti.data_oriented
class PlasticMaterial(ElasticMaterial):
    def __init__(self):
        super().__init__()
        self.soft_function = None
        self.is_soft = False
        self.soft_param = 1.

    def choose_soft_function(self, material):
        soft_type = DictIO.GetAlternative(material, "SoftType", None)
        if soft_type == "Linear":
            self.soft_param = DictIO.GetAlternative(material, 'SoftenParameter', 1.)
            self.soft_function = LinearSoft()
            self.is_soft = True
        elif soft_type == "Exponential":
            self.soft_param = DictIO.GetAlternative(material, 'SoftenParameter', 5.)
            self.check_positive("SoftenParameter", self.soft_param)
            self.soft_function = ExponentialSoft()
            self.is_soft = True
        elif soft_type is not None:
            raise RuntimeError(f"Keyword:: /SoftType: {soft_type}/ is invalid. Only ['Linear', 'Exponential'] is available")
