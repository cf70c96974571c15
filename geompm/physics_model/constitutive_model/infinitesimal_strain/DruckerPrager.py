import numpy as np
import taichi as ti

from geompm.physics_model.constitutive_model.MaterialKernel import (AssembleStress, ComputeStressInvariantJ2, DeviatoricTensor, SphericalTensor,
                                                                      VonMisesStress)
from geompm.physics_model.constitutive_model.infinitesimal_strain.ElasPlasticity import PlasticMaterial
from geompm.utils.constants import PI, SQRT3, Threshold
from geompm.utils.ObjectIO import DictIO


@ti.data_oriented
class DruckerPragerModel(PlasticMaterial):
    """
    Elastic Drucker-Prager model with a tension cutoff and non-associated flow.

    The shear yield function reads ``f = sqrt(J2) + q_fai * sigma - k_fai`` where ``sigma`` is the
    mean stress (tension positive). The plastic potential replaces ``q_fai`` by ``q_psi``.
    Cohesion, friction and dilation may soften with the accumulated plastic deviatoric strain.
    """
    def __init__(self):
        super().__init__()
        self.c_peak = 0.
        self.fai_peak = 0.
        self.psi_peak = 0.
        self.c_residual = 0.
        self.fai_residual = 0.
        self.psi_residual = 0.
        self.pdstrain_peak = 0.
        self.pdstrain_residual = 0.
        self.q_fai = 0.
        self.k_fai = 0.
        self.q_psi = 0.
        self.tensile_input = 0.
        self.tensile = 0.
        self.yield_surface_type = 1

    def model_initialize(self, material):
        density = DictIO.GetAlternative(material, 'Density', 2650)
        young = DictIO.GetEssential(material, 'YoungModulus')
        poisson = DictIO.GetAlternative(material, 'PoissonRatio', 0.3)
        c_peak = DictIO.GetAlternative(material, 'Cohesion', 0.)
        fai_peak = DictIO.GetEssential(material, 'Friction')
        psi_peak = DictIO.GetAlternative(material, 'Dilation', 0.)
        c_residual = DictIO.GetAlternative(material, 'ResidualCohesion', c_peak)
        fai_residual = DictIO.GetAlternative(material, 'ResidualFriction', fai_peak)
        psi_residual = DictIO.GetAlternative(material, 'ResidualDilation', psi_peak)
        pdstrain_peak = DictIO.GetAlternative(material, 'PlasticDevStrain', 0.)
        pdstrain_residual = DictIO.GetAlternative(material, 'ResidualPlasticDevStrain', 0.)
        tensile = DictIO.GetAlternative(material, 'Tensile', 1e22)
        dpType = DictIO.GetAlternative(material, 'dpType', "MiddleCircumscribed")
        self.choose_soft_function(material)
        self.add_material(density, young, poisson, c_peak, fai_peak, psi_peak, c_residual, fai_residual, psi_residual, pdstrain_peak, pdstrain_residual, tensile, dpType)
        self.choose_damage_model(material)

    def check_strength_parameter(self, name, cohesion, friction, dilation):
        self.check_non_negative(f"{name}Cohesion", cohesion)
        if not 0. <= friction < 90.:
            raise ValueError(f"Material parameter /{name}Friction: {friction}/ should lie in [0, 90) degrees")
        if not 0. <= dilation < 90.:
            raise ValueError(f"Material parameter /{name}Dilation: {dilation}/ should lie in [0, 90) degrees")

    def add_material(self, density, young, poisson, c_peak, fai_peak, psi_peak, c_residual, fai_residual, psi_residual, pdstrain_peak, pdstrain_residual, tensile, dpType="MiddleCircumscribed"):
        self.check_elastic_parameter(density, young, poisson)
        self.check_strength_parameter("", c_peak, fai_peak, psi_peak)
        self.check_strength_parameter("Residual", c_residual, fai_residual, psi_residual)
        self.check_non_negative("Tensile", tensile)
        self.check_non_negative("PlasticDevStrain", pdstrain_peak)
        if self.is_soft and pdstrain_residual < pdstrain_peak:
            raise ValueError(f"Material parameter /ResidualPlasticDevStrain: {pdstrain_residual}/ should not be smaller than /PlasticDevStrain: {pdstrain_peak}/")

        yield_surface_type = {"Circumscribed": 0, "MiddleCircumscribed": 1, "Inscribed": 2}
        if dpType not in yield_surface_type:
            raise RuntimeError(f"Keyword:: /dpType: {dpType}/ is invalid. The valid type are given as follows: {list(yield_surface_type.keys())}")
        self.yield_surface_type = yield_surface_type[dpType]

        self.density = density
        self.young = young
        self.poisson = poisson
        self.c_peak = c_peak
        self.fai_peak = max(1e-6, fai_peak * PI / 180.)
        self.psi_peak = psi_peak * PI / 180.
        self.c_residual = c_residual
        self.fai_residual = max(1e-6, fai_residual * PI / 180.)
        self.psi_residual = psi_residual * PI / 180.
        self.pdstrain_peak = pdstrain_peak
        self.pdstrain_residual = pdstrain_residual
        self.tensile_input = tensile
        self.shear, self.bulk = self.calculate_lame_parameter(self.young, self.poisson)
        self.q_fai, self.k_fai, self.q_psi, self.tensile = self.choose_yield_surface_type(self.c_peak, self.fai_peak, self.psi_peak, tensile)
        self.max_sound_speed = float(self.get_sound_speed(self.density, self.young, self.poisson))

    def choose_yield_surface_type(self, c, fai, psi, tensile):
        if self.yield_surface_type == 0:
            q_fai = 6. * np.sin(fai) / (np.sqrt(3) * (3 - np.sin(fai)))
            k_fai = 6. * np.cos(fai) * c / (np.sqrt(3) * (3 - np.sin(fai)))
            q_psi = 6. * np.sin(psi) / (np.sqrt(3) * (3 - np.sin(psi)))
        elif self.yield_surface_type == 1:
            q_fai = 6. * np.sin(fai) / (np.sqrt(3) * (3 + np.sin(fai)))
            k_fai = 6. * np.cos(fai) * c / (np.sqrt(3) * (3 + np.sin(fai)))
            q_psi = 6. * np.sin(psi) / (np.sqrt(3) * (3 + np.sin(psi)))
        else:
            q_fai = 3. * np.tan(fai) / np.sqrt(9. + 12 * np.tan(fai) ** 2)
            k_fai = 3. * c / np.sqrt(9. + 12 * np.tan(fai) ** 2)
            q_psi = 3. * np.tan(psi) / np.sqrt(9. + 12 * np.tan(psi) ** 2)
        if fai > 0.:
            tensile = min(tensile, k_fai / q_fai)
        tensile = max(tensile, 1e-15)
        return float(q_fai), float(k_fai), float(q_psi), float(tensile)

    def print_message(self, materialID):
        print(" Constitutive Model Information ".center(71, '-'))
        print('Constitutive model: Drucker-Prager Model')
        print("Model ID: ", materialID)
        print('Density: ', self.density)
        print('Young Modulus: ', self.young)
        print('Poisson Ratio: ', self.poisson)
        if self.is_soft:
            print('Peak Cohesion Coefficient = ', self.c_peak)
            print('Peak Internal Friction (in radian) = ', self.fai_peak)
            print('Peak Dilatation (in radian) = ', self.psi_peak)
            print('Residual Cohesion Coefficient = ', self.c_residual)
            print('Residual Internal Friction (in radian) = ', self.fai_residual)
            print('Residual Dilatation (in radian) = ', self.psi_residual)
            print('Peak Plastic Deviartoric Strain = ', self.pdstrain_peak)
            print('Residual Plastic Deviartoric Strain = ', self.pdstrain_residual)
        else:
            print('Cohesion Coefficient = ', self.c_peak)
            print('Internal Friction (in radian) = ', self.fai_peak)
            print('Dilatation (in radian) = ', self.psi_peak)
        print('Tensile = ', self.tensile)
        yield_surface_type = {0: "Circumscribed", 1: "MiddleCircumscribed", 2: "Inscribed"}
        print('Yield Surface Type: ', yield_surface_type.get(self.yield_surface_type), '\n')
        self.print_damage_message()

    def define_state_vars(self):
        return {'estress': float, 'epdstrain': float}

    @ti.func
    def _initialize_state(self, np, particle, stateVars):
        stateVars[np].estress = VonMisesStress(particle[np].stress)
        stateVars[np].epdstrain = 0.

    # ==================================================== Drucker-Parger Model ==================================================== #
    @ti.func
    def ComputeYieldParameter(self, c, fai, psi):
        q_fai, k_fai, q_psi = 0., 0., 0.
        if ti.static(self.yield_surface_type == 0):
            q_fai = 6. * ti.sin(fai) / (SQRT3 * (3. - ti.sin(fai)))
            k_fai = 6. * ti.cos(fai) * c / (SQRT3 * (3. - ti.sin(fai)))
            q_psi = 6. * ti.sin(psi) / (SQRT3 * (3. - ti.sin(psi)))
        elif ti.static(self.yield_surface_type == 1):
            q_fai = 6. * ti.sin(fai) / (SQRT3 * (3. + ti.sin(fai)))
            k_fai = 6. * ti.cos(fai) * c / (SQRT3 * (3. + ti.sin(fai)))
            q_psi = 6. * ti.sin(psi) / (SQRT3 * (3. + ti.sin(psi)))
        else:
            q_fai = 3. * ti.tan(fai) / ti.sqrt(9. + 12. * ti.tan(fai) ** 2)
            k_fai = 3. * c / ti.sqrt(9. + 12. * ti.tan(fai) ** 2)
            q_psi = 3. * ti.tan(psi) / ti.sqrt(9. + 12. * ti.tan(psi) ** 2)
        tensile = ti.max(ti.min(self.tensile_input, k_fai / q_fai), 1e-15)
        return q_fai, k_fai, q_psi, tensile

    @ti.func
    def GetMaterialParameter(self, epdstrain):
        q_fai, k_fai, q_psi, tensile = self.q_fai, self.k_fai, self.q_psi, self.tensile
        if ti.static(self.is_soft):
            c = self.soft_function.soft(self.soft_param, self.c_peak, self.c_residual, self.pdstrain_peak, self.pdstrain_residual, epdstrain)
            fai = self.soft_function.soft(self.soft_param, self.fai_peak, self.fai_residual, self.pdstrain_peak, self.pdstrain_residual, epdstrain)
            psi = self.soft_function.soft(self.soft_param, self.psi_peak, self.psi_residual, self.pdstrain_peak, self.pdstrain_residual, epdstrain)
            q_fai, k_fai, q_psi, tensile = self.ComputeYieldParameter(c, fai, psi)
        return q_fai, k_fai, q_psi, tensile

    @ti.func
    def ComputeShearFunction(self, sigma, J2sqrt, q_fai, k_fai):
        return J2sqrt + q_fai * sigma - k_fai

    @ti.func
    def ComputeTensileFunction(self, sigma, tensile):
        return sigma - tensile

    @ti.func
    def core(self, np, previous_stress, de, dw, stateVars):
        trial_stress = self.ComputeTrialStress(previous_stress, de, dw)
        q_fai, k_fai, q_psi, tensile = self.GetMaterialParameter(stateVars[np].epdstrain)

        sigma = SphericalTensor(trial_stress)
        deviatoric_stress = DeviatoricTensor(trial_stress)
        J2sqrt = ti.sqrt(ComputeStressInvariantJ2(trial_stress))
        yield_shear = self.ComputeShearFunction(sigma, J2sqrt, q_fai, k_fai)
        yield_tensile = self.ComputeTensileFunction(sigma, tensile)

        updated_stress = trial_stress
        if yield_shear > 0. or yield_tensile > 0.:
            alphap = ti.sqrt(1. + q_fai * q_fai) - q_fai
            J2sqrtp = k_fai - q_fai * tensile
            dp_hfai = J2sqrt - J2sqrtp - alphap * yield_tensile
            updated_sigma = tensile
            if yield_tensile <= 0. or dp_hfai > 0.:
                dlambda = yield_shear / (self.shear + self.bulk * q_fai * q_psi)
                updated_sigma = ti.min(sigma - self.bulk * q_psi * dlambda, tensile)
            # the tension cutoff fixes the mean stress, the shear surface caps the deviator
            updated_J2sqrt = ti.min(J2sqrt, ti.max(k_fai - q_fai * updated_sigma, 0.))
            ratio = 1.
            if J2sqrt > Threshold:
                ratio = updated_J2sqrt / J2sqrt
            updated_stress = AssembleStress(updated_sigma, deviatoric_stress * ratio)
            stateVars[np].epdstrain += (J2sqrt - updated_J2sqrt) / (SQRT3 * self.shear)
        stateVars[np].estress = VonMisesStress(updated_stress)
        return updated_stress
