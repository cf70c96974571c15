import numpy as np
import taichi as ti

from geompm.mpm.Simulation import Simulation
from geompm.physics_model.constitutive_model.MaterialKernel import kernel_initial_state_variables, kernel_reset_undamaged_stress
from geompm.utils.ObjectIO import DictIO


class MaterialHandle(object):
    """
    Keeps one constitutive model per material id (ids start at 1) and the per-particle
    state-variable record shared by every material.
    """
    def __init__(self) -> None:
        self.matProps = [None]
        self.stateDict = dict()
        self.stateVars = None

    def check_materialID(self, materialID, max_material_num):
        if int(materialID) != materialID or materialID <= 0:
            raise ValueError(f"MaterialID {materialID} should be a positive integer")
        if materialID >= max_material_num:
            raise ValueError(f"MaterialID {materialID} exceeds the allocated material number {max_material_num - 1}. Check /max_material_number/ in memory_allocate")
        if materialID < len(self.matProps) and self.matProps[materialID] is not None:
            print(f"Warning: Material {materialID} Property will be overwritten!")

    def material_handle(self, constitutive_model):
        from geompm.physics_model.constitutive_model.infinitesimal_strain.LinearElastic import LinearElasticModel
        from geompm.physics_model.constitutive_model.infinitesimal_strain.ElasticPerfectlyPlastic import ElasticPerfectlyPlasticModel
        from geompm.physics_model.constitutive_model.infinitesimal_strain.DruckerPrager import DruckerPragerModel
        from geompm.physics_model.constitutive_model.strain_rate.Newtonian import NewtonianModel

        model_type = {"LinearElastic": LinearElasticModel, "ElasticPerfectlyPlastic": ElasticPerfectlyPlasticModel,
                      "DruckerPrager": DruckerPragerModel, "Newtonian": NewtonianModel}
        if constitutive_model not in model_type:
            raise RuntimeError(f'Constitutive Model: {constitutive_model} error! Only the following is aviliable:\n{list(model_type.keys())}')
        return model_type[constitutive_model]()

    def initialize(self, parameter, sims: Simulation):
        materialID = DictIO.GetEssential(parameter, 'MaterialID')
        constitutive_model = DictIO.GetEssential(parameter, 'Type', 'ConstitutiveModel')
        self.check_materialID(materialID, sims.max_material_num)
        material_struct = self.material_handle(constitutive_model)
        material_struct.model_initialize(parameter)

        state_vars = material_struct.get_state_vars()
        if self.stateVars is not None and not set(state_vars).issubset(self.stateDict):
            raise RuntimeError(f"Material {materialID} requires state variables {list(state_vars.keys())} that were not allocated. Add every material before the first body")
        self.stateDict.update(state_vars)
        material_struct.print_message(materialID)

        while len(self.matProps) <= materialID:
            self.matProps.append(None)
        self.matProps[materialID] = material_struct

    def get_material(self, materialID):
        if materialID <= 0 or materialID >= len(self.matProps) or self.matProps[materialID] is None:
            raise ValueError(f"MaterialID {materialID} has not been defined. Call add_material first")
        return self.matProps[materialID]

    def get_materialID(self):
        return [materialID for materialID in range(1, len(self.matProps)) if self.matProps[materialID] is not None]

    def activate_state_variables(self, sims: Simulation):
        if self.stateVars is None:
            if not self.stateDict:
                raise RuntimeError("No material has been defined. Call add_material first")
            self.stateVars = ti.Struct.field(self.stateDict, shape=sims.max_particle_num)

    def state_vars_initialize(self, start_particle, end_particle, particle):
        for materialID in self.get_materialID():
            kernel_initial_state_variables(start_particle, end_particle, materialID, particle, self.matProps[materialID], self.stateVars)

    def reset_undamaged_stress(self, particleNum, particle, bodyID):
        for materialID in self.get_materialID():
            if self.matProps[materialID].is_damage:
                kernel_reset_undamaged_stress(particleNum, materialID, bodyID, particle, self.matProps[materialID], self.stateVars)

    def find_max_sound_speed(self):
        max_sound_speed = 0.
        for materialID in self.get_materialID():
            max_sound_speed = max(max_sound_speed, self.matProps[materialID].max_sound_speed)
        return max_sound_speed

    def find_average_density(self):
        densities = [self.matProps[materialID].density for materialID in self.get_materialID()]
        return sum(densities) / len(densities) if densities else 0.

    def get_state_vars_dict(self, start_particle, end_particle):
        state_vars = {}
        if self.stateVars is None:
            return state_vars
        for key in self.stateDict.keys():
            state_vars[key] = np.ascontiguousarray(getattr(self.stateVars, key).to_numpy()[start_particle:end_particle])
        return state_vars
