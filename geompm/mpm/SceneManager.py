import numpy as np
import taichi as ti

from geompm.mpm.BaseKernel import *
from geompm.mpm.boundaries.BoundaryConstraint import BoundaryConstraints
from geompm.mpm.Contact import MPMContact
from geompm.mpm.elements.HexahedronElement8Nodes import HexahedronElement8Nodes
from geompm.mpm.MaterialManager import MaterialHandle
from geompm.mpm.Simulation import Simulation
from geompm.mpm.structs import Nodes, ParticleCloud
from geompm.utils.constants import Threshold
from geompm.utils.linalg import pad_vector, read_dict_list
from geompm.utils.ObjectIO import DictIO


class myScene(object):
    def __init__(self) -> None:
        self.mass_cut_off = Threshold
        self.particle = None
        self.material = MaterialHandle()
        self.element = None
        self.node = None
        self.boundary = BoundaryConstraints()
        self.contact = None
        self.particleNum = np.zeros(1, dtype=np.int32)

    def activate_particle(self, sims: Simulation):
        if self.particle is None:
            self.particle = ParticleCloud.field()
            ti.root.dense(ti.i, sims.max_particle_num).place(self.particle)
            self.boundary.activate_particle_constraints(sims.max_particle_num)

    def activate_material(self, sims: Simulation, materials):
        read_dict_list(materials, self.material.initialize, sims=sims)

    def activate_element(self, sims: Simulation, element):
        element_type = DictIO.GetAlternative(element, "ElementType", "GIMP")
        if element_type != "GIMP":
            raise RuntimeError(f"Keyword:: /ElementType: {element_type}/ is invalid. Only ['GIMP'] is available")
        if self.element is not None:
            raise RuntimeError("The background grid has already been created")
        self.element = HexahedronElement8Nodes(element_type)
        self.element.create_nodes(sims, DictIO.GetEssential(element, "ElementSize"))
        self.element.element_initialize(sims)
        self.activate_grid(sims)
        self.boundary.activate_nodal_constraints(self.element.gridSum)

    def activate_grid(self, sims: Simulation):
        self.node = Nodes.field()
        ti.root.dense(ti.ij, (self.element.gridSum, sims.max_body_num)).place(self.node)
        self.node.fill(0)
        self.print_grid_message(sims)

    def print_grid_message(self, sims: Simulation):
        self.element.print_message()
        print("The number of body layers = ", sims.max_body_num, '\n')

    def activate_contact(self, sims: Simulation, contact_phys):
        if sims.contact_detection == "MPMContact":
            self.contact = MPMContact(contact_phys)
            self.contact.print_contact_message()
        else:
            self.contact = None

    def check_particle_num(self, sims: Simulation, particle_number):
        if self.particleNum[0] + particle_number > sims.max_particle_num:
            raise ValueError(f"The MPM particles should be set as: {self.particleNum[0] + particle_number}. Check /max_particle_number/ in memory_allocate")

    def get_particle_array(self, sims: Simulation, body, keyword, particle_number, components, default=None, fill=0.):
        value = DictIO.GetAlternative(body, keyword, default)
        if value is None:
            raise KeyError(f"KeyError: {keyword} is not included in the body dictionary!")
        value = np.asarray(value, dtype=float)
        if value.ndim == 0:
            value = np.full((particle_number, sims.dimension if components == 3 else components), float(value))
        if value.ndim == 1:
            value = np.tile(value, (particle_number, 1))
        if components == 3:
            value = pad_vector(value, sims.dimension, fill)
        if value.shape != (particle_number, components):
            raise ValueError(f"Keyword:: /{keyword}/ should have shape ({particle_number}, {components if components != 3 else sims.dimension}), but {value.shape} is given")
        return np.ascontiguousarray(value)

    def get_particle_scalar(self, body, keyword, particle_number, default=None, dtype=float):
        value = DictIO.GetAlternative(body, keyword, default)
        if value is None:
            raise KeyError(f"KeyError: {keyword} is not included in the body dictionary!")
        value = np.asarray(value, dtype=dtype).reshape(-1)
        if value.shape[0] == 1:
            value = np.repeat(value, particle_number)
        if value.shape[0] != particle_number:
            raise ValueError(f"Keyword:: /{keyword}/ should have {particle_number} entries, but {value.shape[0]} is given")
        return np.ascontiguousarray(value)

    def add_body(self, body, sims: Simulation):
        if self.element is None:
            raise RuntimeError("The background grid has not been created. Call add_element first")
        position = np.asarray(DictIO.GetEssential(body, "Position"), dtype=float).reshape(-1, sims.dimension)
        particle_number = position.shape[0]
        self.check_particle_num(sims, particle_number)

        grid_size = self.element.grid_size[0]
        position = self.get_particle_array(sims, body, "Position", particle_number, 3, fill=0.5 * grid_size)
        volume = self.get_particle_scalar(body, "Volume", particle_number)
        if np.any(volume <= 0.):
            raise ValueError("Keyword:: /Volume/ should be positive")
        velocity = self.get_particle_array(sims, body, "Velocity", particle_number, 3, default=[0.] * sims.dimension)
        psize = self.get_particle_array(sims, body, "ParticleSize", particle_number, 3, default=0.5 * volume[0] ** (1. / sims.dimension), fill=0.5 * grid_size)
        stress = self.get_particle_array(sims, body, "Stress", particle_number, 6, default=[0.] * 6)
        bodyID = self.get_particle_scalar(body, "BodyID", particle_number, default=0, dtype=np.int32)
        materialID = self.get_particle_scalar(body, "MaterialID", particle_number, dtype=np.int32)

        if np.any(psize <= 0.) or np.any(psize > 0.5 * grid_size * (1. + 1e-10)):
            raise ValueError(f"Keyword:: /ParticleSize/ is the half width of a particle and should lie in (0, {0.5 * grid_size}]")
        if np.any(bodyID < 0) or np.any(bodyID >= sims.max_body_num):
            raise ValueError(f"Keyword:: /BodyID/ should lie in [0, {sims.max_body_num}). Check /max_body_number/ in memory_allocate")
        extent = np.array(self.element.extent)
        if np.any(position < 0.) or np.any(position > extent):
            raise ValueError(f"Particles should lie inside the grid extent {list(extent)}")

        density = np.zeros(particle_number)
        for matID in np.unique(materialID):
            density[materialID == matID] = self.material.get_material(int(matID)).density
        if DictIO.Contains(body, "Mass"):
            density = self.get_particle_scalar(body, "Mass", particle_number) / volume
            if np.any(density <= 0.):
                raise ValueError("Keyword:: /Mass/ should be positive")

        self.activate_particle(sims)
        self.material.activate_state_variables(sims)
        start_particle = int(self.particleNum[0])
        kernel_add_body_(self.particle, start_particle, particle_number, bodyID, materialID, np.ascontiguousarray(density), volume, psize, position, velocity, stress)
        self.particleNum[0] += particle_number
        self.material.state_vars_initialize(start_particle, int(self.particleNum[0]), self.particle)
        self.calc_mass_cutoff(sims)

        print(" Body Information ".center(71, '-'))
        print("Body ID = ", np.unique(bodyID))
        print("Material ID = ", np.unique(materialID))
        print("Add Particle Number: ", particle_number)
        print("Total Particle Number: ", int(self.particleNum[0]), '\n')

    def calc_mass_cutoff(self, sims: Simulation):
        density = self.material.find_average_density()
        grid_size = self.element.grid_size[0]
        self.mass_cut_off = 1e-8 * density * grid_size ** sims.dimension if density > 0. else Threshold

    def get_critical_timestep(self):
        max_vel = find_max_velocity_(int(self.particleNum[0]), self.particle)
        max_vel += self.material.find_max_sound_speed()
        return self.element.calc_critical_timestep(max_vel)

    def get_total_mass(self, bodyID=-1):
        if self.particle is None:
            return 0.
        return kernel_compute_total_mass(int(self.particleNum[0]), self.particle, bodyID)

    def get_total_momentum(self, bodyID=-1):
        if self.particle is None:
            return np.zeros(3)
        return np.array(kernel_compute_total_momentum(int(self.particleNum[0]), self.particle, bodyID))

    def get_particle_data(self):
        particleNum = int(self.particleNum[0])
        if self.particle is None:
            return {}
        return {
                    "position": np.ascontiguousarray(self.particle.x.to_numpy()[0:particleNum]),
                    "velocity": np.ascontiguousarray(self.particle.v.to_numpy()[0:particleNum]),
                    "stress": np.ascontiguousarray(self.particle.stress.to_numpy()[0:particleNum]),
                    "strain": np.ascontiguousarray(self.particle.strain.to_numpy()[0:particleNum]),
                    "mass": np.ascontiguousarray(self.particle.m.to_numpy()[0:particleNum]),
                    "volume": np.ascontiguousarray(self.particle.vol.to_numpy()[0:particleNum]),
                    "psize": np.ascontiguousarray(self.particle.psize.to_numpy()[0:particleNum]),
                    "bodyID": np.ascontiguousarray(self.particle.bodyID.to_numpy()[0:particleNum]),
                    "materialID": np.ascontiguousarray(self.particle.materialID.to_numpy()[0:particleNum]),
                    "state_vars": self.material.get_state_vars_dict(0, particleNum)
               }

    def update_particle_properties(self, sims: Simulation, override, property_name, value, bodyID):
        print(" Modify Body Information ".center(71, '-'))
        print("Target BodyID =", bodyID)
        print("Target Property =", property_name)
        print("Target Value =", value)
        print("Override =", override, '\n')

        factor = 1 if not override else 0
        if property_name == "velocity":
            velocity = pad_vector(value, sims.dimension)
            if velocity.shape != (3,):
                raise ValueError(f"Keyword:: /velocity/ should have {sims.dimension} components, but {value} is given")
            modify_particle_velocity(factor, velocity, int(self.particleNum[0]), self.particle, bodyID)
        elif property_name == "stress":
            stress = np.asarray(value, dtype=float)
            if stress.shape != (6,):
                raise ValueError(f"Keyword:: /stress/ should have 6 components, but {value} is given")
            modify_particle_stress(factor, stress, int(self.particleNum[0]), self.particle, bodyID)
            self.material.reset_undamaged_stress(int(self.particleNum[0]), self.particle, bodyID)
        else:
            valid_list = ["velocity", "stress"]
            raise KeyError(f"Invalid property_name: {property_name}! Only the following keywords is valid: {valid_list}")
