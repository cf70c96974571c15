import numpy as np

from geompm.mpm.engines.EngineKernel import *
from geompm.mpm.SceneManager import myScene
from geompm.mpm.Simulation import Simulation
from geompm.utils.constants import VELOCITY, FORCE, STRESS
from geompm.utils.linalg import no_operation


class Engine(object):
    def __init__(self, sims: Simulation) -> None:
        self.compute = None
        self.compute_stress_strains = None
        self.apply_nodal_force_constraints = None
        self.apply_velocity_constraints = None
        self.set_velocity_constraints = None
        self.apply_particle_stress_constraints = None

        self.pre_contact_calculate = None
        self.compute_contact_force_ = None
        self.apply_contact_velocity_constraints = None
        self.manage_function(sims)

    def choose_engine(self, sims: Simulation):
        if sims.mapping == "USL":
            self.compute = self.usl_updating
        elif sims.mapping == "USF":
            self.compute = self.usf_updating
        elif sims.mapping == "MUSL":
            self.compute = self.musl_updating
        else:
            raise ValueError(f"The mapping scheme {sims.mapping} is not supported yet")

    def choose_boundary_constraints(self, sims: Simulation, scene: myScene):
        self.apply_nodal_force_constraints = no_operation
        self.apply_velocity_constraints = no_operation
        self.set_velocity_constraints = no_operation
        self.apply_contact_velocity_constraints = no_operation
        self.apply_particle_stress_constraints = no_operation

        if scene.boundary.has_nodal_constraint(VELOCITY):
            self.apply_velocity_constraints = self.velocity_constraints
            self.set_velocity_constraints = self.postmapping_velocity_constraints
            if sims.contact_detection:
                self.apply_contact_velocity_constraints = self.velocity_constraints
        if scene.boundary.has_nodal_constraint(FORCE):
            self.apply_nodal_force_constraints = self.nodal_force_constraints
        if scene.boundary.has_particle_constraint(STRESS):
            self.apply_particle_stress_constraints = self.particle_stress_constraints

    def manage_function(self, sims: Simulation):
        self.pre_contact_calculate = no_operation
        self.compute_contact_force_ = no_operation
        self.compute_stress_strains = self.compute_stress_strain
        if sims.contact_detection:
            if sims.contact_detection == "MPMContact":
                self.pre_contact_calculate = self.calculate_precontact
                self.compute_contact_force_ = self.compute_contact_force
            else:
                raise RuntimeError("Wrong contact type!")
        self.choose_engine(sims)

    def reset_grid_message(self, scene: myScene):
        grid_reset(scene.node)

    def calculate_interpolations(self, sims: Simulation, scene: myScene):
        scene.element.calculate(int(scene.particleNum[0]), scene.particle)

    def compute_nodal_kinematics(self, sims: Simulation, scene: myScene):
        kernel_mass_momentum_p2g(scene.element.grid_nodes, int(scene.particleNum[0]), scene.node, scene.particle, scene.element.LnID, scene.element.shape_fn, scene.element.node_size)

    def check_particle_health(self, sims: Simulation, scene: myScene):
        """
        Returns [non-finite kinematics, non-finite stress, mass underflow, first failing particle].
        The last entry is -1 when every particle is healthy.
        """
        particleNum = int(scene.particleNum[0])
        report = np.zeros(4, dtype=np.int32)
        report[3] = np.iinfo(np.int32).max
        kernel_check_particle_health(scene.element.grid_nodes, scene.mass_cut_off, particleNum, scene.node, scene.particle, scene.element.LnID, scene.element.node_size, report)
        if report[3] == np.iinfo(np.int32).max:
            report[3] = -1
        return report

    def calculate_precontact(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def compute_contact_force(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def compute_grid_velcity(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def compute_force(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def compute_grid_kinematic(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def compute_particle_kinematic(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def compute_velocity_gradient(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def compute_stress_strain(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def postmapping_grid_velocity(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def nodal_force_constraints(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def velocity_constraints(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def postmapping_velocity_constraints(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def particle_stress_constraints(self, sims: Simulation, scene: myScene):
        raise NotImplementedError

    def usl_updating(self, sims, scene):
        raise NotImplementedError

    def usf_updating(self, sims, scene):
        raise NotImplementedError

    def musl_updating(self, sims, scene):
        raise NotImplementedError
