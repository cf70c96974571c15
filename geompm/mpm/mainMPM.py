import numpy as np
from taichi.lang.impl import current_cfg

from geompm.mpm.engines.ULExplicitEngine import ULExplicitEngine
from geompm.mpm.MPMBase import Solver
from geompm.mpm.SceneManager import myScene
from geompm.mpm.Simulation import Simulation
from geompm.utils.linalg import read_dict_list
from geompm.utils.ObjectIO import DictIO


class MPM(object):
    def __init__(self, title='An explicit Material Point Method solver for solids and fluids', log=True):
        if log:
            print('# =================================================================== #')
            print('#', "".center(67), '#')
            print('#', "Welcome to GeoMPM -- Material Point Method Engine !".center(67), '#')
            print('#', "".center(67), '#')
            print('#', title.center(67), '#')
            print('#', "".center(67), '#')
            print('# =================================================================== #', '\n')
        self.sims = Simulation()
        self.scene = myScene()
        self.enginer = None
        self.solver = None
        self.is_configured = False
        self.is_allocated = False

    def set_configuration(self, log=True, **kwargs):
        if self.scene.element is not None:
            raise RuntimeError("The configuration cannot be changed after the background grid has been created")
        if self.is_configured:
            print("Warning: Simulation configuration will be override!")
        self.sims.set_dimension(DictIO.GetAlternative(kwargs, "dimension", 3))
        self.sims.set_domain(DictIO.GetEssential(kwargs, "domain"))
        self.sims.set_boundary(DictIO.GetAlternative(kwargs, "boundary", "Auto"))
        self.sims.set_gravity(DictIO.GetAlternative(kwargs, "gravity", [0., 0., -9.8] if self.sims.dimension == 3 else [0., -9.8]))
        self.sims.set_background_damping(DictIO.GetAlternative(kwargs, "background_damping", 0.))
        self.sims.set_alpha(DictIO.GetAlternative(kwargs, "alphaPIC", 0.))
        if DictIO.Contains(kwargs, "velocity_projection"):
            self.sims.set_velocity_projection_scheme(DictIO.GetEssential(kwargs, "velocity_projection"))
        self.sims.set_mapping_scheme(DictIO.GetAlternative(kwargs, "mapping", "USL"))
        self.sims.set_check_interval(DictIO.GetAlternative(kwargs, "check_interval", 1))
        self.is_configured = True
        if log:
            self.print_basic_simulation_info()
            print('\n')

    def set_solver(self, solver, log=True):
        self.sims.set_timestep(DictIO.GetEssential(solver, "Timestep"))
        self.sims.set_simulation_time(DictIO.GetEssential(solver, "SimulationTime"))
        self.sims.set_CFL(DictIO.GetAlternative(solver, "CFL", 0.5))
        self.sims.set_adaptive_timestep(DictIO.GetAlternative(solver, "AdaptiveTimestep", False))
        self.sims.set_save_interval(DictIO.GetAlternative(solver, "SaveInterval", self.sims.time / 20. if self.sims.time > 0. else 1e6))
        if log:
            self.print_solver_info()
            print('\n')

    def memory_allocate(self, memory, log=True):
        if self.is_allocated:
            raise RuntimeError("Memory has already been allocated")
        self.sims.set_material_num(DictIO.GetEssential(memory, "max_material_number"))
        self.sims.set_particle_num(DictIO.GetEssential(memory, "max_particle_number"))
        self.sims.set_body_num(DictIO.GetAlternative(memory, "max_body_number", 1))
        self.is_allocated = True
        if log:
            self.print_simulation_info()
            print('\n')

    def print_basic_simulation_info(self):
        print(" MPM Basic Configuration ".center(71,"-"))
        print(("Simulation Type: " + str(current_cfg().arch)).ljust(67))
        print(("Dimension: " + str(self.sims.dimension)).ljust(67))
        print(("Simulation Domain: " + str(self.sims.domain)).ljust(67))
        print(("Boundary Condition: " + str(self.sims.boundary[0:self.sims.dimension])).ljust(67))
        print(("Gravity: " + str(self.sims.gravity)).ljust(67))
        print(("Background Damping: " + str(self.sims.background_damping)).ljust(67))
        print(("alpha Value: " + str(self.sims.alphaPIC)).ljust(67))
        print(("Mapping Scheme: " + str(self.sims.mapping)).ljust(67))

    def print_simulation_info(self):
        print(" MPM Memory Information ".center(71,"-"))
        print(("Max Material Number: " + str(self.sims.max_material_num - 1)).ljust(67))
        print(("Max Particle Number: " + str(self.sims.max_particle_num)).ljust(67))
        print(("Max Body Number: " + str(self.sims.max_body_num)).ljust(67))

    def print_solver_info(self):
        print(" MPM Solver Information ".center(71,"-"))
        print(("Initial Simulation Time: " + str(self.sims.current_time)).ljust(67))
        print(("Finial Simulation Time: " + str(self.sims.current_time + self.sims.time)).ljust(67))
        print(("Time Step: " + str(self.sims.dt[None])).ljust(67))
        print(("CFL Number: " + str(self.sims.CFL)).ljust(67))
        print(("Adaptive Time Step: " + str(self.sims.isadaptive)).ljust(67))
        print(("Save Interval: " + str(self.sims.save_interval)).ljust(67))

    def check_allocation(self):
        if not self.is_configured:
            raise RuntimeError("Call set_configuration first")
        if not self.is_allocated:
            raise RuntimeError("Call memory_allocate first")

    def add_material(self, material):
        self.check_allocation()
        if self.scene.particle is not None and int(self.scene.particleNum[0]) > 0:
            print("Warning: Materials added after the first body only apply to particles added afterwards")
        self.scene.activate_material(self.sims, material)

    def add_element(self, element):
        self.check_allocation()
        self.scene.activate_element(self.sims, element)

    def add_contact(self, contact):
        contact_type = DictIO.GetAlternative(contact, "ContactType", None)
        if contact_type == "None":
            contact_type = None
        self.sims.set_contact_detection(contact_type)
        self.scene.activate_contact(self.sims, contact)
        if self.enginer is not None:
            self.enginer.manage_function(self.sims)
            self.invalidate()

    def add_body(self, body):
        self.check_allocation()
        read_dict_list(body, self.scene.add_body, sims=self.sims)
        self.invalidate()

    def add_boundary_condition(self, boundary):
        if self.scene.element is None:
            raise RuntimeError("The background grid has not been created. Call add_element first")
        read_dict_list(boundary, self.set_boundary_condition)
        self.invalidate()

    def set_boundary_condition(self, boundary):
        self.scene.boundary.set_boundary_conditions(self.sims, self.scene.element, boundary, int(self.scene.particleNum[0]), self.scene.particle)

    def clear_boundary_condition(self):
        self.scene.boundary.clear_boundary_condition()
        self.invalidate()

    def modify_parameters(self, **kwargs):
        if len(kwargs) > 0:
            if DictIO.Contains(kwargs, "SimulationTime"): self.sims.set_simulation_time(DictIO.GetEssential(kwargs, "SimulationTime"))
            if DictIO.Contains(kwargs, "Timestep"): self.sims.set_timestep(DictIO.GetEssential(kwargs, "Timestep"))
            if DictIO.Contains(kwargs, "CFL"): self.sims.set_CFL(DictIO.GetEssential(kwargs, "CFL"))
            if DictIO.Contains(kwargs, "AdaptiveTimestep"): self.sims.set_adaptive_timestep(DictIO.GetEssential(kwargs, "AdaptiveTimestep"))
            if DictIO.Contains(kwargs, "SaveInterval"): self.sims.set_save_interval(DictIO.GetEssential(kwargs, "SaveInterval"))

            if DictIO.Contains(kwargs, "gravity"): self.sims.set_gravity(DictIO.GetEssential(kwargs, "gravity"))
            if DictIO.Contains(kwargs, "background_damping"): self.sims.set_background_damping(DictIO.GetEssential(kwargs, "background_damping"))
            if DictIO.Contains(kwargs, "alphaPIC"): self.sims.set_alpha(DictIO.GetEssential(kwargs, "alphaPIC"))
            self.invalidate()

    def update_particle_properties(self, property_name, value, override=True, bodyID=0):
        if self.scene.particle is None:
            raise RuntimeError("No material point has been added. Call add_body first")
        self.scene.update_particle_properties(self.sims, override, property_name, value, bodyID)

    def invalidate(self):
        if self.solver is not None:
            self.solver.is_prepared = False

    def add_engine(self):
        if self.enginer is None:
            self.enginer = ULExplicitEngine(self.sims)
        self.enginer.choose_engine(self.sims)

    def add_solver(self):
        if self.solver is None:
            self.solver = Solver(self.sims, self.scene, self.enginer)

    def add_postfunctions(self, **functions):
        self.add_essentials()
        self.solver.set_callback_function(functions)

    def add_essentials(self):
        self.check_allocation()
        if self.scene.element is None:
            raise RuntimeError("The background grid has not been created. Call add_element first")
        self.add_engine()
        self.add_solver()

    def run(self):
        self.add_essentials()
        self.solver.Solver()

    def step(self, number=1):
        """
        Advances the model by a fixed number of steps without saving. Returns False as soon as
        one step is unstable; the failing step and quantity are kept in solver.failure.
        """
        self.add_essentials()
        for _ in range(int(number)):
            if not self.solver.iterate(self.sims.current_time, self.sims.current_step, self.sims):
                return False
            self.sims.current_time += self.sims.delta
            self.sims.current_step += 1
        return True

    def get_particle_data(self):
        return self.scene.get_particle_data()

    def get_total_mass(self, bodyID=-1):
        return self.scene.get_total_mass(bodyID)

    def get_total_momentum(self, bodyID=-1):
        return np.array(self.scene.get_total_momentum(bodyID))
