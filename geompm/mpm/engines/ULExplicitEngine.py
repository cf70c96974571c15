import taichi as ti

from geompm.mpm.engines.Engine import Engine
from geompm.mpm.engines.EngineKernel import *
from geompm.mpm.SceneManager import myScene
from geompm.mpm.Simulation import Simulation


@ti.data_oriented
class ULExplicitEngine(Engine):
    def __init__(self, sims) -> None:
        super().__init__(sims)

    def calculate_precontact(self, sims: Simulation, scene: myScene):
        kernel_calc_contact_normal(scene.element.grid_nodes, int(scene.particleNum[0]), scene.node, scene.particle, scene.element.LnID, scene.element.dshape_fn, scene.element.node_size)

    def compute_contact_force(self, sims: Simulation, scene: myScene):
        kernel_calc_friction_contact(scene.mass_cut_off, scene.contact.friction, sims.dt, scene.node)
        kernel_assemble_contact_force(scene.mass_cut_off, sims.dt, scene.node)
        self.apply_contact_velocity_constraints(sims, scene)

    def compute_grid_velcity(self, sims: Simulation, scene: myScene):
        kernel_compute_grid_velocity(scene.mass_cut_off, scene.node)

    def compute_force(self, sims: Simulation, scene: myScene):
        kernel_force_p2g(scene.element.grid_nodes, int(scene.particleNum[0]), sims.gravity, scene.node, scene.particle, scene.boundary.particle_constraint,
                         scene.element.LnID, scene.element.shape_fn, scene.element.dshape_fn, scene.element.node_size)

    def compute_grid_kinematic(self, sims: Simulation, scene: myScene):
        kernel_compute_grid_kinematic(scene.mass_cut_off, sims.background_damping, scene.node, sims.dt)

    def compute_particle_kinematic(self, sims: Simulation, scene: myScene):
        kernel_kinemaitc_g2p(scene.element.grid_nodes, sims.alphaPIC, scene.element.periodic, scene.element.extent, sims.dt, int(scene.particleNum[0]), scene.node,
                             scene.particle, scene.boundary.particle_constraint, scene.element.LnID, scene.element.shape_fn, scene.element.node_size)

    def compute_velocity_gradient(self, sims: Simulation, scene: myScene):
        kernel_update_velocity_gradient(scene.element.grid_nodes, int(scene.particleNum[0]), sims.dt, scene.node, scene.particle, scene.element.LnID, scene.element.dshape_fn, scene.element.node_size)

    def compute_stress_strain(self, sims: Simulation, scene: myScene):
        for materialID in scene.material.get_materialID():
            kernel_compute_stress_strain(materialID, int(scene.particleNum[0]), sims.dt, scene.particle, scene.material.matProps[materialID], scene.material.stateVars)
        self.apply_particle_stress_constraints(sims, scene)

    def postmapping_grid_velocity(self, sims: Simulation, scene: myScene):
        grid_momentum_reset(scene.node)
        kernel_momentum_p2g(scene.element.grid_nodes, int(scene.particleNum[0]), scene.node, scene.particle, scene.element.LnID, scene.element.shape_fn, scene.element.node_size)
        self.compute_grid_velcity(sims, scene)
        self.set_velocity_constraints(sims, scene)

    def nodal_force_constraints(self, sims: Simulation, scene: myScene):
        kernel_apply_nodal_force_constraint(scene.mass_cut_off, scene.node, scene.boundary.nodal_constraint)

    def velocity_constraints(self, sims: Simulation, scene: myScene):
        kernel_apply_nodal_velocity_constraint(scene.mass_cut_off, sims.dt, scene.node, scene.boundary.nodal_constraint)

    def postmapping_velocity_constraints(self, sims: Simulation, scene: myScene):
        kernel_set_nodal_velocity_constraint(scene.mass_cut_off, scene.node, scene.boundary.nodal_constraint)

    def particle_stress_constraints(self, sims: Simulation, scene: myScene):
        kernel_apply_particle_stress_constraint(int(scene.particleNum[0]), scene.particle, scene.boundary.particle_constraint)

    def grid_kinematic_update(self, sims: Simulation, scene: myScene):
        self.compute_force(sims, scene)
        self.apply_nodal_force_constraints(sims, scene)
        self.compute_grid_kinematic(sims, scene)
        self.pre_contact_calculate(sims, scene)
        self.apply_velocity_constraints(sims, scene)
        self.compute_contact_force_(sims, scene)

    def usl_updating(self, sims: Simulation, scene: myScene):
        self.reset_grid_message(scene)
        self.calculate_interpolations(sims, scene)
        self.compute_nodal_kinematics(sims, scene)
        self.compute_grid_velcity(sims, scene)
        self.grid_kinematic_update(sims, scene)
        self.compute_particle_kinematic(sims, scene)
        self.compute_velocity_gradient(sims, scene)
        self.compute_stress_strains(sims, scene)

    def usf_updating(self, sims: Simulation, scene: myScene):
        self.reset_grid_message(scene)
        self.calculate_interpolations(sims, scene)
        self.compute_nodal_kinematics(sims, scene)
        self.compute_grid_velcity(sims, scene)
        self.set_velocity_constraints(sims, scene)
        self.compute_velocity_gradient(sims, scene)
        self.compute_stress_strains(sims, scene)
        self.grid_kinematic_update(sims, scene)
        self.compute_particle_kinematic(sims, scene)

    def musl_updating(self, sims: Simulation, scene: myScene):
        self.reset_grid_message(scene)
        self.calculate_interpolations(sims, scene)
        self.compute_nodal_kinematics(sims, scene)
        self.compute_grid_velcity(sims, scene)
        self.grid_kinematic_update(sims, scene)
        self.compute_particle_kinematic(sims, scene)
        self.postmapping_grid_velocity(sims, scene)
        self.compute_velocity_gradient(sims, scene)
        self.compute_stress_strains(sims, scene)
