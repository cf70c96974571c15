import warnings

import numpy as np

from geompm.mpm.boundaries.BoundaryCore import *
from geompm.mpm.boundaries.BoundaryStruct import NodalConstraint, ParticleConstraint
from geompm.mpm.elements.HexahedronElement8Nodes import HexahedronElement8Nodes
from geompm.mpm.Simulation import Simulation
from geompm.utils.constants import FREE, VELOCITY, FORCE, STRESS, AUTO, CLIP, PERIODIC
from geompm.utils.ObjectIO import DictIO


class BoundaryConstraints(object):
    """
    One constraint slot per grid node and per material point. A later assignment onto an
    already constrained entity replaces the former one. Values given as callables of the
    physical time are re-evaluated before every step.
    """
    def __init__(self) -> None:
        self.nodal_constraint = None
        self.particle_constraint = None
        self.nodal_kind = np.zeros(0, dtype=np.int32)
        self.nodal_tag = np.zeros(0, dtype=np.int32)
        self.particle_kind = np.zeros(0, dtype=np.int32)
        self.particle_tag = np.zeros(0, dtype=np.int32)

        self.tag = 0
        self.time_functions = {}
        self.nodal_assignments = {}
        self.axis = {0: "X", 1: "Y", 2: "Z"}

    def activate_nodal_constraints(self, gridSum):
        self.nodal_constraint = NodalConstraint.field(shape=gridSum)
        kernel_initialize_boundary(self.nodal_constraint)
        self.nodal_kind = np.zeros(gridSum, dtype=np.int32)
        self.nodal_tag = -np.ones(gridSum, dtype=np.int32)

    def activate_particle_constraints(self, max_particle_num):
        self.particle_constraint = ParticleConstraint.field(shape=max_particle_num)
        kernel_initialize_boundary(self.particle_constraint)
        self.particle_kind = np.zeros(max_particle_num, dtype=np.int32)
        self.particle_tag = -np.ones(max_particle_num, dtype=np.int32)

    def has_nodal_constraint(self, kind):
        return bool(np.any(self.nodal_kind == kind))

    def has_particle_constraint(self, kind):
        return bool(np.any(self.particle_kind == kind))

    def get_freedoms(self, sims: Simulation, freedoms, name):
        freedoms = list(freedoms)
        if sims.dimension == 2 and len(freedoms) == 2:
            freedoms.append(None)
        if len(freedoms) != 3:
            raise ValueError(f"Keyword:: /{name}/ should have {sims.dimension} components, but {freedoms} is given")
        if all(freedom is None for freedom in freedoms):
            raise KeyError(f"The prescribed {name} has not been set")
        fix = [0 if freedom is None else 1 for freedom in freedoms]
        value = [0. if freedom is None else float(freedom) for freedom in freedoms]
        return fix, value

    def get_stress(self, stress):
        stress = [float(s) for s in stress]
        if len(stress) != 6:
            raise ValueError(f"Keyword:: /Stress/ should have 6 components in the order [xx, yy, zz, xy, yz, xz], but {stress} is given")
        return stress

    def get_component_input(self, boundary, name):
        default_val = [DictIO.GetAlternative(boundary, name + self.axis[d], None) for d in range(3)]
        return DictIO.GetAlternative(boundary, name, default_val)

    def evaluate(self, value, current_time):
        if callable(value):
            return value(current_time)
        return value

    def check_override(self, kind_list, indices, entity):
        override = int(np.count_nonzero(kind_list[indices] != FREE))
        if override > 0:
            warnings.warn(f"{override} {entity} already carry a boundary condition and will be overwritten")
        return override

    def get_target_nodes(self, sims: Simulation, element: HexahedronElement8Nodes, boundary):
        if DictIO.Contains(boundary, "NodeID"):
            inodes = np.unique(np.asarray(DictIO.GetEssential(boundary, "NodeID"), dtype=np.int32).reshape(-1))
            if inodes.size > 0 and (inodes.min() < 0 or inodes.max() >= element.gridSum):
                raise ValueError(f"Keyword:: /NodeID/ should lie in [0, {element.gridSum})")
            return inodes, "NodeID"
        start_point = self.pad_point(sims, DictIO.GetEssential(boundary, "StartPoint"), 0.)
        end_point = self.pad_point(sims, DictIO.GetEssential(boundary, "EndPoint"), element.extent[2])
        return np.unique(element.get_boundary_nodes(start_point, end_point)), f"Box {start_point} - {end_point}"

    def get_target_particles(self, sims: Simulation, boundary, particleNum, particle):
        if DictIO.Contains(boundary, "ParticleID"):
            iparticles = np.unique(np.asarray(DictIO.GetEssential(boundary, "ParticleID"), dtype=np.int32).reshape(-1))
            if iparticles.size > 0 and (iparticles.min() < 0 or iparticles.max() >= particleNum):
                raise ValueError(f"Keyword:: /ParticleID/ should lie in [0, {particleNum})")
            return iparticles, "ParticleID"
        if DictIO.Contains(boundary, "BodyID"):
            bodyID = DictIO.GetEssential(boundary, "BodyID")
            bodies = particle.bodyID.to_numpy()[0:particleNum]
            return np.ascontiguousarray(np.where(bodies == bodyID)[0], dtype=np.int32), f"BodyID {bodyID}"
        start_point = np.array(self.pad_point(sims, DictIO.GetEssential(boundary, "StartPoint"), -np.inf))
        end_point = np.array(self.pad_point(sims, DictIO.GetEssential(boundary, "EndPoint"), np.inf))
        position = particle.x.to_numpy()[0:particleNum]
        is_in_region = np.all((position >= start_point) & (position <= end_point), axis=1)
        return np.ascontiguousarray(np.where(is_in_region)[0], dtype=np.int32), f"Box {list(start_point)} - {list(end_point)}"

    def pad_point(self, sims: Simulation, point, z):
        point = [float(p) for p in point]
        if sims.dimension == 2 and len(point) == 2:
            point.append(float(z))
        return point

    def next_tag(self):
        self.tag += 1
        return self.tag

    def set_boundary_conditions(self, sims: Simulation, element: HexahedronElement8Nodes, boundary, particleNum, particle):
        boundary_type = DictIO.GetEssential(boundary, "BoundaryType")
        if boundary_type == "VelocityConstraint":
            self.set_nodal_constraints(sims, element, boundary, VELOCITY, "Velocity")
        elif boundary_type == "ForceConstraint":
            self.set_nodal_constraints(sims, element, boundary, FORCE, "Force")
        elif boundary_type == "ParticleVelocityConstraint":
            self.set_particle_constraints(sims, boundary, particleNum, particle, VELOCITY, "Velocity")
        elif boundary_type == "ParticleForceConstraint":
            self.set_particle_constraints(sims, boundary, particleNum, particle, FORCE, "Force")
        elif boundary_type == "ParticleStressConstraint":
            self.set_particle_constraints(sims, boundary, particleNum, particle, STRESS, "Stress")
        else:
            valid = ["VelocityConstraint", "ForceConstraint", "ParticleVelocityConstraint", "ParticleForceConstraint", "ParticleStressConstraint"]
            raise RuntimeError(f"Keyword:: /BoundaryType: {boundary_type}/ is invalid. The valid type are given as follows: {valid}")

    def set_nodal_constraints(self, sims: Simulation, element: HexahedronElement8Nodes, boundary, kind, name):
        inodes, description = self.get_target_nodes(sims, element, boundary)
        prescribed = self.get_component_input(boundary, name)
        fix, value = self.get_freedoms(sims, self.evaluate(prescribed, sims.current_time), name)
        override = self.check_override(self.nodal_kind, inodes, "nodes")

        tag = self.next_tag()
        if inodes.size > 0:
            set_nodal_constraints(self.nodal_constraint, inodes, kind, tag, fix, value)
        self.nodal_kind[inodes] = kind
        self.nodal_tag[inodes] = tag
        if callable(prescribed):
            self.time_functions[tag] = ("Node", prescribed, name)
        self.nodal_assignments[tag] = element.get_node_lattice(inodes)

        print(f"Boundary Type: {name} Constraint")
        print("Target: ", description)
        print("Total involved nodes: ", inodes.shape[0])
        print("Overwritten nodes: ", override)
        for d in range(3):
            if fix[d] == 1:
                print(f"Prescribed {name} along {self.axis[d]} axis = ", "f(t)" if callable(prescribed) else value[d])
        print('\n')

    def set_particle_constraints(self, sims: Simulation, boundary, particleNum, particle, kind, name):
        if particle is None or particleNum == 0:
            raise RuntimeError("Particle constraints need material points. Call add_body first")
        iparticles, description = self.get_target_particles(sims, boundary, particleNum, particle)
        if kind == STRESS:
            prescribed = DictIO.GetEssential(boundary, "Stress")
            fix, value = [1, 1, 1], self.get_stress(self.evaluate(prescribed, sims.current_time))
        else:
            prescribed = self.get_component_input(boundary, name)
            fix, value = self.get_freedoms(sims, self.evaluate(prescribed, sims.current_time), name)
            value = value + [0., 0., 0.]
        override = self.check_override(self.particle_kind, iparticles, "particles")

        tag = self.next_tag()
        if iparticles.size > 0:
            set_particle_constraints(self.particle_constraint, iparticles, kind, tag, fix, value)
        self.particle_kind[iparticles] = kind
        self.particle_tag[iparticles] = tag
        if callable(prescribed):
            self.time_functions[tag] = ("Particle", prescribed, name)

        print(f"Boundary Type: Particle {name} Constraint")
        print("Target: ", description)
        print("Total involved particles: ", iparticles.shape[0])
        print("Overwritten particles: ", override)
        print(f"Prescribed {name} = ", "f(t)" if callable(prescribed) else value[0:6 if kind == STRESS else 3], '\n')

    def update_time_dependent_values(self, sims: Simulation):
        for tag, (target, function, name) in self.time_functions.items():
            if target == "Node":
                if np.any(self.nodal_tag == tag):
                    _, value = self.get_freedoms(sims, function(sims.current_time), name)
                    update_nodal_constraint_value(self.nodal_constraint, tag, value)
            elif target == "Particle":
                if np.any(self.particle_tag == tag):
                    if name == "Stress":
                        value = self.get_stress(function(sims.current_time))
                    else:
                        _, value = self.get_freedoms(sims, function(sims.current_time), name)
                        value = value + [0., 0., 0.]
                    update_particle_constraint_value(self.particle_constraint, tag, value)

    def resolve_boundary_policy(self, sims: Simulation, element: HexahedronElement8Nodes):
        policy = []
        for d in range(3):
            if sims.dimension == 2 and d == 2:
                policy.append(PERIODIC)
                continue
            if sims.boundary[d] != AUTO:
                policy.append(sims.boundary[d])
                continue
            is_clip = False
            for tag, lattice in self.nodal_assignments.items():
                if not np.any(self.nodal_tag == tag) or lattice.shape[0] == 0:
                    continue
                if np.all(lattice[:, d] <= 2) or np.all(lattice[:, d] >= element.cnum[d] - 2):
                    is_clip = True
            policy.append(CLIP if is_clip else PERIODIC)
        return policy

    def clear_boundary_condition(self):
        if self.nodal_constraint is not None:
            kernel_initialize_boundary(self.nodal_constraint)
            self.nodal_kind.fill(FREE)
            self.nodal_tag.fill(-1)
        if self.particle_constraint is not None:
            kernel_initialize_boundary(self.particle_constraint)
            self.particle_kind.fill(FREE)
            self.particle_tag.fill(-1)
        self.time_functions.clear()
        self.nodal_assignments.clear()
