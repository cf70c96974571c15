from itertools import product

import numpy as np
import taichi as ti

from geompm.mpm.elements.ElementBase import ElementBase
from geompm.mpm.elements.HexahedronKernel import global_update, kernel_sum_shape_function
from geompm.mpm.Simulation import Simulation
from geompm.utils.constants import PERIODIC, Threshold
from geompm.utils.TypeDefination import vec3f, vec3i


class HexahedronElement8Nodes(ElementBase):
    """
    Uniform background grid of eight-node hexahedral cells carrying GIMP interpolation.
    Each particle influences three nodes per axis, i.e. 27 nodes in 3D.
    """
    def __init__(self, element_type="GIMP") -> None:
        super().__init__(element_type)
        self.grid_size = vec3f(1., 1., 1.)
        self.igrid_size = vec3f(1., 1., 1.)
        self.extent = vec3f(0., 0., 0.)
        self.gnum = vec3i(0, 0, 0)
        self.cnum = vec3i(0, 0, 0)
        self.periodic = vec3i(1, 1, 1)
        self.grid_nodes = 27
        self.influenced_node = 3
        self.cell_volume = 0.
        self.LnID = None
        self.shape_fn = None
        self.dshape_fn = None
        self.node_size = None

    def check_grid_size(self, sims: Simulation, grid_size):
        if isinstance(grid_size, (list, tuple, np.ndarray)):
            grid_size = [float(size) for size in grid_size]
            if len(grid_size) != sims.dimension:
                raise ValueError(f"Keyword:: /ElementSize/ should have {sims.dimension} components, but {grid_size} is given")
            if any(abs(size - grid_size[0]) > Threshold * max(1., abs(grid_size[0])) for size in grid_size):
                raise ValueError(f"Keyword:: /ElementSize: {grid_size}/ must be uniform in every dimension")
            grid_size = grid_size[0]
        grid_size = float(grid_size)
        if grid_size <= 0.:
            raise ValueError(f"Keyword:: /ElementSize: {grid_size}/ must be positive")
        return grid_size

    def create_nodes(self, sims: Simulation, grid_size):
        grid_size = self.check_grid_size(sims, grid_size)
        domain = np.array(sims.domain, dtype=float)
        if sims.dimension == 2:
            domain = np.append(domain, grid_size)

        cnum = np.ceil(domain / grid_size - 1e-10)
        cnum = np.maximum(cnum, 1)
        self.grid_size = vec3f([grid_size, grid_size, grid_size])
        self.igrid_size = 1. / self.grid_size
        self.cnum = vec3i([int(c) for c in cnum])
        self.gnum = self.cnum + 1
        self.extent = vec3f([float(c) * grid_size for c in cnum])
        self.cell_volume = self.calc_volume()
        self.gridSum = int(self.gnum[0] * self.gnum[1] * self.gnum[2])

    def element_initialize(self, sims: Simulation):
        self.LnID = ti.field(int)
        self.shape_fn = ti.field(float)
        self.dshape_fn = ti.Vector.field(3, float)
        ti.root.dense(ti.i, sims.max_particle_num * self.grid_nodes).place(self.LnID, self.shape_fn, self.dshape_fn)
        self.node_size = ti.field(ti.u8, shape=sims.max_particle_num)

    def set_boundary_policy(self, policy):
        self.periodic = vec3i([1 if p == PERIODIC else 0 for p in policy])

    def print_message(self):
        print(" Grid Information ".center(71, '-'))
        print("Element Type = ", self.element_type)
        print("Grid Size = ", self.grid_size[0])
        print("The number of cells = ", self.cnum)
        print("The number of nodes = ", self.gnum)
        print("Periodic axes = ", [bool(p) for p in self.periodic], '\n')

    def calc_volume(self):
        return self.grid_size[0] * self.grid_size[1] * self.grid_size[2]

    def get_node_lattice(self, nodeID):
        nodeID = np.asarray(nodeID, dtype=np.int64)
        gnum = np.array(self.gnum)
        return np.stack([nodeID % gnum[0], (nodeID // gnum[0]) % gnum[1], nodeID // (gnum[0] * gnum[1])], axis=-1)

    def check_boundary_domain(self, start_point, end_point):
        if any(start_point[d] < -Threshold for d in range(3)):
            raise RuntimeError(f"KeyWord:: /StartPoint/ {list(start_point)} is out of domain {list(self.extent)}")
        if any(end_point[d] > self.extent[d] + Threshold for d in range(3)):
            raise RuntimeError(f"KeyWord:: /EndPoint/ {list(end_point)} is out of domain {list(self.extent)}")

    def get_boundary_nodes(self, start_point, end_point):
        start_point, end_point = np.array(start_point, dtype=float), np.array(end_point, dtype=float)
        self.check_boundary_domain(start_point, end_point)
        start_bound = np.ceil((start_point - Threshold) * np.array(self.igrid_size)).astype(int)
        end_bound = np.floor((end_point + Threshold) * np.array(self.igrid_size)).astype(int) + 1
        end_bound = np.maximum(end_bound, start_bound + 1)

        xnode = np.arange(start_bound[0], end_bound[0], 1)
        ynode = np.arange(start_bound[1], end_bound[1], 1)
        znode = np.arange(start_bound[2], end_bound[2], 1)

        total_nodes = np.array(list(product(xnode, ynode, znode)))
        return np.array([n[0] + n[1] * self.gnum[0] + n[2] * self.gnum[0] * self.gnum[1] for n in total_nodes], dtype=np.int32)

    def calc_critical_timestep(self, velocity):
        return min(self.grid_size[0], self.grid_size[1], self.grid_size[2]) / velocity if velocity > 0. else 10000

    def calculate(self, particleNum, particle):
        global_update(self.grid_nodes, self.influenced_node, self.grid_size, self.igrid_size, self.cnum, self.gnum, self.periodic, 
                      particleNum, particle, self.node_size, self.LnID, self.shape_fn, self.dshape_fn)

    def get_shape_function_sum(self, particleNum):
        weight_sum = np.zeros(particleNum)
        gradient_sum = np.zeros((particleNum, 3))
        kernel_sum_shape_function(self.grid_nodes, particleNum, self.node_size, self.shape_fn, self.dshape_fn, weight_sum, gradient_sum)
        return weight_sum, gradient_sum
