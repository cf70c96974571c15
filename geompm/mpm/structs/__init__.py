from geompm.mpm.structs.GridNode import Nodes
from geompm.mpm.structs.Particle import ParticleCloud
