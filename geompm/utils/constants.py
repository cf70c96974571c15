from math import pi, sqrt

from geompm.utils.TypeDefination import vec3f, vec6f, mat3x3


Threshold = 1e-14
DBL_MAX = 1.7976931348623158e308

PI = pi
SQRT3 = sqrt(3)

EYE = vec6f([1., 1., 1., 0., 0., 0.])

ZEROVEC3f = vec3f([0., 0., 0.])
ZEROVEC6f = vec6f([0., 0., 0., 0., 0., 0.])
ZEROMAT3x3 = mat3x3([[0., 0., 0.], [0., 0., 0.], [0., 0., 0.]])


# Boundary condition kinds
FREE = 0
VELOCITY = 1
FORCE = 2
STRESS = 3

# Boundary policies of the background grid
PERIODIC = 0
CLIP = 1
AUTO = 2
