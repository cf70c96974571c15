import taichi as ti

from geompm.utils.constants import Threshold
from geompm.utils.TypeDefination import mat3x3


@ti.func
def Normalize(var):
    squareLen = 0.
    for d in ti.static(range(var.n)):
        squareLen += var[d] * var[d]
    sqrt_var = ti.sqrt(squareLen)
    if sqrt_var > Threshold:
        var /= sqrt_var
    return var


@ti.func
def voigt_tensor_trace(vector):
    return vector[0] + vector[1] + vector[2]


@ti.func
def voigt_to_tensor(vector):
    return mat3x3([[vector[0], vector[3], vector[5]],
                   [vector[3], vector[1], vector[4]],
                   [vector[5], vector[4], vector[2]]])


@ti.func
def outer_product(vec1, vec2):
    return mat3x3([[vec1[0] * vec2[0], vec1[0] * vec2[1], vec1[0] * vec2[2]],
                   [vec1[1] * vec2[0], vec1[1] * vec2[1], vec1[1] * vec2[2]],
                   [vec1[2] * vec2[0], vec1[2] * vec2[1], vec1[2] * vec2[2]]])
