import taichi as ti

from geompm.utils.constants import DBL_MAX


@ti.func
def sgn(x):
    return ti.select(x >= 0., 1, 0) - ti.select(x <= 0., 1, 0)


@ti.func
def is_finite(x):
    # NaN fails every comparison, Inf exceeds the largest double
    return ti.abs(x) <= DBL_MAX
