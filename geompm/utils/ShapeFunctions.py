import taichi as ti


# ========================================================= #
#                  GIMP shape function                      #
# ========================================================= #
@ti.func
def ShapeGIMP(xp, xg, idx, lp):
    nx = 0.
    dx = 1. / idx
    d = xp - xg
    a = dx + lp
    b = dx * lp
    if d < a:
        if d > (dx - lp):
            nx = (a - d) * (a - d) / (4. * b)
        elif d > lp:
            nx = 1. - d * idx
        elif d > -lp:
            nx = 1. - (d * d + lp * lp) / (2. * b)
        elif d > (-dx + lp):
            nx = 1. + d * idx
        elif d > -a:
            nx = (a + d) * (a + d) / (4. * b)
    return nx


@ti.func
def GShapeGIMP(xp, xg, idx, lp):
    dnx = 0.
    dx = 1. / idx
    d = xp - xg
    a = dx + lp
    b = dx * lp
    if d < a:
        if d > (dx - lp):
            dnx = (d - a) / (2. * b)
        elif d > lp:
            dnx = -1. * idx
        elif d > -lp:
            dnx = -d / b
        elif d > (-dx + lp):
            dnx = 1. * idx
        elif d > -a:
            dnx = (a + d) / (2. * b)
    return dnx
