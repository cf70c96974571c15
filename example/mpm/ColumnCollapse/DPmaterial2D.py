import os

import numpy as np

from geompm import *

init()

mpm = MPM()

mpm.set_configuration(dimension=2,
                      domain=[0.8, 0.2],
                      boundary=["Clip", "Clip"],
                      background_damping=0.,
                      gravity=[0., -9.8],
                      alphaPIC=0.005,
                      mapping="MUSL",
                      check_interval=10)

mpm.set_solver(solver={
                           "Timestep":                   1e-5,
                           "SimulationTime":             0.6,
                           "SaveInterval":               0.01,
                           "AdaptiveTimestep":           True,
                           "CFL":                        0.2
                      })

mpm.memory_allocate(memory={
                                "max_material_number":    1,
                                "max_particle_number":    13000,
                                "max_body_number":        1
                            })

mpm.add_material(material={
                               "MaterialID":              1,
                               "Type":                    "DruckerPrager",
                               "Density":                 2650.,
                               "YoungModulus":            8.4e5,
                               "PoissonRatio":            0.3,
                               "Cohesion":                0.,
                               "Friction":                19.8,
                               "Dilation":                0.,
                               "Tensile":                 0.,
                               "dpType":                  "Inscribed"
                          })

mpm.add_element(element={
                             "ElementType":               "GIMP",
                             "ElementSize":               0.0025
                        })

spacing = 0.00125
x, y = np.meshgrid(np.arange(0.5 * spacing, 0.2, spacing), np.arange(0.5 * spacing, 0.1, spacing), indexing='ij')
position = np.stack([x.reshape(-1), y.reshape(-1)], axis=-1)

# geostatic stress of a dry column
density, k0 = 2650., 0.5
stress_yy = -density * 9.8 * (0.1 - position[:, 1])
stress = np.stack([k0 * stress_yy, stress_yy, k0 * stress_yy, 0. * stress_yy, 0. * stress_yy, 0. * stress_yy], axis=-1)

mpm.add_body(body={
                       "Position":                 position,
                       "Volume":                   spacing ** 2,
                       "ParticleSize":             0.5 * spacing,
                       "Stress":                   stress,
                       "BodyID":                   0,
                       "MaterialID":               1
                  })

mpm.add_boundary_condition(boundary=[{
                                        "BoundaryType":   "VelocityConstraint",
                                        "Velocity":       [0., 0.],
                                        "StartPoint":     [0., 0.],
                                        "EndPoint":       [0.8, 0.]
                                     },
                                     {
                                        "BoundaryType":   "VelocityConstraint",
                                        "VelocityX":      0.,
                                        "StartPoint":     [0., 0.],
                                        "EndPoint":       [0., 0.2]
                                     }])

os.makedirs("DPmaterial2D", exist_ok=True)


def write_particles(sims, scene):
    data = scene.get_particle_data()
    np.savez(f"DPmaterial2D/particles{sims.current_print:06d}", t_current=sims.current_time, position=data["position"], velocity=data["velocity"],
             stress=data["stress"], epdstrain=data["state_vars"]["epdstrain"])


mpm.add_postfunctions(writer=write_particles)

try:
    mpm.run()
except FloatingPointError as error:
    print(f"Column collapse stopped: {error}")
    print("Last healthy save number = ", mpm.sims.current_print - 1)
