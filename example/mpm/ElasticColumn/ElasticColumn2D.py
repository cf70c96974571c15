import os

import numpy as np

from geompm import *

init(log=False)

mpm = MPM()

mpm.set_configuration(dimension=2,
                      domain=[0.5, 2.],
                      boundary="Auto",
                      background_damping=0.02,
                      gravity=[0., -9.8],
                      alphaPIC=0.,
                      mapping="USL")

mpm.set_solver(solver={
                           "Timestep":                   1e-4,
                           "SimulationTime":             1.,
                           "SaveInterval":               0.05,
                           "CFL":                        0.5
                      })

mpm.memory_allocate(memory={
                                "max_material_number":    1,
                                "max_particle_number":    3200,
                                "max_body_number":        1
                            })

mpm.add_material(material={
                               "MaterialID":              1,
                               "Type":                    "LinearElastic",
                               "Density":                 1000.,
                               "YoungModulus":            1e6,
                               "PoissonRatio":            0.
                          })

mpm.add_element(element={
                             "ElementType":               "GIMP",
                             "ElementSize":               0.05
                        })

spacing = 0.025
x, y = np.meshgrid(np.arange(0.2 + 0.5 * spacing, 0.3, spacing), np.arange(0.5 * spacing, 1., spacing), indexing='ij')
mpm.add_body(body={
                       "Position":                 np.stack([x.reshape(-1), y.reshape(-1)], axis=-1),
                       "Volume":                   spacing ** 2,
                       "ParticleSize":             0.5 * spacing,
                       "BodyID":                   0,
                       "MaterialID":               1
                  })

mpm.add_boundary_condition(boundary=[{
                                        "BoundaryType":   "VelocityConstraint",
                                        "Velocity":       [0., 0.],
                                        "StartPoint":     [0., 0.],
                                        "EndPoint":       [0.5, 0.]
                                     },
                                     {
                                        "BoundaryType":   "VelocityConstraint",
                                        "VelocityX":      0.,
                                        "StartPoint":     [0., 0.],
                                        "EndPoint":       [0., 2.]
                                     },
                                     {
                                        "BoundaryType":   "VelocityConstraint",
                                        "VelocityX":      0.,
                                        "StartPoint":     [0.5, 0.],
                                        "EndPoint":       [0.5, 2.]
                                     }])

os.makedirs("ElasticColumn", exist_ok=True)


def write_particles(sims, scene):
    data = scene.get_particle_data()
    np.savez(f"ElasticColumn/particles{sims.current_print:06d}", t_current=sims.current_time, **{key: value for key, value in data.items() if key != "state_vars"})


def report_settlement(sims, scene):
    position = scene.get_particle_data()["position"]
    print("Top of column = ", np.max(position[:, 1]))


mpm.add_postfunctions(writer=write_particles, monitor=report_settlement)

mpm.run()
