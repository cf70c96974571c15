import numpy as np

from geompm import *

init(log=False)

mpm = MPM()

mpm.set_configuration(dimension=2,
                      domain=[0.584, 0.4],
                      background_damping=0.,
                      gravity=[0., -9.8],
                      velocity_projection="FLIP",
                      mapping="USF")

mpm.set_solver(solver={
                           "Timestep":                   1e-5,
                           "SimulationTime":             0.5,
                           "SaveInterval":               0.02
                      })

mpm.memory_allocate(memory={
                                "max_material_number":    1,
                                "max_particle_number":    40000
                            })

mpm.add_material(material={
                               "MaterialID":              1,
                               "Type":                    "Newtonian",
                               "Density":                 1000.,
                               "Modulus":                 2e6,
                               "Viscosity":               1e-3,
                               "ElementLength":           0.004,
                               "cL":                      1.,
                               "cQ":                      2.
                          })

mpm.add_element(element={
                             "ElementSize":               0.004
                        })

spacing = 0.002
x, y = np.meshgrid(np.arange(0.5 * spacing, 0.146, spacing), np.arange(0.5 * spacing, 0.292, spacing), indexing='ij')
mpm.add_body(body={
                       "Position":                 np.stack([x.reshape(-1), y.reshape(-1)], axis=-1),
                       "Volume":                   spacing ** 2,
                       "MaterialID":               1
                  })

mpm.add_boundary_condition(boundary=[{"BoundaryType": "VelocityConstraint", "VelocityY": 0., "StartPoint": [0., 0.], "EndPoint": [0.584, 0.]},
                                     {"BoundaryType": "VelocityConstraint", "VelocityX": 0., "StartPoint": [0., 0.], "EndPoint": [0., 0.4]},
                                     {"BoundaryType": "VelocityConstraint", "VelocityX": 0., "StartPoint": [0.584, 0.], "EndPoint": [0.584, 0.4]}])


def surge_front(sims, scene):
    position = scene.get_particle_data()["position"]
    print("Surge front = ", np.max(position[:, 0]))


mpm.add_postfunctions(monitor=surge_front)

mpm.run()
