import numpy as np

from geompm import *

init(log=False)

mpm = MPM()

mpm.set_configuration(dimension=2,
                      domain=[1., 0.4],
                      boundary="Periodic",
                      gravity=[0., 0.],
                      mapping="USL")

mpm.set_solver(solver={
                           "Timestep":                   2e-5,
                           "SimulationTime":             0.2,
                           "SaveInterval":               0.01
                      })

mpm.memory_allocate(memory={
                                "max_material_number":    2,
                                "max_particle_number":    2000,
                                "max_body_number":        2
                            })

mpm.add_material(material=[{
                                "MaterialID":             1,
                                "Type":                   "LinearElastic",
                                "Density":                1000.,
                                "YoungModulus":           1e6,
                                "PoissonRatio":           0.3
                           },
                           {
                                "MaterialID":             2,
                                "Type":                   "LinearElastic",
                                "Density":                2000.,
                                "YoungModulus":           5e6,
                                "PoissonRatio":           0.2,
                                "Damage":                 {"Model": "GradyKipp", "M": 9., "K": 5e39}
                           }])

mpm.add_element(element={
                             "ElementSize":               0.02
                        })


def block(start, end, spacing):
    x, y = np.meshgrid(np.arange(start[0] + 0.5 * spacing, end[0], spacing), np.arange(start[1] + 0.5 * spacing, end[1], spacing), indexing='ij')
    return np.stack([x.reshape(-1), y.reshape(-1)], axis=-1)


mpm.add_body(body=[{
                        "Position":               block([0.2, 0.1], [0.4, 0.3], 0.01),
                        "Volume":                 0.01 ** 2,
                        "ParticleSize":           0.005,
                        "Velocity":               [1., 0.],
                        "BodyID":                 0,
                        "MaterialID":             1
                   },
                   {
                        "Position":               block([0.6, 0.1], [0.8, 0.3], 0.01),
                        "Volume":                 0.01 ** 2,
                        "ParticleSize":           0.005,
                        "Velocity":               [-1., 0.],
                        "BodyID":                 1,
                        "MaterialID":             2
                   }])

mpm.add_contact(contact={
                             "ContactType":               "MPMContact",
                             "Friction":                  0.2
                        })


def momentum_history(sims, scene):
    print("Momentum of body 0 = ", scene.get_total_momentum(bodyID=0))
    print("Momentum of body 1 = ", scene.get_total_momentum(bodyID=1))
    print("Total momentum = ", scene.get_total_momentum())


mpm.add_postfunctions(monitor=momentum_history)

mpm.run()

# drive the second block back with a prescribed velocity and continue
mpm.update_particle_properties(property_name="velocity", value=[0.5, 0.], override=True, bodyID=1)
mpm.modify_parameters(SimulationTime=0.1)
mpm.run()
