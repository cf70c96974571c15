import numpy as np
import pytest


def configured_model(**kwargs):
    from geompm.mpm.mainMPM import MPM

    configuration = {"dimension": 2, "domain": [1., 1.]}
    configuration.update(kwargs)
    model = MPM(log=False)
    model.set_configuration(log=False, **configuration)
    return model


@pytest.mark.parametrize("configuration, error", [({"dimension": 4, "domain": [1., 1., 1., 1.]}, RuntimeError),
                                                  ({"domain": [1., -1.]}, ValueError),
                                                  ({"domain": [1., 1., 1.]}, ValueError),
                                                  ({"boundary": "Reflect"}, RuntimeError),
                                                  ({"mapping": "APIC"}, RuntimeError),
                                                  ({"alphaPIC": 1.5}, ValueError),
                                                  ({"background_damping": 1.}, ValueError),
                                                  ({"gravity": [0., 0., -9.8]}, ValueError)])
def test_invalid_configuration(configuration, error):
    """Malformed global settings are rejected when they are set."""
    with pytest.raises(error):
        configured_model(**configuration)


def test_velocity_projection_sets_pic_fraction():
    """The PIC and FLIP keywords are shorthands for the blending factor."""
    assert configured_model(velocity_projection="PIC").sims.alphaPIC == 1.
    assert configured_model(alphaPIC=0.3, velocity_projection="FLIP").sims.alphaPIC == 0.
    assert configured_model(alphaPIC=0.3, velocity_projection="PIC/FLIP").sims.alphaPIC == 0.3


def test_plane_strain_defaults():
    """2D models pad gravity with zero and keep the out-of-plane axis periodic."""
    from geompm.utils.constants import AUTO, CLIP, PERIODIC

    model = configured_model(boundary=["Clip", "Auto"])
    assert model.sims.gravity == [0., -9.8, 0.]
    assert model.sims.boundary == [CLIP, AUTO, PERIODIC]
    assert model.sims.mapping == "USL"


@pytest.mark.parametrize("element_size", [[0.1, 0.2], -0.1, [0.1, 0.1, 0.1]])
def test_invalid_element_size(build_model, element_size):
    """Cells must be uniform, positive and match the dimension."""
    with pytest.raises(ValueError):
        build_model(dimension=2, domain=(1., 1.), element_size=element_size)


def test_second_grid_is_rejected(build_model):
    """The background grid is created once."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(RuntimeError):
        model.add_element({"ElementSize": 0.1})
    with pytest.raises(RuntimeError):
        model.set_configuration(log=False, dimension=2, domain=[2., 2.])


def test_unknown_interpolation_is_rejected():
    """Only GIMP interpolation is available."""
    model = configured_model()
    model.memory_allocate({"max_material_number": 1, "max_particle_number": 10}, log=False)
    with pytest.raises(RuntimeError):
        model.add_element({"ElementType": "QuadBSpline", "ElementSize": 0.1})


def test_missing_allocation_is_reported():
    """Materials cannot be added before memory is allocated."""
    model = configured_model()
    with pytest.raises(RuntimeError, match="memory_allocate"):
        model.add_material({"MaterialID": 1, "Type": "LinearElastic", "YoungModulus": 1e6})


@pytest.mark.parametrize("material", [{"PoissonRatio": 0.6}, {"PoissonRatio": 0.5}, {"YoungModulus": -1.}, {"Density": 0.}])
def test_invalid_elastic_parameters(build_model, material):
    """Elastic constants must describe a stable isotropic solid."""
    model = build_model(dimension=2, domain=(1., 1.))
    parameter = {"MaterialID": 1, "Type": "LinearElastic", "Density": 1000., "YoungModulus": 1e6, "PoissonRatio": 0.3}
    parameter.update(material)
    with pytest.raises(ValueError):
        model.add_material(parameter)


def test_material_id_outside_allocation(build_model):
    """Material ids run from 1 to max_material_number."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(ValueError):
        model.add_material({"MaterialID": 2, "Type": "LinearElastic", "YoungModulus": 1e6})
    with pytest.raises(ValueError):
        model.add_material({"MaterialID": 0, "Type": "LinearElastic", "YoungModulus": 1e6})


@pytest.mark.parametrize("body", [{"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.06, "MaterialID": 1},
                                  {"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 3},
                                  {"Position": [[0.5, 0.5]], "Volume": 0., "ParticleSize": 0.025, "MaterialID": 1},
                                  {"Position": [[0.5, 0.5], [0.6, 0.5]], "Volume": [0.05 ** 2] * 3, "ParticleSize": 0.025, "MaterialID": 1},
                                  {"Position": [[1.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1},
                                  {"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1, "BodyID": 1},
                                  {"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1, "Stress": [0., 0., 0.]}])
def test_invalid_body(build_model, body):
    """Particle attributes are checked before any particle is created."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(ValueError):
        model.add_body(body)
    assert model.scene.particleNum[0] == 0


def test_particle_capacity(build_model, block):
    """Adding more particles than allocated fails without partial insertion."""
    model = build_model(dimension=2, domain=(1., 1.), max_particle_number=10)
    model.add_body({"Position": block([0., 0.], [0.1, 0.1], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    with pytest.raises(ValueError, match="max_particle_number"):
        model.add_body({"Position": block([0.5, 0.5], [0.7, 0.7], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    assert model.scene.particleNum[0] == 4


def test_body_defaults(build_model):
    """Density comes from the material, the particle size from the volume and mass from density times volume."""
    model = build_model(dimension=2, domain=(1., 1.))
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.04 ** 2, "MaterialID": 1})
    model.add_body({"Position": [[0.3, 0.3]], "Volume": 0.04 ** 2, "Mass": 4., "MaterialID": 1})
    data = model.get_particle_data()

    assert np.allclose(data["psize"][0], [0.02, 0.02, 0.05])
    assert np.isclose(data["mass"][0], 1000. * 0.04 ** 2)
    assert np.isclose(data["mass"][1], 4.)
    assert np.allclose(data["velocity"], 0.)
    assert np.all(data["bodyID"] == 0)


def test_solver_parameters(build_model):
    """Time step controls are validated and the save interval defaults to a twentieth of the run."""
    model = build_model(dimension=2, domain=(1., 1.), simulation_time=2.)
    assert np.isclose(model.sims.save_interval, 0.1)
    with pytest.raises(ValueError):
        model.modify_parameters(Timestep=-1.)
    with pytest.raises(ValueError):
        model.modify_parameters(CFL=1.5)
    model.modify_parameters(Timestep=2e-5, SaveInterval=0.5)
    assert np.isclose(model.sims.dt[None], 2e-5)
    assert np.isclose(model.sims.save_interval, 0.5)


def test_run_without_particles(build_model):
    """A model with no material points cannot be advanced."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(RuntimeError, match="add_body"):
        model.step(1)


def test_invalid_post_function(build_model):
    """Post functions must be callables."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(TypeError):
        model.add_postfunctions(writer="vtk")
