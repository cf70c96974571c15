import numpy as np
import pytest


def node_id(i, j, k, gnum=(11, 11, 2)):
    return i + j * gnum[0] + k * gnum[0] * gnum[1]


def test_fixed_base_keeps_zero_vertical_velocity(build_model, block):
    """Nodes on a fixed base carry zero vertical velocity after every step."""
    model = build_model(dimension=2, domain=(1., 1.), gravity=[0., -10.])
    model.add_body({"Position": block([0.3, 0.], [0.7, 0.2], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    model.add_boundary_condition({"BoundaryType": "VelocityConstraint", "StartPoint": [0., 0.], "EndPoint": [1., 0.], "VelocityY": 0.})

    assert model.step(5)
    base = model.scene.element.get_boundary_nodes([0., 0., 0.], [1., 0., 0.1])
    mass = model.scene.node.m.to_numpy()[base, 0]
    velocity = model.scene.node.momentum.to_numpy()[base, 0]
    loaded = mass > model.scene.mass_cut_off
    assert np.count_nonzero(loaded) > 0
    assert np.allclose(velocity[loaded, 1], 0.)


def test_auto_policy_clips_constrained_axes(build_model, block):
    """Axes touched by a boundary face are clipped, the others stay periodic, and clearing restores periodicity."""
    model = build_model(dimension=2, domain=(1., 1.))
    model.add_body({"Position": block([0.3, 0.], [0.7, 0.2], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    model.add_boundary_condition({"BoundaryType": "VelocityConstraint", "StartPoint": [0., 0.], "EndPoint": [1., 0.], "Velocity": [None, 0.]})

    assert model.step(1)
    assert [model.scene.element.periodic[d] for d in range(3)] == [1, 0, 1]

    model.clear_boundary_condition()
    assert model.step(1)
    assert [model.scene.element.periodic[d] for d in range(3)] == [1, 1, 1]
    assert not model.scene.boundary.has_nodal_constraint(1)


def test_explicit_policy_overrides_auto(build_model, block):
    """A prescribed policy is kept regardless of the boundary conditions."""
    model = build_model(dimension=2, domain=(1., 1.), boundary=["Clip", "Periodic"])
    model.add_body({"Position": block([0.3, 0.], [0.7, 0.2], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    model.add_boundary_condition({"BoundaryType": "VelocityConstraint", "StartPoint": [0., 0.], "EndPoint": [1., 0.], "Velocity": [None, 0.]})

    assert model.step(1)
    assert [model.scene.element.periodic[d] for d in range(3)] == [0, 1, 1]


def test_overwriting_a_constraint_warns(build_model):
    """Assigning a second condition to constrained nodes replaces the first and warns."""
    model = build_model(dimension=2, domain=(1., 1.))
    model.add_boundary_condition({"BoundaryType": "VelocityConstraint", "StartPoint": [0., 0.], "EndPoint": [1., 0.], "Velocity": [None, 0.]})
    with pytest.warns(UserWarning, match="overwritten"):
        model.add_boundary_condition({"BoundaryType": "VelocityConstraint", "StartPoint": [0., 0.], "EndPoint": [0.2, 0.], "Velocity": [0., 0.]})

    boundary = model.scene.boundary
    corner = node_id(0, 0, 0)
    assert boundary.nodal_tag[corner] == 2
    assert boundary.nodal_tag[node_id(5, 0, 0)] == 1
    assert np.count_nonzero(boundary.nodal_kind) == 11 * 2


def test_nodal_force_accelerates_particle(build_model):
    """A prescribed nodal force enters the momentum balance of the nodes it is applied to."""
    model = build_model(dimension=2, domain=(1., 1.), boundary="Periodic")
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    model.add_boundary_condition({"BoundaryType": "ForceConstraint", "NodeID": [node_id(5, 5, 0), node_id(5, 5, 1)], "Force": [1., None]})

    assert model.step(1)
    mass = model.get_total_mass()
    assert np.isclose(model.get_particle_data()["velocity"][0, 0], 2. * 1e-4 / mass)
    assert np.isclose(model.get_particle_data()["velocity"][0, 1], 0., atol=1e-12)


def test_time_dependent_particle_velocity(build_model):
    """Callable values are re-evaluated with the physical time before every step."""
    model = build_model(dimension=2, domain=(1., 1.))
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    model.add_boundary_condition({"BoundaryType": "ParticleVelocityConstraint", "BodyID": 0, "Velocity": lambda t: [1. + 2. * t, None]})

    assert model.step(3)
    data = model.get_particle_data()
    assert np.isclose(data["velocity"][0, 0], 1. + 2. * 2e-4)
    assert np.isclose(data["position"][0, 0], 0.5 + 1e-4 * (3. + 2. * (0. + 1e-4 + 2e-4)))


def test_particle_stress_constraint(build_model, block):
    """Constrained particles carry the prescribed stress after every stress update."""
    model = build_model(dimension=2, domain=(1., 1.), gravity=[0., -10.])
    model.add_body({"Position": block([0.3, 0.3], [0.7, 0.7], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    prescribed = [-1e3, -2e3, -1e3, 0., 0., 0.]
    model.add_boundary_condition({"BoundaryType": "ParticleStressConstraint", "StartPoint": [0.3, 0.6], "EndPoint": [0.7, 0.7], "Stress": prescribed})

    assert model.step(3)
    data = model.get_particle_data()
    top = data["position"][:, 1] > 0.6
    assert np.count_nonzero(top) == 16
    assert np.allclose(data["stress"][top], prescribed)
    assert not np.allclose(data["stress"][~top], prescribed)


def test_particle_constraint_needs_particles(build_model):
    """Particle conditions cannot be assigned before any body exists."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(RuntimeError, match="add_body"):
        model.add_boundary_condition({"BoundaryType": "ParticleStressConstraint", "BodyID": 0, "Stress": [0.] * 6})


@pytest.mark.parametrize("boundary, error", [({"BoundaryType": "Slip", "StartPoint": [0., 0.], "EndPoint": [1., 0.], "Velocity": [0., 0.]}, RuntimeError),
                                             ({"BoundaryType": "VelocityConstraint", "StartPoint": [0., 0.], "EndPoint": [2., 0.], "Velocity": [0., 0.]}, RuntimeError),
                                             ({"BoundaryType": "VelocityConstraint", "StartPoint": [0., 0.], "EndPoint": [1., 0.]}, KeyError),
                                             ({"BoundaryType": "VelocityConstraint", "NodeID": [10000], "Velocity": [0., 0.]}, ValueError)])
def test_invalid_boundary_condition(build_model, boundary, error):
    """Unknown kinds, out-of-domain boxes, empty prescriptions and bad node ids are rejected."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(error):
        model.add_boundary_condition(boundary)
