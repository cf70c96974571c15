import numpy as np
import pytest


def test_single_particle_free_fall(build_model):
    """A lone particle under gravity gains exactly g*t of vertical velocity and none horizontally."""
    model = build_model(dimension=2, domain=(1., 1.), gravity=[0., -10.], timestep=1e-4, simulation_time=1e-2, save_interval=5e-3)
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    saved_steps = []
    model.add_postfunctions(record=lambda sims, scene: saved_steps.append(sims.current_step))
    model.run()

    velocity = model.get_particle_data()["velocity"]
    assert model.sims.current_step == 100
    assert np.isclose(velocity[0, 1], -0.1, rtol=1e-6)
    assert np.isclose(velocity[0, 0], 0., atol=1e-12)
    assert saved_steps[0] == 0
    assert len(saved_steps) >= 2


def test_total_mass_is_invariant(build_model, block):
    """Particle masses are never created or destroyed by stepping."""
    model = build_model(dimension=2, domain=(1., 1.), gravity=[0., -9.8])
    model.add_body({"Position": block([0.3, 0.3], [0.7, 0.7], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    initial_mass = model.get_total_mass()

    assert model.step(20)
    assert np.isclose(initial_mass, 1000. * 0.05 ** 2 * 64)
    assert np.isclose(model.get_total_mass(), initial_mass, rtol=1e-12)


def test_momentum_is_conserved_without_external_loads(build_model, block):
    """With no gravity, damping or constraints the internal forces cannot change the total momentum."""
    model = build_model(dimension=2, domain=(1., 1.))
    position = block([0.2, 0.3], [0.8, 0.7], 0.05)
    velocity = np.stack([0.5 * np.sin(2. * np.pi * position[:, 1]), 0.3 * np.cos(2. * np.pi * position[:, 0])], axis=-1)
    model.add_body({"Position": position, "Velocity": velocity, "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    initial_momentum = model.get_total_momentum()

    assert model.step(30)
    scale = model.get_total_mass() * np.max(np.abs(velocity))
    assert np.allclose(model.get_total_momentum(), initial_momentum, atol=1e-8 * scale)
    assert not np.allclose(model.get_particle_data()["stress"], 0.)


@pytest.mark.parametrize("mapping", ["USL", "USF", "MUSL"])
def test_rigid_translation_keeps_uniform_stress(build_model, block, mapping):
    """A body filling a periodic grid and moving rigidly sees no strain increment and keeps its stress."""
    model = build_model(dimension=2, domain=(0.4, 0.4), boundary="Periodic", mapping=mapping)
    initial_stress = [-2e3, -1e3, -1.5e3, 5e2, 0., 0.]
    model.add_body({"Position": block([0., 0.], [0.4, 0.4], 0.05), "Velocity": [0.2, -0.1], "Volume": 0.05 ** 2, "ParticleSize": 0.025,
                    "Stress": initial_stress, "MaterialID": 1})

    assert model.step(10)
    data = model.get_particle_data()
    assert np.allclose(data["stress"], initial_stress, rtol=1e-8, atol=1e-6)
    assert np.allclose(data["velocity"][:, 0:2], [0.2, -0.1])
    assert np.allclose(data["volume"], 0.05 ** 2)


def test_pic_blend_matches_flip_for_uniform_motion(build_model):
    """The PIC/FLIP blend does not alter a uniformly falling particle."""
    model = build_model(dimension=2, domain=(1., 1.), gravity=[0., -10.], alphaPIC=0.5)
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})

    assert model.step(10)
    assert np.isclose(model.get_particle_data()["velocity"][0, 1], -1e-2, rtol=1e-6)


def test_periodic_axis_wraps_particles(build_model):
    """Particles leaving a periodic axis re-enter on the opposite side."""
    model = build_model(dimension=2, domain=(1., 1.), boundary="Periodic", timestep=1e-3)
    model.add_body({"Position": [[0.995, 0.5]], "Velocity": [10., 0.], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})

    assert model.step(1)
    position = model.get_particle_data()["position"]
    assert np.isclose(position[0, 0], 0.005)


def test_instability_reports_failing_step(build_model, block):
    """Non-finite stress halts the run and names the failing step."""
    model = build_model(dimension=2, domain=(1., 1.))
    model.add_body({"Position": block([0.3, 0.3], [0.5, 0.5], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    model.update_particle_properties("stress", [np.nan] * 6, override=True, bodyID=0)

    assert model.step(1) is False
    assert model.solver.failure["step"] == 0
    assert "non-finite" in model.solver.failure["quantity"]


def test_run_raises_floating_point_error(build_model):
    """The run loop turns a failed step into FloatingPointError."""
    model = build_model(dimension=2, domain=(1., 1.))
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    model.update_particle_properties("stress", [np.inf, 0., 0., 0., 0., 0.], override=True, bodyID=0)

    with pytest.raises(FloatingPointError, match="step 0"):
        model.run()


def test_large_timestep_is_corrected_before_run(build_model):
    """A time step above CFL * critical time step is reduced with a warning."""
    model = build_model(dimension=2, domain=(1., 1.), timestep=1.)
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    sound_speed = model.scene.material.find_max_sound_speed()

    with pytest.warns(UserWarning, match="exceeds"):
        assert model.step(1)
    assert np.isclose(model.sims.dt[None], 0.5 * 0.1 / sound_speed)


def test_adaptive_timestep_follows_critical_timestep(build_model):
    """Adaptive stepping sets dt to CFL times the critical time step."""
    model = build_model(dimension=2, domain=(1., 1.))
    model.modify_parameters(AdaptiveTimestep=True, CFL=0.2)
    model.add_body({"Position": [[0.5, 0.5]], "Velocity": [1., 0.], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    sound_speed = model.scene.material.find_max_sound_speed()

    assert model.step(1)
    assert np.isclose(model.sims.delta, 0.2 * 0.1 / (sound_speed + 1.))


def test_mass_underflow_reports_failing_particle(build_model):
    """A particle whose nodes all fall below the mass cutoff fails the health check."""
    model = build_model(dimension=2, domain=(1., 1.))
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "Mass": 1e-12, "ParticleSize": 0.025, "MaterialID": 1})

    assert model.step(1) is False
    assert model.solver.failure["particle"] == 0
    assert "node mass underflow around 1 particles" in model.solver.failure["quantity"]


def test_step_beyond_critical_timestep_fails(build_model):
    """Without adaptive stepping a step is rejected once dt exceeds the critical time step."""
    model = build_model(dimension=2, domain=(1., 1.), boundary="Periodic")
    model.add_body({"Position": [[0.5, 0.5]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    assert model.step(1)

    model.update_particle_properties("velocity", [5000., 0.], override=True, bodyID=0)
    sound_speed = model.scene.material.find_max_sound_speed()
    assert model.step(1) is False
    assert model.solver.failure["step"] == 1
    assert "exceeds the critical time step" in model.solver.failure["quantity"]
    assert np.isclose(model.scene.get_critical_timestep(), 0.1 / (5000. + sound_speed))
