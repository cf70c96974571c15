import numpy as np
import pytest


def deviatoric_invariant(stress):
    mean = np.sum(stress[:, 0:3], axis=1) / 3.
    deviatoric = stress[:, 0:3] - mean[:, None]
    return 0.5 * np.sum(deviatoric ** 2, axis=1) + np.sum(stress[:, 3:6] ** 2, axis=1)


def radial_velocity(position, rate, centre):
    return rate * (position - np.asarray(centre))


def linear_soft(peak, residual, start, end, current):
    fraction = np.clip((current - start) / (end - start), 0., 1.)
    return peak - (peak - residual) * fraction


def middle_circumscribed_parameters(cohesion, friction):
    q_fai = 6. * np.sin(friction) / (np.sqrt(3.) * (3. + np.sin(friction)))
    k_fai = 6. * np.cos(friction) * cohesion / (np.sqrt(3.) * (3. + np.sin(friction)))
    return q_fai, k_fai


def test_linear_elastic_moduli(build_model):
    """Shear and bulk moduli and the P-wave speed follow from Young modulus and Poisson ratio."""
    model = build_model(dimension=2, domain=(0.4, 0.4), boundary="Periodic")
    model.add_body({"Position": [[0.2, 0.2]], "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})
    material = model.scene.material.get_material(1)

    assert np.isclose(material.shear, 1e6 / 2.6)
    assert np.isclose(material.bulk, 1e6 / 1.2)
    assert np.isclose(material.max_sound_speed, np.sqrt(1e6 * 0.7 / 1.3 / 0.4 / 1000.))


def test_grady_kipp_damage_never_decreases(build_model, block):
    """Damage grows under sustained tension and is never healed."""
    materials = {"MaterialID": 1, "Type": "LinearElastic", "Density": 1000., "YoungModulus": 1e6, "PoissonRatio": 0.3,
                 "Damage": {"Model": "GradyKipp", "M": 6., "K": 1e30}}
    model = build_model(dimension=2, domain=(1., 1.), materials=materials)
    position = block([0.3, 0.3], [0.7, 0.7], 0.05)
    model.add_body({"Position": position, "Velocity": radial_velocity(position, 10., [0.5, 0.5]), "Volume": 0.05 ** 2,
                    "ParticleSize": 0.025, "MaterialID": 1})

    previous_damage = model.get_particle_data()["state_vars"]["damage"]
    assert np.allclose(previous_damage, 0.)
    for _ in range(20):
        assert model.step(1)
        damage = model.get_particle_data()["state_vars"]["damage"]
        assert np.all(damage >= previous_damage)
        assert np.all(damage <= 1.)
        previous_damage = damage
    assert np.max(previous_damage) > 0.


def test_von_mises_stress_stays_on_yield_surface(build_model, block):
    """The radial return keeps sqrt(3 J2) at or below the yield stress."""
    yield_stress = 1e3
    materials = {"MaterialID": 1, "Type": "ElasticPerfectlyPlastic", "Density": 1000., "YoungModulus": 1e6, "PoissonRatio": 0.3,
                 "YieldStress": yield_stress}
    model = build_model(dimension=2, domain=(1., 1.), materials=materials)
    position = block([0.3, 0.3], [0.7, 0.7], 0.05)
    model.add_body({"Position": position, "Velocity": radial_velocity(position, -10., [0.5, 0.5]) * np.array([1., 0.2]), "Volume": 0.05 ** 2,
                    "ParticleSize": 0.025, "MaterialID": 1})

    for _ in range(20):
        assert model.step(1)
        stress = model.get_particle_data()["stress"]
        assert np.all(np.sqrt(3. * deviatoric_invariant(stress)) <= yield_stress * (1. + 1e-8))
    assert np.max(model.get_particle_data()["state_vars"]["epstrain"]) > 0.


def test_drucker_prager_respects_tension_cutoff(build_model, block):
    """The mean stress of a Drucker-Prager body never exceeds the tensile strength."""
    tensile = 50.
    materials = {"MaterialID": 1, "Type": "DruckerPrager", "Density": 1000., "YoungModulus": 1e6, "PoissonRatio": 0.3,
                 "Cohesion": 1e3, "Friction": 30., "Dilation": 0., "Tensile": tensile}
    model = build_model(dimension=2, domain=(1., 1.), materials=materials)
    position = block([0.3, 0.3], [0.7, 0.7], 0.05)
    model.add_body({"Position": position, "Velocity": radial_velocity(position, 10., [0.5, 0.5]), "Volume": 0.05 ** 2,
                    "ParticleSize": 0.025, "MaterialID": 1})

    q_fai, k_fai = middle_circumscribed_parameters(1e3, np.radians(30.))
    for _ in range(10):
        assert model.step(1)
        stress = model.get_particle_data()["stress"]
        mean_stress = np.sum(stress[:, 0:3], axis=1) / 3.
        assert np.all(mean_stress <= tensile * (1. + 1e-8))
        assert np.all(np.sqrt(deviatoric_invariant(stress)) + q_fai * mean_stress - k_fai <= 1e-8 * k_fai)


@pytest.mark.parametrize("parameter", [{"Friction": 95.}, {"Friction": 30., "Dilation": -5.}, {"Friction": 30., "Cohesion": -1.}])
def test_drucker_prager_rejects_invalid_strength(build_model, parameter):
    """Friction and dilation angles lie in [0, 90) degrees and cohesion is non-negative."""
    model = build_model(dimension=2, domain=(1., 1.))
    material = {"MaterialID": 1, "Type": "DruckerPrager", "Density": 2000., "YoungModulus": 1e7, "PoissonRatio": 0.3}
    material.update(parameter)
    with pytest.raises(ValueError):
        model.add_material(material)


def test_drucker_prager_rejects_unknown_surface_fit(build_model):
    """Only the circumscribed, middle circumscribed and inscribed fits are known."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(RuntimeError):
        model.add_material({"MaterialID": 1, "Type": "DruckerPrager", "YoungModulus": 1e7, "Friction": 30., "dpType": "Outer"})


def test_newtonian_fluid_validation(build_model):
    """Viscosity cannot be negative and fluids cannot carry a damage model."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(ValueError):
        model.add_material({"MaterialID": 1, "Type": "Newtonian", "Density": 1000., "Modulus": 2e6, "Viscosity": -1.})
    with pytest.raises(RuntimeError):
        model.add_material({"MaterialID": 1, "Type": "Newtonian", "Density": 1000., "Modulus": 2e6, "Viscosity": 1e-3,
                            "Damage": {"Model": "GradyKipp", "M": 6., "K": 1e30}})


def test_newtonian_fluid_at_rest_stays_stress_free(build_model, block):
    """A fluid body without motion stays stress free and keeps its density."""
    materials = {"MaterialID": 1, "Type": "Newtonian", "Density": 1000., "Modulus": 2e6, "Viscosity": 1e-3}
    model = build_model(dimension=2, domain=(1., 1.), materials=materials)
    model.add_body({"Position": block([0.3, 0.3], [0.7, 0.7], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})

    assert model.step(5)
    data = model.get_particle_data()
    assert np.allclose(data["stress"], 0., atol=1e-6)
    assert np.allclose(data["state_vars"]["rho"], 1000.)


def test_newtonian_pressure_is_positive_in_compression(build_model, block):
    """The fluid pressure state variable holds p = -tr(stress) / 3."""
    materials = {"MaterialID": 1, "Type": "Newtonian", "Density": 1000., "Modulus": 2e6, "Viscosity": 1e-3}
    model = build_model(dimension=2, domain=(1., 1.), boundary="Periodic", materials=materials)
    model.add_body({"Position": block([0., 0.], [1., 1.], 0.05), "Volume": 0.05 ** 2, "ParticleSize": 0.025,
                    "Stress": [-100., -100., -100., 0., 0., 0.], "MaterialID": 1})
    assert np.allclose(model.get_particle_data()["state_vars"]["pressure"], 100.)

    assert model.step(3)
    data = model.get_particle_data()
    assert np.allclose(data["state_vars"]["pressure"], 100., rtol=1e-8)
    assert np.allclose(np.sum(data["stress"][:, 0:3], axis=1) / 3., -100., rtol=1e-8)


def test_unknown_constitutive_model(build_model):
    """An unsupported material type is reported with the available ones."""
    model = build_model(dimension=2, domain=(1., 1.))
    with pytest.raises(RuntimeError, match="LinearElastic"):
        model.add_material({"MaterialID": 1, "Type": "MohrCoulomb", "YoungModulus": 1e7})

def damaged_block(build_model, block):
    materials = {"MaterialID": 1, "Type": "LinearElastic", "Density": 1000., "YoungModulus": 1e6, "PoissonRatio": 0.3,
                 "Damage": {"Model": "GradyKipp", "M": 6., "K": 1e30}}
    model = build_model(dimension=2, domain=(1., 1.), boundary="Periodic", materials=materials)
    model.add_body({"Position": block([0., 0.], [1., 1.], 0.05), "Velocity": [1., 0.5], "Volume": 0.05 ** 2, "ParticleSize": 0.025,
                    "Stress": [0., 0., 0., 500., 0., 0.], "MaterialID": 1})
    model.scene.material.stateVars.damage.fill(0.2)
    return model


def test_constant_damage_degrades_stress_once(build_model, block):
    """Under rigid translation a fixed damage scales the stress by (1 - D) without compounding over steps."""
    model = damaged_block(build_model, block)

    for _ in range(10):
        assert model.step(1)
        data = model.get_particle_data()
        assert np.allclose(data["state_vars"]["damage"], 0.2)
        assert np.allclose(data["stress"][:, 3], 400., rtol=1e-8)
        assert np.allclose(data["state_vars"]["undamaged_stress"][:, 3], 500., rtol=1e-8)


def test_prescribed_stress_of_damaged_body(build_model, block):
    """A stress set on a damaged body is the degraded stress the particles carry afterwards."""
    model = damaged_block(build_model, block)
    model.update_particle_properties("stress", [0., 0., 0., 800., 0., 0.], override=True, bodyID=0)
    assert np.allclose(model.get_particle_data()["state_vars"]["undamaged_stress"][:, 3], 1000.)

    assert model.step(3)
    assert np.allclose(model.get_particle_data()["stress"][:, 3], 800., rtol=1e-8)


def test_drucker_prager_shear_return_with_linear_softening(build_model, block):
    """A sheared block stays on the softened yield surface while cohesion and friction decay."""
    c_peak, c_residual = 100., 20.
    fai_peak, fai_residual = np.radians(30.), np.radians(20.)
    pdstrain_residual = 0.05
    materials = {"MaterialID": 1, "Type": "DruckerPrager", "Density": 1000., "YoungModulus": 1e6, "PoissonRatio": 0.3,
                 "Cohesion": c_peak, "Friction": 30., "Dilation": 0., "ResidualCohesion": c_residual, "ResidualFriction": 20.,
                 "PlasticDevStrain": 0., "ResidualPlasticDevStrain": pdstrain_residual, "SoftType": "Linear"}
    model = build_model(dimension=2, domain=(1., 1.), materials=materials)
    position = block([0.3, 0.3], [0.7, 0.7], 0.05)
    velocity = np.stack([10. * (position[:, 1] - 0.5), np.zeros(position.shape[0])], axis=-1)
    model.add_body({"Position": position, "Velocity": velocity, "Volume": 0.05 ** 2, "ParticleSize": 0.025, "MaterialID": 1})

    epdstrain = model.get_particle_data()["state_vars"]["epdstrain"]
    for _ in range(30):
        cohesion = linear_soft(c_peak, c_residual, 0., pdstrain_residual, epdstrain)
        friction = np.maximum(linear_soft(fai_peak, fai_residual, 0., pdstrain_residual, epdstrain), 1e-6)
        q_fai, k_fai = middle_circumscribed_parameters(cohesion, friction)

        assert model.step(1)
        data = model.get_particle_data()
        stress = data["stress"]
        mean_stress = np.sum(stress[:, 0:3], axis=1) / 3.
        yield_function = np.sqrt(deviatoric_invariant(stress)) + q_fai * mean_stress - k_fai
        assert np.all(yield_function <= 1e-8 * c_peak)
        assert np.all(data["state_vars"]["epdstrain"] >= epdstrain)
        epdstrain = data["state_vars"]["epdstrain"]

    assert np.max(epdstrain) > 0.
    softened_cohesion = linear_soft(c_peak, c_residual, 0., pdstrain_residual, np.max(epdstrain))
    softened_friction = linear_soft(fai_peak, fai_residual, 0., pdstrain_residual, np.max(epdstrain))
    assert c_residual <= softened_cohesion < c_peak
    assert fai_residual <= softened_friction < fai_peak
