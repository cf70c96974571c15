import numpy as np
import pytest
import taichi as ti


@pytest.fixture(autouse=True)
def taichi_runtime():
    ti.init(arch=ti.cpu, default_fp=ti.f64, default_ip=ti.i32, fast_math=False, offline_cache=False, log_level=ti.ERROR)
    yield
    ti.reset()


def block_particles(start, end, spacing):
    """Material points filling an axis-aligned box, one per sub-cell of width `spacing`."""
    axes = [np.arange(s + 0.5 * spacing, e, spacing) for s, e in zip(start, end)]
    mesh = np.meshgrid(*axes, indexing='ij')
    return np.stack([m.reshape(-1) for m in mesh], axis=-1)


@pytest.fixture
def build_model():
    def build(dimension=2, domain=(1., 1.), boundary="Auto", gravity=None, mapping="USL", alphaPIC=0., timestep=1e-4, simulation_time=1e-2,
              materials=None, element_size=0.1, max_particle_number=400, max_body_number=1, save_interval=None):
        from geompm.mpm.mainMPM import MPM

        model = MPM(log=False)
        model.set_configuration(log=False,
                                dimension=dimension,
                                domain=list(domain),
                                boundary=boundary,
                                gravity=[0.] * dimension if gravity is None else gravity,
                                alphaPIC=alphaPIC,
                                mapping=mapping)
        solver = {"Timestep": timestep, "SimulationTime": simulation_time}
        if save_interval is not None:
            solver["SaveInterval"] = save_interval
        model.set_solver(solver, log=False)
        if materials is None:
            materials = {"MaterialID": 1, "Type": "LinearElastic", "Density": 1000., "YoungModulus": 1e6, "PoissonRatio": 0.3}
        material_number = len(materials) if isinstance(materials, list) else 1
        model.memory_allocate({"max_material_number": material_number, "max_particle_number": max_particle_number, "max_body_number": max_body_number}, log=False)
        model.add_material(materials)
        model.add_element({"ElementSize": element_size})
        return model
    return build


@pytest.fixture
def block():
    return block_particles
