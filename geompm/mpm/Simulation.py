import taichi as ti

from geompm.utils.constants import PERIODIC, CLIP, AUTO


class Simulation(object):
    def __init__(self) -> None:
        self.dimension = 3
        self.domain = [0., 0., 0.]
        self.boundary = [AUTO, AUTO, AUTO]
        self.gravity = [0., 0., 0.]
        self.background_damping = 0.
        self.alphaPIC = 0.
        self.mapping = "USL"
        self.check_interval = 1

        self.dt = ti.field(float, shape=())
        self.delta = 0.
        self.current_time = 0.
        self.current_step = 0
        self.current_print = 0

        self.max_body_num = 1
        self.max_material_num = 0
        self.max_particle_num = 1

        self.time = 0.
        self.CFL = 0.5
        self.isadaptive = False
        self.save_interval = 1e6
        self.contact_detection = None

    def set_dimension(self, dimension):
        if dimension not in [2, 3]:
            raise RuntimeError(f"Keyword:: /dimension: {dimension}/ is invalid. Only [2, 3] is valid!")
        self.dimension = int(dimension)

    def set_domain(self, domain):
        domain = list(domain)
        if len(domain) != self.dimension:
            raise ValueError(f"Keyword:: /domain/ should have {self.dimension} components, but {domain} is given")
        if any(length <= 0. for length in domain):
            raise ValueError(f"Keyword:: /domain: {domain}/ should be positive along each axis")
        self.domain = domain

    def set_boundary(self, boundary):
        BOUNDARY = {
                        "Periodic": PERIODIC,
                        "Clip": CLIP,
                        "Auto": AUTO
                   }
        if isinstance(boundary, str):
            boundary = [boundary] * self.dimension
        boundary = list(boundary)
        if len(boundary) != self.dimension:
            raise ValueError(f"Keyword:: /boundary/ should have {self.dimension} components, but {boundary} is given")
        for b in boundary:
            if b not in BOUNDARY:
                raise RuntimeError(f"Keyword:: /boundary: {b}/ is invalid. The valid type are given as follows: {list(BOUNDARY.keys())}")
        self.boundary = [BOUNDARY[b] for b in boundary]
        if self.dimension == 2:
            self.boundary.append(PERIODIC)

    def set_gravity(self, gravity):
        gravity = list(gravity)
        if len(gravity) != self.dimension:
            raise ValueError(f"Keyword:: /gravity/ should have {self.dimension} components, but {gravity} is given")
        if len(gravity) == 2:
            gravity = [gravity[0], gravity[1], 0.]
        self.gravity = gravity

    def set_background_damping(self, background_damping):
        if background_damping < 0. or background_damping >= 1.:
            raise ValueError(f"Keyword:: /background_damping: {background_damping}/ should lie in [0, 1)")
        self.background_damping = background_damping

    def set_alpha(self, alphaPIC):
        if alphaPIC < 0. or alphaPIC > 1.:
            raise ValueError(f"Keyword:: /alphaPIC: {alphaPIC}/ should lie in [0, 1]")
        self.alphaPIC = alphaPIC

    def set_velocity_projection_scheme(self, velocity_projection):
        typelist = ["PIC", "FLIP", "PIC/FLIP"]
        if not velocity_projection in typelist:
            raise RuntimeError(f"KeyWord:: /velocity_projection: {velocity_projection}/ is invalid. The valid type are given as follows: {typelist}")
        if velocity_projection == "PIC":
            self.alphaPIC = 1.
        elif velocity_projection == "FLIP":
            self.alphaPIC = 0.

    def set_mapping_scheme(self, mapping):
        typelist = ["USL", "USF", "MUSL"]
        if not mapping in typelist:
            raise RuntimeError(f"KeyWord:: /mapping: {mapping}/ is invalid. The valid type are given as follows: {typelist}")
        self.mapping = mapping

    def set_check_interval(self, check_interval):
        if int(check_interval) <= 0:
            raise ValueError(f"Keyword:: /check_interval: {check_interval}/ should be a positive integer")
        self.check_interval = int(check_interval)

    def set_timestep(self, timestep):
        if timestep <= 0.:
            raise ValueError(f"Keyword:: /Timestep: {timestep}/ should be positive")
        self.dt[None] = timestep
        self.delta = timestep

    def set_simulation_time(self, time):
        if time < 0.:
            raise ValueError(f"Keyword:: /SimulationTime: {time}/ should not be negative")
        self.time = time

    def set_CFL(self, CFL):
        if CFL <= 0. or CFL > 1.:
            raise ValueError(f"Keyword:: /CFL: {CFL}/ should lie in (0, 1]")
        self.CFL = CFL

    def set_adaptive_timestep(self, isadaptive):
        self.isadaptive = bool(isadaptive)

    def set_save_interval(self, save_interval):
        if save_interval <= 0.:
            raise ValueError(f"Keyword:: /SaveInterval: {save_interval}/ should be positive")
        self.save_interval = save_interval

    def set_material_num(self, material_num):
        if material_num <= 0:
            raise ValueError("Max material number should be larger than 0!")
        self.max_material_num = int(material_num + 1)

    def set_body_num(self, body_num):
        if body_num <= 0:
            raise ValueError("Max body number should be larger than 0!")
        if body_num > 255:
            raise ValueError("Max body number should not exceed 255!")
        self.max_body_num = int(body_num)

    def set_particle_num(self, particle_num):
        if particle_num <= 0:
            raise ValueError("Max particle number should be larger than 0!")
        self.max_particle_num = int(particle_num)

    def set_contact_detection(self, contact_detection):
        valid = [None, "MPMContact"]
        if contact_detection not in valid:
            raise RuntimeError(f"Keyword:: /contact_detection/ is wrong. Only the following is valid: {valid}")
        self.contact_detection = contact_detection

    def update_critical_timestep(self, dt):
        print("The time step is corrected as:", dt, '\n')
        self.dt[None] = dt
        self.delta = dt
