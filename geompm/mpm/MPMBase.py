import time
import warnings

from geompm.mpm.engines.Engine import Engine
from geompm.mpm.SceneManager import myScene
from geompm.mpm.Simulation import Simulation
from geompm.utils.constants import Threshold


class Solver:
    sims: Simulation
    scene: myScene
    engine: Engine

    def __init__(self, sims, scene, engine):
        self.sims = sims
        self.scene = scene
        self.engine = engine

        self.last_save_time = 0.
        self.postprocess = []
        self.failure = None
        self.is_prepared = False
        self.is_compiled = False

    def set_callback_function(self, functions):
        if not functions is None:
            if isinstance(functions, (list, tuple)):
                for f in functions:
                    self.set_callback_function(f)
            elif isinstance(functions, dict):
                for f in functions.values():
                    self.set_callback_function(f)
            elif callable(functions):
                self.postprocess.append(functions)
            else:
                raise TypeError(f"Post functions should be callables, but {type(functions).__name__} is given")

    def save_file(self):
        print('# Step =', self.sims.current_step, '   ', 'Save Number =', self.sims.current_print, '   ', 'Simulation time =', self.sims.current_time, '\n')
        for function in self.postprocess:
            function(self.sims, self.scene)

    def prepare(self):
        """
        Settles everything that depends on the full model: the grid boundary policy, the
        active constraint kernels, the initial stress constraints and the admissible time step.
        """
        if self.scene.particle is None or int(self.scene.particleNum[0]) == 0:
            raise RuntimeError("No material point has been added. Call add_body first")
        policy = self.scene.boundary.resolve_boundary_policy(self.sims, self.scene.element)
        self.scene.element.set_boundary_policy(policy)
        self.engine.choose_boundary_constraints(self.sims, self.scene)
        self.engine.apply_particle_stress_constraints(self.sims, self.scene)
        self.check_critical_timestep()
        self.is_prepared = True

    def check_critical_timestep(self):
        print("#", " Check Timestep ... ...".ljust(67))
        critical_timestep = self.scene.get_critical_timestep()
        if self.sims.isadaptive:
            self.sims.update_critical_timestep(self.sims.CFL * critical_timestep)
        elif self.sims.CFL * critical_timestep < self.sims.dt[None]:
            warnings.warn(f"The time step {self.sims.dt[None]} exceeds CFL * critical time step = {self.sims.CFL * critical_timestep}")
            self.sims.update_critical_timestep(self.sims.CFL * critical_timestep)
        else:
            print("The prescribed time step is sufficiently small\n")

    def record_failure(self, step, current_time, quantity, particleID=-1):
        message = f"Numerical instability at step {step} (time = {current_time}): {quantity}"
        if particleID >= 0:
            message += f" first detected on particle {particleID}"
        self.failure = {"step": step, "time": current_time, "quantity": quantity, "particle": particleID, "message": message}

    def iterate(self, current_time, step, sims: Simulation) -> bool:
        """
        Advances the model by one explicit step. Returns False when the step is numerically
        unstable; the reason is kept in self.failure.
        """
        sims.current_time = current_time
        sims.current_step = step
        if not self.is_prepared:
            self.prepare()
        if self.scene.boundary.time_functions:
            self.scene.boundary.update_time_dependent_values(sims)

        critical_timestep = self.scene.get_critical_timestep()
        if sims.isadaptive:
            sims.dt[None] = sims.CFL * critical_timestep
            sims.delta = sims.dt[None]
        elif sims.delta > critical_timestep:
            self.record_failure(step, current_time, f"time step {sims.delta} exceeds the critical time step {critical_timestep}")
            return False

        self.engine.compute(sims, self.scene)

        if step % sims.check_interval == 0:
            report = self.engine.check_particle_health(sims, self.scene)
            if report[3] >= 0:
                if report[0] > 0:
                    quantity = f"non-finite velocity or position on {report[0]} particles"
                elif report[1] > 0:
                    quantity = f"non-finite stress on {report[1]} particles"
                else:
                    quantity = f"node mass underflow around {report[2]} particles"
                self.record_failure(step, current_time, quantity, int(report[3]))
                return False
        self.failure = None
        return True

    def report_failure(self):
        print("#", " Simulation Failed ".center(67, "="), "#")
        print(self.failure["message"], '\n')
        raise FloatingPointError(self.failure["message"])

    def core(self):
        if not self.iterate(self.sims.current_time, self.sims.current_step, self.sims):
            self.report_failure()
        self.sims.current_time += self.sims.delta
        self.sims.current_step += 1

    def compile(self):
        print("Compiling first ... ...")
        start_time = time.time()
        self.core()
        end_time = time.time()
        print(f'Compiling time = {end_time - start_time} \n')
        self.is_compiled = True

    def Solver(self):
        print("#", " Start Simulation ".center(67,"="), "#")
        self.prepare()
        end_time = self.sims.current_time + self.sims.time
        if self.sims.current_time < Threshold:
            self.save_file()
            self.sims.current_print += 1
            self.last_save_time = -0.8 * self.sims.delta

        start_time = time.time()
        while self.sims.current_time < end_time - 0.1 * self.sims.delta:
            if self.is_compiled:
                self.core()
            else:
                self.compile()

            if self.sims.current_time - self.last_save_time + 0.1 * self.sims.delta > self.sims.save_interval:
                self.save_file()
                self.last_save_time = 1. * self.sims.current_time
                self.sims.current_print += 1

        if abs(self.sims.current_time - self.last_save_time) > 0.99 * self.sims.save_interval:
            self.save_file()
            self.last_save_time = 1. * self.sims.current_time
            self.sims.current_print += 1

        print('Physical time = ', time.time() - start_time)
        print("#", " End Simulation ".center(67,"="), "#", '\n')
