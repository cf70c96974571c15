# Copyright (c) 2023, multiscale geomechanics lab, Zhejiang University
# This file is from the GeoTaichi project, released under the GNU General Public License v3.0

__author__ = "Shi-Yihao, Guo-Ning"
__version__ = "0.1.0"
__license__ = "GNU License"
__description__ = 'An explicit Material Point Method solver for solids and fluids'

import taichi as ti
import psutil, platform
import sys, os, datetime


class Logger(object):
    def __init__(self, filename='Default.log', path='./'):
        self.terminal = sys.stdout
        self.path = os.path.join(path, filename)
        self.log = open(self.path, "a", encoding='utf8')

    def write(self, message):
        self.terminal.write(message)
        self.log.write(message)

    def flush(self):
        self.terminal.flush()
        self.log.flush()


def make_print_to_file(path='./'):
    filename = datetime.datetime.now().strftime('day'+'%Y_%m_%d')
    if not os.path.exists(path):
        os.makedirs(path)
    sys.stdout = Logger(filename+'.log', path=path)


def init(arch="cpu", cpu_max_num_threads=0, offline_cache=True, debug=False, default_fp="float64", default_ip="int32", kernel_profiler=False, fast_math=False, log=True, log_path='./'):
    """
    Initializes the Taichi runtime environment.
    Args:
        arch (str): The execution architecture. Only "cpu" is supported.
        cpu_max_num_threads (int): The maximum number of threads. Defaults to the maximum number of threads available on the CPU.
        offline_cache (bool): Whether to store compiled files. Defaults to True.
        debug (bool): Whether to enable debug mode.
        default_fp (str): The default floating-point type. Can be "float64" or "float32".
        default_ip (str): The default integer type. Can be "int64" or "int32".
        kernel_profiler (bool): Whether to enable kernel function profiling.
        fast_math (bool): Whether to allow unsafe floating-point optimisations. Keep it off so that the NaN checks stay valid.
        log (bool): Whether to copy the standard output into a daily log file.
        log_path (str): Folder of the log file.
    """
    if default_fp == "float64": default_fp = ti.f64
    elif default_fp == "float32": default_fp = ti.f32
    else: raise RuntimeError("Only ['float64', 'float32'] is available for default type of float")

    if default_ip == "int64": default_ip = ti.i64
    elif default_ip == "int32": default_ip = ti.i32
    else: raise RuntimeError("Only ['int64', 'int32'] is available for default type of int")

    if arch == "cpu":
        cpu_name = platform.processor()
        cpu_core = psutil.cpu_count(False)
        cpu_logic = psutil.cpu_count(True)
        memory = psutil.virtual_memory()
        print(f"Using device {cpu_name} (Core: {cpu_core}, Logic: {cpu_logic}, Available memory: {bytes_to_GB(memory.available)}GB)")
        if cpu_max_num_threads == 0:
            ti.init(arch=ti.cpu, offline_cache=offline_cache, debug=debug, default_fp=default_fp, default_ip=default_ip, kernel_profiler=kernel_profiler, fast_math=fast_math, log_level=ti.ERROR)
        else:
            ti.init(arch=ti.cpu, cpu_max_num_threads=cpu_max_num_threads, offline_cache=offline_cache, debug=debug, default_fp=default_fp, default_ip=default_ip, kernel_profiler=kernel_profiler, fast_math=fast_math, log_level=ti.ERROR)
    else:
        raise RuntimeError("arch is not recognized, please choose in the following: ['cpu']")

    if log:
        make_print_to_file(log_path)


def bytes_to_GB(sizes):
    return round(sizes / (1024 ** 3), 2)


def MPM(title=None, log=True):
    if title is None:
        title = __description__

    from geompm.mpm.mainMPM import MPM
    return MPM(title=title, log=log)
