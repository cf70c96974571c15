import numpy as np


def no_operation(*args, **kwargs):
    pass


def read_dict_list(dict_list, func, **kwargs):
    if isinstance(dict_list, dict):
        func(dict_list, **kwargs)
    elif isinstance(dict_list, (list, tuple)):
        for dictionary in dict_list:
            func(dictionary, **kwargs)
    else:
        raise TypeError(f"Expected a dict or a list of dicts, but {type(dict_list).__name__} is given")


def pad_vector(value, dimension, fill=0.):
    value = np.asarray(value, dtype=float)
    if dimension == 2 and value.shape[-1] == 2:
        padding = np.full(value.shape[:-1] + (1,), fill)
        value = np.concatenate([value, padding], axis=-1)
    return value
