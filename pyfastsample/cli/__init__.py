"""
Command Line Interface for PyFastSample

This module provides command line utilities for PyFastSample, enabling
image resampling from the terminal without writing Python scripts.

Available Commands:
- resample: Resize/filter an image file (pfs-resample)
- sample: Print the filtered pixel at a normalized position (pfs-sample)

Author: B.G.
"""

_CLI_SUBMODULES = {
    "resample": (".resample_commands", "resample"),
    "sample": (".resample_commands", "sample"),
}

__all__ = list(_CLI_SUBMODULES.keys())


def __getattr__(name):
    info = _CLI_SUBMODULES.get(name)
    if info is None:
        raise AttributeError(name)
    pkg, attr = info
    import importlib
    mod = importlib.import_module(pkg, __package__)
    obj = getattr(mod, attr)
    globals()[name] = obj
    return obj
