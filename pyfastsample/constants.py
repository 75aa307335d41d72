"""
Global constants for PyFastSample.

Holds the numeric types used for Taichi fields and NumPy buffers, the numeric
thresholds shared by the filter kernels and the MAD program generator, and
the defaults of the sampler configuration.

Author: B.G.
"""

import numpy as np
import taichi as ti

# Sample storage
FLOAT_TYPE_TI = ti.f32
FLOAT_TYPE_NP = np.float32

# MAD program indices (signed, see MadInstruction)
INDEX_TYPE_TI = ti.i32
INDEX_TYPE_NP = np.int32

# Below this distance sinc(t) is taken as 1
SINC_EPSILON = 1e-5

# Allowed drift of a renormalized target weight sum around 1
WEIGHT_SUM_TOLERANCE = 1e-5

# Sampler defaults
DEFAULT_RADIUS_MULTIPLIER = 1.0

# Flat buffers are indexed with ti.i32 inside the kernels
MAX_FLAT_SIZE = 2**31 - 1

# Smallest arena allocated for a MAD program; capacities grow by doubling
MIN_PROGRAM_CAPACITY = 64
