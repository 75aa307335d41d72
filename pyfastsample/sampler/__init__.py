"""
Separable resampling engine for PyFastSample.

Core Modules:
- filters: filter kinds and kernel functions (box, nearest, gaussian,
  hermite, mitchell, lanczos)
- mad_program: generation and channel expansion of multiply-add programs
- execution: Taichi kernels replaying a program over every image row
  (weighted sum, minimum reduction, normals renormalization)
- image_sampler: 2D resampling via two 1D passes and single-point sampling

Usage:
    import pyfastsample as ps

    ps.init("cpu")
    img = ps.image.LinearImage.from_numpy(data)

    # Downsample with the default filter (lanczos when minifying)
    small = ps.sampler.resample_image(img, 64, 64)

    # Conservative depth downsampling
    depth = ps.sampler.resample_image(img, 64, 64, "minimum")

    # Filtered value at a floating point position
    px = ps.sampler.sample_at(img, 0.3, 0.7, "mitchell")

Author: B.G.
"""

from .errors import PreconditionError
from .filters import (
    BOX,
    FILTER_BOX,
    FILTER_DEFAULT,
    FILTER_GAUSSIAN_NORMALS,
    FILTER_GAUSSIAN_SCALARS,
    FILTER_HERMITE,
    FILTER_LANCZOS,
    FILTER_MINIMUM,
    FILTER_MITCHELL,
    FILTER_NAMES,
    FILTER_NEAREST,
    GAUSSIAN,
    HERMITE,
    LANCZOS,
    MITCHELL,
    NEAREST,
    FilterFn,
    create_filter_function,
    filter_from_string,
    filter_name,
    resolve_filter,
)
from .mad_program import (
    MadInstruction,
    MadProgram,
    expand_mad_program,
    generate_mad_program,
)
from .execution import execute_mad_program, normalize
from .image_sampler import (
    BOUNDARY_MODES,
    BoundaryRule,
    ImageSampler,
    Region,
    resample_image,
    resample_image_1d,
    sample_at,
)

__all__ = [
    "PreconditionError",
    # Filters
    "FilterFn",
    "BOX", "NEAREST", "GAUSSIAN", "HERMITE", "MITCHELL", "LANCZOS",
    "FILTER_DEFAULT", "FILTER_BOX", "FILTER_NEAREST", "FILTER_HERMITE",
    "FILTER_GAUSSIAN_SCALARS", "FILTER_GAUSSIAN_NORMALS", "FILTER_MITCHELL",
    "FILTER_LANCZOS", "FILTER_MINIMUM", "FILTER_NAMES",
    "create_filter_function", "filter_from_string", "filter_name", "resolve_filter",
    # MAD programs
    "MadInstruction", "MadProgram", "generate_mad_program", "expand_mad_program",
    "execute_mad_program", "normalize",
    # Driver
    "BOUNDARY_MODES", "BoundaryRule", "ImageSampler", "Region",
    "resample_image", "resample_image_1d", "sample_at",
]
