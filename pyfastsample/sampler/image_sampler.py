"""
Separable image resampling and point sampling.

resample_image() resizes an image with two 1D passes: the rows are resized
first, the result is transposed so that columns become rows, resized again
and transposed back. Each pass generates a MAD program for its axis, expands
it to the channel count and replays it on every row.

sample_at() runs the same machinery with a single target sample per axis to
filter one pixel at a floating point position.

Boundary handling: source samples that fall outside the image or the sampled
region are excluded and the remaining weights renormalized. This is the only
mode implemented; any other mode is refused with a PreconditionError.

Author: B.G.
"""

import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from .. import constants as cte
from ..image import LinearImage, transpose
from .errors import PreconditionError
from .execution import execute_mad_program
from .filters import (
    FILTER_DEFAULT,
    FILTER_LANCZOS,
    FILTER_MITCHELL,
    create_filter_function,
    resolve_filter,
)
from .mad_program import MadProgram, expand_mad_program, generate_mad_program

BOUNDARY_EXCLUDE = "exclude"
BOUNDARY_REGION = "region"
BOUNDARY_CLAMP = "clamp"
BOUNDARY_REPEAT = "repeat"
BOUNDARY_MIRROR = "mirror"
BOUNDARY_COLOR = "color"
BOUNDARY_NEAREST = "nearest"

BOUNDARY_MODES = (
    BOUNDARY_EXCLUDE,
    BOUNDARY_REGION,
    BOUNDARY_CLAMP,
    BOUNDARY_REPEAT,
    BOUNDARY_MIRROR,
    BOUNDARY_COLOR,
    BOUNDARY_NEAREST,
)


@dataclass
class Region:
    """Normalized source rectangle, (0, 0, 1, 1) being the whole image."""

    left: float = 0.0
    top: float = 0.0
    right: float = 1.0
    bottom: float = 1.0


@dataclass
class BoundaryRule:
    """What to do with samples beyond one edge. color is used by mode 'color'."""

    mode: str = BOUNDARY_EXCLUDE
    color: Optional[Sequence[float]] = None


@dataclass
class ImageSampler:
    """
    Configuration of resample_image().

    Attributes:
        horizontal_filter: Filter kind or name used for the row pass
        vertical_filter: Filter kind or name used for the column pass
        filter_radius_multiplier: Scales the kernel support (> 0)
        source_region: Part of the source mapped onto the whole target
        east, north, west, south: Boundary rules of the four edges
    """

    horizontal_filter: object = FILTER_DEFAULT
    vertical_filter: object = FILTER_DEFAULT
    filter_radius_multiplier: float = cte.DEFAULT_RADIUS_MULTIPLIER
    source_region: Region = field(default_factory=Region)
    east: BoundaryRule = field(default_factory=BoundaryRule)
    north: BoundaryRule = field(default_factory=BoundaryRule)
    west: BoundaryRule = field(default_factory=BoundaryRule)
    south: BoundaryRule = field(default_factory=BoundaryRule)

    @classmethod
    def uniform(cls, filter_kind, **kwargs):
        """Sampler using the same filter on both axes."""
        return cls(horizontal_filter=filter_kind, vertical_filter=filter_kind, **kwargs)

    def check_boundaries(self):
        """
        Raises:
            ValueError: For an unknown boundary mode, or mode 'color' without
                a color
            PreconditionError: For any mode other than 'exclude'
        """
        for edge in ("east", "north", "west", "south"):
            rule = getattr(self, edge)
            mode = rule.mode
            if mode not in BOUNDARY_MODES:
                raise ValueError(
                    f"Unknown boundary mode '{mode}' on {edge} edge. Valid modes: {BOUNDARY_MODES}"
                )
            if mode == BOUNDARY_COLOR and rule.color is None:
                raise ValueError(f"Boundary mode 'color' on {edge} edge needs a color")
            if mode != BOUNDARY_EXCLUDE:
                raise PreconditionError(
                    f"Boundary mode '{mode}' on {edge} edge is not yet implemented."
                )


def _as_image(source):
    if isinstance(source, LinearImage):
        return source
    if isinstance(source, np.ndarray):
        return LinearImage.from_numpy(source)
    raise TypeError("source must be a LinearImage or a numpy array")


def resample_image_1d(
    source, program, target_width, filter_kind, left, right, radius_multiplier
):
    """
    Resize the rows of an image.

    FILTER_DEFAULT resolves to mitchell when the row gets wider and to
    lanczos otherwise.

    Args:
        source: LinearImage
        program: MadProgram buffer, cleared and regenerated
        target_width: Width of the result
        filter_kind: Filter kind or name
        left, right: Normalized horizontal source range
        radius_multiplier: Kernel support multiplier

    Returns:
        LinearImage: (target_width, source.height, source.channels)
    """
    kind = resolve_filter(filter_kind)
    if kind == FILTER_DEFAULT:
        kind = FILTER_MITCHELL if target_width > source.width else FILTER_LANCZOS
    filter_fn = create_filter_function(kind)

    program.clear()
    generate_mad_program(
        target_width, source.width, left, right, filter_fn, radius_multiplier, program
    )
    expand_mad_program(source.channels, program)

    return execute_mad_program(source, program, target_width, kind)


def resample_image(source, width, height, sampler=None, verbose=False):
    """
    Resize and/or filter an image.

    Args:
        source: LinearImage, or numpy array of shape (h, w) or (h, w, c)
        width: Target width (>= 1)
        height: Target height (>= 1)
        sampler: ImageSampler, or a filter kind/name applied to both axes.
                 None uses the default sampler.
        verbose: Print pass timings

    Returns:
        LinearImage (or numpy array shaped like the input when a numpy array
        was given) of size (width, height) with the source channel count

    Raises:
        PreconditionError: If a boundary rule is not 'exclude'
        ValueError: For invalid sizes, regions or filter names

    Example:
        img = ps.image.load_image("photo.png")
        half = ps.resample_image(img, img.width // 2, img.height // 2, "lanczos")

        # Crop the central quarter and blur it
        smp = ps.ImageSampler.uniform("gaussian", source_region=ps.Region(0.25, 0.25, 0.75, 0.75))
        crop = ps.resample_image(img, 256, 256, smp)
    """
    if sampler is None:
        sampler = ImageSampler()
    elif not isinstance(sampler, ImageSampler):
        sampler = ImageSampler.uniform(sampler)

    sampler.check_boundaries()

    width, height = int(width), int(height)
    if width < 1 or height < 1:
        raise ValueError(f"Target dimensions must be >= 1, got ({width}, {height})")

    was_numpy = isinstance(source, np.ndarray)
    squeeze = was_numpy and source.ndim == 2
    image = _as_image(source)

    radius = sampler.filter_radius_multiplier
    region = sampler.source_region
    program = MadProgram()
    try:
        st = time.time()
        result = transpose(
            resample_image_1d(
                image, program, width, sampler.horizontal_filter, region.left, region.right, radius
            )
        )
        if verbose:
            print(f"Horizontal pass {image.width} -> {width} took {time.time() - st:.4f} s")

        st = time.time()
        result = transpose(
            resample_image_1d(
                result, program, height, sampler.vertical_filter, region.top, region.bottom, radius
            )
        )
        if verbose:
            print(f"Vertical pass {image.height} -> {height} took {time.time() - st:.4f} s")
    finally:
        program.release()

    if was_numpy:
        return result.to_numpy(squeeze=squeeze)
    return result


def sample_at(source, x, y, filter_kind=FILTER_DEFAULT, program=None):
    """
    Filter a single pixel at a normalized position.

    The footprint spans one source pixel on each side of (x, y) and is
    reduced to one sample per axis.

    Args:
        source: LinearImage or numpy array
        x, y: Normalized coordinates in [0, 1]; pixel i has its centre at
              (i + 0.5) / width
        filter_kind: Filter kind or name
        program: Optional MadProgram reused across many calls (the caller
                 releases it)

    Returns:
        numpy.ndarray: float32 array of length source.channels
    """
    image = _as_image(source)
    radius = 1.0
    left = x - radius / image.width
    top = y - radius / image.height
    right = x + radius / image.width
    bottom = y + radius / image.height

    owned = program is None
    if owned:
        program = MadProgram()
    try:
        row = transpose(resample_image_1d(image, program, 1, filter_kind, left, right, radius))
        row = resample_image_1d(row, program, 1, filter_kind, top, bottom, radius)
    finally:
        if owned:
            program.release()

    return row.pixel(0, 0)
