"""
Execution of MAD programs on images.

The same program is replayed on every row of the source image. The Taichi
kernels below parallelize over rows (outermost loop) and run the instructions
of a row serially; rows never share target samples, so no synchronization is
needed beyond the kernel launch itself. The program is fully generated and
uploaded before the launch.

Modes:
- weighted sum: target starts at 0 and accumulates source * weight
- minimum (FILTER_MINIMUM): target starts at +inf and keeps the smallest
  source sample reached by any instruction, weights are ignored
- normals (FILTER_GAUSSIAN_NORMALS): weighted sum followed by rescaling every
  3-channel pixel to unit length

Author: B.G.
"""

import numpy as np
import taichi as ti

from .. import constants as cte
from .. import pool
from ..image import LinearImage
from .errors import PreconditionError
from .filters import FILTER_GAUSSIAN_NORMALS, FILTER_MINIMUM


@ti.kernel
def mad_sum_kernel(
    source_field: ti.template(),
    target_field: ti.template(),
    target_index: ti.template(),
    source_index: ti.template(),
    weight: ti.template(),
    count: ti.i32,
    nrows: ti.i32,
    source_stride: ti.i32,
    target_stride: ti.i32,
):
    """
    Weighted-sum replay of a MAD program over every row.

    Args:
        source_field: Flat source samples (nrows * source_stride)
        target_field: Flat target samples (nrows * target_stride), zeroed
        target_index, source_index, weight: Program fields
        count: Number of valid instructions
        nrows: Number of rows
        source_stride: Samples per source row (width * channels)
        target_stride: Samples per target row (width * channels)
    """
    for row in range(nrows):
        sbase = row * source_stride
        tbase = row * target_stride
        for k in range(count):
            target_field[tbase + target_index[k]] += (
                source_field[sbase + source_index[k]] * weight[k]
            )


@ti.kernel
def mad_min_kernel(
    source_field: ti.template(),
    target_field: ti.template(),
    target_index: ti.template(),
    source_index: ti.template(),
    count: ti.i32,
    nrows: ti.i32,
    source_stride: ti.i32,
    target_stride: ti.i32,
):
    """
    Minimum-reduction replay of a MAD program over every row.

    target_field must be filled with +inf beforehand.
    """
    for row in range(nrows):
        sbase = row * source_stride
        tbase = row * target_stride
        for k in range(count):
            t = tbase + target_index[k]
            target_field[t] = ti.min(target_field[t], source_field[sbase + source_index[k]])


@ti.kernel
def normalize_vec3_kernel(field: ti.template(), npixels: ti.i32):
    """Rescale each (x, y, z) triplet to unit length. Zero vectors stay zero."""
    for p in range(npixels):
        base = p * 3
        x = field[base]
        y = field[base + 1]
        z = field[base + 2]
        norm2 = x * x + y * y + z * z
        if norm2 > 0.0:
            inv = 1.0 / ti.sqrt(norm2)
            field[base] = x * inv
            field[base + 1] = y * inv
            field[base + 2] = z * inv


def check_flat_size(nrows, stride, what="image"):
    """
    Refuse buffers whose flat indices overflow the 32-bit kernel arithmetic.

    Raises:
        ValueError: If nrows * stride exceeds MAX_FLAT_SIZE
    """
    size = int(nrows) * int(stride)
    if size > cte.MAX_FLAT_SIZE:
        raise ValueError(
            f"The {what} holds {size} samples, more than the {cte.MAX_FLAT_SIZE} "
            "addressable by the Taichi kernels"
        )
    return size


def _borrow_flat(size):
    """Pooled float field of at least size cells, rounded up so sizes share fields."""
    shape = pool.bucket_size(size, maximum=cte.MAX_FLAT_SIZE)
    return pool.get_temp_field(cte.FLOAT_TYPE_TI, (shape,))


def _upload_flat(tpf, values):
    if tpf.shape[0] == values.shape[0]:
        tpf.field.from_numpy(values)
        return
    padded = np.zeros(tpf.shape[0], dtype=cte.FLOAT_TYPE_NP)
    padded[: values.shape[0]] = values
    tpf.field.from_numpy(padded)


def _require_three_channels(channels):
    if channels != 3:
        raise PreconditionError(f"Must be a 3-channel image, got {channels} channels.")


def normalize(image):
    """
    Return a copy of a 3-channel image with every pixel scaled to unit length.

    Raises:
        PreconditionError: If the image does not have 3 channels
    """
    _require_three_channels(image.channels)
    npixels = image.width * image.height
    size = check_flat_size(npixels, 3)
    buf = _borrow_flat(size)
    try:
        _upload_flat(buf, image.flat())
        normalize_vec3_kernel(buf.field, npixels)
        data = buf.field.to_numpy()[:size]
    finally:
        buf.release()
    return LinearImage(image.width, image.height, 3, data)


def execute_mad_program(source, program, target_width, filter_kind):
    """
    Apply an expanded MAD program to every row of an image.

    Args:
        source: LinearImage, left untouched
        program: MadProgram already expanded to source.channels
        target_width: Width of the result
        filter_kind: Filter kind the program was generated for; selects the
            minimum or normals modes

    Returns:
        LinearImage: (target_width, source.height, source.channels)

    Raises:
        PreconditionError: For FILTER_GAUSSIAN_NORMALS on a non-3-channel image
        ValueError: If the source or the result is too large for 32-bit indexing
    """
    nchan = source.channels
    swidth = source.width
    sheight = source.height
    if filter_kind == FILTER_GAUSSIAN_NORMALS:
        _require_three_channels(nchan)

    source_stride = swidth * nchan
    target_stride = target_width * nchan
    source_size = check_flat_size(sheight, source_stride, "source image")
    target_size = check_flat_size(sheight, target_stride, "target image")

    if program.count > 0:
        assert program.source_indices.min() >= 0
        assert program.source_indices.max() < source_stride
        assert program.target_indices.max() < target_stride

    source_field = _borrow_flat(source_size)
    target_field = _borrow_flat(target_size)
    try:
        _upload_flat(source_field, source.flat())

        if filter_kind == FILTER_MINIMUM:
            target_field.field.fill(np.inf)
            if program.count > 0:
                tgt_idx, src_idx, _ = program.upload()
                mad_min_kernel(
                    source_field.field,
                    target_field.field,
                    tgt_idx,
                    src_idx,
                    program.count,
                    sheight,
                    source_stride,
                    target_stride,
                )
        else:
            target_field.field.fill(0.0)
            if program.count > 0:
                tgt_idx, src_idx, wgt = program.upload()
                mad_sum_kernel(
                    source_field.field,
                    target_field.field,
                    tgt_idx,
                    src_idx,
                    wgt,
                    program.count,
                    sheight,
                    source_stride,
                    target_stride,
                )
            if filter_kind == FILTER_GAUSSIAN_NORMALS:
                normalize_vec3_kernel(target_field.field, target_width * sheight)

        data = target_field.field.to_numpy()[:target_size]
    finally:
        source_field.release()
        target_field.release()

    return LinearImage(target_width, sheight, nchan, data)
