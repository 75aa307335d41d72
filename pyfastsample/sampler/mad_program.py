"""
Multiply-add (MAD) programs for separable resampling.

A MAD program is a flat list of instructions

    target[target_index] += source[source_index] * weight

that resizes one row of samples. It is generated once per axis pass from the
filter kernel and then replayed on every row by the executor, so the cost of
evaluating the kernel does not depend on the image height.

Nomenclature used by the generator:
    n....number of samples in the row
    x....normalized coordinate in [0, 1], 0/1 being the outer pixel edges
    i....integer sample index, 0 is the left-most sample

Author: B.G.
"""

import math
from typing import NamedTuple

import numpy as np

from .. import constants as cte
from .. import pool


class MadInstruction(NamedTuple):
    target_index: int
    source_index: int
    weight: float


class MadProgram:
    """
    Reusable buffer of MAD instructions.

    Instructions live in three pre-sized NumPy arrays; only the first `count`
    entries are meaningful. clear() keeps the allocation so the same program
    can be regenerated for the horizontal and the vertical pass, or for many
    point samples, without reallocating. Capacity doubles when exhausted.

    The program also owns the pooled Taichi fields it was last uploaded to.
    Call release() when done with it.

    Author: B.G.
    """

    def __init__(self, capacity=cte.MIN_PROGRAM_CAPACITY):
        capacity = max(int(capacity), 1)
        self._target = np.zeros(capacity, dtype=cte.INDEX_TYPE_NP)
        self._source = np.zeros(capacity, dtype=cte.INDEX_TYPE_NP)
        self._weight = np.zeros(capacity, dtype=cte.FLOAT_TYPE_NP)
        self.count = 0
        self._fields = None

    @property
    def capacity(self):
        return self._target.shape[0]

    @property
    def target_indices(self):
        return self._target[: self.count]

    @property
    def source_indices(self):
        return self._source[: self.count]

    @property
    def weights(self):
        return self._weight[: self.count]

    def clear(self):
        self.count = 0

    def reserve(self, n):
        """Grow the buffers so they hold at least n instructions."""
        if n <= self.capacity:
            return
        capacity = self.capacity
        while capacity < n:
            capacity *= 2
        for name in ("_target", "_source", "_weight"):
            old = getattr(self, name)
            new = np.zeros(capacity, dtype=old.dtype)
            new[: self.count] = old[: self.count]
            setattr(self, name, new)

    def append(self, target_index, source_indices, weights):
        """Append the instructions of one target sample."""
        n = len(source_indices)
        if n == 0:
            return
        self.reserve(self.count + n)
        end = self.count + n
        self._target[self.count : end] = target_index
        self._source[self.count : end] = source_indices
        self._weight[self.count : end] = weights
        self.count = end

    def assign(self, target_indices, source_indices, weights):
        """Replace the whole content of the program."""
        n = len(target_indices)
        self.reserve(n)
        self._target[:n] = target_indices
        self._source[:n] = source_indices
        self._weight[:n] = weights
        self.count = n

    def weight_sums(self, ntarget):
        """Sum of weights per target index, length ntarget."""
        return np.bincount(
            self.target_indices, weights=self.weights.astype(np.float64), minlength=ntarget
        )

    def upload(self):
        """
        Copy the instructions into pooled Taichi fields.

        The fields have the program capacity as shape and are kept until the
        capacity changes or release() is called.

        Returns:
            tuple: (target_field, source_field, weight_field) Taichi fields
        """
        if self._fields is not None and self._fields[0].shape[0] != self.capacity:
            self.release()
        if self._fields is None:
            self._fields = (
                pool.taipool.get_tpfield(dtype=cte.INDEX_TYPE_TI, shape=(self.capacity,)),
                pool.taipool.get_tpfield(dtype=cte.INDEX_TYPE_TI, shape=(self.capacity,)),
                pool.taipool.get_tpfield(dtype=cte.FLOAT_TYPE_TI, shape=(self.capacity,)),
            )
        tgt, src, wgt = self._fields
        tgt.field.from_numpy(self._target)
        src.field.from_numpy(self._source)
        wgt.field.from_numpy(self._weight)
        return tgt.field, src.field, wgt.field

    def release(self):
        """Return the uploaded fields to the pool."""
        if self._fields is not None:
            for tpf in self._fields:
                tpf.release()
            self._fields = None

    def __len__(self):
        return self.count

    def __iter__(self):
        for k in range(self.count):
            yield MadInstruction(
                int(self._target[k]), int(self._source[k]), float(self._weight[k])
            )

    def __getitem__(self, k):
        if not -self.count <= k < self.count:
            raise IndexError("MAD instruction index out of range")
        k %= self.count
        return MadInstruction(int(self._target[k]), int(self._source[k]), float(self._weight[k]))

    def __repr__(self):
        return f"MadProgram(count={self.count}, capacity={self.capacity})"


def generate_mad_program(
    ntarget, nsource, left, right, filter_fn, radius_multiplier=1.0, program=None
):
    """
    Generate the MAD instructions resizing a row of nsource samples to ntarget.

    left / right select the source range within [0, 1]: 0 is the left edge of
    the left-most pixel and 1 the right edge of the right-most pixel. The
    range is stretched over the whole target row.

    Source samples outside the image or outside the range are dropped when the
    filter rejects external samples, and the remaining weights of each target
    are renormalized to sum to 1. A target without any contributing sample
    gets no instruction.

    Args:
        ntarget: Number of target samples
        nsource: Number of source samples in the full row
        left: Left edge of the source range (normalized)
        right: Right edge of the source range (normalized)
        filter_fn: FilterFn to evaluate
        radius_multiplier: Widens (>1) or narrows (<1) the kernel
        program: MadProgram to append to (a new one when None)

    Returns:
        MadProgram: the program, ordered by target then source index

    Raises:
        ValueError: On non-positive sizes, an empty range or a non-positive
            radius multiplier
    """
    if ntarget < 1 or nsource < 1:
        raise ValueError(f"Row sizes must be >= 1, got ntarget={ntarget}, nsource={nsource}")
    if not right > left:
        raise ValueError(f"Empty source range [{left}, {right})")
    if radius_multiplier <= 0:
        raise ValueError("radius_multiplier must be > 0")

    if program is None:
        program = MadProgram()

    width = right - left
    fnsource = nsource * width

    # Minification is decided on the region size alone, the radius multiplier
    # only affects the domain scale
    minifying = ntarget < fnsource
    domain_scale = (ntarget if minifying else fnsource) / radius_multiplier

    # Half-width of the candidate window, normalized then in source samples
    filter_bounds = domain_scale * abs(filter_fn.bounding_radius)
    source_bounds = filter_bounds * nsource

    dtarget = 1.0 / ntarget
    for itarget in range(ntarget):
        xtarget = (itarget + 0.5) * dtarget

        # Centre of the target sample in source index space
        center = (left + xtarget * width) * nsource
        lower = math.floor(center - source_bounds)
        upper = math.ceil(center + source_bounds)
        if filter_fn.reject_external_samples:
            # Candidates outside the image are rejected below anyway
            lower = max(lower, 0)
            upper = min(upper, nsource - 1)
        isource = np.arange(lower, upper + 1)
        xsource = (((isource + 0.5) / nsource) - left) / width

        if filter_fn.reject_external_samples:
            inside = (isource >= 0) & (isource < nsource) & (xsource >= 0.0) & (xsource < 1.0)
            isource = isource[inside]
            xsource = xsource[inside]

        t = domain_scale * np.abs(xsource - xtarget)
        weights = np.broadcast_to(np.asarray(filter_fn.fn(t), dtype=np.float64), t.shape)

        nonzero = weights != 0
        isource = isource[nonzero]
        weights = weights[nonzero]

        total = weights.sum()
        if total == 0:
            continue

        weights = weights / total
        assert abs(weights.sum() - 1.0) < cte.WEIGHT_SUM_TOLERANCE
        program.append(itarget, isource, weights)

    return program


def expand_mad_program(nchannels, program):
    """
    Turn a single-channel program into one for interleaved nchannels data.

    Every instruction becomes nchannels instructions, one per channel, with
    both indices scaled by nchannels and offset by the channel. Order is kept.
    """
    if nchannels == 1:
        return program

    offsets = np.arange(nchannels, dtype=np.int64)
    tgt = (program.target_indices.astype(np.int64)[:, None] * nchannels + offsets).ravel()
    src = (program.source_indices.astype(np.int64)[:, None] * nchannels + offsets).ravel()
    wgt = np.repeat(program.weights, nchannels)
    program.assign(tgt, src, wgt)
    return program
