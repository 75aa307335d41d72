"""
Pool of reusable Taichi fields.

A TPField wraps one Taichi field plus its pool bookkeeping. Callers request a
field with get_tpfield(), use `.field` inside kernels and call `.release()`
once done so the next caller with the same dtype and shape gets it back
without a new allocation.

Author: B.G.
"""

import taichi as ti


def _normalize_shape(shape):
    if isinstance(shape, int):
        return (shape,)
    shape = tuple(int(s) for s in shape)
    if len(shape) == 0:
        raise ValueError("Pooled fields need at least one dimension")
    return shape


class TPField:
    """
    Pool-managed Taichi field.

    Attributes:
        field: The underlying Taichi field
        dtype: Taichi dtype of the field
        shape: Shape tuple of the field
        in_use: True while a caller holds the field

    Author: B.G.
    """

    def __init__(self, pool, dtype, shape):
        self._pool = pool
        self.dtype = dtype
        self.shape = shape
        self.field = ti.field(dtype=dtype, shape=shape)
        self.in_use = False

    @property
    def size(self):
        n = 1
        for s in self.shape:
            n *= s
        return n

    def release(self):
        """Give the field back to its pool."""
        self._pool.release(self)

    def __repr__(self):
        state = "in use" if self.in_use else "free"
        return f"TPField(dtype={self.dtype}, shape={self.shape}, {state})"


class TaiPool:
    """
    Cache of Taichi fields keyed by (dtype, shape).

    Fields are never evicted: every distinct key keeps its allocations (and
    the kernels compiled for them) until clear(). Callers with varying sizes
    should request bucket_size() rounded shapes so keys repeat.

    Author: B.G.
    """

    def __init__(self):
        self._fields = {}

    def get_tpfield(self, dtype, shape):
        """
        Borrow a field of the requested dtype and shape.

        Returns a free pooled field when one matches, otherwise allocates a
        new one. The content of a reused field is whatever its last user left
        in it; callers fill it before reading.

        Args:
            dtype: Taichi dtype (e.g. ti.f32)
            shape: int or tuple of ints

        Returns:
            TPField: field marked as in use
        """
        shape = _normalize_shape(shape)
        key = (dtype, shape)
        bucket = self._fields.setdefault(key, [])
        for tpf in bucket:
            if not tpf.in_use:
                tpf.in_use = True
                return tpf

        tpf = TPField(self, dtype, shape)
        tpf.in_use = True
        bucket.append(tpf)
        return tpf

    def release(self, tpfield):
        if not tpfield.in_use:
            raise RuntimeError(f"{tpfield} released twice")
        tpfield.in_use = False

    def clear(self):
        """
        Forget every pooled field.

        Must be called after ti.init()/ti.reset(): fields created by a previous
        Taichi runtime are no longer valid.
        """
        self._fields = {}

    def stats(self):
        """Return a summary dict of the pool content."""
        total = 0
        in_use = 0
        cells = 0
        for bucket in self._fields.values():
            for tpf in bucket:
                total += 1
                cells += tpf.size
                if tpf.in_use:
                    in_use += 1
        return {
            "fields": total,
            "in_use": in_use,
            "free": total - in_use,
            "keys": len(self._fields),
            "cells": cells,
        }

    def __repr__(self):
        s = self.stats()
        return f"TaiPool({s['fields']} fields, {s['in_use']} in use)"


def bucket_size(n, minimum=64, maximum=None):
    """
    Round a flat field size up to a power of two.

    Args:
        n: Required number of cells (>= 1)
        minimum: Smallest size handed out
        maximum: Cap on the rounded size; n itself is returned when the
                 power of two would exceed it

    Returns:
        int: size >= n
    """
    n = int(n)
    if n < 1:
        raise ValueError(f"Field size must be >= 1, got {n}")
    size = max(int(minimum), 1 << (n - 1).bit_length())
    if maximum is not None and size > maximum:
        return n
    return size


taipool = TaiPool()


def get_temp_field(dtype, shape):
    """Shortcut for taipool.get_tpfield(dtype=dtype, shape=shape)."""
    return taipool.get_tpfield(dtype=dtype, shape=shape)
