"""
Taichi field pool for PyFastSample.

Taichi fields are expensive to create and cannot be freed individually, so the
sampler borrows its buffers from a process-wide pool instead of allocating new
ones for every pass. Fields are keyed by dtype and shape; a released field is
handed out again to the next request with the same key.

Usage:
    import taichi as ti
    import pyfastsample as ps

    ti.init(ti.cpu)
    buf = ps.pool.taipool.get_tpfield(dtype=ti.f32, shape=(1024,))
    buf.field.fill(0.0)
    ...
    buf.release()

Author: B.G.
"""

from .taipool import TaiPool, TPField, bucket_size, get_temp_field, taipool

__all__ = ["TaiPool", "TPField", "bucket_size", "get_temp_field", "taipool"]
