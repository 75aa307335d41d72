"""
Reconstruction and anti-aliasing filter kernels.

Each kernel maps a non-negative distance, expressed in units of the kernel's
own domain, to a weight. Kernels are evaluated on NumPy arrays so the MAD
program generator can weigh every candidate source sample of a target in one
call.

Filter kinds are small integer constants. Some kinds share a kernel shape but
change what the executor does with it:

- FILTER_MINIMUM: box footprint, executor keeps the minimum sample
- FILTER_GAUSSIAN_NORMALS: gaussian, executor renormalizes 3-vectors afterwards
- FILTER_DEFAULT: placeholder resolved by the driver (mitchell when
  magnifying, lanczos when minifying). It never maps to a kernel.

Author: B.G.
"""

import math
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .. import constants as cte
from .errors import PreconditionError

FILTER_DEFAULT = 0
FILTER_BOX = 1
FILTER_NEAREST = 2
FILTER_HERMITE = 3
FILTER_GAUSSIAN_SCALARS = 4
FILTER_GAUSSIAN_NORMALS = 5
FILTER_MITCHELL = 6
FILTER_LANCZOS = 7
FILTER_MINIMUM = 8

FILTER_NAMES = {
    FILTER_DEFAULT: "default",
    FILTER_BOX: "box",
    FILTER_NEAREST: "nearest",
    FILTER_HERMITE: "hermite",
    FILTER_GAUSSIAN_SCALARS: "gaussian_scalars",
    FILTER_GAUSSIAN_NORMALS: "gaussian_normals",
    FILTER_MITCHELL: "mitchell",
    FILTER_LANCZOS: "lanczos",
    FILTER_MINIMUM: "minimum",
}

# Short names accepted on the command line
_SHORT_NAMES = {
    "box": FILTER_BOX,
    "nearest": FILTER_NEAREST,
    "hermite": FILTER_HERMITE,
    "gaussian": FILTER_GAUSSIAN_SCALARS,
    "normals": FILTER_GAUSSIAN_NORMALS,
    "mitchell": FILTER_MITCHELL,
    "lanczos": FILTER_LANCZOS,
    "min": FILTER_MINIMUM,
}

_ALL_NAMES = dict(_SHORT_NAMES)
_ALL_NAMES.update({name: kind for kind, name in FILTER_NAMES.items()})


@dataclass(frozen=True)
class FilterFn:
    """
    A filter kernel.

    Attributes:
        fn: Weight function, vectorized over distances t >= 0
        bounding_radius: Half-width beyond which fn is zero. A radius of 0
            collapses the candidate window to the nearest source sample.
        reject_external_samples: Drop source samples that fall outside the
            image or the sampled region instead of resolving them
    """

    fn: Callable
    bounding_radius: float = 1.0
    reject_external_samples: bool = True

    def __call__(self, t):
        w = self.fn(t)
        if np.ndim(w) == 0:
            return float(w)
        return w


def _box(t):
    t = np.asarray(t, dtype=np.float64)
    return np.where(t <= 0.5, 1.0, 0.0)


def _gaussian(t):
    t = np.asarray(t, dtype=np.float64)
    scale = 1.0 / math.sqrt(0.5 * math.pi)
    return np.where(t >= 2.0, 0.0, np.exp(-2.0 * t * t) * scale)


def _hermite(t):
    t = np.asarray(t, dtype=np.float64)
    return np.where(t >= 1.0, 0.0, 2.0 * t * t * t - 3.0 * t * t + 1.0)


# Mitchell-Netravali cubic with B = C = 1/3
_B = 1.0 / 3.0
_C = 1.0 / 3.0
_P0 = (6.0 - 2.0 * _B) / 6.0
_P1 = 0.0
_P2 = (-18.0 + 12.0 * _B + 6.0 * _C) / 6.0
_P3 = (12.0 - 9.0 * _B - 6.0 * _C) / 6.0
_Q0 = (8.0 * _B + 24.0 * _C) / 6.0
_Q1 = (-12.0 * _B - 48.0 * _C) / 6.0
_Q2 = (6.0 * _B + 30.0 * _C) / 6.0
_Q3 = (-1.0 * _B - 6.0 * _C) / 6.0


def _mitchell(t):
    t = np.asarray(t, dtype=np.float64)
    inner = _P0 + _P1 * t + _P2 * t * t + _P3 * t * t * t
    outer = _Q0 + _Q1 * t + _Q2 * t * t + _Q3 * t * t * t
    return np.where(t >= 2.0, 0.0, np.where(t >= 1.0, outer, inner))


def sinc(t):
    """sin(pi t) / (pi t), with sinc(t) = 1 for t <= SINC_EPSILON."""
    t = np.asarray(t, dtype=np.float64)
    small = t <= cte.SINC_EPSILON
    safe = np.where(small, 1.0, t)
    return np.where(small, 1.0, np.sin(math.pi * safe) / (math.pi * safe))


def _lanczos(t):
    t = np.asarray(t, dtype=np.float64)
    s = sinc(t)
    return np.where(t >= 1.0, 0.0, s * s)


BOX = FilterFn(_box, 1.0)
NEAREST = FilterFn(_box, 0.0)
GAUSSIAN = FilterFn(_gaussian, 2.0)
HERMITE = FilterFn(_hermite, 1.0)
MITCHELL = FilterFn(_mitchell, 2.0)
LANCZOS = FilterFn(_lanczos, 1.0)

_KERNELS = {
    FILTER_MINIMUM: BOX,
    FILTER_BOX: BOX,
    FILTER_NEAREST: NEAREST,
    FILTER_HERMITE: HERMITE,
    FILTER_MITCHELL: MITCHELL,
    FILTER_LANCZOS: LANCZOS,
    FILTER_GAUSSIAN_NORMALS: GAUSSIAN,
    FILTER_GAUSSIAN_SCALARS: GAUSSIAN,
}


def create_filter_function(kind):
    """
    Return the kernel used by a filter kind.

    Raises:
        PreconditionError: If kind is FILTER_DEFAULT (must be resolved first)
        ValueError: If kind is not a known filter kind
    """
    if kind == FILTER_DEFAULT:
        raise PreconditionError("Unresolved filter type.")
    try:
        return _KERNELS[kind]
    except KeyError:
        raise ValueError(f"Unknown filter kind: {kind!r}") from None


def filter_from_string(name):
    """
    Parse a filter name, case-insensitively.

    Accepts the short names (box, nearest, hermite, gaussian, normals,
    mitchell, lanczos, min) and the canonical names of FILTER_NAMES.
    Unknown names give FILTER_DEFAULT.
    """
    return _ALL_NAMES.get(str(name).strip().lower(), FILTER_DEFAULT)


def resolve_filter(filter_kind):
    """
    Normalize a filter given as a kind constant or a name.

    Unlike filter_from_string, unknown values are an error.

    Raises:
        ValueError: If the value is neither a known kind nor a known name
    """
    if isinstance(filter_kind, str):
        key = filter_kind.strip().lower()
        if key not in _ALL_NAMES:
            raise ValueError(
                f"Unknown filter '{filter_kind}'. Valid names: {sorted(_ALL_NAMES)}"
            )
        return _ALL_NAMES[key]
    if filter_kind in FILTER_NAMES:
        return int(filter_kind)
    raise ValueError(f"Unknown filter kind: {filter_kind!r}")


def filter_name(kind):
    return FILTER_NAMES[kind]
