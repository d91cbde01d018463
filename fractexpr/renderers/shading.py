from __future__ import annotations

from typing import Tuple

import numpy as np

BLACK = (0, 0, 0)

def magnitude(z: complex) -> float:
    with np.errstate(over="ignore", invalid="ignore"):
        return float(np.hypot(z.real, z.imag))

def distance_shade(r: float, dr: float, width: int) -> int:
    """Gray level for the distance estimate ``width * 0.7 * ln(r) * r / dr``.

    ``ln(r)`` and ``dr == 0`` are evaluated as IEEE floats: NaN maps to 0,
    infinities clamp to the nearest end of the 0..255 range.
    """
    with np.errstate(all="ignore"):
        r64 = np.float64(r)
        distance = np.float64(width) * 0.7 * np.log(r64) * r64 / np.float64(dr)
        level = np.floor(255.0 * distance)
    if np.isnan(level):
        return 0
    return int(np.clip(level, 0.0, 255.0))

def distance_color(r: float, dr: float, width: int) -> Tuple[int, int, int]:
    v = distance_shade(r, dr, width)
    return (v, v, v)

def escape_color(escaped_at, iterations: int) -> Tuple[int, int, int]:
    """Red ramp by escape iteration; black for orbits that never escaped."""
    if escaped_at is None:
        return BLACK
    return (int(escaped_at / iterations * 255.0), 0, 0)
