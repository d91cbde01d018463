from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from fractexpr.expr.evaluator import Context, Dual
from fractexpr.expr.nodes import Expr, flatten, rebuild
from fractexpr.renderers.shading import distance_color, escape_color, magnitude
from fractexpr.util.logging_setup import get_logger, logging_initialiser, range_logger

ITERATIONS = 200
ESCAPE_RADIUS = 2.0
COLORINGS = ("distance", "escape")

_G = {}

def _init_worker(init, first, iter_, width, height, iterations, coloring, log_queue, log_level):
    _G["init"] = rebuild(init)
    _G["first"] = rebuild(first)
    _G["iter"] = rebuild(iter_)
    _G["width"] = width
    _G["height"] = height
    _G["iterations"] = iterations
    _G["coloring"] = coloring
    if log_queue is not None:
        logging_initialiser(log_queue, log_level)

def render_range(
    init: Expr,
    first: Expr,
    iter_: Expr,
    start: int,
    length: int,
    width: int,
    height: int,
    iterations: int = ITERATIONS,
    coloring: str = "distance",
) -> np.ndarray:
    """Render the pixels with linear index ``start .. start + length``."""
    logger = range_logger(start, length)
    logger.debug("Range start")
    ctx = Context(width, height)
    escaped = 0
    limit = ESCAPE_RADIUS * ESCAPE_RADIUS
    out = np.zeros((length, 3), dtype=np.uint8)

    for k, n in enumerate(range(start, start + length)):
        y, x = divmod(n, width)
        ctx.x = float(x)
        ctx.y = float(y)
        # init and first see c = z = 0, whatever range the pixel lands in
        ctx.c = ctx.z = Dual(0j)

        ctx.c = Dual(ctx.eval(init).value, 1 + 0j)
        z = ctx.eval(first)

        escaped_at = None
        for i in range(iterations):
            ctx.z = z
            z = ctx.eval(iter_)
            v = z.value
            if v.real * v.real + v.imag * v.imag >= limit:
                escaped_at = i
                break
        if escaped_at is not None:
            escaped += 1

        if coloring == "escape":
            out[k] = escape_color(escaped_at, iterations)
        else:
            out[k] = distance_color(magnitude(z.value), magnitude(z.derivative), width)

    logger.debug("Range done escaped=%s bounded=%s", escaped, length - escaped)
    return out

def _render_range_worker(start_length: Tuple[int, int]):
    start, length = start_length
    pixels = render_range(
        _G["init"], _G["first"], _G["iter"], start, length,
        _G["width"], _G["height"], _G["iterations"], _G["coloring"],
    )
    return start, pixels

def partition(total: int, workers: int) -> List[Tuple[int, int]]:
    """Split ``total`` pixels into contiguous (start, length) ranges.

    Every range has ``total // workers`` pixels except the last, which also
    takes the remainder. A zero-sized chunk collapses to a single range.
    """
    chunk = total // workers if workers > 0 else 0
    if chunk == 0 or workers == 1:
        return [(0, total)]
    ranges = [(k * chunk, chunk) for k in range(workers - 1)]
    last = (workers - 1) * chunk
    ranges.append((last, total - last))
    return ranges

def render_pixels(
    *,
    init: Expr,
    first: Expr,
    iter_: Expr,
    width: int,
    height: int,
    iterations: int = ITERATIONS,
    coloring: str = "distance",
    workers: Optional[int] = None,
    log_queue=None,
    log_level: int = logging.INFO,
) -> np.ndarray:
    """Row-major ``(width * height, 3)`` uint8 pixel buffer.

    Raises the first ``ExprError`` in range order if any pixel fails.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")
    if iterations <= 0:
        raise ValueError("iterations must be positive.")
    if coloring not in COLORINGS:
        raise ValueError(f"coloring must be one of: {', '.join(COLORINGS)}")

    logger = get_logger()
    total = width * height
    ranges = partition(total, workers or os.cpu_count() or 1)

    logger.info("Render start size=%sx%s iterations=%s coloring=%s ranges=%s",
                width, height, iterations, coloring, len(ranges))

    if len(ranges) == 1:
        pixels = render_range(init, first, iter_, 0, total, width, height, iterations, coloring)
        logger.info("Render done (single range)")
        return pixels

    buf = np.zeros((total, 3), dtype=np.uint8)
    with ProcessPoolExecutor(
        max_workers=len(ranges),
        initializer=_init_worker,
        initargs=(flatten(init), flatten(first), flatten(iter_), width, height, iterations, coloring, log_queue, log_level),
    ) as pool:
        for start, band in pool.map(_render_range_worker, ranges):
            buf[start:start + band.shape[0]] = band

    logger.info("Render done (%s ranges)", len(ranges))
    return buf
