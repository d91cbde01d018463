from __future__ import annotations

import logging
import os
from typing import Any, Dict, Tuple

import numpy as np
from PIL import Image

from fractexpr.expr.errors import ExprError
from fractexpr.expr.nodes import Expr
from fractexpr.expr.parser import parse_source
from fractexpr.renderers.cpu_dual import render_pixels
from fractexpr.util.logging_setup import get_logger

FORMULAS = ("init", "first", "iter")

def parse_formulas(cfg: Dict[str, Any]) -> Tuple[Expr, Expr, Expr]:
    logger = get_logger()
    trees = []
    for name in FORMULAS:
        try:
            trees.append(parse_source(cfg[name]))
        except ExprError as e:
            logger.error("Could not parse %s formula %r at %s: %s", name, cfg[name], e.position, e.message)
            raise
    return trees[0], trees[1], trees[2]

def build_image(pixels: np.ndarray, width: int, height: int) -> Image.Image:
    if pixels.shape != (width * height, 3):
        raise ValueError(f"Expected {width * height} RGB pixels, got shape {pixels.shape}")
    return Image.fromarray(pixels.reshape(height, width, 3))

def save_image(img: Image.Image, path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    img.save(path, format="PNG", optimize=True)
    return path

def render_image(*, cfg: Dict[str, Any], log_queue=None, log_level: int = logging.INFO) -> Image.Image:
    init, first, iter_ = parse_formulas(cfg)
    width = int(cfg["width"])
    height = int(cfg["height"])

    pixels = render_pixels(
        init=init,
        first=first,
        iter_=iter_,
        width=width,
        height=height,
        iterations=int(cfg["iterations"]),
        coloring=str(cfg["coloring"]),
        workers=cfg.get("workers"),
        log_queue=log_queue,
        log_level=log_level,
    )
    return build_image(pixels, width, height)
