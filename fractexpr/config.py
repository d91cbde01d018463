import json
from typing import Any, Dict, Optional

from fractexpr.renderers.cpu_dual import COLORINGS, ITERATIONS

DEFAULTS: Dict[str, Any] = {
    "init": "(x / w * 3 - 2) + (y / h * 3 - 1.5) * i",
    "first": "c",
    "iter": "z * z + c",
    "width": 640,
    "height": 640,
    "iterations": ITERATIONS,
    "coloring": "distance",
    "workers": None,
    "output": "fractal.png",
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return dict(DEFAULTS)
    with open(config_path, "r", encoding="utf-8") as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError("Config JSON must be an object.")
    unknown = sorted(set(cfg) - set(DEFAULTS))
    if unknown:
        raise ValueError(f"Unknown config field(s): {', '.join(unknown)}")
    out = dict(DEFAULTS)
    out.update(cfg)
    return out

def _positive_int(cfg: Dict[str, Any], key: str) -> int:
    try:
        value = int(cfg[key])
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer.") from None
    if value <= 0:
        raise ValueError(f"{key} must be positive.")
    return value

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for r in ("init", "first", "iter", "width", "height", "output"):
        if cfg.get(r) is None:
            raise ValueError(f"Missing config field: {r}")

    out = dict(cfg)
    for key in ("init", "first", "iter", "output"):
        out[key] = str(cfg[key])
    out["width"] = _positive_int(cfg, "width")
    out["height"] = _positive_int(cfg, "height")
    out["iterations"] = _positive_int({"iterations": cfg.get("iterations", ITERATIONS)}, "iterations")
    out["workers"] = None if cfg.get("workers") is None else _positive_int(cfg, "workers")

    coloring = str(cfg.get("coloring", "distance"))
    if coloring not in COLORINGS:
        raise ValueError(f"coloring must be one of: {', '.join(COLORINGS)}")
    out["coloring"] = coloring
    return out
