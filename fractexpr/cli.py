from __future__ import annotations

import argparse
import logging
from typing import Optional

from fractexpr.config import load_config, normalise_config
from fractexpr.expr.errors import SYNTAX, ExprError
from fractexpr.pipeline import render_image, save_image
from fractexpr.renderers.cpu_dual import COLORINGS
from fractexpr.util.logging_setup import configure_logging, create_log_queue, start_queue_listener, get_logger
from fractexpr.util.manifest import build_manifest, write_manifest

def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {text!r}")
    return value

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fractexpr", description="Render escape-time fractals from user-supplied formulas.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. Command-line values take precedence.")
    p.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default=None, help="Rotating log file path. Omit to disable file logging.")
    p.add_argument("--workers", type=_positive_int, default=None, help="Worker processes (defaults to the CPU count).")
    p.add_argument("--iterations", type=_positive_int, default=None, help="Iteration budget per pixel.")
    p.add_argument("--coloring", type=str, default=None, choices=list(COLORINGS), help="Pixel coloring mode.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render one image. Omitted arguments come from the config.")
    r.add_argument("init", nargs="?", default=None, help="Formula for c, e.g. '(x/w*3-2) + (y/h*3-1.5)*i'.")
    r.add_argument("first", nargs="?", default=None, help="Formula for the first z, e.g. 'c'.")
    r.add_argument("iter", nargs="?", default=None, help="Recurrence for the next z, e.g. 'z*z + c'.")
    r.add_argument("width", nargs="?", type=_positive_int, default=None, help="Image width in pixels.")
    r.add_argument("height", nargs="?", type=_positive_int, default=None, help="Image height in pixels.")
    r.add_argument("output", nargs="?", default=None, help="Output PNG path.")

    return p

def _apply_overrides(cfg: dict, args: argparse.Namespace) -> dict:
    for key in ("init", "first", "iter", "width", "height", "output", "workers", "iterations", "coloring"):
        value = getattr(args, key, None)
        if value is not None:
            cfg[key] = value
    return cfg

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.WARNING)
    listener_logger = configure_logging(level=log_level, console=True, log_file=args.log_file)

    queue = create_log_queue()
    listener = start_queue_listener(queue, listener_logger)

    logger = get_logger()

    try:
        try:
            cfg = normalise_config(_apply_overrides(load_config(args.config), args))
        except (OSError, ValueError) as e:
            print(f"Error: {e}")
            return 1

        if args.cmd == "render":
            try:
                img = render_image(cfg=cfg, log_queue=queue, log_level=log_level)
            except ExprError as e:
                if e.kind == SYNTAX:
                    print(f"{e.position}: {e.message}")
                else:
                    print(f"Error: {e.message}")
                return 1

            try:
                path = save_image(img, cfg["output"])
            except (OSError, ValueError) as e:
                print(f"Error saving image: {e}")
                return 1
            logger.info("Image written: %s", path)

            write_manifest(path + ".json", build_manifest(config=cfg))
            logger.info("Run manifest written: %s.json", path)
            return 0

        raise RuntimeError("Unknown command.")
    finally:
        listener.stop()

if __name__ == "__main__":
    raise SystemExit(main())
