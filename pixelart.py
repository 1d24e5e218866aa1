#!/usr/bin/env python3
"""Command-line front end: render one photo into a pixel-art PNG (or blink animation)."""
from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from animation import blink_frames, encode_frames_to_gif, encode_frames_to_mp4
from color_ops import parse_color
from errors import ConfigError, ImageLoadError
from io_utils import load_image, save_png
from logconf import setup_logging
from palettes import active_palette, scheme_index, scheme_names, VIBGYOR, NOIR_DEFAULT
from pixel_engine import render_image
from render_config import CONTROLS, RenderConfig, Shape, StyleFilter

logger = logging.getLogger("pixelart")

EXIT_OK = 0
EXIT_BAD_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Turn a photo into grid-based pixel art.")
    ap.add_argument("input", help="source image")
    ap.add_argument("-o", "--output", required=True, help="output PNG, or GIF/MP4 with --animate")
    ap.add_argument("--config", help="JSON file with RenderConfig fields; flags below override it")
    ap.add_argument("--grid", type=int, dest="grid_size", help=f"cells across the width (UI range {CONTROLS['grid_size'].min}-{CONTROLS['grid_size'].max})")
    ap.add_argument("--shape", choices=[s.value for s in Shape])
    ap.add_argument("--filter", choices=[f.value for f in StyleFilter])
    ap.add_argument("--scheme", default="VIBGYOR", help=f"pop-art scheme: {', '.join(scheme_names())}")
    ap.add_argument("--palette", nargs="+", metavar="COLOR",
                    help="explicit palette (#rrggbb, r,g,b or rgb(r,g,b)); replaces the scheme / noir colours")
    ap.add_argument("--seed", type=int, help="jitter seed, 0 disables")
    ap.add_argument("--zoom", type=float)
    ap.add_argument("--pan-x", type=float, dest="offset_x")
    ap.add_argument("--pan-y", type=float, dest="offset_y")
    ap.add_argument("--brightness", type=float)
    ap.add_argument("--saturation", type=float)
    ap.add_argument("--desaturate", action="store_true", default=None, help="map to the fixed 7 colours")
    ap.add_argument("--blink", action="store_true", default=None, help="highlight every 10th row/column")
    ap.add_argument("--animate", action="store_true", help="write the blink animation (.gif or .mp4)")
    ap.add_argument("--cycles", type=int, default=2, help="blink cycles in the animation")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


_OVERRIDES = ("grid_size", "seed", "zoom", "offset_x", "offset_y",
              "brightness", "saturation", "desaturate", "blink")

def config_from_args(args: argparse.Namespace) -> RenderConfig:
    if args.config:
        with open(args.config, "r", encoding="utf-8") as f:
            cfg = RenderConfig.from_json(f.read())
    else:
        cfg = RenderConfig()
    changes = {k: getattr(args, k) for k in _OVERRIDES if getattr(args, k) is not None}
    if args.shape:
        changes["shape"] = Shape(args.shape)
    if args.filter:
        changes["filter"] = StyleFilter(args.filter)
    cfg = cfg.with_changes(**changes)

    try:
        if args.palette:
            palette = tuple(parse_color(c) for c in args.palette)
            cfg = cfg.with_changes(palette=palette)
        elif not cfg.palette:
            scheme = scheme_index(args.scheme)
            cfg = cfg.with_changes(palette=active_palette(cfg.filter, scheme, VIBGYOR, NOIR_DEFAULT))
    except ValueError as e:
        raise ConfigError(str(e)) from e
    return cfg.validate()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level), log_file=False)
    try:
        cfg = config_from_args(args)
        src = load_image(args.input)
    except (ConfigError, ImageLoadError, OSError) as e:
        logger.error("%s", e)
        return EXIT_BAD_INPUT

    logger.info("Rendering %s: grid=%d shape=%s filter=%s palette=%d colours seed=%d",
                args.input, cfg.grid_size, cfg.shape.value, cfg.filter.value, len(cfg.palette), cfg.seed)
    if args.animate:
        frames = blink_frames(src, cfg, cycles=args.cycles)
        if args.output.lower().endswith(".mp4"):
            encode_frames_to_mp4(frames, args.output)
        else:
            encode_frames_to_gif(frames, args.output)
    else:
        save_png(render_image(src, cfg), args.output)
    logger.info("Done -> %s", args.output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
