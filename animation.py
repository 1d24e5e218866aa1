from __future__ import annotations
from typing import Callable, List, Dict, Optional
import imageio
import os
import logging
import numpy as np
from PIL import Image

from pixel_engine import render_image
from render_config import RenderConfig

logger = logging.getLogger(__name__)

BLINK_INTERVAL_MS = 500

Frame = Dict[str, object]  # {"image": PIL.Image, "duration_ms": int}


def blink_frames(source: Image.Image, config: RenderConfig, cycles: int = 1,
                 cancelled: Optional[Callable[[], bool]] = None) -> List[Frame]:
    """Alternating blink-off / blink-on renders, one UI timer tick each."""
    off = render_image(source, config.with_changes(blink=False), cancelled)
    on = render_image(source, config.with_changes(blink=True), cancelled)
    frames: List[Frame] = []
    for _ in range(max(1, cycles)):
        frames.append({"image": off, "duration_ms": BLINK_INTERVAL_MS})
        frames.append({"image": on, "duration_ms": BLINK_INTERVAL_MS})
    return frames


def _to_frame_array(img: Image.Image) -> np.ndarray:
    return np.asarray(img if img.mode == "RGB" else img.convert("RGB"))


def encode_frames_to_gif(frames: List[Frame], out_path: str, loop: int = 0) -> None:
    if not frames:
        raise ValueError("No frames to encode")
    parent = os.path.dirname(out_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    images = [fr["image"].convert("RGB") for fr in frames]  # type: ignore[union-attr]
    durations = [int(fr.get("duration_ms", BLINK_INTERVAL_MS)) for fr in frames]
    images[0].save(
        out_path, format="GIF", save_all=True, append_images=images[1:],
        duration=durations, loop=loop, disposal=1,
    )
    logger.info("Wrote %d-frame GIF %s", len(images), out_path)


def encode_frames_to_mp4(frames: List[Frame], out_path: str, crf: int = 20) -> None:
    if not frames:
        raise ValueError("No frames to encode")

    first = frames[0]["image"]
    if not isinstance(first, Image.Image):
        raise ValueError("Invalid frame image")
    w, h = first.size
    pad_w = w % 2
    pad_h = h % 2

    parent = os.path.dirname(out_path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    # every frame shares one duration in an mp4; take it from the first
    fps = 1000.0 / int(frames[0].get("duration_ms", BLINK_INTERVAL_MS))
    with imageio.get_writer(
        out_path,
        format="ffmpeg",
        mode="I",
        fps=fps,
        codec="libx264",
        quality=None,
        pixelformat="yuv420p",
        macro_block_size=None,
        ffmpeg_params=["-crf", str(crf)] + (["-vf", f"pad=iw+{pad_w}:ih+{pad_h}"] if (pad_w or pad_h) else []),
    ) as writer:
        for fr in frames:
            writer.append_data(_to_frame_array(fr["image"]))
    logger.info("Wrote %d-frame MP4 %s", len(frames), out_path)
