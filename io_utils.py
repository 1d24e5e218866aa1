from __future__ import annotations
from io import BytesIO
import numpy as np
from PIL import Image, ImageOps, ImageCms, UnidentifiedImageError
import os
import math
import logging

from errors import ImageLoadError

logger = logging.getLogger(__name__)

MAX_PREVIEW_DIM = 1024
EXPORT_PREFIX = "pixel-art"


def ensure_srgb(img: Image.Image) -> Image.Image:
    icc = img.info.get("icc_profile")
    if not icc:
        return img
    try:
        srgb = ImageCms.createProfile("sRGB")
        src = ImageCms.ImageCmsProfile(BytesIO(icc))
        mode = img.mode if img.mode in ("RGB", "RGBA") else "RGB"
        return ImageCms.profileToProfile(img, src, srgb, outputMode=mode)
    except (ImageCms.PyCMSError, OSError) as e:
        logger.warning("Ignoring unusable ICC profile: %s", e)
        return img


def load_image(path: str) -> Image.Image:
    try:
        img = Image.open(path)
        img = ImageOps.exif_transpose(img)
        # Pillow lazy loads; ensure it's loaded now
        img.load()
    except (OSError, UnidentifiedImageError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e
    img = ensure_srgb(img)
    logger.info("Loaded %s (%dx%d, %s)", path, img.width, img.height, img.mode)
    return img


def flatten_rgb(img: Image.Image) -> Image.Image:
    """RGB view of any decoded image.

    Colour is read straight (not premultiplied): partly transparent pixels
    keep their RGB, fully transparent ones read as black.
    """
    if img.mode == "RGB":
        return img
    if "A" in img.getbands() or "transparency" in img.info:
        arr = np.array(img.convert("RGBA"), dtype=np.uint8)
        arr[arr[..., 3] == 0, :3] = 0
        return Image.fromarray(np.ascontiguousarray(arr[..., :3]), "RGB")
    return img.convert("RGB")


def save_png(img: Image.Image, path: str, overwrite: bool = True) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    if os.path.exists(path) and not overwrite:
        raise FileExistsError(path)
    img.save(path, format="PNG")
    logger.info("Saved %s", path)


def export_path(out_dir: str, now_ms: int) -> str:
    return os.path.join(out_dir, f"{EXPORT_PREFIX}-{now_ms}.png")


def downscale_for_preview(img: Image.Image) -> Image.Image:
    w, h = img.size
    scale = min(MAX_PREVIEW_DIM / max(w, h), 1.0)
    if scale < 1.0:
        nw = max(1, int(math.floor(w * scale)))
        nh = max(1, int(math.floor(h * scale)))
        return img.resize((nw, nh), Image.LANCZOS)
    return img
