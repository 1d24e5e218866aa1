"""Photo -> pixel-art mosaic pipeline.

render() is the single entry point: it fits the source into a working surface
(zoom / pan window, width capped at MAX_WORK_WIDTH), walks the cell grid
row-major and, per cell, samples -> adjusts -> styles -> silhouette-tests ->
draws. Nothing survives between calls; same pixels + same config give the
same output, jitter included.
"""
from __future__ import annotations
import logging
import math
import time
from typing import Callable, Optional, Tuple
import numpy as np
from PIL import Image, ImageDraw

from color_ops import Color, clamp_channel, luma, round_half_up
from errors import RenderCancelled
from io_utils import flatten_rgb
from jitter import JitterStream
from render_config import RenderConfig
from shapes import cell_primitive, cells_inside, silhouette
from styles import finish_color

logger = logging.getLogger(__name__)

MAX_WORK_WIDTH = 1200
BACKGROUND: Color = (30, 41, 59)  # #1e293b
CELL_PADDING = 0.1
SAMPLES_PER_SIDE = 4


def working_size(width: int, height: int) -> Tuple[int, int]:
    if width > MAX_WORK_WIDTH:
        ratio = MAX_WORK_WIDTH / width
        return MAX_WORK_WIDTH, max(1, int(height * ratio))
    return width, height

def source_window(width: int, height: int, zoom: float = 1.0,
                  offset_x: float = 0.0, offset_y: float = 0.0) -> Tuple[float, float, float, float]:
    """(sx, sy, sw, sh) of the source region that fills the working surface."""
    sw = width / zoom
    sh = height / zoom
    sx = (width - sw) / 2 + offset_x * (width - sw)
    sy = (height - sh) / 2 + offset_y * (height - sh)
    sx = max(0.0, min(width - sw, sx))
    sy = max(0.0, min(height - sh, sy))
    return sx, sy, sw, sh


def sample_cell(pixels: np.ndarray, x: float, y: float, size: float) -> Color:
    """Mean colour of a sparse grid of points inside the cell; black if none land on the surface."""
    h, w = pixels.shape[:2]
    step = max(1, int(math.floor(size / SAMPLES_PER_SIDE)))
    offs = np.arange(0, size, step, dtype=np.float64)
    xs = np.floor(x + offs).astype(np.int64)
    ys = np.floor(y + offs).astype(np.int64)
    xs = xs[(xs >= 0) & (xs < w)]
    ys = ys[(ys >= 0) & (ys < h)]
    if xs.size == 0 or ys.size == 0:
        return (0, 0, 0)
    block = pixels[np.ix_(ys, xs)].reshape(-1, 3).astype(np.float64)
    mean = block.sum(axis=0) / block.shape[0]
    return tuple(round_half_up(v) for v in mean)  # type: ignore[return-value]


def adjust_color(color: Color, jit: JitterStream, brightness: float = 1.0, saturation: float = 1.0) -> Color:
    r, g, b = (float(c) for c in color)
    if jit.active:
        # wraps instead of clamping; colours near 255 can flip dark
        r = (r + jit.next() * 50) % 255
        g = (g + jit.next() * 50) % 255
        b = (b + jit.next() * 50) % 255
    r *= brightness; g *= brightness; b *= brightness
    grey = luma(r, g, b)
    r = grey + saturation * (r - grey)
    g = grey + saturation * (g - grey)
    b = grey + saturation * (b - grey)
    return (clamp_channel(r), clamp_channel(g), clamp_channel(b))


class Canvas:
    """Target surface the pipeline paints into.

    get_context() (re)allocates the pixel buffer at the requested size and
    returns an ImageDraw, or None when the mode has no RGB drawing context.
    """
    DRAWABLE_MODES = ("RGB", "RGBA")

    def __init__(self, mode: str = "RGB"):
        self.mode = mode
        self.image: Optional[Image.Image] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size if self.image is not None else (0, 0)

    @property
    def drawable(self) -> bool:
        return self.mode in self.DRAWABLE_MODES

    def get_context(self, size: Tuple[int, int]) -> Optional[ImageDraw.ImageDraw]:
        if not self.drawable:
            return None
        self.image = Image.new(self.mode, size, BACKGROUND)
        return ImageDraw.Draw(self.image)


def _working_surface(source: Image.Image, work_w: int, work_h: int, cfg: RenderConfig) -> np.ndarray:
    rgb = flatten_rgb(source)
    sx, sy, sw, sh = source_window(rgb.width, rgb.height, cfg.zoom, cfg.offset_x, cfg.offset_y)
    work = rgb.resize((work_w, work_h), Image.Resampling.BILINEAR, box=(sx, sy, sx + sw, sy + sh))
    return np.asarray(work, dtype=np.uint8)


def render(source: Image.Image, canvas: Canvas, config: RenderConfig,
           cancelled: Optional[Callable[[], bool]] = None) -> None:
    """Paint the mosaic of `source` into `canvas`. Raises ConfigError / RenderCancelled."""
    config.validate()
    if not canvas.drawable:
        logger.debug("render(): canvas mode %s has no 2D context; skipped", canvas.mode)
        return
    t0 = time.perf_counter()
    work_w, work_h = working_size(source.width, source.height)
    pixels = _working_surface(source, work_w, work_h, config)

    # paint off-screen; the canvas is only touched once the grid is complete
    surface = Image.new("RGB", (work_w, work_h), BACKGROUND)
    draw = ImageDraw.Draw(surface)

    cell = work_w / config.grid_size
    rows = int(math.ceil(work_h / cell))
    pad = cell * CELL_PADDING
    draw_size = cell - pad * 2
    boundary = silhouette(config.shape, work_w, work_h)
    primitive = cell_primitive(config.shape)
    jit = JitterStream(config.seed)
    col_x = np.arange(config.grid_size, dtype=np.float64) * cell
    drawn = 0

    for row in range(rows):
        if cancelled is not None and cancelled():
            raise RenderCancelled(f"render superseded at row {row}/{rows}")
        py = row * cell
        accepted = cells_inside(boundary, col_x + pad, np.full_like(col_x, py + pad), draw_size)
        for col in range(config.grid_size):
            px = col_x[col]
            color = sample_cell(pixels, px, py, cell)
            color = adjust_color(color, jit, config.brightness, config.saturation)
            color = finish_color(
                color, config.filter, config.palette,
                jitter_active=jit.active, desaturated=config.desaturate,
                blink_on=config.blink, row=row, col=col,
            )
            if accepted[col]:
                primitive(draw, px + pad, py + pad, draw_size, color)
                drawn += 1

    if canvas.get_context((work_w, work_h)) is None:
        return
    canvas.image.paste(surface, (0, 0))
    logger.debug("render(): src=%dx%d work=%dx%d grid=%dx%d drawn=%d in %.3fs",
                  source.width, source.height, work_w, work_h, config.grid_size, rows,
                  drawn, time.perf_counter() - t0)


def render_image(source: Image.Image, config: RenderConfig,
                 cancelled: Optional[Callable[[], bool]] = None) -> Image.Image:
    canvas = Canvas()
    render(source, canvas, config, cancelled)
    return canvas.image
