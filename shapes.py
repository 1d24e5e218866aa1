"""Silhouette boundaries and per-cell draw primitives.

The silhouette decides *which* cells are drawn (all four corners of the padded
cell must be inside). The cell primitive decides *how* an accepted cell looks.
The two are looked up independently so either can change on its own.
"""
from __future__ import annotations
from typing import Callable, Dict, Optional, Tuple
import numpy as np
from PIL import ImageDraw

from color_ops import Color
from render_config import Shape

# (xs, ys) -> bool mask, same shape as the inputs
Boundary = Callable[[np.ndarray, np.ndarray], np.ndarray]

BEZIER_STEPS = 24
HEART_TOP = 0.3


def _cubic(p0, p1, p2, p3, steps: int = BEZIER_STEPS) -> np.ndarray:
    t = np.linspace(0.0, 1.0, steps + 1)[1:, None]
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    mt = 1.0 - t
    return mt**3 * p0 + 3 * mt**2 * t * p1 + 3 * mt * t**2 * p2 + t**3 * p3

def heart_polygon(x: float, y: float, w: float, h: float) -> np.ndarray:
    """(N, 2) outline of a heart filling the box; widest at the top, tip at the bottom."""
    top = h * HEART_TOP
    start = (x + w/2, y + top)
    segs = [
        # top left lobe
        (start, (x + w/2, y), (x, y), (x, y + top)),
        # bottom left
        ((x, y + top), (x, y + h*0.6), (x + w/2, y + h*0.9), (x + w/2, y + h)),
        # bottom right
        ((x + w/2, y + h), (x + w/2, y + h*0.9), (x + w, y + h*0.6), (x + w, y + top)),
        # top right lobe
        ((x + w, y + top), (x + w, y), (x + w/2, y), start),
    ]
    pts = [np.asarray([start], dtype=np.float64)] + [_cubic(*s) for s in segs]
    # last point closes back onto the start
    return np.vstack(pts)[:-1]

def points_in_polygon(xs: np.ndarray, ys: np.ndarray, poly: np.ndarray) -> np.ndarray:
    """Even-odd ray casting, vectorised over points and edges. Edge points count as inside."""
    xs = np.asarray(xs, dtype=np.float64)[..., None]
    ys = np.asarray(ys, dtype=np.float64)[..., None]
    x0, y0 = poly[:, 0], poly[:, 1]
    x1, y1 = np.roll(x0, -1), np.roll(y0, -1)
    straddles = (y0 > ys) != (y1 > ys)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = x0 + (ys - y0) * (x1 - x0) / (y1 - y0)
    crossings = np.count_nonzero(straddles & (xs < x_cross), axis=-1)
    inside = (crossings % 2) == 1
    # on-edge points: collinear with, and within the span of, some edge
    cross = (x1 - x0) * (ys - y0) - (y1 - y0) * (xs - x0)
    within = (np.minimum(x0, x1) <= xs) & (xs <= np.maximum(x0, x1)) & \
             (np.minimum(y0, y1) <= ys) & (ys <= np.maximum(y0, y1))
    on_edge = np.any((np.abs(cross) < 1e-9) & within, axis=-1)
    return inside | on_edge


def silhouette(shape: Shape, width: float, height: float) -> Optional[Boundary]:
    """Point-in-region test for the overall outline; None means no clipping."""
    min_dim = min(width, height)
    if shape is Shape.RECTANGLE:
        return None
    if shape is Shape.SQUARE:
        x0 = (width - min_dim) / 2; y0 = (height - min_dim) / 2
        def in_square(xs, ys):
            return (xs >= x0) & (xs <= x0 + min_dim) & (ys >= y0) & (ys <= y0 + min_dim)
        return in_square
    if shape is Shape.CIRCLE:
        cx, cy, r = width / 2, height / 2, min_dim / 2
        def in_circle(xs, ys):
            return (xs - cx) ** 2 + (ys - cy) ** 2 <= r * r
        return in_circle
    if shape is Shape.HEART:
        poly = heart_polygon(0, 0, width, height)
        def in_heart(xs, ys):
            return points_in_polygon(xs, ys, poly)
        return in_heart
    raise ValueError(f"Unknown shape {shape!r}")


def cells_inside(boundary: Optional[Boundary], xs: np.ndarray, ys: np.ndarray, size: float) -> np.ndarray:
    """Accept a padded cell only when all four of its corners are inside."""
    xs = np.asarray(xs, dtype=np.float64); ys = np.asarray(ys, dtype=np.float64)
    if boundary is None:
        return np.ones(np.broadcast(xs, ys).shape, dtype=bool)
    return (boundary(xs, ys) & boundary(xs + size, ys)
            & boundary(xs, ys + size) & boundary(xs + size, ys + size))


# ---------------- cell primitives ----------------
CORNER_RADIUS = 0.2

def _box(x: float, y: float, size: float) -> Tuple[int, int, int, int]:
    x0 = int(round(x)); y0 = int(round(y))
    x1 = max(x0, int(round(x + size)) - 1)
    y1 = max(y0, int(round(y + size)) - 1)
    return x0, y0, x1, y1

def draw_rounded_cell(draw: ImageDraw.ImageDraw, x: float, y: float, size: float, color: Color) -> None:
    x0, y0, x1, y1 = _box(x, y, size)
    radius = int(round(size * CORNER_RADIUS))
    if radius > 0:
        draw.rounded_rectangle((x0, y0, x1, y1), radius=radius, fill=color)
    else:
        draw.rectangle((x0, y0, x1, y1), fill=color)

# Circle and heart silhouettes are still drawn with rounded cells.
CELL_PRIMITIVES: Dict[Shape, Callable[..., None]] = {
    Shape.SQUARE: draw_rounded_cell,
    Shape.RECTANGLE: draw_rounded_cell,
    Shape.CIRCLE: draw_rounded_cell,
    Shape.HEART: draw_rounded_cell,
}

def cell_primitive(shape: Shape) -> Callable[..., None]:
    return CELL_PRIMITIVES[shape]
