from __future__ import annotations
import logging
from typing import Callable, Dict, Sequence

from color_ops import Color, grey_level, nearest
from palettes import BLACK, DESATURATE, ORANGE, WHITE
from render_config import StyleFilter

logger = logging.getLogger(__name__)

BLINK_PERIOD = 10
BLINK_DARK: Color = (50, 50, 50)

# (color, palette, jitter_active) -> color
StyleFn = Callable[[Color, Sequence[Color], bool], Color]

_registry: Dict[StyleFilter, StyleFn] = {}

def style(flt: StyleFilter):
    def deco(fn: StyleFn) -> StyleFn:
        _registry[flt] = fn
        return fn
    return deco


@style(StyleFilter.NONE)
def _passthrough(color: Color, palette: Sequence[Color], jitter_active: bool) -> Color:
    return color

@style(StyleFilter.NOIR)
def _noir(color: Color, palette: Sequence[Color], jitter_active: bool) -> Color:
    g = grey_level(color)
    g = min(255, g + 50) if g > 128 else max(0, g - 50)
    return nearest((g, g, g), palette)


def _gradient_pick(color: Color, palette: Sequence[Color]) -> Color:
    # banded brightness -> index mapping, darkest entry first
    idx = int(grey_level(color) / 256 * len(palette))
    return palette[min(idx, len(palette) - 1)]

def _rainbow_like(color: Color, palette: Sequence[Color], jitter_active: bool, always_requantize: bool) -> Color:
    r, g, b = color
    hi = max(color); lo = min(color)
    diff = hi - lo
    out = color
    styled = False
    if diff < 30:
        out = BLACK if (hi + lo) / 2 < 120 else WHITE
        styled = True
    elif r > g > b and r > 60 and diff < 120:
        # brownish
        if palette:
            out = ORANGE if ORANGE in palette else palette[0]
        styled = True

    if (not styled or always_requantize) and palette:
        if len(palette) > 5 and jitter_active:
            out = nearest(color, palette)
        else:
            out = _gradient_pick(color, palette)
    return out

@style(StyleFilter.RAINBOW)
def _rainbow(color: Color, palette: Sequence[Color], jitter_active: bool) -> Color:
    return _rainbow_like(color, palette, jitter_active, always_requantize=False)

@style(StyleFilter.POPART)
def _popart(color: Color, palette: Sequence[Color], jitter_active: bool) -> Color:
    return _rainbow_like(color, palette, jitter_active, always_requantize=True)


_missing = set(StyleFilter) - set(_registry)
if _missing:
    raise RuntimeError(f"No style handler for: {sorted(f.value for f in _missing)}")


def apply_style(flt: StyleFilter, color: Color, palette: Sequence[Color], jitter_active: bool = False) -> Color:
    return _registry[flt](color, palette, jitter_active)

def desaturate(color: Color) -> Color:
    return nearest(color, DESATURATE)

def on_blink_line(row: int, col: int) -> bool:
    """Every 10th row or column, counted from 1."""
    return (col + 1) % BLINK_PERIOD == 0 or (row + 1) % BLINK_PERIOD == 0

def blink(color: Color) -> Color:
    # bright cells flash dark, dark cells flash white
    return BLINK_DARK if grey_level(color) > 128 else WHITE


def finish_color(
    color: Color,
    flt: StyleFilter,
    palette: Sequence[Color],
    *,
    jitter_active: bool = False,
    desaturated: bool = False,
    blink_on: bool = False,
    row: int = 0,
    col: int = 0,
) -> Color:
    """Filter, then the optional 7-colour remap, then the blink overlay."""
    out = apply_style(flt, color, palette, jitter_active)
    if desaturated:
        out = desaturate(out)
    if blink_on and on_blink_line(row, col):
        out = blink(out)
    return out
