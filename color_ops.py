from __future__ import annotations
import math
import re
from typing import Sequence, Tuple

Color = Tuple[int, int, int]

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_RGB_RE = re.compile(r"^\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*$")
_RGB_FN_RE = re.compile(r"^\s*rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)\s*$")


def parse_color(text: str) -> Color:
    """Accepts #rgb, #rrggbb, r,g,b and rgb(r,g,b). Raises ValueError otherwise."""
    t = text.strip()
    m = _HEX_RE.match(t)
    if m:
        s = m.group(1)
        if len(s) == 3:
            s = "".join(c*2 for c in s)
        return (int(s[0:2],16), int(s[2:4],16), int(s[4:6],16))
    m = _RGB_RE.match(t) or _RGB_FN_RE.match(t)
    if m:
        r, g, b = (int(m.group(i)) for i in (1, 2, 3))
        if max(r, g, b) > 255:
            raise ValueError(f"Channel out of range in color {text!r}")
        return (r, g, b)
    raise ValueError(f"Unrecognized color {text!r}")

def rgb_to_hex(color: Color) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


def round_half_up(v: float) -> int:
    # halves go up, also for negatives (-2.5 -> -2)
    return int(math.floor(v + 0.5))

def clamp_channel(v: float) -> int:
    return max(0, min(255, round_half_up(v)))

def luma(r: float, g: float, b: float) -> float:
    """Luma used by the saturation step."""
    return 0.2989 * r + 0.5870 * g + 0.1140 * b

def grey_level(color: Color) -> int:
    """Rounded Rec.601 luma used by noir, gradient mapping and blink."""
    r, g, b = color
    return round_half_up(r * 0.299 + g * 0.587 + b * 0.114)


def nearest(color: Color, palette: Sequence[Color]) -> Color:
    """
    Closest palette entry by Euclidean RGB distance.
    Ties go to the first entry; an empty palette returns `color` untouched.
    """
    if not palette:
        return color
    r, g, b = color
    best = palette[0]
    best_d = math.inf
    for c in palette:
        d = math.sqrt((r - c[0]) ** 2 + (g - c[1]) ** 2 + (b - c[2]) ** 2)
        if d < best_d:
            best_d = d
            best = c
    return best
