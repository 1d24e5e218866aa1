"""Built-in palettes, pop-art schemes and the palette editing rules."""
from __future__ import annotations
from typing import List, Sequence, Tuple

from color_ops import Color
from render_config import StyleFilter

MAX_CUSTOM_COLORS = 30

ORANGE: Color = (255, 127, 0)
BLACK: Color = (0, 0, 0)
WHITE: Color = (255, 255, 255)

VIBGYOR: Tuple[Color, ...] = (
    (148, 0, 211),   # violet
    (75, 0, 130),    # indigo
    (0, 0, 255),
    (0, 255, 0),
    (255, 255, 0),
    ORANGE,
    (255, 0, 0),
    BLACK,
    WHITE,
)

RGB: Tuple[Color, ...] = ((255, 0, 0), (0, 255, 0), (0, 0, 255), BLACK, WHITE)

YCM: Tuple[Color, ...] = ((255, 255, 0), (0, 255, 255), (255, 0, 255), BLACK, WHITE)

REGIA: Tuple[Color, ...] = (
    (210, 43, 43),   # fiery red
    (255, 140, 0),   # vivid orange
    (224, 17, 95),   # ruby
    (204, 170, 34),  # ochre
    (0, 71, 171),    # cobalt
    (0, 128, 0),     # forest green
    (128, 0, 128),   # purple
    BLACK,
    WHITE,
)

# shadows, deep skin, mid skin, highlight, accent 1, accent 2, background
SUNSET: Tuple[Color, ...] = (
    (45, 3, 59), (140, 0, 0), (214, 90, 49), (255, 215, 0),
    (62, 84, 172), (245, 232, 199), (255, 46, 99),
)
ELECTRIC: Tuple[Color, ...] = (
    BLACK, (78, 49, 170), (58, 16, 120), (0, 215, 255),
    (247, 208, 96), (255, 0, 96), (17, 106, 123),
)
RETRO: Tuple[Color, ...] = (
    (26, 18, 11), (60, 42, 33), (188, 108, 37), (254, 250, 224),
    (96, 108, 56), (40, 54, 24), (221, 161, 94),
)

NOIR_DEFAULT: Tuple[Color, ...] = (BLACK, WHITE)

# 5 colours + black and white
DESATURATE: Tuple[Color, ...] = (
    (255, 0, 0), (255, 255, 0), (0, 255, 0), (0, 0, 255), (255, 0, 255), BLACK, WHITE,
)

# Scheme 0 is the user-editable palette; it starts out as VIBGYOR.
POPART_SCHEMES: List[Tuple[str, Tuple[Color, ...]]] = [
    ("VIBGYOR", VIBGYOR),
    ("RGB", RGB),
    ("YCM", YCM),
    ("Regia", REGIA),
    ("Sunset", SUNSET),
    ("Electric", ELECTRIC),
    ("Retro", RETRO),
]

def scheme_names() -> List[str]:
    return [name for name, _ in POPART_SCHEMES]

def scheme_index(name: str) -> int:
    for i, (n, _) in enumerate(POPART_SCHEMES):
        if n.lower() == name.lower():
            return i
    raise ValueError(f"Unknown pop-art scheme {name!r}; choose from {', '.join(scheme_names())}")

def next_scheme(index: int) -> int:
    return (index + 1) % len(POPART_SCHEMES)


def active_palette(
    flt: StyleFilter,
    scheme: int = 0,
    custom: Sequence[Color] = VIBGYOR,
    noir: Sequence[Color] = NOIR_DEFAULT,
) -> Tuple[Color, ...]:
    """Palette handed to the pipeline for a filter selection."""
    if flt is StyleFilter.NOIR:
        return tuple(noir)
    if flt is StyleFilter.RAINBOW:
        return VIBGYOR
    if flt is StyleFilter.POPART:
        if scheme == 0:
            return tuple(custom)
        return POPART_SCHEMES[scheme][1]
    return ()


# ---------------- editing ----------------
def add_color(palette: Sequence[Color], color: Color) -> Tuple[Color, ...]:
    """Append unless the palette is full or already holds the color."""
    if len(palette) >= MAX_CUSTOM_COLORS or color in palette:
        return tuple(palette)
    return tuple(palette) + (tuple(color),)

def remove_color(palette: Sequence[Color], index: int) -> Tuple[Color, ...]:
    """Drop one entry; the last remaining color cannot be removed."""
    if len(palette) <= 1 or not 0 <= index < len(palette):
        return tuple(palette)
    return tuple(c for i, c in enumerate(palette) if i != index)

def set_color(palette: Sequence[Color], index: int, color: Color) -> Tuple[Color, ...]:
    out = list(palette)
    out[index] = tuple(color)
    return tuple(out)
