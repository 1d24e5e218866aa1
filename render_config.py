from __future__ import annotations
import enum
import json
import math
from dataclasses import dataclass, asdict, field, replace
from typing import Dict, Any, Tuple

from color_ops import Color, parse_color, rgb_to_hex
from errors import ConfigError


class Shape(str, enum.Enum):
    SQUARE = "square"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    HEART = "heart"


class StyleFilter(str, enum.Enum):
    NONE = "none"
    NOIR = "noir"
    RAINBOW = "rainbow"
    POPART = "popart"


# ---------------- control descriptors (UI ranges) ----------------
@dataclass
class Option: default: Any
class Bool(Option): pass
class Int(Option):
    def __init__(self, default: int, min_value: int, max_value: int, step: int = 1):
        super().__init__(default); self.min=min_value; self.max=max_value; self.step=step
class Float(Option):
    def __init__(self, default: float, min_value: float, max_value: float, step: float = 0.1):
        super().__init__(default); self.min=min_value; self.max=max_value; self.step=step
class Choice(Option):
    def __init__(self, default: str, choices):
        super().__init__(default); self.choices=list(choices)

CONTROLS: Dict[str, Option] = {
    "grid_size": Int(50, 10, 150),
    "brightness": Float(1.0, 0.0, 2.0),
    "saturation": Float(1.0, 0.0, 3.0),
    "zoom": Float(1.0, 1.0, 3.0),
    "offset_x": Float(0.0, -0.5, 0.5),
    "offset_y": Float(0.0, -0.5, 0.5),
    "shape": Choice(Shape.CIRCLE.value, [s.value for s in Shape]),
    "filter": Choice(StyleFilter.NONE.value, [f.value for f in StyleFilter]),
    "desaturate": Bool(False),
}


@dataclass(frozen=True)
class RenderConfig:
    grid_size: int = 50
    shape: Shape = Shape.CIRCLE
    filter: StyleFilter = StyleFilter.NONE
    palette: Tuple[Color, ...] = field(default_factory=tuple)
    seed: int = 0
    zoom: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    desaturate: bool = False
    brightness: float = 1.0
    saturation: float = 1.0
    blink: bool = False

    def validate(self) -> "RenderConfig":
        """Raise ConfigError on values the pipeline cannot render sensibly."""
        if not isinstance(self.grid_size, int) or isinstance(self.grid_size, bool) or self.grid_size < 1:
            raise ConfigError(f"grid_size must be an integer >= 1, got {self.grid_size!r}")
        if not isinstance(self.shape, Shape):
            raise ConfigError(f"Unknown shape {self.shape!r}")
        if not isinstance(self.filter, StyleFilter):
            raise ConfigError(f"Unknown filter {self.filter!r}")
        if not isinstance(self.seed, int) or isinstance(self.seed, bool):
            raise ConfigError(f"seed must be an integer, got {self.seed!r}")
        for name in ("brightness", "saturation", "zoom", "offset_x", "offset_y"):
            v = getattr(self, name)
            if not isinstance(v, (int, float)) or isinstance(v, bool) or not math.isfinite(v):
                raise ConfigError(f"{name} must be a finite number, got {v!r}")
        if self.brightness < 0:
            raise ConfigError(f"brightness must be >= 0, got {self.brightness}")
        if self.saturation < 0:
            raise ConfigError(f"saturation must be >= 0, got {self.saturation}")
        if self.zoom < 1.0:
            raise ConfigError(f"zoom must be >= 1.0, got {self.zoom}")
        for name in ("offset_x", "offset_y"):
            v = getattr(self, name)
            if not -0.5 <= v <= 0.5:
                raise ConfigError(f"{name} must be within [-0.5, 0.5], got {v}")
        for c in self.palette:
            if len(c) != 3 or any(not isinstance(v, int) or isinstance(v, bool) for v in c):
                raise ConfigError(f"Palette entry must be three integers: {c!r}")
            if any(not 0 <= v <= 255 for v in c):
                raise ConfigError(f"Palette entry out of range: {c!r}")
        return self

    def with_changes(self, **changes) -> "RenderConfig":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["shape"] = self.shape.value
        d["filter"] = self.filter.value
        d["palette"] = [rgb_to_hex(c) for c in self.palette]
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @staticmethod
    def from_dict(obj: Dict[str, Any]) -> "RenderConfig":
        try:
            palette = tuple(
                parse_color(c) if isinstance(c, str) else tuple(int(v) for v in c)
                for c in obj.get("palette", [])
            )
            return RenderConfig(
                grid_size=int(obj.get("grid_size", 50)),
                shape=Shape(obj.get("shape", Shape.CIRCLE.value)),
                filter=StyleFilter(obj.get("filter", StyleFilter.NONE.value)),
                palette=palette,
                seed=int(obj.get("seed", 0)),
                zoom=float(obj.get("zoom", 1.0)),
                offset_x=float(obj.get("offset_x", 0.0)),
                offset_y=float(obj.get("offset_y", 0.0)),
                desaturate=bool(obj.get("desaturate", False)),
                brightness=float(obj.get("brightness", 1.0)),
                saturation=float(obj.get("saturation", 1.0)),
                blink=bool(obj.get("blink", False)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @staticmethod
    def from_json(s: str) -> "RenderConfig":
        try:
            obj = json.loads(s)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Configuration is not valid JSON: {e}") from e
        if not isinstance(obj, dict):
            raise ConfigError("Configuration JSON must be an object")
        return RenderConfig.from_dict(obj)
