import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from errors import ConfigError, PixelArtError
from render_config import CONTROLS, Float, Int, RenderConfig, Shape, StyleFilter


class TestRenderConfig(unittest.TestCase):

    def test_defaults_are_valid_and_match_controls(self):
        cfg = RenderConfig().validate()
        for name, opt in CONTROLS.items():
            value = getattr(cfg, name)
            if isinstance(value, (Shape, StyleFilter)):
                value = value.value
            self.assertEqual(value, opt.default, name)

    def test_control_ranges(self):
        self.assertIsInstance(CONTROLS["grid_size"], Int)
        self.assertEqual((CONTROLS["grid_size"].min, CONTROLS["grid_size"].max), (10, 150))
        self.assertIsInstance(CONTROLS["zoom"], Float)
        self.assertEqual((CONTROLS["zoom"].min, CONTROLS["zoom"].max), (1.0, 3.0))

    def test_json_round_trip(self):
        cfg = RenderConfig(grid_size=80, shape=Shape.HEART, filter=StyleFilter.POPART,
                           palette=((255, 0, 0), (0, 0, 0)), seed=42, zoom=1.5,
                           offset_x=-0.25, desaturate=True, blink=True)
        text = cfg.to_json()
        self.assertEqual(json.loads(text)["palette"], ["#ff0000", "#000000"])
        self.assertEqual(RenderConfig.from_json(text), cfg)

    def test_from_dict_accepts_color_lists_and_strings(self):
        cfg = RenderConfig.from_dict({"palette": ["#fff", [1, 2, 3], "rgb(4,5,6)"]})
        self.assertEqual(cfg.palette, ((255, 255, 255), (1, 2, 3), (4, 5, 6)))

    def test_from_dict_rejects_unknown_values(self):
        for bad in ({"shape": "star"}, {"filter": "sepia"}, {"grid_size": "many"}, {"palette": ["nope"]}):
            with self.assertRaises(ConfigError, msg=bad):
                RenderConfig.from_dict(bad)

    def test_from_json_rejects_non_objects(self):
        with self.assertRaises(ConfigError):
            RenderConfig.from_json("[1, 2]")
        with self.assertRaises(ConfigError):
            RenderConfig.from_json("{not json")

    def test_validate(self):
        bad = [
            dict(grid_size=0), dict(grid_size=True), dict(brightness=-0.1),
            dict(saturation=-1), dict(zoom=0.5), dict(offset_x=0.6), dict(offset_y=-0.75),
            dict(palette=((0, 0, 256),)),
            dict(brightness=float("nan")), dict(saturation=float("inf")),
            dict(zoom=float("inf")), dict(offset_x=float("nan")),
            dict(palette=((1.5, 0, 0),)), dict(palette=((True, 0, 0),)), dict(seed=1.5),
        ]
        for changes in bad:
            with self.assertRaises(ConfigError, msg=changes):
                RenderConfig(**changes).validate()

    def test_config_error_is_a_value_error(self):
        self.assertTrue(issubclass(ConfigError, ValueError))
        self.assertTrue(issubclass(ConfigError, PixelArtError))

    def test_with_changes_leaves_original(self):
        base = RenderConfig()
        changed = base.with_changes(grid_size=120)
        self.assertEqual(base.grid_size, 50)
        self.assertEqual(changed.grid_size, 120)


if __name__ == "__main__":
    unittest.main()
