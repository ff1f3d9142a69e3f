import pytest

from colors import rgb_to_hex
from models import RGBColor


class TestRgbToHex:
    def test_none_is_black(self):
        assert rgb_to_hex(None) == "#000000"

    def test_primaries(self):
        assert rgb_to_hex({"r": 1, "g": 1, "b": 1}) == "#ffffff"
        assert rgb_to_hex({"r": 1, "g": 0, "b": 0}) == "#ff0000"
        assert rgb_to_hex(RGBColor(r=0, g=0.4, b=1)) == "#0066ff"

    def test_half_rounds_up(self):
        assert rgb_to_hex({"r": 0.5, "g": 0.5, "b": 0.5}) == "#808080"

    def test_out_of_range_is_clamped(self):
        assert rgb_to_hex({"r": 2, "g": -1, "b": "bad"}) == "#ff0000"

    def test_missing_channels_default_to_zero(self):
        assert rgb_to_hex({"g": 1}) == "#00ff00"

    @pytest.mark.parametrize("channel", [0, 1, 37, 128, 200, 254, 255])
    def test_channel_round_trip_within_one_step(self, channel):
        value = channel / 255
        hex_color = rgb_to_hex({"r": value, "g": value, "b": value})
        decoded = int(hex_color[1:3], 16) / 255
        assert abs(decoded - value) <= 1 / 255
