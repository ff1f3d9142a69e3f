import math
from typing import Any, Mapping


def _sanitize_color_value(value: Any, default: float = 0.0) -> float:
    """Sanitizes a color component to be a float between 0.0 and 1.0."""
    try:
        v = float(value)
        return max(0.0, min(1.0, v))
    except (ValueError, TypeError):
        return default


def _channel_to_hex(value: Any) -> str:
    # Round half up so 0.5/255 boundaries match what designers see in Figma
    scaled = int(math.floor(_sanitize_color_value(value) * 255 + 0.5))
    return f"{scaled:02x}"


def rgb_to_hex(color: Any) -> str:
    """Convert a Figma color ({r, g, b} floats in 0..1) to `#rrggbb`.

    Accepts an `RGBColor` model or any mapping; a missing color renders as black.
    """
    if color is None:
        return "#000000"
    if isinstance(color, Mapping):
        r, g, b = color.get("r", 0), color.get("g", 0), color.get("b", 0)
    else:
        r, g, b = getattr(color, "r", 0), getattr(color, "g", 0), getattr(color, "b", 0)
    return f"#{_channel_to_hex(r)}{_channel_to_hex(g)}{_channel_to_hex(b)}"
