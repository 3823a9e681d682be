"""
Color Utilities

Hex color helpers shared by the normalizer (palette validation) and the
scene translator (branch fills and faded variants for deeper levels).
"""

import re
from typing import Optional

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def is_hex_color(value) -> bool:
    """True for '#RGB' or '#RRGGBB' strings."""
    return isinstance(value, str) and bool(_HEX_COLOR.match(value.strip()))


def normalize_hex(value: str) -> str:
    """
    Expand a hex color to upper-case '#RRGGBB'.

    Raises:
        ValueError: if value is not a '#RGB' / '#RRGGBB' string
    """
    if not is_hex_color(value):
        raise ValueError(f"Invalid hex color: {value!r}")

    digits = value.strip()[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return f"#{digits.upper()}"


def with_alpha(value: str, alpha: float) -> str:
    """
    Return '#RRGGBBAA' for the given color and opacity (0.0 - 1.0).
    An opacity of 1.0 returns the plain '#RRGGBB' form.
    """
    alpha = max(0.0, min(1.0, alpha))
    base = normalize_hex(value)
    if alpha >= 1.0:
        return base
    return f"{base}{round(alpha * 255):02X}"


def coerce_color(value) -> Optional[str]:
    # Raw AI output sometimes carries color names or garbage; keep hex only.
    if is_hex_color(value):
        return normalize_hex(value)
    return None
