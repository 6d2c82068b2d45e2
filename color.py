import re
from typing import NamedTuple

COLOR_CODE_RE = re.compile(r"^#([0-9A-Fa-f]{6})([0-9A-Fa-f]{2})?$")


class Pixel(NamedTuple):
    """One canvas cell: straight (non-premultiplied) sRGB bytes plus alpha."""

    r: int
    g: int
    b: int
    a: int


TRANSPARENT = Pixel(0, 0, 0, 0)
WHITE = Pixel(255, 255, 255, 255)


def parse_color_code(code: str) -> Pixel:
    """Parses ``#RRGGBB`` or ``#RRGGBBAA``; the six-digit form is fully opaque."""
    match = COLOR_CODE_RE.match(code)
    if match is None:
        raise ValueError(f"invalid color code: {code!r}")
    rgb, alpha = match.groups()
    value = int(rgb, 16)
    return Pixel(
        (value >> 16) & 0xFF,
        (value >> 8) & 0xFF,
        value & 0xFF,
        int(alpha, 16) if alpha is not None else 0xFF,
    )


def format_color_code(pixel: Pixel) -> str:
    return f"#{pixel.r:02X}{pixel.g:02X}{pixel.b:02X}{pixel.a:02X}"
