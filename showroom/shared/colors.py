"""Colour parsing helpers: hex strings, 0xRRGGBB ints and RGB tuples."""

from typing import Sequence, Tuple, Union

ColorLike = Union[str, int, Sequence[float]]


def parse_color(value: ColorLike) -> Tuple[float, float, float]:
    """Return an (r, g, b) tuple of floats in [0, 1].

    Accepts '#RRGGBB' / 'RRGGBB' strings, 0xRRGGBB integers, float triples in
    [0, 1] and 0-255 integer triples.  Raises ValueError on anything else.
    """
    if isinstance(value, str):
        val = value.strip().lstrip("#")
        if len(val) != 6:
            raise ValueError(f"Invalid hex colour: {value!r}")
        try:
            value = int(val, 16)
        except ValueError:
            raise ValueError(f"Invalid hex colour: {value!r}") from None

    if isinstance(value, int):
        if not 0 <= value <= 0xFFFFFF:
            raise ValueError(f"Colour out of range: {value:#x}")
        return ((value >> 16 & 0xFF) / 255.0,
                (value >> 8 & 0xFF) / 255.0,
                (value & 0xFF) / 255.0)

    channels = [float(c) for c in value]
    if len(channels) not in (3, 4):
        raise ValueError(f"Expected 3 or 4 channels, got {len(channels)}")
    channels = channels[:3]
    if any(c > 1.0 for c in channels):
        channels = [c / 255.0 for c in channels]
    return tuple(max(0.0, min(1.0, c)) for c in channels)


def to_hex(color: Sequence[float]) -> str:
    r, g, b = (int(round(max(0.0, min(1.0, c)) * 255)) for c in color[:3])
    return f"#{r:02x}{g:02x}{b:02x}"
