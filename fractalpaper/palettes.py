"""Preset colour palettes, colour-theory palette generation and colormaps."""

from __future__ import annotations

import math
from collections.abc import Sequence
from enum import Enum

from .model import Color, Palette
from .rng import Rng


class Harmony(Enum):
    """Colour harmony schemes used to pick the key hues of a palette."""

    COMPLEMENTARY = "complementary"
    ANALOGOUS = "analogous"
    TRIADIC = "triadic"
    SPLIT_COMPLEMENTARY = "split-complementary"
    TETRADIC = "tetradic"


_HARMONY_OFFSETS: dict[Harmony, tuple[float, ...]] = {
    Harmony.COMPLEMENTARY: (0.0, 180.0),
    Harmony.ANALOGOUS: (0.0, 30.0, 330.0),
    Harmony.TRIADIC: (0.0, 120.0, 240.0),
    Harmony.SPLIT_COMPLEMENTARY: (0.0, 150.0, 210.0),
    Harmony.TETRADIC: (0.0, 90.0, 180.0, 270.0),
}

# Dark → bright → dark, so that the palette cycles smoothly.
_LIGHTNESS_CURVE = (0.08, 0.15, 0.25, 0.40, 0.55, 0.70, 0.85, 0.95, 0.75, 0.50, 0.30, 0.12)
_SATURATION_CURVE = (0.6, 0.8, 0.9, 1.0, 0.9, 0.7, 0.4, 0.2, 0.6, 0.9, 1.0, 0.7)


def _to_u8(value: float) -> int:
    """Saturating float to byte conversion (NaN becomes 0)."""
    if not value > 0.0:
        return 0
    if value >= 255.0:
        return 255
    return int(value)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def hsl_to_rgb(h: float, s: float, l: float) -> Color:
    """Convert HSL (h in degrees 0-360, s and l in 0-1) to an RGB byte triple."""
    c = (1.0 - abs(2.0 * l - 1.0)) * s
    h2 = h / 60.0
    x = c * (1.0 - abs(math.fmod(h2, 2.0) - 1.0))
    sector = int(h2) if h2 > 0.0 else 0
    if sector == 0:
        r1, g1, b1 = c, x, 0.0
    elif sector == 1:
        r1, g1, b1 = x, c, 0.0
    elif sector == 2:
        r1, g1, b1 = 0.0, c, x
    elif sector == 3:
        r1, g1, b1 = 0.0, x, c
    elif sector == 4:
        r1, g1, b1 = x, 0.0, c
    else:
        r1, g1, b1 = c, 0.0, x
    m = l - c / 2.0
    return (
        _to_u8(_clamp((r1 + m) * 255.0, 0.0, 255.0)),
        _to_u8(_clamp((g1 + m) * 255.0, 0.0, 255.0)),
        _to_u8(_clamp((b1 + m) * 255.0, 0.0, 255.0)),
    )


def generate_random_palette(rng: Rng) -> list[Color]:
    """Build a 12-anchor palette from a randomly chosen colour harmony."""
    harmony = rng.choose(tuple(Harmony))
    base_hue = rng.range(0.0, 360.0)
    base_sat = rng.range(0.5, 1.0)
    key_hues = [(base_hue + offset) % 360.0 for offset in _HARMONY_OFFSETS[harmony]]

    anchors: list[Color] = []
    for i, (lightness, saturation) in enumerate(zip(_LIGHTNESS_CURVE, _SATURATION_CURVE)):
        hue = (key_hues[i % len(key_hues)] + rng.range(-10.0, 10.0)) % 360.0
        sat = _clamp(base_sat * saturation + rng.range(-0.05, 0.05), 0.0, 1.0)
        lit = _clamp(lightness + rng.range(-0.03, 0.03), 0.02, 0.98)
        anchors.append(hsl_to_rgb(hue, sat, lit))
    return anchors


_TWILIGHT: tuple[Color, ...] = (
    (10, 2, 30), (40, 5, 80), (90, 20, 140), (160, 50, 180),
    (220, 100, 160), (255, 160, 120), (255, 220, 180), (255, 255, 240),
    (200, 180, 255), (120, 100, 200), (60, 40, 140), (20, 10, 60),
)

_PRESETS: dict[Palette, tuple[Color, ...]] = {
    Palette.TWILIGHT: _TWILIGHT,
    Palette.OCEAN: (
        (2, 5, 20), (5, 20, 60), (10, 50, 120), (20, 100, 160),
        (40, 160, 190), (100, 210, 220), (180, 240, 240), (240, 255, 255),
        (100, 200, 230), (30, 120, 180), (10, 60, 130), (2, 20, 60),
    ),
    Palette.FIRE: (
        (10, 0, 0), (40, 5, 0), (100, 15, 0), (180, 40, 0),
        (240, 80, 0), (255, 140, 20), (255, 200, 60), (255, 255, 160),
        (255, 220, 80), (220, 120, 10), (150, 50, 0), (60, 10, 0),
    ),
    Palette.NEON: (
        (0, 0, 0), (20, 0, 40), (60, 0, 100), (0, 80, 180),
        (0, 200, 200), (0, 255, 150), (150, 255, 0), (255, 255, 0),
        (255, 100, 200), (200, 0, 255), (100, 0, 200), (30, 0, 60),
    ),
    Palette.FROST: (
        (240, 248, 255), (200, 220, 240), (160, 200, 235), (120, 180, 230),
        (80, 150, 220), (50, 120, 210), (30, 80, 180), (15, 50, 140),
        (5, 25, 80), (2, 10, 40), (20, 40, 90), (80, 120, 180),
    ),
    Palette.EARTH: (
        (15, 10, 5), (40, 25, 10), (80, 50, 20), (130, 80, 30),
        (180, 120, 50), (210, 170, 80), (230, 210, 140), (245, 240, 200),
        (180, 200, 130), (100, 150, 80), (50, 100, 50), (20, 50, 20),
    ),
    Palette.SAKURA: (
        (30, 5, 20), (80, 10, 50), (150, 30, 80), (200, 60, 120),
        (240, 110, 160), (255, 170, 200), (255, 220, 230), (255, 245, 245),
        (255, 200, 210), (230, 130, 170), (180, 60, 110), (100, 20, 60),
    ),
    # Crust, Mantle, Blue, Sapphire, Teal, Green, Yellow, Peach, Red, Pink, Mauve, Base
    Palette.CATPPUCCIN_MOCHA: (
        (17, 17, 27), (24, 24, 37), (137, 180, 250), (116, 199, 236),
        (148, 226, 213), (166, 227, 161), (249, 226, 175), (250, 179, 135),
        (243, 139, 168), (245, 194, 231), (203, 166, 247), (30, 30, 46),
    ),
    Palette.CATPPUCCIN_MACCHIATO: (
        (24, 25, 38), (30, 32, 48), (138, 173, 244), (125, 196, 228),
        (139, 213, 202), (166, 218, 149), (238, 212, 159), (245, 169, 127),
        (237, 135, 150), (245, 189, 230), (198, 160, 246), (36, 39, 58),
    ),
    Palette.CATPPUCCIN_FRAPPE: (
        (35, 38, 52), (41, 44, 60), (140, 170, 238), (133, 193, 220),
        (129, 200, 190), (166, 209, 137), (229, 200, 144), (239, 159, 118),
        (231, 130, 132), (244, 184, 228), (202, 158, 230), (48, 52, 70),
    ),
    Palette.CATPPUCCIN_LATTE: (
        (220, 224, 232), (230, 233, 239), (30, 102, 245), (32, 159, 181),
        (23, 146, 153), (64, 160, 43), (223, 142, 29), (254, 100, 11),
        (210, 15, 57), (234, 118, 203), (136, 57, 239), (239, 241, 245),
    ),
    # An unresolved random palette falls back to a pleasant default.
    Palette.RANDOM: _TWILIGHT,
}


def palette_anchors(palette: Palette) -> list[Color]:
    """Return the preset anchor colours of a palette."""
    return list(_PRESETS[palette])


def build_colormap_from_anchors(anchors: Sequence[Color], n: int) -> list[Color]:
    """Linearly interpolate `n` colours through evenly spaced anchors."""
    num = len(anchors)
    if num < 2:
        raise ValueError("a colormap needs at least 2 anchors")
    xs = [i / (num - 1) for i in range(num)]
    colormap: list[Color] = []
    for i in range(n):
        t = i / (n - 1) if n > 1 else math.nan
        seg = next(
            (j for j in range(num - 1) if xs[j] <= t <= xs[j + 1]),
            0,
        )
        width = xs[seg + 1] - xs[seg]
        local_t = (t - xs[seg]) / width if width > 0.0 else 0.0
        a, b = anchors[seg], anchors[seg + 1]
        colormap.append(
            tuple(_to_u8(ca + (cb - ca) * local_t) for ca, cb in zip(a, b))  # type: ignore[misc]
        )
    return colormap


def resolve_palette(palette: Palette, rng: Rng) -> list[Color]:
    """Return concrete anchors, generating a fresh palette for `Palette.RANDOM`."""
    if palette is Palette.RANDOM:
        return generate_random_palette(rng)
    return palette_anchors(palette)