import pytest

from fractalpaper.model import Palette
from fractalpaper.palettes import (
    build_colormap_from_anchors,
    generate_random_palette,
    hsl_to_rgb,
    palette_anchors,
    resolve_palette,
)
from fractalpaper.rng import Rng


def test_hsl_pure_red():
    assert hsl_to_rgb(0.0, 1.0, 0.5) == (255, 0, 0)


def test_hsl_unsaturated_is_grey():
    for hue in (0.0, 45.0, 200.0, 359.0):
        r, g, b = hsl_to_rgb(hue, 0.0, 0.3)
        assert r == g == b


def test_hsl_extremes_of_lightness():
    assert hsl_to_rgb(120.0, 1.0, 1.0) == (255, 255, 255)
    assert hsl_to_rgb(240.0, 1.0, 0.0) == (0, 0, 0)


def test_hsl_channels_stay_in_byte_range():
    for h in range(0, 361, 15):
        for s in (0.0, 0.5, 1.0):
            for l in (0.02, 0.5, 0.98):
                assert all(0 <= c <= 255 for c in hsl_to_rgb(float(h), s, l))


def test_every_preset_has_twelve_anchors():
    for palette in Palette:
        anchors = palette_anchors(palette)
        assert len(anchors) == 12
        assert all(len(c) == 3 and all(0 <= v <= 255 for v in c) for c in anchors)


def test_preset_values_from_tables():
    assert palette_anchors(Palette.TWILIGHT)[0] == (10, 2, 30)
    assert palette_anchors(Palette.CATPPUCCIN_MOCHA)[2] == (137, 180, 250)


def test_random_preset_falls_back_to_twilight():
    assert palette_anchors(Palette.RANDOM) == palette_anchors(Palette.TWILIGHT)


def test_colormap_length_and_endpoints():
    anchors = palette_anchors(Palette.OCEAN)
    cmap = build_colormap_from_anchors(anchors, 2048)
    assert len(cmap) == 2048
    assert cmap[0] == anchors[0]
    assert cmap[-1] == anchors[-1]


def test_colormap_is_monotone_between_two_anchors():
    cmap = build_colormap_from_anchors([(0, 0, 0), (255, 255, 255)], 64)
    reds = [c[0] for c in cmap]
    assert reds == sorted(reds)
    assert all(c[0] == c[1] == c[2] for c in cmap)


def test_colormap_needs_two_anchors():
    with pytest.raises(ValueError):
        build_colormap_from_anchors([(1, 2, 3)], 10)


def test_random_palette_is_deterministic():
    first = generate_random_palette(Rng(42))
    second = generate_random_palette(Rng(42))
    assert first == second
    assert len(first) == 12
    assert all(all(0 <= v <= 255 for v in c) for c in first)


def test_random_palettes_vary_with_seed():
    palettes = {tuple(generate_random_palette(Rng(seed))) for seed in range(10)}
    assert len(palettes) > 1
    assert all(len(p) == 12 for p in palettes)


def test_resolve_palette_preset_uses_table():
    assert resolve_palette(Palette.FIRE, Rng(1)) == palette_anchors(Palette.FIRE)


def test_resolve_palette_random_generates():
    assert resolve_palette(Palette.RANDOM, Rng(9)) == generate_random_palette(Rng(9))