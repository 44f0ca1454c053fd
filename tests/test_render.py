import numpy as np
import pytest
from PIL import Image

from fractalpaper.palettes import build_colormap_from_anchors
from fractalpaper.render import downsample, render, render_buddhabrot, render_flame

ANCHORS = [(200, 10, 10), (10, 200, 10), (10, 10, 200)]
CMAP = build_colormap_from_anchors(ANCHORS, 2048)


def pixels(img):
    return np.asarray(img)


def test_render_zero_data_is_black():
    img = render([0.0] * 8, 4, 2, ANCHORS, 0.3, 12.0)
    assert img.size == (4, 2)
    assert not pixels(img).any()


def test_render_maps_values_through_colormap():
    img = render([0.0, 1.0, 0.5, 0.0], 4, 1, ANCHORS, 0.0, 1.0)
    row = pixels(img)[0]
    assert tuple(row[0]) == (0, 0, 0)
    assert tuple(row[1]) == ANCHORS[0]
    assert tuple(row[2]) == CMAP[1024]


def test_render_normalises_against_at_least_one():
    img = render([0.25], 1, 1, ANCHORS, 0.0, 1.0)
    assert tuple(pixels(img)[0][0]) == CMAP[512]


def test_render_applies_colour_offset():
    img = render([1.0], 1, 1, ANCHORS, 0.5, 1.0)
    assert tuple(pixels(img)[0][0]) == CMAP[1024]


def test_render_rejects_wrong_length():
    with pytest.raises(ValueError):
        render([1.0, 2.0, 3.0], 2, 2, ANCHORS, 0.0, 1.0)


def test_render_flame_black_and_full_brightness():
    img = render_flame([0.0, 2.0], [0.7, 0.0], 2, 1, ANCHORS, 0.0)
    row = pixels(img)[0]
    assert tuple(row[0]) == (0, 0, 0)
    assert tuple(row[1]) == ANCHORS[0]


def test_render_flame_denser_is_brighter():
    img = render_flame([1.0, 4.0], [0.0, 0.0], 2, 1, ANCHORS, 0.0)
    dim, bright = pixels(img)[0]
    assert tuple(bright) == ANCHORS[0]
    assert np.all(dim <= bright)
    assert dim.sum() > 0


def test_render_buddhabrot_zero_is_black():
    img = render_buddhabrot([0.0] * 6, [0.0] * 6, [0.0] * 6, 3, 2, ANCHORS, 0.0)
    assert img.size == (3, 2)
    assert not pixels(img).any()


def test_render_buddhabrot_balanced_channels_take_middle_colour():
    img = render_buddhabrot([5.0], [5.0], [5.0], 1, 1, ANCHORS, 0.0)
    assert tuple(pixels(img)[0][0]) == CMAP[1024]


def test_render_buddhabrot_single_channel_is_dimmed():
    img = render_buddhabrot([0.0], [0.0], [3.0], 1, 1, ANCHORS, 0.0)
    px = pixels(img)[0][0]
    assert np.all(px <= np.array(ANCHORS[0]))
    assert px.sum() > 0


def test_downsample_factor_one_copies():
    src = Image.fromarray(np.arange(24, dtype=np.uint8).reshape(2, 4, 3))
    out = downsample(src, 1)
    assert out is not src
    assert np.array_equal(pixels(out), pixels(src))


def test_downsample_uniform_blocks_keep_colour():
    arr = np.zeros((2, 4, 3), dtype=np.uint8)
    arr[:, :2] = (30, 60, 90)
    arr[:, 2:] = (200, 100, 50)
    out = downsample(Image.fromarray(arr), 2)
    assert out.size == (2, 1)
    assert tuple(pixels(out)[0][0]) == (30, 60, 90)
    assert tuple(pixels(out)[0][1]) == (200, 100, 50)


def test_downsample_averages_rounding_down():
    arr = np.array([[[0, 0, 0], [255, 255, 255]], [[255, 255, 255], [0, 0, 0]]], dtype=np.uint8)
    out = downsample(Image.fromarray(arr), 2)
    assert tuple(pixels(out)[0][0]) == (127, 127, 127)


def test_downsample_drops_partial_blocks():
    src = Image.fromarray(np.full((3, 5, 3), 9, dtype=np.uint8))
    out = downsample(src, 2)
    assert out.size == (2, 1)
    assert np.all(pixels(out) == 9)