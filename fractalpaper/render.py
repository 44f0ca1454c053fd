"""Turning fractal data into RGB images."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from PIL import Image

from .model import Color
from .palettes import build_colormap_from_anchors

_CMAP_SIZE = 2048
_INDEX_LIMIT = 2.0**62


def _colormap(anchors: Sequence[Color]) -> np.ndarray:
    return np.array(build_colormap_from_anchors(anchors, _CMAP_SIZE), dtype=np.int64)


def _index(values) -> np.ndarray:
    """Saturating cast to a non-negative integer (NaN becomes 0)."""
    v = np.nan_to_num(np.asarray(values, dtype=float), nan=0.0, posinf=_INDEX_LIMIT, neginf=0.0)
    return np.clip(v, 0.0, _INDEX_LIMIT).astype(np.int64)


def _offset(color_offset: float) -> int:
    return int(_index(color_offset * _CMAP_SIZE))


def _values(data, width: int, height: int) -> np.ndarray:
    arr = np.asarray(data, dtype=float).ravel()
    if arr.size != width * height:
        raise ValueError(f"expected {width * height} values, got {arr.size}")
    return arr


def _max_positive(data: np.ndarray) -> float:
    positive = data[data > 0.0]
    return max(float(positive.max()) if positive.size else 0.0, 1.0)


def _scaled(base: np.ndarray, brightness: np.ndarray) -> np.ndarray:
    return np.minimum(_index(base * brightness[:, None]), 255)


def _image(pixels: np.ndarray, width: int, height: int) -> Image.Image:
    if width == 0 or height == 0:
        return Image.new("RGB", (width, height))
    return Image.fromarray(pixels.reshape(height, width, 3).astype(np.uint8))


def render(
    data,
    width: int,
    height: int,
    anchors: Sequence[Color],
    color_offset: float,
    cycle_factor: float,
) -> Image.Image:
    """Colour escape-time values through a cycling colormap; zeros are black."""
    values = _values(data, width, height)
    cmap = _colormap(anchors)
    normed = values / _max_positive(values)
    idx = (_index(normed * cycle_factor * _CMAP_SIZE) + _offset(color_offset)) % _CMAP_SIZE
    pixels = cmap[idx]
    pixels[values == 0.0] = 0
    return _image(pixels, width, height)


def render_flame(
    density,
    color_map,
    width: int,
    height: int,
    anchors: Sequence[Color],
    color_offset: float,
) -> Image.Image:
    """Hue from each pixel's colour index, brightness from its density."""
    d = _values(density, width, height)
    c = _values(color_map, width, height)
    cmap = _colormap(anchors)
    with np.errstate(all="ignore"):
        brightness = np.power(d / _max_positive(d), 0.5)
    idx = (_index(c * _CMAP_SIZE) + _offset(color_offset)) % _CMAP_SIZE
    pixels = _scaled(cmap[idx], brightness)
    pixels[d == 0.0] = 0
    return _image(pixels, width, height)


def _percentile_max(data: np.ndarray) -> float:
    positive = np.sort(data[data > 0.0])
    if positive.size == 0:
        return 1.0
    idx = min(int(positive.size * 0.995), positive.size - 1)
    return max(float(positive[idx]), 1.0)


def render_buddhabrot(
    r_data,
    g_data,
    b_data,
    width: int,
    height: int,
    anchors: Sequence[Color],
    color_offset: float,
) -> Image.Image:
    """Blend three channel densities: brightness from their sum, hue from their ratio."""
    r = _values(r_data, width, height)
    g = _values(g_data, width, height)
    b = _values(b_data, width, height)
    cmap = _colormap(anchors)
    rn = np.minimum(r / _percentile_max(r), 1.0)
    gn = np.minimum(g / _percentile_max(g), 1.0)
    bn = np.minimum(b / _percentile_max(b), 1.0)
    with np.errstate(all="ignore"):
        brightness = np.power((rn + gn + bn) / 3.0, 0.4)
        total = rn + gn + bn
        color_pos = np.where(
            total > 0.0,
            (rn * 0.0 + gn * 0.5 + bn * 1.0) / np.where(total > 0.0, total, 1.0),
            0.0,
        )
    idx = (_index(color_pos * _CMAP_SIZE) + _offset(color_offset)) % _CMAP_SIZE
    pixels = _scaled(cmap[idx], brightness)
    pixels[(r == 0.0) & (g == 0.0) & (b == 0.0)] = 0
    return _image(pixels, width, height)


def downsample(img: Image.Image, factor: int) -> Image.Image:
    """Shrink an image by averaging factor x factor blocks (rounding down)."""
    if factor <= 1:
        return img.copy()
    new_w = img.width // factor
    new_h = img.height // factor
    if new_w == 0 or new_h == 0:
        return Image.new("RGB", (new_w, new_h))
    arr = np.asarray(img.convert("RGB"), dtype=np.int64)
    blocks = arr[: new_h * factor, : new_w * factor].reshape(new_h, factor, new_w, factor, 3)
    averaged = blocks.sum(axis=(1, 3)) // (factor * factor)
    return Image.fromarray(averaged.astype(np.uint8))