"""Density fractals: strange attractors, the Buddhabrot and flames.

These fractals plot orbits into a histogram instead of colouring each pixel
from its own iteration. Work is split into many independent orbit streams
that advance together as numpy arrays.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Callable, Sequence
from typing import Optional

import numpy as np

from .model import AttractorType, FlameTransform
from .rng import Rng

_GOLDEN = 0x9E3779B97F4A7C15
_MASK = (1 << 64) - 1
_STEPS_PER_STREAM = 256
_MAX_STREAMS = 4096
_DIVERGED = 1e10
_FIXED_POINT = 1_000_000.0
_INT_LIMIT = 9e18


def _stream_count(samples: int) -> int:
    return max(1, min(_MAX_STREAMS, samples // _STEPS_PER_STREAM))


def _stream_rng(seed: int, stream: int) -> Rng:
    return Rng((seed + stream * _GOLDEN) & _MASK)


def _pixel(values: np.ndarray) -> np.ndarray:
    """Truncate toward zero like a saturating integer cast (NaN becomes 0)."""
    v = np.nan_to_num(values, nan=0.0, posinf=_INT_LIMIT, neginf=-_INT_LIMIT)
    return np.trunc(np.clip(v, -_INT_LIMIT, _INT_LIMIT)).astype(np.int64)


class Histogram:
    """A row-major grid of hit counters."""

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError("histogram dimensions must not be negative")
        self.width = width
        self.height = height
        self.bins = np.zeros(width * height, dtype=np.int64)

    def increment(self, x: int, y: int) -> None:
        """Count one hit at (x, y); points outside the grid are ignored."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.bins[y * self.width + x] += 1

    def to_list(self) -> list[float]:
        """The counts as floats in row-major order."""
        return [float(v) for v in self.bins]

    def _add(
        self, px: np.ndarray, py: np.ndarray, mask: Optional[np.ndarray] = None
    ) -> tuple[np.ndarray, np.ndarray]:
        """Count every in-range pixel; return their flat indices and the mask used."""
        inside = (px >= 0) & (px < self.width) & (py >= 0) & (py < self.height)
        if mask is not None:
            inside &= mask
        flat = py[inside] * self.width + px[inside]
        np.add.at(self.bins, flat, 1)
        return flat, inside


def tone_map_log(histogram: Sequence[float] | np.ndarray) -> np.ndarray:
    """Compress counts with log(1 + v); non-positive entries become 0."""
    h = np.asarray(histogram, dtype=float)
    out = np.zeros_like(h)
    positive = h > 0.0
    out[positive] = np.log1p(h[positive])
    return out


# ── strange attractors ──────────────────────────────────────────────────────


def _step(x, y, a, b, c, d, kind: AttractorType, sin: Callable, cos: Callable):
    if kind is AttractorType.CLIFFORD:
        return sin(a * y) + c * cos(a * x), sin(b * x) + d * cos(b * y)
    return sin(a * y) - cos(b * x), sin(c * x) - cos(d * y)


def attractor_step(
    x: float, y: float, a: float, b: float, c: float, d: float, kind: AttractorType
) -> tuple[float, float]:
    """One iteration of a Clifford or de Jong attractor."""
    return _step(x, y, a, b, c, d, kind, math.sin, math.cos)


def compute_attractor(
    width: int,
    height: int,
    a: float,
    b: float,
    c: float,
    d: float,
    kind: AttractorType,
    samples: int,
    rng_seed: int,
) -> np.ndarray:
    """Log-tone-mapped orbit density of an attractor, framed to fit the image."""
    x = y = 0.1
    big = sys.float_info.max
    x_min, x_max, y_min, y_max = big, -big, big, -big
    for _ in range(200_000):
        x, y = attractor_step(x, y, a, b, c, d, kind)
        if math.isfinite(x) and math.isfinite(y):
            x_min, x_max = min(x_min, x), max(x_max, x)
            y_min, y_max = min(y_min, y), max(y_max, y)

    margin = 0.05
    x_range = (x_max - x_min) * (1.0 + margin)
    y_range = (y_max - y_min) * (1.0 + margin)
    x_center = (x_min + x_max) / 2.0
    y_center = (y_min + y_max) / 2.0

    aspect = width / height
    if x_range > aspect * y_range:
        view_w, view_h = x_range, x_range / aspect
    else:
        view_w, view_h = y_range * aspect, y_range
    vx_min = x_center - view_w / 2.0
    vy_min = y_center - view_h / 2.0

    histogram = Histogram(width, height)
    streams = _stream_count(samples)
    steps = samples // streams
    starts = []
    for stream in range(streams):
        rng = _stream_rng(rng_seed, stream)
        sx = rng.range(-0.1, 0.1)
        sy = rng.range(-0.1, 0.1)
        starts.append((sx, sy))
    xs = np.array([p[0] for p in starts])
    ys = np.array([p[1] for p in starts])

    with np.errstate(all="ignore"):
        for i in range(steps):
            xs, ys = _step(xs, ys, a, b, c, d, kind, np.sin, np.cos)
            if i < 100:
                continue
            histogram._add(
                _pixel((xs - vx_min) / view_w * width),
                _pixel((ys - vy_min) / view_h * height),
            )
    return tone_map_log(histogram.bins)


# ── Buddhabrot ──────────────────────────────────────────────────────────────


def _in_cardioid_or_bulb(cr: np.ndarray, ci: np.ndarray) -> np.ndarray:
    ci2 = ci * ci
    shifted = cr - 0.25
    q = shifted * shifted + ci2
    return (q * (q + shifted) <= 0.25 * ci2) | ((cr + 1.0) * (cr + 1.0) + ci2 <= 0.0625)


def _escape_lengths(cr: np.ndarray, ci: np.ndarray, max_iter: int) -> np.ndarray:
    """Orbit length before |z| exceeds 2, or -1 for points that stay bounded."""
    lengths = np.full(cr.size, -1, dtype=np.int64)
    alive = np.arange(cr.size)
    zr = np.zeros(cr.size)
    zi = np.zeros(cr.size)
    for k in range(max_iter):
        if alive.size == 0:
            break
        zr2, zi2 = zr * zr, zi * zi
        out = zr2 + zi2 > 4.0
        if out.any():
            lengths[alive[out]] = k
            keep = ~out
            alive = alive[keep]
            zr, zi, zr2, zi2, cr, ci = (v[keep] for v in (zr, zi, zr2, zi2, cr, ci))
        zr, zi = zr2 - zi2 + cr, 2.0 * zr * zi + ci
    return lengths


def compute_buddhabrot(
    width: int,
    height: int,
    samples: int,
    r_iter: int,
    g_iter: int,
    b_iter: int,
    rng_seed: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Orbit-density histograms of escaping points, one per channel iteration limit."""
    hist_r = Histogram(width, height)
    hist_g = Histogram(width, height)
    hist_b = Histogram(width, height)
    channels = ((b_iter, hist_b), (g_iter, hist_g), (r_iter, hist_r))
    max_iter = max(r_iter, g_iter, b_iter)

    view_x_min, view_x_max = -2.5, 1.5
    view_x_range = view_x_max - view_x_min
    view_y_range = view_x_range / (width / height)
    view_y_min = -view_y_range / 2.0

    streams = _stream_count(samples)
    steps = samples // streams
    gen = np.random.default_rng(rng_seed)
    cur_r = np.full(streams, -0.75)
    cur_i = np.full(streams, 0.1)
    step_size = 0.01

    with np.errstate(all="ignore"):
        for sample in range(steps):
            if sample % 100 == 0:
                cr = gen.uniform(-2.0, 1.0, streams)
                ci = gen.uniform(-1.5, 1.5, streams)
            else:
                cr = cur_r + gen.uniform(-step_size, step_size, streams)
                ci = cur_i + gen.uniform(-step_size, step_size, streams)

            candidates = np.flatnonzero(~_in_cardioid_or_bulb(cr, ci))
            lengths = _escape_lengths(cr[candidates], ci[candidates], max_iter)
            escaped = lengths >= 0
            lanes = candidates[escaped]
            if lanes.size == 0:
                continue
            cur_r[lanes] = cr[lanes]
            cur_i[lanes] = ci[lanes]

            lengths = lengths[escaped]
            orbit_cr, orbit_ci = cr[lanes], ci[lanes]
            zr = np.zeros(lanes.size)
            zi = np.zeros(lanes.size)
            for k in range(int(lengths.max())):
                active = lengths > k
                if not active.all():
                    lengths, zr, zi, orbit_cr, orbit_ci = (
                        v[active] for v in (lengths, zr, zi, orbit_cr, orbit_ci)
                    )
                px = _pixel((zr - view_x_min) / view_x_range * width)
                py = _pixel((zi - view_y_min) / view_y_range * height)
                for limit, hist in channels:
                    if k < limit:
                        hist._add(px, py)
                zr, zi = zr * zr - zi * zi + orbit_cr, 2.0 * zr * zi + orbit_ci

    return (
        hist_r.bins.astype(float),
        hist_g.bins.astype(float),
        hist_b.bins.astype(float),
    )


# ── flames ──────────────────────────────────────────────────────────────────


def _variations(x: np.ndarray, y: np.ndarray, w: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Weighted sum of the ten variations; `w` has one row per variation."""
    r2 = x * x + y * y
    r = np.sqrt(r2)
    theta = np.arctan2(y, x)
    s = np.where(r2 > 1e-10, 1.0 / np.where(r2 > 1e-10, r2, 1.0), 1.0)
    inv_r = np.where(r > 1e-10, 1.0 / np.where(r > 1e-10, r, 1.0), 1.0)
    sr, cr = np.sin(r2), np.cos(r2)
    t = theta / math.pi
    pr = math.pi * r
    terms = (
        (x, y),
        (np.sin(x), np.sin(y)),
        (x * s, y * s),
        (x * sr - y * cr, x * cr + y * sr),
        (inv_r * (x - y) * (x + y), inv_r * 2.0 * x * y),
        (theta / math.pi, r - 1.0),
        (r * np.sin(theta + r), r * np.cos(theta - r)),
        (r * np.sin(theta * r), -r * np.cos(theta * r)),
        (t * np.sin(pr), t * np.cos(pr)),
        (inv_r * (np.cos(theta) + np.sin(r)), inv_r * (np.sin(theta) - np.cos(r))),
    )
    vx = np.zeros(np.broadcast(x, w[0]).shape)
    vy = np.zeros_like(vx)
    for wk, (tx, ty) in zip(w, terms):
        used = wk != 0.0
        vx = vx + np.where(used, wk * tx, 0.0)
        vy = vy + np.where(used, wk * ty, 0.0)
    return vx, vy


def apply_variations(x: float, y: float, weights: Sequence[float]) -> tuple[float, float]:
    """Apply the ten classic flame variations with the given weights."""
    w = np.asarray(weights, dtype=float)
    if w.shape != (10,):
        raise ValueError("exactly 10 variation weights are required")
    with np.errstate(all="ignore"):
        vx, vy = _variations(np.array([float(x)]), np.array([float(y)]), w[:, None])
    return float(vx[0]), float(vy[0])


def compute_flame(
    width: int,
    height: int,
    transforms: Sequence[FlameTransform],
    samples: int,
    rng_seed: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Run the chaos game; return log density and mean colour index per pixel."""
    if not transforms:
        raise ValueError("a flame needs at least one transform")
    total_weight = sum(t.weight for t in transforms)
    cum_weights = np.cumsum([t.weight / total_weight for t in transforms])
    coefficients = np.array([[t.a, t.b, t.c, t.d, t.e, t.f] for t in transforms])
    variations = np.array([t.variations for t in transforms])
    colors = np.array([t.color for t in transforms])
    count = len(transforms)

    histogram = Histogram(width, height)
    color_acc = np.zeros(width * height)
    streams = _stream_count(samples)
    steps = samples // streams
    gen = np.random.default_rng(rng_seed)
    x = gen.uniform(-1.0, 1.0, streams)
    y = gen.uniform(-1.0, 1.0, streams)
    color = np.full(streams, 0.5)

    with np.errstate(all="ignore"):
        for i in range(steps):
            chosen = np.searchsorted(cum_weights, gen.random(streams), side="left")
            chosen[chosen >= count] = 0
            a, b, c, d, e, f = coefficients[chosen].T
            ax = a * x + b * y + c
            ay = d * x + e * y + f
            x, y = _variations(ax, ay, variations[chosen].T)
            color = (color + colors[chosen]) / 2.0

            bad = ~np.isfinite(x) | ~np.isfinite(y) | (np.abs(x) > _DIVERGED) | (np.abs(y) > _DIVERGED)
            if bad.any():
                n_bad = int(bad.sum())
                x[bad] = gen.uniform(-1.0, 1.0, n_bad)
                y[bad] = gen.uniform(-1.0, 1.0, n_bad)
                color[bad] = 0.5

            if i < 20:
                continue

            px = _pixel((x + 2.5) / 5.0 * width)
            py = _pixel((y + 1.5) / 3.0 * height)
            flat, inside = histogram._add(px, py, ~bad)
            np.add.at(color_acc, flat, np.floor(color[inside] * _FIXED_POINT))

    raw = histogram.bins.astype(float)
    density = tone_map_log(raw)
    color_map = np.zeros_like(raw)
    hit = raw > 0.0
    color_map[hit] = (color_acc[hit] / _FIXED_POINT) / raw[hit]
    return density, color_map


def random_flame_transform(rng: Rng) -> FlameTransform:
    """A random affine map with one to three normalised variations."""
    variations = [0.0] * 10
    for _ in range(rng.choose((1, 1, 2, 2, 3))):
        variations[rng.next_u64() % 10] = rng.range(0.2, 1.0)
    total = sum(variations)
    if total > 0.0:
        variations = [v / total for v in variations]
    else:
        variations[0] = 1.0
    return FlameTransform(
        a=rng.range(-1.0, 1.0),
        b=rng.range(-1.0, 1.0),
        c=rng.range(-0.5, 0.5),
        d=rng.range(-1.0, 1.0),
        e=rng.range(-1.0, 1.0),
        f=rng.range(-0.5, 0.5),
        variations=tuple(variations),
        weight=rng.range(0.2, 1.0),
        color=rng.f64(),
    )