"""Searching parameter space for visually rich fractal views.

Every candidate view is probed cheaply and scored from 0 (boring) to 1
(visually rich). Each search keeps the best candidate it has seen and stops
early once one scores well enough.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

import numpy as np

from .density import _variations as _flame_variations
from .density import random_flame_transform
from .escape import (
    find_boundary_point,
    iterate_burning_ship,
    iterate_julia,
    iterate_mandelbrot,
    iterate_phoenix,
    iterate_tricorn,
)
from .model import AttractorType, FlameTransform, FractalParams, FractalType
from .rng import Rng

Point = tuple[float, float]
IterateFn = Callable[[float, float, int], float]

_VIEW_COLS = 48
_VIEW_ROWS = 16
_PROBE_W = 272
_PROBE_H = 72
_DIVERGED = 1e10

_ATTRACTOR_STREAMS = 200
_ATTRACTOR_STEPS = 1000  # 200 streams x 1000 steps = 200,000 probe samples
_FLAME_STREAMS = 500
_FLAME_STEPS = 1000  # 500 streams x 1000 steps = 500,000 probe samples

_GOOD_ENOUGH = 0.80
_GOOD_ENOUGH_ATTRACTOR = 0.85


# ── scoring ─────────────────────────────────────────────────────────────────


def score_viewport(
    center: Point,
    zoom: float,
    max_iter: int,
    iterate_fn: IterateFn,
    width: int,
    height: int,
) -> float:
    """Score an escape-time view on a 48x16 probe grid.

    Rewards a moderate share of points inside the set, detail spread across
    the full width, and varied, deep escape counts.
    """
    aspect = width / height
    x_range = 3.5 / zoom
    y_range = x_range / aspect
    x_min = center[0] - x_range / 2.0
    y_min = center[1] - y_range / 2.0

    grid = [
        [
            iterate_fn(
                x_min + x_range * (col + 0.5) / _VIEW_COLS,
                y_min + y_range * (row + 0.5) / _VIEW_ROWS,
                max_iter,
            )
            for col in range(_VIEW_COLS)
        ]
        for row in range(_VIEW_ROWS)
    ]
    values = [v for row in grid for v in row]

    inside_frac = sum(1 for v in values if v == 0.0) / len(values)
    if inside_frac < 0.01 or inside_frac > 0.60:
        inside_score = 0.05
    elif 0.05 <= inside_frac <= 0.35:
        inside_score = 1.0
    else:
        inside_score = 0.4

    quarter_w = _VIEW_COLS // 4
    quarters_active = 0
    for q in range(4):
        cells = [v for row in grid for v in row[q * quarter_w:(q + 1) * quarter_w]]
        q_frac = sum(1 for v in cells if v == 0.0) / len(cells)
        if 0.05 < q_frac < 0.90:
            quarters_active += 1
    spread_score = {4: 1.0, 3: 0.7, 2: 0.3}.get(quarters_active, 0.05)

    escaped = [v for v in values if v > 0.0]
    if escaped:
        mean = sum(escaped) / len(escaped)
        variance = sum((v - mean) ** 2 for v in escaped) / len(escaped)
        diversity_score = min(math.sqrt(variance) / max_iter * 10.0, 1.0)
        depth_score = min(mean / max_iter * 5.0, 1.0)
    else:
        diversity_score = depth_score = 0.0

    return (
        inside_score * 0.25
        + spread_score * 0.35
        + diversity_score * 0.25
        + depth_score * 0.15
    )


def _filled_grid(xs: np.ndarray, ys: np.ndarray, vx: float, vy: float, vw: float, vh: float) -> np.ndarray:
    """Hit counts of finite points on the probe grid, shaped (rows, cols)."""
    px = np.trunc((xs - vx) / vw * _PROBE_W).astype(np.int64)
    py = np.trunc((ys - vy) / vh * _PROBE_H).astype(np.int64)
    inside = (px >= 0) & (px < _PROBE_W) & (py >= 0) & (py < _PROBE_H)
    counts = np.zeros(_PROBE_W * _PROBE_H, dtype=np.int64)
    np.add.at(counts, py[inside] * _PROBE_W + px[inside], 1)
    return counts.reshape(_PROBE_H, _PROBE_W)


def _quarters_active(counts: np.ndarray, threshold: float) -> int:
    qw = _PROBE_W // 4
    return sum(
        1
        for q in range(4)
        if np.count_nonzero(counts[:, q * qw:(q + 1) * qw]) / (qw * _PROBE_H) > threshold
    )


def _attractor_arrays(x, y, a, b, c, d, kind: AttractorType):
    if kind is AttractorType.CLIFFORD:
        return np.sin(a * y) + c * np.cos(a * x), np.sin(b * x) + d * np.cos(b * y)
    return np.sin(a * y) - np.cos(b * x), np.sin(c * x) - np.cos(d * y)


def score_attractor_params(a: float, b: float, c: float, d: float, kind: AttractorType) -> float:
    """Score attractor coefficients; divergent or collapsing orbits score 0."""
    xs = np.full(_ATTRACTOR_STREAMS, 0.1) + np.linspace(0.0, 1e-6, _ATTRACTOR_STREAMS)
    ys = np.full(_ATTRACTOR_STREAMS, 0.1)
    trail_x = []
    trail_y = []
    with np.errstate(all="ignore"):
        for i in range(_ATTRACTOR_STEPS):
            xs, ys = _attractor_arrays(xs, ys, a, b, c, d, kind)
            bad = (
                ~np.isfinite(xs)
                | ~np.isfinite(ys)
                | (np.abs(xs) > _DIVERGED)
                | (np.abs(ys) > _DIVERGED)
            )
            if bad.any():
                return 0.0
            if i >= 100:
                trail_x.append(xs)
                trail_y.append(ys)

    settled_x = np.concatenate(trail_x[1:])
    settled_y = np.concatenate(trail_y[1:])
    x_min, x_max = float(settled_x.min()), float(settled_x.max())
    y_min, y_max = float(settled_y.min()), float(settled_y.max())
    bbox_w = x_max - x_min
    bbox_h = y_max - y_min
    if bbox_w < 0.5 or bbox_h < 0.5:
        return 0.0

    bbox_aspect = bbox_w / bbox_h
    if bbox_aspect > 2.0:
        aspect_score = 1.0
    elif bbox_aspect > 1.0:
        aspect_score = 0.7
    else:
        aspect_score = 0.3

    aspect = _PROBE_W / _PROBE_H
    if bbox_aspect > aspect:
        vw, vh = bbox_w * 1.05, bbox_w * 1.05 / aspect
    else:
        vw, vh = bbox_h * 1.05 * aspect, bbox_h * 1.05
    vx = (x_min + x_max) / 2.0 - vw / 2.0
    vy = (y_min + y_max) / 2.0 - vh / 2.0

    counts = _filled_grid(np.concatenate(trail_x), np.concatenate(trail_y), vx, vy, vw, vh)
    fill_rate = np.count_nonzero(counts) / counts.size
    if fill_rate < 0.03 or fill_rate > 0.60:
        fill_score = 0.1
    elif 0.05 <= fill_rate <= 0.40:
        fill_score = 1.0
    else:
        fill_score = 0.5

    spread_score = {4: 1.0, 3: 0.6}.get(_quarters_active(counts, 0.02), 0.05)
    return fill_score * 0.30 + spread_score * 0.40 + aspect_score * 0.30


def score_flame_params(transforms: Sequence[FlameTransform], rng_seed: int) -> float:
    """Score a flame system by a short chaos-game probe; divergence scores 0."""
    if not transforms:
        raise ValueError("a flame needs at least one transform")
    total_weight = sum(t.weight for t in transforms)
    cum_weights = np.cumsum([t.weight / total_weight for t in transforms])
    coefficients = np.array([[t.a, t.b, t.c, t.d, t.e, t.f] for t in transforms])
    variations = np.array([t.variations for t in transforms])
    count = len(transforms)

    gen = np.random.default_rng(rng_seed)
    x = gen.uniform(-1.0, 1.0, _FLAME_STREAMS)
    y = gen.uniform(-1.0, 1.0, _FLAME_STREAMS)
    counts = np.zeros((_PROBE_H, _PROBE_W), dtype=np.int64)

    with np.errstate(all="ignore"):
        for i in range(_FLAME_STEPS):
            chosen = np.searchsorted(cum_weights, gen.random(_FLAME_STREAMS), side="left")
            chosen[chosen >= count] = 0
            a, b, c, d, e, f = coefficients[chosen].T
            x, y = _flame_variations(a * x + b * y + c, d * x + e * y + f, variations[chosen].T)
            bad = ~np.isfinite(x) | ~np.isfinite(y) | (np.abs(x) > _DIVERGED) | (np.abs(y) > _DIVERGED)
            if bad.any():
                return 0.0
            if i < 20:
                continue
            counts += _filled_grid(x, y, -2.5, -1.5, 5.0, 3.0)

    fill_rate = np.count_nonzero(counts) / counts.size
    if fill_rate < 0.02 or fill_rate > 0.60:
        fill_score = 0.1
    elif 0.05 <= fill_rate <= 0.40:
        fill_score = 1.0
    else:
        fill_score = 0.5

    vals = counts[counts > 0].astype(float)
    if vals.size:
        mean = float(vals.mean())
        cv = float(np.sqrt(((vals - mean) ** 2).mean())) / max(mean, 1.0)
        density_score = min(cv / 3.0, 1.0)
    else:
        density_score = 0.0

    spread_score = {4: 1.0, 3: 0.6}.get(_quarters_active(counts, 0.01), 0.1)
    return fill_score * 0.35 + density_score * 0.35 + spread_score * 0.30


# ── per-fractal searches ────────────────────────────────────────────────────


def _mandelbrot(rng: Rng, max_iter: int, width: int, height: int) -> FractalParams:
    best = FractalParams(center=(-0.75, 0.0), color_offset=rng.f64())
    best_score = 0.0
    for _ in range(80):
        angle = rng.range(0.0, math.tau)
        outside = (2.5 * math.cos(angle), 2.5 * math.sin(angle))
        boundary = find_boundary_point(outside, (-0.1, 0.0), max_iter)
        zoom = 10.0 ** rng.range(1.5, 4.0)
        score = score_viewport(boundary, zoom, max_iter, iterate_mandelbrot, width, height)
        if score > best_score:
            best_score = score
            best = FractalParams(center=boundary, zoom=zoom, color_offset=rng.f64())
        if best_score > _GOOD_ENOUGH:
            break
    return best


def _julia(rng: Rng, max_iter: int, width: int, height: int) -> FractalParams:
    best = FractalParams(julia_c=(-0.7269, 0.1889), color_offset=rng.f64())
    best_score = 0.0
    inside = (-0.1, 0.0)
    for _ in range(50):
        angle = rng.range(0.0, math.tau)
        outside = (2.0 * math.cos(angle), 2.0 * math.sin(angle))
        br, bi = find_boundary_point(outside, inside, 200)
        perturb = rng.range(0.001, 0.02)
        c = (br + perturb * (br - inside[0]), bi + perturb * (bi - inside[1]))
        zoom = 10.0 ** rng.range(0.0, 1.5)
        score = score_viewport(
            (0.0, 0.0), zoom, max_iter,
            lambda x, y, mi: iterate_julia(x, y, c[0], c[1], mi),
            width, height,
        )
        if score > best_score:
            best_score = score
            best = FractalParams(zoom=zoom, julia_c=c, color_offset=rng.f64())
        if best_score > _GOOD_ENOUGH:
            break
    return best


# (center_x, center_y, min_zoom, max_zoom): masts, hull, rigging, satellite ship
_BURNING_SHIP_REGIONS: tuple[tuple[float, float, float, float], ...] = (
    (-1.755, -0.028, 20.0, 200.0),
    (-1.762, -0.028, 50.0, 300.0),
    (-1.78, -0.008, 10.0, 80.0),
    (-1.74, -0.03, 15.0, 100.0),
    (-1.77, -0.01, 20.0, 150.0),
    (-1.76, -0.035, 30.0, 200.0),
    (-1.7, -0.05, 3.0, 20.0),
    (-1.755, -0.02, 40.0, 250.0),
    (-1.765, -0.015, 30.0, 180.0),
    (-0.515, -0.565, 20.0, 150.0),
)


def _burning_ship(rng: Rng, max_iter: int, width: int, height: int) -> FractalParams:
    best = FractalParams(center=(-1.75, -0.04), zoom=30.0, color_offset=rng.f64())
    best_score = 0.0
    for _ in range(80):
        cx, cy, min_z, max_z = rng.choose(_BURNING_SHIP_REGIONS)
        zoom = 10.0 ** rng.range(math.log10(min_z), math.log10(max_z))
        jitter = 0.5 / zoom
        jx = rng.range(-jitter, jitter)
        jy = rng.range(-jitter, jitter)
        center = (cx + jx, cy + jy)
        score = score_viewport(center, zoom, max_iter, iterate_burning_ship, width, height)
        if score > best_score:
            best_score = score
            best = FractalParams(center=center, zoom=zoom, color_offset=rng.f64())
        if best_score > _GOOD_ENOUGH:
            break
    return best


def _newton(rng: Rng) -> FractalParams:
    # Every root-basin boundary is detailed; stay near the origin where all three meet.
    cx = rng.range(-0.3, 0.3)
    cy = rng.range(-0.3, 0.3)
    zoom = 10.0 ** rng.range(0.3, 2.0)
    return FractalParams(center=(cx, cy), zoom=zoom, color_offset=rng.f64())


def _tricorn_boundary(outside: Point, inside: Point, max_iter: int) -> Point:
    o_r, o_i = outside
    i_r, i_i = inside
    for _ in range(64):
        mr, mi = (o_r + i_r) / 2.0, (o_i + i_i) / 2.0
        if iterate_tricorn(mr, mi, max_iter) == 0.0:
            i_r, i_i = mr, mi
        else:
            o_r, o_i = mr, mi
    return ((o_r + i_r) / 2.0, (o_i + i_i) / 2.0)


def _tricorn(rng: Rng, max_iter: int, width: int, height: int) -> FractalParams:
    best = FractalParams(center=(-0.3, 0.0), color_offset=rng.f64())
    best_score = 0.0
    for _ in range(80):
        angle = rng.range(0.0, math.tau)
        outside = (2.5 * math.cos(angle), 2.5 * math.sin(angle))
        boundary = _tricorn_boundary(outside, (-0.2, 0.0), max_iter)
        zoom = 10.0 ** rng.range(1.0, 3.5)
        score = score_viewport(boundary, zoom, max_iter, iterate_tricorn, width, height)
        if score > best_score:
            best_score = score
            best = FractalParams(center=boundary, zoom=zoom, color_offset=rng.f64())
        if best_score > _GOOD_ENOUGH:
            break
    return best


_PHOENIX_CONSTANTS: tuple[Point, ...] = (
    (0.5667, -0.5),
    (0.2, -0.5),
    (-0.5, 0.0),
    (0.56667, -0.5),
    (0.4, -0.3),
    (-0.4, 0.1),
    (0.3, -0.4),
    (0.56, -0.45),
)


def _phoenix(rng: Rng, max_iter: int, width: int, height: int) -> FractalParams:
    best = FractalParams(julia_c=_PHOENIX_CONSTANTS[0], color_offset=rng.f64())
    best_score = 0.0
    for _ in range(50):
        cr, ci = rng.choose(_PHOENIX_CONSTANTS)
        dr = rng.range(-0.05, 0.05)
        di = rng.range(-0.05, 0.05)
        c = (cr + dr, ci + di)
        zoom = 10.0 ** rng.range(0.0, 1.2)
        score = score_viewport(
            (0.0, 0.0), zoom, max_iter,
            lambda x, y, mi: iterate_phoenix(x, y, c[0], c[1], mi),
            width, height,
        )
        if score > best_score:
            best_score = score
            best = FractalParams(zoom=zoom, julia_c=c, color_offset=rng.f64())
        if best_score > _GOOD_ENOUGH:
            break
    return best


def _attractor(rng: Rng) -> FractalParams:
    best = FractalParams(
        attractor_params=(1.7, 1.7, 0.6, 1.2),
        attractor_type=AttractorType.CLIFFORD,
        samples=20_000_000,
        color_offset=rng.f64(),
    )
    best_score = 0.0
    for _ in range(80):
        kind = AttractorType.CLIFFORD if rng.f64() < 0.5 else AttractorType.DE_JONG
        a = rng.range(-3.0, 3.0)
        b = rng.range(-3.0, 3.0)
        c = rng.range(-3.0, 3.0)
        d = rng.range(-3.0, 3.0)
        score = score_attractor_params(a, b, c, d, kind)
        if score > best_score:
            best_score = score
            best = FractalParams(
                attractor_params=(a, b, c, d),
                attractor_type=kind,
                samples=20_000_000,
                color_offset=rng.f64(),
            )
        if best_score > _GOOD_ENOUGH_ATTRACTOR:
            break
    return best


# (red, green, blue) iteration limits: nebula, soft, ultra, green, blue, purple
_BUDDHABROT_TRIPLES: tuple[tuple[int, int, int], ...] = (
    (5000, 500, 50),
    (2000, 200, 20),
    (10000, 1000, 100),
    (500, 5000, 50),
    (50, 500, 5000),
    (1000, 100, 1000),
)


def _buddhabrot(rng: Rng) -> FractalParams:
    triple = rng.choose(_BUDDHABROT_TRIPLES)
    return FractalParams(buddhabrot_iters=triple, samples=50_000_000, color_offset=rng.f64())


def _flame(rng: Rng) -> FractalParams:
    best = [random_flame_transform(rng), random_flame_transform(rng)]
    best_score = 0.0
    for _ in range(30):
        n_transforms = rng.choose((2, 3, 3, 4, 5))
        transforms = [random_flame_transform(rng) for _ in range(n_transforms)]
        seed = rng.next_u64()
        score = score_flame_params(transforms, seed)
        if score > best_score:
            best_score = score
            best = transforms
        if best_score > _GOOD_ENOUGH:
            break
    return FractalParams(flame_transforms=best, samples=100_000_000, color_offset=rng.f64())


def find_interesting_params(
    fractal: FractalType, width: int, height: int, max_iter: int, rng: Rng
) -> FractalParams:
    """Search for parameters that show a detailed region of the given fractal."""
    if fractal is FractalType.MANDELBROT:
        return _mandelbrot(rng, max_iter, width, height)
    if fractal is FractalType.JULIA:
        return _julia(rng, max_iter, width, height)
    if fractal is FractalType.BURNING_SHIP:
        return _burning_ship(rng, max_iter, width, height)
    if fractal is FractalType.NEWTON:
        return _newton(rng)
    if fractal is FractalType.TRICORN:
        return _tricorn(rng, max_iter, width, height)
    if fractal is FractalType.PHOENIX:
        return _phoenix(rng, max_iter, width, height)
    if fractal is FractalType.FLAME:
        return _flame(rng)
    if fractal is FractalType.BUDDHABROT:
        return _buddhabrot(rng)
    if fractal is FractalType.STRANGE_ATTRACTOR:
        return _attractor(rng)
    raise ValueError(f"unknown fractal type: {fractal!r}")