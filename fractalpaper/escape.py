"""Escape-time fractals: single-point probes and whole-image computation.

Whole-image functions return a flat, row-major float array of
``width * height`` smooth iteration values; 0 marks points that never escape.
"""

from __future__ import annotations

import math
from collections.abc import Callable

import numpy as np

_BAILOUT = 65536.0
_LN2 = math.log(2.0)

Point = tuple[float, float]
_State = tuple[np.ndarray, ...]


def _smooth(i: int, zr: float, zi: float) -> float:
    mag = math.sqrt(zr * zr + zi * zi)
    return i + 1.0 - math.log(math.log(mag)) / _LN2


# ── single points ───────────────────────────────────────────────────────────


def in_cardioid_or_bulb(cr: float, ci: float) -> bool:
    """True if c lies in the main cardioid or the period-2 bulb."""
    ci2 = ci * ci
    q = (cr - 0.25) * (cr - 0.25) + ci2
    if q * (q + (cr - 0.25)) <= 0.25 * ci2:
        return True
    return (cr + 1.0) * (cr + 1.0) + ci2 <= 0.0625


def iterate_mandelbrot(cr: float, ci: float, max_iter: int) -> float:
    """Smooth escape count of z -> z^2 + c from z = 0."""
    if in_cardioid_or_bulb(cr, ci):
        return 0.0
    zr = zi = 0.0
    for i in range(max_iter):
        zr2, zi2 = zr * zr, zi * zi
        if zr2 + zi2 > _BAILOUT:
            return _smooth(i, zr, zi)
        zi = 2.0 * zr * zi + ci
        zr = zr2 - zi2 + cr
    return 0.0


def iterate_julia(zr0: float, zi0: float, cr: float, ci: float, max_iter: int) -> float:
    """Smooth escape count of z -> z^2 + c from the given z."""
    zr, zi = zr0, zi0
    for i in range(max_iter):
        zr2, zi2 = zr * zr, zi * zi
        if zr2 + zi2 > _BAILOUT:
            return _smooth(i, zr, zi)
        zr, zi = zr2 - zi2 + cr, 2.0 * zr * zi + ci
    return 0.0


def iterate_burning_ship(cr: float, ci: float, max_iter: int) -> float:
    """Smooth escape count of the Burning Ship map."""
    zr = zi = 0.0
    for i in range(max_iter):
        azr, azi = abs(zr), abs(zi)
        zr2, zi2 = azr * azr, azi * azi
        if zr2 + zi2 > _BAILOUT:
            return _smooth(i, zr, zi)
        zi = 2.0 * azr * azi + ci
        zr = zr2 - zi2 + cr
    return 0.0


def iterate_tricorn(cr: float, ci: float, max_iter: int) -> float:
    """Smooth escape count of z -> conj(z)^2 + c."""
    zr = zi = 0.0
    for i in range(max_iter):
        zr2, zi2 = zr * zr, zi * zi
        if zr2 + zi2 > _BAILOUT:
            return _smooth(i, zr, zi)
        zr, zi = zr2 - zi2 + cr, -2.0 * zr * zi + ci
    return 0.0


def iterate_phoenix(zr0: float, zi0: float, cr: float, ci: float, max_iter: int) -> float:
    """Smooth escape count of z' = z^2 + Re(c) + Im(c) * z_prev."""
    zr, zi = zr0, zi0
    pr = pi = 0.0
    for i in range(max_iter):
        zr2, zi2 = zr * zr, zi * zi
        if zr2 + zi2 > _BAILOUT:
            return _smooth(i, zr, zi)
        new_zr = zr2 - zi2 + cr + ci * pr
        new_zi = 2.0 * zr * zi + ci * pi
        pr, pi = zr, zi
        zr, zi = new_zr, new_zi
    return 0.0


def find_boundary_point(outside: Point, inside: Point, max_iter: int) -> Point:
    """Bisect between an outside and an inside point to reach the Mandelbrot boundary."""
    o_r, o_i = outside
    i_r, i_i = inside
    for _ in range(64):
        mr, mi = (o_r + i_r) / 2.0, (o_i + i_i) / 2.0
        if iterate_mandelbrot(mr, mi, max_iter) == 0.0:
            i_r, i_i = mr, mi
        else:
            o_r, o_i = mr, mi
    return ((o_r + i_r) / 2.0, (o_i + i_i) / 2.0)


# ── whole images ────────────────────────────────────────────────────────────


def _plane(
    width: int, height: int, center: Point, zoom: float, span: float
) -> tuple[np.ndarray, np.ndarray]:
    """Flat row-major real and imaginary coordinates of every pixel."""
    if width == 0 or height == 0:
        return np.zeros(0), np.zeros(0)
    aspect = width / height
    x_range = span / zoom
    y_range = x_range / aspect
    x_min = center[0] - x_range / 2.0
    y_min = center[1] - y_range / 2.0
    xs = x_min + np.arange(width, dtype=float) * (x_range / width)
    ys = y_min + np.arange(height, dtype=float) * (y_range / height)
    re, im = np.meshgrid(xs, ys)
    return re.ravel(), im.ravel()


def _escape_time(
    state: _State,
    cr: np.ndarray,
    ci: np.ndarray,
    max_iter: int,
    step: Callable[[_State, np.ndarray, np.ndarray], _State],
    skip: np.ndarray | None = None,
) -> np.ndarray:
    """Iterate every point until it escapes, recording its smooth count."""
    result = np.zeros(cr.size)
    alive = np.arange(cr.size)
    if skip is not None:
        keep = ~skip
        alive = alive[keep]
        state = tuple(a[keep] for a in state)
        cr, ci = cr[keep], ci[keep]
    with np.errstate(all="ignore"):
        for i in range(max_iter):
            if alive.size == 0:
                break
            zr, zi = state[0], state[1]
            mag2 = zr * zr + zi * zi
            out = mag2 > _BAILOUT
            if out.any():
                mag = np.sqrt(mag2[out])
                result[alive[out]] = i + 1.0 - np.log(np.log(mag)) / _LN2
                keep = ~out
                alive = alive[keep]
                state = tuple(a[keep] for a in state)
                cr, ci = cr[keep], ci[keep]
            state = step(state, cr, ci)
    return result


def _mandelbrot_step(state: _State, cr: np.ndarray, ci: np.ndarray) -> _State:
    zr, zi = state
    return (zr * zr - zi * zi + cr, 2.0 * zr * zi + ci)


def _burning_ship_step(state: _State, cr: np.ndarray, ci: np.ndarray) -> _State:
    azr, azi = np.abs(state[0]), np.abs(state[1])
    return (azr * azr - azi * azi + cr, 2.0 * azr * azi + ci)


def _tricorn_step(state: _State, cr: np.ndarray, ci: np.ndarray) -> _State:
    zr, zi = state
    return (zr * zr - zi * zi + cr, -2.0 * zr * zi + ci)


def _phoenix_step(state: _State, cr: np.ndarray, ci: np.ndarray) -> _State:
    zr, zi, pr, pi = state
    return (zr * zr - zi * zi + cr + ci * pr, 2.0 * zr * zi + ci * pi, zr, zi)


def compute_mandelbrot(
    width: int, height: int, center: Point, zoom: float, max_iter: int
) -> np.ndarray:
    """Smooth Mandelbrot iteration values for every pixel."""
    cr, ci = _plane(width, height, center, zoom, 3.5)
    ci2 = ci * ci
    shifted = cr - 0.25
    q = shifted * shifted + ci2
    skip = (q * (q + shifted) <= 0.25 * ci2) | ((cr + 1.0) * (cr + 1.0) + ci2 <= 0.0625)
    zero = np.zeros_like(cr)
    return _escape_time((zero, zero.copy()), cr, ci, max_iter, _mandelbrot_step, skip)


def compute_julia(
    width: int, height: int, c: Point, zoom: float, max_iter: int
) -> np.ndarray:
    """Smooth Julia-set iteration values for the constant `c`."""
    zr, zi = _plane(width, height, (0.0, 0.0), zoom, 3.5)
    cr = np.full(zr.size, float(c[0]))
    ci = np.full(zr.size, float(c[1]))
    return _escape_time((zr, zi), cr, ci, max_iter, _mandelbrot_step)


def compute_burning_ship(
    width: int, height: int, center: Point, zoom: float, max_iter: int
) -> np.ndarray:
    """Smooth Burning Ship iteration values for every pixel."""
    cr, ci = _plane(width, height, center, zoom, 3.5)
    zero = np.zeros_like(cr)
    return _escape_time((zero, zero.copy()), cr, ci, max_iter, _burning_ship_step)


def compute_tricorn(
    width: int, height: int, center: Point, zoom: float, max_iter: int
) -> np.ndarray:
    """Smooth Tricorn iteration values for every pixel."""
    cr, ci = _plane(width, height, center, zoom, 3.5)
    zero = np.zeros_like(cr)
    return _escape_time((zero, zero.copy()), cr, ci, max_iter, _tricorn_step)


def compute_phoenix(
    width: int, height: int, c: Point, zoom: float, max_iter: int
) -> np.ndarray:
    """Smooth Phoenix iteration values for the constant `c`."""
    zr, zi = _plane(width, height, (0.0, 0.0), zoom, 3.5)
    cr = np.full(zr.size, float(c[0]))
    ci = np.full(zr.size, float(c[1]))
    zero = np.zeros_like(zr)
    return _escape_time((zr, zi, zero, zero.copy()), cr, ci, max_iter, _phoenix_step)


_NEWTON_ROOTS: tuple[Point, ...] = (
    (1.0, 0.0),
    (-0.5, 0.8660254037844386),
    (-0.5, -0.8660254037844386),
)
_NEWTON_TOL = 1e-6


def compute_newton(
    width: int, height: int, center: Point, zoom: float, max_iter: int
) -> np.ndarray:
    """Newton's method for z^3 - 1: root basin shaded by convergence speed."""
    zr, zi = _plane(width, height, center, zoom, 4.0)
    result = np.zeros(zr.size)
    alive = np.arange(zr.size)
    with np.errstate(all="ignore"):
        for i in range(max_iter):
            if alive.size == 0:
                break
            zr2, zi2 = zr * zr, zi * zi
            z2r = zr2 - zi2
            z2i = 2.0 * zr * zi
            z3r = z2r * zr - z2i * zi
            z3i = z2r * zi + z2i * zr
            dr = 3.0 * z2r
            di = 3.0 * z2i
            denom = dr * dr + di * di

            stalled = denom < 1e-24
            if stalled.any():
                keep = ~stalled
                alive = alive[keep]
                zr, zi, z3r, z3i, dr, di, denom = (
                    a[keep] for a in (zr, zi, z3r, z3i, dr, di, denom)
                )

            fr = z3r - 1.0
            fi = z3i
            zr = zr - (fr * dr + fi * di) / denom
            zi = zi - (fi * dr - fr * di) / denom

            found = np.full(zr.size, -1)
            for root_id, (rr, ri) in enumerate(_NEWTON_ROOTS):
                ddr, ddi = zr - rr, zi - ri
                hit = (found < 0) & (ddr * ddr + ddi * ddi < _NEWTON_TOL)
                found[hit] = root_id
            done = found >= 0
            if done.any():
                result[alive[done]] = (
                    found[done] / 3.0 + (1.0 - i / max_iter) * 0.25
                ) * max_iter
                keep = ~done
                alive = alive[keep]
                zr, zi = zr[keep], zi[keep]
    return result