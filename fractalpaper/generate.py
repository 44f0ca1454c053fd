"""High-level image generation from prepared fractal parameters."""

from __future__ import annotations

import struct
from collections.abc import Sequence

from PIL import Image

from .density import compute_attractor, compute_buddhabrot, compute_flame
from .escape import (
    compute_burning_ship,
    compute_julia,
    compute_mandelbrot,
    compute_newton,
    compute_phoenix,
    compute_tricorn,
)
from .model import AttractorType, Color, FractalParams, FractalType
from .render import downsample, render, render_buddhabrot, render_flame

_ESCAPE_CYCLES = 12.0
_ATTRACTOR_CYCLES = 2.0
_NEWTON_MAX_ITER = 500


def _seed_from(value: float) -> int:
    """The raw IEEE-754 bits of a float, used as a reproducible seed."""
    return struct.unpack("<Q", struct.pack("<d", float(value)))[0]


def generate(
    fractal: FractalType,
    params: FractalParams,
    width: int,
    height: int,
    max_iter: int,
    anchors: Sequence[Color],
    supersample: int,
) -> Image.Image:
    """Compute, colour and (if supersampling) shrink a fractal image."""
    render_w = width * supersample
    render_h = height * supersample
    offset = params.color_offset
    seed = _seed_from(offset)

    def colour(data, cycles: float = _ESCAPE_CYCLES) -> Image.Image:
        return render(data, render_w, render_h, anchors, offset, cycles)

    if fractal is FractalType.MANDELBROT:
        img = colour(compute_mandelbrot(render_w, render_h, params.center, params.zoom, max_iter))
    elif fractal is FractalType.JULIA:
        c = params.julia_c if params.julia_c is not None else (0.0, 0.0)
        img = colour(compute_julia(render_w, render_h, c, params.zoom, max_iter))
    elif fractal is FractalType.BURNING_SHIP:
        img = colour(compute_burning_ship(render_w, render_h, params.center, params.zoom, max_iter))
    elif fractal is FractalType.NEWTON:
        img = colour(
            compute_newton(
                render_w, render_h, params.center, params.zoom, min(max_iter, _NEWTON_MAX_ITER)
            )
        )
    elif fractal is FractalType.TRICORN:
        img = colour(compute_tricorn(render_w, render_h, params.center, params.zoom, max_iter))
    elif fractal is FractalType.PHOENIX:
        c = params.julia_c if params.julia_c is not None else (0.5667, -0.5)
        img = colour(compute_phoenix(render_w, render_h, c, params.zoom, max_iter))
    elif fractal is FractalType.STRANGE_ATTRACTOR:
        a, b, c, d = (
            params.attractor_params
            if params.attractor_params is not None
            else (1.7, 1.7, 0.6, 1.2)
        )
        kind = params.attractor_type if params.attractor_type is not None else AttractorType.CLIFFORD
        data = compute_attractor(render_w, render_h, a, b, c, d, kind, params.samples, seed)
        img = colour(data, _ATTRACTOR_CYCLES)
    elif fractal is FractalType.BUDDHABROT:
        ri, gi, bi = (
            params.buddhabrot_iters
            if params.buddhabrot_iters is not None
            else (5000, 500, 50)
        )
        r, g, b = compute_buddhabrot(render_w, render_h, params.samples, ri, gi, bi, seed)
        img = render_buddhabrot(r, g, b, render_w, render_h, anchors, offset)
    elif fractal is FractalType.FLAME:
        if params.flame_transforms is None:
            img = Image.new("RGB", (render_w, render_h))
        else:
            density, color_map = compute_flame(
                render_w, render_h, params.flame_transforms, params.samples, seed
            )
            img = render_flame(density, color_map, render_w, render_h, anchors, offset)
    else:
        raise ValueError(f"unknown fractal type: {fractal!r}")

    return downsample(img, supersample)