"""Command-line interface for generating fractal wallpapers."""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Optional

from .generate import generate
from .model import Color, FractalParams, FractalType, Palette, SavedParams
from .palettes import generate_random_palette, palette_anchors
from .rng import Rng
from .search import find_interesting_params

DEFAULT_WIDTH = 5440
DEFAULT_HEIGHT = 1440

ALL_FRACTAL_TYPES: tuple[FractalType, ...] = (
    FractalType.MANDELBROT,
    FractalType.JULIA,
    FractalType.BURNING_SHIP,
    FractalType.NEWTON,
    FractalType.TRICORN,
    FractalType.PHOENIX,
    FractalType.FLAME,
    FractalType.BUDDHABROT,
    FractalType.STRANGE_ATTRACTOR,
)

ALL_PALETTES: tuple[Palette, ...] = (
    Palette.TWILIGHT,
    Palette.OCEAN,
    Palette.FIRE,
    Palette.NEON,
    Palette.FROST,
    Palette.EARTH,
    Palette.SAKURA,
    Palette.CATPPUCCIN_MOCHA,
    Palette.CATPPUCCIN_MACCHIATO,
    Palette.CATPPUCCIN_FRAPPE,
    Palette.CATPPUCCIN_LATTE,
    Palette.RANDOM,
)

_ALL = "all"


def _display(member) -> str:
    """Command-line spelling of an enum member, e.g. ``burning-ship``."""
    return member.name.lower().replace("_", "-")


_FRACTALS_BY_NAME = {_display(f): f for f in ALL_FRACTAL_TYPES}
_PALETTES_BY_NAME = {_display(p): p for p in ALL_PALETTES}


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for the command."""
    parser = argparse.ArgumentParser(
        prog="fractal-wallpaper", description="Fractal wallpaper generator"
    )
    parser.add_argument(
        "fractal",
        nargs="?",
        default="mandelbrot",
        choices=[*_FRACTALS_BY_NAME, _ALL],
        help="fractal type to generate",
    )
    parser.add_argument(
        "-p", "--palette", choices=list(_PALETTES_BY_NAME),
        help="colour palette (random if not specified)",
    )
    parser.add_argument("-m", "--max-iter", type=int, default=1500, help="maximum iterations")
    parser.add_argument("-o", "--output", type=Path, help="output file path")
    parser.add_argument(
        "-s", "--seed", type=int, help="random seed (uses system time if not specified)"
    )
    parser.add_argument(
        "--samples", type=int,
        help="number of samples for histogram-based fractals (flame, buddhabrot, attractor)",
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="image width in pixels")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="image height in pixels")
    parser.add_argument(
        "--supersample", type=int, default=1,
        help="supersampling factor for anti-aliasing (2 = render at 2x, then downsample)",
    )
    parser.add_argument(
        "--save-params", type=Path, help="save parameters to JSON file for later reproduction"
    )
    parser.add_argument(
        "--load-params", type=Path,
        help="load parameters from JSON file (overrides fractal type and randomization)",
    )
    parser.add_argument(
        "--palette-file", type=Path,
        help="load custom palette from JSON file (array of [R,G,B] arrays, values 0-255)",
    )
    return parser


def _is_byte(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 255


def load_palette_file(path) -> list[Color]:
    """Read a JSON array of [R, G, B] anchors; at least two are required."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, list) or not all(
        isinstance(item, list) and len(item) == 3 and all(_is_byte(v) for v in item)
        for item in data
    ):
        raise ValueError(
            "expected JSON array of [R,G,B] arrays, e.g. [[255,0,0],[0,255,0],...]"
        )
    if len(data) < 2:
        raise ValueError("palette file must contain at least 2 color anchors")
    return [tuple(item) for item in data]


def _with_changes(params: FractalParams, **changes) -> FractalParams:
    fields = {
        "center": params.center,
        "zoom": params.zoom,
        "julia_c": params.julia_c,
        "color_offset": params.color_offset,
        "attractor_params": params.attractor_params,
        "attractor_type": params.attractor_type,
        "buddhabrot_iters": params.buddhabrot_iters,
        "flame_transforms": params.flame_transforms,
        "samples": params.samples,
        "random_palette": params.random_palette,
    }
    fields.update(changes)
    return FractalParams(**fields)


def generate_and_save(
    fractal: FractalType,
    palette: Palette,
    max_iter: int,
    samples: Optional[int],
    width: int,
    height: int,
    supersample: int,
    custom_palette: Optional[list[Color]],
    palette_name: str,
    output: Optional[Path],
    save_params: Optional[Path],
    rng: Rng,
) -> Path:
    """Search for a good view, render it and write the image; return its path."""
    seed = rng.next_u64()
    started = time.perf_counter()
    params = find_interesting_params(fractal, width, height, max_iter, rng)
    search_time = time.perf_counter() - started

    if samples is not None:
        params = _with_changes(params, samples=samples)

    if custom_palette is not None:
        params = _with_changes(params, random_palette=list(custom_palette))
    elif palette is Palette.RANDOM and params.random_palette is None:
        params = _with_changes(params, random_palette=generate_random_palette(rng))

    anchors = (
        list(params.random_palette)
        if params.random_palette is not None
        else palette_anchors(palette)
    )

    name = _display(fractal)
    out_path = Path(output) if output is not None else Path(
        f"fractal_{name}_{palette_name}_{width}x{height}.png"
    )

    print(f"Generating {name} ({width}x{height}, palette={palette_name}, max_iter={max_iter})")
    print(f"  Found interesting params in {search_time:.2f}s")

    if save_params is not None:
        saved = SavedParams(
            fractal=fractal, palette=palette, max_iter=max_iter, seed=seed, params=params
        )
        Path(save_params).write_text(saved.to_json(), encoding="utf-8")
        print(f"  Saved params to {save_params}")

    if supersample > 1:
        print(f"  Rendering at {width * supersample}x{height * supersample} (supersample {supersample}x)")

    t0 = time.perf_counter()
    img = generate(fractal, params, width, height, max_iter, anchors, supersample)
    t1 = time.perf_counter()
    print(f"  Computed in {t1 - t0:.2f}s")

    img.save(out_path)
    t2 = time.perf_counter()
    print(f"  Saved to {out_path} ({t2 - t1:.2f}s)")
    return out_path


def _run_saved(args: argparse.Namespace) -> int:
    path: Path = args.load_params
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Error reading params file {path}: {exc}", file=sys.stderr)
        return 1
    try:
        saved = SavedParams.from_json(text)
    except (ValueError, KeyError, TypeError) as exc:
        print(f"Error parsing params file: {exc}", file=sys.stderr)
        return 1
    print(f"Loaded params from {path}")
    print(f"Seed: {saved.seed}")

    params = saved.params
    anchors = (
        list(params.random_palette)
        if params.random_palette is not None
        else palette_anchors(saved.palette)
    )
    out_path = args.output or Path(
        f"fractal_{_display(saved.fractal)}_{_display(saved.palette)}_{args.width}x{args.height}.png"
    )

    if args.supersample > 1:
        print(
            f"  Rendering at {args.width * args.supersample}x{args.height * args.supersample} "
            f"(supersample {args.supersample}x)"
        )
    t0 = time.perf_counter()
    img = generate(
        saved.fractal, params, args.width, args.height, saved.max_iter, anchors, args.supersample
    )
    print(f"  Computed in {time.perf_counter() - t0:.2f}s")
    img.save(out_path)
    print(f"  Saved to {out_path}")
    return 0


def main(argv=None) -> int:
    """Entry point of the ``fractal-wallpaper`` command."""
    args = build_parser().parse_args(argv)

    if args.load_params is not None:
        return _run_saved(args)

    seed = args.seed if args.seed is not None else time.time_ns() & ((1 << 64) - 1)
    print(f"Seed: {seed}")
    rng = Rng(seed)

    custom_palette = None
    palette_name_override = None
    if args.palette_file is not None:
        try:
            custom_palette = load_palette_file(args.palette_file)
        except OSError as exc:
            print(f"Error reading palette file {args.palette_file}: {exc}", file=sys.stderr)
            return 1
        except ValueError as exc:
            print(f"Error parsing palette file: {exc}", file=sys.stderr)
            return 1
        print(f"Loaded custom palette from {args.palette_file} ({len(custom_palette)} anchors)")
        palette_name_override = args.palette_file.stem or "custom"

    def pick_palette() -> Palette:
        if args.palette is not None:
            return _PALETTES_BY_NAME[args.palette]
        return rng.choose(ALL_PALETTES)

    if args.fractal == _ALL:
        jobs = [(fractal, None) for fractal in ALL_FRACTAL_TYPES]
    else:
        jobs = [(_FRACTALS_BY_NAME[args.fractal], args.output)]

    for fractal, output in jobs:
        palette = pick_palette()
        name = palette_name_override or _display(palette)
        generate_and_save(
            fractal, palette, args.max_iter, args.samples, args.width, args.height,
            args.supersample, custom_palette, name, output, args.save_params, rng,
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())