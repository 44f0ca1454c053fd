# fractalpaper

fractalpaper renders fractal wallpapers. The default size is 5440×1440, which suits ultra-wide and dual-monitor setups. Before it renders, it probes many candidate viewports or parameter sets, scores each one and keeps the best. As a result the images show detailed regions and not empty space.

Fractals:

- `mandelbrot`
- `julia`
- `burning-ship`
- `newton`
- `tricorn`
- `phoenix`
- `flame`
- `buddhabrot`
- `strange-attractor` (Clifford or de Jong)

Palettes:

- `twilight`
- `ocean`
- `fire`
- `neon`
- `frost`
- `earth`
- `sakura`
- `catppuccin-mocha`
- `catppuccin-macchiato`
- `catppuccin-frappe`
- `catppuccin-latte`
- `random`, which builds a 12-colour palette from a colour-harmony scheme chosen with the seed

## Installation

```
pip install .
```

This installs `numpy` and `pillow`. Run the tests with `pip install .[test]` followed by `pytest`.

## Command line

The command is installed under two names, `fractalpaper` and `fractal-wallpaper`. Both run the same program.

To render a Mandelbrot wallpaper, which is the default type, with a randomly picked palette:

```
fractalpaper
```

To choose the fractal, the palette and the seed:

```
fractalpaper julia --palette ocean --seed 42
```

To render every fractal type in turn, each with its own default file name:

```
fractalpaper all
```

| Option | Meaning |
| --- | --- |
| `-p, --palette NAME` | Colour palette. If it is not given, a palette is picked at random for each image. |
| `-m, --max-iter N` | Maximum iterations. The default is 1500. Newton renders use at most 500. |
| `-o, --output PATH` | Output image path. The default is `fractal_<type>_<palette>_<w>x<h>.png`. `all` ignores this option. |
| `-s, --seed N` | Random seed. The current time is used if it is not given. The seed is printed. |
| `--samples N` | Sample count for `flame`, `buddhabrot` and `strange-attractor`. |
| `--width N`, `--height N` | Image size in pixels. |
| `--supersample N` | Render N times larger, then average N×N blocks. |
| `--save-params PATH` | Write the parameters that reproduce the image to a JSON file. |
| `--load-params PATH` | Render from a saved parameter file. The fractal argument and the search are skipped. |
| `--palette-file PATH` | Use a custom palette: a JSON array of at least two `[R, G, B]` triples with values 0–255. The file stem names the palette in the output file name. |

Without `--samples`, the density fractals use large sample counts: 20 million for attractors, 50 million for the Buddhabrot and 100 million for flames. Rendering these at full size takes a long time. Pass a smaller `--samples` value for quick previews.

To render the same image again at another size, save its parameters and load them:

```
fractalpaper flame --seed 7 --save-params flame.json
fractalpaper --load-params flame.json --width 2560 --height 1440 --supersample 2
```

`--save-params` combined with `all` writes every set of parameters to the same path, so only the last one remains.

If a parameter file or palette file cannot be read or parsed, the command prints an error and exits with status 1.

## Library use

```python
from fractalpaper.rng import Rng
from fractalpaper.model import FractalType, Palette
from fractalpaper.palettes import resolve_palette
from fractalpaper.search import find_interesting_params
from fractalpaper.generate import generate

rng = Rng(1234)
params = find_interesting_params(FractalType.MANDELBROT, 1920, 1080, 1000, rng)
anchors = resolve_palette(Palette.TWILIGHT, rng)
image = generate(FractalType.MANDELBROT, params, 1920, 1080, 1000, anchors, 1)
image.save("mandelbrot.png")
```

`generate` returns a Pillow `Image`.

Modules:

- `fractalpaper.rng`: `Rng`, a seeded xoshiro256** generator.
- `fractalpaper.model`: the enums `FractalType`, `Palette` and `AttractorType`, and the records `FlameTransform`, `FractalParams` and `SavedParams`. Use `SavedParams.to_json` and `SavedParams.from_json` to write and read parameter files.
- `fractalpaper.palettes`: `palette_anchors`, `generate_random_palette`, `resolve_palette`, `hsl_to_rgb` and `build_colormap_from_anchors`.
- `fractalpaper.escape`: single-point functions (`iterate_mandelbrot`, `iterate_julia` and so on) and whole-image functions (`compute_mandelbrot`, `compute_julia`, `compute_burning_ship`, `compute_newton`, `compute_tricorn`, `compute_phoenix`). The whole-image functions return flat numpy arrays of smooth iteration counts, where 0 marks points that never escape.
- `fractalpaper.density`: `compute_attractor`, `compute_buddhabrot`, `compute_flame`, `apply_variations`, `random_flame_transform` and `Histogram`.
- `fractalpaper.render`: `render`, `render_flame`, `render_buddhabrot` and `downsample`.
- `fractalpaper.search`: `find_interesting_params` and its scoring functions.
- `fractalpaper.generate`: `generate`.

## Limits

- All work runs in a single process. The computation is vectorised with numpy and is not spread over threads or cores.
- The density fractals run many independent orbit streams side by side. Their output is reproducible for a given seed within this package.
- Images are written in whatever format Pillow infers from the output file's extension.