import json

import pytest
from PIL import Image

from fractalpaper.cli import build_parser, generate_and_save, load_palette_file, main
from fractalpaper.model import FractalType, Palette, SavedParams
from fractalpaper.rng import Rng

SMALL = ["--width", "16", "--height", "8", "--max-iter", "20"]


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.fractal == "mandelbrot"
    assert args.max_iter == 1500
    assert args.width == 5440
    assert args.height == 1440
    assert args.supersample == 1
    assert args.palette is None


def test_parser_accepts_hyphenated_names():
    args = build_parser().parse_args(["burning-ship", "--palette", "catppuccin-mocha"])
    assert args.fractal == "burning-ship"
    assert args.palette == "catppuccin-mocha"


def test_parser_rejects_unknown_fractal():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["teapot"])


def test_load_palette_file_valid(tmp_path):
    path = tmp_path / "mine.json"
    path.write_text(json.dumps([[255, 0, 0], [0, 255, 0], [0, 0, 255]]))
    assert load_palette_file(path) == [(255, 0, 0), (0, 255, 0), (0, 0, 255)]


@pytest.mark.parametrize(
    "content",
    [
        "[[255, 0, 0]]",
        "[[256, 0, 0], [0, 0, 0]]",
        "[[1, 2], [3, 4]]",
        "not json",
        '{"a": 1}',
    ],
)
def test_load_palette_file_invalid(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        load_palette_file(path)


def test_main_writes_image_and_params(tmp_path, capsys):
    out = tmp_path / "out.png"
    saved_path = tmp_path / "params.json"
    code = main(["newton", "--seed", "42", "--palette", "fire", "-o", str(out),
                 "--save-params", str(saved_path), *SMALL])
    assert code == 0
    assert "Seed: 42" in capsys.readouterr().out
    with Image.open(out) as img:
        assert img.size == (16, 8)
    saved = SavedParams.from_json(saved_path.read_text())
    assert saved.fractal is FractalType.NEWTON
    assert saved.palette is Palette.FIRE
    assert saved.max_iter == 20
    assert saved.seed == Rng(42).next_u64()


def test_loaded_params_reproduce_image(tmp_path):
    first = tmp_path / "first.png"
    second = tmp_path / "second.png"
    saved_path = tmp_path / "params.json"
    assert main(["newton", "--seed", "7", "--palette", "ocean", "-o", str(first),
                 "--save-params", str(saved_path), *SMALL]) == 0
    assert main(["--load-params", str(saved_path), "-o", str(second),
                 "--width", "16", "--height", "8"]) == 0
    with Image.open(first) as a, Image.open(second) as b:
        assert a.tobytes() == b.tobytes()


def test_same_seed_same_image(tmp_path):
    a_path = tmp_path / "a.png"
    b_path = tmp_path / "b.png"
    assert main(["newton", "--seed", "99", "-o", str(a_path), *SMALL]) == 0
    assert main(["newton", "--seed", "99", "-o", str(b_path), *SMALL]) == 0
    with Image.open(a_path) as a, Image.open(b_path) as b:
        assert a.tobytes() == b.tobytes()


def test_palette_file_names_default_output(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    palette = tmp_path / "mine.json"
    palette.write_text(json.dumps([[10, 20, 30], [200, 100, 50]]))
    assert main(["newton", "--seed", "3", "--palette-file", str(palette), *SMALL]) == 0
    assert (tmp_path / "fractal_newton_mine_16x8.png").exists()


def test_missing_palette_file_fails(tmp_path, capsys):
    code = main(["newton", "--seed", "1", "--palette-file", str(tmp_path / "nope.json"), *SMALL])
    assert code == 1
    assert "Error reading palette file" in capsys.readouterr().err


def test_bad_params_file_fails(tmp_path, capsys):
    bad = tmp_path / "params.json"
    bad.write_text("{ broken")
    assert main(["--load-params", str(bad)]) == 1
    assert "Error parsing params file" in capsys.readouterr().err


def test_generate_and_save_custom_palette_saved(tmp_path):
    out = tmp_path / "img.png"
    saved_path = tmp_path / "p.json"
    custom = [(1, 2, 3), (250, 240, 230)]
    result = generate_and_save(
        FractalType.NEWTON, Palette.NEON, 20, None, 16, 8, 1,
        custom, "custom", out, saved_path, Rng(5),
    )
    assert result == out
    assert out.exists()
    saved = SavedParams.from_json(saved_path.read_text())
    assert [tuple(c) for c in saved.params.random_palette] == custom