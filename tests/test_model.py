import json

import pytest

from fractalpaper.model import (
    ALL_FRACTAL_TYPES,
    ALL_PALETTES,
    AttractorType,
    FlameTransform,
    FractalParams,
    FractalType,
    Palette,
    SavedParams,
)


def _transform(color=0.25):
    return FlameTransform(
        a=0.5, b=-0.2, c=0.1, d=0.3, e=0.9, f=-0.4,
        variations=[1.0] + [0.0] * 9,
        weight=0.7,
        color=color,
    )


def _full_params():
    return FractalParams(
        center=(-0.75, 0.1),
        zoom=30.0,
        julia_c=(-0.7269, 0.1889),
        color_offset=0.5,
        attractor_params=(1.7, 1.7, 0.6, 1.2),
        attractor_type=AttractorType.DE_JONG,
        buddhabrot_iters=(5000, 500, 50),
        flame_transforms=[_transform(), _transform(0.75)],
        samples=20_000_000,
        random_palette=[(10, 2, 30), (255, 255, 240)],
    )


def _saved(fractal=FractalType.JULIA, palette=Palette.FIRE):
    return SavedParams(
        fractal=fractal, palette=palette, max_iter=10, seed=1, params=FractalParams()
    )


@pytest.mark.parametrize(
    "fractal, name",
    [
        (FractalType.BURNING_SHIP, "burning-ship"),
        (FractalType.STRANGE_ATTRACTOR, "strange-attractor"),
        (FractalType.MANDELBROT, "mandelbrot"),
    ],
)
def test_fractal_type_display_names(fractal, name):
    restored = SavedParams.from_json(_saved(fractal=fractal).to_json())
    assert restored.fractal is fractal
    assert str(restored.fractal) == name


@pytest.mark.parametrize(
    "palette, name",
    [
        (Palette.CATPPUCCIN_MOCHA, "catppuccin-mocha"),
        (Palette.RANDOM, "random"),
    ],
)
def test_palette_display_names(palette, name):
    restored = SavedParams.from_json(_saved(palette=palette).to_json())
    assert restored.palette is palette
    assert str(restored.palette) == name


def test_all_fractal_types_order():
    restored = [
        SavedParams.from_dict(_saved(fractal=f).to_dict()).fractal
        for f in ALL_FRACTAL_TYPES
    ]
    assert [str(f) for f in restored] == [
        "mandelbrot", "julia", "burning-ship", "newton", "tricorn",
        "phoenix", "flame", "buddhabrot", "strange-attractor",
    ]
    assert set(restored) == set(FractalType)


def test_all_palettes_ends_with_random():
    restored = [
        SavedParams.from_dict(_saved(palette=p).to_dict()).palette
        for p in ALL_PALETTES
    ]
    assert len(restored) == 12
    assert restored[-1] is Palette.RANDOM
    assert restored[0] is Palette.TWILIGHT


def test_fractal_params_defaults():
    params = FractalParams()
    assert params.center == (0.0, 0.0)
    assert params.zoom == 1.0
    assert params.samples == 0
    assert params.julia_c is None
    assert params.flame_transforms is None


def test_flame_transform_round_trip():
    t = _transform()
    assert FlameTransform.from_dict(t.to_dict()) == t


def test_flame_transform_requires_ten_variations():
    with pytest.raises(ValueError):
        FlameTransform(a=0, b=0, c=0, d=0, e=0, f=0, variations=[1.0], weight=1, color=0)
    data = _transform().to_dict()
    data["variations"] = [0.5] * 9
    with pytest.raises(ValueError):
        FlameTransform.from_dict(data)


def test_fractal_params_round_trip():
    params = _full_params()
    restored = FractalParams.from_dict(params.to_dict())
    assert restored == params


def test_fractal_params_serialised_variant_names():
    data = _full_params().to_dict()
    assert data["attractor_type"] == "DeJong"
    assert data["center"] == [-0.75, 0.1]
    assert data["random_palette"] == [[10, 2, 30], [255, 255, 240]]


def test_missing_optional_fields_become_none():
    params = FractalParams.from_dict(
        {"center": [1, 2], "zoom": 3, "color_offset": 0.5, "samples": 10}
    )
    assert params.center == (1.0, 2.0)
    assert params.julia_c is None
    assert params.attractor_type is None
    assert params.random_palette is None


def test_missing_required_field_raises():
    with pytest.raises(ValueError, match="zoom"):
        FractalParams.from_dict({"center": [0, 0], "color_offset": 0.0, "samples": 0})


def test_palette_colour_out_of_range_raises():
    data = FractalParams().to_dict()
    data["random_palette"] = [[256, 0, 0], [0, 0, 0]]
    with pytest.raises(ValueError):
        FractalParams.from_dict(data)


def test_saved_params_json_round_trip():
    saved = SavedParams(
        fractal=FractalType.BUDDHABROT,
        palette=Palette.CATPPUCCIN_LATTE,
        max_iter=1500,
        seed=2**64 - 1,
        params=_full_params(),
    )
    text = saved.to_json()
    decoded = json.loads(text)
    assert decoded["fractal"] == "Buddhabrot"
    assert decoded["palette"] == "CatppuccinLatte"
    assert SavedParams.from_json(text) == saved


def test_saved_params_unknown_variant_raises():
    data = _saved().to_dict()
    data["fractal"] = "julia"
    with pytest.raises(ValueError):
        SavedParams.from_dict(data)


def test_saved_params_bad_json_raises():
    with pytest.raises(ValueError):
        SavedParams.from_json("{not json")


def test_saved_params_negative_seed_raises():
    data = _saved(fractal=FractalType.NEWTON, palette=Palette.OCEAN).to_dict()
    data["seed"] = -1
    with pytest.raises(ValueError):
        SavedParams.from_dict(data)