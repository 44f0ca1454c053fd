"""Fractal kinds, palettes and the parameter records that describe an image."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

DEFAULT_WIDTH = 5440
DEFAULT_HEIGHT = 1440

Color = tuple[int, int, int]

_WORD_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class _Named(Enum):
    """Enum whose value is its serialised name and whose str is kebab-case."""

    def __str__(self) -> str:
        return _WORD_BOUNDARY.sub("-", self.value).lower()


class FractalType(_Named):
    MANDELBROT = "Mandelbrot"
    JULIA = "Julia"
    BURNING_SHIP = "BurningShip"
    NEWTON = "Newton"
    FLAME = "Flame"
    BUDDHABROT = "Buddhabrot"
    STRANGE_ATTRACTOR = "StrangeAttractor"
    TRICORN = "Tricorn"
    PHOENIX = "Phoenix"


class Palette(_Named):
    TWILIGHT = "Twilight"
    OCEAN = "Ocean"
    FIRE = "Fire"
    NEON = "Neon"
    FROST = "Frost"
    EARTH = "Earth"
    SAKURA = "Sakura"
    CATPPUCCIN_MOCHA = "CatppuccinMocha"
    CATPPUCCIN_MACCHIATO = "CatppuccinMacchiato"
    CATPPUCCIN_FRAPPE = "CatppuccinFrappe"
    CATPPUCCIN_LATTE = "CatppuccinLatte"
    RANDOM = "Random"


class AttractorType(_Named):
    CLIFFORD = "Clifford"
    DE_JONG = "DeJong"


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

ALL_PALETTES: tuple[Palette, ...] = tuple(Palette)


# ── validation helpers ──────────────────────────────────────────────────────


def _float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field `{name}` must be a number, got {value!r}")
    return float(value)


def _uint(value: Any, name: str, bits: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field `{name}` must be an integer, got {value!r}")
    if not 0 <= value < (1 << bits):
        raise ValueError(f"field `{name}` out of range for u{bits}: {value}")
    return value


def _seq(value: Any, name: str, length: int) -> list:
    if not isinstance(value, (list, tuple)) or len(value) != length:
        raise ValueError(f"field `{name}` must be a sequence of {length} items")
    return list(value)


def _floats(value: Any, name: str, length: int) -> tuple:
    return tuple(_float(v, name) for v in _seq(value, name, length))


def _uints(value: Any, name: str, length: int, bits: int) -> tuple:
    return tuple(_uint(v, name, bits) for v in _seq(value, name, length))


def _mapping(data: Any, what: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object")
    return data


def _required(data: Mapping, key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _optional(data: Mapping, key: str, convert: Callable[[Any], Any]) -> Any:
    value = data.get(key)
    return None if value is None else convert(value)


def _variant(cls: type[_Named], value: Any, name: str) -> Any:
    try:
        return cls(value)
    except ValueError:
        raise ValueError(f"unknown variant {value!r} for field `{name}`") from None


def _colors(value: Any, name: str) -> list[Color]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"field `{name}` must be a list of colours")
    return [_uints(c, name, 3, 8) for c in value]


# ── records ─────────────────────────────────────────────────────────────────

_AFFINE = ("a", "b", "c", "d", "e", "f")


@dataclass(frozen=True)
class FlameTransform:
    """One affine map with weighted variations in a flame system."""

    a: float
    b: float
    c: float
    d: float
    e: float
    f: float
    variations: tuple[float, ...]
    weight: float
    color: float

    def __post_init__(self) -> None:
        variations = tuple(float(v) for v in self.variations)
        if len(variations) != 10:
            raise ValueError("a flame transform needs exactly 10 variation weights")
        object.__setattr__(self, "variations", variations)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {k: getattr(self, k) for k in _AFFINE}
        out["variations"] = list(self.variations)
        out["weight"] = self.weight
        out["color"] = self.color
        return out

    @classmethod
    def from_dict(cls, data: Any) -> FlameTransform:
        data = _mapping(data, "flame transform")
        coefficients = {k: _float(_required(data, k), k) for k in _AFFINE}
        return cls(
            **coefficients,
            variations=_floats(_required(data, "variations"), "variations", 10),
            weight=_float(_required(data, "weight"), "weight"),
            color=_float(_required(data, "color"), "color"),
        )


@dataclass
class FractalParams:
    """Everything the renderer needs beyond fractal kind and size."""

    center: tuple[float, float] = (0.0, 0.0)
    zoom: float = 1.0
    julia_c: Optional[tuple[float, float]] = None
    color_offset: float = 0.0
    attractor_params: Optional[tuple[float, float, float, float]] = None
    attractor_type: Optional[AttractorType] = None
    buddhabrot_iters: Optional[tuple[int, int, int]] = None
    flame_transforms: Optional[list[FlameTransform]] = None
    samples: int = 0
    random_palette: Optional[list[Color]] = None

    def to_dict(self) -> dict[str, Any]:
        def listed(value: Any) -> Any:
            return None if value is None else list(value)

        return {
            "center": list(self.center),
            "zoom": self.zoom,
            "julia_c": listed(self.julia_c),
            "color_offset": self.color_offset,
            "attractor_params": listed(self.attractor_params),
            "attractor_type": None if self.attractor_type is None else self.attractor_type.value,
            "buddhabrot_iters": listed(self.buddhabrot_iters),
            "flame_transforms": (
                None
                if self.flame_transforms is None
                else [t.to_dict() for t in self.flame_transforms]
            ),
            "samples": self.samples,
            "random_palette": (
                None
                if self.random_palette is None
                else [list(c) for c in self.random_palette]
            ),
        }

    @classmethod
    def from_dict(cls, data: Any) -> FractalParams:
        data = _mapping(data, "params")

        def transforms(value: Any) -> list[FlameTransform]:
            if not isinstance(value, (list, tuple)):
                raise ValueError("field `flame_transforms` must be a list")
            return [FlameTransform.from_dict(t) for t in value]

        return cls(
            center=_floats(_required(data, "center"), "center", 2),
            zoom=_float(_required(data, "zoom"), "zoom"),
            julia_c=_optional(data, "julia_c", lambda v: _floats(v, "julia_c", 2)),
            color_offset=_float(_required(data, "color_offset"), "color_offset"),
            attractor_params=_optional(
                data, "attractor_params", lambda v: _floats(v, "attractor_params", 4)
            ),
            attractor_type=_optional(
                data, "attractor_type", lambda v: _variant(AttractorType, v, "attractor_type")
            ),
            buddhabrot_iters=_optional(
                data, "buddhabrot_iters", lambda v: _uints(v, "buddhabrot_iters", 3, 32)
            ),
            flame_transforms=_optional(data, "flame_transforms", transforms),
            samples=_uint(_required(data, "samples"), "samples", 64),
            random_palette=_optional(
                data, "random_palette", lambda v: _colors(v, "random_palette")
            ),
        )


@dataclass
class SavedParams:
    """A parameter file: all that is needed to reproduce an image."""

    fractal: FractalType
    palette: Palette
    max_iter: int
    seed: int
    params: FractalParams

    def to_dict(self) -> dict[str, Any]:
        return {
            "fractal": self.fractal.value,
            "palette": self.palette.value,
            "max_iter": self.max_iter,
            "seed": self.seed,
            "params": self.params.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> SavedParams:
        data = _mapping(data, "saved params")
        return cls(
            fractal=_variant(FractalType, _required(data, "fractal"), "fractal"),
            palette=_variant(Palette, _required(data, "palette"), "palette"),
            max_iter=_uint(_required(data, "max_iter"), "max_iter", 32),
            seed=_uint(_required(data, "seed"), "seed", 64),
            params=FractalParams.from_dict(_required(data, "params")),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> SavedParams:
        return cls.from_dict(json.loads(text))