"""
Meta-parameters of the glowstick effect.

The effect exposes one flat set of parameters. Each declaration carries
its type, default and valid range; GlowstickParams holds the current
values. Range checks live here, in the parameter store, so the graph
policies only need to tolerate bad values, never reject them.
"""

import math
import numbers
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any

from glowstick.processing.color import format_color, parse_color


class BlendMode(Enum):
    """Internal blend mode of the effect, in declaration order."""
    GRAIN_MERGE = "grainmerge"
    HSL_COLOR = "hslcolor"
    SOFT_LIGHT = "softlight"
    OVERLAY = "overlay"
    BURN = "burn"
    LCH_COLOR = "lchcolor"
    MULTIPLY = "multiply"
    LINEAR_LIGHT = "linearlight"
    HARD_LIGHT = "hardlight"

    @classmethod
    def parse(cls, value: Any) -> "BlendMode | None":
        """
        Interpret a blend mode given as a member, value, name or index.

        "hard-light", "Hard Light", "HARD_LIGHT", "hardlight" and 8 all
        give HARD_LIGHT. Anything unrecognised gives None.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, numbers.Integral):
            members = list(cls)
            index = int(value)
            return members[index] if 0 <= index < len(members) else None
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
            for member in cls:
                if key == member.value:
                    return member
        return None


@dataclass
class MetaParam:
    """Declaration of one meta-parameter."""
    name: str
    type: str
    default: Any = None
    min: float | None = None
    max: float | None = None
    choices: list | None = None
    title: str = ""
    description: str = ""

    def check(self, value: Any) -> str | None:
        """Return an error message if value is out of range, else None."""
        if self.type in ("int", "float"):
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                return f"{self.name} must be a number"
            if math.isnan(value):
                return f"{self.name} must not be NaN"
            if not math.isfinite(value):
                return f"{self.name} must be finite"
            if self.type == "int" and not float(value).is_integer():
                return f"{self.name} must be an integer"
            if self.min is not None and value < self.min:
                return f"{self.name} must be >= {self.min}"
            if self.max is not None and value > self.max:
                return f"{self.name} must be <= {self.max}"
        elif self.type == "enum":
            if BlendMode.parse(value) is None:
                return f"{self.name} must be one of: {', '.join(self.choices or [])}"
        elif self.type == "color":
            try:
                parse_color(value)
            except ValueError as e:
                return f"{self.name}: {e}"
        return None


PARAMETERS = [
    MetaParam(
        "blend_mode", "enum", BlendMode.SOFT_LIGHT,
        choices=[m.value for m in BlendMode],
        title="Internal Blend Mode",
        description="How the fill colour is composited over the image",
    ),
    MetaParam(
        "noise_reduction", "int", 2, min=0, max=6,
        title="Smooth Original Image",
        description="Noise reduction iterations before blending",
    ),
    MetaParam(
        "chroma", "float", 0.0, min=0.0, max=15.0,
        title="Chroma",
        description="Chroma boost after blending",
    ),
    MetaParam(
        "lightness", "float", 0.0, min=-24.0, max=7.0,
        title="Darkness to Light",
        description="Lightness adjustment after blending",
    ),
    MetaParam(
        "bloom_strength", "float", 0.0, min=0.0, max=None,
        title="Bloom Glow Strength",
        description="Bloom strength; above zero turns bloom on",
    ),
    MetaParam(
        "bloom_softness", "float", 7.0, min=7.0, max=None,
        title="Bloom Glow Softness",
        description="Glow-area edge softness",
    ),
    MetaParam(
        "bloom_radius", "float", 10.0, min=0.0, max=100.0,
        title="Bloom Glow Radius",
        description="Bloom radius in pixels",
    ),
    MetaParam(
        "softglow_brightness", "float", 0.0, min=0.0, max=0.25,
        title="Soft Glow Brightness",
        description="Soft glow brightness; above zero turns soft glow on",
    ),
    MetaParam(
        "softglow_radius", "float", 1.0, min=1.0, max=150.0,
        title="Soft Glow Radius",
        description="Soft glow radius in pixels",
    ),
    MetaParam(
        "color", "color", "#ffacf9",
        title="Color of Glowstick",
        description="Fill colour composited by the blend node",
    ),
]

PARAMETERS_BY_NAME = {p.name: p for p in PARAMETERS}


def get_param(name: str) -> MetaParam:
    """Look up a declaration; accepts hyphenated names."""
    key = name.strip().replace("-", "_")
    if key not in PARAMETERS_BY_NAME:
        raise ValueError(f"Unknown parameter: {name}. Available: {list(PARAMETERS_BY_NAME)}")
    return PARAMETERS_BY_NAME[key]


def coerce_param(name: str, value: Any) -> tuple[str, Any]:
    """
    Convert and validate one parameter value.

    Strings (from the command line or environment) are converted to the
    declared type. Colours are normalised to '#rrggbb'.

    Returns:
        (canonical_name, value)

    Raises:
        ValueError: Unknown name, unconvertible value, or out of range
    """
    param = get_param(name)

    if param.type == "enum":
        mode = BlendMode.parse(value)
        if mode is None and isinstance(value, str) and value.strip().isdigit():
            mode = BlendMode.parse(int(value))
        if mode is None:
            raise ValueError(param.check(value))
        return param.name, mode

    if param.type == "color":
        error = param.check(value)
        if error:
            raise ValueError(error)
        return param.name, format_color(parse_color(value))

    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise ValueError(f"{param.name} must be a number, got {value!r}") from None
    error = param.check(value)
    if error:
        raise ValueError(error)
    if param.type == "int":
        return param.name, int(value)
    return param.name, float(value)


@dataclass(frozen=True)
class GlowstickParams:
    """
    Current values of every meta-parameter.

    Instances are immutable; use replace() or with_values() to derive a
    changed set.
    """
    blend_mode: BlendMode = BlendMode.SOFT_LIGHT
    noise_reduction: int = 2
    chroma: float = 0.0
    lightness: float = 0.0
    bloom_strength: float = 0.0
    bloom_softness: float = 7.0
    bloom_radius: float = 10.0
    softglow_brightness: float = 0.0
    softglow_radius: float = 1.0
    color: str = "#ffacf9"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlowstickParams":
        """Build validated parameters from a (possibly partial) dict."""
        return cls().with_values(**data)

    def with_values(self, **changes) -> "GlowstickParams":
        """Return a copy with validated changes applied."""
        coerced = dict(coerce_param(name, value) for name, value in changes.items())
        return replace(self, **coerced)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        data["blend_mode"] = self.blend_mode.value if isinstance(self.blend_mode, BlendMode) else self.blend_mode
        return data

    def validate(self) -> list[str]:
        """Return range errors for the current values (empty when valid)."""
        errors = []
        for f in fields(self):
            error = PARAMETERS_BY_NAME[f.name].check(getattr(self, f.name))
            if error:
                errors.append(error)
        return errors


DEFAULT_PARAMS = GlowstickParams()
