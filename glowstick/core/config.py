"""
Configuration management for glowstick.

Provides a small configuration system built on JSON files, environment
variables and command-line overrides. A config file holds global
settings plus named parameter presets:

    {
      "global_settings": {"verbose": false, "preprocess": "...", "output_suffix": "_glow"},
      "presets": {"neon": {"blend_mode": "hardlight", "bloom_strength": 12.0}}
    }

Parameter values are kept as given here; the effect validates them.
"""

import json
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

# Desaturate, then invert in perceptual space
DEFAULT_PREPROCESS = "gimp:desaturate invert-gamma"

# Environment keys that are never effect parameters
RESERVED_ENV_KEYS = {"config", "preset"}


@dataclass
class GlobalSettings:
    """Global settings."""
    verbose: bool = False
    preprocess: str = DEFAULT_PREPROCESS
    output_suffix: str = "_glow"


@dataclass
class Config:
    """
    Main configuration container.

    Example:
        config = Config.load("glowstick.json")
        params = config.resolve_params(["neon"], overrides=["chroma=4"])
    """
    global_settings: GlobalSettings = field(default_factory=GlobalSettings)
    presets: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path) -> "Config":
        """Load configuration from a JSON file."""
        return load_config(path)

    def save(self, path: str | Path) -> None:
        """Save configuration to a JSON file."""
        save_config(self, path)

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return {
            "global_settings": asdict(self.global_settings),
            "presets": {name: dict(values) for name, values in self.presets.items()},
        }

    def get_preset(self, name: str) -> dict[str, Any]:
        """
        Get a preset's parameter values.

        Raises:
            ValueError: If the preset doesn't exist
        """
        if name not in self.presets:
            raise ValueError(f"Unknown preset: {name}. Available: {list(self.presets)}")
        return dict(self.presets[name])

    def resolve_params(
        self,
        preset: str | None = None,
        overrides: list[str] | None = None,
        env_prefix: str = "GLOWSTICK_",
    ) -> dict[str, Any]:
        """
        Merge parameter values in precedence order.

        defaults < preset < environment (GLOWSTICK_<PARAM>) < overrides
        """
        values: dict[str, Any] = {}
        if preset:
            values.update(self.get_preset(preset))
        values.update(get_env_params(env_prefix))
        values.update(parse_overrides(overrides or []))
        return values


def load_config(path: str | Path) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        path: Path to the JSON configuration file

    Returns:
        Parsed Config object

    Raises:
        FileNotFoundError: If the config file doesn't exist
        json.JSONDecodeError: If the JSON is invalid
        ValueError: If a preset is not a JSON object
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    gs_data = data.get("global_settings", {})
    global_settings = GlobalSettings(
        verbose=bool(gs_data.get("verbose", False)),
        preprocess=gs_data.get("preprocess", DEFAULT_PREPROCESS),
        output_suffix=gs_data.get("output_suffix", "_glow"),
    )

    presets = {}
    for name, values in data.get("presets", {}).items():
        if not isinstance(values, dict):
            raise ValueError(f"Preset '{name}' must be an object, got {type(values).__name__}")
        presets[name] = dict(values)

    return Config(global_settings=global_settings, presets=presets)


def save_config(config: Config, path: str | Path) -> None:
    """
    Save configuration to a JSON file.

    Args:
        config: Configuration object to save
        path: Output path for the JSON file
    """
    path = Path(path)
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)


def create_example_config(path: str | Path = "glowstick.json") -> Config:
    """
    Create an example configuration file.

    Args:
        path: Output path for the example config

    Returns:
        The created Config object
    """
    config = Config(
        global_settings=GlobalSettings(),
        presets={
            "classic": {"blend_mode": "softlight", "color": "#ffacf9"},
            "neon": {
                "blend_mode": "hardlight",
                "color": "#00ff05",
                "bloom_strength": 12.0,
                "bloom_radius": 8.0,
            },
            "dreamy": {
                "blend_mode": "multiply",
                "softglow_brightness": 0.15,
                "softglow_radius": 20.0,
                "chroma": 4.0,
            },
        },
    )

    config.save(path)
    print(f"Created example configuration: {path}")
    return config


def get_env_config(prefix: str = "GLOWSTICK_") -> dict[str, Any]:
    """
    Get configuration from environment variables.

    All environment variables starting with the prefix will be included.
    Variable names are converted to lowercase with the prefix removed.

    Example:
        GLOWSTICK_VERBOSE=true -> {"verbose": "true"}
    """
    config = {}
    for key, value in os.environ.items():
        if key.startswith(prefix):
            config_key = key[len(prefix):].lower()
            config[config_key] = value
    return config


def get_env_params(prefix: str = "GLOWSTICK_") -> dict[str, Any]:
    """Environment values that name effect parameters (settings excluded)."""
    settings = set(GlobalSettings.__dataclass_fields__) | RESERVED_ENV_KEYS
    return {k: v for k, v in get_env_config(prefix).items() if k not in settings}


def env_flag(value: Any) -> bool:
    """Interpret an environment string as a boolean."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_overrides(overrides: list[str]) -> dict[str, str]:
    """
    Parse name=value parameter overrides.

    Values stay strings; hyphens in names become underscores.

    Raises:
        ValueError: If an override is not of the form name=value
    """
    values = {}
    for override in overrides:
        if "=" not in override:
            raise ValueError(f"Invalid override format '{override}', expected 'name=value'")
        key, value = override.split("=", 1)
        key = key.strip().replace("-", "_")
        if not key:
            raise ValueError(f"Invalid override '{override}', missing parameter name")
        values[key] = value.strip()
    return values
