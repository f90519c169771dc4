"""
Configuration for yn.

All tunable parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file (~/.config/yn/config.toml) if exists
3. Environment variables (YN_*) override file
4. CLI flags override everything

Styles are rich style strings ("bright_cyan", "cyan on bright_yellow", ...),
one per render category.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tomllib  # stdlib in 3.11+
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from pathlib import Path

logger = logging.getLogger(__name__)

COLOR_SYSTEMS = ("standard", "256", "truecolor", "none")


@dataclass
class StyleSet:
    """One rich style string per render category."""
    map_key: str = "bright_cyan"
    anchor: str = "bright_yellow"
    alias: str = "bright_yellow"
    bool: str = "bright_magenta"
    string: str = "bright_green"
    number: str = "bright_magenta"
    null: str = "bright_magenta"
    tag: str = ""
    indicator: str = ""


def _highlighted_styles() -> StyleSet:
    return StyleSet(
        map_key="cyan on bright_yellow",
        anchor="yellow on bright_yellow",
        alias="yellow on bright_yellow",
        bool="magenta on bright_yellow",
        string="green on bright_yellow",
        number="magenta on bright_yellow",
        null="magenta on bright_yellow",
        tag="on bright_yellow",
        indicator="on bright_yellow",
    )


@dataclass
class StylesConfig:
    """Default and highlighted palettes."""
    default: StyleSet = field(default_factory=StyleSet)
    highlighted: StyleSet = field(default_factory=_highlighted_styles)


@dataclass
class DisplayConfig:
    """Rendering options."""
    line_numbers: bool = False
    gutter_separator: str = " │ "
    gutter_style: str = "dim"
    color_system: str = "standard"  # one of COLOR_SYSTEMS


@dataclass
class IOConfig:
    """Input limits."""
    max_file_size: int = 16 * 1024 * 1024  # 16MB, larger inputs are refused


@dataclass
class Config:
    """Root config with all settings."""
    display: DisplayConfig = field(default_factory=DisplayConfig)
    styles: StylesConfig = field(default_factory=StylesConfig)
    io: IOConfig = field(default_factory=IOConfig)


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "yn" / "config.toml"
    return Path.home() / ".config" / "yn" / "config.toml"


def load_config(path: Path | None = None) -> Config:
    """Load config from file if exists, else return defaults."""
    config = Config()
    path = path or get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            config = _apply_toml(config, data)
        except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
            logger.warning("ignoring config file %s: %s", path, e)
            config = Config()  # fall back to defaults on any error

    # env var overrides
    config = _apply_env(config)

    return config


def _apply_style_set(styles: StyleSet, data: dict) -> None:
    for f in fields(StyleSet):
        if f.name in data:
            setattr(styles, f.name, str(data[f.name]))


def _apply_toml(config: Config, data: dict) -> Config:
    """Apply toml data to config."""
    if "display" in data:
        d = data["display"]
        if "line_numbers" in d:
            config.display.line_numbers = bool(d["line_numbers"])
        if "gutter_separator" in d:
            config.display.gutter_separator = str(d["gutter_separator"])
        if "gutter_style" in d:
            config.display.gutter_style = str(d["gutter_style"])
        if "color_system" in d:
            config.display.color_system = _check_color_system(str(d["color_system"]))

    if "styles" in data:
        s = data["styles"]
        if "default" in s:
            _apply_style_set(config.styles.default, s["default"])
        if "highlighted" in s:
            _apply_style_set(config.styles.highlighted, s["highlighted"])

    if "io" in data:
        io = data["io"]
        if "max_file_size" in io:
            config.io.max_file_size = int(io["max_file_size"])

    return config


def _check_color_system(value: str) -> str:
    if value not in COLOR_SYSTEMS:
        raise ValueError(f"color_system must be one of {', '.join(COLOR_SYSTEMS)}, got {value!r}")
    return value


def _apply_env(config: Config) -> Config:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str, Callable]] = {
        "YN_LINE_NUMBERS": ("display", "line_numbers", bool),
        "YN_GUTTER_SEPARATOR": ("display", "gutter_separator", str),
        "YN_COLOR_SYSTEM": ("display", "color_system", _check_color_system),
        "YN_MAX_FILE_SIZE": ("io", "max_file_size", int),
    }

    for env_key, (section, attr, conv) in env_map.items():
        val = os.environ.get(env_key)
        if val is not None:
            with contextlib.suppress(ValueError, AttributeError):
                # Bool needs special handling: "true", "1", "yes" -> True
                converted = val.lower() in ("true", "1", "yes") if conv is bool else conv(val)
                setattr(getattr(config, section), attr, converted)

    return config


# Loaded once for the CLI; library code takes a Config explicitly
_config: Config | None = None


def get_config() -> Config:
    """Get the CLI's config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
