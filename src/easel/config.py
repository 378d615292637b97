from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

from easel.canvas import coerce_color
from easel.errors import ConfigurationError
from easel.geometry import validate_brush_size
from easel.tools import Tool

DEFAULT_CONFIG: Dict[str, Any] = {
    "data_root": "~/Pictures/easel",
    "log_level": "INFO",
    "antialias": True,
    "tool": "pencil",
    "canvas": {
        "width": 640,
        "height": 480,
        "background": [255, 255, 255],
    },
    "brush": {
        "size": 2,
        "sizes": [0, 2, 5, 10, 20],
    },
    "colors": {
        "foreground": [0, 0, 0],
    },
    "palette": [
        [0, 0, 0],
        [128, 128, 128],
        [128, 0, 0],
        [128, 128, 0],
        [0, 128, 0],
        [0, 128, 128],
        [0, 0, 128],
        [128, 0, 128],
        [255, 255, 255],
        [192, 192, 192],
        [255, 0, 0],
        [255, 255, 0],
        [0, 255, 0],
        [0, 255, 255],
        [0, 0, 255],
        [255, 0, 255],
    ],
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _candidate_config_paths() -> list[Path]:
    env_path = os.environ.get("EASEL_CONFIG")
    paths = []
    if env_path:
        paths.append(Path(env_path))
    paths.extend([
        Path("easel.yaml"),
        Path("~/.config/easel/config.yaml").expanduser(),
    ])
    return paths


def load_config() -> Dict[str, Any]:
    config = dict(DEFAULT_CONFIG)
    for path in _candidate_config_paths():
        if path.exists():
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            if isinstance(data, dict):
                config = _deep_merge(config, data)
            break
    return config


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return value


def canvas_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    canvas = config.get("canvas", {})
    return {
        "width": _positive_int(canvas.get("width"), "canvas.width"),
        "height": _positive_int(canvas.get("height"), "canvas.height"),
        "background": coerce_color(canvas.get("background")),
    }


def session_kwargs(config: Dict[str, Any]) -> Dict[str, Any]:
    """Validated keyword arguments for ``PaintSession`` built from ``config``."""
    return {
        "foreground": coerce_color(config.get("colors", {}).get("foreground")),
        "background": canvas_settings(config)["background"],
        "brush_size": validate_brush_size(config.get("brush", {}).get("size")),
        "tool": Tool.parse(config.get("tool")),
        "antialias": bool(config.get("antialias", True)),
    }


def brush_sizes(config: Dict[str, Any]) -> list[int]:
    return sorted({validate_brush_size(size) for size in config.get("brush", {}).get("sizes", [])})


def palette(config: Dict[str, Any]) -> list[tuple]:
    return [coerce_color(color) for color in config.get("palette", [])]


def log_level(config: Dict[str, Any]) -> int:
    name = str(config.get("log_level", "INFO")).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigurationError(f"unknown log level: {name}")
    return level
