"""Server configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: HEATLENS_<SECTION>_<KEY> (uppercase).
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

import yaml

from heatlens.core.reference import ReferenceSpace


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    env: str = "dev"  # "dev" or "prod"


@dataclass
class QueueConfig:
    max_size: int = 10_000


@dataclass
class LimitsConfig:
    max_batch_size: int = 500
    active_window_seconds: float = 120.0


@dataclass
class ReferenceConfig:
    width: float = 1920.0
    height: float = 1080.0
    depth: float = 3000.0
    cell_size: float = 20.0
    band_height: float = 50.0
    base_radius: float = 30.0
    radius_spread: float = 20.0
    scale_radius: bool = True
    grid_spacing: float = 100.0
    marker_radius: float = 3.0


@dataclass
class CanvasConfig:
    width: int = 1200
    height: int = 800
    max_width: int = 4096
    max_height: int = 4096


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"
    file: str = ""


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    reference: ReferenceConfig = field(default_factory=ReferenceConfig)
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def reference_space(self) -> ReferenceSpace:
        """Validated, immutable reference space built from the config section."""
        return ReferenceSpace(**asdict(self.reference))


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "HEATLENS_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "HEATLENS_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "HEATLENS_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "HEATLENS_QUEUE_MAX_SIZE": lambda v: setattr(config.queue, "max_size", int(v)),
        "HEATLENS_LIMITS_MAX_BATCH_SIZE": lambda v: setattr(config.limits, "max_batch_size", int(v)),
        "HEATLENS_LIMITS_ACTIVE_WINDOW": lambda v: setattr(config.limits, "active_window_seconds", float(v)),
        "HEATLENS_REFERENCE_WIDTH": lambda v: setattr(config.reference, "width", float(v)),
        "HEATLENS_REFERENCE_HEIGHT": lambda v: setattr(config.reference, "height", float(v)),
        "HEATLENS_REFERENCE_DEPTH": lambda v: setattr(config.reference, "depth", float(v)),
        "HEATLENS_REFERENCE_CELL_SIZE": lambda v: setattr(config.reference, "cell_size", float(v)),
        "HEATLENS_REFERENCE_BAND_HEIGHT": lambda v: setattr(config.reference, "band_height", float(v)),
        "HEATLENS_REFERENCE_SCALE_RADIUS": lambda v: setattr(config.reference, "scale_radius", _parse_bool(v)),
        "HEATLENS_CANVAS_WIDTH": lambda v: setattr(config.canvas, "width", int(v)),
        "HEATLENS_CANVAS_HEIGHT": lambda v: setattr(config.canvas, "height", int(v)),
        "HEATLENS_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "HEATLENS_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
        "HEATLENS_LOG_FILE": lambda v: setattr(config.logging, "file", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


_SECTIONS = ("server", "queue", "limits", "reference", "canvas", "logging")


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    # Try to load YAML
    if config_path is None:
        config_path = Path(os.environ.get("HEATLENS_CONFIG", "config.yaml"))
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section_name in _SECTIONS:
            section = getattr(config, section_name)
            for k, v in (raw.get(section_name) or {}).items():
                if hasattr(section, k):
                    setattr(section, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
