# models.py
# -*- coding: utf-8 -*-
"""Data types: discovered installations and the structured client configuration."""

import logging
from dataclasses import dataclass, field, fields, asdict
from typing import Dict, List, Optional

from errors import MalformedError


@dataclass(frozen=True)
class InstallationRecord:
    """One discovered copy of the client. Recomputed on every scan."""
    path: str
    version: str
    channel: str
    last_modified: str

    def to_dict(self) -> dict:
        return asdict(self)


def _default_key_bindings():
    return {
        "forward": "W",
        "backward": "S",
        "left": "A",
        "right": "D",
        "jump": "Space",
    }


@dataclass
class GraphicsConfig:
    graphics_quality: int = 10
    render_distance: int = 1000
    shadow_quality: int = 3
    texture_quality: int = 3
    particle_quality: int = 3
    vsync: bool = True
    fullscreen: bool = False
    resolution_width: int = 1920
    resolution_height: int = 1080
    anti_aliasing: int = 4
    anisotropic_filtering: int = 16


@dataclass
class AudioConfig:
    master_volume: float = 0.8
    music_volume: float = 0.7
    sfx_volume: float = 0.8
    voice_volume: float = 0.9
    spatial_audio: bool = True
    output_device: str = "default"
    input_device: str = "default"


@dataclass
class ControlsConfig:
    mouse_sensitivity: float = 0.5
    invert_y_axis: bool = False
    camera_mode: str = "follow"
    key_bindings: Dict[str, str] = field(default_factory=_default_key_bindings)
    gamepad_enabled: bool = False
    gamepad_sensitivity: float = 0.5


@dataclass
class NetworkConfig:
    preferred_region: str = "auto"
    max_ping: int = 200
    connection_quality: str = "high"
    enable_ipv6: bool = True
    data_usage_limit: Optional[int] = None


@dataclass
class RenderingConfig:
    frame_rate_limit: Optional[int] = 60
    dynamic_lighting: bool = True
    post_processing: bool = True
    bloom: bool = True
    depth_of_field: bool = False
    motion_blur: bool = False
    ambient_occlusion: bool = True
    reflections: bool = True
    global_illumination: bool = True


@dataclass
class PerformanceConfig:
    low_latency_mode: bool = False
    power_saving_mode: bool = False
    background_performance: str = "normal"
    memory_limit_mb: Optional[int] = None
    cpu_affinity: List[int] = field(default_factory=list)
    gpu_preference: str = "high_performance"


@dataclass
class UIConfig:
    ui_scale: float = 1.0
    show_fps: bool = False
    show_ping: bool = False
    chat_enabled: bool = True
    gui_transparency: float = 0.0
    theme: str = "dark"
    custom_cursor: Optional[str] = None


# Optional fields (None allowed); the value type is given explicitly
_OPTIONAL_FIELD_TYPES = {
    ("network", "data_usage_limit"): int,
    ("rendering", "frame_rate_limit"): int,
    ("performance", "memory_limit_mb"): int,
    ("ui", "custom_cursor"): str,
}

# Quality levels are single bytes; every other integer field is unsigned
_BYTE_FIELDS = {
    ("graphics", "graphics_quality"),
    ("graphics", "shadow_quality"),
    ("graphics", "texture_quality"),
    ("graphics", "particle_quality"),
    ("graphics", "anti_aliasing"),
    ("graphics", "anisotropic_filtering"),
}


def _check_value(section_name, field_name, value, default):
    """Validate one field against the type of its default. Returns the (normalized) value."""
    expected = type(default) if default is not None else _OPTIONAL_FIELD_TYPES.get((section_name, field_name))
    if value is None and (section_name, field_name) in _OPTIONAL_FIELD_TYPES:
        return None
    where = f"{section_name}.{field_name}"
    if expected is bool:
        ok = isinstance(value, bool)
    elif expected is int:
        ok = isinstance(value, int) and not isinstance(value, bool) and value >= 0
        if ok and (section_name, field_name) in _BYTE_FIELDS:
            ok = value <= 255
    elif expected is float:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        if ok:
            value = float(value)
    elif expected is dict:
        ok = isinstance(value, dict) and all(isinstance(k, str) and isinstance(v, str) for k, v in value.items())
    elif expected is list:
        ok = isinstance(value, list) and all(isinstance(v, int) and not isinstance(v, bool) and v >= 0 for v in value)
    elif expected is str:
        ok = isinstance(value, str)
    else:
        ok = True
    if not ok:
        raise MalformedError(f"invalid value {value!r} for '{where}'", operation="parse config")
    return value


def _section_from_dict(section_name, section_cls, data):
    if data is None:
        return section_cls()
    if not isinstance(data, dict):
        raise MalformedError(f"section '{section_name}' must be an object", operation="parse config")
    defaults = section_cls()
    kwargs = {}
    for f in fields(section_cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _check_value(section_name, f.name, data[f.name], getattr(defaults, f.name))
    unknown = set(data) - {f.name for f in fields(section_cls)}
    if unknown:
        logging.debug(f"Ignoring unknown keys in section '{section_name}': {sorted(unknown)}")
    return section_cls(**kwargs)


_SECTIONS = {
    "graphics": GraphicsConfig,
    "audio": AudioConfig,
    "controls": ControlsConfig,
    "network": NetworkConfig,
    "rendering": RenderingConfig,
    "performance": PerformanceConfig,
    "ui": UIConfig,
}


@dataclass
class StructuredConfig:
    """Caller-facing configuration profile. Never written to the settings file directly."""
    graphics: GraphicsConfig = field(default_factory=GraphicsConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    controls: ControlsConfig = field(default_factory=ControlsConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    custom_flags: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> "StructuredConfig":
        """Build a config from decoded JSON. Missing sections and fields take their defaults.

        Raises MalformedError when a section is not an object or a field has the wrong type.
        """
        if not isinstance(data, dict):
            raise MalformedError("configuration must be a JSON object", operation="parse config")
        sections = {name: _section_from_dict(name, section_cls, data.get(name))
                     for name, section_cls in _SECTIONS.items()}
        custom_flags = data.get("custom_flags") or {}
        if not isinstance(custom_flags, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in custom_flags.items()):
            raise MalformedError("'custom_flags' must map strings to strings", operation="parse config")
        return cls(custom_flags=dict(custom_flags), **sections)
