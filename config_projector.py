# config_projector.py
# -*- coding: utf-8 -*-
"""Maps a StructuredConfig onto the flat key/value shape of the client settings file."""

import logging

import config
from flag_overlay import coerce_flag_value
from models import StructuredConfig

# (section, field) -> settings key, for fields copied without transformation
DIRECT_KEYS = [
    ("graphics", "graphics_quality", "DFIntDebugFRMQualityLevelOverride"),
    ("graphics", "texture_quality", "DFIntTextureQualityOverride"),
    ("graphics", "vsync", "FFlagEnableVSync"),
    ("rendering", "dynamic_lighting", "FFlagEnableDynamicLighting"),
    ("rendering", "post_processing", "FFlagEnablePostProcessing"),
    ("rendering", "bloom", "FFlagEnableBloom"),
    ("rendering", "depth_of_field", "FFlagEnableDepthOfField"),
    ("rendering", "motion_blur", "FFlagEnableMotionBlur"),
    ("rendering", "ambient_occlusion", "FFlagEnableAmbientOcclusion"),
    ("rendering", "reflections", "FFlagEnableReflections"),
    ("performance", "low_latency_mode", "FFlagEnableLowLatencyMode"),
]

SHADOW_INTENSITY_KEY = "FIntRenderShadowIntensity"
ANTI_ALIASING_KEY = "FFlagEnableAntiAliasing"
TARGET_FPS_KEY = "DFIntTaskSchedulerTargetFps"
MAX_PLAYERS_KEY = "DFIntMaxPlayers"


def project(structured: StructuredConfig) -> dict:
    """Return the partial settings document for a config. Pure; never touches disk."""
    graphics = structured.graphics
    rendering = structured.rendering
    document = {}

    for section, field_name, key in DIRECT_KEYS:
        document[key] = getattr(getattr(structured, section), field_name)

    document[SHADOW_INTENSITY_KEY] = graphics.shadow_quality * config.SHADOW_INTENSITY_SCALE
    # Only on/off reaches the client, the level itself is dropped
    document[ANTI_ALIASING_KEY] = graphics.anti_aliasing > 0

    if rendering.frame_rate_limit is not None:
        document[TARGET_FPS_KEY] = rendering.frame_rate_limit

    document[MAX_PLAYERS_KEY] = config.MAX_PLAYERS_OVERRIDE

    # Custom flags go last and may overwrite anything above
    for key, value in structured.custom_flags.items():
        document[key] = coerce_flag_value(value)

    return document


class ConfigProjector:
    """Projects a StructuredConfig and merges the result into the settings file."""

    def __init__(self, store):
        self.store = store

    def project(self, structured: StructuredConfig) -> dict:
        return project(structured)

    def apply(self, structured: StructuredConfig) -> dict:
        partial = project(structured)
        self.store.merge_write(partial)
        logging.info(f"Applied configuration ({len(partial)} settings key(s)).")
        return partial
