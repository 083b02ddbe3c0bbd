# flag_overlay.py
# -*- coding: utf-8 -*-
"""
Free-form "fast flag" overrides merged into the client settings file.

Callers always pass strings. Before storage each value is coerced, in this
order: signed 64-bit integer, finite float, exact "true"/"false", plain
string. The client reads the file with typed lookups, so "123" must land as a
number and "true" as a boolean.
"""

import logging
import math
import re

import config
from errors import MalformedError, NotFoundError

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def coerce_flag_value(value: str):
    """Convert a caller-supplied string to the scalar stored in the settings file."""
    if _INT_PATTERN.fullmatch(value):
        number = int(value)
        if INT64_MIN <= number <= INT64_MAX:
            return number
    if _FLOAT_PATTERN.fullmatch(value):
        number = float(value)
        if math.isfinite(number):
            return number
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def stringify_flag_value(value):
    """Inverse of coerce_flag_value. Returns None for values that are not scalars."""
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, str):
        return value
    return None


def coerce_flags(flags):
    coerced = {}
    for key, value in flags.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise MalformedError(f"flag values must be strings, got {type(value).__name__}",
                                 operation="apply flags", identifier=key)
        coerced[key] = coerce_flag_value(value)
    return coerced


class FlagOverlay:
    """Applies and reads back fast flags through the SettingsStore."""

    def __init__(self, store):
        self.store = store

    def apply_overlay(self, flags):
        coerced = coerce_flags(flags)
        self.store.merge_write(coerced)
        logging.info(f"Applied {len(coerced)} fast flag(s).")

    def read_overlay(self):
        """Every scalar key as a string. Nested objects, arrays and nulls are skipped."""
        document = self.store.read_all()
        flags = {}
        for key, value in document.items():
            value_str = stringify_flag_value(value)
            if value_str is None:
                logging.debug(f"Skipping non-scalar settings key '{key}'.")
                continue
            flags[key] = value_str
        return flags

    def remove_flags(self, keys):
        return self.store.remove_keys(keys)

    # --- Presets ---

    @staticmethod
    def get_presets():
        return config.FLAG_PRESETS

    @staticmethod
    def find_preset(name):
        wanted = name.strip().lower()
        for presets in config.FLAG_PRESETS.values():
            for preset in presets:
                if preset["name"].lower() == wanted:
                    return preset
        raise NotFoundError("unknown flag preset", operation="find preset", identifier=name)

    def apply_preset(self, name):
        preset = self.find_preset(name)
        self.apply_overlay(preset["flags"])
        return preset
