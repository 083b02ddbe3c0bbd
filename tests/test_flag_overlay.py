import json

import pytest

from conftest import settings_path
from errors import MalformedError, NotFoundError
from flag_overlay import FlagOverlay, coerce_flag_value, coerce_flags, stringify_flag_value


@pytest.mark.parametrize("raw, expected", [
    ("42", 42),
    ("-7", -7),
    ("+3", 3),
    ("1.5", 1.5),
    ("1e3", 1000.0),
    ("true", True),
    ("false", False),
    ("True", "True"),
    ("hello", "hello"),
    ("", ""),
    ("nan", "nan"),
    ("1e999", "1e999"),
])
def test_coerce_flag_value(raw, expected):
    value = coerce_flag_value(raw)
    assert value == expected
    assert type(value) is type(expected)


def test_coerce_int_overflow_falls_back_to_float():
    value = coerce_flag_value("9223372036854775808")
    assert isinstance(value, float)
    assert coerce_flag_value("9223372036854775807") == 2 ** 63 - 1


def test_stringify_flag_value():
    assert stringify_flag_value(True) == "true"
    assert stringify_flag_value(False) == "false"
    assert stringify_flag_value(42) == "42"
    assert stringify_flag_value(1.5) == "1.5"
    assert stringify_flag_value("abc") == "abc"
    assert stringify_flag_value({"nested": 1}) is None
    assert stringify_flag_value([1, 2]) is None
    assert stringify_flag_value(None) is None


def test_coerce_flags_rejects_non_string_values():
    with pytest.raises(MalformedError):
        coerce_flags({"DFIntX": 5})


def test_apply_overlay_stores_typed_values(store, install_dir):
    overlay = FlagOverlay(store)
    overlay.apply_overlay({"DFIntX": "42", "FFlagY": "true", "FStringZ": "hello"})

    with open(settings_path(install_dir), encoding="utf-8") as f:
        document = json.load(f)
    assert document == {"DFIntX": 42, "FFlagY": True, "FStringZ": "hello"}
    assert overlay.read_overlay() == {"DFIntX": "42", "FFlagY": "true", "FStringZ": "hello"}


def test_overlay_keeps_unknown_nested_keys(store, install_dir):
    path = settings_path(install_dir)
    store.ensure_settings_dir()
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"SomeUnknownKey": {"nested": 1}, "FFlagA": False}, f)

    overlay = FlagOverlay(store)
    overlay.apply_overlay({"FFlagB": "1.5"})

    with open(path, encoding="utf-8") as f:
        document = json.load(f)
    assert document["SomeUnknownKey"] == {"nested": 1}
    assert document["FFlagB"] == 1.5
    assert overlay.read_overlay() == {"FFlagA": "false", "FFlagB": "1.5"}


def test_overlay_changes_stored_type(store, install_dir):
    path = settings_path(install_dir)
    store.ensure_settings_dir()
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"quality-override": 1, "SomeUnknownKey": "x"}, f)

    FlagOverlay(store).apply_overlay({"SomeUnknownKey": "42"})

    with open(path, encoding="utf-8") as f:
        document = json.load(f)
    assert document == {"quality-override": 1, "SomeUnknownKey": 42}
    assert type(document["SomeUnknownKey"]) is int


def test_read_overlay_fails_on_unparseable_file(store, install_dir):
    store.ensure_settings_dir()
    with open(settings_path(install_dir), "w", encoding="utf-8") as f:
        f.write("{broken")
    with pytest.raises(MalformedError):
        FlagOverlay(store).read_overlay()


def test_remove_flags(store):
    overlay = FlagOverlay(store)
    overlay.apply_overlay({"A": "1", "B": "2"})
    assert overlay.remove_flags(["A", "Missing"]) == ["A"]
    assert overlay.read_overlay() == {"B": "2"}


def test_find_preset_is_case_insensitive():
    preset = FlagOverlay.find_preset("uncap fps")
    assert preset["flags"] == {"DFIntTaskSchedulerTargetFps": "999"}


def test_find_preset_unknown():
    with pytest.raises(NotFoundError):
        FlagOverlay.find_preset("Does Not Exist")


def test_apply_preset_writes_coerced_flags(store):
    overlay = FlagOverlay(store)
    overlay.apply_preset("Low Latency")
    document = store.read_all()
    assert document["FFlagEnableLowLatencyMode"] is True
    assert document["DFIntConnectionMTUSize"] == 1492


def test_get_presets_has_categories():
    presets = FlagOverlay.get_presets()
    assert set(presets) == {"Performance", "Graphics", "UI"}
