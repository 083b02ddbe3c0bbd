import json
import os

import pytest

from errors import MalformedError, NotFoundError
from models import StructuredConfig
from profile_store import ProfileStore


@pytest.fixture
def profiles(tmp_path):
    return ProfileStore(str(tmp_path / "profiles"))


def test_save_and_load(profiles):
    structured = StructuredConfig(custom_flags={"FFlagX": "true"})
    structured.graphics.shadow_quality = 1
    structured.rendering.frame_rate_limit = None
    profiles.save("Competitive", structured)

    loaded = profiles.load("Competitive")

    assert loaded == structured


def test_list_is_sorted(profiles):
    for name in ("zeta", "Alpha", "mid"):
        profiles.save(name, StructuredConfig())
    assert profiles.list() == ["Alpha", "mid", "zeta"]


def test_list_missing_folder(profiles):
    assert profiles.list() == []


def test_load_missing_profile(profiles):
    with pytest.raises(NotFoundError) as excinfo:
        profiles.load("ghost")
    assert excinfo.value.identifier == "ghost"


def test_delete(profiles):
    profiles.save("temp", StructuredConfig())
    profiles.delete("temp")
    assert profiles.list() == []
    with pytest.raises(NotFoundError):
        profiles.delete("temp")


def test_load_unparseable_profile(profiles):
    os.makedirs(profiles.profiles_dir)
    with open(os.path.join(profiles.profiles_dir, "broken.json"), "w", encoding="utf-8") as f:
        f.write("{oops")
    with pytest.raises(MalformedError):
        profiles.load("broken")


def test_load_fills_missing_fields_with_defaults(profiles):
    os.makedirs(profiles.profiles_dir)
    with open(os.path.join(profiles.profiles_dir, "partial.json"), "w", encoding="utf-8") as f:
        json.dump({"graphics": {"graphics_quality": 3}, "ui": {"show_fps": True}}, f)

    loaded = profiles.load("partial")

    assert loaded.graphics.graphics_quality == 3
    assert loaded.graphics.shadow_quality == 3
    assert loaded.ui.show_fps is True
    assert loaded.audio == StructuredConfig().audio


def test_load_rejects_wrong_types(profiles):
    os.makedirs(profiles.profiles_dir)
    with open(os.path.join(profiles.profiles_dir, "bad.json"), "w", encoding="utf-8") as f:
        json.dump({"graphics": {"vsync": "yes"}}, f)
    with pytest.raises(MalformedError):
        profiles.load("bad")


def test_names_are_sanitized(profiles):
    path = profiles.save("a/b:c", StructuredConfig())
    assert os.path.dirname(path) == profiles.profiles_dir
    assert profiles.list() == ["a_b_c"]
    with pytest.raises(NotFoundError):
        profiles.save("...", StructuredConfig())


def test_export_and_import(profiles, tmp_path):
    profiles.save("main", StructuredConfig())
    export_dir = tmp_path / "exports"
    export_dir.mkdir()

    exported = profiles.export("main", str(export_dir))
    assert exported == str(export_dir / "main.json")

    profiles.import_profile(exported, "copy")
    assert profiles.load("copy") == profiles.load("main")


def test_import_validates_before_copy(profiles, tmp_path):
    source = tmp_path / "incoming.json"
    source.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(MalformedError):
        profiles.import_profile(str(source), "incoming")
    assert profiles.list() == []


def test_import_missing_source(profiles, tmp_path):
    with pytest.raises(NotFoundError):
        profiles.import_profile(str(tmp_path / "nope.json"), "x")


def test_default_profile():
    assert ProfileStore.default() == StructuredConfig()


@pytest.mark.parametrize("data", [
    {"graphics": {"shadow_quality": -1}},
    {"graphics": {"graphics_quality": 256}},
    {"graphics": {"render_distance": -100}},
    {"network": {"max_ping": -1}},
    {"rendering": {"frame_rate_limit": -60}},
    {"performance": {"cpu_affinity": [0, -1]}},
])
def test_negative_or_oversized_numbers_are_rejected(data):
    with pytest.raises(MalformedError):
        StructuredConfig.from_dict(data)


def test_unsigned_bounds_are_accepted():
    loaded = StructuredConfig.from_dict({"graphics": {"graphics_quality": 255, "shadow_quality": 0},
                                         "rendering": {"frame_rate_limit": 0}})
    assert loaded.graphics.graphics_quality == 255
    assert loaded.rendering.frame_rate_limit == 0
