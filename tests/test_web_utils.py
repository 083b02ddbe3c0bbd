import io
import os

import pytest
import requests
from PIL import Image

import config
from conftest import FakeResponse, FakeSession
from errors import IOFailureError, MalformedError, NotFoundError, UnreachableError
from web_utils import AssetCache, WebApiClient

USER_URL = f"{config.USERS_API_URL}/users/1"
THUMB_URL = f"{config.THUMBNAILS_API_URL}/assets"
ICON_URL = f"{config.THUMBNAILS_API_URL}/games/icons"
IMAGE_URL = "https://images.example/thumb.png"


def _png_bytes(size=(40, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", size, (200, 10, 10)).save(buffer, "PNG")
    return buffer.getvalue()


def test_get_user_info_maps_fields():
    session = FakeSession({USER_URL: FakeResponse(payload={
        "id": 1, "name": "builder", "displayName": "Builder", "description": "", "created": "2006-02-27T21:06:40Z",
        "isBanned": False,
    })})
    info = WebApiClient(session).get_user_info(1)
    assert info["name"] == "builder"
    assert info["display_name"] == "Builder"
    assert info["is_banned"] is False
    assert session.calls[0][2] == config.API_TIMEOUT_SECONDS


@pytest.mark.parametrize("outcome, error_type", [
    (FakeResponse(404), NotFoundError),
    (FakeResponse(500), IOFailureError),
    (FakeResponse(200, payload=ValueError("bad json")), MalformedError),
    (requests.exceptions.ConnectionError("refused"), UnreachableError),
    (requests.exceptions.Timeout("slow"), UnreachableError),
])
def test_error_mapping(outcome, error_type):
    client = WebApiClient(FakeSession({USER_URL: outcome}))
    with pytest.raises(error_type) as excinfo:
        client.get_user_info(1)
    assert excinfo.value.operation == "get user"
    assert excinfo.value.identifier == 1


def test_get_game_info_empty_result():
    session = FakeSession({f"{config.GAMES_API_URL}/games": FakeResponse(payload={"data": []})})
    with pytest.raises(NotFoundError):
        WebApiClient(session).get_game_info(42)


def test_get_game_info():
    session = FakeSession({f"{config.GAMES_API_URL}/games": FakeResponse(payload={"data": [{
        "id": 42, "name": "Obby", "creator": {"id": 7, "name": "Dev", "type": "User"},
        "playing": 12, "visits": 1000, "favoritedCount": 5, "maxPlayers": 30, "genre": "All",
    }]})})
    game = WebApiClient(session).get_game_info(42)
    assert game["creator"] == {"id": 7, "name": "Dev", "creator_type": "User"}
    assert game["favorites"] == 5
    assert session.calls[0][1] == {"universeIds": 42}


def test_search_users_and_client_version():
    session = FakeSession({
        f"{config.USERS_API_URL}/users/search": FakeResponse(payload={"data": [{"id": 3, "name": "x", "displayName": "X"}]}),
        config.CLIENT_VERSION_URL: FakeResponse(payload={"clientVersionUpload": "version-abc123"}),
    })
    client = WebApiClient(session)
    assert client.search_users("x") == [{"id": 3, "name": "x", "display_name": "X"}]
    assert client.get_client_version() == "version-abc123"


def test_download_asset_uses_cache(tmp_path):
    session = FakeSession({config.ASSET_DELIVERY_URL: FakeResponse(content=b"rbxm-bytes")})
    cache = AssetCache(str(tmp_path / "cache"), session)

    first = cache.download_asset(99)
    second = cache.download_asset(99)

    assert first == second == os.path.join(str(tmp_path / "cache"), "99.rbxm")
    with open(first, "rb") as f:
        assert f.read() == b"rbxm-bytes"
    assert len(session.calls) == 1
    assert session.calls[0][2] == config.ASSET_TIMEOUT_SECONDS


def test_download_asset_not_found(tmp_path):
    cache = AssetCache(str(tmp_path / "cache"), FakeSession())
    with pytest.raises(NotFoundError):
        cache.download_asset(5)
    assert cache.get_cache_size() == 0


def test_download_thumbnail(tmp_path):
    session = FakeSession({
        THUMB_URL: FakeResponse(payload={"data": [{"imageUrl": IMAGE_URL}]}),
        IMAGE_URL: FakeResponse(content=_png_bytes()),
    })
    path = AssetCache(str(tmp_path), session).download_thumbnail(10, "small")
    assert os.path.basename(path) == "10_150x150.png"
    assert session.calls[0][1]["size"] == "150x150"


def test_download_thumbnail_unknown_size(tmp_path):
    with pytest.raises(NotFoundError):
        AssetCache(str(tmp_path), FakeSession()).download_thumbnail(10, "huge")


def test_download_game_icon(tmp_path):
    session = FakeSession({
        ICON_URL: FakeResponse(payload={"data": [{"imageUrl": IMAGE_URL}]}),
        IMAGE_URL: FakeResponse(content=_png_bytes()),
    })
    path = AssetCache(str(tmp_path), session).download_game_icon(77)
    assert os.path.basename(path) == "game_77.png"


def test_make_preview(tmp_path):
    session = FakeSession({
        THUMB_URL: FakeResponse(payload={"data": [{"imageUrl": IMAGE_URL}]}),
        IMAGE_URL: FakeResponse(content=_png_bytes()),
    })
    preview = AssetCache(str(tmp_path), session).make_preview(10, 16)
    with Image.open(preview) as image:
        assert image.size == (16, 16)
        assert image.mode == "RGBA"


def test_make_preview_from_non_image(tmp_path):
    session = FakeSession({
        THUMB_URL: FakeResponse(payload={"data": [{"imageUrl": IMAGE_URL}]}),
        IMAGE_URL: FakeResponse(content=b"not an image"),
    })
    with pytest.raises(MalformedError):
        AssetCache(str(tmp_path), session).make_preview(10, 16)


def test_cache_size_and_clear(tmp_path):
    session = FakeSession({config.ASSET_DELIVERY_URL: FakeResponse(content=b"12345")})
    cache = AssetCache(str(tmp_path / "cache"), session)
    cache.download_asset(1)
    assert cache.get_cache_size() == 5
    cache.clear_cache()
    assert cache.get_cache_size() == 0
    assert os.path.isdir(cache.cache_dir)


@pytest.mark.parametrize("size", [0, -16, 1.5, True])
def test_make_preview_rejects_bad_size(tmp_path, size):
    session = FakeSession()
    with pytest.raises(MalformedError):
        AssetCache(str(tmp_path), session).make_preview(10, size)
    assert session.calls == []
