# web_utils/asset_cache.py
# -*- coding: utf-8 -*-
"""
Local cache of downloaded assets, thumbnails and game icons.

Files are keyed by id (and size) inside the cache folder; a file already on
disk is returned without touching the network.
"""

import io
import logging
import os
import shutil
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

import config
from errors import IOFailureError, MalformedError, NotFoundError, UnreachableError
from utils import get_directory_size
from web_utils.api_client import build_session, get_json

log = logging.getLogger(__name__)


def _fetch_bytes(session, url, operation, identifier, params=None):
    try:
        response = session.get(url, params=params, timeout=config.ASSET_TIMEOUT_SECONDS)
    except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
        raise UnreachableError(str(e), operation=operation, identifier=identifier) from e
    except requests.exceptions.RequestException as e:
        raise IOFailureError(str(e), operation=operation, identifier=identifier) from e
    if response.status_code == 404:
        raise NotFoundError("resource not found (HTTP 404)", operation=operation, identifier=identifier)
    if not 200 <= response.status_code < 300:
        raise IOFailureError(f"download failed (HTTP {response.status_code})", operation=operation, identifier=identifier)
    return response.content


def _first_image_url(data, operation, identifier):
    entries = data.get("data") if isinstance(data, dict) else None
    if not entries:
        raise NotFoundError("no image available", operation=operation, identifier=identifier)
    image_url = entries[0].get("imageUrl")
    if not image_url:
        raise NotFoundError("image is not ready", operation=operation, identifier=identifier)
    return image_url


class AssetCache:
    """Downloads assets and images on demand and keeps them in cache_dir."""

    def __init__(self, cache_dir, session: Optional[requests.Session] = None):
        self.cache_dir = cache_dir
        self.session = session or build_session()

    def _cache_path(self, filename):
        return os.path.join(self.cache_dir, filename)

    def _store(self, path, content, operation, identifier):
        temp_path = path + ".tmp"
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            with open(temp_path, "wb") as f:
                f.write(content)
            os.replace(temp_path, path)
        except OSError as e:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as e_rm:
                    log.error(f"Unable to remove temp file '{temp_path}': {e_rm}")
            raise IOFailureError(str(e), operation=operation, identifier=identifier) from e
        log.info(f"Cached {len(content)} bytes at '{path}'.")
        return path

    def download_asset(self, asset_id: int) -> str:
        path = self._cache_path(f"{asset_id}.rbxm")
        if os.path.isfile(path):
            log.debug(f"Asset {asset_id} served from cache.")
            return path
        content = _fetch_bytes(self.session, config.ASSET_DELIVERY_URL, "download asset", asset_id,
                               params={"id": asset_id})
        return self._store(path, content, "download asset", asset_id)

    def download_thumbnail(self, asset_id: int, size: str = "medium") -> str:
        dimensions = config.THUMBNAIL_SIZES.get(size)
        if dimensions is None:
            raise NotFoundError(f"unknown thumbnail size '{size}'", operation="download thumbnail", identifier=asset_id)
        path = self._cache_path(f"{asset_id}_{dimensions}.png")
        if os.path.isfile(path):
            return path
        data = get_json(self.session, f"{config.THUMBNAILS_API_URL}/assets", "download thumbnail", asset_id,
                        params={"assetIds": asset_id, "size": dimensions, "format": "Png"})
        image_url = _first_image_url(data, "download thumbnail", asset_id)
        content = _fetch_bytes(self.session, image_url, "download thumbnail", asset_id)
        return self._store(path, content, "download thumbnail", asset_id)

    def download_game_icon(self, universe_id: int) -> str:
        path = self._cache_path(f"game_{universe_id}.png")
        if os.path.isfile(path):
            return path
        data = get_json(self.session, f"{config.THUMBNAILS_API_URL}/games/icons", "download game icon", universe_id,
                        params={"universeIds": universe_id, "size": config.GAME_ICON_SIZE, "format": "Png"})
        image_url = _first_image_url(data, "download game icon", universe_id)
        content = _fetch_bytes(self.session, image_url, "download game icon", universe_id)
        return self._store(path, content, "download game icon", universe_id)

    def make_preview(self, asset_id: int, size: int = config.DEFAULT_PREVIEW_SIZE) -> str:
        """Square RGBA PNG of the medium thumbnail, resized to size x size."""
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise MalformedError(f"preview size must be a positive integer, got {size!r}",
                                 operation="make preview", identifier=asset_id)
        preview_path = self._cache_path(f"{asset_id}_preview_{size}.png")
        if os.path.isfile(preview_path):
            return preview_path
        thumbnail_path = self.download_thumbnail(asset_id, "medium")
        try:
            with open(thumbnail_path, "rb") as f:
                image = Image.open(io.BytesIO(f.read()))
                image = image.convert('RGBA')
            image = image.resize((size, size), Image.Resampling.LANCZOS)
            image.save(preview_path, 'PNG')
        except UnidentifiedImageError as e:
            raise MalformedError("cached thumbnail is not an image", operation="make preview", identifier=asset_id) from e
        except OSError as e:
            raise IOFailureError(str(e), operation="make preview", identifier=asset_id) from e
        log.info(f"Preview for asset {asset_id} saved to '{preview_path}'.")
        return preview_path

    def clear_cache(self):
        if not os.path.isdir(self.cache_dir):
            return
        try:
            shutil.rmtree(self.cache_dir)
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError as e:
            raise IOFailureError(str(e), operation="clear cache", identifier=self.cache_dir) from e
        log.info(f"Asset cache cleared: '{self.cache_dir}'.")

    def get_cache_size(self) -> int:
        return get_directory_size(self.cache_dir)
