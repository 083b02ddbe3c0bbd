# web_utils/api_client.py
# -*- coding: utf-8 -*-
"""
Thin client for the public user/game/asset web API.

Each call is one GET; the decoded JSON is reduced to the handful of fields
the rest of the application shows. Errors are mapped onto the shared error
kinds so the CLI can report them the same way as local failures.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

import config
from errors import IOFailureError, MalformedError, NotFoundError, UnreachableError

log = logging.getLogger(__name__)


def build_session(user_agent=config.USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def get_json(session, url, operation, identifier=None, params=None, timeout=config.API_TIMEOUT_SECONDS):
    """GET url and decode the JSON body, mapping failures to ClientTuneError kinds."""
    try:
        response = session.get(url, params=params, timeout=timeout)
    except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
        raise UnreachableError(str(e), operation=operation, identifier=identifier) from e
    except requests.exceptions.RequestException as e:
        raise IOFailureError(str(e), operation=operation, identifier=identifier) from e

    if response.status_code == 404:
        raise NotFoundError("resource not found (HTTP 404)", operation=operation, identifier=identifier)
    if not 200 <= response.status_code < 300:
        raise IOFailureError(f"request failed (HTTP {response.status_code})", operation=operation, identifier=identifier)
    try:
        return response.json()
    except ValueError as e:
        raise MalformedError("response is not valid JSON", operation=operation, identifier=identifier) from e


def _creator(data, id_key, name_key, type_key) -> Dict[str, Any]:
    data = data if isinstance(data, dict) else {}
    return {
        "id": data.get(id_key) or 0,
        "name": data.get(name_key) or "",
        "creator_type": data.get(type_key) or "",
    }


class WebApiClient:
    """Fetches user, game and asset metadata by numeric id."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or build_session()
        self.users_api_url = config.USERS_API_URL
        self.games_api_url = config.GAMES_API_URL
        self.economy_api_url = config.ECONOMY_API_URL

    def get_user_info(self, user_id: int) -> Dict[str, Any]:
        data = get_json(self.session, f"{self.users_api_url}/users/{user_id}", "get user", user_id)
        return {
            "id": data.get("id") or 0,
            "name": data.get("name") or "",
            "display_name": data.get("displayName") or "",
            "description": data.get("description") or "",
            "created": data.get("created") or "",
            "is_banned": bool(data.get("isBanned", False)),
        }

    def get_game_info(self, universe_id: int) -> Dict[str, Any]:
        data = get_json(self.session, f"{self.games_api_url}/games", "get game", universe_id,
                        params={"universeIds": universe_id})
        entries = data.get("data") if isinstance(data, dict) else None
        if not entries:
            raise NotFoundError("game not found", operation="get game", identifier=universe_id)
        game = entries[0]
        return {
            "id": game.get("id") or 0,
            "name": game.get("name") or "",
            "description": game.get("description") or "",
            "creator": _creator(game.get("creator"), "id", "name", "type"),
            "price": game.get("price"),
            "playing": game.get("playing") or 0,
            "visits": game.get("visits") or 0,
            "favorites": game.get("favoritedCount") or 0,
            "max_players": game.get("maxPlayers") or 0,
            "genre": game.get("genre") or "",
        }

    def get_asset_details(self, asset_id: int) -> Dict[str, Any]:
        data = get_json(self.session, f"{self.economy_api_url}/assets/{asset_id}/details", "get asset", asset_id)
        return {
            "id": data.get("AssetId") or 0,
            "name": data.get("Name") or "",
            "description": data.get("Description") or "",
            "asset_type": str(data.get("AssetTypeId") or 0),
            "creator": _creator(data.get("Creator"), "Id", "Name", "CreatorType"),
            "price": data.get("PriceInRobux"),
            "is_for_sale": bool(data.get("IsForSale", False)),
            "is_limited": bool(data.get("IsLimited", False)),
            "is_limited_unique": bool(data.get("IsLimitedUnique", False)),
            "remaining": data.get("Remaining"),
        }

    def search_users(self, keyword: str, limit: int = 10) -> List[Dict[str, Any]]:
        data = get_json(self.session, f"{self.users_api_url}/users/search", "search users", keyword,
                        params={"keyword": keyword, "limit": limit})
        users = []
        for user in data.get("data") or []:
            users.append({
                "id": user.get("id") or 0,
                "name": user.get("name") or "",
                "display_name": user.get("displayName") or "",
            })
        log.debug(f"User search '{keyword}' returned {len(users)} result(s).")
        return users

    def get_client_version(self) -> str:
        data = get_json(self.session, config.CLIENT_VERSION_URL, "get client version")
        return data.get("clientVersionUpload") or "unknown"
