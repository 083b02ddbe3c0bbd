# web_utils/__init__.py
"""
Web utilities package.
Contains the metadata client for the public web API and the local asset cache.
"""

from web_utils.api_client import WebApiClient
from web_utils.asset_cache import AssetCache

__all__ = [
    'WebApiClient',
    'AssetCache',
]
