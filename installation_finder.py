# installation_finder.py
# -*- coding: utf-8 -*-
"""
Game client installation discovery.

This module provides:
- InstallationIndex: scans the known search roots (platform data folders, the
  default Program Files folders and, on Windows, one registry-derived folder)
  for the player/studio binaries and derives one InstallationRecord per copy.
- PrimarySelector: picks the installation that writes should target.

Nothing here is cached: installations can appear, update or disappear between
two calls, so every discover()/select() rescans the filesystem. Callers that
resolve in a tight loop should keep the result themselves.
"""

import logging
import os
import platform
from datetime import datetime

import config
from errors import NotFoundError, UnreachableError
from models import InstallationRecord


def get_registry_install_root():
    """Read the client install location from the Windows registry.

    Returns the normalized path, or None when not on Windows or when the key
    or value is missing/unreadable. Never raises.
    """
    if platform.system() != "Windows":
        return None
    try:
        import winreg
    except ImportError:
        logging.info("winreg module not available, skipping registry lookup.")
        return None

    try:
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, config.REGISTRY_INSTALL_KEY) as hkey:
            path_value, _ = winreg.QueryValueEx(hkey, config.REGISTRY_INSTALL_VALUE)
    except OSError:
        logging.debug(f"Install location not found in registry: HKCU\\{config.REGISTRY_INSTALL_KEY}")
        return None
    except Exception as e:
        logging.warning(f"Error reading registry key HKCU\\{config.REGISTRY_INSTALL_KEY}: {e}")
        return None

    if isinstance(path_value, str) and path_value.strip():
        norm_path = os.path.normpath(path_value.strip())
        logging.info(f"Found client install location via registry: {norm_path}")
        return norm_path
    return None


def get_default_search_roots():
    """Fixed list of search roots for this machine, duplicates removed."""
    roots = []
    local_dir, roaming_dir = config.get_platform_data_dirs()
    for base in (local_dir, roaming_dir):
        if base:
            roots.append(os.path.join(base, config.CLIENT_FOLDER_NAME))
    roots.extend(config.FALLBACK_INSTALL_ROOTS)

    registry_root = get_registry_install_root()
    if registry_root:
        roots.append(registry_root)
    return _unique_paths(roots)


def _unique_paths(paths):
    seen = set()
    unique = []
    for path in paths:
        key = os.path.normcase(os.path.abspath(path))
        if key in seen:
            continue
        seen.add(key)
        unique.append(path)
    return unique


def detect_channel(binary_path: str) -> str:
    """Best-effort channel label from the binary path.

    This is a substring heuristic on the lower-cased path, so a player copy
    installed under a folder containing "studio" is labelled Studio.
    """
    path_lower = binary_path.lower()
    if "studio" in path_lower:
        return config.CHANNEL_STUDIO
    if "player" in path_lower:
        return config.CHANNEL_PLAYER
    return config.CHANNEL_UNKNOWN


def verify_installation(install_path) -> bool:
    """True if the folder exists and contains the player binary."""
    if not install_path or not os.path.isdir(install_path):
        return False
    return os.path.isfile(os.path.join(install_path, config.PLAYER_EXECUTABLE))


def _raise_unreachable(err):
    raise UnreachableError(err.strerror or str(err), operation="scan", identifier=err.filename)


def _walk_depth(root, dirpath):
    rel = os.path.relpath(dirpath, root)
    if rel == os.curdir:
        return 0
    return rel.count(os.sep) + 1


def _build_record(binary_path) -> InstallationRecord:
    install_dir = os.path.dirname(binary_path)
    version = os.path.basename(install_dir) or "unknown"
    try:
        mtime = os.stat(binary_path).st_mtime
    except OSError as e:
        raise UnreachableError(e.strerror or str(e), operation="stat", identifier=binary_path) from e
    return InstallationRecord(
        path=install_dir,
        version=version,
        channel=detect_channel(binary_path),
        last_modified=datetime.fromtimestamp(mtime).strftime(config.LAST_MODIFIED_FORMAT),
    )


def scan_root(root, max_depth=config.MAX_SEARCH_DEPTH):
    """Scan one search root. Raises UnreachableError on any walk/stat error."""
    records = []
    for dirpath, dirnames, filenames in os.walk(root, topdown=True, onerror=_raise_unreachable, followlinks=False):
        # Files in dirpath sit one level below it
        if _walk_depth(root, dirpath) + 1 >= max_depth:
            dirnames[:] = []
        for name in filenames:
            if name in config.CLIENT_EXECUTABLES:
                binary_path = os.path.join(dirpath, name)
                records.append(_build_record(binary_path))
                logging.debug(f"Found client binary: {binary_path}")
    return records


class InstallationIndex:
    """Discovers client installations below a fixed set of search roots."""

    def __init__(self, search_roots=None, max_depth=config.MAX_SEARCH_DEPTH):
        # None means "compute the default roots on every discovery"
        self._search_roots = list(search_roots) if search_roots is not None else None
        self.max_depth = max_depth
        # (root, reason) pairs from the last discover() call
        self.failed_roots = []

    def get_search_roots(self):
        if self._search_roots is not None:
            return _unique_paths(self._search_roots)
        return get_default_search_roots()

    def discover(self):
        """Return every installation found. An empty list is a valid result."""
        installations = []
        failed = []
        for root in self.get_search_roots():
            if not os.path.isdir(root):
                logging.debug(f"Search root does not exist, skipping: {root}")
                continue
            try:
                found = scan_root(root, self.max_depth)
            except UnreachableError as e:
                logging.warning(f"Unable to scan search root '{root}': {e}")
                failed.append((root, str(e)))
                continue
            installations.extend(found)
        self.failed_roots = failed
        logging.info(f"Discovery found {len(installations)} installation(s) ({len(failed)} root(s) unreadable).")
        return installations


class PrimarySelector:
    """Chooses the installation that settings writes target."""

    def __init__(self, index: InstallationIndex):
        self.index = index

    def select(self) -> InstallationRecord:
        """Most recently modified installation; ties resolve to whichever was discovered first."""
        installations = self.index.discover()
        if not installations:
            raise NotFoundError("no client installation found", operation="select installation")
        primary = max(installations, key=lambda record: record.last_modified)
        logging.debug(f"Primary installation: {primary.path} ({primary.channel}, {primary.last_modified})")
        return primary
