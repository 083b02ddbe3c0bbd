# client_manager.py
# -*- coding: utf-8 -*-
"""
Wires discovery, settings, flags, backups, profiles and the web collaborators
into one object built at start-up.

ClientManager.call() is the boundary used by the CLI: it runs one operation
and always returns a response dict, never raising.
"""

import logging
import traceback

import config
from backup_ledger import BackupLedger
from config_projector import ConfigProjector
from errors import ClientTuneError
from flag_overlay import FlagOverlay
from installation_finder import InstallationIndex, PrimarySelector, verify_installation
from profile_store import ProfileStore
from settings_store import SettingsStore
from web_utils import AssetCache, WebApiClient


def make_response(success, data=None, error=None, kind=None):
    return {"success": success, "data": data, "error": error, "kind": kind}


class ClientManager:

    def __init__(self, backup_dir, profiles_dir, cache_dir, search_roots=None, session=None, clock=None):
        self.index = InstallationIndex(search_roots)
        self.selector = PrimarySelector(self.index)
        self.store = SettingsStore(self.selector)
        self.projector = ConfigProjector(self.store)
        self.flags = FlagOverlay(self.store)
        if clock is not None:
            self.ledger = BackupLedger(backup_dir, self.store, clock=clock)
        else:
            self.ledger = BackupLedger(backup_dir, self.store)
        self.profiles = ProfileStore(profiles_dir)
        self.api = WebApiClient(session)
        self.assets = AssetCache(cache_dir, session)

    @classmethod
    def from_app_folders(cls):
        """Manager using the per-user application folders from config."""
        return cls(
            backup_dir=config.get_backup_folder(),
            profiles_dir=config.get_profiles_folder(),
            cache_dir=config.get_asset_cache_folder(),
        )

    # --- Boundary ---

    def call(self, operation, *args, **kwargs):
        """Run self.<operation>(*args) and wrap the outcome in a response dict."""
        handler = getattr(self, operation, None)
        if operation.startswith("_") or not callable(handler):
            return make_response(False, error=f"unknown operation '{operation}'", kind="not_found")
        try:
            data = handler(*args, **kwargs)
        except ClientTuneError as e:
            logging.warning(f"Operation '{operation}' failed: {e}")
            return make_response(False, error=str(e), kind=e.kind)
        except Exception as e:
            logging.error(f"Unexpected error during '{operation}': {e}")
            logging.debug(traceback.format_exc())
            return make_response(False, error=f"{operation}: unexpected error: {e}", kind="error")
        return make_response(True, data=data)

    # --- Installations ---

    def find_installations(self):
        return [record.to_dict() for record in self.index.discover()]

    def get_primary_installation(self):
        return self.selector.select().to_dict()

    def verify_installation(self, install_path=None):
        """Check that install_path (default: the primary installation) still holds the player binary."""
        if install_path is None:
            install_path = self.selector.select().path
        return {"path": install_path, "valid": verify_installation(install_path)}

    def get_settings(self):
        return self.store.read_all()

    # --- Configuration profiles ---

    def apply_config(self, structured, backup_first=False):
        if backup_first:
            self.backup()
        return self.projector.apply(structured)

    def apply_profile(self, name, backup_first=False):
        structured = self.profiles.load(name)
        return self.apply_config(structured, backup_first=backup_first)

    def list_profiles(self):
        return self.profiles.list()

    def get_profile(self, name):
        return self.profiles.load(name).to_dict()

    def save_default_profile(self, name):
        return self.profiles.save(name, self.profiles.default())

    def delete_profile(self, name):
        self.profiles.delete(name)
        return name

    def export_profile(self, name, destination):
        return self.profiles.export(name, destination)

    def import_profile(self, source, name):
        return self.profiles.import_profile(source, name)

    # --- Fast flags ---

    def get_fast_flags(self):
        return self.flags.read_overlay()

    def set_fast_flags(self, flags):
        self.flags.apply_overlay(flags)
        return flags

    def remove_fast_flags(self, keys):
        return self.flags.remove_flags(keys)

    def get_presets(self):
        return self.flags.get_presets()

    def apply_preset(self, name):
        return self.flags.apply_preset(name)

    # --- Backups ---

    def backup(self):
        snapshot_id = self.ledger.snapshot()
        if snapshot_id is not None:
            self.ledger.prune(config.MAX_BACKUPS)
        return snapshot_id

    def restore(self, snapshot_id):
        self.ledger.restore(snapshot_id)
        return snapshot_id

    def list_backups(self):
        return self.ledger.list()

    def delete_backup(self, snapshot_id):
        self.ledger.delete(snapshot_id)
        return snapshot_id

    # --- Web API and asset cache ---

    def get_user_info(self, user_id):
        return self.api.get_user_info(user_id)

    def get_game_info(self, universe_id):
        return self.api.get_game_info(universe_id)

    def get_asset_details(self, asset_id):
        return self.api.get_asset_details(asset_id)

    def search_users(self, keyword):
        return self.api.search_users(keyword)

    def get_client_version(self):
        return self.api.get_client_version()

    def download_asset(self, asset_id):
        return self.assets.download_asset(asset_id)

    def download_thumbnail(self, asset_id, size="medium"):
        return self.assets.download_thumbnail(asset_id, size)

    def download_game_icon(self, universe_id):
        return self.assets.download_game_icon(universe_id)

    def make_preview(self, asset_id, size=config.DEFAULT_PREVIEW_SIZE):
        return self.assets.make_preview(asset_id, size)

    def get_cache_size(self):
        return self.assets.get_cache_size()

    def clear_cache(self):
        self.assets.clear_cache()
