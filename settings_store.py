# settings_store.py
# -*- coding: utf-8 -*-
"""
Read-merge-write access to the client's ClientAppSettings.json.

The settings file lives below whatever installation the selector reports at
the moment of the call. Every operation holds one in-process lock for the
whole read -> compute -> write cycle. The game client itself may still write
the file concurrently; there is no cross-process lock and this module does
not try to provide one.
"""

import json
import logging
import os
import threading

import config
from errors import IOFailureError, MalformedError


def write_json_file(target_path, document, indent=config.SETTINGS_JSON_INDENT, operation="write settings"):
    """Write document as pretty JSON via a temp file in the same folder, then replace."""
    temp_path = target_path + ".tmp"
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=indent, ensure_ascii=False)
        os.replace(temp_path, target_path)
    except (OSError, TypeError, ValueError) as e:
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
        except OSError as e_rm:
            logging.error(f"Unable to remove temp file '{temp_path}': {e_rm}")
        raise IOFailureError(str(e), operation=operation, identifier=target_path) from e


class SettingsStore:
    """Owns the live settings file of the primary installation."""

    def __init__(self, selector):
        self.selector = selector
        # Shared with BackupLedger so snapshot/restore never interleave with a merge
        self.lock = threading.RLock()

    # --- Paths ---

    def settings_dir(self):
        primary = self.selector.select()
        return os.path.join(primary.path, config.CLIENT_SETTINGS_DIRNAME)

    def settings_file_path(self, settings_dir=None):
        if settings_dir is None:
            settings_dir = self.settings_dir()
        return os.path.join(settings_dir, config.CLIENT_SETTINGS_FILENAME)

    def ensure_settings_dir(self):
        settings_dir = self.settings_dir()
        try:
            os.makedirs(settings_dir, exist_ok=True)
        except OSError as e:
            raise IOFailureError(str(e), operation="create settings folder", identifier=settings_dir) from e
        return settings_dir

    # --- Reading ---

    def _load_for_merge(self, settings_file):
        """Current document for a merge. Absent or unparseable files count as empty."""
        if not os.path.isfile(settings_file):
            return {}
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logging.warning(f"Settings file '{settings_file}' is not valid JSON, starting from an empty document.")
            return {}
        except OSError as e:
            raise IOFailureError(str(e), operation="read settings", identifier=settings_file) from e
        if not isinstance(document, dict):
            logging.warning(f"Settings file '{settings_file}' does not contain a JSON object, starting from an empty document.")
            return {}
        return document

    def read_all(self):
        """Return the whole document. Raises MalformedError if the file cannot be parsed."""
        with self.lock:
            settings_file = self.settings_file_path()
            if not os.path.isfile(settings_file):
                return {}
            try:
                with open(settings_file, "r", encoding="utf-8") as f:
                    document = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MalformedError(str(e), operation="read settings", identifier=settings_file) from e
            except OSError as e:
                raise IOFailureError(str(e), operation="read settings", identifier=settings_file) from e
        if not isinstance(document, dict):
            raise MalformedError("settings file does not contain a JSON object",
                                 operation="read settings", identifier=settings_file)
        return document

    # --- Writing ---

    def merge_write(self, partial):
        """Insert/overwrite the given keys, keeping every other key untouched."""
        with self.lock:
            settings_file = self.settings_file_path(self.ensure_settings_dir())
            document = self._load_for_merge(settings_file)
            for key, value in partial.items():
                document[key] = value
            write_json_file(settings_file, document)
        logging.info(f"Merged {len(partial)} key(s) into '{settings_file}'.")
        return document

    def remove_keys(self, keys):
        """Delete the given keys. Missing keys are ignored. Returns the keys actually removed."""
        with self.lock:
            settings_file = self.settings_file_path()
            if not os.path.isfile(settings_file):
                return []
            document = self._load_for_merge(settings_file)
            removed = [key for key in keys if key in document]
            if not removed:
                return []
            for key in removed:
                del document[key]
            write_json_file(settings_file, document)
        logging.info(f"Removed {len(removed)} key(s) from '{settings_file}'.")
        return removed
