# backup_ledger.py
# -*- coding: utf-8 -*-
"""
Snapshots of the live settings file and whole-file restore.

Snapshots are plain byte copies named backup_YYYYMMDD_HHMMSS.json in the
backup folder. The folder listing is the only index: nothing else is
persisted. Snapshot and restore hold the SettingsStore lock, so they never
interleave with a merge.
"""

import logging
import os
import re
import shutil
from datetime import datetime

import config
from errors import IOFailureError, NotFoundError

# Same-second snapshots get a _<n> suffix instead of overwriting
SNAPSHOT_PATTERN = re.compile(
    re.escape(config.BACKUP_PREFIX) + r"(\d{8}_\d{6})(?:_(\d+))?\.json"
)


def is_snapshot_name(name) -> bool:
    return isinstance(name, str) and SNAPSHOT_PATTERN.fullmatch(name) is not None


def _snapshot_sort_key(name):
    match = SNAPSHOT_PATTERN.fullmatch(name)
    return match.group(1), int(match.group(2) or 0)


def _copy_replace(source, target, operation, identifier):
    """Byte copy source over target through a temp file next to target."""
    temp_path = target + ".tmp"
    try:
        shutil.copyfile(source, temp_path)
        os.replace(temp_path, target)
    except OSError as e:
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
        except OSError as e_rm:
            logging.error(f"Unable to remove temp file '{temp_path}': {e_rm}")
        raise IOFailureError(str(e), operation=operation, identifier=identifier) from e


class BackupLedger:
    """Append-only snapshot chain around the live settings file."""

    def __init__(self, backup_dir, store, clock=datetime.now):
        self.backup_dir = backup_dir
        self.store = store
        self._clock = clock

    def _next_snapshot_name(self):
        timestamp = self._clock().strftime(config.BACKUP_TIMESTAMP_FORMAT)
        name = f"{config.BACKUP_PREFIX}{timestamp}.json"
        counter = 1
        while os.path.exists(os.path.join(self.backup_dir, name)):
            name = f"{config.BACKUP_PREFIX}{timestamp}_{counter}.json"
            counter += 1
        return name

    def snapshot(self):
        """Copy the live file into the ledger. Returns the snapshot id, or None if there is no live file."""
        with self.store.lock:
            settings_file = self.store.settings_file_path()
            if not os.path.isfile(settings_file):
                logging.info(f"No settings file at '{settings_file}', nothing to back up.")
                return None
            try:
                os.makedirs(self.backup_dir, exist_ok=True)
            except OSError as e:
                raise IOFailureError(str(e), operation="create backup folder", identifier=self.backup_dir) from e
            snapshot_id = self._next_snapshot_name()
            _copy_replace(settings_file, os.path.join(self.backup_dir, snapshot_id),
                          operation="snapshot", identifier=snapshot_id)
        logging.info(f"Settings snapshot created: {snapshot_id}")
        return snapshot_id

    def restore(self, snapshot_id):
        """Replace the whole live file with the snapshot. Keys added since are discarded."""
        with self.store.lock:
            source = self._existing_snapshot_path(snapshot_id, "restore")
            settings_file = self.store.settings_file_path(self.store.ensure_settings_dir())
            _copy_replace(source, settings_file, operation="restore", identifier=snapshot_id)
        logging.info(f"Restored settings from snapshot '{snapshot_id}' to '{settings_file}'.")

    def list(self):
        """Snapshot ids, newest first."""
        if not os.path.isdir(self.backup_dir):
            return []
        try:
            names = [name for name in os.listdir(self.backup_dir) if is_snapshot_name(name)]
        except OSError as e:
            raise IOFailureError(str(e), operation="list snapshots", identifier=self.backup_dir) from e
        names.sort(key=_snapshot_sort_key, reverse=True)
        return names

    def delete(self, snapshot_id):
        with self.store.lock:
            path = self._existing_snapshot_path(snapshot_id, "delete snapshot")
            try:
                os.remove(path)
            except OSError as e:
                raise IOFailureError(str(e), operation="delete snapshot", identifier=snapshot_id) from e
        logging.info(f"Snapshot '{snapshot_id}' deleted.")

    def prune(self, max_keep=config.MAX_BACKUPS):
        """Delete the oldest snapshots beyond max_keep. Returns the deleted ids."""
        with self.store.lock:
            snapshots = self.list()
            if max_keep < 0 or len(snapshots) <= max_keep:
                return []
            to_delete = snapshots[max_keep:]
            logging.info(f"Deleting {len(to_delete)} outdated snapshot(s)...")
            for snapshot_id in to_delete:
                self.delete(snapshot_id)
        return to_delete

    def _existing_snapshot_path(self, snapshot_id, operation):
        if not is_snapshot_name(snapshot_id):
            raise NotFoundError("not a snapshot name", operation=operation, identifier=snapshot_id)
        path = os.path.join(self.backup_dir, snapshot_id)
        if not os.path.isfile(path):
            raise NotFoundError("snapshot not found", operation=operation, identifier=snapshot_id)
        return path
