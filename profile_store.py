# profile_store.py
# -*- coding: utf-8 -*-
"""Named configuration profiles, one JSON file per profile in the profiles folder."""

import json
import logging
import os
import shutil

import config
from errors import IOFailureError, MalformedError, NotFoundError
from models import StructuredConfig
from settings_store import write_json_file
from utils import sanitize_filename


class ProfileStore:

    def __init__(self, profiles_dir):
        self.profiles_dir = profiles_dir

    def _profile_path(self, name, operation):
        safe_name = sanitize_filename(name)
        if not safe_name:
            raise NotFoundError("invalid profile name", operation=operation, identifier=name)
        return os.path.join(self.profiles_dir, safe_name + config.PROFILE_EXTENSION)

    def _existing_profile_path(self, name, operation):
        path = self._profile_path(name, operation)
        if not os.path.isfile(path):
            raise NotFoundError("config profile not found", operation=operation, identifier=name)
        return path

    @staticmethod
    def _read_config(path, operation, identifier):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedError(str(e), operation=operation, identifier=identifier) from e
        except OSError as e:
            raise IOFailureError(str(e), operation=operation, identifier=identifier) from e
        try:
            return StructuredConfig.from_dict(data)
        except MalformedError as e:
            raise MalformedError(e.message, operation=operation, identifier=identifier) from e

    def save(self, name, structured: StructuredConfig):
        path = self._profile_path(name, "save profile")
        try:
            os.makedirs(self.profiles_dir, exist_ok=True)
        except OSError as e:
            raise IOFailureError(str(e), operation="save profile", identifier=name) from e
        write_json_file(path, structured.to_dict(), indent=2, operation="save profile")
        logging.info(f"Profile '{name}' saved to '{path}'.")
        return path

    def load(self, name) -> StructuredConfig:
        path = self._existing_profile_path(name, "load profile")
        return self._read_config(path, "load profile", name)

    def list(self):
        """Profile names, sorted."""
        if not os.path.isdir(self.profiles_dir):
            return []
        try:
            entries = os.listdir(self.profiles_dir)
        except OSError as e:
            raise IOFailureError(str(e), operation="list profiles", identifier=self.profiles_dir) from e
        names = [entry[:-len(config.PROFILE_EXTENSION)] for entry in entries
                 if entry.endswith(config.PROFILE_EXTENSION)
                 and os.path.isfile(os.path.join(self.profiles_dir, entry))]
        names.sort()
        return names

    def delete(self, name):
        path = self._existing_profile_path(name, "delete profile")
        try:
            os.remove(path)
        except OSError as e:
            raise IOFailureError(str(e), operation="delete profile", identifier=name) from e
        logging.info(f"Profile '{name}' deleted.")

    def export(self, name, destination):
        """Copy the profile file as-is to destination (a file path or an existing folder)."""
        source = self._existing_profile_path(name, "export profile")
        if os.path.isdir(destination):
            destination = os.path.join(destination, os.path.basename(source))
        try:
            shutil.copy2(source, destination)
        except OSError as e:
            raise IOFailureError(str(e), operation="export profile", identifier=name) from e
        logging.info(f"Profile '{name}' exported to '{destination}'.")
        return destination

    def import_profile(self, source, name):
        """Copy an external profile file in under name, after checking that it parses."""
        if not os.path.isfile(source):
            raise NotFoundError("source file not found", operation="import profile", identifier=source)
        self._read_config(source, "import profile", source)
        destination = self._profile_path(name, "import profile")
        try:
            os.makedirs(self.profiles_dir, exist_ok=True)
            shutil.copy2(source, destination)
        except OSError as e:
            raise IOFailureError(str(e), operation="import profile", identifier=name) from e
        logging.info(f"Profile '{name}' imported from '{source}'.")
        return destination

    @staticmethod
    def default() -> StructuredConfig:
        return StructuredConfig()
