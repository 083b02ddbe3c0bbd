# errors.py
# -*- coding: utf-8 -*-
"""Error types shared by the installation, settings and collaborator modules."""


class ClientTuneError(Exception):
    """Base error. Carries the failing operation and the identifier it worked on."""

    kind = "error"

    def __init__(self, message, operation=None, identifier=None):
        self.operation = operation
        self.identifier = identifier
        self.message = message
        super().__init__(self._format())

    def _format(self):
        parts = []
        if self.operation:
            parts.append(self.operation)
        if self.identifier is not None:
            parts.append(f"'{self.identifier}'")
        prefix = " ".join(parts)
        return f"{prefix}: {self.message}" if prefix else self.message


class NotFoundError(ClientTuneError):
    """No installation, snapshot, profile or remote resource with that identifier."""

    kind = "not_found"


class UnreachableError(ClientTuneError):
    """A search root, registry key or remote host exists but cannot be read."""

    kind = "unreachable"


class MalformedError(ClientTuneError):
    """A settings or profile file (or a response body) is not valid JSON."""

    kind = "malformed"


class IOFailureError(ClientTuneError):
    """A write, copy or remove failed."""

    kind = "io_failure"
