import os

import pytest

import config
from installation_finder import InstallationIndex, PrimarySelector
from settings_store import SettingsStore


def make_install(root, version="version-abc", binary=config.PLAYER_EXECUTABLE, mtime=None):
    """Create root/<version>/<binary> and return the install folder."""
    install_dir = os.path.join(str(root), version)
    os.makedirs(install_dir, exist_ok=True)
    binary_path = os.path.join(install_dir, binary)
    with open(binary_path, "wb") as f:
        f.write(b"MZ")
    if mtime is not None:
        os.utime(binary_path, (mtime, mtime))
    return install_dir


def settings_path(install_dir):
    return os.path.join(install_dir, config.CLIENT_SETTINGS_DIRNAME, config.CLIENT_SETTINGS_FILENAME)


class FixedClock:
    """Returns the given datetimes in order, repeating the last one."""

    def __init__(self, *moments):
        self.moments = list(moments)

    def __call__(self):
        if len(self.moments) > 1:
            return self.moments.pop(0)
        return self.moments[0]


@pytest.fixture(autouse=True)
def app_home(tmp_path, monkeypatch):
    home = tmp_path / "apphome"
    monkeypatch.setenv(config.HOME_OVERRIDE_ENV, str(home))
    return home


@pytest.fixture
def install_root(tmp_path):
    root = tmp_path / "Roblox"
    root.mkdir()
    return root


@pytest.fixture
def install_dir(install_root):
    return make_install(install_root)


@pytest.fixture
def store(install_root, install_dir):
    return SettingsStore(PrimarySelector(InstallationIndex([str(install_root)])))


# --- Fake HTTP layer ---

class FakeResponse:

    def __init__(self, status_code=200, payload=None, content=b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Maps a URL to a FakeResponse (or an exception to raise) and records every call."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.headers = {}

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        outcome = self.routes.get(url, FakeResponse(404))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_session():
    return FakeSession()
