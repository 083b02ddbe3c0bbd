# config.py
import os
import logging
import platform


# --- Application name (used for the app data/config/cache folders) ---
APP_NAME = "ClientTune"

# Redirects every app folder below a single directory (portable installs, tests)
HOME_OVERRIDE_ENV = "CLIENTTUNE_HOME"


def _resolve_base_path(kind):
    """Return the platform base directory for 'data', 'roaming', 'config' or 'cache'."""
    system = platform.system()
    if system == "Windows":
        if kind in ("data", "cache"):
            return os.getenv('LOCALAPPDATA')
        return os.getenv('APPDATA')
    if system == "Darwin":
        if kind == "cache":
            return os.path.expanduser('~/Library/Caches')
        return os.path.expanduser('~/Library/Application Support')
    # Linux and other unix-likes: XDG Base Directory Specification
    if kind == "config":
        return os.getenv('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
    if kind == "cache":
        return os.getenv('XDG_CACHE_HOME', os.path.expanduser('~/.cache'))
    return os.getenv('XDG_DATA_HOME', os.path.expanduser('~/.local/share'))


def _get_app_folder(kind, subfolder=None):
    """Return (and create) the app folder of the given kind.

    Falls back to a folder in the current directory when no standard
    location can be determined.
    """
    override = os.getenv(HOME_OVERRIDE_ENV)
    if override:
        app_folder = os.path.join(override, kind)
    else:
        base_path = None
        try:
            base_path = _resolve_base_path(kind)
        except Exception as e:
            logging.error(f"Unexpected error resolving the {kind} folder: {e}. Using CWD fallback.", exc_info=True)
        if not base_path:
            logging.error(f"Unable to determine the standard {kind} folder. Using the current folder as fallback.")
            app_folder = os.path.abspath(APP_NAME)
        else:
            app_folder = os.path.join(base_path, APP_NAME)

    if subfolder:
        app_folder = os.path.join(app_folder, subfolder)

    if not os.path.exists(app_folder):
        try:
            os.makedirs(app_folder, exist_ok=True)
            logging.info(f"Created application folder: {app_folder}")
        except OSError as e:
            # Callers surface the error when they actually touch the folder
            logging.error(f"Unable to create application folder {app_folder}: {e}.")
    return app_folder


def get_app_data_folder():
    """Local data folder (%LOCALAPPDATA%\\ClientTune on Windows)."""
    return _get_app_folder("data")


def get_app_config_folder():
    """Configuration folder (%APPDATA%\\ClientTune on Windows)."""
    return _get_app_folder("config")


def get_app_cache_folder():
    """Cache folder (%LOCALAPPDATA%\\ClientTune on Windows, ~/.cache/ClientTune on Linux)."""
    return _get_app_folder("cache")


def get_backup_folder():
    return _get_app_folder("data", BACKUP_SUBDIR)


def get_profiles_folder():
    return _get_app_folder("config", PROFILES_SUBDIR)


def get_asset_cache_folder():
    return _get_app_folder("cache", ASSET_CACHE_SUBDIR)


def get_platform_data_dirs():
    """Return (local_data_dir, roaming_data_dir) for the current platform.

    Either entry may be None when the platform gives no answer. On Linux and
    macOS both usually point to the same directory.
    """
    local_dir = None
    roaming_dir = None
    try:
        local_dir = _resolve_base_path("data")
        roaming_dir = _resolve_base_path("roaming")
    except Exception as e:
        logging.warning(f"Unable to resolve platform data directories: {e}")
    return local_dir, roaming_dir


# --- Game client installation detection ---
CLIENT_FOLDER_NAME = "Roblox"
PLAYER_EXECUTABLE = "RobloxPlayerBeta.exe"
STUDIO_EXECUTABLE = "RobloxStudioBeta.exe"
CLIENT_EXECUTABLES = (PLAYER_EXECUTABLE, STUDIO_EXECUTABLE)

FALLBACK_INSTALL_ROOTS = [
    r"C:\Program Files (x86)\Roblox",
    r"C:\Program Files\Roblox",
]

# HKEY_CURRENT_USER key holding the install location string value
REGISTRY_INSTALL_KEY = r"Software\Roblox\RobloxStudioBrowser\roblox.com"
REGISTRY_INSTALL_VALUE = "InstallLocation"

# The root itself is depth 0; files down to this depth are inspected
MAX_SEARCH_DEPTH = 4

CHANNEL_PLAYER = "Player"
CHANNEL_STUDIO = "Studio"
CHANNEL_UNKNOWN = "Unknown"

LAST_MODIFIED_FORMAT = "%Y-%m-%d %H:%M:%S"


# --- Settings file ---
CLIENT_SETTINGS_DIRNAME = "ClientSettings"
CLIENT_SETTINGS_FILENAME = "ClientAppSettings.json"
SETTINGS_JSON_INDENT = 2


# --- Backups ---
BACKUP_SUBDIR = "backups"
BACKUP_PREFIX = "backup_"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
MAX_BACKUPS = 20


# --- Profiles ---
PROFILES_SUBDIR = "profiles"
PROFILE_EXTENSION = ".json"


# --- Projection constants ---
SHADOW_INTENSITY_SCALE = 25
# Always written regardless of the profile (see DESIGN.md, open questions)
MAX_PLAYERS_OVERRIDE = 100


# --- Web API ---
USER_AGENT = "ClientTune/1.0"
API_TIMEOUT_SECONDS = 30
ASSET_TIMEOUT_SECONDS = 60
USERS_API_URL = "https://users.roblox.com/v1"
GAMES_API_URL = "https://games.roblox.com/v1"
ECONOMY_API_URL = "https://economy.roblox.com/v2"
THUMBNAILS_API_URL = "https://thumbnails.roblox.com/v1"
ASSET_DELIVERY_URL = "https://assetdelivery.roblox.com/v1/asset/"
CLIENT_VERSION_URL = "https://clientsettingscdn.roblox.com/v2/client-version/WindowsPlayer"

ASSET_CACHE_SUBDIR = "assets"
THUMBNAIL_SIZES = {
    "small": "150x150",
    "medium": "420x420",
    "large": "768x432",
}
GAME_ICON_SIZE = "512x512"
DEFAULT_PREVIEW_SIZE = 128


# --- Fast flag presets ---
# category -> list of presets; each preset maps flag names to string values
FLAG_PRESETS = {
    "Performance": [
        {
            "name": "Uncap FPS",
            "description": "Remove FPS limit for maximum performance",
            "flags": {"DFIntTaskSchedulerTargetFps": "999"},
        },
        {
            "name": "Low Latency",
            "description": "Reduce input lag and network latency",
            "flags": {
                "FFlagEnableLowLatencyMode": "true",
                "DFIntConnectionMTUSize": "1492",
            },
        },
        {
            "name": "Memory Optimization",
            "description": "Optimize memory usage",
            "flags": {
                "FFlagEnableMemoryOptimization": "true",
                "DFIntHttpCacheCleanMaxFileSizeMB": "128",
            },
        },
    ],
    "Graphics": [
        {
            "name": "Ultra Graphics",
            "description": "Maximum visual quality",
            "flags": {
                "DFIntDebugFRMQualityLevelOverride": "21",
                "FIntRenderShadowIntensity": "100",
                "DFIntTextureQualityOverride": "3",
            },
        },
        {
            "name": "Potato Mode",
            "description": "Minimum graphics for maximum FPS",
            "flags": {
                "DFIntDebugFRMQualityLevelOverride": "1",
                "FFlagDisablePostFx": "true",
                "FIntRenderShadowIntensity": "0",
            },
        },
    ],
    "UI": [
        {
            "name": "Show FPS Counter",
            "description": "Display FPS counter in-game",
            "flags": {"FFlagDebugDisplayFPS": "true"},
        },
        {
            "name": "Minimal UI",
            "description": "Hide unnecessary UI elements",
            "flags": {"FFlagEnableMinimalUI": "true"},
        },
    ],
}
