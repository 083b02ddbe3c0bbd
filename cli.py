# cli.py
# -*- coding: utf-8 -*-
"""Command line front end: one sub-command per ClientManager operation."""

import argparse
import json
import logging

from colorama import Fore, Style, init

import config
from client_manager import ClientManager, make_response
from utils import format_size, shorten_path

init(autoreset=True)


# --- Colored print helpers ---

def print_title(text):
    """Prints a title in bright red."""
    print(f"{Style.BRIGHT}{Fore.RED}=== {text.upper()} ===")

def print_header(text):
    """Prints a section header in bright magenta."""
    print(f"\n{Style.BRIGHT}{Fore.MAGENTA}--- {text} ---{Style.RESET_ALL}")

def print_option(key, text):
    """Prints a key/value line."""
    print(f"  {Style.BRIGHT}{Fore.CYAN}{key}{Style.RESET_ALL}: {text}")

def print_info(text):
    print(text)

def print_success(text):
    print(f"{Fore.GREEN}{text}")

def print_warning(text):
    print(f"{Fore.YELLOW}WARNING: {text}")

def print_error(text):
    print(f"{Style.BRIGHT}{Fore.RED}ERROR: {text}")


# --- Argument parsing ---

def build_parser():
    parser = argparse.ArgumentParser(
        prog="clienttune",
        description=f"{config.APP_NAME}: locate the game client and manage its ClientAppSettings.json.")
    parser.add_argument("--json", action="store_true", help="Print the raw response as JSON.")
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    sub.add_parser("installations", help="List every installation found.")
    sub.add_parser("primary", help="Show the installation that settings are written to.")
    verify = sub.add_parser("verify", help="Check that an installation folder still holds the player binary.")
    verify.add_argument("path", nargs="?", help="Installation folder (default: the primary installation).")
    sub.add_parser("settings", help="Print the whole settings document.")

    flags = sub.add_parser("flags", help="Read or change fast flags.")
    flags_sub = flags.add_subparsers(dest="flags_command", metavar="ACTION")
    flags_sub.required = True
    flags_sub.add_parser("get", help="Show every flag as a string.")
    flags_set = flags_sub.add_parser("set", help="Set one or more flags.")
    flags_set.add_argument("pairs", nargs="+", metavar="KEY=VALUE")
    flags_unset = flags_sub.add_parser("unset", help="Remove flags.")
    flags_unset.add_argument("keys", nargs="+", metavar="KEY")
    flags_sub.add_parser("presets", help="List the built-in presets.")
    flags_preset = flags_sub.add_parser("preset", help="Apply a built-in preset.")
    flags_preset.add_argument("name")

    apply_cmd = sub.add_parser("apply", help="Apply a saved configuration profile.")
    apply_cmd.add_argument("profile")
    apply_cmd.add_argument("--no-backup", action="store_true", help="Do not snapshot the settings file first.")

    sub.add_parser("backup", help="Snapshot the live settings file.")
    sub.add_parser("backups", help="List snapshots, newest first.")
    restore = sub.add_parser("restore", help="Replace the live settings file with a snapshot.")
    restore.add_argument("snapshot_id", metavar="ID")

    profiles = sub.add_parser("profiles", help="Manage configuration profiles.")
    profiles_sub = profiles.add_subparsers(dest="profiles_command", metavar="ACTION")
    profiles_sub.required = True
    profiles_sub.add_parser("list", help="List saved profiles.")
    for action, help_text in (("show", "Print a profile."),
                              ("save-default", "Save the default configuration under NAME."),
                              ("delete", "Delete a profile.")):
        profiles_sub.add_parser(action, help=help_text).add_argument("name")
    export = profiles_sub.add_parser("export", help="Copy a profile file to DEST.")
    export.add_argument("name")
    export.add_argument("destination", metavar="DEST")
    import_cmd = profiles_sub.add_parser("import", help="Import a profile file under NAME.")
    import_cmd.add_argument("source", metavar="SOURCE")
    import_cmd.add_argument("name")

    sub.add_parser("user", help="Show a user by id.").add_argument("user_id", type=int, metavar="ID")
    sub.add_parser("search", help="Search users by keyword.").add_argument("keyword")
    sub.add_parser("game", help="Show a game by universe id.").add_argument("universe_id", type=int, metavar="ID")
    sub.add_parser("asset", help="Show asset details.").add_argument("asset_id", type=int, metavar="ID")
    sub.add_parser("client-version", help="Show the current client version upload.")

    download = sub.add_parser("download", help="Download an asset (or one of its images) into the cache.")
    download.add_argument("asset_id", type=int, metavar="ID")
    kind = download.add_mutually_exclusive_group()
    kind.add_argument("--thumbnail", choices=sorted(config.THUMBNAIL_SIZES), help="Download a thumbnail instead.")
    kind.add_argument("--icon", action="store_true", help="Treat ID as a universe id and download its icon.")
    kind.add_argument("--preview", type=int, metavar="PX", help="Build a square PNG preview of PX pixels.")

    cache = sub.add_parser("cache", help="Inspect or clear the asset cache.")
    cache.add_argument("cache_command", choices=["size", "clear"])

    return parser


def parse_flag_pairs(pairs):
    """['A=1', 'B=x=y'] -> {'A': '1', 'B': 'x=y'}. Returns None on a pair without '='."""
    flags = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            return None
        flags[key] = value
    return flags


def dispatch(manager, args):
    """Translate parsed arguments into one manager.call() and return its response."""
    command = args.command
    if command == "installations":
        return manager.call("find_installations")
    if command == "primary":
        return manager.call("get_primary_installation")
    if command == "verify":
        return manager.call("verify_installation", args.path)
    if command == "settings":
        return manager.call("get_settings")
    if command == "flags":
        action = args.flags_command
        if action == "get":
            return manager.call("get_fast_flags")
        if action == "set":
            flags = parse_flag_pairs(args.pairs)
            if flags is None:
                return make_response(False, error="flags set: expected KEY=VALUE pairs", kind="malformed")
            return manager.call("set_fast_flags", flags)
        if action == "unset":
            return manager.call("remove_fast_flags", args.keys)
        if action == "presets":
            return manager.call("get_presets")
        return manager.call("apply_preset", args.name)
    if command == "apply":
        return manager.call("apply_profile", args.profile, backup_first=not args.no_backup)
    if command == "backup":
        return manager.call("backup")
    if command == "backups":
        return manager.call("list_backups")
    if command == "restore":
        return manager.call("restore", args.snapshot_id)
    if command == "profiles":
        action = args.profiles_command
        if action == "list":
            return manager.call("list_profiles")
        if action == "show":
            return manager.call("get_profile", args.name)
        if action == "save-default":
            return manager.call("save_default_profile", args.name)
        if action == "delete":
            return manager.call("delete_profile", args.name)
        if action == "export":
            return manager.call("export_profile", args.name, args.destination)
        return manager.call("import_profile", args.source, args.name)
    if command == "user":
        return manager.call("get_user_info", args.user_id)
    if command == "search":
        return manager.call("search_users", args.keyword)
    if command == "game":
        return manager.call("get_game_info", args.universe_id)
    if command == "asset":
        return manager.call("get_asset_details", args.asset_id)
    if command == "client-version":
        return manager.call("get_client_version")
    if command == "download":
        if args.thumbnail:
            return manager.call("download_thumbnail", args.asset_id, args.thumbnail)
        if args.icon:
            return manager.call("download_game_icon", args.asset_id)
        if args.preview is not None:
            return manager.call("make_preview", args.asset_id, args.preview)
        return manager.call("download_asset", args.asset_id)
    if args.cache_command == "size":
        return manager.call("get_cache_size")
    return manager.call("clear_cache")


# --- Output ---

def _print_mapping(mapping):
    for key, value in mapping.items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in value.items())
        print_option(key, value)


def render(args, response):
    data = response["data"]
    command = args.command

    if command == "installations":
        print_title("Installations")
        if not data:
            print_warning("No installation found.")
        for record in data:
            print_header(record["channel"])
            _print_mapping({**record, "path": shorten_path(record["path"])})
    elif command == "primary":
        print_header("Primary installation")
        _print_mapping({**data, "path": shorten_path(data["path"])})
    elif command == "verify":
        if data["valid"]:
            print_success(f"Installation OK: {shorten_path(data['path'])}")
        else:
            print_warning(f"Player binary missing in '{shorten_path(data['path'])}'.")
    elif command == "flags" and args.flags_command == "presets":
        for category, presets in data.items():
            print_header(category)
            for preset in presets:
                print_option(preset["name"], preset["description"])
    elif command == "flags" and args.flags_command == "preset":
        print_success(f"Preset '{data['name']}' applied ({len(data['flags'])} flag(s)).")
    elif command == "backup":
        if data is None:
            print_warning("No settings file yet, nothing to back up.")
        else:
            print_success(f"Snapshot created: {data}")
    elif command == "restore":
        print_success(f"Settings restored from '{data}'.")
    elif command == "cache" and args.cache_command == "size":
        print_option("Asset cache", format_size(data))
    elif command == "cache":
        print_success("Asset cache cleared.")
    elif isinstance(data, dict):
        _print_mapping(data)
    elif isinstance(data, list):
        if not data:
            print_info("(none)")
        for item in data:
            if isinstance(item, dict):
                print_header(str(item.get("name", "")))
                _print_mapping(item)
            else:
                print_info(f"  {item}")
    elif data is not None:
        print_info(str(data))
    else:
        print_success("Done.")


def main(argv=None, manager=None):
    """Entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if manager is None:
        manager = ClientManager.from_app_folders()

    response = dispatch(manager, args)
    logging.debug(f"Command '{args.command}' -> success={response['success']}")

    if args.json:
        print(json.dumps(response, indent=2, ensure_ascii=False))
    elif response["success"]:
        render(args, response)
    else:
        print_error(response["error"])
    return 0 if response["success"] else 1
