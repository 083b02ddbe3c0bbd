# utils.py
import os
import logging
import re


def sanitize_filename(filename):
    """
    Sanitizes a string to be safe for use as a filename (profile names, exports).
    Removes or replaces characters that are typically invalid on most filesystems.
    Returns an empty string when nothing usable is left.
    """
    if not isinstance(filename, str):
        filename = str(filename)

    # \ / : * ? " < > | and control characters (0-31)
    illegal_chars_pattern = r'[\\/:*?"<>|\x00-\x1F]'
    sanitized = re.sub(illegal_chars_pattern, '_', filename)

    # Leading/trailing whitespace and dots cause trouble on Windows
    sanitized = sanitized.strip(' .')
    sanitized = re.sub(r'_+', '_', sanitized)
    return sanitized


def get_directory_size(directory_path):
    """Calculates recursively the total size of a folder in bytes. Returns 0 for a missing folder."""
    total_size = 0
    if not os.path.isdir(directory_path):
        return 0

    for dirpath, dirnames, filenames in os.walk(directory_path, topdown=True, onerror=lambda err: logging.warning(f"Error walking {err.filename}: {err.strerror}")):
        for f in filenames:
            fp = os.path.join(dirpath, f)
            # Skip broken symlinks and unreadable files
            try:
                if not os.path.islink(fp):
                    total_size += os.path.getsize(fp)
            except OSError as e:
                logging.warning(f"ERROR getting size for {fp}: {e}")
    return total_size


def format_size(size_bytes):
    """Human readable size, e.g. 1536 -> '1.5 KB'."""
    if size_bytes < 1024:
        return f"{int(size_bytes)} B"
    size = float(size_bytes)
    for unit in ("KB", "MB"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f} {unit}"
    return f"{size / 1024:.1f} GB"


def shorten_path(path):
    """Replace the user's home folder with '~' for display."""
    if not path or not isinstance(path, str):
        return path
    home_dir = os.path.expanduser('~')
    norm_path = os.path.normpath(path)
    if home_dir and norm_path.startswith(home_dir + os.sep):
        return '~' + norm_path[len(home_dir):]
    return norm_path
