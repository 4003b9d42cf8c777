"""
Helper utilities for Sound Companion
Provides file name, path and formatting helpers shared across modules
"""

import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse, unquote


def display_name(file_name: str) -> str:
    """
    Derive the human-readable name of a sound from its file name

    Strips the extension and normalizes path separators to the platform
    separator, so "sounds/ah_shit.mp3" and "ah_shit.wav" both become "ah_shit".

    Args:
        file_name: Sound file name, optionally with a relative directory

    Returns:
        Display name
    """
    normalized = file_name.replace('/', os.sep).replace('\\', os.sep)
    base = normalized.rsplit(os.sep, 1)[-1]
    stem, dot, _ = base.rpartition('.')
    return stem if dot and stem else base


def file_name_from_url(url: str) -> Optional[str]:
    """
    Extract the last path segment of a URL as a file name

    Args:
        url: Absolute or relative URL

    Returns:
        Decoded file name or None if the URL has no usable path
    """
    if not url:
        return None

    path = urlparse(url).path
    name = unquote(path.rstrip('/').rsplit('/', 1)[-1])
    return name or None


def is_safe_file_name(file_name: str) -> bool:
    """
    Check that a remote file name can be written inside the sounds directory

    Rejects empty names, names containing path separators and dot segments,
    so a listing can never write outside the target directory.
    """
    if not file_name or file_name in ('.', '..'):
        return False
    if '/' in file_name or '\\' in file_name or '\x00' in file_name:
        return False
    return True


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable string

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    if size_bytes < 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    size = float(size_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"


def format_timestamp(timestamp: Optional[float]) -> str:
    """
    Format a POSIX timestamp for display

    Args:
        timestamp: Seconds since the epoch, or None

    Returns:
        "YYYY-MM-DD HH:MM:SS" in local time, or "never"
    """
    if not timestamp:
        return "never"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if necessary

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def parse_size(size_str: str) -> int:
    """
    Parse size string to bytes

    Args:
        size_str: Size string like "10MB", "1GB", "500KB"

    Returns:
        Size in bytes
    """
    size_str = size_str.upper().strip()

    multipliers = {
        'B': 1,
        'KB': 1024,
        'MB': 1024 ** 2,
        'GB': 1024 ** 3,
        'TB': 1024 ** 4,
    }

    match = re.match(r'^(\d+(?:\.\d+)?)\s*([KMGT]?B)$', size_str)
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    number, unit = match.groups()
    return int(float(number) * multipliers[unit])
