# local_rt_setup/core/system/base.py
"""Provides base system utilities and cross-platform functionalities.

This module maps the host operating system onto the closed set of platforms
Artifactory publishes archives for, and wraps the filesystem operations the
installer and configuration patcher rely on (permission changes, text
patches, mode-restricted writes) so that every failure surfaces as a
`FileOperationError`.
"""

import logging
import os
import platform
from typing import Optional

from local_rt_setup.error import FileOperationError, UnsupportedPlatformError

logger = logging.getLogger(__name__)

MAC = "mac"
WINDOWS = "windows"
LINUX = "linux"

_SYSTEM_TO_OS_TYPE = {
    "Darwin": MAC,
    "Windows": WINDOWS,
    "Linux": LINUX,
}

SECRET_FILE_MODE = 0o600
CONFIG_FILE_MODE = 0o644
PERMISSIVE_MODE = 0o777


def get_os_type(system_name: Optional[str] = None) -> str:
    """Returns the platform identifier for the host (or the given system name).

    Args:
        system_name: A `platform.system()` value. Defaults to the host's.

    Returns:
        One of "mac", "windows" or "linux".

    Raises:
        UnsupportedPlatformError: For any other operating system.
    """
    if system_name is None:
        system_name = platform.system()
    try:
        os_type = _SYSTEM_TO_OS_TYPE[system_name]
    except KeyError:
        raise UnsupportedPlatformError(system_name) from None
    logger.debug(f"Detected OS type '{os_type}' for system '{system_name}'")
    return os_type


def path_exists(path: str) -> bool:
    """Checks whether a path exists, surfacing errors other than absence.

    Raises:
        FileOperationError: If the path cannot be inspected.
    """
    try:
        os.stat(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        raise FileOperationError(f"Failed to inspect '{path}': {e}") from e


def write_file(path: str, content, mode: int = CONFIG_FILE_MODE) -> None:
    """Writes `content` to `path` with the given permission bits.

    Parent directories are created. The mode is enforced even when the file
    already existed.

    Args:
        path: Destination file.
        content: `str` (written as UTF-8) or `bytes`.
        mode: Permission bits of the resulting file.

    Raises:
        FileOperationError: If any part of the write fails.
    """
    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(path, mode)
    except OSError as e:
        raise FileOperationError(f"Failed to write file '{path}': {e}") from e
    logger.debug(f"Wrote {len(data)} bytes to '{path}' (mode {oct(mode)})")


def replace_in_file(path: str, old: bytes, new: bytes) -> int:
    """Removes or replaces every occurrence of `old` in a file.

    The file is patched as raw bytes, whatever its encoding, and keeps its
    current permission bits.

    Returns:
        The number of replaced occurrences.

    Raises:
        FileOperationError: If the file cannot be read or written.
    """
    try:
        with open(path, "rb") as f:
            content = f.read()
        count = content.count(old)
        with open(path, "wb") as f:
            f.write(content.replace(old, new))
    except OSError as e:
        raise FileOperationError(f"Failed to patch file '{path}': {e}") from e
    logger.debug(f"Replaced {count} occurrence(s) of {old!r} in '{path}'")
    return count


def set_permissions_recursive(target_dir: str, mode: int = PERMISSIVE_MODE) -> None:
    """Applies `mode` to a directory and everything below it.

    Symlinks are skipped.

    Raises:
        FileOperationError: If the directory is missing or a chmod fails.
    """
    if not os.path.isdir(target_dir):
        raise FileOperationError(
            f"Cannot set permissions: '{target_dir}' does not exist or is not a directory."
        )

    logger.info(f"Setting permissions {oct(mode)} on '{target_dir}'")
    try:
        os.chmod(target_dir, mode)
        for root, dirs, files in os.walk(target_dir):
            for name in dirs + files:
                entry = os.path.join(root, name)
                if not os.path.islink(entry):
                    os.chmod(entry, mode)
    except OSError as e:
        raise FileOperationError(
            f"Failed to set permissions on '{target_dir}': {e}"
        ) from e
