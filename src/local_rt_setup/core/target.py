# local_rt_setup/core/target.py
"""Version validation and the immutable description of what gets installed."""

import logging
import re
from dataclasses import dataclass

from local_rt_setup.config.const import (
    DEFAULT_VERSION,
    LEGACY_MAJOR_VERSION,
    MIN_MAJOR_VERSION,
)
from local_rt_setup.error import InvalidVersionError

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")


def is_legacy_version(rt_version: str) -> bool:
    """Validates an Artifactory version selector and classifies it.

    Args:
        rt_version: Either the ``[RELEASE]`` sentinel or a strict
            ``major.minor.patch`` numeric version.

    Returns:
        True for a major 6 version, False for ``[RELEASE]`` or major 7+.

    Raises:
        InvalidVersionError: If the selector is malformed or its major
            version is older than 6.
    """
    if rt_version == DEFAULT_VERSION:
        return False

    match = _VERSION_PATTERN.fullmatch(rt_version or "")
    if not match:
        raise InvalidVersionError(
            f"The Artifactory version '{rt_version}' is invalid. "
            f"It must be {DEFAULT_VERSION} or match this format: X.X.X"
        )

    major = int(match.group(1))
    if major < MIN_MAJOR_VERSION:
        raise InvalidVersionError(
            f"This tool supports Artifactory {MIN_MAJOR_VERSION} or higher, got '{rt_version}'."
        )
    return major == LEGACY_MAJOR_VERSION


@dataclass(frozen=True)
class InstallTarget:
    home_directory: str
    version: str
    is_legacy_major: bool

    @classmethod
    def create(cls, home_directory: str, rt_version: str) -> "InstallTarget":
        is_legacy = is_legacy_version(rt_version)
        logger.debug(
            f"Install target: version={rt_version}, legacy={is_legacy}, home={home_directory}"
        )
        return cls(
            home_directory=home_directory,
            version=rt_version,
            is_legacy_major=is_legacy,
        )
