# local_rt_setup/core/installer.py
"""Unpacks a downloaded archive into the JFrog home and prepares the tree.

Release archives contain a single versioned top-level directory
(``artifactory-pro-<version>``). It is renamed to ``artifactory`` so every
later step can use fixed paths.
"""

import logging
import os
import tarfile
import zipfile

from local_rt_setup.config.const import EXTRACTED_DIR_PREFIX, INSTALL_DIR_NAME
from local_rt_setup.core.downloader import DownloadedArchive
from local_rt_setup.core.layout import ServerLayout
from local_rt_setup.core.system import base as system_base
from local_rt_setup.error import FileOperationError, InstallationError

logger = logging.getLogger(__name__)

# bash 3 (still the default on macOS) does not understand the ${var,,}
# lowercase expansion used by the helper script.
BASH3_INCOMPATIBLE_SEQUENCE = b",,"

# Extraction filters exist from 3.10.12, 3.11.4 and 3.12 on.
HAS_EXTRACTION_FILTER = hasattr(tarfile, "data_filter")


def _archive_format(archive_path: str) -> str:
    name = archive_path.lower()
    if name.endswith(".zip"):
        return "zip"
    if name.endswith((".tar.gz", ".tgz")):
        return "tar"
    # Fall back to the file's magic.
    if zipfile.is_zipfile(archive_path):
        return "zip"
    if tarfile.is_tarfile(archive_path):
        return "tar"
    raise InstallationError(f"Unsupported archive format: {archive_path}")


def _extract_zip(archive_path: str, dest_dir: str) -> None:
    with zipfile.ZipFile(archive_path, "r") as zip_ref:
        for member in zip_ref.infolist():
            extracted = zip_ref.extract(member, dest_dir)
            # ZipFile drops unix permission bits; start scripts need them.
            unix_mode = (member.external_attr >> 16) & 0o777
            if unix_mode and not member.is_dir():
                os.chmod(extracted, unix_mode)


def _check_tar_members(tar_ref: tarfile.TarFile, dest_dir: str) -> None:
    root = os.path.realpath(dest_dir)
    for member in tar_ref.getmembers():
        target = os.path.realpath(os.path.join(root, member.name))
        if os.path.commonpath([root, target]) != root:
            raise InstallationError(
                f"Archive member '{member.name}' would be extracted outside '{dest_dir}'"
            )


def _extract_tar(archive_path: str, dest_dir: str) -> None:
    with tarfile.open(archive_path, "r:*") as tar_ref:
        if HAS_EXTRACTION_FILTER:
            tar_ref.extractall(dest_dir, filter="data")
        else:
            _check_tar_members(tar_ref, dest_dir)
            tar_ref.extractall(dest_dir)


def extract_archive(archive_path: str, dest_dir: str) -> None:
    """Extracts a zip or gzip-tar archive, keeping its directory structure.

    Raises:
        InstallationError: If the archive is unreadable or of an unknown type.
        FileOperationError: If writing the extracted files fails.
    """
    archive_format = _archive_format(archive_path)
    logger.info(f"Extracting {archive_format} archive '{archive_path}' to '{dest_dir}'...")
    try:
        if archive_format == "zip":
            _extract_zip(archive_path, dest_dir)
        else:
            _extract_tar(archive_path, dest_dir)
    except (zipfile.BadZipFile, tarfile.TarError) as e:
        raise InstallationError(
            f"Failed to extract archive '{archive_path}': {e}"
        ) from e
    except OSError as e:
        raise FileOperationError(
            f"Failed to extract archive '{archive_path}': {e}"
        ) from e
    logger.info("Extraction complete.")


def rename_extracted_dir(home: str) -> str:
    """Renames the extracted ``artifactory-pro-*`` directory to ``artifactory``.

    Returns:
        The path of the renamed directory.

    Raises:
        InstallationError: If no matching directory exists.
        FileOperationError: If listing or renaming fails.
    """
    try:
        entries = sorted(os.listdir(home))
    except OSError as e:
        raise FileOperationError(f"Failed to list '{home}': {e}") from e

    for entry in entries:
        source = os.path.join(home, entry)
        if entry.startswith(EXTRACTED_DIR_PREFIX) and os.path.isdir(source):
            destination = os.path.join(home, INSTALL_DIR_NAME)
            logger.debug(f"Renaming '{source}' to '{destination}'")
            try:
                os.rename(source, destination)
            except OSError as e:
                raise FileOperationError(
                    f"Failed to rename '{source}' to '{destination}': {e}"
                ) from e
            return destination

    raise InstallationError(
        f"Artifactory dir (prefix '{EXTRACTED_DIR_PREFIX}') was not found after extracting into '{home}'."
    )


def fix_bash3_compatibility(script_path: str) -> None:
    """Strips every ``,,`` from the Artifactory common shell helper.

    Raises:
        FileOperationError: If the script cannot be read or written.
    """
    logger.info(f"Patching '{script_path}' for bash 3 compatibility")
    system_base.replace_in_file(script_path, BASH3_INCOMPATIBLE_SEQUENCE, b"")


def apply_platform_fixups(home: str, layout: ServerLayout, os_type: str) -> None:
    """Fixes what macOS extraction of a modern archive gets wrong.

    Nothing is done for other platforms or for the legacy layout.
    """
    if os_type != system_base.MAC or layout.is_legacy:
        return
    system_base.set_permissions_recursive(layout.resolve(home, layout.var_dir))
    fix_bash3_compatibility(layout.resolve(home, layout.common_script_path))


def install_archive(
    archive: DownloadedArchive, home: str, layout: ServerLayout, os_type: str
) -> str:
    """Extracts `archive` into `home` and normalizes the result.

    The archive file is deleted once it has been extracted.

    Returns:
        The installation directory.
    """
    extract_archive(archive.local_path, home)
    try:
        os.remove(archive.local_path)
    except OSError as e:
        raise FileOperationError(
            f"Failed to remove archive '{archive.local_path}': {e}"
        ) from e

    install_dir = rename_extracted_dir(home)
    apply_platform_fixups(home, layout, os_type)
    return install_dir
