# local_rt_setup/core/downloader.py
"""Resolves and downloads Artifactory Pro release archives.

The releases repository serves every version under a predictable path, but
``[RELEASE]`` is resolved server-side, so the real archive name is only known
from the ``Content-Disposition`` header of the response.
"""

import logging
import os
from dataclasses import dataclass
from email.message import Message
from typing import Optional

import requests

from local_rt_setup.config.const import user_agent
from local_rt_setup.config.settings import RELEASES_BASE_URL
from local_rt_setup.core.system.base import LINUX, MAC, WINDOWS
from local_rt_setup.error import (
    DownloadError,
    FileOperationError,
    InternetConnectivityError,
    ProtocolError,
    UnsupportedPlatformError,
)

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = {
    MAC: "-darwin.tar.gz",
    WINDOWS: "-windows.zip",
    LINUX: "-linux.tar.gz",
}
LEGACY_ARCHIVE_SUFFIX = ".zip"
CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class DownloadedArchive:
    local_path: str
    source_url: str


def build_download_url(
    rt_version: str,
    os_type: str,
    is_legacy: bool,
    base_url: str = RELEASES_BASE_URL,
) -> str:
    """Builds the release URL of an archive.

    Args:
        rt_version: ``[RELEASE]`` or an ``X.Y.Z`` version.
        os_type: "mac", "windows" or "linux". Ignored for legacy versions,
            which ship one archive for every platform.
        is_legacy: Whether `rt_version` is a major 6 version.
        base_url: Root of the jfrog-artifactory-pro release folders.

    Raises:
        UnsupportedPlatformError: If `os_type` is unknown (modern versions).
    """
    if is_legacy:
        suffix = LEGACY_ARCHIVE_SUFFIX
    else:
        try:
            suffix = ARCHIVE_SUFFIXES[os_type]
        except KeyError:
            raise UnsupportedPlatformError(os_type) from None
    return (
        f"{base_url.rstrip('/')}/{rt_version}/jfrog-artifactory-pro-{rt_version}{suffix}"
    )


def filename_from_content_disposition(header_value: Optional[str]) -> str:
    """Extracts the file name from a Content-Disposition header value.

    Only the base name is kept so the archive cannot escape the
    destination directory.

    Raises:
        ProtocolError: If the header is missing or names no file.
    """
    if not header_value:
        raise ProtocolError(
            "The releases response has no Content-Disposition header; cannot determine the archive name."
        )
    msg = Message()
    msg["Content-Disposition"] = header_value
    filename = msg.get_filename()
    if filename:
        filename = os.path.basename(filename.replace("\\", "/"))
    if not filename:
        raise ProtocolError(
            f"No file name in Content-Disposition header: '{header_value}'"
        )
    return filename


class ArtifactoryDownloader:
    """Downloads the release archive for one version and platform."""

    def __init__(
        self,
        download_dir: str,
        rt_version: str,
        os_type: str,
        is_legacy: bool,
        base_url: str = RELEASES_BASE_URL,
        timeout: int = 30,
    ):
        self.download_dir = download_dir
        self.rt_version = rt_version
        self.os_type = os_type
        self.is_legacy = is_legacy
        self.base_url = base_url
        self.timeout = timeout

    def get_download_url(self) -> str:
        return build_download_url(
            self.rt_version, self.os_type, self.is_legacy, self.base_url
        )

    def download(self) -> DownloadedArchive:
        """Streams the archive into `download_dir`.

        Returns:
            The downloaded archive.

        Raises:
            InternetConnectivityError: If the request fails in transport.
            DownloadError: If the response status is not 200.
            ProtocolError: If the response does not name the archive.
            FileOperationError: If writing the archive fails.
        """
        url = self.get_download_url()
        logger.info(f"Downloading Artifactory from URL: {url}")

        try:
            with requests.get(
                url,
                headers={"User-Agent": user_agent},
                stream=True,
                timeout=self.timeout,
            ) as response:
                if response.status_code != 200:
                    raise DownloadError(response.status_code, response.reason)

                filename = filename_from_content_disposition(
                    response.headers.get("Content-Disposition")
                )
                logger.info(f"Extracted archive name from response: {filename}")
                archive_path = os.path.join(self.download_dir, filename)
                self._write_body(response, archive_path)
        except requests.exceptions.RequestException as e:
            raise InternetConnectivityError(
                f"Failed to download Artifactory from {url}: {e}"
            ) from e

        logger.info(f"Downloaded archive to {archive_path}")
        return DownloadedArchive(local_path=archive_path, source_url=url)

    @staticmethod
    def _write_body(response: requests.Response, archive_path: str) -> None:
        try:
            with open(archive_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except OSError as e:
            raise FileOperationError(
                f"Failed to write archive file '{archive_path}': {e}"
            ) from e
