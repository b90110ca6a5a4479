from unittest.mock import patch

import pytest
import requests

from local_rt_setup.core.downloader import (
    ArtifactoryDownloader,
    DownloadedArchive,
    build_download_url,
    filename_from_content_disposition,
)
from local_rt_setup.error import (
    DownloadError,
    FileOperationError,
    InternetConnectivityError,
    ProtocolError,
    UnsupportedPlatformError,
)

BASE = "https://releases.jfrog.io/artifactory/artifactory-pro/org/artifactory/pro/jfrog-artifactory-pro"


# --- URL construction ---


@pytest.mark.parametrize(
    "os_type, suffix",
    [
        ("mac", "-darwin.tar.gz"),
        ("windows", "-windows.zip"),
        ("linux", "-linux.tar.gz"),
    ],
)
def test_build_download_url_modern(os_type, suffix):
    url = build_download_url("7.71.3", os_type, is_legacy=False)
    assert url == f"{BASE}/7.71.3/jfrog-artifactory-pro-7.71.3{suffix}"


@pytest.mark.parametrize("os_type", ["mac", "windows", "linux"])
def test_build_download_url_legacy_is_os_agnostic(os_type):
    url = build_download_url("6.23.41", os_type, is_legacy=True)
    assert url == f"{BASE}/6.23.41/jfrog-artifactory-pro-6.23.41.zip"


def test_build_download_url_release_sentinel():
    url = build_download_url("[RELEASE]", "linux", is_legacy=False)
    assert url == f"{BASE}/[RELEASE]/jfrog-artifactory-pro-[RELEASE]-linux.tar.gz"


def test_build_download_url_is_deterministic():
    args = ("7.1.2", "mac", False)
    assert build_download_url(*args) == build_download_url(*args)


def test_build_download_url_unknown_os():
    with pytest.raises(UnsupportedPlatformError):
        build_download_url("7.1.2", "freebsd", is_legacy=False)


# --- Content-Disposition ---


@pytest.mark.parametrize(
    "header, expected",
    [
        ('attachment; filename="jfrog-artifactory-pro-7.71.3-linux.tar.gz"', "jfrog-artifactory-pro-7.71.3-linux.tar.gz"),
        ("attachment; filename=archive.zip", "archive.zip"),
        ('attachment; filename="../../etc/evil.zip"', "evil.zip"),
    ],
)
def test_filename_from_content_disposition(header, expected):
    assert filename_from_content_disposition(header) == expected


@pytest.mark.parametrize("header", [None, "", "attachment"])
def test_filename_from_content_disposition_missing(header):
    with pytest.raises(ProtocolError):
        filename_from_content_disposition(header)


# --- download ---


def _downloader(tmp_path, **kwargs):
    params = dict(download_dir=str(tmp_path), rt_version="7.71.3", os_type="linux", is_legacy=False)
    params.update(kwargs)
    return ArtifactoryDownloader(**params)


@patch("local_rt_setup.core.downloader.requests.get")
def test_download_successful(mock_get, tmp_path, fake_response):
    mock_get.return_value = fake_response(
        headers={"Content-Disposition": 'attachment; filename="rt.tar.gz"'},
        content=b"mock archive data",
    )

    archive = _downloader(tmp_path).download()

    expected_url = f"{BASE}/7.71.3/jfrog-artifactory-pro-7.71.3-linux.tar.gz"
    assert archive == DownloadedArchive(str(tmp_path / "rt.tar.gz"), expected_url)
    assert (tmp_path / "rt.tar.gz").read_bytes() == b"mock archive data"
    mock_get.assert_called_once_with(
        expected_url,
        headers={"User-Agent": "jfrog/local-rt-setup"},
        stream=True,
        timeout=30,
    )
    assert mock_get.return_value.closed


@patch("local_rt_setup.core.downloader.requests.get")
def test_download_non_200_status(mock_get, tmp_path, fake_response):
    response = fake_response(status_code=404, reason="Not Found")
    mock_get.return_value = response

    with pytest.raises(DownloadError) as exc_info:
        _downloader(tmp_path).download()

    assert exc_info.value.status_code == 404
    assert response.closed
    assert list(tmp_path.iterdir()) == []


@patch("local_rt_setup.core.downloader.requests.get")
def test_download_without_content_disposition(mock_get, tmp_path, fake_response):
    response = fake_response(content=b"data")
    mock_get.return_value = response

    with pytest.raises(ProtocolError, match="Content-Disposition"):
        _downloader(tmp_path).download()
    assert response.closed


@patch("local_rt_setup.core.downloader.requests.get")
def test_download_transport_error(mock_get, tmp_path):
    mock_get.side_effect = requests.exceptions.ConnectionError("Mocked connection error")

    with pytest.raises(InternetConnectivityError, match="Failed to download Artifactory"):
        _downloader(tmp_path).download()


@patch("local_rt_setup.core.downloader.requests.get")
def test_download_write_error(mock_get, tmp_path, fake_response):
    response = fake_response(
        headers={"Content-Disposition": "attachment; filename=rt.tar.gz"},
        content=b"data",
    )
    mock_get.return_value = response

    with patch("builtins.open", side_effect=OSError("Mocked file write error")):
        with pytest.raises(FileOperationError, match="Failed to write archive file"):
            _downloader(tmp_path).download()
    assert response.closed
