import io
import json
import logging
import os
import sys
import tarfile

import pytest

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from local_rt_setup.core.layout import LEGACY_LAYOUT, MODERN_LAYOUT


class FakeResponse:
    """Stand-in for `requests.Response`, usable as a context manager."""

    def __init__(self, status_code=200, text="", headers=None, content=b"", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}
        self.content = content
        self.reason = reason
        self.closed = False

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def json(self):
        return json.loads(self.text)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the developer's own JFrog variables out of every test."""
    for var in ("JFROG_HOME", "RTLIC", "GITHUB_ENV"):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("local_rt_setup")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def modern_layout():
    return MODERN_LAYOUT


@pytest.fixture
def legacy_layout():
    return LEGACY_LAYOUT


@pytest.fixture
def modern_install(tmp_path):
    """A home directory holding a renamed, modern-layout installation."""
    home = tmp_path / "jfrog_home"
    bin_dir = home / "artifactory" / "app" / "bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "artifactoryCommon.sh").write_text(
        'os="${OS_NAME,,}"\nlevel="${LEVEL,,}"\n'
    )
    (home / "artifactory" / "var" / "etc" / "artifactory").mkdir(parents=True)
    return home


@pytest.fixture
def make_tar_gz():
    """Builds an in-memory .tar.gz archive from a {path: content} mapping."""

    def _make(files):
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            for name, content in files.items():
                data = content.encode("utf-8")
                info = tarfile.TarInfo(name)
                info.size = len(data)
                info.mode = 0o755
                tar.addfile(info, io.BytesIO(data))
        return buffer.getvalue()

    return _make


CONFIG_XML = (
    "<config><indexer><archiveIndexEnabled>false</archiveIndexEnabled></indexer></config>"
)


class FakeArtifactorySession:
    """Routes `requests.Session.request` calls to canned Artifactory answers.

    `ping_results` is consumed one item per ping; an exception instance is
    raised instead of answered.
    """

    def __init__(self, ping_results, base_url_status=500, admin_token="admin-token"):
        self.headers = {}
        self.calls = []
        self.posted_configuration = None
        self.bearer_tokens = []
        self._ping_results = list(ping_results)
        self._base_url_status = base_url_status
        self._admin_token = admin_token

    def request(self, method, url, **kwargs):
        self.calls.append((method, url))
        if url.endswith("api/system/ping"):
            result = self._ping_results.pop(0)
            if isinstance(result, Exception):
                raise result
            return FakeResponse(status_code=result, text="OK")
        if url.endswith("api/system/configuration/baseUrl"):
            return FakeResponse(status_code=self._base_url_status)
        if url.endswith("api/system/configuration"):
            if method == "GET":
                return FakeResponse(status_code=200, text=CONFIG_XML)
            self.posted_configuration = kwargs["data"].decode("utf-8")
            return FakeResponse(status_code=200, text="Reload of new configuration succeeded")
        if url.endswith("api/v1/tokens"):
            self.bearer_tokens.append(kwargs["headers"]["Authorization"])
            body = {"access_token": self._admin_token, "audience": "*@*", "refreshable": True}
            return FakeResponse(status_code=200, text=json.dumps(body))
        return FakeResponse(status_code=404)

    def close(self):
        pass

    def ping_count(self):
        return sum(1 for _, url in self.calls if url.endswith("api/system/ping"))


@pytest.fixture
def fake_session_factory():
    return FakeArtifactorySession


@pytest.fixture
def modern_archive(make_tar_gz):
    return make_tar_gz(
        {
            "artifactory-pro-7.71.3/app/bin/artifactoryctl": "#!/bin/sh\n",
            "artifactory-pro-7.71.3/app/bin/artifactoryCommon.sh": 'x="${Y,,}"\n',
            "artifactory-pro-7.71.3/var/etc/artifactory/.keep": "",
        }
    )


@pytest.fixture
def token_writing_sleep():
    """A sleep stand-in that writes the bootstrap token on its Nth call."""

    def _make(token_path, on_call):
        calls = []

        def sleep(seconds):
            calls.append(seconds)
            if len(calls) == on_call:
                os.makedirs(os.path.dirname(token_path), exist_ok=True)
                with open(token_path, "w", encoding="utf-8") as f:
                    json.dump({"token": "jfac-token"}, f)

        sleep.calls = calls
        return sleep

    return _make
