# local_rt_setup/core/client.py
"""Thin HTTP client for the local Artifactory and Access REST APIs.

Every call returns plain values (status codes and response text) and
consumes the response inside a ``with`` block, so no response body is left
open whatever the outcome. Transport failures are raised as
``requests.exceptions.RequestException`` for callers to classify.
"""

import logging
from typing import Optional, Tuple
from urllib.parse import urljoin

import requests

from local_rt_setup.config.const import user_agent
from local_rt_setup.config.settings import Settings

logger = logging.getLogger(__name__)

PING_PATH = "api/system/ping"
CONFIGURATION_PATH = "api/system/configuration"
BASE_URL_PATH = "api/system/configuration/baseUrl"
TOKENS_PATH = "api/v1/tokens"


class ArtifactoryClient:
    def __init__(
        self,
        artifactory_url: str,
        access_url: str,
        username: str,
        password: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        # urljoin drops the last path segment of a base without a trailing slash.
        self.artifactory_url = artifactory_url.rstrip("/") + "/"
        self.access_url = access_url.rstrip("/") + "/"
        self.timeout = timeout
        self._auth = (username, password)
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    @classmethod
    def from_settings(
        cls, settings: Settings, session: Optional[requests.Session] = None
    ) -> "ArtifactoryClient":
        return cls(
            artifactory_url=settings.get("server.artifactory_url"),
            access_url=settings.get("server.access_url"),
            username=settings.get("server.username"),
            password=settings.get("server.password"),
            timeout=settings.get("http.timeout", 30),
            session=session,
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _request(self, method: str, url: str, **kwargs) -> Tuple[int, str]:
        kwargs.setdefault("auth", self._auth)
        kwargs.setdefault("timeout", self.timeout)
        logger.debug(f"{method} {url}")
        with self._session.request(method, url, **kwargs) as response:
            return response.status_code, response.text

    def ping(self) -> int:
        """Returns the status code of the system ping endpoint."""
        status, _ = self._request("GET", urljoin(self.artifactory_url, PING_PATH))
        return status

    def set_base_url(self, base_url: str) -> int:
        status, _ = self._request(
            "PUT",
            urljoin(self.artifactory_url, BASE_URL_PATH),
            data=base_url.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )
        return status

    def get_configuration(self) -> Tuple[int, str]:
        return self._request("GET", urljoin(self.artifactory_url, CONFIGURATION_PATH))

    def post_configuration(self, configuration: str) -> Tuple[int, str]:
        return self._request(
            "POST",
            urljoin(self.artifactory_url, CONFIGURATION_PATH),
            data=configuration.encode("utf-8"),
            headers={"Content-Type": "application/xml"},
        )

    def create_token(self, bearer_token: str, payload: dict) -> Tuple[int, str]:
        """Requests a token from Access, authenticating with `bearer_token`.

        Returns:
            The status code and the raw response body.
        """
        return self._request(
            "POST",
            urljoin(self.access_url, TOKENS_PATH),
            json=payload,
            headers={"Authorization": f"Bearer {bearer_token}"},
            auth=None,
        )
