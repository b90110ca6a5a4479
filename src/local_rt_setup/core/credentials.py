# local_rt_setup/core/credentials.py
"""Obtains an admin access token from a freshly started modern Artifactory.

Access writes a bootstrap token (audience ``jfac@*``) to
``var/etc/access/keys/token.json`` on its own once the marker file created
before the first start is found. That token is only good for asking Access
for a broadly scoped (``*@*``), refreshable admin token.
"""

import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import requests

from local_rt_setup.config.const import ADMIN_TOKEN_AUDIENCE, EXPORTED_TOKEN_ENV
from local_rt_setup.core.client import ArtifactoryClient
from local_rt_setup.core.retry import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_MAX_WAIT_SECONDS,
    run_with_retry,
)
from local_rt_setup.error import (
    CredentialError,
    FileOperationError,
    InternetConnectivityError,
    ProtocolError,
)

logger = logging.getLogger(__name__)

BOOTSTRAP_TOKEN_AUDIENCE = "jfac@*"


@dataclass(frozen=True)
class AccessToken:
    token_value: str = field(repr=False)
    audience: str


def read_bootstrap_token(token_path: str) -> Optional[AccessToken]:
    """Reads the server-generated bootstrap token file.

    Returns:
        The token, or None if the file does not exist yet.

    Raises:
        ProtocolError: If the file is unreadable, not JSON, or its
            ``token`` field is missing or empty.
    """
    if not os.path.exists(token_path):
        logger.info(f"JFAC token file '{token_path}' does not exist yet.")
        return None

    try:
        with open(token_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ProtocolError(f"Failed to read JFAC token file '{token_path}': {e}") from e

    token_value = data.get("token") if isinstance(data, dict) else None
    if not token_value or not isinstance(token_value, str):
        raise ProtocolError(f"JFAC token in '{token_path}' is empty.")

    logger.info("Successfully extracted JFAC token.")
    return AccessToken(token_value=token_value, audience=BOOTSTRAP_TOKEN_AUDIENCE)


def wait_for_bootstrap_token(
    token_path: str,
    interval: int = DEFAULT_INTERVAL_SECONDS,
    max_wait: int = DEFAULT_MAX_WAIT_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> AccessToken:
    """Polls until Access has written the bootstrap token."""
    return run_with_retry(
        lambda: read_bootstrap_token(token_path),
        lambda token: token is not None,
        interval=interval,
        max_wait=max_wait,
        description="waiting for the JFAC token file",
        sleep=sleep,
    )


def exchange_for_admin_token(
    client: ArtifactoryClient, bootstrap_token: AccessToken
) -> AccessToken:
    """Trades the bootstrap token for a refreshable admin token.

    Raises:
        CredentialError: On a non-200 answer, an unparsable body or an empty
            ``access_token``.
        InternetConnectivityError: On transport failure.
    """
    logger.info("Requesting an admin access token...")
    try:
        status, body = client.create_token(
            bootstrap_token.token_value,
            {"audience": ADMIN_TOKEN_AUDIENCE, "refreshable": True},
        )
    except requests.exceptions.RequestException as e:
        raise InternetConnectivityError(f"Failed requesting an admin token: {e}") from e
    if status != 200:
        raise CredentialError(
            f"Failed getting admin token from Artifactory. Response: {status}"
        )

    try:
        data = json.loads(body)
    except ValueError as e:
        raise CredentialError(f"Failed parsing the admin token response: {e}") from e

    token_value = data.get("access_token") if isinstance(data, dict) else None
    if not token_value:
        raise CredentialError("Admin access token is empty.")

    logger.info("Received admin access token.")
    return AccessToken(
        token_value=token_value,
        audience=data.get("audience") or ADMIN_TOKEN_AUDIENCE,
    )


def export_token(token: AccessToken, env_file_path: Optional[str]) -> bool:
    """Appends the token to a GitHub Actions environment file.

    Args:
        token: The admin token.
        env_file_path: Value of ``GITHUB_ENV``; None skips the export.

    Returns:
        True if the token was exported.

    Raises:
        FileOperationError: If the file cannot be written.
    """
    if not env_file_path:
        logger.info(
            "GITHUB_ENV not set, assuming the script is not running on GitHub. Skipping token export..."
        )
        return False

    try:
        with open(
            env_file_path,
            "a",
            encoding="utf-8",
            opener=lambda path, flags: os.open(path, flags, 0o600),
        ) as f:
            f.write(f"{EXPORTED_TOKEN_ENV}={token.token_value}\n")
    except OSError as e:
        raise FileOperationError(
            f"Failed to export the admin token to '{env_file_path}': {e}"
        ) from e

    logger.info(f"Successfully exported the Artifactory admin token as {EXPORTED_TOKEN_ENV}.")
    return True
