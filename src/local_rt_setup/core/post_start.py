# local_rt_setup/core/post_start.py
"""Configuration that can only be applied through the running server's API."""

import logging

import requests

from local_rt_setup.core.client import ArtifactoryClient
from local_rt_setup.error import (
    ConfigurationError,
    InternetConnectivityError,
    ProtocolError,
)

logger = logging.getLogger(__name__)

# Artifactory may answer 500 to a base URL change while still applying it.
BASE_URL_ACCEPTED_STATUSES = (200, 500)


def archive_index_element(enabled: bool) -> str:
    return f"<archiveIndexEnabled>{str(enabled).lower()}</archiveIndexEnabled>"


def enable_archive_index_in_document(configuration: str) -> str:
    """Flips the archive index flag of a configuration document to enabled.

    The document must contain the literal
    ``<archiveIndexEnabled>false</archiveIndexEnabled>``; every occurrence
    is replaced.

    Raises:
        ConfigurationError: If that literal is absent.
    """
    disabled = archive_index_element(False)
    if disabled not in configuration:
        raise ConfigurationError(
            "Failed setting the archive index property - "
            f"'{disabled}' does not exist in the configuration."
        )
    return configuration.replace(disabled, archive_index_element(True))


def set_custom_base_url(client: ArtifactoryClient) -> None:
    """Sets the custom URL base to the local Artifactory URL.

    A custom URL base is required before federated repositories can be
    created.

    Raises:
        ConfigurationError: If the server rejects the change or does not
            answer a ping afterwards.
        InternetConnectivityError: On transport failure.
    """
    logger.info("Setting custom URL base...")
    try:
        status = client.set_base_url(client.artifactory_url)
        if status not in BASE_URL_ACCEPTED_STATUSES:
            raise ConfigurationError(f"Failed setting custom URL base. Response: {status}")

        ping_status = client.ping()
    except requests.exceptions.RequestException as e:
        raise InternetConnectivityError(f"Failed setting custom URL base: {e}") from e

    if ping_status != 200:
        raise ConfigurationError(
            f"Failed reaching Artifactory after setting custom URL base. Response: {ping_status}"
        )
    logger.info("Done setting custom URL base.")


def enable_archive_index(client: ArtifactoryClient) -> None:
    """Enables archive indexing through the full system configuration.

    Raises:
        ConfigurationError: On a non-200 answer or a document without the
            expected flag.
        ProtocolError: If the configuration document is empty.
        InternetConnectivityError: On transport failure.
    """
    logger.info("Enabling archive index...")
    try:
        logger.info("GETing Artifactory configuration...")
        status, configuration = client.get_configuration()
        if status != 200:
            raise ConfigurationError(
                f"Failed GETing Artifactory configuration. Response: {status}"
            )
        if not configuration:
            raise ProtocolError("Received an empty Artifactory configuration.")

        updated = enable_archive_index_in_document(configuration)

        logger.info("POSTing Artifactory configuration...")
        status, _ = client.post_configuration(updated)
        if status != 200:
            raise ConfigurationError(
                f"Failed POSTing Artifactory configuration. Response: {status}"
            )
    except requests.exceptions.RequestException as e:
        raise InternetConnectivityError(f"Failed enabling archive index: {e}") from e
    logger.info("Archive index enabled.")
