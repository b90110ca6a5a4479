from unittest.mock import MagicMock

import pytest
import requests

from local_rt_setup.core.post_start import (
    enable_archive_index,
    enable_archive_index_in_document,
    set_custom_base_url,
)
from local_rt_setup.error import (
    ConfigurationError,
    InternetConnectivityError,
    ProtocolError,
)

CONFIG_XML = (
    "<config><indexer><archiveIndexEnabled>false</archiveIndexEnabled></indexer>"
    "<urlBase>x</urlBase></config>"
)


@pytest.fixture
def client():
    mock_client = MagicMock()
    mock_client.artifactory_url = "http://localhost:8081/artifactory/"
    return mock_client


# --- enable_archive_index_in_document ---


def test_enable_archive_index_in_document():
    result = enable_archive_index_in_document(CONFIG_XML)
    assert "<archiveIndexEnabled>true</archiveIndexEnabled>" in result
    assert "<archiveIndexEnabled>false</archiveIndexEnabled>" not in result
    assert result.replace("true", "false") == CONFIG_XML


def test_enable_archive_index_in_document_missing_flag():
    document = "<config><archiveIndexEnabled>true</archiveIndexEnabled></config>"
    with pytest.raises(ConfigurationError, match="does not exist"):
        enable_archive_index_in_document(document)


# --- set_custom_base_url ---


@pytest.mark.parametrize("status", [200, 500])
def test_set_custom_base_url_accepts_200_and_500(client, status):
    client.set_base_url.return_value = status
    client.ping.return_value = 200

    set_custom_base_url(client)

    client.set_base_url.assert_called_once_with("http://localhost:8081/artifactory/")
    client.ping.assert_called_once_with()


@pytest.mark.parametrize("status", [400, 401, 502, 503])
def test_set_custom_base_url_rejects_other_statuses(client, status):
    client.set_base_url.return_value = status

    with pytest.raises(ConfigurationError, match=str(status)):
        set_custom_base_url(client)
    client.ping.assert_not_called()


def test_set_custom_base_url_ping_fails(client):
    client.set_base_url.return_value = 500
    client.ping.return_value = 503

    with pytest.raises(ConfigurationError, match="after setting custom URL base"):
        set_custom_base_url(client)


def test_set_custom_base_url_transport_error(client):
    client.set_base_url.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(InternetConnectivityError):
        set_custom_base_url(client)


# --- enable_archive_index ---


def test_enable_archive_index_posts_modified_document(client):
    client.get_configuration.return_value = (200, CONFIG_XML)
    client.post_configuration.return_value = (200, "Reload of new configuration succeeded")

    enable_archive_index(client)

    posted = client.post_configuration.call_args[0][0]
    assert "<archiveIndexEnabled>true</archiveIndexEnabled>" in posted


def test_enable_archive_index_missing_flag_posts_nothing(client):
    client.get_configuration.return_value = (200, "<config></config>")

    with pytest.raises(ConfigurationError):
        enable_archive_index(client)
    client.post_configuration.assert_not_called()


def test_enable_archive_index_get_failure(client):
    client.get_configuration.return_value = (403, "")
    with pytest.raises(ConfigurationError, match="GETing"):
        enable_archive_index(client)


def test_enable_archive_index_empty_document(client):
    client.get_configuration.return_value = (200, "")
    with pytest.raises(ProtocolError):
        enable_archive_index(client)


def test_enable_archive_index_post_failure(client):
    client.get_configuration.return_value = (200, CONFIG_XML)
    client.post_configuration.return_value = (400, "bad")
    with pytest.raises(ConfigurationError, match="POSTing"):
        enable_archive_index(client)
