"""Shared fixtures: parsed PNX records and a mocked transport."""

from unittest.mock import Mock

import pytest
from lxml import etree

from primo_client.domain.ports import TransportPort
from primo_client.infrastructure.config_manager import ConfigManager
from primo_client.infrastructure.settings import settings
from tests.samples import ENVELOPE_XML, RECORD_WITHOUT_NAMESPACE_XML, RECORD_XML


@pytest.fixture(autouse=True)
def empty_environment_config(monkeypatch):
    """Keep PRIMO_* variables of the host out of client defaults."""
    monkeypatch.setattr(settings, "_config_manager", ConfigManager({"primo": {}}))


@pytest.fixture
def record_element():
    """Parsed namespaced PNX record."""
    return etree.fromstring(RECORD_XML)


@pytest.fixture
def plain_record_element():
    """Parsed PNX record without a namespace."""
    return etree.fromstring(RECORD_WITHOUT_NAMESPACE_XML)


@pytest.fixture
def transport():
    """Transport collaborator returning a single-record envelope."""
    mock = Mock(spec=TransportPort)
    mock.get_record_by_id.return_value = ENVELOPE_XML
    return mock
