"""Shared fixtures for Datadog MCP tests."""

import json

import pytest

from datadog_mcp.config import DatadogConfig

API = "https://api.datadoghq.com"


@pytest.fixture
def config():
    """Config with both keys on the default site."""
    return DatadogConfig(api_key="test-api-key", app_key="test-app-key")


@pytest.fixture
def missing_app_key():
    return DatadogConfig(api_key="test-api-key", app_key="")


@pytest.fixture
def sent_json():
    """Decode the JSON body of the last request a respx route received."""
    def _decode(route):
        return json.loads(route.calls.last.request.content)
    return _decode
