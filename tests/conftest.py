from unittest.mock import MagicMock, Mock

import httpx
import pytest

from src.aws.accounts import AccountRecord, AutomationToken


MANAGED_ENV_VARS = [
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
    "AWS_REGION",
    "AWS_PROFILE",
    "APP_INTERFACE_STATE_BUCKET_ACCOUNT",
    "VAULT_SERVER",
    "VAULT_TOKEN",
    "VAULT_AUTHTYPE",
    "VAULT_ROLE_ID",
    "VAULT_SECRET_ID",
    "QONTRACT_SERVER_URL",
    "QONTRACT_TOKEN",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without credential, region or service variables."""
    for name in MANAGED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def env_credentials(monkeypatch):
    """Direct credential override in the environment."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "env-key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "env-secret")


@pytest.fixture
def account_record():
    """Single app-interface AWS account."""
    return AccountRecord(
        name="app-sre",
        resourcesDefaultRegion="us-east-1",
        automationToken=AutomationToken(path="token", field="all"),
    )


@pytest.fixture
def accounts_response():
    """GraphQL data for one matching account."""
    return {
        "awsaccounts_v1": [
            {
                "name": "app-sre",
                "resourcesDefaultRegion": "us-east-1",
                "automationToken": {
                    "path": "app-sre/creds/terraform/app-sre/config",
                    "field": "all",
                    "version": None,
                    "format": None,
                },
            }
        ]
    }


@pytest.fixture
def failing_vault_client():
    """Vault client that fails on any call."""
    client = Mock()
    client.read_secret = Mock(side_effect=AssertionError("Vault must not be called"))
    return client


@pytest.fixture
def failing_qontract_client():
    """GraphQL client that fails on any call."""
    client = Mock()
    client.query = Mock(side_effect=AssertionError("qontract must not be called"))
    return client


def make_response(status_code, json_body=None, text=None):
    """Build a mock httpx response."""
    response = Mock(spec=httpx.Response)
    response.status_code = status_code
    response.json = Mock(return_value=json_body)
    response.text = text if text is not None else ("" if json_body is None else str(json_body))
    return response


def mock_httpx_client(mock_client_cls, response=None, side_effect=None):
    """Wire ``httpx.Client(...)`` used as a context manager to return ``response``."""
    http = MagicMock()
    for method in ("get", "post"):
        getattr(http, method).return_value = response
        getattr(http, method).side_effect = side_effect
    mock_client_cls.return_value.__enter__.return_value = http
    return http


@pytest.fixture
def http_response():
    """Factory for mock httpx responses."""
    return make_response


@pytest.fixture
def wire_httpx():
    """Factory wiring a patched httpx.Client class to a mock response."""
    return mock_httpx_client
