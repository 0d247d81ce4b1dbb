"""Tests for environment and Vault credential resolution."""

from unittest.mock import Mock, patch

import pytest
from pydantic import ValidationError

from src.aws.accounts import AccountRecord, AutomationToken
from src.aws.credentials import (
    Credentials,
    fetch_credentials_from_vault,
    get_credentials_from_env,
    guess_account_name,
    resolve_credentials,
)
from src.aws.exceptions import (
    AccountLookupError,
    AmbiguousResultError,
    ConfigurationError,
    SecretFormatError,
)
from src.clients.qontract_client import QontractClientError
from src.clients.vault_client import VaultClient, VaultNotFoundError, VaultSecret


def _vault_with_payload(payload):
    client = Mock()
    client.read_secret = Mock(return_value=VaultSecret(data=payload))
    return client


class TestGetCredentialsFromEnv:
    """Tests for get_credentials_from_env."""

    def test_requires_both_variables(self, monkeypatch):
        assert get_credentials_from_env() is None

        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "foo")
        assert get_credentials_from_env() is None

        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "bar")
        credentials = get_credentials_from_env()
        assert isinstance(credentials, Credentials)
        assert credentials.access_key_id == "foo"
        assert credentials.secret_access_key == "bar"

    def test_secret_only_is_absent(self, monkeypatch):
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "bar")
        assert get_credentials_from_env() is None

    def test_empty_value_is_absent(self, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "foo")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "")
        assert get_credentials_from_env() is None

    def test_whitespace_value_is_absent(self, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "foo")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "   ")
        assert get_credentials_from_env() is None

    def test_values_returned_unstripped(self, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", " foo")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "bar ")

        credentials = get_credentials_from_env()

        assert credentials.access_key_id == " foo"
        assert credentials.secret_access_key == "bar "

    def test_credentials_are_immutable(self, env_credentials):
        credentials = get_credentials_from_env()
        with pytest.raises(ValidationError):
            credentials.access_key_id = "other"

    def test_secret_not_in_repr(self, env_credentials):
        assert "env-secret" not in repr(get_credentials_from_env())


class TestGuessAccountName:
    """Tests for guess_account_name."""

    def test_unset_is_empty(self):
        assert guess_account_name() == ""

    def test_returns_exact_value(self, monkeypatch):
        monkeypatch.setenv("APP_INTERFACE_STATE_BUCKET_ACCOUNT", "foo")
        assert guess_account_name() == "foo"


class TestFetchCredentialsFromVault:
    """Tests for fetch_credentials_from_vault."""

    def test_too_many_accounts(self, account_record):
        with pytest.raises(AmbiguousResultError):
            fetch_credentials_from_vault(None, [account_record, account_record])

    def test_no_accounts(self, failing_vault_client):
        with pytest.raises(AmbiguousResultError):
            fetch_credentials_from_vault(failing_vault_client, [])
        failing_vault_client.read_secret.assert_not_called()

    def test_reads_automation_token_through_hvac(self, account_record):
        """Secret store returning both fields yields matching credentials."""
        vault = VaultClient(server="http://vault.local", token="token")

        with patch("src.clients.vault_client.hvac.Client") as mock_hvac_cls:
            mock_hvac_cls.return_value.read.return_value = {
                "data": {"aws_access_key_id": "foo", "aws_secret_access_key": "bar"}
            }
            credentials = fetch_credentials_from_vault(vault, [account_record])

        assert credentials == Credentials(access_key_id="foo", secret_access_key="bar")
        mock_hvac_cls.assert_called_once_with(url="http://vault.local", token="token", timeout=30)
        mock_hvac_cls.return_value.read.assert_called_once_with("token")

    def test_ignores_extra_fields(self, account_record):
        vault = _vault_with_payload(
            {"aws_access_key_id": "foo", "aws_secret_access_key": "bar", "console_url": "x"}
        )
        credentials = fetch_credentials_from_vault(vault, [account_record], timeout=5)

        assert credentials.access_key_id == "foo"
        vault.read_secret.assert_called_once_with("token", timeout=5)

    def test_missing_secret_field(self, account_record):
        vault = _vault_with_payload({"aws_access_key_id": "foo"})

        with pytest.raises(SecretFormatError) as exc_info:
            fetch_credentials_from_vault(vault, [account_record])
        assert "aws_secret_access_key" in str(exc_info.value)

    def test_non_string_field(self, account_record):
        vault = _vault_with_payload({"aws_access_key_id": 1234, "aws_secret_access_key": "bar"})

        with pytest.raises(SecretFormatError):
            fetch_credentials_from_vault(vault, [account_record])

    def test_vault_errors_propagate(self, account_record):
        vault = Mock()
        vault.read_secret = Mock(side_effect=VaultNotFoundError("Secret not found: token"))

        with pytest.raises(VaultNotFoundError):
            fetch_credentials_from_vault(vault, [account_record])

    def test_missing_vault_client(self, account_record):
        with pytest.raises(ConfigurationError):
            fetch_credentials_from_vault(None, [account_record])


class TestResolveCredentials:
    """Tests for resolve_credentials precedence and fallbacks."""

    def test_environment_short_circuits_remote_calls(
        self, env_credentials, failing_vault_client, failing_qontract_client
    ):
        credentials = resolve_credentials(
            failing_vault_client,
            account_name="app-sre",
            qontract_client=failing_qontract_client,
        )

        assert credentials == Credentials(access_key_id="env-key", secret_access_key="env-secret")
        failing_vault_client.read_secret.assert_not_called()
        failing_qontract_client.query.assert_not_called()

    def test_no_account_name(self, failing_vault_client, failing_qontract_client):
        with pytest.raises(ConfigurationError):
            resolve_credentials(failing_vault_client, qontract_client=failing_qontract_client)

    def test_uses_guessed_account_name(self, monkeypatch, accounts_response):
        monkeypatch.setenv("APP_INTERFACE_STATE_BUCKET_ACCOUNT", "app-sre")
        qontract = Mock()
        qontract.query = Mock(return_value=accounts_response)
        vault = _vault_with_payload({"aws_access_key_id": "foo", "aws_secret_access_key": "bar"})

        credentials = resolve_credentials(vault, qontract_client=qontract, timeout=10)

        assert credentials == Credentials(access_key_id="foo", secret_access_key="bar")
        assert qontract.query.call_args.kwargs["variables"] == {"name": "app-sre"}
        assert qontract.query.call_args.kwargs["timeout"] == 10
        vault.read_secret.assert_called_once_with(
            "app-sre/creds/terraform/app-sre/config", timeout=10
        )

    def test_explicit_name_wins_over_guess(self, monkeypatch, accounts_response):
        monkeypatch.setenv("APP_INTERFACE_STATE_BUCKET_ACCOUNT", "other")
        qontract = Mock()
        qontract.query = Mock(return_value=accounts_response)
        vault = _vault_with_payload({"aws_access_key_id": "foo", "aws_secret_access_key": "bar"})

        resolve_credentials(vault, account_name="app-sre", qontract_client=qontract)

        assert qontract.query.call_args.kwargs["variables"] == {"name": "app-sre"}

    def test_two_accounts_fail_before_vault(self, accounts_response, failing_vault_client):
        accounts_response["awsaccounts_v1"].append(dict(accounts_response["awsaccounts_v1"][0]))
        qontract = Mock()
        qontract.query = Mock(return_value=accounts_response)

        with pytest.raises(AmbiguousResultError):
            resolve_credentials(failing_vault_client, account_name="app-sre", qontract_client=qontract)
        failing_vault_client.read_secret.assert_not_called()

    def test_missing_field_returns_no_credentials(self, accounts_response):
        qontract = Mock()
        qontract.query = Mock(return_value=accounts_response)
        vault = _vault_with_payload({"aws_access_key_id": "foo"})

        with pytest.raises(SecretFormatError):
            resolve_credentials(vault, account_name="app-sre", qontract_client=qontract)

    def test_lookup_failure_propagates(self, failing_vault_client):
        qontract = Mock()
        qontract.query = Mock(side_effect=QontractClientError("connection refused"))

        with pytest.raises(AccountLookupError):
            resolve_credentials(failing_vault_client, account_name="app-sre", qontract_client=qontract)
        failing_vault_client.read_secret.assert_not_called()

    def test_missing_vault_client(self, failing_qontract_client):
        with pytest.raises(ConfigurationError):
            resolve_credentials(None, account_name="app-sre", qontract_client=failing_qontract_client)
        failing_qontract_client.query.assert_not_called()


def test_account_record_accepts_field_names():
    record = AccountRecord(
        name="app-sre",
        default_region="eu-west-1",
        automation_token=AutomationToken(path="p"),
    )
    assert record.default_region == "eu-west-1"
    assert record.automation_token.path == "p"
