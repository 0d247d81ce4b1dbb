"""AWS credential resolution: environment first, then the account's Vault automation token.

If AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY are set, use them and make no
remote calls; otherwise look the account up in app-interface and read its
automation token from Vault.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError
from structlog import get_logger

from src.aws.accounts import AccountRecord, resolve_account
from src.aws.exceptions import (
    AmbiguousResultError,
    ConfigurationError,
    SecretFormatError,
)
from src.clients.qontract_client import QontractClient
from src.clients.vault_client import VaultClient

logger = get_logger(__name__)

ACCOUNT_NAME_ENV = "APP_INTERFACE_STATE_BUCKET_ACCOUNT"


class Credentials(BaseModel):
    """Static AWS access key pair."""

    access_key_id: str = Field(min_length=1)
    secret_access_key: str = Field(min_length=1, repr=False)

    model_config = ConfigDict(frozen=True)


class AutomationTokenSecret(BaseModel):
    """Key-value payload stored at an account's automation token path."""

    aws_access_key_id: StrictStr = Field(min_length=1)
    aws_secret_access_key: StrictStr = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")


def get_credentials_from_env() -> Optional[Credentials]:
    """Return credentials from AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY, or None if either is unset or blank."""
    access_key = os.environ.get("AWS_ACCESS_KEY_ID", "")
    secret_key = os.environ.get("AWS_SECRET_ACCESS_KEY", "")
    if not (access_key.strip() and secret_key.strip()):
        return None
    return Credentials(access_key_id=access_key, secret_access_key=secret_key)


def guess_account_name() -> str:
    """Account name from APP_INTERFACE_STATE_BUCKET_ACCOUNT, empty when unset."""
    return os.environ.get(ACCOUNT_NAME_ENV, "")


def fetch_credentials_from_vault(
    vault_client: Optional[VaultClient],
    accounts: list[AccountRecord],
    timeout: Optional[float] = None,
) -> Credentials:
    """Read the automation token of the single account in ``accounts``.

    The account count is checked again here, before Vault is contacted.

    Raises:
        AmbiguousResultError: If ``accounts`` does not hold exactly one account
        ConfigurationError: If ``vault_client`` is None
        SecretFormatError: If a credential field is missing or not a string
        VaultClientError: If the secret cannot be read
    """
    if len(accounts) != 1:
        raise AmbiguousResultError(f"Expected one AWS account, got {len(accounts)}")

    if vault_client is None:
        raise ConfigurationError("No Vault client configured")

    account = accounts[0]
    path = account.automation_token.path
    secret = vault_client.read_secret(path, timeout=timeout)

    try:
        token = AutomationTokenSecret.model_validate(secret.data)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        logger.error(
            "Invalid automation token secret",
            account=account.name,
            path=path,
            fields=fields,
        )
        raise SecretFormatError(
            f"Automation token at {path} is missing or has non-string fields: {', '.join(fields)}"
        ) from None

    return Credentials(
        access_key_id=token.aws_access_key_id,
        secret_access_key=token.aws_secret_access_key,
    )


def resolve_credentials_with_account(
    vault_client: Optional[VaultClient],
    account_name: Optional[str] = None,
    qontract_client: Optional[QontractClient] = None,
    timeout: Optional[float] = None,
) -> tuple[Credentials, Optional[AccountRecord]]:
    """Resolve credentials and return the account record they came from.

    The account is None when the credentials came from the environment.
    """
    credentials = get_credentials_from_env()
    if credentials is not None:
        logger.info("Using AWS credentials from environment")
        return credentials, None

    name = account_name or guess_account_name()
    if not name:
        raise ConfigurationError(
            f"No AWS account name provided and {ACCOUNT_NAME_ENV} is not set"
        )

    if vault_client is None:
        raise ConfigurationError(
            "AWS credentials are not in the environment and no Vault client is configured"
        )

    client = qontract_client or QontractClient.from_settings()
    account = resolve_account(client, name, timeout=timeout)
    credentials = fetch_credentials_from_vault(vault_client, [account], timeout=timeout)
    logger.info("Using AWS credentials from Vault automation token", account=name)
    return credentials, account


def resolve_credentials(
    vault_client: Optional[VaultClient],
    account_name: Optional[str] = None,
    qontract_client: Optional[QontractClient] = None,
    timeout: Optional[float] = None,
) -> Credentials:
    """Resolve AWS credentials from the environment or from Vault.

    Environment credentials take precedence and short-circuit every remote
    call. Otherwise the account (``account_name`` or
    APP_INTERFACE_STATE_BUCKET_ACCOUNT) is looked up and its automation
    token read from Vault.

    Args:
        vault_client: Secret store client
        account_name: app-interface AWS account name
        qontract_client: GraphQL client; built from QONTRACT_* settings when omitted
        timeout: Deadline in seconds applied to the query and the secret read

    Returns:
        Resolved credentials

    Raises:
        ConfigurationError: If no account name can be determined
        AccountLookupError: If the account query fails
        AmbiguousResultError: If the account name does not match exactly one account
        SecretFormatError: If the automation token is malformed
        VaultClientError: If the secret cannot be read
    """
    credentials, _ = resolve_credentials_with_account(
        vault_client,
        account_name=account_name,
        qontract_client=qontract_client,
        timeout=timeout,
    )
    return credentials
