"""S3 client wrapper and its authenticated factory."""

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError
from structlog import get_logger

from src.aws.client_factory import get_boto3_client_kwargs
from src.aws.credentials import resolve_credentials_with_account
from src.aws.exceptions import ConfigurationError, CredentialConfigError
from src.clients.qontract_client import QontractClient
from src.clients.vault_client import VaultClient
from src.config.settings import Settings

logger = get_logger(__name__)


class S3Client:
    """Thin wrapper around a boto3 S3 client, easy to replace in tests.

    Each method forwards boto3 keyword parameters (``Bucket``, ``Key``, ...)
    and returns the boto3 response unchanged; botocore errors propagate.
    """

    def __init__(self, s3_client: Any):
        self.s3_client = s3_client

    def get_object(self, **params: Any) -> dict[str, Any]:
        return self.s3_client.get_object(**params)

    def head_object(self, **params: Any) -> dict[str, Any]:
        return self.s3_client.head_object(**params)

    def put_object(self, **params: Any) -> dict[str, Any]:
        return self.s3_client.put_object(**params)

    def delete_object(self, **params: Any) -> dict[str, Any]:
        return self.s3_client.delete_object(**params)


def new_client(
    vault_client: Optional[VaultClient],
    account_name: Optional[str] = None,
    settings: Optional[Settings] = None,
    qontract_client: Optional[QontractClient] = None,
    timeout: Optional[float] = None,
) -> S3Client:
    """Build an S3 client for ``account_name`` with static credentials.

    Credentials come from the environment or from the account's Vault
    automation token. The region is AWS_REGION, or the account's default
    region when AWS_REGION is unset.

    Args:
        vault_client: Secret store client
        account_name: app-interface AWS account name; falls back to
            APP_INTERFACE_STATE_BUCKET_ACCOUNT
        settings: Configuration; a fresh Settings() is loaded when omitted
        qontract_client: GraphQL client; built from ``settings`` when omitted
        timeout: Deadline in seconds for the account query and the secret read

    Returns:
        Configured S3Client

    Raises:
        S3BootstrapError: If credentials or region cannot be resolved or
            the boto3 client cannot be built
        VaultClientError: If the automation token cannot be read
    """
    cfg = settings or Settings()
    client = qontract_client or QontractClient.from_settings(cfg.qontract)

    credentials, account = resolve_credentials_with_account(
        vault_client,
        account_name=account_name,
        qontract_client=client,
        timeout=timeout,
    )

    region = cfg.region_or(account.default_region if account else None)
    if not region:
        logger.error("No AWS region configured", account=account_name)
        raise ConfigurationError("No AWS region configured; set AWS_REGION")

    try:
        s3 = boto3.client("s3", **get_boto3_client_kwargs(credentials, region))
    except BotoCoreError as e:
        logger.error("Error creating AWS configuration", region=region, error=str(e))
        raise CredentialConfigError(f"Error creating AWS configuration: {e}") from e

    logger.info("S3 client created", region=region, account=account.name if account else None)
    return S3Client(s3)
