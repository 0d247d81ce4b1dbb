"""AWS services package."""

from src.aws.accounts import AccountRecord, AutomationToken, resolve_account
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
    CredentialConfigError,
    S3BootstrapError,
    SecretFormatError,
)
from src.aws.s3_client import S3Client, new_client

__all__ = [
    "AccountRecord",
    "AutomationToken",
    "resolve_account",
    "Credentials",
    "fetch_credentials_from_vault",
    "get_credentials_from_env",
    "guess_account_name",
    "resolve_credentials",
    "S3Client",
    "new_client",
    "S3BootstrapError",
    "ConfigurationError",
    "AccountLookupError",
    "AmbiguousResultError",
    "SecretFormatError",
    "CredentialConfigError",
]
