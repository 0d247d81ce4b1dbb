"""Errors raised while bootstrapping an authenticated S3 client."""


class S3BootstrapError(Exception):
    """Base exception for S3 client bootstrap errors."""

    pass


class ConfigurationError(S3BootstrapError):
    """Raised when a required account name or configuration value is missing."""

    pass


class AccountLookupError(S3BootstrapError, LookupError):
    """Raised when the account query fails at the transport or protocol level."""

    pass


class AmbiguousResultError(S3BootstrapError):
    """Raised when an account lookup yields zero or more than one account."""

    pass


class SecretFormatError(S3BootstrapError):
    """Raised when the automation-token secret lacks a string credential field."""

    pass


class CredentialConfigError(S3BootstrapError):
    """Raised when the boto3 client cannot be configured."""

    pass
