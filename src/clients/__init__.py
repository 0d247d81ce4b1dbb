"""API clients package."""

from src.clients.qontract_client import QontractClient, QontractClientError
from src.clients.vault_client import (
    VaultAuthenticationError,
    VaultClient,
    VaultClientError,
    VaultNotFoundError,
    VaultSecret,
)

__all__ = [
    "QontractClient",
    "QontractClientError",
    "VaultClient",
    "VaultClientError",
    "VaultAuthenticationError",
    "VaultNotFoundError",
    "VaultSecret",
]
