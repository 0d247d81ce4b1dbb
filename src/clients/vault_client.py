"""Vault client for reading key-value secrets."""

from typing import Any, Optional

import hvac
import requests
from hvac.exceptions import Forbidden, InvalidPath, InvalidRequest, Unauthorized, VaultError
from pydantic import BaseModel, Field
from structlog import get_logger

from src.config.settings import VaultSettings

logger = get_logger(__name__)


class VaultClientError(Exception):
    """Base exception for Vault client errors."""

    pass


class VaultAuthenticationError(VaultClientError):
    """Raised when Vault rejects the token or the AppRole login."""

    pass


class VaultNotFoundError(VaultClientError):
    """Raised when no secret exists at the requested path."""

    pass


class VaultSecret(BaseModel):
    """A secret as returned by the logical read endpoint."""

    data: dict[str, Any] = Field(default_factory=dict)


class VaultClient:
    """Reads secrets from Vault with token or AppRole authentication."""

    def __init__(
        self,
        server: str,
        token: str = "",
        authtype: str = "token",
        role_id: str = "",
        secret_id: str = "",
        timeout: float = 30,
    ):
        self.server = server.rstrip("/")
        self.authtype = authtype
        self.role_id = role_id
        self.secret_id = secret_id
        self.timeout = timeout
        self._token = token

    @classmethod
    def from_settings(cls, vault_settings: Optional[VaultSettings] = None) -> "VaultClient":
        """Build a client from VAULT_SERVER, VAULT_AUTHTYPE, VAULT_TOKEN, VAULT_ROLE_ID, VAULT_SECRET_ID.

        Raises:
            VaultClientError: If the server or the credentials for the chosen
                auth type are not configured
        """
        cfg = vault_settings or VaultSettings()
        if not cfg.server.strip():
            raise VaultClientError("VAULT_SERVER is not set")
        if cfg.authtype == "token" and not cfg.token.strip():
            raise VaultClientError("VAULT_TOKEN is not set")
        if cfg.authtype == "approle" and not (cfg.role_id.strip() and cfg.secret_id.strip()):
            raise VaultClientError("VAULT_ROLE_ID and VAULT_SECRET_ID must be set for approle auth")
        return cls(
            server=cfg.server.strip(),
            token=cfg.token.strip(),
            authtype=cfg.authtype,
            role_id=cfg.role_id.strip(),
            secret_id=cfg.secret_id.strip(),
            timeout=cfg.request_timeout,
        )

    def _login_approle(self, client: hvac.Client) -> str:
        """Exchange role_id/secret_id for a client token."""
        try:
            response = client.auth.approle.login(
                role_id=self.role_id,
                secret_id=self.secret_id,
            )
        except (Forbidden, Unauthorized, InvalidRequest) as e:
            logger.error("Vault AppRole login failed", error=str(e))
            raise VaultAuthenticationError(f"AppRole login failed: {e}") from e
        except (VaultError, requests.RequestException) as e:
            logger.error("Vault AppRole login request failed", error=str(e))
            raise VaultClientError(f"AppRole login request failed: {e}") from e
        except ValueError as e:
            logger.error("Vault AppRole login returned invalid JSON", error=str(e))
            raise VaultClientError("AppRole login response is not valid JSON") from e

        auth = response.get("auth") if isinstance(response, dict) else None
        token = auth.get("client_token") if isinstance(auth, dict) else None
        if not token:
            raise VaultAuthenticationError("No client_token in AppRole login response")
        logger.info("Authenticated to Vault via AppRole")
        return token

    def read_secret(self, path: str, timeout: Optional[float] = None) -> VaultSecret:
        """Read the secret stored at ``path``.

        Args:
            path: Secret path, relative to /v1/
            timeout: Deadline in seconds for this call; defaults to the client timeout

        Returns:
            VaultSecret holding the key-value payload

        Raises:
            VaultAuthenticationError: If Vault rejects the token
            VaultNotFoundError: If there is no secret at ``path``
            VaultClientError: For transport and other API errors
        """
        path = path.lstrip("/")
        client = hvac.Client(
            url=self.server,
            token=self._token or None,
            timeout=timeout if timeout is not None else self.timeout,
        )
        if not self._token and self.authtype == "approle":
            self._token = self._login_approle(client)
            client.token = self._token

        try:
            response = client.read(path)
        except (Forbidden, Unauthorized) as e:
            logger.error("Vault permission denied", path=path)
            raise VaultAuthenticationError(f"Permission denied reading {path}") from e
        except InvalidPath as e:
            logger.warning("Vault secret not found", path=path)
            raise VaultNotFoundError(f"Secret not found: {path}") from e
        except requests.Timeout as e:
            logger.error("Vault read timed out", path=path)
            raise VaultClientError(f"Reading secret {path} timed out") from e
        except (VaultError, requests.RequestException) as e:
            logger.error("Vault read failed", path=path, error=str(e))
            raise VaultClientError(f"Reading secret {path} failed: {e}") from e
        except ValueError as e:
            raise VaultClientError(f"Secret {path} response is not valid JSON") from e

        # hvac returns None for a path without a secret
        if response is None:
            logger.warning("Vault secret not found", path=path)
            raise VaultNotFoundError(f"Secret not found: {path}")

        # Go clients accept either casing of the data member
        data = response.get("data", response.get("Data")) if isinstance(response, dict) else None
        if not isinstance(data, dict):
            raise VaultClientError(f"Secret {path} has no data")

        logger.debug("Read secret from Vault", path=path)
        return VaultSecret(data=data)
