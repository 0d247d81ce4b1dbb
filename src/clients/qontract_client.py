"""GraphQL client for the app-interface query service (qontract-server)."""

from typing import Any, Optional

import httpx
from structlog import get_logger

from src.config.settings import QontractSettings

logger = get_logger(__name__)


class QontractClientError(Exception):
    """Raised when a GraphQL query cannot be executed or returns errors."""

    pass


class QontractClient:
    """Executes parameterized GraphQL queries against qontract-server."""

    def __init__(
        self,
        server_url: str,
        token: str = "",
        timeout: float = 30,
    ):
        self.server_url = server_url
        self.token = token
        self.timeout = timeout

    @classmethod
    def from_settings(cls, qontract_settings: Optional[QontractSettings] = None) -> "QontractClient":
        """Build a client from QONTRACT_* settings."""
        cfg = qontract_settings or QontractSettings()
        return cls(
            server_url=cfg.server_url.strip(),
            token=cfg.token.strip(),
            timeout=cfg.request_timeout,
        )

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": "S3Bootstrap/1.0",
        }
        if self.token:
            headers["Authorization"] = self.token
        return headers

    def query(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Execute a GraphQL query and return its ``data`` member.

        No retries: a single transport failure is reported to the caller.

        Args:
            query: GraphQL document
            variables: Query variables
            timeout: Deadline in seconds for this call; defaults to the client timeout

        Returns:
            The ``data`` object of the GraphQL response

        Raises:
            QontractClientError: On transport errors, non-200 responses,
                GraphQL errors or a response without ``data``
        """
        payload = {"query": query, "variables": variables or {}}
        try:
            with httpx.Client(timeout=timeout if timeout is not None else self.timeout) as client:
                response = client.post(
                    self.server_url,
                    headers=self._get_headers(),
                    json=payload,
                )
        except httpx.TimeoutException as e:
            logger.error("GraphQL query timed out", server_url=self.server_url)
            raise QontractClientError(f"Query timed out: {self.server_url}") from e
        except httpx.RequestError as e:
            logger.error(
                "GraphQL request failed",
                server_url=self.server_url,
                error=str(e),
            )
            raise QontractClientError(f"Request to {self.server_url} failed: {e}") from e

        if response.status_code != 200:
            logger.error(
                "GraphQL query failed",
                server_url=self.server_url,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            raise QontractClientError(
                f"Query failed: {response.status_code} {response.text}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise QontractClientError("GraphQL response is not valid JSON") from e

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            messages = [err.get("message", str(err)) for err in errors if isinstance(err, dict)]
            logger.error("GraphQL query returned errors", errors=messages)
            raise QontractClientError(f"GraphQL errors: {'; '.join(messages) or errors}")

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise QontractClientError("GraphQL response has no data")

        logger.debug("GraphQL query successful", server_url=self.server_url)
        return data
