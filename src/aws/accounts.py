"""AWS account lookup through the app-interface GraphQL API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from structlog import get_logger

from src.aws.exceptions import (
    AccountLookupError,
    AmbiguousResultError,
    ConfigurationError,
)
from src.clients.qontract_client import QontractClient, QontractClientError

logger = get_logger(__name__)

GET_ACCOUNTS_QUERY = """
query getAccounts($name: String) {
  awsaccounts_v1 (name: $name) {
    name
    resourcesDefaultRegion
    automationToken {
      path
      field
      version
      format
    }
  }
}
"""


class AutomationToken(BaseModel):
    """Pointer to the Vault secret holding an account's access keys."""

    path: str
    field: str = ""
    version: Optional[int] = None
    format: Optional[str] = None


class AccountRecord(BaseModel):
    """One ``awsaccounts_v1`` entry."""

    name: str = ""
    default_region: str = Field(default="", alias="resourcesDefaultRegion")
    automation_token: AutomationToken = Field(alias="automationToken")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def get_accounts(
    qontract_client: QontractClient,
    account_name: str,
    timeout: Optional[float] = None,
) -> list[AccountRecord]:
    """Run the getAccounts query and return every record it yields.

    Raises:
        AccountLookupError: If the query fails or its result cannot be parsed
    """
    try:
        data = qontract_client.query(
            GET_ACCOUNTS_QUERY,
            variables={"name": account_name},
            timeout=timeout,
        )
    except QontractClientError as e:
        logger.error("Error getting AWS account info", account=account_name, error=str(e))
        raise AccountLookupError(f"Error getting AWS account info for {account_name}: {e}") from e

    raw_accounts = data.get("awsaccounts_v1") or []
    try:
        return [AccountRecord.model_validate(item) for item in raw_accounts]
    except ValidationError as e:
        logger.error("Malformed AWS account record", account=account_name, error=str(e))
        raise AccountLookupError(f"Malformed account record for {account_name}") from e


def resolve_account(
    qontract_client: QontractClient,
    account_name: str,
    timeout: Optional[float] = None,
) -> AccountRecord:
    """Return the single account named ``account_name``.

    Raises:
        ConfigurationError: If ``account_name`` is empty
        AccountLookupError: If the query fails
        AmbiguousResultError: If the query does not match exactly one account
    """
    if not account_name:
        raise ConfigurationError("No AWS account name provided")

    accounts = get_accounts(qontract_client, account_name, timeout=timeout)
    if len(accounts) != 1:
        logger.error(
            "Expected one AWS account with name",
            account=account_name,
            matches=len(accounts),
        )
        raise AmbiguousResultError(
            f"Expected one AWS account named {account_name}, found {len(accounts)}"
        )

    logger.info("Resolved AWS account", account=account_name)
    return accounts[0]
