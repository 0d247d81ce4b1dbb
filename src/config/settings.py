"""Application settings and configuration management."""
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSSettings(BaseSettings):
    """AWS client configuration."""

    region: str = ""  # AWS_REGION

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class QontractSettings(BaseSettings):
    """GraphQL query service (qontract-server) configuration."""

    server_url: str = "http://localhost:4000/graphql"
    token: str = ""
    request_timeout: int = 30

    model_config = SettingsConfigDict(
        env_prefix="QONTRACT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class VaultSettings(BaseSettings):
    """Vault secret store configuration."""

    server: str = ""
    authtype: Literal["token", "approle"] = "token"
    token: str = ""
    role_id: str = ""
    secret_id: str = ""
    request_timeout: int = 30

    model_config = SettingsConfigDict(
        env_prefix="VAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(BaseSettings):
    """Main application settings."""

    # Sub-settings, rebuilt from the environment on every Settings()
    aws: AWSSettings = Field(default_factory=AWSSettings)
    qontract: QontractSettings = Field(default_factory=QontractSettings)
    vault: VaultSettings = Field(default_factory=VaultSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def missing_vault_settings(self) -> list[str]:
        """Return the names of required VAULT_* variables that are unset."""
        missing = []
        if not self.vault.server.strip():
            missing.append("VAULT_SERVER")
        if self.vault.authtype == "token":
            if not self.vault.token.strip():
                missing.append("VAULT_TOKEN")
        else:
            if not self.vault.role_id.strip():
                missing.append("VAULT_ROLE_ID")
            if not self.vault.secret_id.strip():
                missing.append("VAULT_SECRET_ID")
        return missing

    def region_or(self, fallback: Optional[str]) -> str:
        """Configured AWS region, or ``fallback`` when AWS_REGION is unset."""
        return (self.aws.region or "").strip() or (fallback or "").strip()


# Global settings instance
settings = Settings()
