
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Partners Hub API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"
    max_upload_size_mb: int = 10

    # Public site URL used for links inside emails
    site_url: str = Field(default="http://localhost:3000", alias="SITE_URL")

    # Database (PostgreSQL via asyncpg in production, SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./partners_hub_dev.db",
        alias="DATABASE_URL",
    )

    # Supabase (auth admin API, storage, access-token verification)
    supabase_url: str = Field(default="http://localhost:54321", alias="SUPABASE_URL")
    supabase_service_role_key: str | None = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY",
    )
    supabase_jwt_secret: str = Field(
        default="dev-jwt-secret-change-me-at-least-32-bytes", alias="SUPABASE_JWT_SECRET",
    )
    supabase_jwt_audience: str = Field(default="authenticated", alias="SUPABASE_JWT_AUDIENCE")
    supabase_timeout: int = Field(default=15, alias="SUPABASE_TIMEOUT")

    # Azure AD app used for the SMTP client-credentials token
    azure_tenant_id: str | None = Field(default=None, alias="AZURE_TENANT_ID")
    azure_client_id: str | None = Field(default=None, alias="AZURE_CLIENT_ID")
    azure_client_secret: str | None = Field(default=None, alias="AZURE_CLIENT_SECRET")

    # SMTP relay (Microsoft 365, STARTTLS + XOAUTH2)
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_from: str | None = Field(default=None, alias="SMTP_FROM")
    smtp_timeout: int = Field(default=30, alias="SMTP_TIMEOUT")

    # Internal mailbox receiving new-order notifications and feedback
    orders_mailbox: str = Field(default="orders@qiqiglobal.com", alias="ORDERS_MAILBOX")

    audit_enabled: bool = Field(default=True, alias="AUDIT_ENABLED")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def mail_enabled(self) -> bool:
        """Email delivery is available only when the SMTP relay is configured."""
        return bool(self.smtp_host and self.smtp_from)

settings = Settings()
