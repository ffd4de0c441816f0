"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # SHOPIFY CATALOG
    # ===================
    shopify_store_domain: str = Field(
        default="",
        description="Store domain, e.g. my-shop.myshopify.com"
    )
    shopify_access_token: Optional[str] = Field(
        None,
        description="Admin API access token"
    )
    shopify_api_version: str = Field(
        default="2024-10",
        description="Admin GraphQL API version"
    )

    # ===================
    # DRAFT ORDER SERVICE
    # ===================
    draft_order_service_url: str = Field(
        default="",
        description="Endpoint that creates draft orders from bulk uploads"
    )
    external_request_timeout_seconds: float = Field(
        default=10,
        gt=0,
        le=120,
        description="Timeout for catalog and order service requests"
    )

    # ===================
    # BULK ORDER IMPORT
    # ===================
    catalog_lookup_concurrency: int = Field(
        default=4,
        ge=1,
        le=16,
        description="Parallel SKU lookups per upload (1 = sequential)"
    )
    history_table: str = Field(
        default="bulk_order_uploads",
        description="Supabase table holding created-order history"
    )
    history_limit: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Rows returned by the history endpoint"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def shopify_configured(self) -> bool:
        """Check if the Shopify Admin API is configured."""
        return bool(self.shopify_store_domain and self.shopify_access_token)

    @property
    def shopify_graphql_url(self) -> str:
        """Admin GraphQL endpoint for the configured store."""
        return (
            f"https://{self.shopify_store_domain}"
            f"/admin/api/{self.shopify_api_version}/graphql.json"
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
