"""
Medgate configuration management.

Loads configuration from environment variables or .env file.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MedgateConfig(BaseSettings):
    """
    Medgate configuration settings.

    Can be loaded from:
    1. Environment variables (MEDGATE_SUPABASE_URL, MEDGATE_SUPABASE_KEY, etc.)
    2. .env file in project root
    3. Direct instantiation with kwargs

    Example:
        ```python
        # From environment
        config = MedgateConfig()

        # Direct instantiation
        config = MedgateConfig(
            supabase_url="https://xxx.supabase.co",
            supabase_key="your-key"
        )
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Supabase connection
    supabase_url: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)",
    )

    supabase_key: str = Field(
        ...,
        description="Supabase key used for permission table access",
    )

    # Database schema
    db_schema: str = Field(
        default="public",
        description="PostgreSQL schema where the permission tables live",
        alias="schema",
    )

    # Table names
    permissions_table: str = Field(
        default="role_permissions",
        description="Table holding one row of action flags per (role, module)",
    )

    user_roles_table: str = Field(
        default="user_roles",
        description="Table mapping auth user ids to assigned roles",
    )

    # Policy switches
    admin_full_access: bool = Field(
        default=False,
        description="Grant every action to holders of the admin role without consulting the table",
    )

    lock_admin_permissions: bool = Field(
        default=True,
        description="Reject writes to the admin role's permission entries",
    )

    # Debug
    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Ensure Supabase URL is valid."""
        if not v.startswith("https://"):
            raise ValueError("supabase_url must start with https://")
        return v.rstrip("/")

    @field_validator("supabase_key")
    @classmethod
    def validate_supabase_key(cls, v: str) -> str:
        """Ensure Supabase key is not empty."""
        if not v or len(v) < 10:
            raise ValueError("supabase_key appears invalid (too short)")
        return v

    @field_validator("permissions_table", "user_roles_table")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        if not v or not v.replace("_", "").isalnum():
            raise ValueError(f"Invalid table name: {v!r}")
        return v


def load_config(**kwargs) -> MedgateConfig:
    """
    Load Medgate configuration.

    Priority order:
    1. Keyword arguments
    2. Environment variables (MEDGATE_*)
    3. .env file

    Args:
        **kwargs: Override configuration values

    Returns:
        MedgateConfig instance

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    return MedgateConfig(**kwargs)
