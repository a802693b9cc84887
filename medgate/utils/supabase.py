"""
Supabase client wrapper for Medgate.

Provides a thin wrapper around the Supabase AsyncClient configured for the
permission tables.
"""

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions
from supabase_auth import AsyncMemoryStorage

from ..config import MedgateConfig
from ..errors import StoreUnavailable


class MedgateSupabaseClient:
    """
    Wrapper around Supabase AsyncClient with Medgate-specific configuration.

    Example:
        ```python
        from medgate.utils.supabase import MedgateSupabaseClient
        from medgate.config import MedgateConfig

        config = MedgateConfig()
        client = await MedgateSupabaseClient.create(config)

        result = await client.table("role_permissions").select("*").execute()
        ```
    """

    def __init__(self, config: MedgateConfig, client: AsyncClient) -> None:
        """
        Initialize the Medgate Supabase client.

        Args:
            config: Medgate configuration
            client: Initialized Supabase AsyncClient

        Note:
            Use MedgateSupabaseClient.create() instead of direct instantiation.
        """
        self.config = config
        self._client = client

    @classmethod
    async def create(cls, config: MedgateConfig) -> "MedgateSupabaseClient":
        """
        Create and initialize a MedgateSupabaseClient.

        Args:
            config: Medgate configuration with Supabase credentials

        Returns:
            Initialized MedgateSupabaseClient
        """
        options = AsyncClientOptions(
            schema=config.db_schema,
            storage=AsyncMemoryStorage(),
        )

        client = await acreate_client(
            supabase_url=config.supabase_url,
            supabase_key=config.supabase_key,
            options=options,
        )

        return cls(config=config, client=client)

    @property
    def auth(self):
        """
        Access Supabase Auth client.

        Used for sign-in, sign-out and reading the current session.
        """
        return self._client.auth

    def table(self, table_name: str):
        """
        Create a query builder for a specific table.

        Args:
            table_name: Name of the table (e.g., "role_permissions")

        Returns:
            AsyncRequestBuilder for chaining queries
        """
        return self._client.table(table_name)

    async def close(self) -> None:
        """Close the client and cleanup resources."""
        # The async client keeps no pooled connections of its own
        pass


async def create_supabase_client(config: MedgateConfig) -> MedgateSupabaseClient:
    """
    Convenience function to create a MedgateSupabaseClient.

    Args:
        config: Medgate configuration

    Returns:
        Initialized MedgateSupabaseClient
    """
    return await MedgateSupabaseClient.create(config)


async def execute(query, operation: str):
    """
    Execute a PostgREST query, mapping backend failures to StoreUnavailable.

    Args:
        query: Query builder ready to execute
        operation: Short label used in logs and in the raised error

    Returns:
        The PostgREST response

    Raises:
        StoreUnavailable: If the backend could not be reached or returned an error
    """
    try:
        return await query.execute()
    except (APIError, httpx.HTTPError, OSError) as e:
        logger.warning(f"Permission store unavailable during {operation}: {e}")
        raise StoreUnavailable(
            f"Permission store unavailable during {operation}: {e}",
            operation=operation,
        ) from e
