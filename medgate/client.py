"""
Main Medgate client.

This is the primary interface users interact with.
"""

from typing import Optional

from .auth import RoleAssignmentManager, SessionManager
from .config import MedgateConfig, load_config
from .rbac import PermissionAdministrator, PermissionResolver, RolePermissionStore
from .utils.logging import enable_logging
from .utils.supabase import MedgateSupabaseClient


class Medgate:
    """
    Main Medgate client for hospital role-based access control.

    Example:
        ```python
        from medgate import Medgate, Module, Action

        medgate = await Medgate.create()

        identity = await medgate.sessions.sign_in_with_password(email, password)
        resolver = medgate.resolver()
        await resolver.initialize(identity.user_id)

        if resolver.has_permission(Module.PATIENTS, Action.CREATE):
            ...
        ```
    """

    def __init__(self, config: MedgateConfig, client: MedgateSupabaseClient) -> None:
        """
        Initialize Medgate client.

        Args:
            config: Medgate configuration
            client: Supabase client wrapper

        Note:
            Use Medgate.create() instead of direct instantiation.
        """
        self.config = config
        self.client = client

        self.sessions = SessionManager(self)
        self.roles = RoleAssignmentManager(self)
        self.permissions = RolePermissionStore(self)

    @classmethod
    async def create(
        cls,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        **kwargs,
    ) -> "Medgate":
        """
        Create and initialize a Medgate client.

        Args:
            supabase_url: Supabase project URL (optional, loads from env)
            supabase_key: Supabase key (optional, loads from env)
            **kwargs: Additional configuration options

        Returns:
            Initialized Medgate client

        Raises:
            ValidationError: If required configuration is missing or invalid
        """
        config_kwargs = kwargs.copy()
        if supabase_url:
            config_kwargs["supabase_url"] = supabase_url
        if supabase_key:
            config_kwargs["supabase_key"] = supabase_key

        config = load_config(**config_kwargs)

        if config.debug:
            enable_logging("DEBUG")

        client = await MedgateSupabaseClient.create(config)

        return cls(config=config, client=client)

    def resolver(self) -> PermissionResolver:
        """
        Create a permission resolver for one session.

        The resolver starts in the idle state and denies everything until
        initialize() completes.
        """
        return PermissionResolver(
            store=self.permissions,
            identities=self.roles,
            admin_full_access=self.config.admin_full_access,
        )

    def administrator(self, resolver: PermissionResolver) -> PermissionAdministrator:
        """Create a gated administration facade acting as the resolver's user."""
        return PermissionAdministrator(self, resolver)

    async def close(self) -> None:
        """Close the Medgate client and cleanup resources."""
        await self.client.close()

    async def __aenter__(self) -> "Medgate":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
