"""
Session management for Medgate.

Establishes the session identity (auth user plus assigned roles) through
Supabase auth.
"""

from typing import Optional
from uuid import UUID

from supabase_auth.types import SignInWithPasswordCredentials

from .models import SessionIdentity


class SessionManager:
    """
    Manages authentication sessions.

    Example:
        ```python
        identity = await medgate.sessions.sign_in_with_password(
            email="nurse@hospital.org",
            password="secure123"
        )
        print(identity.roles)
        ```
    """

    def __init__(self, medgate) -> None:
        """
        Initialize SessionManager.

        Args:
            medgate: Main Medgate client instance
        """
        self.medgate = medgate
        self.client = medgate.client

    async def sign_in_with_password(self, email: str, password: str) -> SessionIdentity:
        """
        Sign in a user with email and password.

        Args:
            email: User email address
            password: User password

        Returns:
            SessionIdentity with the user's assigned roles

        Raises:
            AuthApiError: If credentials are invalid
            StoreUnavailable: If the user's roles cannot be read
        """
        credentials: SignInWithPasswordCredentials = {
            "email": email,
            "password": password,
        }

        auth_response = await self.client.auth.sign_in_with_password(credentials)
        return await self._identity_for(auth_response.user)

    async def current_identity(self) -> Optional[SessionIdentity]:
        """
        Get the identity of the current session if one exists.

        Returns:
            SessionIdentity, or None when nobody is signed in
        """
        auth_session = await self.client.auth.get_session()
        if not auth_session:
            return None
        return await self._identity_for(auth_session.user)

    async def sign_out(self) -> None:
        """Sign out the current session."""
        await self.client.auth.sign_out()

    async def _identity_for(self, auth_user) -> SessionIdentity:
        user_id = UUID(str(auth_user.id))
        roles = await self.medgate.roles.get_roles(user_id)
        return SessionIdentity(
            user_id=user_id,
            roles=roles,
            email=getattr(auth_user, "email", None) or None,
        )
