"""
Permission resolver for Medgate.

Computes a session's effective permissions (the union over every role the
user holds) and answers permission queries synchronously from an immutable
snapshot.
"""

import asyncio
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Union
from uuid import UUID

from loguru import logger

from ..errors import StoreUnavailable
from .models import (
    Action,
    Grant,
    Module,
    ModulePermissions,
    Role,
    SessionIdentity,
    as_action,
    as_module,
)

Listener = Callable[["PermissionResolver"], None]


class ResolverState(str, Enum):
    """Lifecycle of a PermissionResolver."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class PermissionSnapshot:
    """
    Immutable view of one session's effective permissions.

    Effective permissions per module are memoised inside the snapshot, so
    replacing the snapshot also drops every cached decision.
    """

    __slots__ = ("identity", "grants", "full_access", "_modules")

    def __init__(
        self,
        identity: Optional[SessionIdentity],
        grants: Iterable[Grant] = (),
        full_access: bool = False,
    ) -> None:
        self.identity = identity
        self.grants: FrozenSet[Grant] = frozenset(grants)
        self.full_access = full_access
        self._modules: Dict[Module, ModulePermissions] = {}

    @property
    def roles(self) -> FrozenSet[Role]:
        return self.identity.roles if self.identity else frozenset()

    def allows(self, module: Module, action: Action) -> bool:
        if self.full_access:
            return True
        return (module, action) in self.grants

    def module_permissions(self, module: Module) -> ModulePermissions:
        cached = self._modules.get(module)
        if cached is None:
            if self.full_access:
                cached = ModulePermissions.full()
            else:
                cached = ModulePermissions.from_actions(
                    action for action in Action if (module, action) in self.grants
                )
            self._modules[module] = cached
        return cached


class PermissionResolver:
    """
    Session-scoped permission resolver.

    One instance is created per session and handed to every AccessGate.
    Every uncertain state (never initialised, loading, failed, closed)
    answers False.

    Example:
        ```python
        resolver = medgate.resolver()
        await resolver.initialize(user_id)

        if resolver.has_permission(Module.BILLING, Action.CREATE):
            ...

        # After an administrator changed this user's roles
        await resolver.refresh()
        ```
    """

    def __init__(self, store, identities, admin_full_access: bool = False) -> None:
        """
        Initialize PermissionResolver.

        Args:
            store: RolePermissionStore to read permission entries from
            identities: Object exposing ``async get_roles(user_id)``
            admin_full_access: Grant everything to holders of the admin role
        """
        self.store = store
        self.identities = identities
        self.admin_full_access = admin_full_access

        self._state = ResolverState.IDLE
        self._snapshot: Optional[PermissionSnapshot] = None
        self._user_id: Optional[UUID] = None
        self._error: Optional[BaseException] = None
        self._generation = 0
        self._listeners: List[Listener] = []

    @property
    def state(self) -> ResolverState:
        return self._state

    @property
    def is_loading(self) -> bool:
        """True until the first load has completed or failed."""
        return self._state in (ResolverState.IDLE, ResolverState.LOADING)

    @property
    def is_ready(self) -> bool:
        return self._state is ResolverState.READY

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def user_id(self) -> Optional[UUID]:
        return self._user_id

    @property
    def identity(self) -> Optional[SessionIdentity]:
        snapshot = self._snapshot
        return snapshot.identity if snapshot else None

    @property
    def roles(self) -> FrozenSet[Role]:
        snapshot = self._snapshot
        return snapshot.roles if snapshot else frozenset()

    @property
    def permissions(self) -> FrozenSet[Grant]:
        """Effective (module, action) pairs of the current snapshot."""
        if not self.is_ready or self._snapshot is None:
            return frozenset()
        return self._snapshot.grants

    async def initialize(self, user_id: Optional[UUID]) -> None:
        """
        Load the user's roles and the permission entries.

        Passing None (no authenticated session) produces an empty snapshot.

        Args:
            user_id: Authenticated user UUID, or None

        Raises:
            StoreUnavailable: If roles or permissions could not be loaded
            RuntimeError: If the resolver has been closed

        Any other error raised while loading also leaves the resolver FAILED.
        """
        self._ensure_open()
        self._user_id = user_id
        self._snapshot = None
        self._error = None
        self._set_state(ResolverState.LOADING)
        await self._load("initialize")

    async def refresh(self) -> None:
        """
        Re-fetch roles and permission entries for the current user.

        The new snapshot replaces the old one in a single step; queries made
        while the refresh is in flight are answered from the old snapshot.

        Raises:
            StoreUnavailable: If roles or permissions could not be loaded
            RuntimeError: If the resolver was never initialised or has been closed
        """
        self._ensure_open()
        if self._state is ResolverState.IDLE:
            raise RuntimeError("Resolver must be initialized before refresh()")
        await self._load("refresh")

    def close(self) -> None:
        """
        Tear the resolver down at the end of the session.

        Loads still in flight are discarded when they complete.
        """
        if self._state is ResolverState.CLOSED:
            return
        self._generation += 1
        self._snapshot = None
        self._user_id = None
        self._set_state(ResolverState.CLOSED)
        self._listeners.clear()

    def has_permission(self, module: Union[Module, str], action: Union[Action, str]) -> bool:
        """
        Check whether the session may perform an action on a module.

        Args:
            module: Module identifier
            action: Action identifier

        Returns:
            True iff a held role grants the action; False in any other state

        Raises:
            ValueError: If module or action is not a known identifier
        """
        module, action = as_module(module), as_action(action)
        snapshot = self._snapshot
        if self._state is not ResolverState.READY or snapshot is None:
            return False
        return snapshot.allows(module, action)

    def can_access_module(self, module: Union[Module, str]) -> bool:
        """True iff the session may view the module."""
        return self.has_permission(module, Action.VIEW)

    def get_module_permissions(self, module: Union[Module, str]) -> ModulePermissions:
        """Effective permissions for one module (all False unless ready)."""
        module = as_module(module)
        snapshot = self._snapshot
        if self._state is not ResolverState.READY or snapshot is None:
            return ModulePermissions()
        return snapshot.module_permissions(module)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback run after every state or snapshot change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _load(self, operation: str) -> None:
        self._generation += 1
        generation = self._generation
        user_id = self._user_id

        try:
            snapshot = await self._fetch_snapshot(user_id)
        except StoreUnavailable as e:
            if generation != self._generation:
                logger.debug(f"Discarding failed {operation} for user {user_id}: superseded")
                return
            logger.warning(f"Permission {operation} failed for user {user_id}: {e}")
            self._fail(e)
            raise
        except (Exception, asyncio.CancelledError) as e:
            if generation == self._generation:
                logger.exception(f"Permission {operation} aborted for user {user_id}")
                self._fail(e)
            raise

        if generation != self._generation:
            logger.debug(f"Discarding {operation} result for user {user_id}: superseded")
            return

        self._snapshot = snapshot
        self._error = None
        logger.debug(
            f"Permissions loaded for user {user_id}: "
            f"roles={sorted(role.value for role in snapshot.roles)} grants={len(snapshot.grants)}"
        )
        self._set_state(ResolverState.READY)

    async def _fetch_snapshot(self, user_id: Optional[UUID]) -> PermissionSnapshot:
        if user_id is None:
            return PermissionSnapshot(identity=None)

        roles = await self.identities.get_roles(user_id)
        identity = SessionIdentity(user_id=user_id, roles=roles)
        if not roles:
            return PermissionSnapshot(identity=identity)

        grants = await self.store.get_permissions_for_roles(roles)

        full_access = self.admin_full_access and Role.ADMIN in roles
        return PermissionSnapshot(identity=identity, grants=grants, full_access=full_access)

    def _fail(self, error: BaseException) -> None:
        self._snapshot = None
        self._error = error
        self._set_state(ResolverState.FAILED)

    def _ensure_open(self) -> None:
        if self._state is ResolverState.CLOSED:
            raise RuntimeError("Resolver has been closed")

    def _set_state(self, state: ResolverState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Permission listener failed")

    async def __aenter__(self) -> "PermissionResolver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
