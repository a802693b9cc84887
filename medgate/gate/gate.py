"""
Access gate for Medgate.

The single decision point used by every protected call site (a button, a
route, a menu item): it asks the resolver whether the session may perform an
action on a module and picks what to render or run.
"""

from enum import Enum
from typing import Any, Callable, List, Optional, Union

from ..errors import AccessDenied
from ..rbac.models import Action, Module, as_action, as_module
from ..rbac.resolver import PermissionResolver, ResolverState

RenderCallback = Callable[["GateState", Any], None]


class GateState(str, Enum):
    """Decision of an AccessGate."""

    LOADING = "loading"
    GRANTED = "granted"
    DENIED = "denied"


class AccessGate:
    """
    Conditionally render or execute content based on the session's permissions.

    While the resolver is still loading the gate renders nothing at all,
    neither content nor fallback, so a permitted user never sees a denied
    state flash by. A failed or closed resolver is treated as denied.

    Content and fallback may be plain values or zero-argument callables, which
    are invoked on render.

    Example:
        ```python
        gate = AccessGate(resolver, Module.PATIENTS, Action.CREATE, content=add_patient_button)

        with gate.mount(on_render=lambda state, output: screen.show(output)):
            await resolver.initialize(user_id)
        ```
    """

    def __init__(
        self,
        resolver: PermissionResolver,
        module: Union[Module, str],
        action: Union[Action, str],
        content: Any = None,
        fallback: Any = None,
    ) -> None:
        self.resolver = resolver
        self.module = as_module(module)
        self.action = as_action(action)
        self.content = content
        self.fallback = fallback

        self.renders: List[GateState] = []
        self._on_render: Optional[RenderCallback] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._last_state: Optional[GateState] = None

    @property
    def state(self) -> GateState:
        """Evaluate the gate against the resolver's current snapshot."""
        resolver_state = self.resolver.state
        if resolver_state in (ResolverState.IDLE, ResolverState.LOADING):
            return GateState.LOADING
        if resolver_state is ResolverState.READY and self.resolver.has_permission(
            self.module, self.action
        ):
            return GateState.GRANTED
        return GateState.DENIED

    @property
    def granted(self) -> bool:
        return self.state is GateState.GRANTED

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    def render(self) -> Any:
        """
        Produce the output for the current state.

        Returns:
            Content when granted, fallback when denied, None while loading
        """
        return self._output(self.state)

    def ensure(self) -> None:
        """
        Raise unless the action is granted right now.

        Raises:
            AccessDenied: If the gate is loading or denied
        """
        if not self.granted:
            raise AccessDenied(self.module, self.action)

    def mount(self, on_render: Optional[RenderCallback] = None) -> "AccessGate":
        """
        Attach the gate to its resolver.

        Renders once immediately and again on every state transition until
        unmounted.
        """
        if self.mounted:
            return self
        self._on_render = on_render
        self._unsubscribe = self.resolver.subscribe(self._on_resolver_change)
        self._emit(self.state)
        return self

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._on_render = None
        self._last_state = None

    def _on_resolver_change(self, resolver: PermissionResolver) -> None:
        state = self.state
        if state is not self._last_state:
            self._emit(state)

    def _emit(self, state: GateState) -> None:
        self._last_state = state
        self.renders.append(state)
        output = self._output(state)
        if self._on_render is not None:
            self._on_render(state, output)

    def _output(self, state: GateState) -> Any:
        if state is GateState.LOADING:
            return None
        value = self.content if state is GateState.GRANTED else self.fallback
        return value() if callable(value) else value

    def __enter__(self) -> "AccessGate":
        return self.mount(self._on_render)

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unmount()

    def __repr__(self) -> str:
        return f"AccessGate(module={self.module.value}, action={self.action.value}, state={self.state.value})"
