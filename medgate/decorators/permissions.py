"""
Permission decorators for Medgate.

Protect executable actions (service functions, command handlers) with the
same decision an AccessGate makes for rendered content.
"""

import functools
import inspect
from typing import Any, Callable, Optional, Union

from ..gate import AccessGate
from ..rbac.models import Action, Module, as_action, as_module
from ..rbac.resolver import PermissionResolver


def require_permission(
    module: Union[Module, str],
    action: Union[Action, str],
    *,
    resolver: Optional[PermissionResolver] = None,
    resolver_param: str = "resolver",
):
    """
    Decorator to require a permission before running a function.

    The resolver is taken from the decorator argument, else from the
    ``resolver_param`` keyword argument of the call, else from a ``resolver``
    attribute of the first positional argument (methods of session-bound
    services).

    Usage:
        ```python
        @require_permission(Module.BILLING, Action.DELETE)
        async def void_invoice(invoice_id: str, *, resolver: PermissionResolver):
            ...

        class PatientService:
            def __init__(self, resolver):
                self.resolver = resolver

            @require_permission("patients", "create")
            async def register(self, data):
                ...
        ```

    Raises:
        AccessDenied: At call time, if the permission is not granted (a
            resolver that is still loading or has failed never grants)
        ValueError: At call time, if no resolver can be found
    """
    module = as_module(module)
    action = as_action(action)

    def find_resolver(args: tuple, kwargs: dict) -> PermissionResolver:
        if resolver is not None:
            return resolver
        if kwargs.get(resolver_param) is not None:
            return kwargs[resolver_param]
        if args and isinstance(getattr(args[0], "resolver", None), PermissionResolver):
            return args[0].resolver
        raise ValueError(
            "PermissionResolver not provided. "
            f"Pass it via the decorator or the '{resolver_param}' keyword argument."
        )

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                AccessGate(find_resolver(args, kwargs), module, action).ensure()
                return await func(*args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            AccessGate(find_resolver(args, kwargs), module, action).ensure()
            return func(*args, **kwargs)

        return wrapper

    return decorator
