"""
medgate check command - Evaluate a permission for a user.
"""

import asyncio
from uuid import UUID

import typer
from rich.console import Console

from ...client import Medgate
from ...errors import StoreUnavailable
from ...rbac.models import Action, Module

console = Console()


def check_command(
    user_id: UUID = typer.Argument(..., help="Auth user UUID"),
    module: Module = typer.Argument(..., help="Module name"),
    action: Action = typer.Argument(Action.VIEW, help="Action (view, create, edit, delete)"),
) -> None:
    """
    Check whether a user may perform an action on a module.

    Exits with status 0 when allowed and 1 when denied.

    Example:
        $ medgate check 3f2a6c1e-... billing create
    """
    allowed = asyncio.run(_check(user_id, module, action))
    if not allowed:
        raise typer.Exit(1)


async def _check(user_id: UUID, module: Module, action: Action) -> bool:
    """Internal async function to resolve a single permission."""
    medgate = await Medgate.create()
    resolver = medgate.resolver()

    try:
        await resolver.initialize(user_id)
    except StoreUnavailable as e:
        resolver.close()
        console.print(f"[red]Denied:[/red] permission store unavailable ({e})")
        return False

    roles = ", ".join(sorted(role.value for role in resolver.roles)) or "none"
    allowed = resolver.has_permission(module, action)
    resolver.close()

    if allowed:
        console.print(f"[green]Allowed:[/green] {module.value}:{action.value} (roles: {roles})")
    else:
        console.print(f"[red]Denied:[/red] {module.value}:{action.value} (roles: {roles})")
    return allowed
