"""
medgate roles command - Role assignment CLI.

Show, assign and revoke the roles held by users.
"""

import asyncio
from typing import Optional
from uuid import UUID

import typer
from rich.console import Console

from ...client import Medgate
from ...errors import AccessDenied, StoreUnavailable
from ...rbac.models import Role

console = Console()


def roles_show_command(
    user_id: UUID = typer.Argument(..., help="Auth user UUID"),
) -> None:
    """
    Show the roles held by a user.

    Example:
        $ medgate roles show 3f2a6c1e-...
    """
    console.print("\n[bold cyan]User Roles[/bold cyan]\n")

    asyncio.run(_show_roles(user_id))


async def _show_roles(user_id: UUID) -> None:
    """Internal async function to show a user's roles."""
    try:
        medgate = await Medgate.create()
        roles = await medgate.roles.get_roles(user_id)

        console.print(f"User: [cyan]{user_id}[/cyan]")
        if roles:
            console.print(f"Roles: [cyan]{', '.join(sorted(role.value for role in roles))}[/cyan]\n")
        else:
            console.print("[yellow]No roles assigned[/yellow]\n")

    except StoreUnavailable as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def roles_assign_command(
    user_id: UUID = typer.Argument(..., help="Auth user UUID"),
    role: Role = typer.Argument(..., help="Role to assign"),
    acting_user: Optional[UUID] = typer.Option(
        None,
        "--as",
        help="Perform the change as this user (requires user_management:edit)",
    ),
) -> None:
    """
    Assign a role to a user.

    Example:
        $ medgate roles assign 3f2a6c1e-... doctor
    """
    console.print("\n[bold cyan]Assigning Role[/bold cyan]\n")

    asyncio.run(_change_role(user_id, role, acting_user, assign=True))


def roles_revoke_command(
    user_id: UUID = typer.Argument(..., help="Auth user UUID"),
    role: Role = typer.Argument(..., help="Role to revoke"),
    acting_user: Optional[UUID] = typer.Option(
        None,
        "--as",
        help="Perform the change as this user (requires user_management:edit)",
    ),
) -> None:
    """
    Revoke a role from a user.

    Example:
        $ medgate roles revoke 3f2a6c1e-... pharmacist
    """
    console.print("\n[bold cyan]Revoking Role[/bold cyan]\n")

    asyncio.run(_change_role(user_id, role, acting_user, assign=False))


async def _change_role(
    user_id: UUID,
    role: Role,
    acting_user: Optional[UUID],
    assign: bool,
) -> None:
    """Internal async function to assign or revoke a role."""
    try:
        medgate = await Medgate.create()

        if acting_user is not None:
            resolver = medgate.resolver()
            await resolver.initialize(acting_user)
            admin = medgate.administrator(resolver)
            if assign:
                await admin.assign_role(user_id, role)
            else:
                changed = await admin.revoke_role(user_id, role)
        elif assign:
            await medgate.roles.assign(user_id, role)
        else:
            changed = await medgate.roles.revoke(user_id, role)

        if assign:
            console.print(f"[green]✓[/green] Role [cyan]{role.value}[/cyan] assigned to {user_id}\n")
        elif changed:
            console.print(f"[green]✓[/green] Role [cyan]{role.value}[/cyan] revoked from {user_id}\n")
        else:
            console.print(f"[yellow]User {user_id} does not hold role {role.value}[/yellow]\n")

    except AccessDenied as e:
        console.print(f"[red]Access denied:[/red] {e}")
        raise typer.Exit(1)
    except StoreUnavailable as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
