"""
medgate permissions command - Role permission management CLI.

Inspect and edit the role_permissions table from the command line.
"""

import asyncio
from typing import Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from ...client import Medgate
from ...errors import AccessDenied, StoreUnavailable
from ...rbac.models import Action, Module, Role

console = Console()


def _flag(value: bool) -> str:
    return "[green]✓[/green]" if value else "[dim]-[/dim]"


def permissions_list_command(
    role: Role = typer.Argument(..., help="Role name"),
) -> None:
    """
    Show the permission grid of a role.

    Example:
        $ medgate permissions list nurse
    """
    console.print(f"\n[bold cyan]Permissions for {role.value}[/bold cyan]\n")

    asyncio.run(_list_permissions(role))


async def _list_permissions(role: Role) -> None:
    """Internal async function to list a role's permissions."""
    try:
        medgate = await Medgate.create()
        matrix = await medgate.permissions.get_role_matrix(role)

        table = Table(title=f"Role: {role.value}")
        table.add_column("Module", style="cyan")
        for action in Action:
            table.add_column(action.value.capitalize(), justify="center")

        for module, perms in matrix.items():
            table.add_row(module.value, *(_flag(perms.allows(action)) for action in Action))

        console.print(table)
        console.print()

    except StoreUnavailable as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def permissions_matrix_command(
    action: Action = typer.Option(Action.VIEW, "--action", "-a", help="Action to display"),
) -> None:
    """
    Show which roles may perform an action on each module.

    Example:
        $ medgate permissions matrix
        $ medgate permissions matrix --action delete
    """
    console.print(f"\n[bold cyan]Permission matrix ({action.value})[/bold cyan]\n")

    asyncio.run(_show_matrix(action))


async def _show_matrix(action: Action) -> None:
    """Internal async function to render the role x module matrix."""
    try:
        medgate = await Medgate.create()
        all_permissions = await medgate.permissions.get_all_permissions()

        table = Table(title=f"Action: {action.value}")
        table.add_column("Module", style="cyan")
        for role in Role:
            table.add_column(role.value, justify="center")

        for module in Module:
            table.add_row(
                module.value,
                *(_flag((module, action) in all_permissions[role]) for role in Role),
            )

        console.print(table)
        console.print()

    except StoreUnavailable as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def permissions_set_command(
    role: Role = typer.Argument(..., help="Role name"),
    module: Module = typer.Argument(..., help="Module name"),
    action: Action = typer.Argument(..., help="Action (view, create, edit, delete)"),
    allow: bool = typer.Option(True, "--allow/--deny", help="Allow or deny the action"),
    acting_user: Optional[UUID] = typer.Option(
        None,
        "--as",
        help="Perform the change as this user (requires user_management:edit)",
    ),
) -> None:
    """
    Allow or deny an action for a role.

    Example:
        $ medgate permissions set nurse pharmacy edit --allow
        $ medgate permissions set receptionist billing delete --deny --as 3f2a...
    """
    console.print("\n[bold cyan]Updating Permission[/bold cyan]\n")

    asyncio.run(_set_permission(role, module, action, allow, acting_user))


async def _set_permission(
    role: Role,
    module: Module,
    action: Action,
    allow: bool,
    acting_user: Optional[UUID],
) -> None:
    """Internal async function to set a permission entry."""
    try:
        medgate = await Medgate.create()

        if acting_user is not None:
            resolver = medgate.resolver()
            await resolver.initialize(acting_user)
            entry = await medgate.administrator(resolver).set_permission(role, module, action, allow)
        else:
            entry = await medgate.permissions.set_permission(role, module, action, allow)

        verb = "allowed" if entry.allowed else "denied"
        console.print(
            f"[green]✓[/green] {module.value}:{action.value} {verb} for [cyan]{role.value}[/cyan]\n"
        )

    except AccessDenied as e:
        console.print(f"[red]Access denied:[/red] {e}")
        raise typer.Exit(1)
    except (StoreUnavailable, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def permissions_seed_command(
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        help="Replace existing rows with the default templates",
    ),
) -> None:
    """
    Write the default role templates.

    Example:
        $ medgate permissions seed
        $ medgate permissions seed --overwrite
    """
    console.print("\n[bold cyan]Seeding Default Permissions[/bold cyan]\n")

    asyncio.run(_seed(overwrite))


async def _seed(overwrite: bool) -> None:
    """Internal async function to seed default permissions."""
    try:
        medgate = await Medgate.create()
        written = await medgate.permissions.seed_defaults(overwrite=overwrite)

        if written:
            console.print(f"[green]✓[/green] Wrote {written} permission rows\n")
        else:
            console.print("[yellow]All default permission rows already exist[/yellow]\n")

    except StoreUnavailable as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
