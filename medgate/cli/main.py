"""
Medgate CLI - Command-line interface for hospital permission management.

Usage:
    medgate permissions     Inspect and edit role permissions
    medgate roles           Manage the roles assigned to users
    medgate check           Evaluate a permission for a user
"""

import typer

from .commands import check, permissions, roles

app = typer.Typer(
    name="medgate",
    help="Role-based access control for hospital management apps on Supabase",
    add_completion=False,
)

app.command(name="check")(check.check_command)

# Create permissions subcommand group
permissions_app = typer.Typer(help="Inspect and edit role permissions")
permissions_app.command(name="list")(permissions.permissions_list_command)
permissions_app.command(name="matrix")(permissions.permissions_matrix_command)
permissions_app.command(name="set")(permissions.permissions_set_command)
permissions_app.command(name="seed")(permissions.permissions_seed_command)
app.add_typer(permissions_app, name="permissions")

# Create roles subcommand group
roles_app = typer.Typer(help="Manage the roles assigned to users")
roles_app.command(name="show")(roles.roles_show_command)
roles_app.command(name="assign")(roles.roles_assign_command)
roles_app.command(name="revoke")(roles.roles_revoke_command)
app.add_typer(roles_app, name="roles")


@app.callback()
def callback() -> None:
    """
    Medgate - role-based access control for hospital management apps.
    """
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
