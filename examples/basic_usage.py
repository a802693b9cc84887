"""
Basic Medgate usage example.

This example demonstrates the core features of Medgate:
- Seeding the default role templates
- Assigning roles to staff
- Resolving a session's permissions and gating content on them

Run with:
    python examples/basic_usage.py <user-uuid>
"""

import asyncio
import sys
from uuid import UUID

from medgate import AccessGate, Action, Medgate, Module, Role, enable_logging


async def main(user_id: UUID):
    enable_logging("INFO")

    # Create Medgate client (loads config from .env)
    medgate = await Medgate.create()

    try:
        # =================================================================
        # 1. Seed default permissions
        # =================================================================
        print("Seeding default role templates...")

        written = await medgate.permissions.seed_defaults()
        print(f"  Wrote {written} rows")

        # =================================================================
        # 2. Assign roles
        # =================================================================
        print("\nAssigning roles...")

        await medgate.roles.assign(user_id, Role.RECEPTIONIST)
        roles = await medgate.roles.get_roles(user_id)
        print(f"  User holds: {', '.join(sorted(role.value for role in roles))}")

        # =================================================================
        # 3. Resolve the session's permissions
        # =================================================================
        print("\nResolving permissions...")

        async with medgate.resolver() as resolver:
            book_button = AccessGate(
                resolver,
                Module.APPOINTMENTS,
                Action.CREATE,
                content="[Book appointment]",
                fallback="(booking unavailable)",
            )
            book_button.mount(on_render=lambda state, output: print(f"  {state.value}: {output}"))

            await resolver.initialize(user_id)

            for module in (Module.APPOINTMENTS, Module.BILLING, Module.PHARMACY):
                perms = resolver.get_module_permissions(module)
                print(f"  {module.value}: {perms}")

            # =============================================================
            # 4. Change a permission and refresh
            # =============================================================
            print("\nRevoking appointment booking from receptionists...")

            await medgate.permissions.set_permission(
                Role.RECEPTIONIST, Module.APPOINTMENTS, Action.CREATE, False
            )
            await resolver.refresh()

            # Restore the default
            await medgate.permissions.set_permission(
                Role.RECEPTIONIST, Module.APPOINTMENTS, Action.CREATE, True
            )

    finally:
        await medgate.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python examples/basic_usage.py <user-uuid>")
        sys.exit(1)
    asyncio.run(main(UUID(sys.argv[1])))
