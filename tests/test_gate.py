"""
Tests for medgate.gate module.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

from medgate.errors import AccessDenied, StoreUnavailable
from medgate.gate import AccessGate, GateState
from medgate.rbac import Action, Module, Role
from tests.test_resolver import HOSPITAL, grants_lookup, make_permissions, make_resolver


class TestAccessGate:
    """Tests for AccessGate."""

    def test_loading_renders_nothing(self):
        resolver = make_resolver(["receptionist"], HOSPITAL)
        gate = AccessGate(resolver, Module.APPOINTMENTS, Action.CREATE, "button", "no access")

        assert gate.state is GateState.LOADING
        assert gate.render() is None

    @pytest.mark.asyncio
    async def test_no_denied_flash_for_permitted_user(self):
        """Test that a permitted user goes straight from loading to granted."""
        resolver = make_resolver(["receptionist"], HOSPITAL)
        outputs = []
        gate = AccessGate(
            resolver, Module.APPOINTMENTS, Action.CREATE, content="button", fallback="no access"
        )
        gate.mount(on_render=lambda state, output: outputs.append(output))

        await resolver.initialize(uuid4())

        assert gate.renders == [GateState.LOADING, GateState.GRANTED]
        assert outputs == [None, "button"]

    @pytest.mark.asyncio
    async def test_denied_renders_fallback(self):
        resolver = make_resolver(["receptionist"], HOSPITAL)
        gate = AccessGate(resolver, "appointments", "delete", content="button", fallback="no access")

        with gate.mount():
            await resolver.initialize(uuid4())

        assert gate.renders == [GateState.LOADING, GateState.DENIED]
        assert gate.render() == "no access"
        assert gate.mounted is False

    @pytest.mark.asyncio
    async def test_denied_without_fallback_renders_nothing(self):
        resolver = make_resolver(["nurse"], HOSPITAL)
        gate = AccessGate(resolver, Module.BILLING, Action.VIEW, content="invoices")

        await resolver.initialize(uuid4())

        assert gate.state is GateState.DENIED
        assert gate.render() is None

    @pytest.mark.asyncio
    async def test_store_failure_renders_fallback(self):
        resolver = make_resolver(["doctor"], HOSPITAL)
        resolver.store.get_permissions_for_roles.side_effect = StoreUnavailable("down")
        gate = AccessGate(resolver, Module.PATIENTS, Action.VIEW, "records", "unavailable").mount()

        with pytest.raises(StoreUnavailable):
            await resolver.initialize(uuid4())

        assert gate.renders == [GateState.LOADING, GateState.DENIED]
        assert gate.render() == "unavailable"

    @pytest.mark.asyncio
    async def test_unexpected_load_error_renders_fallback(self):
        resolver = make_resolver(["doctor"], HOSPITAL)
        resolver.identities.get_roles.side_effect = RuntimeError("adapter broke")
        gate = AccessGate(resolver, Module.PATIENTS, Action.VIEW, "records", "denied").mount()

        with pytest.raises(RuntimeError):
            await resolver.initialize(uuid4())

        assert gate.state is GateState.DENIED
        assert gate.renders == [GateState.LOADING, GateState.DENIED]
        assert gate.render() == "denied"

    @pytest.mark.asyncio
    async def test_rerenders_when_permissions_change(self):
        resolver = make_resolver(["nurse"], HOSPITAL)
        gate = AccessGate(resolver, Module.PHARMACY, Action.VIEW, "stock", "hidden").mount()
        await resolver.initialize(uuid4())

        resolver.store.get_permissions_for_roles = grants_lookup(make_permissions(
            nurse=[("patients", "view")]
        ))
        await resolver.refresh()
        resolver.store.get_permissions_for_roles = grants_lookup(HOSPITAL)
        await resolver.refresh()

        assert gate.renders == [
            GateState.LOADING,
            GateState.GRANTED,
            GateState.DENIED,
            GateState.GRANTED,
        ]

    @pytest.mark.asyncio
    async def test_refresh_without_change_does_not_rerender(self):
        resolver = make_resolver(["nurse"], HOSPITAL)
        gate = AccessGate(resolver, Module.PHARMACY, Action.VIEW, "stock").mount()
        await resolver.initialize(uuid4())

        await resolver.refresh()

        assert gate.renders == [GateState.LOADING, GateState.GRANTED]

    @pytest.mark.asyncio
    async def test_refresh_in_flight_keeps_granted(self):
        resolver = make_resolver(["nurse"], HOSPITAL)
        gate = AccessGate(resolver, Module.PHARMACY, Action.VIEW, "stock").mount()
        await resolver.initialize(uuid4())

        release = asyncio.Event()

        async def slow_roles(user_id):
            await release.wait()
            return frozenset({Role.NURSE})

        resolver.identities.get_roles = AsyncMock(side_effect=slow_roles)
        task = asyncio.create_task(resolver.refresh())
        await asyncio.sleep(0)

        assert gate.render() == "stock"
        release.set()
        await task
        assert gate.renders == [GateState.LOADING, GateState.GRANTED]

    @pytest.mark.asyncio
    async def test_callable_content(self):
        resolver = make_resolver(["doctor"], HOSPITAL)
        content = Mock(return_value="chart")
        fallback = Mock(return_value="locked")
        gate = AccessGate(resolver, Module.PATIENTS, Action.EDIT, content, fallback)

        assert gate.render() is None
        content.assert_not_called()

        await resolver.initialize(uuid4())

        assert gate.render() == "chart"
        fallback.assert_not_called()

    @pytest.mark.asyncio
    async def test_unmount_stops_rendering(self):
        resolver = make_resolver(["doctor"], HOSPITAL)
        on_render = Mock()
        gate = AccessGate(resolver, Module.PATIENTS, Action.VIEW, "records")
        gate.mount(on_render)
        gate.unmount()

        await resolver.initialize(uuid4())

        on_render.assert_called_once_with(GateState.LOADING, None)
        assert gate.renders == [GateState.LOADING]

    @pytest.mark.asyncio
    async def test_ensure(self):
        resolver = make_resolver(["receptionist"], HOSPITAL)
        gate = AccessGate(resolver, Module.BILLING, Action.DELETE)

        with pytest.raises(AccessDenied):
            gate.ensure()

        await resolver.initialize(uuid4())

        with pytest.raises(AccessDenied) as exc_info:
            gate.ensure()
        assert exc_info.value.module is Module.BILLING
        assert exc_info.value.action is Action.DELETE
        assert "billing:delete" in str(exc_info.value)

        AccessGate(resolver, Module.APPOINTMENTS, Action.VIEW).ensure()

    def test_unknown_module_raises(self):
        resolver = make_resolver()

        with pytest.raises(ValueError):
            AccessGate(resolver, "cafeteria", Action.VIEW)
