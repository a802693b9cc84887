"""
Pytest configuration and fixtures for Medgate tests.

Provides mock Supabase client and test fixtures.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from medgate.client import Medgate
from medgate.config import MedgateConfig
from medgate.utils.supabase import MedgateSupabaseClient


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    client = AsyncMock()

    auth_client = AsyncMock()
    client.auth = auth_client

    # Store query builders by table name so we can configure them
    query_builders = {}

    def table_mock(table_name: str):
        if table_name not in query_builders:
            query_builder = Mock()
            # Make all methods return self for chaining
            for method in ("select", "insert", "update", "delete", "eq", "in_", "order", "limit"):
                setattr(query_builder, method, Mock(return_value=query_builder))
            # Default execute returns empty result
            query_builder.execute = AsyncMock(return_value=Mock(data=[], count=0))
            query_builders[table_name] = query_builder
        return query_builders[table_name]

    client.table = Mock(side_effect=table_mock)
    client._query_builders = query_builders

    return client


@pytest.fixture
def medgate_config():
    """Create a test MedgateConfig."""
    return MedgateConfig(
        supabase_url="https://test.supabase.co",
        supabase_key="test-service-key-12345678901234567890",
        db_schema="public",
    )


@pytest.fixture
def mock_medgate_supabase_client(mock_supabase_client, medgate_config):
    """Create a mock MedgateSupabaseClient."""
    return MedgateSupabaseClient(config=medgate_config, client=mock_supabase_client)


@pytest.fixture
def medgate(mock_medgate_supabase_client, medgate_config):
    """Create a test Medgate instance."""
    return Medgate(config=medgate_config, client=mock_medgate_supabase_client)


def result(data: Optional[List[Dict[str, Any]]] = None) -> Mock:
    """Build a PostgREST-like response."""
    data = [] if data is None else data
    return Mock(data=data, count=len(data))


def setup_table_mock(medgate, table_name, *results):
    """
    Configure what execute() returns for a table.

    Args:
        medgate: Medgate instance
        table_name: Name of the table
        *results: One result for every call, or a sequence consumed call by call
    """
    query_builder = medgate.client.table(table_name)
    if len(results) == 1:
        query_builder.execute = AsyncMock(return_value=results[0])
    else:
        query_builder.execute = AsyncMock(side_effect=list(results))
    return query_builder


def permission_row(role: str, module: str, **flags: bool) -> Dict[str, Any]:
    """Create a role_permissions row; flags are view/create/edit/delete."""
    now = datetime.now(timezone.utc).isoformat()
    return {
        "id": str(uuid4()),
        "role": role,
        "module": module,
        "can_view": flags.get("view", False),
        "can_create": flags.get("create", False),
        "can_edit": flags.get("edit", False),
        "can_delete": flags.get("delete", False),
        "created_at": now,
        "updated_at": now,
    }


def role_rows(*roles: str) -> List[Dict[str, Any]]:
    """Create user_roles rows as returned by select("role")."""
    return [{"role": role} for role in roles]


@pytest.fixture
def sample_user_id():
    """Generate a sample user UUID."""
    return uuid4()


@pytest.fixture
def receptionist_rows():
    """Receptionist may view and create appointments."""
    return [permission_row("receptionist", "appointments", view=True, create=True)]
