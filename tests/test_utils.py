"""
Tests for medgate.utils module.
"""

import httpx
import pytest
from unittest.mock import AsyncMock, Mock, patch

from loguru import logger

from medgate.errors import StoreUnavailable
from medgate.utils import enable_logging
from medgate.utils import logging as medgate_logging
from medgate.utils.supabase import MedgateSupabaseClient, execute


class TestMedgateSupabaseClient:
    """Tests for MedgateSupabaseClient class."""

    @pytest.mark.asyncio
    async def test_create_client(self, medgate_config):
        """Test creating a MedgateSupabaseClient."""
        with patch("medgate.utils.supabase.acreate_client", new_callable=AsyncMock) as mock_create:
            mock_client = AsyncMock()
            mock_create.return_value = mock_client

            client = await MedgateSupabaseClient.create(medgate_config)

            assert client.config == medgate_config
            assert client._client == mock_client
            mock_create.assert_called_once()
            assert mock_create.call_args.kwargs["supabase_url"] == "https://test.supabase.co"

    def test_table_method(self, mock_medgate_supabase_client):
        """Test table method."""
        query_builder = mock_medgate_supabase_client.table("role_permissions")
        assert query_builder is not None

    @pytest.mark.asyncio
    async def test_close_client(self, mock_medgate_supabase_client):
        """Test closing client."""
        # Should not raise
        await mock_medgate_supabase_client.close()


class TestExecute:
    """Tests for the execute helper."""

    @pytest.mark.asyncio
    async def test_execute_returns_response(self):
        query = Mock()
        query.execute = AsyncMock(return_value=Mock(data=[{"id": 1}]))

        response = await execute(query, "read")

        assert response.data == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_execute_maps_network_errors(self):
        query = Mock()
        query.execute = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(StoreUnavailable) as exc_info:
            await execute(query, "read")

        assert exc_info.value.operation == "read"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_execute_does_not_hide_programming_errors(self):
        query = Mock()
        query.execute = AsyncMock(side_effect=KeyError("oops"))

        with pytest.raises(KeyError):
            await execute(query, "read")


@pytest.fixture
def captured_logs():
    """Collect Medgate log messages, restoring the silent default afterwards."""
    messages = []
    enable_logging("DEBUG", sink=messages.append)
    yield messages
    logger.remove(medgate_logging._handler_id)
    medgate_logging._handler_id = None
    logger.disable("medgate")


class TestLogging:
    """Tests for the logging switches."""

    @pytest.mark.asyncio
    async def test_silent_by_default(self, medgate):
        messages = []
        handler_id = logger.add(messages.append, level="DEBUG")
        try:
            await medgate.permissions.get_permissions("janitor")
        finally:
            logger.remove(handler_id)

        assert not any("janitor" in message for message in messages)

    @pytest.mark.asyncio
    async def test_enable_logging(self, medgate, captured_logs):
        await medgate.permissions.get_permissions("janitor")

        assert any("janitor" in message for message in captured_logs)
