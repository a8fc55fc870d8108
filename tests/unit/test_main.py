"""Tests for the stdio entry point."""

import os

import pytest
from unittest.mock import AsyncMock, patch

from linear_mcp import main as main_module


class TestMain:

    @patch("linear_mcp.main.configure_logging")
    def test_missing_api_key_exits(self, mock_configure):
        with patch.dict(os.environ, {"ENVIRONMENT": "test"}, clear=True):
            with pytest.raises(SystemExit) as exc_info:
                main_module.main()

        assert exc_info.value.code == 1
        mock_configure.assert_called_once()

    @patch("linear_mcp.main.configure_logging")
    @patch("linear_mcp.main.serve", new_callable=AsyncMock)
    def test_runs_server_with_settings(self, mock_serve, mock_configure):
        env = {
            "ENVIRONMENT": "test",
            "LINEAR_API_KEY": "lin_api_live",
            "LINEAR_API_URL": "http://localhost:4000/graphql",
        }
        with patch.dict(os.environ, env, clear=True):
            main_module.main()

        mock_serve.assert_awaited_once_with("lin_api_live", "http://localhost:4000/graphql")


@pytest.mark.asyncio
class TestServe:

    @patch("linear_mcp.main.close_http_client", new_callable=AsyncMock)
    @patch("linear_mcp.main.LinearMCPServer")
    async def test_closes_http_client(self, mock_server_cls, mock_close):
        mock_server_cls.return_value.run_stdio = AsyncMock(side_effect=RuntimeError("stdin closed"))

        with pytest.raises(RuntimeError):
            await main_module.serve("key", "https://api.linear.app/graphql")

        mock_close.assert_awaited_once()
        client, api_key = mock_server_cls.call_args.args
        assert client.api_url == "https://api.linear.app/graphql"
        assert api_key == "key"
