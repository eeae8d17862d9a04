"""Tests for the pre-flight health checks."""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from autosave_engine.config import CosmosConfig, OpenAIConfig, ServiceBusConfig, Settings
from autosave_engine.health import HealthCheck, check_emulators, run_health_checks


def _settings(endpoint: str, *, openai: str = "", servicebus: str = "") -> Settings:
    return replace(
        Settings(),
        cosmos=CosmosConfig(endpoint=endpoint, key="k", database="autosave"),
        openai=OpenAIConfig(endpoint=openai, deployment="gpt-4o-mini", api_key=""),
        servicebus=ServiceBusConfig(connection_string=servicebus, topic_name="autosave-events"),
    )


def _patched_client(get: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.get = get
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


class TestCheckEmulators:
    """Test the emulator pre-flight gate."""

    async def test_missing_endpoint_fails(self) -> None:
        """Verify a missing endpoint is reported without any network call."""
        assert await check_emulators(_settings("")) is False

    async def test_hosted_endpoint_skips_network_call(self) -> None:
        """Verify hosted endpoints are trusted without a request."""
        with patch("autosave_engine.health.httpx.AsyncClient") as MockClient:
            assert await check_emulators(_settings("https://acct.documents.azure.com")) is True
        MockClient.assert_not_called()

    async def test_reachable_emulator_passes(self) -> None:
        """Verify a responding emulator passes the check."""
        get = AsyncMock()
        with patch("autosave_engine.health.httpx.AsyncClient", return_value=_patched_client(get)):
            assert await check_emulators(_settings("http://localhost:8081")) is True
        get.assert_awaited_once_with("http://localhost:8081/")

    async def test_unreachable_emulator_fails(self) -> None:
        """Verify a refused connection fails the check."""
        get = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("autosave_engine.health.httpx.AsyncClient", return_value=_patched_client(get)):
            assert await check_emulators(_settings("http://localhost:8081")) is False

    async def test_timed_out_emulator_fails(self) -> None:
        """Verify a hanging emulator counts as down."""
        get = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with patch("autosave_engine.health.httpx.AsyncClient", return_value=_patched_client(get)):
            assert await check_emulators(_settings("http://localhost:8081")) is False

    async def test_missing_optional_services_do_not_block(self) -> None:
        """Verify unset OpenAI and Service Bus settings only warn."""
        assert await check_emulators(_settings("https://acct.documents.azure.com")) is True


class TestRunHealthChecks:
    """Test the Run Health Checks."""

    async def test_reports_every_service(self) -> None:
        """Verify each service gets one result, cosmos first."""
        results = await run_health_checks(
            _settings(
                "https://acct.documents.azure.com",
                openai="https://oai.example.com",
                servicebus="",
            )
        )
        assert [check.name for check in results] == ["cosmos", "openai", "servicebus"]
        assert results[0] == HealthCheck("cosmos", ok=True, detail="hosted account")
        assert results[1].ok is True
        assert results[2].ok is False
        assert results[2].required is False
        assert "AZURE_SERVICEBUS_CONNECTION_STRING" in results[2].detail

    async def test_unreachable_emulator_detail_names_host(self) -> None:
        """Verify the failure detail names the emulator host."""
        get = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("autosave_engine.health.httpx.AsyncClient", return_value=_patched_client(get)):
            results = await run_health_checks(_settings("http://localhost:8081"))
        assert results[0].ok is False
        assert results[0].detail.endswith("localhost:8081")
