"""Pre-flight health checks for the services the engine talks to."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import httpx

if TYPE_CHECKING:
    from autosave_engine.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthCheck:
    """Outcome of one pre-flight check. Optional checks never block startup."""

    name: str
    ok: bool
    detail: str = ""
    required: bool = True


async def _check_cosmos(settings: Settings) -> HealthCheck:
    url = settings.cosmos.endpoint
    if not url:
        return HealthCheck(
            "cosmos",
            ok=False,
            detail="COSMOS_ENDPOINT is not set — add it to .env",
        )
    if url.startswith("https://"):
        return HealthCheck("cosmos", ok=True, detail="hosted account")

    # Any HTTP response means the emulator is listening.
    async with httpx.AsyncClient(timeout=3) as client:
        try:
            await client.get(f"{url.rstrip('/')}/")
        except (httpx.ConnectError, httpx.TimeoutException):
            netloc = urlparse(url).netloc
            return HealthCheck(
                "cosmos", ok=False, detail=f"Cosmos DB emulator is not running at {netloc}"
            )
    return HealthCheck("cosmos", ok=True, detail="emulator reachable")


def _configured(name: str, value: str, missing: str) -> HealthCheck:
    if value:
        return HealthCheck(name, ok=True, detail="configured", required=False)
    return HealthCheck(name, ok=False, detail=missing, required=False)


def _check_optional(settings: Settings) -> list[HealthCheck]:
    return [
        _configured(
            "openai",
            settings.openai.endpoint,
            "AZURE_OPENAI_ENDPOINT is not set — titles fall back to the placeholder",
        ),
        _configured(
            "servicebus",
            settings.servicebus.connection_string,
            "AZURE_SERVICEBUS_CONNECTION_STRING is not set — events are not published",
        ),
    ]


async def run_health_checks(settings: Settings) -> list[HealthCheck]:
    """Run every pre-flight check and return the results in a stable order."""
    return [await _check_cosmos(settings), *_check_optional(settings)]


async def check_emulators(settings: Settings) -> bool:
    """Log the pre-flight results. Return False if a required service is down."""
    results = await run_health_checks(settings)
    failed = [check for check in results if check.required and not check.ok]
    for check in results:
        if check.ok:
            logger.debug("Health check %s passed — %s", check.name, check.detail)
        elif check.required:
            logger.error(check.detail)
        else:
            logger.warning(check.detail)

    if failed:
        logger.error("Start the emulator with: docker compose up -d")
        return False
    return True
