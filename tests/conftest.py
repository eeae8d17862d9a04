"""Shared fixtures for auto-save engine tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from autosave_engine.config import AutoSavePolicy, OpenAIConfig


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def policy() -> AutoSavePolicy:
    """Default heuristics with millisecond timers for fast tests."""
    return AutoSavePolicy(
        realtime_interval_ms=10,
        conservative_interval_ms=10000,
        adaptive_default_interval_ms=5000,
        min_interval_ms=2000,
        max_interval_ms=15000,
        burst_interval_ms=3000,
        continuous_interval_ms=8000,
        mixed_interval_ms=5000,
        fast_speed_wpm=40.0,
        slow_speed_wpm=20.0,
        fast_speed_scale=0.8,
        slow_speed_scale=1.2,
        frequent_scale=0.7,
        minimal_scale=1.5,
        pause_threshold_s=5.0,
        min_session_s=30.0,
        burst_pause_period_s=30.0,
        continuous_pause_period_s=120.0,
        frequent_save_gap_s=5.0,
        minimal_save_gap_s=20.0,
        version_interval_s=900.0,
        min_version_delta=50,
        max_versions=50,
        retention_days=90,
        persistence_timeout_s=1.0,
        max_attempts=3,
        backoff_base_ms=1000,
        backoff_cap_ms=5000,
        realtime_change_words=5,
        conservative_change_words=50,
        adaptive_change_words=20,
        burst_trigger_words=10,
        title_timeout_s=1.0,
        placeholder_title="New Note",
    )


@pytest.fixture
def documents() -> AsyncMock:
    """Document store that owns everything for user-1 and creates doc-1."""
    store = AsyncMock()
    store.get_owner.return_value = "user-1"
    store.create.return_value = "doc-1"
    store.update.return_value = None
    return store


@pytest.fixture
def versions() -> AsyncMock:
    store = AsyncMock()
    store.next_version_number.return_value = 1
    store.create_version.return_value = None
    store.prune.return_value = 0
    return store


@pytest.fixture
def patterns() -> AsyncMock:
    store = AsyncMock()
    store.load.return_value = None
    store.save.return_value = None
    return store


@pytest.fixture
def events() -> MagicMock:
    publisher = MagicMock()
    publisher.publish = AsyncMock()
    return publisher


@pytest.fixture
def openai_config() -> OpenAIConfig:
    return OpenAIConfig(
        endpoint="https://oai.example.com",
        deployment="gpt-4o-mini",
        api_key="",
    )
