"""Environment-driven configuration for the auto-save engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


def _env(key: str, default: str = "") -> str:
    """Read an environment variable, falling back to ``default``."""
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    return int(raw) if raw else default


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    return float(raw) if raw else default


@dataclass(frozen=True)
class CosmosConfig:
    """Cosmos DB connection settings for documents, versions and patterns."""

    endpoint: str = field(default_factory=lambda: _env("COSMOS_ENDPOINT"))
    key: str = field(default_factory=lambda: _env("COSMOS_KEY"))
    database: str = field(default_factory=lambda: _env("COSMOS_DATABASE", "autosave"))


@dataclass(frozen=True)
class OpenAIConfig:
    """Azure OpenAI deployment used for title generation."""

    endpoint: str = field(default_factory=lambda: _env("AZURE_OPENAI_ENDPOINT"))
    deployment: str = field(default_factory=lambda: _env("AZURE_OPENAI_DEPLOYMENT"))
    api_key: str = field(default_factory=lambda: _env("AZURE_OPENAI_API_KEY"))

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint and self.deployment)


@dataclass(frozen=True)
class ServiceBusConfig:
    """Service Bus topic receiving save telemetry events."""

    connection_string: str = field(
        default_factory=lambda: _env("AZURE_SERVICEBUS_CONNECTION_STRING")
    )
    topic_name: str = field(
        default_factory=lambda: _env("AZURE_SERVICEBUS_TOPIC", "autosave-events")
    )
    message_ttl_s: int = field(
        default_factory=lambda: _env_int("AZURE_SERVICEBUS_MESSAGE_TTL_S", 86400)
    )


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@dataclass(frozen=True)
class AutoSavePolicy:
    """Heuristic thresholds that drive scheduling, learning and versioning.

    Intervals are in milliseconds, durations and gaps in seconds. Every value
    can be overridden through an ``AUTOSAVE_*`` environment variable or by
    passing it explicitly.
    """

    # Fixed save-frequency modes
    realtime_interval_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_REALTIME_INTERVAL_MS", 2000)
    )
    conservative_interval_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_CONSERVATIVE_INTERVAL_MS", 10000)
    )

    # Words changed since the last save that trigger an immediate save
    realtime_change_words: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_REALTIME_CHANGE_WORDS", 5)
    )
    conservative_change_words: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_CONSERVATIVE_CHANGE_WORDS", 50)
    )
    adaptive_change_words: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_ADAPTIVE_CHANGE_WORDS", 20)
    )
    burst_trigger_words: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_BURST_TRIGGER_WORDS", 10)
    )

    # Adaptive mode
    adaptive_default_interval_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_ADAPTIVE_DEFAULT_MS", 5000)
    )
    min_interval_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_MIN_INTERVAL_MS", 2000)
    )
    max_interval_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_MAX_INTERVAL_MS", 15000)
    )
    burst_interval_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_BURST_INTERVAL_MS", 3000)
    )
    continuous_interval_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_CONTINUOUS_INTERVAL_MS", 8000)
    )
    mixed_interval_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_MIXED_INTERVAL_MS", 5000)
    )
    fast_speed_wpm: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_FAST_SPEED_WPM", 40.0)
    )
    slow_speed_wpm: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_SLOW_SPEED_WPM", 20.0)
    )
    fast_speed_scale: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_FAST_SPEED_SCALE", 0.8)
    )
    slow_speed_scale: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_SLOW_SPEED_SCALE", 1.2)
    )
    frequent_scale: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_FREQUENT_SCALE", 0.7)
    )
    minimal_scale: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_MINIMAL_SCALE", 1.5)
    )

    # Pattern learning
    pause_threshold_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_PAUSE_THRESHOLD_S", 5.0)
    )
    min_session_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_MIN_SESSION_S", 30.0)
    )
    burst_pause_period_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_BURST_PAUSE_PERIOD_S", 30.0)
    )
    continuous_pause_period_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_CONTINUOUS_PAUSE_PERIOD_S", 120.0)
    )
    frequent_save_gap_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_FREQUENT_SAVE_GAP_S", 5.0)
    )
    minimal_save_gap_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_MINIMAL_SAVE_GAP_S", 20.0)
    )

    # Versioning
    version_interval_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_VERSION_INTERVAL_S", 900.0)
    )
    min_version_delta: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_MIN_VERSION_DELTA", 50)
    )
    max_versions: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_MAX_VERSIONS", 50)
    )
    retention_days: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_RETENTION_DAYS", 90)
    )

    # Persistence
    persistence_timeout_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_PERSISTENCE_TIMEOUT_S", 10.0)
    )
    max_attempts: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_MAX_ATTEMPTS", 3)
    )
    backoff_base_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_BACKOFF_BASE_MS", 1000)
    )
    backoff_cap_ms: int = field(
        default_factory=lambda: _env_int("AUTOSAVE_BACKOFF_CAP_MS", 5000)
    )

    # Titles
    title_timeout_s: float = field(
        default_factory=lambda: _env_float("AUTOSAVE_TITLE_TIMEOUT_S", 10.0)
    )
    placeholder_title: str = field(
        default_factory=lambda: _env("AUTOSAVE_PLACEHOLDER_TITLE", "New Note")
    )


@dataclass(frozen=True)
class Settings:
    cosmos: CosmosConfig = field(default_factory=CosmosConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    servicebus: ServiceBusConfig = field(default_factory=ServiceBusConfig)
    app: AppConfig = field(default_factory=AppConfig)
    policy: AutoSavePolicy = field(default_factory=AutoSavePolicy)


def load_settings() -> Settings:
    """Load ``.env`` (if present) and build the settings tree."""
    load_dotenv()
    return Settings()
