"""Configuration management for the dexflow order pipeline"""

import os
from dataclasses import dataclass, field

from loguru import logger

from dexflow.shared.constants import (
    BACKOFF_BASE_SECONDS,
    BUILD_DELAY_SECONDS,
    MAX_ATTEMPTS,
    QUOTE_DELAY_SECONDS,
    SETTLEMENT_FAILURE_RATE,
    SUPPORTED_ASSETS,
    WORKER_CONCURRENCY,
)
from dexflow.shared.exceptions import ConfigurationError


@dataclass
class VenueConfig:
    """Pricing parameters for one simulated venue"""

    # Price = base_price * bias * (1 + U(-spread, spread))
    base_price: float = 1.0
    bias: float = 1.0
    spread: float = 0.02
    fee: float = 0.003

    # When set, quotes are fetched over HTTP instead of simulated
    quote_api_url: str | None = None


@dataclass
class PipelineConfig:
    """Timing and failure parameters for order execution"""

    build_delay: float = BUILD_DELAY_SECONDS
    quote_delay: float = QUOTE_DELAY_SECONDS
    quote_timeout: float | None = 5.0
    settlement_timeout: float | None = 30.0
    settlement_delay_min: float = 2.0
    settlement_delay_max: float = 3.0
    settlement_failure_rate: float = SETTLEMENT_FAILURE_RATE


@dataclass
class DispatcherConfig:
    """Worker pool and retry policy"""

    concurrency: int = WORKER_CONCURRENCY
    max_attempts: int = MAX_ATTEMPTS
    backoff_base: float = BACKOFF_BASE_SECONDS


def _default_venue_a() -> VenueConfig:
    return VenueConfig(bias=1.0, spread=0.02, fee=0.003)


def _default_venue_b() -> VenueConfig:
    # 0.97 - 1.02 band around the base price
    return VenueConfig(bias=0.995, spread=0.025, fee=0.002)


def _env_timeout(name: str, default: float | None) -> float | None:
    """Read a timeout in seconds; "none" disables it"""
    raw = os.getenv(name)
    if raw is not None and raw.lower() == "none":
        return None
    return _env_float(name, default)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class Config:
    """Configuration for the order pipeline loaded from environment variables"""

    db_path: str = "data/dexflow.db"
    venue_a: VenueConfig = field(default_factory=_default_venue_a)
    venue_b: VenueConfig = field(default_factory=_default_venue_b)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    dispatcher: DispatcherConfig = field(default_factory=DispatcherConfig)
    supported_assets: frozenset[str] = SUPPORTED_ASSETS

    def validate(self) -> None:
        """Check value ranges

        Raises:
            ConfigurationError: If a value is out of range
        """
        if self.dispatcher.concurrency < 1:
            raise ConfigurationError("WORKER_CONCURRENCY must be at least 1")
        if self.dispatcher.max_attempts < 1:
            raise ConfigurationError("MAX_ATTEMPTS must be at least 1")
        if self.dispatcher.backoff_base <= 0:
            raise ConfigurationError("BACKOFF_BASE_SECONDS must be positive")
        if not 0 <= self.pipeline.settlement_failure_rate <= 1:
            raise ConfigurationError(
                "SETTLEMENT_FAILURE_RATE must be between 0 and 1"
            )
        if self.pipeline.build_delay < 0:
            raise ConfigurationError("BUILD_DELAY_SECONDS cannot be negative")
        if not self.supported_assets:
            raise ConfigurationError("SUPPORTED_ASSETS cannot be empty")

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables

        Returns:
            Config instance with values from environment

        Raises:
            ConfigurationError: If a variable is malformed or out of range
        """
        assets_env = os.getenv("SUPPORTED_ASSETS")
        supported_assets = (
            frozenset(a.strip().upper() for a in assets_env.split(",") if a.strip())
            if assets_env
            else SUPPORTED_ASSETS
        )

        venue_a = _default_venue_a()
        venue_a.quote_api_url = os.getenv("QUOTE_API_URL_A") or None
        venue_b = _default_venue_b()
        venue_b.quote_api_url = os.getenv("QUOTE_API_URL_B") or None

        config = cls(
            db_path=os.getenv("DB_PATH", "data/dexflow.db"),
            venue_a=venue_a,
            venue_b=venue_b,
            pipeline=PipelineConfig(
                build_delay=_env_float("BUILD_DELAY_SECONDS", BUILD_DELAY_SECONDS),
                quote_timeout=_env_timeout("QUOTE_TIMEOUT_SECONDS", 5.0),
                settlement_timeout=_env_timeout("SETTLEMENT_TIMEOUT_SECONDS", 30.0),
                settlement_failure_rate=_env_float(
                    "SETTLEMENT_FAILURE_RATE", SETTLEMENT_FAILURE_RATE
                ),
            ),
            dispatcher=DispatcherConfig(
                concurrency=_env_int("WORKER_CONCURRENCY", WORKER_CONCURRENCY),
                max_attempts=_env_int("MAX_ATTEMPTS", MAX_ATTEMPTS),
                backoff_base=_env_float("BACKOFF_BASE_SECONDS", BACKOFF_BASE_SECONDS),
            ),
            supported_assets=supported_assets,
        )
        config.validate()

        logger.info("Configuration loaded:")
        logger.info(f"  Database: {config.db_path}")
        logger.info(f"  Workers: {config.dispatcher.concurrency}")
        logger.info(
            f"  Retry: {config.dispatcher.max_attempts} attempts, "
            f"backoff base {config.dispatcher.backoff_base}s"
        )
        logger.info(
            f"  Settlement failure rate: {config.pipeline.settlement_failure_rate:.2%}"
        )
        for name, venue in (("A", venue_a), ("B", venue_b)):
            source = "simulated"
            if venue.quote_api_url:
                source = f"HTTP {venue.quote_api_url}"
            logger.info(f"  Venue {name}: {source}")
        logger.info(f"  Supported assets: {', '.join(sorted(config.supported_assets))}")

        return config
