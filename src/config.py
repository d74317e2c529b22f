"""
Configuration module for the Pet reconciler.

Loads configuration from environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_SERVER_URL = "http://localhost:8080/api/v3"


@dataclass
class PetstoreConfig:
    """Pet store endpoint configuration."""

    server_url: str = DEFAULT_SERVER_URL

    def __post_init__(self):
        self.server_url = self.server_url.rstrip("/")

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(server_url=os.getenv("PETSTORE_SERVER_URL", DEFAULT_SERVER_URL))


@dataclass
class ControllerConfig:
    """Reconciliation loop configuration."""

    reconcile_interval: int = 60  # seconds
    max_concurrent_reconciles: int = 5
    requeue_delay: int = 30  # seconds, suggested for retryable failures

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            reconcile_interval=int(os.getenv("RECONCILE_INTERVAL", "60")),
            max_concurrent_reconciles=int(os.getenv("MAX_CONCURRENT_RECONCILES", "5")),
            requeue_delay=int(os.getenv("REQUEUE_DELAY", "30")),
        )


@dataclass
class Config:
    """Main configuration object."""

    petstore: PetstoreConfig
    controller: ControllerConfig
    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            petstore=PetstoreConfig.from_env(),
            controller=ControllerConfig.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @classmethod
    def default(cls):
        """Return default configuration."""
        return cls(petstore=PetstoreConfig(), controller=ControllerConfig())


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
