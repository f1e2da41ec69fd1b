"""
Configuration management.
"""

import os
from dataclasses import dataclass, field


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    cache_ttl_seconds: int = field(
        default_factory=lambda: int(os.getenv("CACHE_TTL_SECONDS", str(24 * 60 * 60)))
    )

    # Market aggregation
    trend_years: int = field(default_factory=lambda: int(os.getenv("TREND_YEARS", "5")))
    rolling_window_months: int = field(
        default_factory=lambda: int(os.getenv("ROLLING_WINDOW_MONTHS", "12"))
    )

    def __post_init__(self):
        if self.cache_ttl_seconds <= 0:
            raise ValueError("CACHE_TTL_SECONDS must be positive")
        if self.trend_years < 1:
            raise ValueError("TREND_YEARS must be at least 1")

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "data_dir": self.data_dir,
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "trend_years": self.trend_years,
            "rolling_window_months": self.rolling_window_months,
        }
