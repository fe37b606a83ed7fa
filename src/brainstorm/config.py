"""
Configuration management for the Brainstorm telemetry client.
"""

import os
from dataclasses import dataclass


@dataclass
class Config:
    """Main configuration class."""

    # Page origin the websocket endpoint is derived from
    origin: str = "http://localhost:3333"

    # Transport configuration
    reconnect_delay_ms: int = 1000

    # Capture configuration
    input_debounce_ms: int = 500

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        return cls(
            origin=os.getenv("BRAINSTORM_ORIGIN", "http://localhost:3333"),
            log_level=os.getenv("BRAINSTORM_LOG_LEVEL", "WARNING"),
        )


# Global config instance
config = Config.from_env()
