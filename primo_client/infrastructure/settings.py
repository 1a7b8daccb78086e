"""Application Settings.

This module provides package-wide settings read from the environment with
sensible defaults, and exposes the validated Primo connection config.
"""

import os
from typing import Optional

from primo_client.infrastructure.config_manager import ConfigManager, PrimoConfig

# Application metadata
APP_NAME = "primo-client"
APP_VERSION = "1.0.0"

# Default max XML nesting depth accepted from the service
DEFAULT_XML_MAX_DEPTH = 100


class Settings:
    """Package settings loaded from environment variables.

    Environment Variables:
        - PRIMO_LOG_LEVEL: Logging level (default: INFO)
        - PRIMO_LOG_JSON: Emit JSON log lines when 'true'
        - PRIMO_XML_MAX_DEPTH: Maximum XML nesting depth
    """

    def __init__(self):
        self._config_manager: Optional[ConfigManager] = None

        self.app_name = os.getenv("PRIMO_APP_NAME", APP_NAME)
        self.log_level = os.getenv("PRIMO_LOG_LEVEL", "INFO")
        self.log_json = os.getenv("PRIMO_LOG_JSON", "false").lower() == "true"
        self.xml_max_depth = int(os.getenv("PRIMO_XML_MAX_DEPTH", str(DEFAULT_XML_MAX_DEPTH)))

    @property
    def config_manager(self) -> ConfigManager:
        """Configuration manager, created lazily from the environment."""
        if self._config_manager is None:
            self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def primo_config(self) -> PrimoConfig:
        """Validated Primo connection settings."""
        return self.config_manager.get_primo_config()


# Global settings instance
settings = Settings()
