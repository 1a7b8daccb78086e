"""Configuration Manager for Primo Connection Settings.

This module loads the Primo installation settings (base URL, link resolver,
view id, institution) from the environment or a JSON file and validates them
with Pydantic before use.

Architecture:
    - Infrastructure layer, isolated from domain
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime errors
"""

import json
import os
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from primo_client.domain.record import DEFAULT_INSTITUTION, DEFAULT_VID

logger = logging.getLogger(__name__)


class PrimoConfig(BaseModel):
    """Primo installation settings.

    Parameters:
        base_url: Base URL of the Primo application (e.g. 'http://primo.example.edu')
        resolver_base_url: Base URL of the OpenURL link resolver
        vid: Primo view id
        institution: Primo institution code
    """

    base_url: Optional[str] = Field(None, description="Base URL of the Primo application")
    resolver_base_url: Optional[str] = Field(None, description="Link resolver base URL")
    vid: str = Field(default=DEFAULT_VID, min_length=1, description="Primo view id")
    institution: str = Field(default=DEFAULT_INSTITUTION, min_length=1, description="Institution code")

    @field_validator("base_url", "resolver_base_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Require an http(s) URL and drop a trailing slash."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid URL (expected http or https): {v}")
        return v.rstrip("/")

    def record_defaults(self) -> Dict[str, Optional[str]]:
        """Parameters applied to record construction when the caller omits them."""
        return {
            "base_url": self.base_url,
            "resolver_base_url": self.resolver_base_url,
            "vid": self.vid,
            "institution": self.institution,
        }


class ConfigManager:
    """Configuration manager for Primo settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment().get_primo_config()

        # Load from file
        config = ConfigManager.from_file("primo.json").get_primo_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary with a 'primo' section
        """
        self._config_data = config_data
        self._primo_config: Optional[PrimoConfig] = None

    @classmethod
    def from_environment(cls) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - PRIMO_BASE_URL: Base URL of the Primo application
            - PRIMO_RESOLVER_BASE_URL: Link resolver base URL
            - PRIMO_VID: View id (default: DEFAULT)
            - PRIMO_INSTITUTION: Institution code (default: PRIMO)

        A .env file in the working directory is loaded first when present.
        """
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        config_data = {
            "primo": {
                "base_url": os.getenv("PRIMO_BASE_URL"),
                "resolver_base_url": os.getenv("PRIMO_RESOLVER_BASE_URL"),
                "vid": os.getenv("PRIMO_VID", DEFAULT_VID),
                "institution": os.getenv("PRIMO_INSTITUTION", DEFAULT_INSTITUTION),
            }
        }
        return cls(config_data)

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            json.JSONDecodeError: If the file is not valid JSON
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with open(path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
        if "primo" not in config_data:
            logger.warning(f"No 'primo' section in {config_path}; using defaults")
        return cls(config_data)

    def get_primo_config(self) -> PrimoConfig:
        """Get validated Primo configuration (cached after first call)."""
        if self._primo_config is None:
            self._primo_config = PrimoConfig(**self._config_data.get("primo", {}))
        return self._primo_config


def get_primo_config() -> PrimoConfig:
    """Convenience function to get Primo configuration from environment."""
    return ConfigManager.from_environment().get_primo_config()
