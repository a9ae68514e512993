"""Settings for fetching the reference page and writing the endpoint table.

Defaults live in module constants; a YAML file can override any of them.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

REFERENCE_URL = "https://dev.twitch.tv/docs/api/reference"
HELIX_BASE_URL = "https://api.twitch.tv/helix/"
CACHE_FILE = ".cache.twitch-reference.html"
OUTPUT_FILE = "endpoints.csv"
DEFAULT_TIMEOUT = 30.0

CONFIG_ENV = "HELIX_ENDPOINTS_CONFIG"


class ConfigError(Exception):
    """Raised when a config file cannot be read or has invalid values."""


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reference_url: str = REFERENCE_URL
    helix_base_url: str = HELIX_BASE_URL
    cache_path: Path = Path(CACHE_FILE)
    output_path: Path = Path(OUTPUT_FILE)
    timeout: float = DEFAULT_TIMEOUT


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a YAML file, falling back to $HELIX_ENDPOINTS_CONFIG.

    With no file at all, the defaults are returned.
    """
    if path is None and os.getenv(CONFIG_ENV):
        path = Path(os.environ[CONFIG_ENV])
    if path is None:
        return Settings()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
