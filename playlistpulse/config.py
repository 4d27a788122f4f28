"""Loads and validates the sync configuration from config.json.

The YouTube API key can be kept out of the file: when ``apiKey`` is empty it
is read from YOUTUBE_API_KEY (a local .env is loaded first).
"""

import json
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PLAYLISTPULSE_CONFIG"
API_KEY_ENV_VAR = "YOUTUBE_API_KEY"
DEFAULT_CONFIG_PATH = "config.json"

DEFAULT_BASE_URL = "https://www.googleapis.com/youtube/v3/playlistItems"


class Settings(BaseModel):
    """Sync settings, keyed by the camelCase names used in config.json."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, validate_default=True)

    api_key: str = Field(alias="apiKey", min_length=1)
    playlist_id: str = Field(alias="playlistId", min_length=1)
    dir_path: str = Field("", alias="dirPath")
    diff_file_name: str = Field("", alias="diffFileName")
    playlist_file_name: str = Field("", alias="playlistFileName")
    keep_history: bool = Field(False, alias="keepHistory")

    base_url: str = Field(DEFAULT_BASE_URL, alias="baseUrl")
    rate_limit_seconds: float = Field(0.5, alias="rateLimitSeconds", ge=0)
    max_pages: int = Field(0, alias="maxPages", ge=0)  # 0 = follow every page

    @field_validator("dir_path")
    @classmethod
    def _default_dir(cls, value: str) -> str:
        return value or os.getcwd()

    @field_validator("diff_file_name")
    @classmethod
    def _default_diff_name(cls, value: str) -> str:
        return value or "diff.json"

    @field_validator("playlist_file_name")
    @classmethod
    def _default_playlist_name(cls, value: str) -> str:
        return value or "playlist.json"

    def masked(self) -> dict:
        """Settings as a dict safe to log."""
        data = self.model_dump(by_alias=True)
        key = data["apiKey"]
        data["apiKey"] = key[:4] + "***" if len(key) > 8 else "***"
        return data


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from a JSON file.

    The path defaults to $PLAYLISTPULSE_CONFIG, then ./config.json.

    Raises:
        ValueError: the file is missing, is not valid JSON, or fails validation.
    """
    load_dotenv()

    config_path = path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    if not os.path.exists(config_path):
        raise ValueError(f"No config found at {config_path}")

    with open(config_path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config in {config_path} must be a JSON object")

    if not data.get("apiKey"):
        data["apiKey"] = os.environ.get(API_KEY_ENV_VAR, "")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config in {config_path}: {e}") from e

    logger.info("Config: %s", settings.masked())
    return settings
