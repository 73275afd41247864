"""
Environment-driven settings for the live bridge.

Settings are read once at startup and shared by reference across every session.
Nothing mutates them afterwards, so sessions can read them without coordination.
"""

import os
from pathlib import Path
from typing import Optional

import dotenv
from pydantic import BaseModel, ConfigDict, Field

from live_bridge.config.constants import (
    DEFAULT_DISCOVERY_URL,
    DEFAULT_LIVE_ENDPOINT,
    DEFAULT_OUTPUT_SAMPLE_RATE,
)

DEFAULT_SYSTEM_PREAMBLE = (
    "You are a helpful voice assistant. Keep answers brief and conversational."
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigurationError(ValueError):
    """Raised when a session cannot be configured: missing credential, model or endpoint."""


def load_env_file(path: str = ".env") -> None:
    """Load environment variables from a .env file if it exists."""
    env_path = Path(path)
    if env_path.exists():
        dotenv.load_dotenv(env_path)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_str(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


class Settings(BaseModel):
    """Read-only application configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    endpoint: str = DEFAULT_LIVE_ENDPOINT
    api_key: Optional[str] = None
    access_token: Optional[str] = None

    model: Optional[str] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=1024, gt=0)
    voice_name: Optional[str] = None
    system_preamble: str = DEFAULT_SYSTEM_PREAMBLE
    input_transcription: bool = True
    output_transcription: bool = True
    output_sample_rate: int = DEFAULT_OUTPUT_SAMPLE_RATE

    setup_timeout: float = Field(default=15.0, gt=0)
    discovery_url: str = DEFAULT_DISCOVERY_URL
    discovery_ttl: float = Field(default=300.0, ge=0)

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key or self.access_token)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        The system preamble comes from LIVE_SYSTEM_PREAMBLE, or from the file named by
        LIVE_SYSTEM_PREAMBLE_FILE, falling back to a short built-in preamble.

        Raises:
            ConfigurationError: If the preamble file cannot be read
        """
        preamble = _env_str("LIVE_SYSTEM_PREAMBLE")
        preamble_file = _env_str("LIVE_SYSTEM_PREAMBLE_FILE")
        if preamble is None and preamble_file:
            try:
                preamble = Path(preamble_file).read_text(encoding="utf-8").strip()
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot read system preamble file {preamble_file}: {e}"
                ) from e

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            endpoint=_env_str("LIVE_ENDPOINT") or DEFAULT_LIVE_ENDPOINT,
            api_key=_env_str("GEMINI_API_KEY") or _env_str("GOOGLE_API_KEY"),
            access_token=_env_str("GEMINI_ACCESS_TOKEN"),
            model=_env_str("LIVE_MODEL"),
            temperature=float(os.getenv("LIVE_TEMPERATURE", "0.7")),
            max_output_tokens=int(os.getenv("LIVE_MAX_OUTPUT_TOKENS", "1024")),
            voice_name=_env_str("LIVE_VOICE_NAME"),
            system_preamble=preamble or DEFAULT_SYSTEM_PREAMBLE,
            input_transcription=_env_flag("LIVE_INPUT_TRANSCRIPTION", True),
            output_transcription=_env_flag("LIVE_OUTPUT_TRANSCRIPTION", True),
            output_sample_rate=int(
                os.getenv("LIVE_OUTPUT_SAMPLE_RATE", str(DEFAULT_OUTPUT_SAMPLE_RATE))
            ),
            setup_timeout=float(os.getenv("LIVE_SETUP_TIMEOUT", "15")),
            discovery_url=_env_str("LIVE_DISCOVERY_URL") or DEFAULT_DISCOVERY_URL,
            discovery_ttl=float(os.getenv("LIVE_DISCOVERY_TTL", "300")),
        )
