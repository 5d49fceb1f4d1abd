"""Runtime configuration loaded from environment variables.

Settings are read from the environment with sensible defaults. For local
development, create a .env file in the project root.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings

from registro_formazione.models import ExclusionWindow


class RegistroConfig(BaseSettings):
    """Extraction API, lunch break, Word template paths and logging settings."""

    # Google Gemini (extraction oracle)
    gemini_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Google Gemini API key",
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model used for structured extraction",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST API base URL",
    )
    request_timeout_seconds: int = Field(
        default=120,
        description="Timeout for a single extraction request",
    )
    max_retries: int = Field(
        default=3,
        description="Attempts per extraction on transient API errors",
    )

    # Break excluded from the hourly register
    lunch_break_start: str = Field(default="13:00", description="Lunch break start (HH:MM)")
    lunch_break_end: str = Field(default="14:00", description="Lunch break end (HH:MM)")

    # Word templates filled with {{KEY}} placeholders; unset means not produced
    registro_id_template: Optional[Path] = Field(
        default=None,
        description="Registro presenza ID .docx template",
    )
    verbale_ammissione_template: Optional[Path] = Field(
        default=None,
        description="Verbale di ammissione esame .docx template",
    )
    attestato_template: Optional[Path] = Field(
        default=None,
        description="Per-participant Verbale Finale .docx template",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def lunch_break(self) -> ExclusionWindow:
        """Lunch break as an exclusion window.

        Raises:
            pydantic.ValidationError: If the configured times are malformed.
        """
        return ExclusionWindow(start=self.lunch_break_start, end=self.lunch_break_end)


# Singleton pattern
_config: RegistroConfig | None = None


def get_config() -> RegistroConfig:
    """Get the configuration singleton.

    Returns:
        RegistroConfig: Configuration instance
    """
    global _config
    if _config is None:
        _config = RegistroConfig()
    return _config
