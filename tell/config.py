"""Configuration management for TELL using Pydantic Settings.

Loads configuration from environment variables and YAML config files.
Default locations:
  - Config: ~/.config/tell-llm/tell.yaml
  - History database: ~/.local/share/tell-llm/tell.db
"""

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from platformdirs import user_config_dir, user_data_dir


APP_NAME = "tell-llm"

DEFAULT_PREFERRED_COMMANDS = ["rg", "fd", "find", "grep", "awk", "sed"]

DEFAULT_EXTRA_INSTRUCTIONS = [
    "Prefer using modern alternatives like ripgrep (rg) instead of grep when available",
    "For Python projects, recommend using uv for package management",
]


def default_config_path() -> Path:
    """Return the default YAML config file path."""
    return Path(user_config_dir(APP_NAME, appauthor=False)) / "tell.yaml"


def default_db_path() -> Path:
    """Return the default SQLite history database path."""
    return Path(user_data_dir(APP_NAME, appauthor=False)) / "tell.db"


class TellConfig(BaseSettings):
    """Main configuration class for TELL.

    Configuration is loaded from:
    1. Explicit keyword arguments (the YAML file feeds these)
    2. Environment variables
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="TELL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Settings
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key",
        validation_alias=AliasChoices(
            "anthropic_api_key", "TELL_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"
        ),
    )

    llm_model: str = Field(
        default="claude-3-haiku-20240307",
        description="Model used for command generation"
    )

    max_tokens: int = Field(
        default=1000,
        gt=0,
        description="Maximum tokens the model may generate per request"
    )

    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Sampling temperature"
    )

    # Prompt Settings
    preferred_commands: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PREFERRED_COMMANDS),
        description="Commands the model should prefer when applicable"
    )

    extra_instructions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTRA_INSTRUCTIONS),
        description="Additional guidelines appended to the system prompt"
    )

    # Application Settings
    verbose: bool = Field(
        default=False,
        description="Enable verbose logging to stderr"
    )

    history_limit: int = Field(
        default=10,
        ge=1,
        description="Default number of history entries to show"
    )

    config_path: Optional[Path] = Field(
        default=None,
        description="Custom config file path"
    )

    # Database Settings
    db_path: Optional[Path] = Field(
        default=None,
        description="Path to SQLite database file"
    )

    def __init__(self, **kwargs):
        """Initialize configuration with default paths."""
        super().__init__(**kwargs)

        if self.config_path is None:
            self.config_path = default_config_path()

        if self.db_path is None:
            self.db_path = default_db_path()

    def masked_api_key(self) -> str:
        """Return the API key with all but its edges hidden.

        Returns:
            Masked key, "****" for short keys, or "<not set>"
        """
        api_key = self.anthropic_api_key
        if not api_key:
            return "<not set>"
        if len(api_key) > 8:
            return f"{api_key[:4]}...{api_key[-4:]}"
        return "****"

    @classmethod
    def load_from_file(cls, config_path: Optional[Path] = None) -> "TellConfig":
        """Load configuration from YAML file.

        Args:
            config_path: Optional custom config file path

        Returns:
            TellConfig instance with loaded settings, or defaults when the
            file does not exist
        """
        import yaml

        if config_path is None:
            config_path = default_config_path()

        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            data.pop("config_path", None)
            return cls(config_path=config_path, **data)

        return cls(config_path=config_path)

    def save_to_file(self, config_path: Optional[Path] = None) -> Path:
        """Save configuration to YAML file.

        Args:
            config_path: Optional custom config file path

        Returns:
            Path the configuration was written to
        """
        import yaml

        if config_path is None:
            config_path = self.config_path

        config_path.parent.mkdir(parents=True, exist_ok=True)

        # Paths and runtime-only flags are not part of the file
        data = self.model_dump(
            exclude_none=True,
            exclude={"config_path", "verbose"},
        )

        for key, value in data.items():
            if isinstance(value, Path):
                data[key] = str(value)

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        return config_path
