"""Test configuration management."""

from pathlib import Path
import tempfile

import pytest
import yaml
from pydantic import ValidationError

from tell.config import TellConfig, default_config_path, default_db_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials and overrides out of these tests."""
    for name in ("ANTHROPIC_API_KEY", "TELL_ANTHROPIC_API_KEY", "TELL_LLM_MODEL",
                 "TELL_VERBOSE", "TELL_HISTORY_LIMIT", "TELL_DB_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_config_defaults():
    """Test default configuration values."""
    config = TellConfig()

    assert config.anthropic_api_key is None
    assert config.llm_model == "claude-3-haiku-20240307"
    assert config.max_tokens == 1000
    assert config.temperature == 0.1
    assert config.verbose is False
    assert config.history_limit == 10
    assert "rg" in config.preferred_commands
    assert len(config.extra_instructions) == 2


def test_config_from_env(monkeypatch):
    """Test configuration loading from environment variables."""
    monkeypatch.setenv("TELL_LLM_MODEL", "claude-3-5-sonnet-20240620")
    monkeypatch.setenv("TELL_VERBOSE", "true")
    monkeypatch.setenv("TELL_HISTORY_LIMIT", "25")

    config = TellConfig()

    assert config.llm_model == "claude-3-5-sonnet-20240620"
    assert config.verbose is True
    assert config.history_limit == 25


def test_api_key_from_standard_env(monkeypatch):
    """Test that the standard Anthropic variable is honored."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-from-env")

    assert TellConfig().anthropic_api_key == "sk-ant-from-env"


def test_api_key_from_prefixed_env(monkeypatch):
    """Test the TELL_ prefixed variable."""
    monkeypatch.setenv("TELL_ANTHROPIC_API_KEY", "sk-ant-prefixed")

    assert TellConfig().anthropic_api_key == "sk-ant-prefixed"


def test_config_paths():
    """Test that config paths are set correctly."""
    config = TellConfig()

    assert isinstance(config.config_path, Path)
    assert config.config_path == default_config_path()
    assert config.config_path.name == "tell.yaml"

    assert isinstance(config.db_path, Path)
    assert config.db_path == default_db_path()
    assert config.db_path.name == "tell.db"


def test_invalid_values():
    """Test field validation."""
    with pytest.raises(ValidationError):
        TellConfig(max_tokens=0)

    with pytest.raises(ValidationError):
        TellConfig(temperature=1.5)

    with pytest.raises(ValidationError):
        TellConfig(history_limit=0)


@pytest.mark.parametrize(
    "api_key,expected",
    [
        (None, "<not set>"),
        ("", "<not set>"),
        ("short", "****"),
        ("sk-ant-1234567890wxyz", "sk-a...wxyz"),
    ],
)
def test_masked_api_key(api_key, expected):
    """Test that the API key is never shown in full."""
    assert TellConfig(anthropic_api_key=api_key).masked_api_key() == expected


def test_save_and_load_config():
    """Test saving and loading configuration from file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "nested" / "tell.yaml"

        config = TellConfig(
            anthropic_api_key="sk-ant-test",
            llm_model="claude-3-opus-20240229",
            preferred_commands=["fd"],
            history_limit=5,
            verbose=True,
            db_path=Path(tmpdir) / "history.db",
        )
        written = config.save_to_file(config_path)

        assert written == config_path
        assert config_path.exists()

        data = yaml.safe_load(config_path.read_text())
        assert "config_path" not in data
        assert "verbose" not in data
        assert data["db_path"] == str(Path(tmpdir) / "history.db")

        loaded = TellConfig.load_from_file(config_path)

        assert loaded.anthropic_api_key == "sk-ant-test"
        assert loaded.llm_model == "claude-3-opus-20240229"
        assert loaded.preferred_commands == ["fd"]
        assert loaded.history_limit == 5
        assert loaded.verbose is False
        assert loaded.config_path == config_path
        assert loaded.db_path == Path(tmpdir) / "history.db"


def test_load_nonexistent_config():
    """Test loading config when file doesn't exist."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "missing.yaml"

        config = TellConfig.load_from_file(config_path)

        assert config.config_path == config_path
        assert config.llm_model == "claude-3-haiku-20240307"


def test_load_empty_config():
    """Test that an empty file yields defaults."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "tell.yaml"
        config_path.write_text("")

        config = TellConfig.load_from_file(config_path)

        assert config.history_limit == 10


def test_load_invalid_config():
    """Test that invalid values in the file are rejected."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "tell.yaml"
        config_path.write_text("max_tokens: -5\n")

        with pytest.raises(ValidationError):
            TellConfig.load_from_file(config_path)
