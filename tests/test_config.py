"""Tests for AppSettings, the SummarizerConfig record and ConfigStore.

Covers: defaults, env overrides, first-run default creation, save/load
round-trip, token persistence in clear text, and corrupt-file handling.
"""

from __future__ import annotations

import json
import stat
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from slack_summarizer.config import (
    DEFAULT_OPENAI_TOKEN,
    DEFAULT_SLACK_TOKEN,
    AppSettings,
    ConfigStore,
    SummarizerConfig,
    get_settings,
)
from slack_summarizer.errors import ConfigStoreError

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Clear get_settings lru_cache before each test."""
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


class TestAppSettings:
    """Verify where files live and how env vars override it."""

    def test_defaults_follow_xdg_config_home(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.delenv("SLACK_SUMMARIZER_CONFIG_DIR", raising=False)
        monkeypatch.delenv("SLACK_SUMMARIZER_CHANNELS_CACHE", raising=False)

        s = AppSettings(_env_file=None)  # type: ignore[call-arg]

        assert s.config_dir == tmp_path / "slack-summarizer"
        assert s.config_path == tmp_path / "slack-summarizer" / "config.json"
        assert s.channels_cache_path == tmp_path / "slack-summarizer" / "channels.json"
        assert s.log_level == "WARNING"
        assert s.log_json is False

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SLACK_SUMMARIZER_CONFIG_DIR", str(tmp_path / "cfg"))
        monkeypatch.setenv("SLACK_SUMMARIZER_CHANNELS_CACHE", str(tmp_path / "cache.json"))
        monkeypatch.setenv("SLACK_SUMMARIZER_LOG_JSON", "true")

        s = AppSettings(_env_file=None)  # type: ignore[call-arg]

        assert s.config_path == tmp_path / "cfg" / "config.json"
        assert s.channels_cache_path == tmp_path / "cache.json"
        assert s.log_json is True

    def test_log_level_is_normalized(self) -> None:
        s = AppSettings(_env_file=None, log_level="info")  # type: ignore[call-arg]

        assert s.log_level == "INFO"

    def test_unknown_log_level_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="log_level"):
            AppSettings(_env_file=None, log_level="verbose")  # type: ignore[call-arg]

    def test_get_settings_exits_on_invalid_env(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("SLACK_SUMMARIZER_LOG_JSON", "maybe")

        with pytest.raises(SystemExit) as exc_info:
            get_settings()

        assert exc_info.value.code == 1
        assert "invalid environment setting: SLACK_SUMMARIZER_LOG_JSON" in capsys.readouterr().err

    def test_get_settings_cached(self) -> None:
        assert get_settings() is get_settings()


# ---------------------------------------------------------------------------
# SummarizerConfig
# ---------------------------------------------------------------------------


class TestSummarizerConfig:
    def test_defaults_are_placeholders(self) -> None:
        config = SummarizerConfig()

        assert config.slack_token.get_secret_value() == DEFAULT_SLACK_TOKEN
        assert config.openai_token.get_secret_value() == DEFAULT_OPENAI_TOKEN
        assert config.request_url == "https://api.openai.com/v1/chat/completions"
        assert config.model == "gpt-4o-mini"
        assert config.max_tokens == 1000
        assert config.num_messages == 20
        assert config.slack_token_configured is False
        assert config.openai_token_configured is False

    def test_real_tokens_count_as_configured(self) -> None:
        config = SummarizerConfig(
            slack_token="xoxb-real",  # type: ignore[arg-type]
            openai_token="sk-real",  # type: ignore[arg-type]
        )

        assert config.slack_token_configured is True
        assert config.openai_token_configured is True

    def test_repr_hides_tokens(self) -> None:
        config = SummarizerConfig(slack_token="xoxb-secret")  # type: ignore[arg-type]

        assert "xoxb-secret" not in repr(config)

    def test_rejects_non_positive_counts(self) -> None:
        with pytest.raises(ValueError):
            SummarizerConfig(num_messages=0)


# ---------------------------------------------------------------------------
# ConfigStore
# ---------------------------------------------------------------------------


class TestConfigStore:
    def test_load_without_file_returns_and_stores_defaults(self, config_store: ConfigStore) -> None:
        config = config_store.load()

        assert config == SummarizerConfig()
        assert config_store.path.exists()

    def test_save_then_load_round_trips(self, config_store: ConfigStore) -> None:
        saved = SummarizerConfig(
            slack_token="xoxb-abc",  # type: ignore[arg-type]
            openai_token="sk-abc",  # type: ignore[arg-type]
            request_url="http://localhost:8080/v1/chat/completions",
            model="local-model",
            max_tokens=256,
            num_messages=5,
        )

        config_store.save(saved)

        assert config_store.load() == saved

    def test_tokens_written_in_clear(self, config_store: ConfigStore) -> None:
        config_store.save(SummarizerConfig(slack_token="xoxb-abc"))  # type: ignore[arg-type]

        data = json.loads(config_store.path.read_text())

        assert data["slack_token"] == "xoxb-abc"
        assert data["openai_token"] == DEFAULT_OPENAI_TOKEN

    def test_file_is_private(self, config_store: ConfigStore) -> None:
        config_store.save(SummarizerConfig())

        mode = stat.S_IMODE(config_store.path.stat().st_mode)

        assert mode == 0o600

    def test_save_overwrites_previous_record(self, config_store: ConfigStore) -> None:
        config_store.save(SummarizerConfig(model="first"))
        config_store.save(SummarizerConfig(model="second"))

        assert config_store.load().model == "second"
        assert not config_store.path.with_name("config.json.tmp").exists()

    def test_invalid_json_raises(self, config_store: ConfigStore) -> None:
        config_store.path.parent.mkdir(parents=True)
        config_store.path.write_text("{not json")

        with pytest.raises(ConfigStoreError, match="Invalid config file"):
            config_store.load()

    def test_invalid_field_raises_without_leaking_value(self, config_store: ConfigStore) -> None:
        config_store.path.parent.mkdir(parents=True)
        config_store.path.write_text(
            json.dumps({"slack_token": "xoxb-leak", "max_tokens": "lots"})
        )

        with pytest.raises(ConfigStoreError) as exc_info:
            config_store.load()

        assert "max_tokens" in str(exc_info.value)
        assert "xoxb-leak" not in str(exc_info.value)

    def test_missing_fields_take_defaults(self, config_store: ConfigStore) -> None:
        config_store.path.parent.mkdir(parents=True)
        config_store.path.write_text(json.dumps({"model": "gpt-4o"}))

        config = config_store.load()

        assert config.model == "gpt-4o"
        assert config.num_messages == 20

    def test_unwritable_location_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        store = ConfigStore(blocker / "config.json")

        with pytest.raises(ConfigStoreError, match="Cannot write"):
            store.save(SummarizerConfig())

    def test_undecodable_file_raises(self, config_store: ConfigStore) -> None:
        config_store.path.parent.mkdir(parents=True)
        config_store.path.write_bytes(b'{"model": "\xff"}')

        with pytest.raises(ConfigStoreError, match="Cannot read config file"):
            config_store.load()

    def test_temp_file_is_private_before_it_is_moved(self, config_store: ConfigStore) -> None:
        modes: list[int] = []
        real_replace = os.replace

        def record_mode(src: Path, dst: Path) -> None:
            modes.append(stat.S_IMODE(os.stat(src).st_mode))
            real_replace(src, dst)

        with patch("slack_summarizer.config.os.replace", side_effect=record_mode):
            config_store.save(SummarizerConfig())

        assert modes == [0o600]

    def test_stale_temp_file_does_not_keep_its_mode(self, config_store: ConfigStore) -> None:
        tmp_path = config_store.path.with_name("config.json.tmp")
        tmp_path.parent.mkdir(parents=True)
        tmp_path.write_text("stale")
        tmp_path.chmod(0o644)

        config_store.save(SummarizerConfig())

        assert stat.S_IMODE(config_store.path.stat().st_mode) == 0o600
        assert not tmp_path.exists()

    def test_failed_save_removes_temp_file(self, config_store: ConfigStore) -> None:
        with patch("slack_summarizer.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(ConfigStoreError, match="disk full"):
                config_store.save(SummarizerConfig())

        assert not config_store.path.with_name("config.json.tmp").exists()
        assert not config_store.path.exists()
