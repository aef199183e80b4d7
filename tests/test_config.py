"""Tests for settings resolution (environment, JSON config file)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ogparser.config import (
    DEFAULT_USER_AGENT,
    Settings,
    _default_settings,
    load_settings,
    parse_overrides,
)
from ogparser.exceptions import BootstrapError


class TestParseOverrides:
    def test_parses_pairs(self) -> None:
        assert parse_overrides("tumblr.com=Baiduspider, Example.org = Bot/1.0") == {
            "tumblr.com": "Baiduspider",
            "example.org": "Bot/1.0",
        }

    def test_blank_is_empty_table(self) -> None:
        assert parse_overrides("") == {}

    def test_missing_separator_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_overrides("tumblr.com")


class TestSettingsFromEnv:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in (
            "FETCH_TIMEOUT",
            "INDEX_TIMEOUT",
            "USER_AGENT",
            "USER_AGENT_OVERRIDES",
            "SCRAPE_WINDOW_MINUTES",
            "SCHEDULE_INTERVAL",
            "MAX_CONCURRENT_FETCHES",
        ):
            monkeypatch.delenv(var, raising=False)

        cfg = Settings()

        assert cfg.fetch_timeout == 10.0
        assert cfg.index_timeout == 10.0
        assert cfg.user_agent == DEFAULT_USER_AGENT
        assert cfg.user_agent_overrides == {"tumblr.com": "Baiduspider"}
        assert cfg.scrape_window_minutes == 60
        assert cfg.schedule_interval == 420.0
        assert cfg.worker_limit is None

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("OGPARSER_DB_PATH", str(tmp_path / "x.db"))
        monkeypatch.setenv("USER_AGENT_OVERRIDES", "medium.com=Googlebot")
        monkeypatch.setenv("MAX_CONCURRENT_FETCHES", "4")

        cfg = Settings()

        assert cfg.db_path == tmp_path / "x.db"
        assert cfg.user_agent_overrides == {"medium.com": "Googlebot"}
        assert cfg.worker_limit == 4

    def test_schema_path_is_bundled(self) -> None:
        assert Settings().schema_path.is_file()


class TestLoadSettings:
    def test_without_file_uses_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SOLR_URL", "http://env-solr/solr/posts")
        assert load_settings().solr_url == "http://env-solr/solr/posts"

    def test_json_file_layered_on_top(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "db": {"path": str(tmp_path / "file.db")},
                    "solr": "http://solr:8983/solr/posts",
                    "fetch_timeout": 5,
                    "user_agent_overrides": {"Tumblr.com": "Baiduspider", "x.com": "Bot"},
                }
            ),
            encoding="utf-8",
        )

        cfg = load_settings(path)

        assert cfg.db_path == tmp_path / "file.db"
        assert cfg.solr_url == "http://solr:8983/solr/posts"
        assert cfg.fetch_timeout == 5
        assert cfg.user_agent_overrides == {"tumblr.com": "Baiduspider", "x.com": "Bot"}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(BootstrapError, match="reading config file"):
            load_settings(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(BootstrapError, match="parsing json"):
            load_settings(path)

    def test_non_object_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(BootstrapError):
            load_settings(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"colour": "blue"}), encoding="utf-8")
        with pytest.raises(BootstrapError, match="unknown config key"):
            load_settings(path)

    def test_bad_environment_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCH_TIMEOUT", "soon")
        with pytest.raises(BootstrapError, match="invalid environment"):
            load_settings()

    def test_bad_environment_names_the_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_CONCURRENT_FETCHES", "lots")
        with pytest.raises(BootstrapError, match="MAX_CONCURRENT_FETCHES"):
            load_settings()

    def test_numeric_strings_in_file_are_converted(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps({"max_concurrent_fetches": "4", "fetch_timeout": "2.5"}),
            encoding="utf-8",
        )

        cfg = load_settings(path)

        assert cfg.max_concurrent_fetches == 4
        assert cfg.worker_limit == 4
        assert cfg.fetch_timeout == 2.5

    @pytest.mark.parametrize(
        "data",
        [
            {"max_concurrent_fetches": "four"},
            {"fetch_timeout": [10]},
            {"fetch_timeout": -1},
            {"scrape_window_minutes": True},
            {"user_agent": 7},
            {"user_agent_overrides": ["tumblr.com"]},
            {"db": {"path": 3}},
        ],
    )
    def test_wrongly_typed_file_value(self, tmp_path: Path, data: dict) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(BootstrapError, match="invalid value for config key"):
            load_settings(path)


class TestDefaultSettings:
    def test_bad_environment_falls_back_to_builtin_defaults(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FETCH_TIMEOUT", "abc")
        monkeypatch.setenv("USER_AGENT", "custom")

        cfg = _default_settings()

        assert cfg.fetch_timeout == 10.0
        assert cfg.user_agent == DEFAULT_USER_AGENT
        assert cfg.user_agent_overrides == {"tumblr.com": "Baiduspider"}

    def test_builtin_override_table_is_not_shared(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCH_TIMEOUT", "abc")
        first = _default_settings()
        first.user_agent_overrides["x.com"] = "Bot"
        assert "x.com" not in _default_settings().user_agent_overrides

    def test_valid_environment_is_used(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCH_TIMEOUT", "3")
        assert _default_settings().fetch_timeout == 3.0
