"""Tests for config loading, validation, and env var overrides."""

from pathlib import Path

import pytest

from revdiff.config.defaults import DEFAULT_TOML
from revdiff.config.loader import ConfigError, load_config


class TestConfigLoading:
    def test_default_config(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert cfg.api.base_url == ""
        assert cfg.git.fetch_on_missing_commit is True
        assert cfg.repositories == {}
        assert cfg.output.format == "terminal"
        assert cfg.logging.level == "WARNING"

    def test_custom_toml(self, tmp_path: Path):
        toml_path = tmp_path / ".revdiff.toml"
        toml_path.write_text(
            'version = "1.0"\n'
            '[api]\n'
            'base_url = "https://reviews.example.com/api"\n'
            'timeout = 3.5\n'
            '[git]\n'
            'fetch_on_missing_commit = false\n'
            '[repositories]\n'
            'repo1 = "/work/repo1"\n'
            '[logging]\n'
            'level = "debug"\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.api.base_url == "https://reviews.example.com/api"
        assert cfg.api.timeout == 3.5
        assert cfg.git.fetch_on_missing_commit is False
        assert cfg.repositories == {"repo1": "/work/repo1"}
        assert cfg.logging.level == "DEBUG"

    def test_starter_template_loads(self, tmp_path: Path):
        (tmp_path / ".revdiff.toml").write_text(DEFAULT_TOML)
        cfg = load_config(tmp_path)
        assert cfg.git.timeout == 30
        assert cfg.output.format == "terminal"

    def test_unknown_keys_ignored(self, tmp_path: Path):
        (tmp_path / ".revdiff.toml").write_text('[api]\nbase_url = "x"\nretries = 3\n')
        assert load_config(tmp_path).api.base_url == "x"

    def test_config_override_path(self, tmp_path: Path):
        custom = tmp_path / "custom.toml"
        custom.write_text('[output]\nformat = "json"\n')
        cfg = load_config(tmp_path, config_override=str(custom))
        assert cfg.output.format == "json"

    def test_missing_override_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(tmp_path, config_override="/nonexistent/config.toml")

    def test_invalid_toml_raises(self, tmp_path: Path):
        bad_toml = tmp_path / ".revdiff.toml"
        bad_toml.write_text("this is not valid [toml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_invalid_format_raises(self, tmp_path: Path):
        (tmp_path / ".revdiff.toml").write_text('[output]\nformat = "xml"\n')
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_invalid_log_level_raises(self, tmp_path: Path):
        (tmp_path / ".revdiff.toml").write_text('[logging]\nlevel = "chatty"\n')
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_repositories_must_be_table(self, tmp_path: Path):
        (tmp_path / ".revdiff.toml").write_text('repositories = "repo1"\n')
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestEnvVarOverrides:
    def test_api_overrides(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("REVDIFF_API_URL", "https://env.example.com")
        monkeypatch.setenv("REVDIFF_API_TOKEN", "secret")
        monkeypatch.setenv("REVDIFF_API_TIMEOUT", "2.5")
        cfg = load_config(tmp_path)
        assert cfg.api.base_url == "https://env.example.com"
        assert cfg.api.token == "secret"
        assert cfg.api.timeout == 2.5

    def test_format_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("REVDIFF_FORMAT", "json")
        cfg = load_config(tmp_path)
        assert cfg.output.format == "json"

    def test_mappings_and_git_timeout(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("REVDIFF_MAPPINGS_FILE", str(tmp_path / "m.yml"))
        monkeypatch.setenv("REVDIFF_GIT_TIMEOUT", "5")
        cfg = load_config(tmp_path)
        assert cfg.mappings.file == str(tmp_path / "m.yml")
        assert cfg.git.timeout == 5

    def test_log_level_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("REVDIFF_LOG_LEVEL", "info")
        assert load_config(tmp_path).logging.level == "INFO"

    def test_invalid_env_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("REVDIFF_FORMAT", "xml")
        monkeypatch.setenv("REVDIFF_GIT_TIMEOUT", "soon")
        cfg = load_config(tmp_path)
        assert cfg.output.format == "terminal"  # default unchanged
        assert cfg.git.timeout == 30
