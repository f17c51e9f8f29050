"""
Tests for Config validation and the .aicommitrc lookup.

Run with:
    pytest tests/test_config.py -v
"""

import json
import os

import pytest

from aicommit.config import Config, ConfigManager


@pytest.fixture
def dirs(tmp_path, monkeypatch):
    """(work, home) temp directories with cwd and home pointed at them."""
    work = tmp_path / "work"
    home = tmp_path / "home"
    work.mkdir()
    home.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setattr("pathlib.Path.home", lambda: home)
    return work, home


def write_rc(directory, data):
    path = directory / ".aicommitrc"
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return path


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestConfigValues:

    def test_defaults_are_valid(self):
        config = Config()
        assert config.validate() == []
        assert (config.provider, config.style, config.timeout) == ("auto", "conventional", 300)
        assert config.clue_during_edit is False

    def test_to_dict_drops_unset_optionals(self):
        data = Config(model="mistral:7b").to_dict()
        assert data["model"] == "mistral:7b"
        assert "api_key" not in data
        assert "editor" not in data

    @pytest.mark.parametrize("field, bad, default", [
        ("provider", "openai", "auto"),
        ("style", "verbose", "conventional"),
        ("max_subject_length", 0, 72),
        ("timeout", "slow", 300),
        ("timeout", True, 300),
        ("include_body", "no", True),
        ("track_deleted_files", 1, True),
        ("clue_during_edit", "yes", False),
    ])
    def test_invalid_value_reset(self, field, bad, default):
        config = Config(**{field: bad})
        problems = config.validate()
        assert len(problems) == 1
        assert field in problems[0]
        assert getattr(config, field) == default

    def test_from_dict_skips_unknown_keys(self):
        config = Config.from_dict({"style": "simple", "jira": True})
        assert config.style == "simple"
        assert not hasattr(config, "jira")

    def test_from_dict_warns_on_stderr(self, capsys):
        config = Config.from_dict({"style": "haiku"})
        assert config.style == "conventional"
        assert "Config warning: Invalid style 'haiku'" in capsys.readouterr().err

    def test_stored_key_beats_environment(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "from-env")
        assert Config(api_key="stored").resolved_api_key() == "stored"
        assert Config().resolved_api_key() == "from-env"


# ---------------------------------------------------------------------------
# ConfigManager
# ---------------------------------------------------------------------------

class TestConfigManager:

    def test_no_file_gives_defaults(self, dirs):
        manager = ConfigManager()
        assert manager.load() == Config()
        assert manager.get_config_path() is None

    def test_working_directory_wins_over_home(self, dirs):
        work, home = dirs
        write_rc(home, {"style": "detailed"})
        local = write_rc(work, {"style": "simple"})

        manager = ConfigManager()
        assert manager.load().style == "simple"
        assert manager.get_config_path() == local

    def test_home_used_when_no_local_file(self, dirs):
        _, home = dirs
        write_rc(home, {"provider": "ollama", "host": "http://gpu-box:11434"})
        config = ConfigManager().load()
        assert config.provider == "ollama"
        assert config.host == "http://gpu-box:11434"

    def test_load_is_cached(self, dirs):
        work, _ = dirs
        manager = ConfigManager()
        first = manager.load()
        write_rc(work, {"style": "simple"})
        assert manager.load() is first

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]", '"text"'])
    def test_unreadable_file_gives_defaults(self, dirs, capsys, content):
        work, _ = dirs
        write_rc(work, content)
        assert ConfigManager().load() == Config()
        assert "Could not load" in capsys.readouterr().err

    def test_save_global_then_reload(self, dirs):
        _, home = dirs
        path = ConfigManager().save(Config(provider="ollama", model="llama3.2:3b"), global_config=True)
        assert path == home / ".aicommitrc"

        loaded = ConfigManager().load()
        assert (loaded.provider, loaded.model) == ("ollama", "llama3.2:3b")

    def test_save_local(self, dirs):
        work, _ = dirs
        assert ConfigManager().save(Config(), global_config=False) == work / ".aicommitrc"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_file_with_key_is_private(self, dirs):
        path = ConfigManager().save(Config(api_key="sk-ant-secret"))
        assert path.stat().st_mode & 0o777 == 0o600
