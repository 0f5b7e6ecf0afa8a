from pathlib import Path

import pytest
import yaml

from aifmt.config import Config, ConfigError, default_config_dir


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


def test_default_config_dir_is_under_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    assert default_config_dir() == tmp_path / ".aifmt"


def test_load_creates_directory_and_defaults(tmp_path, workdir):
    config_dir = tmp_path / "cfg"
    config = Config.load(config_dir)
    assert config_dir.is_dir()
    assert config.path == config_dir / "config.yaml"
    assert config.path.is_file()
    assert config.get("comments_language") == "Русский"
    assert config.get("api_key") == ""
    assert config.get("max_retry") == 5
    assert config.get("channels") == 10


def test_defaults_are_written_to_disk(tmp_path, workdir):
    config_dir = tmp_path / "cfg"
    Config.load(config_dir)
    on_disk = yaml.safe_load((config_dir / "config.yaml").read_text(encoding="utf-8"))
    assert on_disk["max_retry"] == 5
    assert on_disk["comments_language"] == "Русский"


def test_set_save_load_round_trip(tmp_path, workdir):
    config_dir = tmp_path / "cfg"
    config = Config.load(config_dir)
    config.set("api_key", "token")
    config.save()
    again = Config.load(config_dir)
    assert again.get("api_key") == "token"
    assert again.get("max_retry") == 5


def test_keys_are_case_insensitive(tmp_path, workdir):
    config = Config.load(tmp_path / "cfg")
    config.set("API_KEY", "token")
    assert config.get("api_key") == "token"
    assert config.get("Api_Key") == "token"


def test_get_returns_default_for_missing_key(tmp_path, workdir):
    config = Config.load(tmp_path / "cfg")
    assert config.get("missing", "fallback") == "fallback"
    assert config.get("missing") is None


def test_existing_file_is_read_without_defaults(tmp_path, workdir):
    config_dir = tmp_path / "cfg"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("max_retry: 2\n", encoding="utf-8")
    config = Config.load(config_dir)
    assert config.get("max_retry") == 2
    assert config.get("channels") is None


def test_falls_back_to_working_directory(tmp_path, workdir):
    (workdir / "config.yaml").write_text("api_key: token\n", encoding="utf-8")
    config = Config.load(tmp_path / "cfg")
    assert config.path == Path.cwd() / "config.yaml"
    assert config.get("api_key") == "token"


def test_invalid_yaml_raises(tmp_path, workdir):
    config_dir = tmp_path / "cfg"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("key: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        Config.load(config_dir)


def test_non_mapping_yaml_raises(tmp_path, workdir):
    config_dir = tmp_path / "cfg"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        Config.load(config_dir)


def test_empty_file_gives_empty_config(tmp_path, workdir):
    config_dir = tmp_path / "cfg"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("", encoding="utf-8")
    config = Config.load(config_dir)
    assert config.data == {}