from pathlib import Path

import pytest

from homeferry.config import default_config, get_home, get_purpose, get_tmp_dir, parse_config
from homeferry.errors import FatalError
from homeferry.globals import Globals
from homeferry.main import run


def test_parse_config_merges_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("mount_point: /Volumes/backup\nrefresh_stale: true\n")

    config = parse_config(path)

    assert config["mount_point"] == "/Volumes/backup"
    assert config["refresh_stale"] is True
    assert config["group"] == Globals.DEFAULT_GROUP
    assert config["mount_hint"] == Globals.DEFAULT_MOUNT_HINT


def test_parse_config_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert parse_config(path) == default_config()


def test_parse_config_without_file_searches_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Globals, "DEFAULT_CONFIG_DIRS", [str(tmp_path)])

    assert parse_config(None) == default_config()

    (tmp_path / Globals.DEFAULT_CONFIG_FILE).write_text("group: wheel\n")
    assert parse_config(None)["group"] == "wheel"


@pytest.mark.parametrize("content", [
    "mount_point: [unclosed",
    "- just\n- a\n- list\n",
    "mountpoint: /Volumes/typo\n",
])
def test_parse_config_rejects_bad_files(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)

    with pytest.raises(FatalError):
        parse_config(path)


def test_parse_config_missing_explicit_file(tmp_path):
    with pytest.raises(FatalError):
        parse_config(tmp_path / "nope.yaml")


def test_get_home_prefers_config_then_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(Globals.HOME_ENV_VAR, str(tmp_path / "env-home"))

    assert get_home({"home": str(tmp_path / "cfg-home")}) == tmp_path / "cfg-home"
    assert get_home({"home": None}) == tmp_path / "env-home"

    monkeypatch.delenv(Globals.HOME_ENV_VAR)
    assert get_home({}) == Path.home()


def test_get_tmp_dir(tmp_path):
    assert get_tmp_dir({"tmp_dir": str(tmp_path)}) == tmp_path
    assert get_tmp_dir({"tmp_dir": None}).is_dir()


def test_get_purpose_applies_overrides():
    config = default_config()
    config["purposes"] = {"work-dirs": {"base_dir": "projects", "exclude": ["node_modules", ".venv"]}}

    purpose = get_purpose(config, "work-dirs")

    assert purpose.base_dir == "projects"
    assert purpose.exclude == ("node_modules", ".venv")
    assert purpose.backup_path == "backup-work"


def test_get_purpose_without_overrides():
    purpose = get_purpose(default_config(), "app-config")

    assert purpose.base_dir == "Library/Application Support"
    assert purpose.underscore_names


@pytest.mark.parametrize("purposes, name", [
    ({}, "photos"),
    ({"photos": {}}, "work-dirs"),
    ({"work-dirs": {"label": "nope"}}, "work-dirs"),
])
def test_get_purpose_rejects_unknown_names(purposes, name):
    config = default_config()
    config["purposes"] = purposes

    with pytest.raises(FatalError):
        get_purpose(config, name)


@pytest.mark.parametrize("overrides", [
    {"items": "Documents"},
    {"exclude": "node_modules"},
    {"skip": [1, 2]},
    {"base_dir": ["work"]},
    {"refresh_stale": "sometimes"},
])
def test_get_purpose_rejects_wrongly_typed_overrides(overrides):
    config = default_config()
    config["purposes"] = {"user-dirs": overrides}

    with pytest.raises(FatalError):
        get_purpose(config, "user-dirs")


def test_get_purpose_rejects_scalar_section():
    config = default_config()
    config["purposes"] = {"work-dirs": "projects"}

    with pytest.raises(FatalError):
        get_purpose(config, "work-dirs")


def test_scalar_items_in_config_file_fail_the_run(home, mount, make_config_file):
    config_file = make_config_file(purposes={"user-dirs": {"items": "Documents"}})

    assert run("user-dirs", "backup", ["--config", str(config_file)]) == 1
