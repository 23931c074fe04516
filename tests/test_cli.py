# tests/test_cli.py

from unittest.mock import patch
from homeferry.parser import get_backup_arguments, get_restore_arguments
from homeferry.registry import PURPOSES


@patch("sys.argv", ["backup-work-dirs", "--config", "test_config"])
def test_minimal_backup_arguments():
    args = get_backup_arguments(PURPOSES["work-dirs"])
    assert args.get("dry_run") == False
    assert args.get("list_only") == False
    assert args.get("name") == None
    assert args.get("config_file") == "test_config"
    assert args.get("verbose") == False


@patch("sys.argv", ["backup-migration", "-n"])
def test_backup_short_dry_run_flag():
    args = get_backup_arguments(PURPOSES["migration"])
    assert args.get("dry_run") == True


@patch("sys.argv", ["restore-migration"])
def test_restore_defaults_to_all_archives():
    args = get_restore_arguments(PURPOSES["migration"])
    assert args.get("dry_run") == False
    assert args.get("list_only") == False
    assert args.get("name") == None
    assert args.get("config_file") == None


def test_restore_flags_and_name():
    args = get_restore_arguments(PURPOSES["app-config"], ["-n", "-l", "Visual Studio Code"])
    assert args.get("dry_run") == True
    assert args.get("list_only") == True
    assert args.get("name") == "Visual Studio Code"


def test_restore_long_flags():
    args = get_restore_arguments(PURPOSES["work-dirs"], ["--dry-run", "--list", "--verbose", "project"])
    assert args.get("dry_run") == True
    assert args.get("list_only") == True
    assert args.get("verbose") == True
    assert args.get("name") == "project"
