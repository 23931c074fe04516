import tarfile
from unittest.mock import patch

import pytest

from homeferry.archive import (archive_size, create_archive, entry_parts, extract_archive, is_excluded,
                               list_entries, top_level_entry)
from homeferry.errors import ErrorKind, OperationFailedError, PermissionDeniedError, ToolUnavailableError


@pytest.fixture
def source(tmp_path):
    base = tmp_path / "source"
    app = base / "My App"
    (app / "Cache").mkdir(parents=True)
    (app / "Cache" / "blob").write_text("cached")
    (app / "prefs.json").write_text('{"theme": "dark"}')
    (app / "debug.log").write_text("noise")
    (base / ".zshrc").write_text("export EDITOR=vim")
    return base


def test_create_archive_records_items_relative_to_base(tmp_path, source):
    archive = create_archive(tmp_path / "out.tar.gz", source, ["My App", ".zshrc"])

    entries = list_entries(archive)

    assert "My App/prefs.json" in entries
    assert ".zshrc" in entries
    assert all(not entry.startswith("/") for entry in entries)


def test_create_archive_applies_excludes(tmp_path, source):
    archive = create_archive(tmp_path / "out.tar.gz", source, ["My App"], excludes=("Cache", "*.log"))

    entries = list_entries(archive)

    assert "My App/prefs.json" in entries
    assert not any("Cache" in entry for entry in entries)
    assert "My App/debug.log" not in entries


def test_create_archive_records_numeric_owner_only(tmp_path, source):
    archive = create_archive(tmp_path / "out.tar.gz", source, [".zshrc"])

    with tarfile.open(archive, "r:gz") as tar:
        member = tar.getmember(".zshrc")

    assert member.uname == ""
    assert member.gname == ""


def test_extract_archive_reproduces_contents(tmp_path, source):
    archive = create_archive(tmp_path / "out.tar.gz", source, ["My App"])
    target = tmp_path / "target"
    target.mkdir()

    extract_archive(archive, target)

    assert (target / "My App" / "prefs.json").read_text() == '{"theme": "dark"}'
    assert (target / "My App" / "Cache" / "blob").read_text() == "cached"


def test_unreadable_archive_is_recoverable(tmp_path):
    broken = tmp_path / "broken.tar.gz"
    broken.write_bytes(b"definitely not gzip")

    with pytest.raises(OperationFailedError) as excinfo:
        list_entries(broken)

    assert excinfo.value.kind == ErrorKind.RECOVERABLE


def test_missing_item_fails_compression(tmp_path, source):
    with pytest.raises(OperationFailedError):
        create_archive(tmp_path / "out.tar.gz", source, ["does-not-exist"])


@patch("homeferry.archive.tarfile.open", side_effect=PermissionError("denied"))
def test_permission_error_is_reported_as_such(mock_open, tmp_path):
    with pytest.raises(PermissionDeniedError):
        list_entries(tmp_path / "any.tar.gz")


@patch("homeferry.archive.tarfile.open", side_effect=tarfile.CompressionError("gzip module is not available"))
def test_missing_gzip_support_is_reported(mock_open, tmp_path, source):
    with pytest.raises(ToolUnavailableError):
        create_archive(tmp_path / "out.tar.gz", source, [".zshrc"])


@pytest.mark.parametrize("name, expected", [
    ("App/Cache/file", True),
    ("App/logs/app.log", True),
    ("App/prefs.json", False),
])
def test_is_excluded_matches_any_component(name, expected):
    assert is_excluded(name, ("Cache", "*.log")) == expected


@pytest.mark.parametrize("entries, expected", [
    (["project", "project/src/main.py"], "project"),
    (["./project/README"], "project"),
    (["Visual Studio Code/settings.json"], "Visual Studio Code"),
    ([], None),
    (["..", "alpha/x"], None),
    (["../../etc", "alpha"], None),
    (["/Users/dominik/.ssh"], None),
    (["./", "alpha/x"], "alpha"),
])
def test_top_level_entry(entries, expected):
    assert top_level_entry(entries) == expected


@pytest.mark.parametrize("entry, expected", [
    ("alpha/x", ["alpha", "x"]),
    ("./alpha/./x", ["alpha", "x"]),
    ("/alpha", ["alpha"]),
    ("alpha/../../x", None),
    ("..", None),
])
def test_entry_parts(entry, expected):
    assert entry_parts(entry) == expected


def test_archive_size_of_vanished_archive(tmp_path):
    with pytest.raises(OperationFailedError):
        archive_size(tmp_path / "gone.tar.gz")
