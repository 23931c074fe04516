import pytest

from homeferry.registry import PURPOSES, resolve_categories
from homeferry.sizes import disk_usage, format_bytes, format_human, measure_category


@pytest.mark.parametrize("num_bytes, expected", [
    (0, "0 bytes"),
    (None, "0 bytes"),
    (512, "512 bytes"),
    (1024, "1024 bytes"),
    (2048, "2 KB"),
    (5 * 1024 ** 2 + 1, "5 MB"),
    (3 * 1024 ** 3 + 1, "3 GB"),
])
def test_format_bytes(num_bytes, expected):
    assert format_bytes(num_bytes) == expected


@pytest.mark.parametrize("num_bytes, expected", [
    (0, "0B"),
    (4096, "4.0K"),
    (12 * 1024 ** 2, "12M"),
    (int(1.5 * 1024 ** 3), "1.5G"),
])
def test_format_human(num_bytes, expected):
    assert format_human(num_bytes) == expected


def test_disk_usage_of_missing_path_is_zero(tmp_path):
    assert disk_usage(tmp_path / "missing") == 0


def test_disk_usage_counts_whole_blocks(tmp_path):
    data = tmp_path / "data"
    data.mkdir()
    (data / "a.bin").write_bytes(b"a" * 100_000)
    (data / "b.bin").write_bytes(b"b" * 100_000)

    size = disk_usage(data)

    assert size % 1024 == 0
    assert size >= 200_000
    assert disk_usage(data / "a.bin") < size


def test_measure_category_reports_found_and_missing(home):
    (home / ".gitconfig").write_bytes(b"[user]\n" * 2000)
    git_config = resolve_categories(PURPOSES["migration"], home)[2]

    result = measure_category(git_config, verbose=False)

    assert result.items == [".gitconfig"]
    assert result.missing == [".gitignore_global", ".hgignore_global"]
    assert result.has_items
    assert result.total == disk_usage(home / ".gitconfig")


def test_measure_category_without_items(home):
    network = resolve_categories(PURPOSES["migration"], home)[3]

    result = measure_category(network, verbose=False)

    assert not result.has_items
    assert result.total == 0
