import os
from dataclasses import dataclass, field
from pathlib import Path

from homeferry.log import logger
from homeferry.registry import Category, path_present

BLOCK_SIZE = 1024


def _allocated_bytes(stat_result) -> int:
    blocks = getattr(stat_result, "st_blocks", None)
    if blocks is None:
        return stat_result.st_size
    return blocks * 512


def disk_usage(path: Path) -> int:
    """
    Measures the space a file or directory tree occupies on disk.

    Like `du -sk`, allocated blocks are summed (symlinks are not followed)
    and the result is rounded up to whole 1024-byte blocks.

    Parameters:
        path (Path): File or directory to measure.

    Returns:
        int: Size in bytes, a multiple of 1024. Zero if the path does not exist.
    """
    if not path_present(path):
        return 0

    total = _allocated_bytes(os.lstat(path))
    if path.is_dir() and not path.is_symlink():
        for root, dirs, files in os.walk(path, onerror=lambda e: logger.debug(f"Cannot read {e.filename}: {e}")):
            for name in dirs + files:
                try:
                    total += _allocated_bytes(os.lstat(os.path.join(root, name)))
                except OSError as e:
                    logger.debug(f"Cannot stat {name}: {e}")

    kilobytes = -(-total // BLOCK_SIZE)
    return kilobytes * BLOCK_SIZE


def format_bytes(num_bytes) -> str:
    """Formats a byte count using whole GB/MB/KB units, e.g. '3 MB'."""
    if not num_bytes:
        return "0 bytes"
    if num_bytes > 1024 ** 3:
        return f"{num_bytes // 1024 ** 3} GB"
    if num_bytes > 1024 ** 2:
        return f"{num_bytes // 1024 ** 2} MB"
    if num_bytes > 1024:
        return f"{num_bytes // 1024} KB"
    return f"{num_bytes} bytes"


def format_human(num_bytes: int) -> str:
    """Short size with one significant decimal below 10, e.g. '4.0K', '12M'."""
    size = float(num_bytes)
    for unit in ("B", "K", "M", "G", "T"):
        if size < 1024 or unit == "T":
            break
        size /= 1024
    if unit == "B":
        return f"{int(size)}B"
    if size < 10:
        return f"{size:.1f}{unit}"
    return f"{size:.0f}{unit}"


@dataclass
class CategorySize:
    """Measured members of one category."""
    category: Category
    found: list = field(default_factory=list)
    missing: list = field(default_factory=list)

    @property
    def items(self) -> list[str]:
        return [item for item, _ in self.found]

    @property
    def total(self) -> int:
        return sum(size for _, size in self.found)

    @property
    def has_items(self) -> bool:
        return len(self.found) > 0


def measure_category(category: Category, verbose: bool = True) -> CategorySize:
    """
    Measures every item of a category, separating found from missing items.

    Parameters:
        category (Category): Category to measure.
        verbose (bool): Report each found and missing item.

    Returns:
        CategorySize: Per-item sizes in bytes.
    """
    result = CategorySize(category)
    for item in category.items:
        path = category.base_dir / item
        if path_present(path):
            size = disk_usage(path)
            result.found.append((item, size))
            if verbose:
                logger.info(f"  Found: {item} ({format_bytes(size)})")
        else:
            result.missing.append(item)
            if verbose:
                logger.info(f"  Missing: {item} (skipping)")
    return result
