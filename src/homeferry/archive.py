import tarfile
from contextlib import contextmanager
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Optional

from homeferry.errors import OperationFailedError, PermissionDeniedError, ToolUnavailableError
from homeferry.log import logger


@contextmanager
def archive_errors(action: str, path: Path):
    """
    Translates tarfile and OS failures into the project's error types.

    Raises:
        ToolUnavailableError: gzip support is missing from this interpreter.
        PermissionDeniedError: The archive or one of its members is not accessible.
        OperationFailedError: Any other archive or I/O failure.
    """
    try:
        yield
    except tarfile.CompressionError as e:
        raise ToolUnavailableError(f"Cannot {action} {path}: gzip support unavailable ({e})") from e
    except PermissionError as e:
        raise PermissionDeniedError(f"Cannot {action} {path}: permission denied ({e})") from e
    except (tarfile.TarError, OSError, EOFError) as e:
        raise OperationFailedError(f"Cannot {action} {path}: {e}") from e


def is_excluded(name: str, patterns) -> bool:
    """Matches each path component against the exclusion patterns, as `tar --exclude` does."""
    return any(fnmatchcase(part, pattern) for part in PurePosixPath(name).parts for pattern in patterns)


def _backup_filter(excludes):
    def _filter(tarinfo: tarfile.TarInfo) -> Optional[tarfile.TarInfo]:
        if excludes and is_excluded(tarinfo.name, excludes):
            logger.debug(f"Excluded from archive: {tarinfo.name}")
            return None
        # Numeric-owner mode: only uid/gid are recorded
        tarinfo.uname = ""
        tarinfo.gname = ""
        return tarinfo
    return _filter


def _restore_filter(member: tarfile.TarInfo, dest_path: str) -> tarfile.TarInfo:
    member = tarfile.tar_filter(member, dest_path)
    # Extracted files belong to the invoking user, whatever owner was recorded
    return member.replace(uid=None, gid=None, uname=None, gname=None, deep=False)


def create_archive(archive_path: Path, base_dir: Path, items, excludes=()) -> Path:
    """
    Writes a gzip-compressed tar archive of items relative to base_dir.

    Parameters:
        archive_path (Path): Archive to create.
        base_dir (Path): Directory the item names are relative to.
        items (list[str]): Item names to include.
        excludes (tuple): fnmatch patterns applied to every path component.

    Returns:
        Path: The created archive.
    """
    backup_filter = _backup_filter(tuple(excludes))
    with archive_errors("compress", archive_path):
        with tarfile.open(archive_path, "w:gz") as tar:
            for item in items:
                tar.add(str(Path(base_dir) / item), arcname=item, recursive=True, filter=backup_filter)
    logger.debug(f"Archive written: {archive_path}")
    return archive_path


def archive_size(archive_path: Path) -> int:
    with archive_errors("read", archive_path):
        return Path(archive_path).stat().st_size


def list_entries(archive_path: Path) -> list[str]:
    """Returns the member names of an archive in table-of-contents order."""
    with archive_errors("read", archive_path):
        with tarfile.open(archive_path, "r:gz") as tar:
            return tar.getnames()


def extract_archive(archive_path: Path, target_dir: Path) -> None:
    """
    Extracts an archive into target_dir without restoring the recorded owners.
    """
    with archive_errors("extract", archive_path):
        with tarfile.open(archive_path, "r:gz") as tar:
            tar.extractall(path=str(target_dir), filter=_restore_filter)


def entry_parts(entry: str) -> Optional[list[str]]:
    """
    Splits an archive entry into path components, dropping `.` and leading slashes.

    Returns:
        list[str] | None: None if any component is `..`.
    """
    parts = [part for part in PurePosixPath(entry.lstrip("/")).parts if part != "."]
    if ".." in parts:
        return None
    return parts


def top_level_entry(entries) -> Optional[str]:
    """
    First path component of the first table-of-contents entry.

    None when that entry is absolute or climbs out with `..`, so callers never
    act on a path outside the extraction directory.
    """
    for entry in entries:
        if PurePosixPath(entry).is_absolute():
            return None
        parts = entry_parts(entry)
        if parts is None:
            return None
        if parts:
            return parts[0]
    return None
