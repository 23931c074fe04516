import shutil
from pathlib import Path
from typing import Optional

from homeferry.errors import FatalError, OperationFailedError, PermissionDeniedError
from homeferry.globals import Globals
from homeferry.log import logger


def require_mount(mount_point: Path, mount_hint: str) -> Path:
    """
    Checks that the network share is mounted.

    Raises:
        FatalError: If the mount point directory does not exist.
    """
    mount_point = Path(mount_point)
    if not mount_point.is_dir():
        raise FatalError(
            f"Mount point {mount_point} does not exist",
            hint=f"Please mount the SMB share first: {mount_hint}",
        )
    return mount_point


def prepare_backup_root(mount_point: Path, backup_path: str, mount_hint: str) -> Path:
    """
    Returns the backup root on the mounted share, creating it if necessary.

    Raises:
        FatalError: If the share is not mounted or the backup root cannot be created.
    """
    backup_root = require_mount(mount_point, mount_hint) / backup_path
    try:
        backup_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FatalError(f"Cannot create backup directory {backup_root}: {e}") from e
    return backup_root


def locate_backup_root(mount_point: Path, backup_path: str, mount_hint: str) -> Path:
    """
    Returns an existing backup root for restoring.

    Raises:
        FatalError: If the share is not mounted or the backup root does not exist.
    """
    backup_root = require_mount(mount_point, mount_hint) / backup_path
    if not backup_root.is_dir():
        raise FatalError(f"Backup directory {backup_root} does not exist",
                         hint="Run the matching backup command first")
    return backup_root


def push_archive(temp_archive: Path, backup_root: Path) -> Path:
    """
    Copies a finished archive into the backup root.

    Only file contents are copied, never extended attributes or permission bits.
    A permission error is tolerated as long as the destination file ends up present.

    Parameters:
        temp_archive (Path): Local archive to copy.
        backup_root (Path): Destination directory on the share.

    Returns:
        Path: The archive inside the backup root.

    Raises:
        PermissionDeniedError: Copy was refused and no destination file exists.
        OperationFailedError: Any other copy failure.
    """
    target = Path(backup_root) / Path(temp_archive).name
    try:
        shutil.copyfile(temp_archive, target)
    except PermissionError as e:
        if target.is_file():
            logger.debug(f"Ignoring permission error while copying {target.name}: {e}")
            return target
        raise PermissionDeniedError(f"Failed to copy {target.name} to {backup_root}: {e}") from e
    except OSError as e:
        raise OperationFailedError(f"Failed to copy {target.name} to {backup_root}: {e}") from e
    return target


def list_archives(backup_root: Path) -> list[Path]:
    """All archives in a backup root, sorted by name."""
    return sorted(
        (path for path in Path(backup_root).glob("*" + Globals.ARCHIVE_ENDING) if path.is_file()),
        key=lambda path: path.name,
    )


def discover_archives(backup_root: Path, archive_name: Optional[str] = None,
                      prefix_match: bool = False) -> list[Path]:
    """
    Finds the archives a restore run should process.

    Parameters:
        backup_root (Path): Directory holding the archives.
        archive_name (str, optional): File name of a single archive to restore.
        prefix_match (bool): Fall back to archives whose name starts with the
            requested stem when no exact match exists.

    Returns:
        list[Path]: Archives in processing order.

    Raises:
        FatalError: If no archive matches.
    """
    if archive_name is None:
        archives = list_archives(backup_root)
        if not archives:
            raise FatalError(f"No backup archives found in {backup_root}")
        return archives

    exact = Path(backup_root) / archive_name
    if exact.is_file():
        return [exact]

    if prefix_match:
        stem = archive_name[:-len(Globals.ARCHIVE_ENDING)]
        archives = [path for path in list_archives(backup_root) if path.name.startswith(stem)]
        if archives:
            return archives

    raise FatalError(f"Archive \"{archive_name}\" not found in {backup_root}")
