from pathlib import Path

from homeferry.config import get_home
from homeferry.errors import ErrorKind, FatalError, HomeferryError
from homeferry.log import logger, success
from homeferry.ownership import Identity, current_identity
from homeferry.progress import Progress
from homeferry.registry import Purpose
from homeferry.restore.helper import behavior_for, preview_archive, print_inventory, restore_archive
from homeferry.transfer import discover_archives, list_archives, locate_backup_root
from homeferry.utils import print_user_info


def find_archives(backup_root: Path, purpose: Purpose, name=None) -> list[Path]:
    """
    Discovers the archives to restore, optionally limited to one name.

    Raises:
        FatalError: If nothing matches. The hint lists what is available.
    """
    archive_name = purpose.archive_name(name) if name else None
    try:
        return discover_archives(backup_root, archive_name, prefix_match=purpose.underscore_names)
    except FatalError as e:
        available = [purpose.display_name(archive) for archive in list_archives(backup_root)]
        if name and available:
            e.hint = f"Available {purpose.label}: {', '.join(available)}"
        raise


def run_restore(config: dict, purpose: Purpose, args: dict) -> int:
    """
    Restores the archives of a purpose from the mounted share.

    Parameters:
        config (dict): Merged configuration.
        purpose (Purpose): What to restore and where to put it.
        args (dict): Parsed command-line arguments.

    Returns:
        int: Exit code. Zero even if some archives failed or were skipped.

    Raises:
        FatalError: Missing mount point or backup root, or no matching archive.
    """
    dry_run = args.get("dry_run", False)
    if dry_run:
        logger.warning("*** DRY RUN MODE - No files will be extracted ***")

    logger.info(f"Starting restore of {purpose.label}...")
    identity = current_identity(config["group"])
    print_user_info(identity)

    backup_root = locate_backup_root(Path(config["mount_point"]), purpose.backup_path, config["mount_hint"])
    success(f"Using backup directory: {backup_root}")

    archives = find_archives(backup_root, purpose, args.get("name"))
    logger.info(f"Found {len(archives)} {purpose.label} archive(s)")

    if args.get("list_only"):
        print_inventory(archives, purpose)
        return 0

    target_dir = purpose.resolve_base(get_home(config))
    if not dry_run:
        target_dir.mkdir(parents=True, exist_ok=True)
        success(f"Restoring into: {target_dir}")

    progress = execute_restore(archives, target_dir, purpose, identity, dry_run)
    print_restore_summary(purpose, progress, target_dir, dry_run)
    return 0


def execute_restore(archives: list[Path], target_dir: Path, purpose: Purpose, identity: Identity,
                    dry_run: bool) -> Progress:
    """
    Previews or restores each archive in order.

    Declined archives and recoverable failures are reported and skipped.

    Returns:
        Progress: The accumulator, advanced once per restored (or previewed) archive.
    """
    progress = Progress(total=len(archives))

    for position, archive in enumerate(archives, 1):
        display_name = purpose.display_name(archive)
        logger.info(f"Processing [{position}/{progress.total}] ({position * 100 // progress.total}%): {display_name}")

        behavior = behavior_for(purpose, archive)
        if behavior is not None:
            logger.info(f"  {behavior.description}")

        try:
            if dry_run:
                preview_archive(archive)
            else:
                restore_archive(archive, target_dir, purpose, identity)
            progress.advance()
        except HomeferryError as e:
            if e.kind == ErrorKind.FATAL:
                raise
            if e.kind == ErrorKind.DECLINED:
                logger.warning(f"  {e}")
            else:
                logger.error(f"✗ Failed to restore {display_name}: {e}")

        logger.info("---")

    return progress


def print_restore_summary(purpose: Purpose, progress: Progress, target_dir: Path, dry_run: bool):
    if dry_run:
        success(f"Restore preview of {purpose.label} completed!")
    else:
        success(f"Restore of {purpose.label} completed!")
    success(progress.summary("archives"))

    if progress.processed == 0 or dry_run:
        return

    logger.info(f"=== {purpose.name.upper()} RESTORE SUMMARY ===")
    logger.info(f"Archives restored: {progress.processed}")
    logger.info(f"Restored to: {target_dir}")
    for note in purpose.restore_notes:
        logger.info(f"  {note}")
