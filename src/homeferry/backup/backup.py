from pathlib import Path

from homeferry.backup.helper import back_up, plan_jobs
from homeferry.backup.job import BackupJob
from homeferry.config import get_home, get_tmp_dir
from homeferry.errors import ErrorKind, FatalError, HomeferryError
from homeferry.log import logger, success
from homeferry.ownership import current_identity
from homeferry.progress import Progress
from homeferry.registry import Discovery, Purpose, get_behavior, resolve_categories
from homeferry.sizes import format_bytes
from homeferry.transfer import prepare_backup_root
from homeferry.utils import clean_up, make_temp_dir, print_user_info


def run_backup(config: dict, purpose: Purpose, args: dict) -> int:
    """
    Backs up every category of a purpose to the mounted share.

    Parameters:
        config (dict): Merged configuration.
        purpose (Purpose): What to back up and where to put it.
        args (dict): Parsed command-line arguments.

    Returns:
        int: Exit code. Zero even if some categories failed.

    Raises:
        FatalError: Missing mount point, missing base directory or nothing to back up.
    """
    dry_run = args.get("dry_run", False)
    if dry_run:
        logger.warning("*** DRY RUN MODE - No files will be compressed or copied ***")

    logger.info(f"Starting backup of {purpose.label}...")
    print_user_info(current_identity(config["group"]), warn_uid=purpose.warn_uid)

    categories = resolve_categories(purpose, get_home(config))

    mount_point = Path(config["mount_point"])
    if dry_run:
        logger.warning("Skipping SMB mount check (dry-run mode)")
        backup_root = mount_point / purpose.backup_path
    else:
        logger.info("Checking SMB mount...")
        backup_root = prepare_backup_root(mount_point, purpose.backup_path, config["mount_hint"])
        success(f"Using backup directory: {backup_root}")

    logger.info(f"Calculating total size of {purpose.label}...")
    jobs = plan_jobs(categories, backup_root, purpose.exclude)

    progress = Progress(
        total=sum(1 for job in jobs if job.size.has_items),
        total_size=sum(job.size.total for job in jobs),
    )
    if progress.total == 0:
        raise FatalError(f"No {purpose.label} found")

    success(f"Found {progress.total} {purpose.unit} with total size: {format_bytes(progress.total_size)}")

    temp_dir = None if dry_run else make_temp_dir(get_tmp_dir(config), purpose.name, "backup")
    refresh_stale = purpose.refresh_stale or config.get("refresh_stale", False)
    progress = execute_backup_jobs(jobs, progress, temp_dir, dry_run, refresh_stale)
    clean_up(temp_dir)

    print_backup_summary(purpose, jobs, progress, backup_root, dry_run)
    return 0


def execute_backup_jobs(jobs: list[BackupJob], progress: Progress, temp_dir, dry_run: bool,
                        refresh_stale: bool) -> Progress:
    """
    Runs each backup job in order, continuing past recoverable failures.

    Returns:
        Progress: The accumulator, advanced once per successful or skipped category.
    """
    logger.info("Starting backup process...")
    position = 0

    for job in jobs:
        if not job.size.has_items:
            logger.warning(f"No items found for: {job.name}")
            logger.info("---")
            continue

        position += 1
        logger.info(f"Processing [{position}/{progress.total}]: {job.name}")
        logger.info(f"  Progress: {progress.describe()}")

        try:
            back_up(job, temp_dir, dry_run=dry_run, refresh_stale=refresh_stale)
            progress.advance(job.size.total)
        except HomeferryError as e:
            if e.kind == ErrorKind.FATAL:
                raise
            logger.error(f"✗ Failed to back up {job.name}: {e}")

        logger.info("---")

    return progress


def print_backup_summary(purpose: Purpose, jobs: list[BackupJob], progress: Progress, backup_root: Path,
                         dry_run: bool):
    if dry_run:
        success(f"Backup preview of {purpose.label} completed!")
    else:
        success(f"Backup of {purpose.label} completed!")
    success(progress.summary(purpose.unit))

    if progress.processed == 0:
        return

    logger.info(f"=== {purpose.name.upper()} BACKUP SUMMARY ===")
    logger.info(f"Total data size: {format_bytes(progress.total_size)}")
    logger.info(f"Archives backed up: {progress.processed}")
    logger.info(f"Backup location: {backup_root}")

    if purpose.discovery == Discovery.CATEGORIES:
        logger.info("=== BACKUP CONTENTS ===")
        for job in jobs:
            behavior = get_behavior(job.name)
            if job.size.has_items and behavior is not None:
                logger.info(f"{job.archive_name:<24} - {behavior.description}")

    for note in purpose.backup_notes:
        success(note)
