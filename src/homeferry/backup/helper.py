import os
from pathlib import Path

from homeferry.archive import create_archive
from homeferry.backup.job import BackupJob
from homeferry.log import logger, success
from homeferry.registry import Category
from homeferry.sizes import format_bytes, measure_category
from homeferry.transfer import push_archive


def plan_jobs(categories: list[Category], backup_root: Path, excludes=()) -> list[BackupJob]:
    """
    Measures every category and pairs it with its archive location.

    Parameters:
        categories (list[Category]): Categories to back up.
        backup_root (Path): Backup root on the share (may not exist in dry-run mode).
        excludes (tuple): Patterns left out of every archive.

    Returns:
        list[BackupJob]: One job per category, including categories without existing items.
    """
    jobs = []
    for category in categories:
        logger.info(f"Measuring: {category.name}")
        size = measure_category(category)
        if size.has_items and len(category.items) > 1:
            success(f"Category {category.name} total: {format_bytes(size.total)}")
        jobs.append(BackupJob(size=size, target=Path(backup_root) / category.archive_name, excludes=tuple(excludes)))
        logger.info("---")

    logger.debug("Planned %d backup job(s).", len(jobs))
    return jobs


def newest_mtime(job: BackupJob) -> float:
    mtimes = []
    for item in job.size.items:
        try:
            mtimes.append(os.lstat(job.base_dir / item).st_mtime)
        except OSError as e:
            logger.debug(f"Cannot stat {item}: {e}")
    return max(mtimes, default=0.0)


def archive_is_current(job: BackupJob, refresh_stale: bool = False) -> bool:
    """
    Decides whether the archive of a job can be skipped.

    An existing archive counts as current. With `refresh_stale`, it must also be
    newer than every top-level item of the category.
    """
    if not job.target.is_file():
        return False
    if not refresh_stale:
        return True
    return job.target.stat().st_mtime > newest_mtime(job)


def back_up(job: BackupJob, temp_dir, dry_run: bool = False, refresh_stale: bool = False) -> bool:
    """
    Archives one category and pushes the archive to the backup root.

    Parameters:
        job (BackupJob): The category to back up.
        temp_dir (Path): Local directory for the temporary archive. Unused in dry-run mode.
        dry_run (bool): Only report what would happen.
        refresh_stale (bool): Re-archive when the existing archive is older than the items.

    Returns:
        bool: True if an archive was written (or would be in dry-run mode),
              False if an up-to-date archive already existed.

    Raises:
        HomeferryError: Recoverable compression or copy failure.
    """
    if archive_is_current(job, refresh_stale):
        success(f"✓ Backup already exists: {job.archive_name}")
        return False

    logger.debug(job.describe())
    logger.info(f"  Items: {' '.join(job.size.items)}")
    logger.info(f"  Size: {format_bytes(job.size.total)}")

    if dry_run:
        logger.info(f"  → Would compress to: {job.archive_name}")
        logger.info(f"  → Would copy to: {job.target}")
        return True

    temp_archive = Path(temp_dir) / job.archive_name
    try:
        logger.info("  Creating archive...")
        create_archive(temp_archive, job.base_dir, job.size.items, job.excludes)
        success(f"✓ Compressed: {job.name}")

        push_archive(temp_archive, job.target.parent)
        success(f"✓ Copied to SMB: {job.archive_name}")
    finally:
        temp_archive.unlink(missing_ok=True)

    return True
