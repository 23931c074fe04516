import shutil
from pathlib import Path
from typing import Optional

from homeferry.archive import archive_size, entry_parts, extract_archive, list_entries, top_level_entry
from homeferry.errors import DeclinedError, HomeferryError, OperationFailedError
from homeferry.globals import Globals
from homeferry.log import logger, success
from homeferry.ownership import Identity, normalize_ownership
from homeferry.registry import CategoryBehavior, Discovery, Purpose, get_behavior, is_within, path_present
from homeferry.sizes import format_human
from homeferry.utils import ask_yes_no


def entry_target(target_dir: Path, entry: str) -> Optional[Path]:
    """
    Resolves an archive entry below target_dir.

    Returns:
        Path | None: None for entries that would point outside target_dir.
    """
    parts = entry_parts(entry)
    if not parts:
        return None
    return Path(target_dir).joinpath(*parts)


def find_conflicts(entries, target_dir: Path, limit: int = Globals.CONFLICT_LIMIT) -> list[str]:
    """
    Lists archive entries whose path already exists under target_dir.

    Parameters:
        entries (list[str]): Table of contents of the archive.
        target_dir (Path): Directory the archive would be extracted into.
        limit (int): Stop after this many conflicts.

    Returns:
        list[str]: At most `limit` conflicting entries, in archive order.
    """
    conflicts = []
    for entry in entries:
        path = entry_target(target_dir, entry)
        if path is not None and path_present(path):
            conflicts.append(entry)
            if len(conflicts) >= limit:
                break
    return conflicts


def confirm_overwrite(conflicts, target_dir: Path, behavior: Optional[CategoryBehavior] = None) -> bool:
    logger.warning("  Warning: The following items already exist:")
    for entry in conflicts:
        logger.warning(f"    {entry_target(target_dir, entry)}")

    if behavior is not None:
        for line in behavior.advisory:
            logger.warning(f"  {line}")

    return ask_yes_no("  Continue with extraction? (y/N): ")


def remove_existing(target_dir: Path, top_level: Optional[str]):
    """
    Removes the directory an archive is about to replace.

    Raises:
        OperationFailedError: If the directory cannot be removed or lies outside target_dir.
    """
    if not top_level:
        return
    path = Path(target_dir) / top_level
    if not is_within(target_dir, path):
        raise OperationFailedError(f"Refusing to remove {path}: outside {target_dir}")
    if path.is_dir() and not path.is_symlink():
        try:
            shutil.rmtree(path)
            logger.debug(f"Removed existing directory {path}.")
        except OSError as e:
            raise OperationFailedError(f"Cannot remove existing directory {path}: {e}") from e


def behavior_for(purpose: Purpose, archive: Path) -> Optional[CategoryBehavior]:
    if purpose.discovery != Discovery.CATEGORIES:
        return None
    return get_behavior(archive.name[:-len(Globals.ARCHIVE_ENDING)])


def preview_archive(archive: Path, limit: int = Globals.PREVIEW_LIMIT):
    """
    Prints the size and the first entries of an archive without extracting it.

    Raises:
        HomeferryError: If the archive cannot be read.
    """
    logger.info(f"  → Would extract: {archive.name} ({format_human(archive_size(archive))})")
    logger.info("  → Contents:")
    entries = list_entries(archive)
    for entry in entries[:limit]:
        logger.info(f"    {entry}")
    if len(entries) > limit:
        logger.info(f"    ... and {len(entries) - limit} more files")


def restore_archive(archive: Path, target_dir: Path, purpose: Purpose, identity: Identity):
    """
    Extracts one archive into target_dir and hands the result to the invoking user.

    When existing files would be overwritten the operator is asked first.

    Parameters:
        archive (Path): Archive to restore.
        target_dir (Path): Directory to extract into.
        purpose (Purpose): Purpose the archive belongs to.
        identity (Identity): Owner for the extracted files.

    Raises:
        DeclinedError: The operator chose not to overwrite existing files.
        HomeferryError: Recoverable read, removal or extraction failure.
    """
    behavior = behavior_for(purpose, archive)
    entries = list_entries(archive)
    top_level = top_level_entry(entries)

    conflicts = find_conflicts(entries, target_dir)
    if conflicts:
        if not confirm_overwrite(conflicts, target_dir, behavior):
            raise DeclinedError(f"Skipping {purpose.display_name(archive)}")
        if purpose.replace_existing:
            remove_existing(target_dir, top_level)

    logger.info(f"  Extracting: {archive.name}")
    extract_archive(archive, target_dir)
    success(f"✓ Extracted: {purpose.display_name(archive)}")

    logger.info("  Fixing file ownership...")
    normalize_ownership(target_dir, identity, behavior, top_level)
    if behavior is not None and behavior.hint:
        success(f"  → {behavior.hint}")
    success(f"  → File ownership updated for UID {identity.uid}")


def print_inventory(archives, purpose: Purpose):
    logger.info(f"Available {purpose.label} archives:")
    for archive in archives:
        try:
            size = archive_size(archive)
        except HomeferryError as e:
            logger.error(f"✗ {purpose.display_name(archive)}: {e}")
            continue
        line = f"  {purpose.display_name(archive)} ({format_human(size)})"
        if purpose.discovery == Discovery.CATEGORIES:
            behavior = behavior_for(purpose, archive)
            line += f" - {behavior.description if behavior else 'Unknown category'}"
        success(line)

    logger.info("Usage examples:")
    logger.info(f"  restore-{purpose.name} --dry-run      # Preview all")
    logger.info(f"  restore-{purpose.name} <name>         # Restore a single archive")
