import os
from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Optional

from homeferry.errors import FatalError
from homeferry.globals import Globals
from homeferry.log import logger


class Discovery(Enum):
    CATEGORIES = "categories"   # fixed categories, one archive per category
    ITEMS = "items"             # fixed items, one archive per item
    DIRECTORIES = "directories" # every immediate subdirectory of the base directory
    ENTRIES = "entries"         # every immediate entry of the base directory


class PostRestore(Enum):
    MEMBERS = "members"
    CREDENTIALS = "credentials"
    TOP_LEVEL = "top_level"


def check_item_name(item: str) -> str:
    """
    Validates that an item name stays inside its base directory.

    Raises:
        ValueError: If the name is empty, absolute, or contains a '..' component.
    """
    pure = PurePosixPath(item)
    if not item or pure.is_absolute() or ".." in pure.parts:
        raise ValueError(f"Invalid item name \"{item}\": must be relative to the base directory.")
    return item


@dataclass(frozen=True)
class CategoryBehavior:
    """
    Restore-side behaviour of a named category.

    Attributes:
        name (str): Category identifier, equal to the archive stem.
        members (tuple): Item names relative to the home directory.
        description (str): One line shown in listings and summaries.
        advisory (tuple): Extra lines printed when existing files would be overwritten.
        post_restore (PostRestore): Ownership fix applied after extraction.
        hint (str): Printed after a successful restore.
    """
    name: str
    members: tuple
    description: str = ""
    advisory: tuple = ()
    post_restore: PostRestore = PostRestore.MEMBERS
    hint: str = ""


CATEGORY_BEHAVIORS = {
    "user-dirs": CategoryBehavior(
        name="user-dirs",
        members=("Documents", "Downloads", "Desktop"),
        description="Documents, Downloads, Desktop",
    ),
    "shell-config": CategoryBehavior(
        name="shell-config",
        members=(".oh-my-zsh", ".zshrc", ".zprofile"),
        description="Oh My Zsh, .zshrc, .zprofile",
        advisory=(
            "This will overwrite your current shell configuration!",
            "Recommendation: Backup your current .zshrc first",
        ),
        hint="Shell config restored. Restart terminal or run: source ~/.zshrc",
    ),
    "credentials": CategoryBehavior(
        name="credentials",
        members=(".ssh", ".aws", ".gnupg", ".boto"),
        description="SSH keys, AWS, GPG, etc.",
        advisory=(
            "This will merge/overwrite SSH keys and credentials",
            "Existing keys will be preserved if different",
        ),
        post_restore=PostRestore.CREDENTIALS,
    ),
    "git-config": CategoryBehavior(
        name="git-config",
        members=(".gitconfig", ".gitignore_global", ".hgignore_global"),
        description="Git configuration files",
    ),
    "network-config": CategoryBehavior(
        name="network-config",
        members=(".cisco",),
        description="Cisco VPN configurations",
        hint="Network configs restored. You may need to reconnect VPNs",
    ),
}


def get_behavior(name: str) -> Optional[CategoryBehavior]:
    return CATEGORY_BEHAVIORS.get(name)


@dataclass(frozen=True)
class Purpose:
    """
    One backup/restore pairing: where its items live and where its archives go.
    """
    name: str
    label: str
    unit: str
    backup_path: str
    base_dir: str
    discovery: Discovery
    items: tuple = ()
    exclude: tuple = ()
    skip: tuple = ()
    require_base: bool = False
    underscore_names: bool = False
    replace_existing: bool = False
    refresh_stale: bool = False
    warn_uid: bool = False
    backup_notes: tuple = ()
    restore_notes: tuple = ()

    def resolve_base(self, home: Path) -> Path:
        return Path(home) / self.base_dir if self.base_dir else Path(home)

    def archive_name(self, name: str) -> str:
        stem = name.replace(" ", "_") if self.underscore_names else name
        return stem + Globals.ARCHIVE_ENDING

    def display_name(self, archive: Path) -> str:
        stem = archive.name[:-len(Globals.ARCHIVE_ENDING)]
        return stem.replace("_", " ") if self.underscore_names else stem


PURPOSES = {
    "migration": Purpose(
        name="migration",
        label="migration items",
        unit="categories",
        backup_path="backup-migration",
        base_dir="",
        discovery=Discovery.CATEGORIES,
        items=("shell-config", "credentials", "git-config", "network-config"),
        warn_uid=True,
        backup_notes=("Ready for Intel -> ARM Mac migration!",),
        restore_notes=(
            "Restart your terminal to apply shell changes",
            "Install Oh My Zsh if not already installed",
            "Reconnect to VPNs using restored Cisco configs",
            "Test SSH connections to verify key restoration",
        ),
    ),
    "user-dirs": Purpose(
        name="user-dirs",
        label="user directories",
        unit="directories",
        backup_path="backup-user",
        base_dir="",
        discovery=Discovery.ITEMS,
        items=("Documents", "Downloads", "Desktop"),
        restore_notes=("Your Documents, Downloads, and Desktop have been restored",),
    ),
    "work-dirs": Purpose(
        name="work-dirs",
        label="work directories",
        unit="directories",
        backup_path="backup-work",
        base_dir="work",
        discovery=Discovery.DIRECTORIES,
        require_base=True,
        replace_existing=True,
    ),
    "app-config": Purpose(
        name="app-config",
        label="application configurations",
        unit="application configurations",
        backup_path="backup-app-config",
        base_dir="Library/Application Support",
        discovery=Discovery.ENTRIES,
        exclude=(".DS_Store", "*.log", "Cache", "cache", "Logs"),
        skip=(
            "CloudDocs", "CallHistoryDB", "CallHistoryTransactions", "CrashReporter",
            "com.apple.*", "MobileSync", "SyncServices", ".DS_Store",
        ),
        require_base=True,
        underscore_names=True,
        refresh_stale=True,
        backup_notes=(
            "Individual .tar.gz files for each application",
            "Excludes system directories and caches",
        ),
        restore_notes=(
            "You may need to restart applications to pick up restored settings",
            "Some applications may require re-authentication",
            "Review application preferences after first launch",
        ),
    ),
}


@dataclass(frozen=True)
class Category:
    """A named group of items archived together, resolved against a base directory."""
    name: str
    items: tuple
    base_dir: Path
    archive_name: str

    def existing_items(self) -> list[str]:
        return [item for item in self.items if path_present(self.base_dir / item)]


def path_present(path: Path) -> bool:
    # Dangling symlinks still count as present
    return path.exists() or path.is_symlink()


def is_within(base_dir: Path, path: Path) -> bool:
    """True if path lies strictly below base_dir once `..` components are collapsed."""
    base = os.path.abspath(base_dir)
    candidate = os.path.abspath(path)
    return candidate != base and os.path.commonpath([base, candidate]) == base


def is_skipped(name: str, patterns) -> bool:
    return any(fnmatchcase(name, pattern) for pattern in patterns)


def list_base_dir(base_dir: Path, directories_only: bool) -> list[Path]:
    """
    Lists the immediate, non-hidden entries of a base directory, sorted by name.
    """
    entries = []
    for entry in sorted(base_dir.iterdir(), key=lambda p: p.name):
        if entry.name.startswith("."):
            continue
        if directories_only and not entry.is_dir():
            continue
        entries.append(entry)
    return entries


def resolve_categories(purpose: Purpose, home: Path) -> list[Category]:
    """
    Builds the categories a purpose backs up.

    Parameters:
        purpose (Purpose): The purpose to resolve.
        home (Path): Home directory of the invoking user.

    Returns:
        list[Category]: Categories in processing order.

    Raises:
        FatalError: If the base directory is required but absent.
    """
    base_dir = purpose.resolve_base(home)

    if purpose.require_base and not base_dir.is_dir():
        raise FatalError(f"{purpose.label.capitalize()} base directory {base_dir} does not exist")

    if purpose.discovery == Discovery.CATEGORIES:
        categories = []
        for category_name in purpose.items:
            behavior = get_behavior(category_name)
            if behavior is None:
                raise FatalError(f"Unknown category \"{category_name}\" in {purpose.name}")
            members = tuple(check_item_name(member) for member in behavior.members)
            categories.append(Category(category_name, members, base_dir, purpose.archive_name(category_name)))

    elif purpose.discovery == Discovery.ITEMS:
        categories = [
            Category(item, (check_item_name(item),), base_dir, purpose.archive_name(item))
            for item in purpose.items
        ]

    else:
        directories_only = purpose.discovery == Discovery.DIRECTORIES
        categories = []
        for entry in list_base_dir(base_dir, directories_only):
            if is_skipped(entry.name, purpose.skip):
                logger.warning(f"Skipping system directory: {entry.name}")
                continue
            categories.append(Category(entry.name, (entry.name,), base_dir, purpose.archive_name(entry.name)))

    logger.debug(f"Resolved {len(categories)} categories for {purpose.name}.")
    return categories
