import grp
import os
import pwd
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from homeferry.log import logger, success
from homeferry.registry import CategoryBehavior, PostRestore, is_within, path_present

SSH_DIR = ".ssh"
SSH_DIR_MODE = 0o700
SSH_FILE_MODE = 0o600


@dataclass(frozen=True)
class Identity:
    """The invoking user and the group restored files are assigned to."""
    user: str
    uid: int
    gid: int
    group: str
    group_gid: int


def current_identity(group_name: str) -> Identity:
    """
    Looks up the invoking user and the target group.

    Falls back to the user's primary group when `group_name` does not exist on this host.
    """
    uid = os.getuid()
    gid = os.getgid()
    try:
        user = pwd.getpwuid(uid).pw_name
    except KeyError:
        user = str(uid)

    try:
        group_gid = grp.getgrnam(group_name).gr_gid
        group = group_name
    except KeyError:
        logger.debug(f"Group \"{group_name}\" not found, using primary group {gid}.")
        group_gid = gid
        try:
            group = grp.getgrgid(gid).gr_name
        except KeyError:
            group = str(gid)

    return Identity(user=user, uid=uid, gid=gid, group=group, group_gid=group_gid)


def _chown(path: str, identity: Identity) -> bool:
    try:
        os.lchown(path, identity.uid, identity.group_gid)
        return True
    except OSError as e:
        logger.debug(f"Could not change owner of {path}: {e}")
        return False


def chown_tree(path: Path, identity: Identity, recursive: bool = True) -> int:
    """
    Assigns a path (and everything below it) to the invoking user. Best-effort.

    Parameters:
        path (Path): File or directory to fix.
        identity (Identity): Owner and group to assign.
        recursive (bool): Descend into directories.

    Returns:
        int: Number of entries whose ownership could not be changed.
    """
    failures = 0 if _chown(str(path), identity) else 1
    if recursive and path.is_dir() and not path.is_symlink():
        for root, dirs, files in os.walk(path):
            for name in dirs + files:
                if not _chown(os.path.join(root, name), identity):
                    failures += 1
    return failures


def secure_ssh_dir(ssh_dir: Path) -> bool:
    """
    Restricts the SSH directory to its owner: 700 on the directory, 600 on the files directly inside it.
    """
    if not ssh_dir.is_dir():
        return False
    try:
        os.chmod(ssh_dir, SSH_DIR_MODE)
        for entry in ssh_dir.iterdir():
            if stat.S_ISREG(entry.lstat().st_mode):
                os.chmod(entry, SSH_FILE_MODE)
    except OSError as e:
        logger.debug(f"Could not fix permissions of {ssh_dir}: {e}")
        return False
    return True


def normalize_ownership(target_dir: Path, identity: Identity,
                        behavior: Optional[CategoryBehavior] = None,
                        top_level: Optional[str] = None) -> int:
    """
    Fixes ownership after an archive was extracted into target_dir.

    Known categories fix each of their member paths; anything else fixes the
    archive's top-level entry. Failures are logged and never raised.

    Parameters:
        target_dir (Path): Directory the archive was extracted into.
        identity (Identity): Owner and group to assign.
        behavior (CategoryBehavior, optional): Behaviour of a known category.
        top_level (str, optional): First path component of the archive.

    Returns:
        int: Number of entries whose ownership could not be changed.
    """
    failures = 0

    if behavior is None or behavior.post_restore == PostRestore.TOP_LEVEL:
        if not top_level:
            return failures
        if not is_within(target_dir, target_dir / top_level):
            logger.warning(f"  Not fixing ownership of {top_level}: outside {target_dir}")
            return failures
        if path_present(target_dir / top_level):
            failures += chown_tree(target_dir / top_level, identity)
            success(f"  Fixed ownership for: {top_level}")
        return failures

    for member in behavior.members:
        path = target_dir / member
        if is_within(target_dir, path) and path_present(path):
            failures += chown_tree(path, identity)

    if behavior.post_restore == PostRestore.CREDENTIALS and secure_ssh_dir(target_dir / SSH_DIR):
        success("  SSH ownership and permissions fixed")

    if failures:
        logger.debug(f"{failures} entries kept their original owner.")
    return failures
