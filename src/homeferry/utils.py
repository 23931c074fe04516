import shutil
from datetime import datetime
from pathlib import Path

from homeferry.globals import Globals
from homeferry.log import logger
from homeferry.ownership import Identity


def ask_yes_no(prompt, default=False):
    """
    Prompt the user with a yes/no question and return their response as a boolean

    Parameters:
    prompt (str): The question to display to the user
    default (bool): Answer used for an empty reply or when stdin is closed

    Returns:
        bool: True if the user answers 'y' or 'yes', False if 'n' or 'no'

    The function will repeatedly prompt until a valid response is given.
    """
    while True:
        try:
            answer = input(prompt).strip().lower()
        except EOFError:
            print()
            return default
        if answer == "":
            return default
        if answer == "y" or answer == "yes":
            return True
        elif answer == "n" or answer == "no":
            return False
        else:
            print("Please answer 'y', 'yes', 'n', or 'no'.")


def print_user_info(identity: Identity, warn_uid: bool = False):
    logger.info("Current user info:")
    logger.info(f"  User: {identity.user}")
    logger.info(f"  UID: {identity.uid}")
    logger.info(f"  GID: {identity.gid}")

    if warn_uid and identity.uid != Globals.EXPECTED_FIRST_UID:
        logger.warning(f"Your UID is {identity.uid}, not {Globals.EXPECTED_FIRST_UID}")
        logger.warning(f"  On a fresh Mac the first user gets UID {Globals.EXPECTED_FIRST_UID}")
        logger.warning("  The restore command will handle ownership changes automatically")


def make_temp_dir(tmp_root: Path, purpose_name: str, direction: str) -> Path:
    """
    Creates a timestamp-suffixed working directory, e.g. `/tmp/work-dirs-backup-20250607-101500`.
    """
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    temp_dir = Path(tmp_root) / f"{purpose_name}-{direction}-{stamp}"
    temp_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Using temporary directory: {temp_dir}")
    return temp_dir


def clean_up(temp_dir):
    """
    Remove the temporary directory used for archives after a run.

    Parameters:
        temp_dir (Path | None): Directory to remove.

    Logs:
        - A debug message if the temporary directory is successfully removed.
        - A warning message if removal fails.
    """
    if temp_dir and Path(temp_dir).exists():
        logger.info("Cleaning up...")
        try:
            shutil.rmtree(temp_dir)
            logger.debug(f"Temporary directory {temp_dir} removed.")
        except OSError as e:
            logger.warning(f"Failed to remove temporary directory {temp_dir}: {e}")
