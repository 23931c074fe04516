"""
main.py

Entry points of the homeferry commands. Each backup command compresses one kind of
user data and copies it to a mounted network share; each restore command extracts
those archives on the new machine and hands the files to the current user.
"""

import logging
import sys

from homeferry.backup.backup import run_backup
from homeferry.config import get_purpose, parse_config
from homeferry.errors import FatalError
from homeferry.log import logger
from homeferry.parser import get_backup_arguments, get_restore_arguments
from homeferry.registry import PURPOSES
from homeferry.restore.restore import run_restore


def init(args):
	"""
	Applies the verbosity flag and loads the configuration.

	Returns:
		dict: The merged configuration.

	Raises:
		FatalError: If the configuration cannot be loaded.
	"""
	if args["verbose"]:
		logger.setLevel(logging.DEBUG)

	return parse_config(args["config_file"])


def run(purpose_name, direction, argv=None):
	"""
	Runs one backup or restore command.

	Parameters:
		purpose_name (str): Key of `PURPOSES`, e.g. "work-dirs".
		direction (str): "backup" or "restore".
		argv (list[str], optional): Arguments to parse instead of `sys.argv`.

	Returns:
		int: Process exit code.
	"""
	purpose = PURPOSES[purpose_name]
	if direction == "backup":
		args = get_backup_arguments(purpose, argv)
	else:
		args = get_restore_arguments(purpose, argv)

	try:
		config = init(args)
		purpose = get_purpose(config, purpose_name)

		if direction == "backup":
			return run_backup(config, purpose, args)
		return run_restore(config, purpose, args)

	except FatalError as e:
		logger.error(f"Error: {e}")
		if e.hint:
			logger.warning(e.hint)
		return 1


def backup_migration():
	sys.exit(run("migration", "backup"))


def restore_migration():
	sys.exit(run("migration", "restore"))


def backup_user_dirs():
	sys.exit(run("user-dirs", "backup"))


def restore_user_dirs():
	sys.exit(run("user-dirs", "restore"))


def backup_work_dirs():
	sys.exit(run("work-dirs", "backup"))


def restore_work_dirs():
	sys.exit(run("work-dirs", "restore"))


def backup_app_config():
	sys.exit(run("app-config", "backup"))


def restore_app_config():
	sys.exit(run("app-config", "restore"))
