import argparse


def _add_common_arguments(parser):
    parser.add_argument("--dry-run", "-n", action="store_true", dest="dry_run",
                        help="Make a dry (test) run. Nothing is compressed, copied or extracted.")
    parser.add_argument("--config", type=str, help="Path to the configuration YAML file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print debug output.")


def get_backup_arguments(purpose, argv=None):
    """
    Parses command-line arguments of a backup command.

    Parameters:
        purpose (Purpose): Purpose the command backs up, used in the help text.
        argv (list[str], optional): Arguments to parse instead of `sys.argv`.

    Returns:
        dict: Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog=f"backup-{purpose.name}",
        description=f"Compresses {purpose.label} and copies them to the mounted backup share.")
    _add_common_arguments(parser)
    args = parser.parse_args(argv)

    return {
        "dry_run": args.dry_run,
        "list_only": False,
        "name": None,
        "config_file": args.config,
        "verbose": args.verbose,
    }


def get_restore_arguments(purpose, argv=None):
    """
    Parses command-line arguments of a restore command.

    Parameters:
        purpose (Purpose): Purpose the command restores, used in the help text.
        argv (list[str], optional): Arguments to parse instead of `sys.argv`.

    Returns:
        dict: Parsed arguments. `name` is None when every archive should be restored.
    """
    parser = argparse.ArgumentParser(
        prog=f"restore-{purpose.name}",
        description=f"Restores {purpose.label} from the mounted backup share.")
    _add_common_arguments(parser)
    parser.add_argument("--list", "-l", action="store_true", dest="list_only",
                        help="List available archives and exit.")
    parser.add_argument("name", nargs="?", default=None,
                        help="Restore only this category, directory or application.")
    args = parser.parse_args(argv)

    return {
        "dry_run": args.dry_run,
        "list_only": args.list_only,
        "name": args.name,
        "config_file": args.config,
        "verbose": args.verbose,
    }
