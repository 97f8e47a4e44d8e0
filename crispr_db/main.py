##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Main entry point into crispr_db's command line interface.

Commands:
    init: Create the database schema and seed the status vocabulary.
    info: Show where the configuration and database live.
"""

import logging
import sys
import traceback
from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter

from crispr_db import VERSION
from crispr_db.config.configfile import default_config_info, get_config_object
from crispr_db.db_scripts.crispr_db import CrisprDatabase
from crispr_db.log_formatter import setup_logging_from_config


LOG = logging.getLogger("crispr_db")


def process_init(args: Namespace):
    """
    Create any missing tables in the database.

    Args:
        args: Parsed CLI arguments.
    """
    with CrisprDatabase(db_path=args.db_path) as db:
        LOG.info(f"Database ready at {db.get_connection_string()} (SQLite {db.get_db_version()}).")


def process_info(args: Namespace):  # pylint: disable=unused-argument
    """
    Print the configuration crispr_db is running with.

    Args:
        args: Parsed CLI arguments.
    """
    for key, value in default_config_info().items():
        print(f"{key}: {value}")
    print(get_config_object())


def build_main_parser() -> ArgumentParser:
    """
    Build the argument parser for the crispr_db CLI.

    Returns:
        The parser.
    """
    parser = ArgumentParser(
        prog="crispr-db",
        description="Storage of CRISPR screening records.",
        formatter_class=RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--version", action="version", version=VERSION)
    parser.add_argument(
        "-lvl",
        "--level",
        action="store",
        dest="level",
        type=str,
        default=None,
        help="Set the log level. Options: DEBUG, INFO, WARNING, ERROR. Defaults to the configured level.",
    )
    subparsers = parser.add_subparsers(dest="subparsers")
    subparsers.required = True

    init = subparsers.add_parser("init", help="Create the database schema.")
    init.set_defaults(func=process_init)
    init.add_argument("--db-path", type=str, default=None, help="Path to the database file.")

    info = subparsers.add_parser("info", help="Show the configuration in use.")
    info.set_defaults(func=process_info)

    return parser


def main():
    """Entry point for the crispr_db command line interface."""
    parser = build_main_parser()
    if len(sys.argv) == 1:
        parser.print_help(sys.stdout)
        return 1
    args = parser.parse_args()

    setup_logging_from_config(LOG, get_config_object().logging, log_level=args.level)

    try:
        args.func(args)
    except Exception as excpt:  # pylint: disable=broad-except
        LOG.debug(traceback.format_exc())
        LOG.error(str(excpt))
        sys.exit(1)

    sys.exit()


if __name__ == "__main__":
    main()
