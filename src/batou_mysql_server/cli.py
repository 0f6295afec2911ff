"""Command line entry point to set up MySQL server on the local host."""

import argparse
import sys

import batou
import batou.utils
import pyaml
from InquirerPy import inquirer

from batou_mysql_server.credential import MIN_PASSWORD_LENGTH
from batou_mysql_server.errors import MySQLServerError
from batou_mysql_server.relocate import DEFAULT_DATA_DIR
from batou_mysql_server.server import (
    AUXILIARY_PACKAGES,
    CREDENTIAL_FILE,
    MySQLServerSetup,
)


def confirm_relocation(message):
    return inquirer.confirm(message=message, default=False).execute()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Install MySQL server and move its data directory."
    )
    parser.add_argument(
        "-d",
        "--data-dir",
        default="",
        help="Data directory to move the data to. It must already exist. "
        "Leave empty to keep the default location.",
    )
    parser.add_argument(
        "--default-data-dir",
        default=DEFAULT_DATA_DIR,
        help="Data directory used by the distribution package.",
    )
    parser.add_argument(
        "-c",
        "--credential-file",
        default=CREDENTIAL_FILE,
        help="Client option file holding the root password.",
    )
    parser.add_argument(
        "-p", "--package", default="mysql-server", help="Server package name"
    )
    parser.add_argument(
        "--password-length",
        type=int,
        default=MIN_PASSWORD_LENGTH,
        help="Length of a newly generated root password.",
    )
    parser.add_argument(
        "--no-auxiliary",
        action="store_true",
        help="Do not install client libraries and tools.",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Move the data directory without asking.",
    )
    parser.add_argument(
        "--show-facts",
        action="store_true",
        help="Print the facts gathered during the run as YAML.",
    )
    args = parser.parse_args(argv)

    workflow = MySQLServerSetup(
        data_dir=args.data_dir,
        default_data_dir=args.default_data_dir,
        credential_file=args.credential_file,
        package_name=args.package,
        password_length=args.password_length,
        auxiliary_packages=() if args.no_auxiliary else AUXILIARY_PACKAGES,
        confirm=None if args.yes else confirm_relocation,
    )
    try:
        facts = workflow.run()
    except MySQLServerError as e:
        e.report()
        return 1
    except batou.utils.CmdExecutionError as e:
        batou.output.error(f"Command failed: {e.stderr}")
        return 1
    except (OSError, ValueError) as e:
        batou.output.error(str(e))
        return 1

    if args.show_facts:
        pyaml.dump(facts.as_dict(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
