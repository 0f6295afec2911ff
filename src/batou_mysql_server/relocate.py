"""Move the MySQL data directory away from its platform default."""

import enum
import os.path
import re
import shutil

import batou

from batou_mysql_server.errors import (
    MissingTargetDirectoryError,
    NestedTargetDirectoryError,
    RelocationCopyError,
)
from batou_mysql_server.facts import RunFacts

DEFAULT_DATA_DIR = "/var/lib/mysql"
CONFIG_FILES = ("/etc/my.cnf", "/etc/mysql/mysql.conf.d/mysqld.cnf")
APPARMOR_PROFILE = "/etc/apparmor.d/usr.sbin.mysqld"
APPARMOR_SERVICE = "apparmor"
UNIT_FILE = "/lib/systemd/system/mysql.service"
UNIT_CONDITION = "ConditionPathExists="
UNIT_ANCHOR = r"^ExecStartPre="
DATA_DIR_MODE = "u=rwX,g=rwX,o-rwx"


class RelocationOutcome(enum.Enum):
    SKIPPED = "skipped"
    MOVED = "moved"


class PathRewriteTarget:
    """A file known to reference the default data directory."""

    def __init__(self, path, pattern, replacement, apparmor=False):
        self.path = path
        self.pattern = pattern
        self.replacement = replacement
        self.apparmor = apparmor
        self.exists = False
        self.rewritten = False


def normalize(path):
    return os.path.normpath(path) if path else ""


def relocation_needed(target_dir, default_dir, fs):
    target_dir = normalize(target_dir)
    default_dir = normalize(default_dir)
    return bool(
        target_dir
        and target_dir != default_dir
        and fs.stat(default_dir).is_dir
    )


def condition_line(target_dir):
    return f"{UNIT_CONDITION}{target_dir}"


def describe_copy_error(error):
    if isinstance(error, shutil.Error) and isinstance(error.args[0], list):
        return "; ".join(f"{src}: {why}" for src, _, why in error.args[0])
    return str(error)


class Relocator:
    """Moves a data directory and repairs every reference to it.

    Usage::

        relocator = Relocator(FileSystem(), Systemd())
        relocator.relocate_if_needed("/data/mysql", "/var/lib/mysql")
    """

    def __init__(
        self,
        fs,
        services,
        service="mysql",
        config_files=CONFIG_FILES,
        apparmor_profile=APPARMOR_PROFILE,
        unit_file=UNIT_FILE,
        owner="mysql",
        group="mysql",
        mode=DATA_DIR_MODE,
        confirm=None,
    ):
        self.fs = fs
        self.services = services
        self.service = service
        self.config_files = config_files
        self.apparmor_profile = apparmor_profile
        self.unit_file = unit_file
        self.owner = owner
        self.group = group
        self.mode = mode
        # Called with a message before anything is touched; a false result
        # skips the relocation.
        self.confirm = confirm

    def rewrite_targets(self, target_dir, default_dir):
        targets = [
            PathRewriteTarget(path, re.escape(default_dir), target_dir)
            for path in self.config_files
        ]
        if self.apparmor_profile:
            targets.append(
                PathRewriteTarget(
                    self.apparmor_profile,
                    re.escape(default_dir + "/"),
                    target_dir + "/",
                    apparmor=True,
                )
            )
        return targets

    def check_target(self, target_dir, default_dir=""):
        target_dir = normalize(target_dir)
        default_dir = normalize(default_dir)
        if not target_dir:
            return
        if not self.fs.stat(target_dir).is_dir:
            raise MissingTargetDirectoryError(target_dir)
        # The default directory is removed once the data has been copied.
        if default_dir and target_dir.startswith(
            default_dir.rstrip(os.sep) + os.sep
        ):
            raise NestedTargetDirectoryError(target_dir, default_dir)

    def unit_condition_missing(self, target_dir, default_dir):
        """Whether a relocated directory still lacks its unit condition."""
        target_dir = normalize(target_dir)
        if not target_dir or target_dir == normalize(default_dir):
            return False
        if not self.fs.stat(self.unit_file).exists:
            return False
        with open(self.unit_file, "r") as f:
            lines = f.read().splitlines()
        return condition_line(target_dir) not in lines

    def ensure_unit_condition(self, target_dir, default_dir, facts=None):
        """Keep the service from starting without the moved directory.

        Returns whether the unit file changed; the unit cache is reloaded
        in that case.
        """
        target_dir = normalize(target_dir)
        if not target_dir or target_dir == normalize(default_dir):
            return False

        changed = False
        if self.fs.stat(self.unit_file).exists:
            changed = self.fs.ensure_line(
                self.unit_file,
                condition_line(target_dir),
                "^" + re.escape(UNIT_CONDITION),
                UNIT_ANCHOR,
            )
        else:
            batou.output.annotate(
                f"Unit file {self.unit_file} not found, cannot guard the "
                "service against a missing data directory",
                yellow=True,
            )
        if changed:
            self.services.reload_unit_cache()
        if facts is not None:
            facts.unit_file_edited = facts.unit_file_edited or changed
        return changed

    def relocate_if_needed(
        self, target_dir, default_dir=DEFAULT_DATA_DIR, facts=None
    ):
        if facts is None:
            facts = RunFacts()
        target_dir = normalize(target_dir)
        default_dir = normalize(default_dir)
        facts.target_data_dir = target_dir
        facts.relocation_outcome = RelocationOutcome.SKIPPED

        self.check_target(target_dir, default_dir)

        facts.default_data_dir_exists = self.fs.stat(default_dir).is_dir
        if not relocation_needed(target_dir, default_dir, self.fs):
            return facts.relocation_outcome

        if self.confirm and not self.confirm(
            f"Move the data directory {default_dir} to {target_dir}?"
        ):
            batou.output.annotate(
                f"Leaving the data directory in {default_dir}", yellow=True
            )
            return facts.relocation_outcome

        batou.output.annotate(f"Moving {default_dir} to {target_dir}")
        self.services.stop(self.service)

        try:
            self.fs.copy_recursive_preserve(default_dir, target_dir)
        except OSError as e:
            raise RelocationCopyError(
                default_dir, target_dir, describe_copy_error(e)
            )

        for target in self.rewrite_targets(target_dir, default_dir):
            target.exists = self.fs.stat(target.path).exists
            facts.config_file_exists[target.path] = target.exists
            if not target.exists:
                continue
            target.rewritten = self.fs.replace_text_in_file(
                target.path, target.pattern, target.replacement
            )
            if target.rewritten:
                batou.output.annotate(
                    f"Updated data directory in {target.path}"
                )
            if target.apparmor:
                facts.apparmor_edited = target.rewritten

        if facts.apparmor_edited:
            self.services.restart(APPARMOR_SERVICE)

        self.fs.remove(default_dir)

        self.fs.set_owner_group(
            target_dir, self.owner, self.group, recursive=True
        )
        self.fs.set_mode(target_dir, self.mode, recursive=True)

        self.ensure_unit_condition(target_dir, default_dir, facts)

        facts.relocation_outcome = RelocationOutcome.MOVED
        return facts.relocation_outcome
