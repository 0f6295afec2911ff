import os.path
import re

import batou
import batou.component
import batou.utils
from batou.component import Attribute

from batou_mysql_server.apt import Apt, Debconf
from batou_mysql_server.client import MySQLClient
from batou_mysql_server.credential import (
    MIN_PASSWORD_LENGTH,
    resolve_credential,
)
from batou_mysql_server.facts import RunFacts
from batou_mysql_server.filesystem import FileSystem
from batou_mysql_server.install import ensure_installed
from batou_mysql_server.relocate import (
    DEFAULT_DATA_DIR,
    RelocationOutcome,
    Relocator,
    relocation_needed,
)
from batou_mysql_server.service import Systemd

CREDENTIAL_FILE = "/root/.my.cnf"
AUXILIARY_PACKAGES = (
    "libdbd-mysql-perl",
    "libmysqlclient-dev",
    "percona-toolkit",
    "python3-mysqldb",
)


class MySQLServerSetup:
    """Converge a Debian host to a running MySQL server.

    Phases run strictly in order: credential, installation, data directory
    relocation, service start, auxiliary packages, cleanup. Every decision
    is taken from what the host reports during this run.
    """

    def __init__(
        self,
        data_dir="",
        default_data_dir=DEFAULT_DATA_DIR,
        credential_file=CREDENTIAL_FILE,
        package_name="mysql-server",
        service_name="mysql",
        password_length=MIN_PASSWORD_LENGTH,
        auxiliary_packages=AUXILIARY_PACKAGES,
        apt=None,
        debconf=None,
        services=None,
        fs=None,
        client=None,
        confirm=None,
    ):
        self.data_dir = data_dir
        self.default_data_dir = default_data_dir
        self.credential_file = credential_file
        self.package_name = package_name
        self.service_name = service_name
        self.password_length = password_length
        self.auxiliary_packages = tuple(auxiliary_packages)
        self.apt = apt or Apt()
        self.debconf = debconf or Debconf()
        self.services = services or Systemd()
        self.fs = fs or FileSystem()
        self.client = client or MySQLClient(credential_file)
        self.relocator = Relocator(
            self.fs, self.services, service=service_name, confirm=confirm
        )

    def run(self):
        facts = RunFacts()
        self.inspect(facts)
        self.remove_lost_and_found()

        credential = resolve_credential(
            self.credential_file, self.password_length, facts
        )
        facts.install_outcome = ensure_installed(
            self.package_name,
            credential,
            facts.package_installed,
            self.apt,
            self.debconf,
        )
        outcome = self.relocator.relocate_if_needed(
            self.data_dir, self.default_data_dir, facts
        )
        if outcome is RelocationOutcome.SKIPPED:
            # The unit file may have been replaced by a package upgrade.
            self.relocator.ensure_unit_condition(
                self.data_dir, self.default_data_dir, facts
            )

        batou.output.annotate(f"Starting {self.service_name}")
        self.services.start(self.service_name)

        self.install_auxiliary(facts)
        self.cleanup(facts)
        return facts

    def inspect(self, facts):
        self.apt.refresh_index()

        facts.installed_versions = self.apt.query_installed(self.package_name)
        facts.package_installed = self.apt.is_installed(self.package_name)
        batou.output.annotate(f"Installed {self.package_name} packages:")
        for row in facts.installed_versions or ["(none)"]:
            batou.output.line(row)

        versioned = re.compile(
            r"^{}-[0-9]".format(re.escape(self.package_name))
        )
        facts.available_versions = [
            line
            for line in self.apt.search(self.package_name)
            if versioned.match(line)
        ]
        batou.output.annotate(f"Available {self.package_name} packages:")
        for line in facts.available_versions or ["(none)"]:
            batou.output.line(line)

    def remove_lost_and_found(self):
        # mysqld would list a leftover mount point directory as a schema.
        if self.data_dir:
            self.fs.remove(os.path.join(self.data_dir, "lost+found"))

    def install_auxiliary(self, facts):
        for package in self.auxiliary_packages:
            if self.apt.is_installed(package):
                continue
            batou.output.annotate(f"Installing {package}")
            self.apt.install(package)
            facts.auxiliary_installed.append(package)

    def cleanup(self, facts):
        self.client.drop_database("test")
        facts.users = self.client.list_users()
        batou.output.annotate("Users on this server:")
        for line in facts.users.splitlines():
            batou.output.line(line)


class MySQLServer(batou.component.Component):
    """
    Install MySQL server on a Debian host and optionally move its data
    directory to a dedicated location, e.g. a separately mounted disk.

    Usage::

        self += batou_mysql_server.server.MySQLServer(
            data_dir="/srv/mysql")

    The root password is generated on first deployment and kept in
    `credential_file` (`/root/.my.cnf`), so the root user can use the
    `mysql` client without a password afterwards. The data directory must
    exist before deploying. Once it has moved, the systemd unit refuses to
    start the server when the directory is unavailable.

    Leave `data_dir` empty to keep the data in `default_data_dir`.
    """

    data_dir = Attribute(str, default="")
    default_data_dir = Attribute(str, default=DEFAULT_DATA_DIR)
    credential_file = Attribute(str, default=CREDENTIAL_FILE)
    package_name = Attribute(str, default="mysql-server")
    service_name = Attribute(str, default="mysql")
    password_length = Attribute(int, default=MIN_PASSWORD_LENGTH)
    port = Attribute(int, default=3306)

    auxiliary_packages = AUXILIARY_PACKAGES

    def configure(self):
        if not self.package_name:
            raise ValueError("`package_name` must be set.")
        if self.password_length < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"`password_length` must be at least {MIN_PASSWORD_LENGTH}."
            )

        self.address = batou.utils.Address(self.host.fqdn, self.port)
        self.provide("mysql-server", self)

        self.workflow = MySQLServerSetup(
            data_dir=self.data_dir,
            default_data_dir=self.default_data_dir,
            credential_file=self.credential_file,
            package_name=self.package_name,
            service_name=self.service_name,
            password_length=self.password_length,
            auxiliary_packages=self.auxiliary_packages,
        )

    def verify(self):
        workflow = self.workflow
        if not os.path.exists(self.credential_file):
            raise batou.UpdateNeeded()
        for package in (self.package_name,) + workflow.auxiliary_packages:
            if not workflow.apt.is_installed(package):
                raise batou.UpdateNeeded()
        if relocation_needed(
            self.data_dir, self.default_data_dir, workflow.fs
        ):
            raise batou.UpdateNeeded()
        if workflow.relocator.unit_condition_missing(
            self.data_dir, self.default_data_dir
        ):
            raise batou.UpdateNeeded()

    def update(self):
        facts = self.workflow.run()
        self.log(
            "{}: {}, data directory {}".format(
                self.package_name,
                facts.install_outcome.value,
                facts.relocation_outcome.value,
            )
        )
