"""Debian package manager and debconf pre-seeding."""

import shlex

import batou.utils


class Apt:
    """Query and install Debian packages with dpkg/apt."""

    def refresh_index(self):
        batou.utils.cmd("apt-get update -q")

    def query_installed(self, name):
        """Return the `dpkg -l` rows whose package name starts with `name`."""
        stdout, _ = batou.utils.cmd("dpkg -l", silent=True)
        rows = []
        for line in stdout.splitlines():
            fields = line.split()
            if len(fields) < 3 or len(fields[0]) != 2:
                continue
            if fields[1].split(":")[0].startswith(name):
                rows.append(line)
        return rows

    def is_installed(self, name):
        for row in self.query_installed(name):
            status, package = row.split()[:2]
            if status == "ii" and package.split(":")[0] == name:
                return True
        return False

    def install(self, name):
        batou.utils.cmd(
            "DEBIAN_FRONTEND=noninteractive apt-get install -y -q {}".format(
                shlex.quote(name)
            )
        )

    def search(self, pattern):
        stdout, _ = batou.utils.cmd(
            "apt-cache search {}".format(shlex.quote(pattern)), silent=True
        )
        return [line for line in stdout.splitlines() if line.strip()]


class Debconf:
    """Answer installer questions ahead of a non-interactive install."""

    def set_answer(self, package, question, value, value_type):
        # Fed through stdin so the value never shows up in a process list.
        selection = f"{package} {question} {value_type} {value}\n"
        proc = batou.utils.cmd("debconf-set-selections", communicate=False)
        outs, errs = proc.communicate(input=selection.encode("UTF-8"))
        if proc.returncode > 0:
            raise ValueError(f"debconf-set-selections error: {errs}")
