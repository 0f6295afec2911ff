import shlex

import batou.utils


class Systemd:
    """Control services through systemctl."""

    def _systemctl(self, *args):
        batou.utils.cmd(
            "systemctl {}".format(" ".join(shlex.quote(a) for a in args))
        )

    def stop(self, name):
        self._systemctl("stop", name)

    def start(self, name):
        self._systemctl("start", name)

    def restart(self, name):
        self._systemctl("restart", name)

    def reload_unit_cache(self):
        self._systemctl("daemon-reload")
