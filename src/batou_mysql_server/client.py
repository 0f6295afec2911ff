import shlex

import batou.utils


class MySQLClient:
    """Run statements through the `mysql` command line client.

    Authentication is taken from the credential file, which is a valid
    client option file.
    """

    def __init__(self, defaults_file):
        self.defaults_file = defaults_file

    def execute(self, statement):
        stdout, _ = batou.utils.cmd(
            "mysql --defaults-file={} -e {}".format(
                shlex.quote(self.defaults_file), shlex.quote(statement)
            )
        )
        return stdout

    def drop_database(self, name):
        self.execute(f"DROP DATABASE IF EXISTS `{name}`;")

    def list_users(self):
        return self.execute("SELECT User,Host FROM mysql.user\\G")
