"""Recover or create the MySQL root credential.

The credential lives in a client option file (usually `/root/.my.cnf`)::

    [client]
    password = <secret>

which also lets the root user run the `mysql` client without typing a
password.
"""

import os
import os.path
import secrets
import string

import batou

from batou_mysql_server.errors import CredentialRecoveryError

PASSWORD_PREFIX = "password = "
PASSWORD_CHARS = string.ascii_letters + string.digits
MIN_PASSWORD_LENGTH = 20


def generate_password(length=MIN_PASSWORD_LENGTH):
    if length < MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"Password length must be at least {MIN_PASSWORD_LENGTH}, "
            f"got {length}"
        )
    return "".join(secrets.choice(PASSWORD_CHARS) for _ in range(length))


def read_password(path):
    """Return the value of the first `password = ` line, or ''."""
    with open(path, "r") as f:
        for line in f:
            if line.startswith(PASSWORD_PREFIX):
                return line.split(" = ", 1)[1].strip()
    return ""


def write_credential_file(path, password):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write("[client]\n")
        f.write(f"{PASSWORD_PREFIX}{password}\n")


def resolve_credential(path, length=MIN_PASSWORD_LENGTH, facts=None):
    """Return the root password persisted at `path`.

    A missing file is created with a freshly generated password; an
    existing file is only read.
    """
    exists = os.path.exists(path)
    if facts is not None:
        facts.credential_file_exists = exists

    if not exists:
        password = generate_password(length)
        write_credential_file(path, password)
        batou.output.annotate(f"Generated new root credential in {path}")
    else:
        try:
            password = read_password(path)
        except (OSError, UnicodeDecodeError) as e:
            raise CredentialRecoveryError(path) from e
        if not password:
            raise CredentialRecoveryError(path)
        batou.output.annotate(f"Recovered root credential from {path}")

    if facts is not None:
        facts.root_password = password
    return password
