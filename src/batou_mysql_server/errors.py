from batou import ReportingException, output


class MySQLServerError(ReportingException):
    """Base for errors that abort the MySQL server workflow."""

    def __str__(self):
        return self.message

    def report(self):
        output.error(str(self))


class CredentialRecoveryError(MySQLServerError):
    def __init__(self, path):
        self.path = path
        self.message = (
            f"Credential file {path} exists but holds no usable "
            "`password = ` line"
        )


class MissingTargetDirectoryError(MySQLServerError):
    def __init__(self, path):
        self.path = path
        self.message = (
            f"Unable to find the expected data directory {path}. "
            "Please verify that this directory exists."
        )


class RelocationCopyError(MySQLServerError):
    def __init__(self, source, target, error_msg):
        self.source = source
        self.target = target
        self.error_msg = error_msg
        self.message = (
            f"Copying {source} to {target} failed, "
            f"leaving {source} in place: {error_msg}"
        )


class NestedTargetDirectoryError(MySQLServerError):
    def __init__(self, path, default_dir):
        self.path = path
        self.default_dir = default_dir
        self.message = (
            f"The data directory {path} lies inside {default_dir}, "
            "which is removed after moving the data."
        )
