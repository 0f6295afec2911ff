from batou.fixtures import root  # noqa: F401
