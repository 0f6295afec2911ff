import enum

import batou

ROOT_PASSWORD_QUESTIONS = ("root_password", "root_password_again")


class InstallOutcome(enum.Enum):
    ALREADY_PRESENT = "already_present"
    NEWLY_INSTALLED = "newly_installed"


def seed_root_password(debconf, package, credential):
    for question in ROOT_PASSWORD_QUESTIONS:
        debconf.set_answer(
            package, f"{package}/{question}", credential, "password"
        )


def clear_root_password(debconf, package):
    for question in ROOT_PASSWORD_QUESTIONS:
        debconf.set_answer(package, f"{package}/{question}", "", "text")


def ensure_installed(package, credential, installed, apt, debconf):
    """Install `package` unless `installed`, seeding the root password.

    The seeded answers are cleared afterwards in every case, including when
    nothing was seeded, so the password never lingers in the debconf
    database.
    """
    outcome = InstallOutcome.ALREADY_PRESENT
    try:
        if not installed:
            batou.output.annotate(f"Installing {package}")
            seed_root_password(debconf, package, credential)
            apt.install(package)
            outcome = InstallOutcome.NEWLY_INSTALLED
        else:
            batou.output.annotate(f"{package} is already installed")
    finally:
        clear_root_password(debconf, package)
    return outcome
