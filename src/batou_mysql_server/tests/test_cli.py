import batou.utils
import pytest

from batou_mysql_server import cli
from batou_mysql_server.errors import CredentialRecoveryError
from batou_mysql_server.facts import RunFacts
from batou_mysql_server.server import AUXILIARY_PACKAGES


@pytest.fixture
def workflow(mocker):
    return mocker.patch("batou_mysql_server.cli.MySQLServerSetup")


def test_defaults_ask_before_moving(workflow):
    workflow.return_value.run.return_value = RunFacts()
    assert 0 == cli.main(["--data-dir", "/srv/mysql"])
    workflow.assert_called_once_with(
        data_dir="/srv/mysql",
        default_data_dir="/var/lib/mysql",
        credential_file="/root/.my.cnf",
        package_name="mysql-server",
        password_length=20,
        auxiliary_packages=AUXILIARY_PACKAGES,
        confirm=cli.confirm_relocation,
    )


def test_yes_and_no_auxiliary(workflow):
    workflow.return_value.run.return_value = RunFacts()
    assert 0 == cli.main(["-y", "--no-auxiliary"])
    kw = workflow.call_args[1]
    assert kw["confirm"] is None
    assert () == kw["auxiliary_packages"]


def test_show_facts_prints_yaml(workflow, capsys):
    facts = RunFacts()
    facts.root_password = "secret"
    facts.target_data_dir = "/srv/mysql"
    workflow.return_value.run.return_value = facts

    assert 0 == cli.main(["--show-facts"])

    out = capsys.readouterr().out
    assert "target_data_dir: /srv/mysql" in out
    assert "secret" not in out


def test_workflow_errors_exit_with_failure(workflow):
    workflow.return_value.run.side_effect = CredentialRecoveryError(
        "/root/.my.cnf"
    )
    assert 1 == cli.main([])


def test_failed_commands_exit_with_failure(workflow):
    error = batou.utils.CmdExecutionError.__new__(
        batou.utils.CmdExecutionError
    )
    error.stderr = "E: broken"
    workflow.return_value.run.side_effect = error
    assert 1 == cli.main([])


def test_confirm_relocation_asks_operator(mocker):
    confirm = mocker.patch("InquirerPy.inquirer.confirm")
    confirm.return_value.execute.return_value = True
    assert cli.confirm_relocation("Move?")
    confirm.assert_called_once_with(message="Move?", default=False)


def test_os_errors_exit_with_failure(workflow):
    workflow.return_value.run.side_effect = PermissionError(
        13, "Permission denied", "/root/.my.cnf"
    )
    assert 1 == cli.main([])
