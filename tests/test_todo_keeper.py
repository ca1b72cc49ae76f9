import allure
from click.testing import CliRunner

from todo_keeper import __version__
from todo_keeper.main import todo_keeper

pytestmark = [
    allure.epic("CLI"),
    allure.feature("Entrypoint"),
]


def test_version():
    assert __version__


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(todo_keeper, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
