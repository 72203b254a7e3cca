"""Unit tests for functions defined in src/chat_relay.py."""

import os
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

import constants
from chat_relay import create_argument_parser, main
from configuration import configuration
from tests.unit import config_dict


@pytest.fixture(autouse=True)
def _restore_configuration():
    yield
    configuration.init_from_dict(config_dict)


def test_create_argument_parser() -> None:
    """Test for create_argument_parser function."""
    arg_parser = create_argument_parser()
    args = arg_parser.parse_args([])

    assert args.verbose is False
    assert args.dump_configuration is False
    assert args.config_file == "chat-relay.yaml"


def test_argument_parser_options() -> None:
    """Test parsing all supported options."""
    args = create_argument_parser().parse_args(
        ["-v", "-d", "-c", "other.yaml"]
    )

    assert args.verbose is True
    assert args.dump_configuration is True
    assert args.config_file == "other.yaml"


def test_main_starts_service(
    mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that main loads configuration and starts Uvicorn."""
    monkeypatch.setenv(constants.CONFIG_PATH_ENV_VAR, "unused.yaml")
    mocker.patch(
        "sys.argv", ["chat_relay", "-c", "tests/configuration/chat-relay.yaml"]
    )
    start_uvicorn = mocker.patch("chat_relay.start_uvicorn")

    main()

    start_uvicorn.assert_called_once_with(
        configuration.service_configuration, verbose=False
    )
    assert (
        os.environ[constants.CONFIG_PATH_ENV_VAR]
        == "tests/configuration/chat-relay.yaml"
    )


def test_main_dump_configuration(
    mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Test that -d dumps configuration and does not start the service."""
    config_file = Path("tests/configuration/chat-relay.yaml").absolute()
    monkeypatch.chdir(tmp_path)
    mocker.patch("sys.argv", ["chat_relay", "-d", "-c", str(config_file)])
    start_uvicorn = mocker.patch("chat_relay.start_uvicorn")

    main()

    start_uvicorn.assert_not_called()
    assert (tmp_path / "configuration.json").exists()


def test_main_dump_configuration_failure(mocker: MockerFixture) -> None:
    """Test that failed dump ends with non-zero exit code."""
    mocker.patch(
        "sys.argv", ["chat_relay", "-d", "-c", "tests/configuration/chat-relay.yaml"]
    )
    mocker.patch(
        "models.config.Configuration.dump", side_effect=OSError("read-only")
    )

    with pytest.raises(SystemExit) as e:
        main()

    assert e.value.code == 1
