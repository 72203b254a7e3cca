"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from typing import Any

import pytest

from configuration import configuration
from models.user_record import UserRecord
from tests.unit import config_dict


@pytest.fixture(name="reset_configuration")
def reset_configuration_fixture() -> Any:
    """Reinitialize configuration, so every test gets fresh quota state."""
    configuration.init_from_dict(config_dict)
    yield configuration
    configuration.init_from_dict(config_dict)


@pytest.fixture(name="user_record")
def user_record_fixture() -> UserRecord:
    """Registered user on FREE plan without any usage."""
    return UserRecord(id="user-1", username="alice", plan="FREE")
