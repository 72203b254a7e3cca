"""Unit tests for endpoints utility functions."""

import pytest

from configuration import AppConfig
from models.identity import AnonymousOrigin, RegisteredUser
from models.user_record import UserRecord
from quota.admission import Allow
from utils.endpoints import admit_request, check_configuration_loaded
from utils.relay_errors import AppLimitError, AuthError, ServerError


def test_check_configuration_loaded(reset_configuration: AppConfig) -> None:
    """Test that loaded configuration passes the check."""
    check_configuration_loaded(reset_configuration)


def test_check_configuration_not_loaded(reset_configuration: AppConfig) -> None:
    """Test that missing configuration is reported as server error."""
    reset_configuration._configuration = None  # pylint: disable=protected-access
    with pytest.raises(ServerError):
        check_configuration_loaded(reset_configuration)


@pytest.mark.asyncio
async def test_admit_request_anonymous(reset_configuration: AppConfig) -> None:
    """Test that anonymous caller is admitted until the limit is reached."""
    _ = reset_configuration
    identity = AnonymousOrigin(origin_key="10.0.0.1")

    for expected in range(1, 11):
        decision = await admit_request(identity)
        assert decision == Allow(count=expected)

    with pytest.raises(AppLimitError) as e:
        await admit_request(identity)
    assert e.value.retry_after_sec == 86400


@pytest.mark.asyncio
async def test_admit_request_unknown_user(reset_configuration: AppConfig) -> None:
    """Test that user without record is rejected with AUTH error."""
    _ = reset_configuration
    with pytest.raises(AuthError):
        await admit_request(RegisteredUser(id="ghost", plan_tier="FREE"))


@pytest.mark.asyncio
async def test_admit_request_registered_user(
    reset_configuration: AppConfig, user_record: UserRecord
) -> None:
    """Test that registered user is charged in the user store."""
    reset_configuration.user_store.persist(user_record)

    decision = await admit_request(RegisteredUser(id="user-1", plan_tier="FREE"))

    assert decision == Allow(count=1)
    stored = reset_configuration.user_store.find("user-1")
    assert stored is not None
    assert sum(usage.requests for usage in stored.usage.values()) == 1
