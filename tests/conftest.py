"""Test configuration and fixtures."""

import pytest

from tests.factories import FixedClock
from tests.settings import make_test_settings


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def test_settings():
    """Test settings with every provider configured and rate limiting off."""
    return make_test_settings()
