"""
Test Configuration
==================

Shared fixtures for chatrelay tests.
"""

import pytest

from tests.fakes import FakeLambdaChat


@pytest.fixture
def fake_upstream():
    """Factory fixture: `fake_upstream(chunks=[...], ...)`."""
    return FakeLambdaChat
