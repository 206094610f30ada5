"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fincalc.calculations.rates import get_rate_table
from fincalc.config import get_settings


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def rates():
    """Packaged rate table."""
    return get_rate_table()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def client():
    """Create test client."""
    from fastapi.testclient import TestClient
    from fincalc.main import app

    return TestClient(app)
