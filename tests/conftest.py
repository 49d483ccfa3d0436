"""Root pytest configuration.

Test Structure:
    tests/
    ├── warden_config/         # Settings and duration parsing
    └── warden_identity/       # Identity core
        ├── unit/              # Fast, isolated tests
        └── integration/       # SQLite persistence and FastAPI boundary

Signing secrets are provided through the environment so ``get_settings()``
works without a config/.env file.
"""

import os

import pytest

from warden_config import clear_settings_cache

TEST_ACCESS_SECRET = "test-access-secret-0123456789abcdef"
TEST_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"

os.environ.setdefault("JWT_ACCESS_SECRET_KEY", TEST_ACCESS_SECRET)
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", TEST_REFRESH_SECRET)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: Tests that verify database/persistence or HTTP behavior",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take more than 1 second",
    )


@pytest.fixture(autouse=True)
def fresh_settings():
    """Clear cached settings around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
