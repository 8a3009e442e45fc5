# tests/conftest.py
import pytest

pytest_plugins = ["uiauto_keys.pytest_plugin"]


@pytest.fixture(autouse=True)
def _isolated(uiauto_isolation):
    """Every test starts from default timing and unfrozen identifier settings."""
    yield
