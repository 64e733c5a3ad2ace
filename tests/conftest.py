import pytest

from depot import create_registry, set_active_registry


@pytest.fixture(autouse=True)
def _no_active_registry():
    set_active_registry(None)
    yield
    set_active_registry(None)


@pytest.fixture
def registry():
    r = create_registry()
    yield r
    r.dispose()
