import pytest


@pytest.fixture
def anyio_backend():
    # The code under test is asyncio-based; don't run on other installed backends.
    return "asyncio"
