import pytest

from mcp_starter.config import Settings
from mcp_starter.runtime import create_runtime


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def runtime():
    return create_runtime(Settings(long_task_step_seconds=0.01))


@pytest.fixture
def slow_runtime():
    return create_runtime(Settings(long_task_step_seconds=1.0))
