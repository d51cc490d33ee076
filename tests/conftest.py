from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from rankly.core.config import settings

# Override settings for tests
settings.app_env = "development"
settings.empty_selection_means_all = True
settings.recompute_shares = False

from rankly.main import app  # noqa: E402


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
