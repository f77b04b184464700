import asyncio

import pytest

from fansnap.models import Role
from fansnap.service import PlatformService
from fansnap.settings import Settings


class PlainCredentials:
    """Reversible stand-in for bcrypt so tests stay fast."""

    def hash(self, secret: str) -> str:
        return f"plain${secret}"

    def verify(self, secret: str, hashed: str) -> bool:
        return hashed == f"plain${secret}"


def run_async(coro):
    return asyncio.run(coro)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def service(settings):
    return PlatformService(settings=settings, credentials=PlainCredentials())


@pytest.fixture
def register(service):
    def _register(username: str, role: Role = Role.SUBSCRIBER, password: str = "secret"):
        return run_async(service.identity.register(username, f"{username}@example.com", password, role))
    return _register
