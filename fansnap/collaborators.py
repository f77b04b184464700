"""
External collaborators consumed by the ledgers.

Each ledger takes an id factory and a clock so tests can pin both; the
identity registry additionally takes a credential service.
"""

from datetime import datetime, timezone
from typing import Callable, Protocol
from uuid import uuid4

from passlib.context import CryptContext

IdFactory = Callable[[], str]
Clock = Callable[[], datetime]


def new_id() -> str:
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CredentialService(Protocol):
    def hash(self, secret: str) -> str: ...

    def verify(self, secret: str, hashed: str) -> bool: ...


class PasslibCredentialService:
    def __init__(self, rounds: int = 10):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, secret: str) -> str:
        return self.context.hash(secret)

    def verify(self, secret: str, hashed: str) -> bool:
        return self.context.verify(secret, hashed)
