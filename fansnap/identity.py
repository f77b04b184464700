import asyncio
import copy
import logging
from typing import Any, Optional

from .collaborators import Clock, CredentialService, IdFactory, PasslibCredentialService
from .errors import ConflictError, InvalidInputError, NotFoundError, UnauthenticatedError
from .models import Profile, PublicUser, Role, User, UserSummary
from .settings import S, Settings
from .store import InMemoryLedger

logger = logging.getLogger(__name__)

# wire key -> (profile attribute, accepted type)
PROFILE_FIELDS: dict[str, tuple[str, type]] = {
    "bio": ("bio", str),
    "profile_picture": ("profile_picture", str),
    "profilePicture": ("profile_picture", str),
    "banner": ("banner", str),
    "social_links": ("social_links", dict),
    "socialLinks": ("social_links", dict),
    "subscription_plans": ("subscription_plans", list),
    "subscriptionPlans": ("subscription_plans", list),
}


class IdentityRegistry(InMemoryLedger):
    def __init__(
        self,
        credentials: Optional[CredentialService] = None,
        settings: Optional[Settings] = None,
        id_factory: Optional[IdFactory] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(id_factory, clock)
        self.settings = settings or S
        self.credentials = credentials or PasslibCredentialService(self.settings.bcrypt_rounds)
        self.usernames: dict[str, str] = {}

    async def register(self, username: str, email: str, credential: str, role: Any = Role.SUBSCRIBER) -> PublicUser:
        if not username or not email or not credential:
            raise InvalidInputError("Missing required fields")
        try:
            role = Role(role)
        except ValueError:
            raise InvalidInputError(f"Unknown role {role!r}", {"field": "role"})

        if self.lookup_by_username(username) is not None:
            raise ConflictError("Username already exists", {"username": username})

        secret = await asyncio.to_thread(self.credentials.hash, credential)

        # a concurrent registration may have taken the name while hashing
        with self.lock:
            if username in self.usernames:
                raise ConflictError("Username already exists", {"username": username})
            user_id = self.new_id()
            self.records[user_id] = {
                "id": user_id,
                "username": username,
                "email": email,
                "credential_secret": secret,
                "role": role,
                "created_at": self.now(),
                "profile": Profile().model_dump(),
            }
            self.usernames[username] = user_id

        logger.info("Registered user %s as %s", user_id, role.value)
        return PublicUser(id=user_id, username=username, role=role)

    async def verify_credential(self, username: str, credential: str) -> PublicUser:
        user = self.lookup_by_username(username)
        if user is None or not credential:
            raise UnauthenticatedError("Invalid username or password")
        valid = await asyncio.to_thread(self.credentials.verify, credential, user.credential_secret)
        if not valid:
            logger.warning("Credential mismatch for user %s", user.id)
            raise UnauthenticatedError("Invalid username or password")
        return user.public()

    def lookup_by_id(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        data = self._get(user_id)
        return User(**data) if data else None

    def lookup_by_username(self, username: Optional[str]) -> Optional[User]:
        with self.lock:
            user_id = self.usernames.get(username) if username else None
        return self.lookup_by_id(user_id)

    def update_profile(self, user_id: str, fields: Any) -> Profile:
        if not isinstance(fields, dict):
            if self.settings.strict_profile_updates:
                raise InvalidInputError("Profile update must be a mapping of fields")
            fields = {}

        updates: dict[str, Any] = {}
        for key, value in fields.items():
            if key not in PROFILE_FIELDS:
                continue
            attr, expected = PROFILE_FIELDS[key]
            if isinstance(value, expected):
                updates[attr] = copy.deepcopy(value)
            elif self.settings.strict_profile_updates:
                raise InvalidInputError(
                    f"{key} must be of type {expected.__name__}", {"field": key}
                )

        with self.lock:
            data = self.records.get(user_id)
            if data is None:
                raise NotFoundError(f"User {user_id} not found")
            data["profile"].update(updates)
            profile = copy.deepcopy(data["profile"])

        return Profile(**profile)

    def list_users(self) -> list[UserSummary]:
        return [
            UserSummary(id=u["id"], username=u["username"], role=u["role"],
                        email=u["email"], created_at=u["created_at"])
            for u in self._snapshot()
        ]

    def all_users(self) -> list[User]:
        return [User(**u) for u in self._snapshot()]
