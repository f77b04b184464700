from .content import ContentLedger
from .errors import InvalidInputError
from .identity import IdentityRegistry
from .models import Post, PublicUser


class SearchView:
    """Read-only, case-insensitive substring search over users and posts."""

    def __init__(self, identity: IdentityRegistry, content: ContentLedger):
        self.identity = identity
        self.content = content

    def search_users(self, query: str) -> list[PublicUser]:
        q = self._normalize(query)
        return [
            u.public() for u in self.identity.all_users()
            if q in u.username.lower() or (u.profile.bio and q in u.profile.bio.lower())
        ]

    def search_posts(self, query: str) -> list[Post]:
        q = self._normalize(query)
        return [
            p for p in self.content.all_posts()
            if q in p.content.lower() or any(q in tag.lower() for tag in p.tags)
        ]

    @staticmethod
    def _normalize(query: str) -> str:
        if not query or not isinstance(query, str):
            raise InvalidInputError("Missing query", {"field": "q"})
        return query.lower()
