from typing import Optional

from .assistant import ChatAssistant
from .collaborators import Clock, CredentialService, IdFactory
from .commerce import CommerceLedger
from .content import ContentLedger
from .identity import IdentityRegistry
from .models import PublicUser
from .referrals import ReferralLedger
from .search import SearchView
from .settings import S, Settings
from .social import MessagingLedger, TipLedger
from .subscriptions import SubscriptionLedger


class PlatformService:
    """Wires the ledgers together with one set of settings and collaborators.

    Each ledger still owns its own records and lock; the service only holds
    references so the request layer has a single entry point.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        credentials: Optional[CredentialService] = None,
        id_factory: Optional[IdFactory] = None,
        clock: Optional[Clock] = None,
        assistant: Optional[ChatAssistant] = None,
    ):
        self.settings = settings or S
        self.identity = IdentityRegistry(credentials, self.settings, id_factory, clock)
        self.subscriptions = SubscriptionLedger(self.settings, id_factory, clock)
        self.content = ContentLedger(self.subscriptions, id_factory, clock)
        self.commerce = CommerceLedger(id_factory, clock)
        self.referrals = ReferralLedger(self.settings, id_factory, clock)
        self.messages = MessagingLedger(self.settings, id_factory, clock)
        self.tips = TipLedger(id_factory, clock)
        self.search = SearchView(self.identity, self.content)
        self.assistant = assistant or ChatAssistant(
            api_key=self.settings.groq_api_key, model=self.settings.groq_model
        )

    def conversation_partners(self, user_id: str) -> list[PublicUser]:
        partners = []
        for partner_id in self.messages.conversations_of(user_id):
            user = self.identity.lookup_by_id(partner_id)
            if user is not None:
                partners.append(user.public())
        return partners
