from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default) not in ("0", "false", "False")


@dataclass(frozen=True)
class Settings:
    # Referral commissions: permissive mode only rejects negatives
    strict_commission: bool = _flag("FANSNAP_STRICT_COMMISSION", "0")
    default_commission: Decimal = Decimal(os.environ.get("FANSNAP_DEFAULT_COMMISSION", "0.2"))

    # Messaging
    allow_self_messages: bool = _flag("FANSNAP_ALLOW_SELF_MESSAGES", "1")

    # Profile updates: silently drop mistyped fields unless strict
    strict_profile_updates: bool = _flag("FANSNAP_STRICT_PROFILE_UPDATES", "0")

    # Subscriptions
    default_plan: str = os.environ.get("FANSNAP_DEFAULT_PLAN", "monthly")

    # Credentials
    bcrypt_rounds: int = int(os.environ.get("FANSNAP_BCRYPT_ROUNDS", "10"))

    log_level: str = os.environ.get("FANSNAP_LOG_LEVEL", "INFO").upper()

    # AI assistant
    groq_api_key: str = os.environ.get("GROQ_API_KEY", "")
    groq_model: str = os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile")


S = Settings()
