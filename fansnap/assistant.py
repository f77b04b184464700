import logging
from typing import Optional
from uuid import uuid4

from groq import Groq

from .settings import S

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are the fan-chat assistant of a creator on a subscription platform.
Reply to the fan's message in a friendly, short way, in the creator's voice.
Never promise content, discounts or meetings, and never ask for payment details."""


class ChatAssistant:
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else S.groq_api_key
        self.model = model or S.groq_model
        self.client = Groq(api_key=self.api_key) if self.api_key else None

    @property
    def is_available(self) -> bool:
        return self.client is not None

    def respond(self, message: str) -> str:
        if self.client:
            return self._respond_with_groq(message)
        return self._respond_locally(message)

    def _respond_with_groq(self, message: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": message}
                ],
                temperature=0.7,
                max_tokens=256
            )
            return response.choices[0].message.content.strip()
        except Exception as e:
            logger.warning("Groq error, falling back to canned reply: %s", e)
            return self._respond_locally(message)

    def _respond_locally(self, message: str) -> str:
        return f'AI bot says: I received your message "{message}" but this is a demo.'


def issue_stream_token() -> str:
    """Placeholder live-stream key until a streaming provider is wired in."""
    return str(uuid4())
