# wordclash/cards/provider.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import anthropic
from anthropic import AsyncAnthropic

from ..errors import GenerationShapeInvalid, GenerationTransportFailure
from .parsing import parse_card_json

SYSTEM_PROMPT = """You design cards for a two-player word battle game.
Reply with a single JSON object and nothing else. Fields:
  name, attribute, role ("attack" or "support"), type,
  supportType (support only: heal | buff | enchant), supportMessage,
  effectName, specialEffect, targetStat ("hp" | "stamina" | "magic"),
  logic: {target: "opponent" | "player", actionType: "damage" | "heal" | "buff" | "enchant", value, duration},
  baseValue (1-100, 999 only for legendary words), finalValue, hitRate (0-100), cost, duration, description."""

ROLE_HINTS = {
    "attack": "Make an ATTACK card that damages the opponent.",
    "support": "Make a SUPPORT card (heal, buff or enchant) that helps the player who uses it.",
}


class CardProvider(ABC):
    """Black-box source of raw card data for a word."""

    @abstractmethod
    async def generate(self, word: str, role: str) -> Dict[str, Any]:
        ...


class AnthropicCardProvider(CardProvider):
    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 600,
        temperature: float = 0.8,
        request_timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.request_timeout = request_timeout

    def build_messages(self, word: str, role: str):
        hint = ROLE_HINTS.get(role, ROLE_HINTS["attack"])
        return [{"role": "user", "content": f'Word: "{word}"\n{hint}'}]

    async def generate(self, word: str, role: str) -> Dict[str, Any]:
        if not self.api_key.strip():
            raise GenerationTransportFailure("no API key configured")

        kwargs = {"api_key": self.api_key, "max_retries": 0}
        if self.request_timeout:
            kwargs["timeout"] = self.request_timeout
        client = AsyncAnthropic(**kwargs)
        try:
            response = await client.messages.create(
                model=self.model,
                system=SYSTEM_PROMPT,
                messages=self.build_messages(word, role),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except anthropic.APIError as exc:
            raise GenerationTransportFailure(str(exc)) from exc
        finally:
            await client.close()

        text = "".join(getattr(block, "text", "") for block in response.content)
        data = parse_card_json(text)
        if data is None:
            raise GenerationShapeInvalid(f"model reply for {word!r} is not a JSON object")
        return data
