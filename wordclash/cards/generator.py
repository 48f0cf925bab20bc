# wordclash/cards/generator.py
"""Card generation with a hard deadline.

``generate_card_with_timeout`` always resolves to a usable ``Card``: the
provider call is raced against ``timeout_ms`` and every failure mode (timeout,
transport error, bad shape) lands on a fallback card instead of an exception.
When the deadline passes the provider task is cancelled and abandoned. It is
never awaited again, so a reply that arrives late is dropped unread.
"""
import asyncio
import threading
from typing import Any, Awaitable, Dict, Optional, Union

from ..config import Settings
from ..content.balance import DEFAULTS
from ..engine.models import Card
from ..errors import GenerationError, GenerationShapeInvalid, GenerationTimeout, GenerationTransportFailure
from ..log import get_logger
from .fallback import attack_fallback, basic_support_fallback
from .normalize import is_support_like, normalize_support_payload, to_card
from .provider import AnthropicCardProvider, CardProvider

logger = get_logger(__name__)

Fallback = Union[Card, Dict[str, Any], None]

_loop: Optional[asyncio.AbstractEventLoop] = None
_loop_lock = threading.Lock()


def background_loop() -> asyncio.AbstractEventLoop:
    """The event loop every synchronous draw runs on, started on first use."""
    global _loop
    with _loop_lock:
        if _loop is None:
            loop = asyncio.new_event_loop()
            threading.Thread(target=loop.run_forever, name="wordclash-cards", daemon=True).start()
            _loop = loop
        return _loop


def _drop_late(task: "asyncio.Future") -> None:
    if task.cancelled():
        return
    if task.exception() is not None:
        logger.debug("Abandoned card request failed after its deadline: %r", task.exception())
    else:
        logger.debug("Discarded a card reply that arrived after its deadline")


async def _race(call: Awaitable[Any], word: str, timeout_ms: int) -> Any:
    task = asyncio.ensure_future(call)
    try:
        done, _ = await asyncio.wait({task}, timeout=max(timeout_ms, 0) / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise
    if task not in done:
        task.cancel()
        task.add_done_callback(_drop_late)
        raise GenerationTimeout(f"no card for {word!r} within {timeout_ms} ms")
    return task.result()


def _fallback_card(word: str, role: str, fallback: Fallback) -> Card:
    if role == "support":
        return basic_support_fallback(word)
    if isinstance(fallback, Card):
        return fallback
    if isinstance(fallback, dict):
        try:
            return to_card(fallback, word, role)
        except GenerationShapeInvalid:
            logger.warning("Caller fallback for %r is unusable, generating one from the word", word)
    return attack_fallback(word)


def _accept(raw: Any, word: str, role: str) -> Card:
    if not isinstance(raw, dict):
        raise GenerationShapeInvalid(f"expected a JSON object, got {type(raw).__name__}")
    if role != "support":
        return to_card(raw, word, role)
    if not is_support_like(raw):
        # attack-shaped result in a support slot: replace wholesale
        logger.warning("Rejected non-support card for support request %r: type=%r", word, raw.get("type"))
        return basic_support_fallback(word)
    return to_card(normalize_support_payload(raw), word, "support")


async def generate_card_with_timeout(
    source_word: str,
    role: str,
    fallback: Fallback = None,
    timeout_ms: int = DEFAULTS["card_timeout_ms"],
    provider: Optional[CardProvider] = None,
) -> Card:
    word = str(source_word or "").strip()
    try:
        if provider is None:
            raise GenerationTransportFailure("no card provider configured")
        raw = await _race(provider.generate(word, role), word, timeout_ms)
        return _accept(raw, word, role)
    except GenerationError as exc:
        logger.warning("Card generation for %r (%s) failed [%s]: %s", word, role, exc.kind, exc.message)
    except Exception:
        # provider output is untrusted; nothing may escape to the battle flow
        logger.warning("Card generation for %r (%s) crashed", word, role, exc_info=True)
    return _fallback_card(word, role, fallback)


class CardGenerator:
    """Owns the provider and deadline used for every card a battle draws."""

    def __init__(self, provider: Optional[CardProvider] = None, timeout_ms: int = DEFAULTS["card_timeout_ms"]):
        self.provider = provider
        self.timeout_ms = timeout_ms

    @classmethod
    def from_settings(cls, settings: Settings) -> "CardGenerator":
        provider = None
        if settings.has_credentials:
            provider = AnthropicCardProvider(
                api_key=settings.api_key,
                model=settings.model,
                request_timeout=settings.card_timeout_ms / 1000,
            )
        else:
            logger.warning("ANTHROPIC_API_KEY is not set; every card will be a fallback card")
        return cls(provider=provider, timeout_ms=settings.card_timeout_ms)

    async def generate(self, word: str, role: str, fallback: Fallback = None) -> Card:
        return await generate_card_with_timeout(word, role, fallback, self.timeout_ms, self.provider)

    def draw(self, word: str, role: str) -> Card:
        # socket handlers run in worker threads with no loop of their own; an
        # abandoned provider task keeps running on the shared loop after we return
        future = asyncio.run_coroutine_threadsafe(self.generate(word, role), background_loop())
        return future.result()

    __call__ = draw
