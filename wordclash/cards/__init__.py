# wordclash/cards/__init__.py
from .generator import CardGenerator, generate_card_with_timeout
from .fallback import attack_fallback, basic_support_fallback

__all__ = ["CardGenerator", "generate_card_with_timeout", "attack_fallback", "basic_support_fallback"]
