"""
Translator port

The contract every translation backend fulfils, plus the value types that
cross it. Concrete backends live in ai/service.py; tests and callers may
supply any object with a matching translate_one coroutine.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Protocol


def _optional_text(value: Any) -> Optional[str]:
    return str(value) if value else None


@dataclass(frozen=True)
class TranslatorConfig:
    """Per-batch translation settings, fixed for the duration of one run."""
    target_language: str
    source_language: Optional[str] = None
    domain_context: Optional[str] = None
    glossary: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslatorConfig":
        glossary = data.get("glossary") or {}
        return cls(
            target_language=str(data.get("target_language") or "").strip(),
            source_language=_optional_text(data.get("source_language")),
            domain_context=_optional_text(data.get("context") or data.get("domain_context")),
            glossary={str(k): str(v) for k, v in glossary.items()},
        )


@dataclass
class TokenUsage:
    """Token counts and estimated cost of one or more provider calls."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    cost: float = 0.0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def add(self, other: Optional["TokenUsage"]) -> None:
        if other is None:
            return
        self.prompt_tokens += other.prompt_tokens
        self.completion_tokens += other.completion_tokens
        self.cost += other.cost

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["total_tokens"] = self.total_tokens
        return payload


@dataclass(frozen=True)
class TranslationOutcome:
    """Successful result of one translate_one call."""
    translated_value: str
    usage: TokenUsage = field(default_factory=TokenUsage)


class TranslatorPort(Protocol):
    """
    Translate one string under a TranslatorConfig.

    Implementations must be safe to call repeatedly in any order, keep no
    state between calls beyond credentials, and raise TranslationFailure
    (with a string reason) for any per-item failure.
    """

    async def translate_one(self, text: str, config: TranslatorConfig) -> TranslationOutcome:
        ...
