"""
Batch data model

TranslationUnit tracks one leaf through a run, LeafError records a failure
and BatchResult is the terminal artifact returned by the orchestrator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from yaml_translator.ai.port import TokenUsage
from yaml_translator.core.walker import TranslatableLeaf

BATCH_ERROR_ADDRESS = "batch"

UNIT_PENDING = "pending"
UNIT_TRANSLATING = "translating"
UNIT_COMPLETED = "completed"
UNIT_FAILED = "failed"


@dataclass
class TranslationUnit:
    """Lifecycle of one leaf: pending -> translating -> completed | failed."""
    leaf: TranslatableLeaf
    status: str = UNIT_PENDING
    translated_value: Optional[str] = None
    error: Optional[str] = None

    def start(self) -> None:
        self.status = UNIT_TRANSLATING

    def succeed(self, translated_value: str) -> None:
        self.status = UNIT_COMPLETED
        self.translated_value = translated_value

    def fail(self, reason: str) -> None:
        # Failed units keep the original text as their output
        self.status = UNIT_FAILED
        self.translated_value = self.leaf.original_value
        self.error = reason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.leaf.path,
            "original_value": self.leaf.original_value,
            "translated_value": self.translated_value,
            "status": self.status,
            "error": self.error,
        }


@dataclass(frozen=True)
class LeafError:
    """One failed leaf (or the whole batch, with address "batch")."""
    address: str
    reason: str
    original_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "error": self.reason, "original_value": self.original_value}


@dataclass(frozen=True)
class BatchResult:
    """Terminal result of one orchestration run."""
    success: bool
    document: Any = None
    content: Optional[str] = None
    translated_count: int = 0
    errors: List[LeafError] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)
    units: List[TranslationUnit] = field(default_factory=list)
    cancelled: bool = False
    elapsed_time: float = 0.0

    @property
    def failure_count(self) -> int:
        return sum(1 for error in self.errors if error.address != BATCH_ERROR_ADDRESS)

    def to_dict(self, include_units: bool = False) -> Dict[str, Any]:
        payload = {
            "success": self.success,
            "content": self.content,
            "translated_count": self.translated_count,
            "failure_count": self.failure_count,
            "errors": [error.to_dict() for error in self.errors],
            "usage": self.usage.to_dict(),
            "cancelled": self.cancelled,
            "elapsed_time": self.elapsed_time,
        }
        if include_units:
            payload["units"] = [unit.to_dict() for unit in self.units]
        return payload
