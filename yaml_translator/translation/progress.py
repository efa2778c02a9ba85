"""
Translation Progress Data Class

Contains the ProgressSnapshot dataclass emitted by the batch orchestrator.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

PHASE_TRANSLATING = "translating"
PHASE_COMPLETED = "completed"
PHASE_ERROR = "error"
PHASE_CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProgressSnapshot:
    """Progress information for an ongoing batch. Each emission supersedes the last."""
    index: int                               # 1-based position of the current leaf
    total: int                               # Number of leaves in the batch
    current_address: str
    current_value: str
    percentage: float
    phase: str = PHASE_TRANSLATING           # "translating", "completed", "error", "cancelled"
    translated_value: Optional[str] = None   # Set on the second event of a successful leaf
    error: Optional[str] = None              # Set for "error" and "cancelled"
    translated_count: int = 0
    failure_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
