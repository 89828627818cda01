"""
Wizard state and snapshots

``WizardState`` is owned by the state machine and only changes through its
transitions. Presentation adapters receive ``WizardSnapshot`` objects, which
are frozen copies recomputed after every operation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class WizardStatus(Enum):
    """Lifecycle status of a wizard"""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class WizardState:
    """
    Mutable state of one wizard session

    ``record`` holds the last successfully validated value of every field
    whose step has passed. ``errors`` belongs to the displayed step only.
    """

    current_step_index: int = 0
    record: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    status: WizardStatus = WizardStatus.IN_PROGRESS


@dataclass(frozen=True)
class FieldSnapshot:
    """One field as the presentation layer should draw it"""
    name: str
    label: str
    value: Any = None
    error: Optional[str] = None
    required: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class WizardSnapshot:
    """Read-only view of the displayed step"""

    step_index: int
    step_name: str
    step_title: str
    step_count: int
    fields: Tuple[FieldSnapshot, ...]
    is_first_step: bool
    is_last_step: bool
    status: WizardStatus

    @property
    def is_completed(self) -> bool:
        return self.status is WizardStatus.COMPLETED

    @property
    def errors(self) -> Dict[str, str]:
        return {item.name: item.error for item in self.fields if item.error}

    @property
    def values(self) -> Dict[str, Any]:
        return {item.name: item.value for item in self.fields}
