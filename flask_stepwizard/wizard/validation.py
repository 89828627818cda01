"""
Validation engine

Thin dispatcher from a step index to the matching step schema. Nothing is
cached: every call validates the candidate values it is given.
"""

import logging
from typing import Any, Mapping

from ..forms.steps import StepRegistry, StepResult

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Validates candidate values against the step at a given index."""

    def __init__(self, registry: StepRegistry):
        self.registry = registry

    def validate(self, step_index: int, candidate: Mapping[str, Any]) -> StepResult:
        """
        Validate the fields of one step

        Args:
            step_index: Position of the step in the registry
            candidate: Raw values keyed by field name

        Returns:
            StepResult for that step

        Raises:
            IndexError: If ``step_index`` is outside the registry
        """
        if not 0 <= step_index < len(self.registry):
            raise IndexError(
                f"Step index {step_index} out of range for {len(self.registry)} steps"
            )
        step = self.registry[step_index]
        logger.debug(f"Validating step {step_index} ('{step.name}')")
        return step.validate_step(candidate)
