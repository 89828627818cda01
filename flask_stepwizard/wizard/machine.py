"""
Wizard state machine

Drives one wizard session through its steps. The accumulated record is the
single source of truth: each step's draft is rebuilt from it on entry and only
values that passed validation are ever written back.

Validation happens only on ``advance()`` and ``submit()``. Entering a step,
forward or backward, never validates it.
"""

import logging
from typing import Any, Callable, Dict, Optional, Sequence, Union

from ..config import WizardConfig
from ..exceptions import IllegalTransitionError, UnknownFieldError
from ..forms.steps import StepRegistry, StepResult, StepSchema
from .state import FieldSnapshot, WizardSnapshot, WizardState, WizardStatus
from .validation import ValidationEngine

logger = logging.getLogger(__name__)

CompletionHandler = Callable[[Dict[str, Any]], Any]


class WizardStateMachine:
    """
    Owns the state of one wizard session

    Operations run to completion one at a time and are not safe against
    concurrent callers; hosts sharing an instance between threads must
    serialize calls.

    Args:
        registry: The wizard's steps, as a StepRegistry or a sequence of
            StepSchema objects
        on_complete: Called once with a copy of the finalized record when
            the last step passes
        config: Behavior configuration
    """

    def __init__(
        self,
        registry: Union[StepRegistry, Sequence[StepSchema]],
        on_complete: Optional[CompletionHandler] = None,
        config: Optional[WizardConfig] = None,
    ):
        if not isinstance(registry, StepRegistry):
            registry = StepRegistry(registry)
        self.registry = registry
        self.engine = ValidationEngine(registry)
        self.config = config or WizardConfig()
        self.on_complete = on_complete

        self._state = WizardState()
        # Raw values edited during the current visit of the displayed step
        self._draft: Dict[str, Any] = {}
        self._enter_step(0)

    # Read access

    @property
    def step_index(self) -> int:
        return self._state.current_step_index

    @property
    def current_step(self) -> StepSchema:
        return self.registry[self._state.current_step_index]

    @property
    def status(self) -> WizardStatus:
        return self._state.status

    @property
    def is_completed(self) -> bool:
        return self._state.status is WizardStatus.COMPLETED

    @property
    def is_first_step(self) -> bool:
        return self._state.current_step_index == 0

    @property
    def is_last_step(self) -> bool:
        return self._state.current_step_index == len(self.registry) - 1

    @property
    def record(self) -> Dict[str, Any]:
        """Copy of the validated values accumulated so far."""
        return dict(self._state.record)

    @property
    def errors(self) -> Dict[str, str]:
        """Copy of the displayed step's errors."""
        return dict(self._state.errors)

    @property
    def draft(self) -> Dict[str, Any]:
        """Values the displayed step currently shows, edited or recorded."""
        return self._current_values()

    # Transitions

    def stage_edit(self, field_name: str, raw_value: Any) -> None:
        """
        Stage a raw value for a field of the displayed step

        The record is not touched. Errors of other fields are kept; the
        edited field's own error is dropped when ``clear_error_on_edit`` is
        set.

        Raises:
            IllegalTransitionError: If the wizard is completed
            UnknownFieldError: If the field is not on the displayed step
        """
        self._ensure_in_progress("stage_edit")
        step = self.current_step
        if step.get_field(field_name) is None:
            raise UnknownFieldError(field_name, step.name)

        self._draft[field_name] = raw_value
        if self.config.clear_error_on_edit:
            self._state.errors.pop(field_name, None)
        logger.debug(f"Staged edit for '{field_name}' on step '{step.name}'")

    def advance(self) -> StepResult:
        """
        Validate the displayed step and move forward

        On success the validated values are merged into the record and the
        wizard moves to the next step, or completes on the last one. On
        failure the per-field errors are stored and nothing else changes.

        Returns:
            The step's validation result

        Raises:
            IllegalTransitionError: If the wizard is completed
        """
        self._ensure_in_progress("advance")
        index = self._state.current_step_index
        step = self.current_step

        result = self.engine.validate(index, self._current_values())
        if not result.is_valid:
            self._state.errors = dict(result.errors)
            logger.warning(
                f"Cannot leave step {index} ('{step.name}'): "
                f"{len(result.errors)} field(s) failed validation"
            )
            return result

        self._state.record.update(result.data)
        self._state.errors = {}
        if self.is_last_step:
            self._complete()
        else:
            logger.info(f"Step {index} ('{step.name}') passed, moving to step {index + 1}")
            self._enter_step(index + 1)
        return result

    def retreat(self) -> None:
        """
        Move back one step without validating

        Edits staged on the displayed step are discarded; the previous step
        shows its recorded values.

        Raises:
            IllegalTransitionError: On the first step or once completed
        """
        self._ensure_in_progress("retreat")
        index = self._state.current_step_index
        if index == 0:
            raise IllegalTransitionError("Cannot go back from the first step", operation="retreat")
        logger.info(f"Moving back from step {index} to step {index - 1}")
        self._enter_step(index - 1)

    def submit(self) -> StepResult:
        """
        Final Next: re-validate the last step and complete the wizard

        Shares its code path with ``advance()``.

        Raises:
            IllegalTransitionError: Before the last step or once completed
        """
        self._ensure_in_progress("submit")
        if not self.is_last_step:
            raise IllegalTransitionError(
                f"Submit is only available on the last step (current step is "
                f"{self._state.current_step_index} of {len(self.registry)})",
                operation="submit",
            )
        return self.advance()

    # Presentation

    def snapshot(self) -> WizardSnapshot:
        """Build the outbound view of the displayed step."""
        step = self.current_step
        values = self._current_values()
        errors = self._state.errors
        return WizardSnapshot(
            step_index=self._state.current_step_index,
            step_name=step.name,
            step_title=step.title,
            step_count=len(self.registry),
            fields=tuple(
                FieldSnapshot(
                    name=item.name,
                    label=item.label,
                    value=values.get(item.name),
                    error=errors.get(item.name),
                    required=item.required,
                    description=item.description,
                )
                for item in step.fields
            ),
            is_first_step=self.is_first_step,
            is_last_step=self.is_last_step,
            status=self._state.status,
        )

    # Internals

    def _current_values(self) -> Dict[str, Any]:
        record = self._state.record
        values = {}
        for name in self.current_step.field_names:
            if name in self._draft:
                values[name] = self._draft[name]
            else:
                values[name] = record.get(name)
        return values

    def _enter_step(self, index: int) -> None:
        self._state.current_step_index = index
        self._state.errors = {}
        self._draft = {}

    def _complete(self) -> None:
        self._state.status = WizardStatus.COMPLETED
        self._draft = {}
        logger.info(f"Wizard completed with {len(self._state.record)} fields")
        if self.on_complete is not None:
            self.on_complete(dict(self._state.record))

    def _ensure_in_progress(self, operation: str) -> None:
        if self._state.status is WizardStatus.COMPLETED:
            logger.warning(f"Rejected '{operation}' on a completed wizard")
            raise IllegalTransitionError(
                f"Wizard is completed; '{operation}' is not allowed", operation=operation
            )
