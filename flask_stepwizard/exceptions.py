"""
Flask-StepWizard exception hierarchy

Configuration problems (``StepConstructionError``) fail fast at construction.
Navigation problems (``IllegalTransitionError``, ``UnknownFieldError``) are
reported to the integrating caller. ``FieldValidationError`` is raised inside
field validators only and is turned into per-field error messages, so it never
escapes the wizard state machine.
"""

from wtforms.validators import ValidationError


class WizardError(Exception):
    """Base class for all wizard errors."""


class StepConstructionError(WizardError):
    """
    The wizard definition is unusable.

    Raised for an empty step registry, field names reused across steps,
    field names WTForms cannot bind, and malformed declarative definitions.
    """


class IllegalTransitionError(WizardError):
    """
    A navigation intent is not allowed in the current state.

    Raised when retreating from the first step, submitting before the last
    step, or sending any intent to a completed wizard. The wizard state is
    left untouched.
    """

    def __init__(self, message: str, operation: str = None):
        super().__init__(message)
        self.operation = operation


class UnknownFieldError(WizardError, KeyError):
    """An edit was staged for a field that is not on the displayed step."""

    def __init__(self, field_name: str, step_name: str = None):
        super().__init__(field_name)
        self.field_name = field_name
        self.step_name = step_name

    def __str__(self):
        if self.step_name:
            return f"Field '{self.field_name}' is not part of step '{self.step_name}'"
        return f"Unknown field '{self.field_name}'"


class FieldValidationError(ValidationError):
    """One field's raw input failed its rule (missing, malformed, out of range)."""
