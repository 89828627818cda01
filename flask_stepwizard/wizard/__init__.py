from .machine import WizardStateMachine  # noqa: F401
from .state import FieldSnapshot, WizardSnapshot, WizardState, WizardStatus  # noqa: F401
from .validation import ValidationEngine  # noqa: F401
