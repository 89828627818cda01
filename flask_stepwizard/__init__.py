__author__ = "Flask-StepWizard contributors"
__version__ = "0.1.0"

from .config import WizardConfig  # noqa: F401
from .definitions import load_registry, load_registry_file  # noqa: F401
from .exceptions import (  # noqa: F401
    FieldValidationError,
    IllegalTransitionError,
    StepConstructionError,
    UnknownFieldError,
    WizardError,
)
from .forms import FieldSchema, StepRegistry, StepResult, StepSchema  # noqa: F401
from .wizard import (  # noqa: F401
    ValidationEngine,
    WizardSnapshot,
    WizardStateMachine,
    WizardStatus,
)
