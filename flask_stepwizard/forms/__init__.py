"""
Field and step schemas for wizard forms.
"""

from .fields import FieldResult, FieldSchema, humanize  # noqa: F401
from .steps import StepRegistry, StepResult, StepSchema  # noqa: F401
from .validators import Email, Length, Numeric, Optional, Regexp, Required  # noqa: F401
