"""
WTForms validators for wizard fields

Validators follow the WTForms protocol: a callable taking ``(form, field)``
that raises ``ValidationError`` (or ``StopValidation``) on bad input. The
stock WTForms ``Email``, ``Length``, ``Regexp`` and ``Optional`` validators
are re-exported so step definitions can import everything from one place.
"""

from decimal import Decimal, InvalidOperation

from wtforms.validators import DataRequired, Email, Length, Optional, Regexp

from ..exceptions import FieldValidationError

__all__ = [
    "Required",
    "Numeric",
    "Email",
    "Length",
    "Optional",
    "Regexp",
    "is_required",
    "check_message_format",
]


def check_message_format(message, **placeholders):
    """
    Fail early when a message cannot be %-formatted with ``placeholders``

    WTForms applies ``message % {...}`` when a rule fails, so a stray ``%``
    or an unknown ``%(name)s`` key would otherwise surface as an exception
    in the middle of validation.

    Raises:
        ValueError: If formatting the message fails
    """
    if message is None:
        return
    try:
        message % placeholders
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid message {message!r}: {e}") from e


class Required(DataRequired):
    """
    Rejects missing, empty and whitespace-only input and stops the chain

    Later validators in the chain never see a blank value, so a blank numeric
    field reports only the required message. ``is_required`` relies on this
    class (or WTForms' ``DataRequired``) to flag a field as required.
    """


class Numeric:
    """
    Accepts input that parses as a finite decimal number

    Non-numeric input and out-of-range input get distinct messages. Blank
    input passes; combine with ``Required`` to reject it. The field keeps its
    raw text, this validator does not coerce.

    Args:
        min: Inclusive lower bound, or None
        max: Inclusive upper bound, or None
        message: Message for non-numeric input
        range_message: Message for numbers outside ``[min, max]``
    """

    field_flags = {"inputmode": "decimal"}

    def __init__(self, min=None, max=None, message=None, range_message=None):
        if min is not None and max is not None and min > max:
            raise ValueError(f"min ({min}) must not be greater than max ({max})")
        self.min = None if min is None else Decimal(str(min))
        self.max = None if max is None else Decimal(str(max))
        self.message = message
        self.range_message = range_message
        check_message_format(range_message, min=self.min, max=self.max)

    def __call__(self, form, field):
        value = field.data
        if value is None or str(value).strip() == "":
            return

        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            number = None
        if number is None or not number.is_finite():
            message = self.message or field.gettext("Not a valid number.")
            raise FieldValidationError(message)

        if (self.min is not None and number < self.min) or (
            self.max is not None and number > self.max
        ):
            raise FieldValidationError(self._range_message(field))

    def _range_message(self, field):
        if self.range_message:
            return self.range_message % {"min": self.min, "max": self.max}
        if self.max is None:
            return field.gettext("Number must be at least %(min)s.") % {"min": self.min}
        if self.min is None:
            return field.gettext("Number must be at most %(max)s.") % {"max": self.max}
        return field.gettext("Number must be between %(min)s and %(max)s.") % {
            "min": self.min,
            "max": self.max,
        }


def is_required(validators) -> bool:
    """True when the chain rejects blank input up front."""
    return any(isinstance(v, DataRequired) for v in validators)
