"""
Field schemas

A ``FieldSchema`` wraps one named input and its WTForms validator chain. Each
schema builds a private one-field WTForms form class at construction; every
call to ``validate`` binds a fresh instance of it, so validation is pure and
never depends on other fields or earlier calls.
"""

import logging
import re
from typing import Any, NamedTuple, Optional, Sequence

from werkzeug.datastructures import MultiDict
from wtforms import Form
from wtforms.fields import StringField

from ..exceptions import StepConstructionError
from .validators import is_required

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Instance attributes WTForms sets on every form
RESERVED_NAMES = frozenset(("meta", "form_errors"))


def humanize(name: str) -> str:
    """
    Turn a field name into a display label

    ``firstName`` and ``first_name`` both become ``First name``.
    """
    words = _CAMEL_BOUNDARY.sub(" ", name).replace("_", " ").split()
    return " ".join(words).capitalize()


def strip_filter(value):
    if isinstance(value, str):
        return value.strip()
    return value


class FieldResult(NamedTuple):
    """Outcome of validating one raw value: a parsed value or an error message."""

    value: Any
    error: Optional[str]

    @property
    def is_valid(self) -> bool:
        return self.error is None


class FieldSchema:
    """
    One input of a wizard step

    Args:
        name: Field name, unique across the whole wizard. Must be a Python
            identifier that does not shadow a WTForms form attribute.
        validators: WTForms validator chain run in order
        label: Display label, derived from the name when omitted
        description: Optional help text for the presentation layer
        strip: Strip surrounding whitespace before validation
    """

    __slots__ = ("_name", "_label", "_description", "_validators", "_strip", "_form_class")

    def __init__(
        self,
        name: str,
        validators: Optional[Sequence] = None,
        label: Optional[str] = None,
        description: Optional[str] = None,
        strip: bool = True,
    ):
        if not isinstance(name, str) or not name.isidentifier() or name.startswith("_"):
            raise StepConstructionError(f"Invalid field name: {name!r}")
        if name in RESERVED_NAMES or hasattr(Form, name):
            raise StepConstructionError(
                f"Field name '{name}' clashes with a WTForms form attribute"
            )

        self._name = name
        self._label = label or humanize(name)
        self._description = description
        self._validators = tuple(validators or ())
        self._strip = strip

        filters = (strip_filter,) if strip else ()
        unbound = StringField(self._label, validators=list(self._validators), filters=filters)
        self._form_class = type(f"{name}FieldForm", (Form,), {name: unbound})

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        return self._label

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def validators(self) -> tuple:
        return self._validators

    @property
    def required(self) -> bool:
        return is_required(self._validators)

    def validate(self, raw: Any) -> FieldResult:
        """
        Validate one raw input

        ``None`` is treated as empty input and anything else is validated as
        its string form. Only the first error of the chain is reported.

        Args:
            raw: Raw value as typed by the user

        Returns:
            FieldResult holding either the parsed value or an error message
        """
        text = "" if raw is None else str(raw)
        form = self._form_class(formdata=MultiDict({self._name: text}))
        field = form[self._name]
        if field.validate(form):
            return FieldResult(field.data, None)
        logger.debug(f"Field '{self._name}' rejected: {field.errors[0]}")
        return FieldResult(None, field.errors[0])

    def __repr__(self):
        return f"<FieldSchema {self._name}>"
