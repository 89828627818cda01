"""
Declarative wizard definitions

Builds a ``StepRegistry`` from a JSON-compatible mapping::

    {
        "name": "signup",
        "steps": [
            {
                "name": "account",
                "title": "Account",
                "fields": [
                    {"name": "email", "type": "email"},
                    {"name": "age", "type": "number", "min": 18, "required": false}
                ]
            }
        ]
    }

Definitions are checked with marshmallow before any schema object is built.
Every problem is reported as a ``StepConstructionError``.
"""

import json
import logging
import re
from typing import Any, Dict, Mapping

from marshmallow import Schema, ValidationError, fields, post_load, validate, validates_schema

from .exceptions import StepConstructionError
from .forms.fields import FieldSchema, humanize
from .forms.steps import StepRegistry, StepSchema
from .forms.validators import (
    Email,
    Length,
    Numeric,
    Optional,
    Regexp,
    Required,
    check_message_format,
)

logger = logging.getLogger(__name__)

FIELD_TYPE_TEXT = "text"
FIELD_TYPE_NUMBER = "number"
FIELD_TYPE_EMAIL = "email"
FIELD_TYPES = (FIELD_TYPE_TEXT, FIELD_TYPE_NUMBER, FIELD_TYPE_EMAIL)


def build_validators(definition: Mapping[str, Any], label: str) -> list:
    """
    Translate a field definition into a WTForms validator chain

    Required fields start with ``Required`` and optional ones with
    ``Optional``, so blank input never reaches the type checks.
    """
    chain = []
    if definition.get("required", True):
        chain.append(Required(definition.get("required_message") or f"{label} is required"))
    else:
        chain.append(Optional())

    field_type = definition.get("type", FIELD_TYPE_TEXT)
    if field_type == FIELD_TYPE_NUMBER:
        chain.append(
            Numeric(
                min=definition.get("min"),
                max=definition.get("max"),
                message=definition.get("invalid_message") or f"{label} must be a number",
                range_message=definition.get("range_message"),
            )
        )
    elif field_type == FIELD_TYPE_EMAIL:
        chain.append(Email(message=definition.get("invalid_message") or "Invalid email"))

    min_length = definition.get("min_length")
    max_length = definition.get("max_length")
    if min_length is not None or max_length is not None:
        chain.append(
            Length(
                min=-1 if min_length is None else min_length,
                max=-1 if max_length is None else max_length,
                message=definition.get("length_message"),
            )
        )

    if definition.get("pattern"):
        chain.append(
            Regexp(
                definition["pattern"],
                message=definition.get("pattern_message") or f"{label} format is invalid",
            )
        )
    return chain


class FieldDefinitionSchema(Schema):
    """Schema for one field definition"""

    name = fields.String(required=True, validate=validate.Length(min=1))
    label = fields.String(load_default=None)
    description = fields.String(load_default=None)
    type = fields.String(load_default=FIELD_TYPE_TEXT, validate=validate.OneOf(FIELD_TYPES))
    required = fields.Boolean(load_default=True)
    strip = fields.Boolean(load_default=True)

    required_message = fields.String(load_default=None)
    invalid_message = fields.String(load_default=None)
    range_message = fields.String(load_default=None)
    length_message = fields.String(load_default=None)
    pattern_message = fields.String(load_default=None)

    min_length = fields.Integer(load_default=None, validate=validate.Range(min=0))
    max_length = fields.Integer(load_default=None, validate=validate.Range(min=0))
    min = fields.Float(load_default=None, allow_nan=False)
    max = fields.Float(load_default=None, allow_nan=False)
    pattern = fields.String(load_default=None)

    @validates_schema
    def validate_bounds(self, data, **kwargs):
        """Check that bounds are ordered and fit the field type"""
        errors = {}
        if data.get("type") != FIELD_TYPE_NUMBER:
            for key in ("min", "max"):
                if data.get(key) is not None:
                    errors[key] = ["Only number fields accept numeric bounds."]
        elif data.get("min") is not None and data.get("max") is not None:
            if data["min"] > data["max"]:
                errors["min"] = ["min must not be greater than max."]

        min_length = data.get("min_length")
        max_length = data.get("max_length")
        if min_length is not None and max_length is not None and min_length > max_length:
            errors["min_length"] = ["min_length must not be greater than max_length."]

        if data.get("pattern"):
            try:
                re.compile(data["pattern"])
            except re.error as e:
                errors["pattern"] = [f"Invalid regular expression: {e}"]

        # Both messages are %-formatted when the rule fails
        placeholders = {
            "range_message": {"min": data.get("min"), "max": data.get("max")},
            "length_message": {"min": 0, "max": 0, "length": 0},
        }
        for key, values in placeholders.items():
            try:
                check_message_format(data.get(key), **values)
            except ValueError as e:
                errors[key] = [str(e)]

        if errors:
            raise ValidationError(errors)

    @post_load
    def make_field(self, data, **kwargs) -> FieldSchema:
        label = data["label"] or humanize(data["name"])
        return FieldSchema(
            data["name"],
            validators=build_validators(data, label),
            label=label,
            description=data["description"],
            strip=data["strip"],
        )


class StepDefinitionSchema(Schema):
    """Schema for one step definition"""

    name = fields.String(required=True, validate=validate.Length(min=1))
    title = fields.String(load_default=None)
    description = fields.String(load_default=None)
    step_fields = fields.List(
        fields.Nested(FieldDefinitionSchema), required=True, data_key="fields"
    )

    @post_load
    def make_step(self, data, **kwargs) -> StepSchema:
        return StepSchema(
            data["name"],
            data["step_fields"],
            title=data["title"],
            description=data["description"],
        )


class WizardDefinitionSchema(Schema):
    """Schema for a whole wizard definition"""

    name = fields.String(load_default=None)
    title = fields.String(load_default=None)
    steps = fields.List(
        fields.Nested(StepDefinitionSchema), required=True, validate=validate.Length(min=1)
    )

    @post_load
    def make_registry(self, data, **kwargs) -> StepRegistry:
        return StepRegistry(data["steps"])


def load_registry(definition: Mapping[str, Any]) -> StepRegistry:
    """
    Build a step registry from a definition mapping

    Args:
        definition: JSON-compatible wizard definition

    Returns:
        StepRegistry ready to drive a wizard

    Raises:
        StepConstructionError: If the definition is malformed
    """
    try:
        registry = WizardDefinitionSchema().load(definition)
    except ValidationError as e:
        logger.error(f"Invalid wizard definition: {e.messages}")
        raise StepConstructionError(f"Invalid wizard definition: {e.messages}") from e
    logger.debug(f"Loaded wizard definition '{definition.get('name')}' with {len(registry)} steps")
    return registry


def load_registry_file(path: str) -> StepRegistry:
    """Build a step registry from a JSON definition file."""
    try:
        with open(path, encoding="utf-8") as f:
            definition: Dict[str, Any] = json.load(f)
    except json.JSONDecodeError as e:
        raise StepConstructionError(f"{path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise StepConstructionError(f"{path} is not UTF-8 encoded: {e}") from e
    except OSError as e:
        raise StepConstructionError(f"Cannot read {path}: {e}") from e
    if not isinstance(definition, dict):
        raise StepConstructionError(f"{path} must contain a JSON object")
    return load_registry(definition)
