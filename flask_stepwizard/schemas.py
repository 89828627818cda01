"""
Marshmallow schemas for the wizard's outbound snapshots and inbound intents
"""

from marshmallow import Schema, fields, validate

from .wizard.state import WizardStatus


class FieldSnapshotSchema(Schema):
    """Serialized field of the displayed step"""

    name = fields.String()
    label = fields.String()
    value = fields.Raw(allow_none=True)
    error = fields.String(allow_none=True)
    required = fields.Boolean()
    description = fields.String(allow_none=True)


class WizardSnapshotSchema(Schema):
    """Serialized wizard snapshot"""

    step_index = fields.Integer()
    step_name = fields.String()
    step_title = fields.String()
    step_count = fields.Integer()
    step_fields = fields.List(
        fields.Nested(FieldSnapshotSchema), attribute="fields", data_key="fields"
    )
    is_first_step = fields.Boolean()
    is_last_step = fields.Boolean()
    status = fields.Enum(WizardStatus, by_value=True)


class FieldChangeSchema(Schema):
    """Inbound field edit"""

    name = fields.String(required=True, validate=validate.Length(min=1))
    value = fields.String(required=True, allow_none=True)
