"""
Tests for FieldSchema and the wizard validators
"""

import pytest

from flask_stepwizard.exceptions import StepConstructionError
from flask_stepwizard.forms.fields import FieldSchema, humanize
from flask_stepwizard.forms.validators import Email, Length, Numeric, Optional, Regexp, Required


class TestHumanize:

    @pytest.mark.parametrize("name,label", [
        ("firstName", "First name"),
        ("first_name", "First name"),
        ("email", "Email"),
        ("postCode2", "Post code2"),
    ])
    def test_labels(self, name, label):
        assert humanize(name) == label


class TestFieldSchema:
    """Test FieldSchema construction and validation"""

    def test_default_label_and_required_flag(self):
        field = FieldSchema("lastName", validators=[Required("Last name is required")])

        assert field.name == "lastName"
        assert field.label == "Last name"
        assert field.required is True
        assert FieldSchema("nickname").required is False

    def test_valid_value_is_stripped(self):
        field = FieldSchema("firstName", validators=[Required()])

        result = field.validate("  Ada  ")

        assert result.is_valid
        assert result.value == "Ada"
        assert result.error is None

    def test_strip_can_be_disabled(self):
        field = FieldSchema("motto", strip=False)
        assert field.validate("  hi ").value == "  hi "

    @pytest.mark.parametrize("raw", ["", "   ", None, "\t\n"])
    def test_required_rejects_blank(self, raw):
        field = FieldSchema("lastName", validators=[Required("Last name is required")])

        result = field.validate(raw)

        assert not result.is_valid
        assert result.value is None
        assert result.error == "Last name is required"

    def test_numeric_messages_are_distinct(self):
        field = FieldSchema(
            "age",
            validators=[
                Required("Age is required"),
                Numeric(min=0, max=150, message="Age must be a number",
                        range_message="Age must be between %(min)s and %(max)s"),
            ],
        )

        assert field.validate("").error == "Age is required"
        assert field.validate("abc").error == "Age must be a number"
        assert field.validate("200").error == "Age must be between 0 and 150"
        assert field.validate("36").value == "36"
        assert field.validate(" 36 ").value == "36"

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "1,5", "12abc", "--1"])
    def test_numeric_rejects_malformed_numbers(self, raw):
        field = FieldSchema("amount", validators=[Numeric(message="Not a number")])
        assert field.validate(raw).error == "Not a number"

    def test_numeric_default_range_messages(self):
        at_least = FieldSchema("count", validators=[Numeric(min=1)])
        at_most = FieldSchema("count", validators=[Numeric(max=10)])

        assert at_least.validate("0").error == "Number must be at least 1."
        assert at_most.validate("11").error == "Number must be at most 10."
        assert at_least.validate("1e3").is_valid

    def test_numeric_rejects_inverted_bounds(self):
        with pytest.raises(ValueError):
            Numeric(min=10, max=1)

    @pytest.mark.parametrize("range_message", ["At most 100 (100%)", "Out of %(range)s", "%(max)d or less"])
    def test_numeric_rejects_unformattable_range_message(self, range_message):
        with pytest.raises(ValueError):
            Numeric(min=0, range_message=range_message)

    def test_optional_field_accepts_blank(self):
        field = FieldSchema("nickname", validators=[Optional(), Length(min=3)])

        assert field.validate("").is_valid
        assert field.validate("").value == ""
        assert not field.validate("ab").is_valid

    def test_email_and_pattern(self):
        email = FieldSchema("email", validators=[Required(), Email(message="Invalid email")])
        code = FieldSchema("code", validators=[Regexp(r"^[A-Z]{3}$", message="Bad code")])

        assert email.validate("ada@analytical.org").is_valid
        assert email.validate("not-an-email").error == "Invalid email"
        assert code.validate("LHR").is_valid
        assert code.validate("lhr").error == "Bad code"

    @pytest.mark.parametrize("raw", ["\x00", "x" * 10000, 12, 3.5, "💺", "%(min)s"])
    def test_validation_is_total(self, raw):
        """Malformed input yields a definite result rather than an exception"""
        field = FieldSchema(
            "age",
            validators=[Required(), Numeric(min=0, max=150, message="Age must be a number")],
        )

        result = field.validate(raw)

        assert result.is_valid or result.error

    def test_validation_is_deterministic(self):
        field = FieldSchema("age", validators=[Required(), Numeric()])

        first = field.validate("abc")
        field.validate("36")
        second = field.validate("abc")

        assert first == second

    @pytest.mark.parametrize("name", ["data", "errors", "validate", "meta", "_hidden", "1st", "first name", ""])
    def test_invalid_names(self, name):
        with pytest.raises(StepConstructionError):
            FieldSchema(name)
