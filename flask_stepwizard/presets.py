"""
Ready-made wizard definitions
"""

from .definitions import load_registry
from .forms.steps import StepRegistry

PASSENGER_WIZARD = {
    "name": "passenger",
    "title": "Passenger details",
    "steps": [
        {
            "name": "identity",
            "title": "Personal information",
            "fields": [
                {"name": "firstName"},
                {"name": "lastName"},
                {
                    "name": "age",
                    "type": "number",
                    "min": 0,
                    "max": 150,
                    "range_message": "Age must be between 0 and 150",
                },
            ],
        },
        {
            "name": "contact",
            "title": "Contact details",
            "fields": [
                {"name": "phone", "label": "Phone number"},
                {"name": "email", "type": "email"},
            ],
        },
        {
            "name": "preferences",
            "title": "Preferences",
            "fields": [
                {"name": "seat"},
                {"name": "food"},
                {"name": "allergies"},
            ],
        },
    ],
}


def passenger_registry() -> StepRegistry:
    """Three-step passenger form: identity, contact details, preferences."""
    return load_registry(PASSENGER_WIZARD)


PRESETS = {
    "passenger": passenger_registry,
}
