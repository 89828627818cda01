"""
Shared test data for the passenger wizard.
"""

IDENTITY = {"firstName": "Ada", "lastName": "Lovelace", "age": "36"}
CONTACT = {"phone": "555-0100", "email": "ada@analytical.org"}
PREFERENCES = {"seat": "window", "food": "vegetarian", "allergies": "none"}
VALID_STEPS = [IDENTITY, CONTACT, PREFERENCES]


def fill(machine, values):
    """Stage every value on the displayed step."""
    for name, value in values.items():
        machine.stage_edit(name, value)


def complete_step(machine, values):
    fill(machine, values)
    return machine.advance()
