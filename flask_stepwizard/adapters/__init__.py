"""
Presentation adapters

An adapter sits between a user interface and a ``WizardStateMachine``. It
forwards user intents to the machine and re-renders from a fresh snapshot
after every operation. Adapters never touch wizard state directly.
"""

from typing import Any

from ..wizard.machine import WizardStateMachine
from ..wizard.state import WizardSnapshot


class PresentationAdapter:
    """
    Base class for presentation adapters

    Subclasses implement ``render``. Errors raised by the machine
    (``IllegalTransitionError``, ``UnknownFieldError``) propagate to the
    caller unchanged and nothing is rendered for the rejected intent.
    """

    def __init__(self, machine: WizardStateMachine):
        self.machine = machine

    def on_field_change(self, name: str, raw_value: Any) -> WizardSnapshot:
        self.machine.stage_edit(name, raw_value)
        return self.refresh()

    def on_next(self) -> WizardSnapshot:
        self.machine.advance()
        return self.refresh()

    def on_back(self) -> WizardSnapshot:
        self.machine.retreat()
        return self.refresh()

    def on_submit_final(self) -> WizardSnapshot:
        self.machine.submit()
        return self.refresh()

    def refresh(self) -> WizardSnapshot:
        """Recompute the snapshot and render it."""
        snapshot = self.machine.snapshot()
        self.render(snapshot)
        return snapshot

    def render(self, snapshot: WizardSnapshot) -> None:
        raise NotImplementedError
