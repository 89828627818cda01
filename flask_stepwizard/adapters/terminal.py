"""
Terminal adapter

Drives a wizard from an interactive terminal with click prompts. Each field
of the displayed step is prompted in order, showing its current value as the
default. Typing ``:back`` at any prompt returns to the previous step.
"""

import logging
from typing import Any, Callable, Dict

import click

from ..wizard.machine import WizardStateMachine
from ..wizard.state import WizardSnapshot
from . import PresentationAdapter

logger = logging.getLogger(__name__)

BACK_COMMAND = ":back"


class TerminalAdapter(PresentationAdapter):
    """
    Interactive terminal front end for a wizard

    Args:
        machine: The wizard to drive
        echo: Output function, ``click.echo`` by default
        prompt: Input function with ``click.prompt``'s signature
    """

    def __init__(
        self,
        machine: WizardStateMachine,
        echo: Callable[..., Any] = click.echo,
        prompt: Callable[..., Any] = click.prompt,
    ):
        super().__init__(machine)
        self.echo = echo
        self.prompt = prompt
        self._last_rendered = None

    def render(self, snapshot: WizardSnapshot) -> None:
        key = (snapshot.step_index, snapshot.status)
        if key == self._last_rendered:
            return
        self._last_rendered = key
        if snapshot.is_completed:
            self.echo(click.style("All steps completed.", fg="green"))
            return
        title = f"Step {snapshot.step_index + 1}/{snapshot.step_count}: {snapshot.step_title}"
        self.echo(click.style(title, fg="green"))
        self.echo(click.style("-" * len(title), fg="green"))

    def show_errors(self, snapshot: WizardSnapshot) -> None:
        for item in snapshot.fields:
            if item.error:
                self.echo(click.style(f"  {item.label}: {item.error}", fg="red"))

    def run(self) -> Dict[str, Any]:
        """
        Prompt until the wizard completes

        Returns:
            The finalized record

        Raises:
            click.Abort: If input ends before the wizard completes
        """
        snapshot = self.refresh()
        while not snapshot.is_completed:
            went_back = False
            for item in snapshot.fields:
                value = self.prompt(
                    item.label,
                    default="" if item.value is None else str(item.value),
                    show_default=item.value not in (None, ""),
                )
                if value.strip() == BACK_COMMAND:
                    if snapshot.is_first_step:
                        self.echo(click.style("Already on the first step.", fg="yellow"))
                        continue
                    logger.debug(f"Back requested at field '{item.name}'")
                    snapshot = self.on_back()
                    went_back = True
                    break
                snapshot = self.on_field_change(item.name, value)
            if went_back:
                continue

            if snapshot.is_last_step:
                snapshot = self.on_submit_final()
            else:
                snapshot = self.on_next()
            self.show_errors(snapshot)
        return self.machine.record
