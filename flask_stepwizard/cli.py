import json
import logging

import click

from .adapters.terminal import TerminalAdapter
from .definitions import load_registry_file
from .exceptions import StepConstructionError
from .presets import PRESETS
from .wizard.machine import WizardStateMachine


def echo_header(title):
    click.echo(click.style(title, fg="green"))
    click.echo(click.style("-" * len(title), fg="green"))


def load_definition(definition, preset):
    """
    Load a registry from a definition file, or from a preset when no file is given.

    Raises:
        click.ClickException: If the definition is invalid
    """
    try:
        if definition:
            return load_registry_file(definition)
        return PRESETS[preset]()
    except StepConstructionError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log wizard transitions")
def cli(verbose):
    """
    Flask-StepWizard command line
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s:%(levelname)s:%(name)s:%(message)s",
    )


@cli.command("run")
@click.argument("definition", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--preset",
    default="passenger",
    show_default=True,
    type=click.Choice(sorted(PRESETS)),
    help="Built-in wizard used when no definition file is given",
)
def run(definition, preset):
    """
    Fill in a wizard interactively and print the record as JSON.

    Type :back at any prompt to return to the previous step.
    """
    registry = load_definition(definition, preset)
    adapter = TerminalAdapter(WizardStateMachine(registry))
    record = adapter.run()
    click.echo(json.dumps(record, indent=2))


@cli.command("check")
@click.argument("definition", type=click.Path(exists=True, dir_okay=False))
def check(definition):
    """
    Validate a wizard definition file and list its steps.
    """
    registry = load_definition(definition, None)
    echo_header(f"{len(registry)} step(s), {len(registry.field_names)} field(s)")
    for index, step in enumerate(registry, start=1):
        names = ", ".join(
            f"{item.name}*" if item.required else item.name for item in step.fields
        )
        click.echo(f"{index}. {step.title} ({step.name}): {names}")
