"""
Step schemas and the step registry

A ``StepSchema`` groups the fields shown together on one screen and validates
them as a unit. The ``StepRegistry`` is the fixed, ordered list of steps for a
wizard; the active step is always a plain lookup by index.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import StepConstructionError
from .fields import FieldSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of validating one step

    ``data`` holds every field's parsed value and is only filled when the
    whole step passed. ``errors`` holds one message per failing field.
    """

    data: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class StepSchema:
    """
    One step of a wizard

    Args:
        name: Step identifier
        fields: Ordered field schemas shown on this step
        title: Display title, defaults to the capitalized name
        description: Optional text for the presentation layer
    """

    def __init__(
        self,
        name: str,
        fields: Sequence[FieldSchema],
        title: Optional[str] = None,
        description: Optional[str] = None,
    ):
        if not name:
            raise StepConstructionError("Step name must not be empty")
        self._name = name
        self._title = title or name.replace("_", " ").capitalize()
        self._description = description
        self._fields: Tuple[FieldSchema, ...] = tuple(fields)

        seen = set()
        for item in self._fields:
            if not isinstance(item, FieldSchema):
                raise StepConstructionError(
                    f"Step '{name}' expects FieldSchema instances, got {type(item).__name__}"
                )
            if item.name in seen:
                raise StepConstructionError(f"Field '{item.name}' is declared twice in step '{name}'")
            seen.add(item.name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def fields(self) -> Tuple[FieldSchema, ...]:
        return self._fields

    @property
    def field_names(self) -> List[str]:
        return [item.name for item in self._fields]

    def get_field(self, name: str) -> Optional[FieldSchema]:
        for item in self._fields:
            if item.name == name:
                return item
        return None

    def validate_step(self, candidate: Mapping[str, Any]) -> StepResult:
        """
        Validate every field of this step

        All fields are validated independently; there is no short-circuit,
        so the result lists every problem at once. Keys in ``candidate`` that
        do not belong to this step are ignored and missing keys count as
        empty input.

        Args:
            candidate: Raw values keyed by field name

        Returns:
            StepResult with parsed values on success, errors otherwise
        """
        data = {}
        errors = {}
        for item in self._fields:
            result = item.validate(candidate.get(item.name))
            if result.is_valid:
                data[item.name] = result.value
            else:
                errors[item.name] = result.error

        if errors:
            logger.warning(f"Step '{self._name}' validation failed for fields: {sorted(errors)}")
            return StepResult(errors=errors)

        logger.debug(f"Step '{self._name}' validation passed")
        return StepResult(data=data)

    def __repr__(self):
        return f"<StepSchema {self._name} fields={self.field_names}>"


class StepRegistry:
    """
    Immutable ordered list of the steps of one wizard

    Construction fails fast with ``StepConstructionError`` when the list is
    empty, when two steps share a name, or when a field name appears in more
    than one step.
    """

    def __init__(self, steps: Sequence[StepSchema]):
        self._steps: Tuple[StepSchema, ...] = tuple(steps)
        if not self._steps:
            raise StepConstructionError("A wizard needs at least one step")

        self._owner: Dict[str, int] = {}
        step_names = set()
        for index, step in enumerate(self._steps):
            if not isinstance(step, StepSchema):
                raise StepConstructionError(
                    f"Step registry expects StepSchema instances, got {type(step).__name__}"
                )
            if step.name in step_names:
                raise StepConstructionError(f"Step name '{step.name}' is used twice")
            step_names.add(step.name)

            for name in step.field_names:
                if name in self._owner:
                    other = self._steps[self._owner[name]].name
                    raise StepConstructionError(
                        f"Field '{name}' appears in steps '{other}' and '{step.name}'"
                    )
                self._owner[name] = index

        logger.debug(
            f"Step registry built with {len(self._steps)} steps and {len(self._owner)} fields"
        )

    def __len__(self) -> int:
        return len(self._steps)

    def __getitem__(self, index: int) -> StepSchema:
        return self._steps[index]

    def __iter__(self) -> Iterator[StepSchema]:
        return iter(self._steps)

    @property
    def field_names(self) -> List[str]:
        """Every field name in the wizard, in display order."""
        return list(self._owner)

    def step_index_of(self, field_name: str) -> int:
        """Index of the step that owns ``field_name``."""
        try:
            return self._owner[field_name]
        except KeyError:
            raise KeyError(f"No step declares field '{field_name}'") from None

    def __repr__(self):
        return f"<StepRegistry steps={[step.name for step in self._steps]}>"
