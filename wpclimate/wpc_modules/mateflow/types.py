"""Workflow data model and its JSON record.

Workflow and Step are plain mutable data edited by the CLI;
FlowRecord and StepRecord are the pydantic models for the
on-disk format:

    {"flowName": "...", "description": "...",
     "commands": [{"command": "...", "group": "WP", "parametes": {...}}]}

"parametes" is the established key in existing flow files.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wpclimate.wpc_modules.commands.types import CommandGroup


@dataclass
class Step:
    """One workflow entry. Pure data, never a live command."""

    group: str
    command: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.group, CommandGroup):
            self.group = self.group.value

    def resolved_group(self) -> CommandGroup | None:
        return CommandGroup.parse(self.group)

    def __str__(self) -> str:
        return f"{self.command} ({self.group})"


@dataclass
class Workflow:
    """A named, ordered list of steps.

    Reordering and removal with an index that has no valid target
    leave the list unchanged.
    """

    name: str
    description: str = ""
    steps: list[Step] = field(default_factory=list)

    def add_step(self, step: Step) -> None:
        self.steps.append(step)

    def add_steps(self, steps: list[Step]) -> None:
        self.steps.extend(steps)

    def move_step_up(self, index: int) -> None:
        if 0 < index < len(self.steps):
            steps = self.steps
            steps[index - 1], steps[index] = steps[index], steps[index - 1]

    def move_step_down(self, index: int) -> None:
        if 0 <= index < len(self.steps) - 1:
            steps = self.steps
            steps[index + 1], steps[index] = steps[index], steps[index + 1]

    def remove_step(self, index: int) -> None:
        if 0 <= index < len(self.steps):
            del self.steps[index]

    def to_json(self) -> str:
        return FlowRecord.from_workflow(self).model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, text: str) -> Workflow:
        """Parse a flow record.

        Raises:
            pydantic.ValidationError: If the record is malformed.
        """
        return FlowRecord.model_validate_json(text).to_workflow()


class StepRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    command: str
    group: str
    parameters: dict[str, Any] = Field(default_factory=dict, alias="parametes")

    @field_validator("parameters", mode="before")
    @classmethod
    def _none_is_empty(cls, value: object) -> object:
        return {} if value is None else value


class FlowRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    flow_name: str = Field(alias="flowName")
    description: str = ""
    commands: list[StepRecord] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _none_is_blank(cls, value: object) -> object:
        return "" if value is None else value

    @classmethod
    def from_workflow(cls, workflow: Workflow) -> FlowRecord:
        return cls(
            flow_name=workflow.name,
            description=workflow.description,
            commands=[
                StepRecord(
                    command=step.command,
                    group=step.group,
                    parameters=dict(step.parameters),
                )
                for step in workflow.steps
            ],
        )

    def to_workflow(self) -> Workflow:
        return Workflow(
            name=self.flow_name,
            description=self.description,
            steps=[
                Step(group=r.group, command=r.command, parameters=dict(r.parameters))
                for r in self.commands
            ],
        )
