"""Sequential workflow executor.

Runs the steps of a Workflow in order. Each step is dispatched to
the factory bound to its group. The first failing step aborts the
run; later steps are not attempted. Steps whose group is not a
known command family are skipped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from returns.io import IOFailure
from returns.unsafe import unsafe_perform_io

from wpclimate.wpc_modules.errors import ClimateError, ErrorType

if TYPE_CHECKING:
    from collections.abc import Mapping

    from wpclimate.wpc_modules.commands.factory import CommandFactory
    from wpclimate.wpc_modules.commands.types import CommandGroup
    from wpclimate.wpc_modules.mateflow.types import Step, Workflow
    from wpclimate.wpc_modules.types import CommandOutput

logger = logging.getLogger(__name__)


class FlowStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


class StepStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class FamilyBinding:
    """The factory and context used for one command group."""

    factory: CommandFactory
    context: object


@dataclass(frozen=True)
class StepOutcome:
    index: int
    step: Step
    status: StepStatus
    output: CommandOutput | None = None
    error: ClimateError | None = None


@dataclass(frozen=True)
class FlowRunResult:
    """Final status of a run plus one outcome per attempted step."""

    flow_name: str
    status: FlowStatus
    outcomes: list[StepOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is FlowStatus.COMPLETED

    @property
    def failed_step(self) -> StepOutcome | None:
        for outcome in self.outcomes:
            if outcome.status is StepStatus.FAILED:
                return outcome
        return None


class MateFlowExecutor:
    """Runs workflows against the bound command families.

    status reflects the most recent run.
    """

    def __init__(self, bindings: Mapping[CommandGroup, FamilyBinding]) -> None:
        self._bindings = dict(bindings)
        self.status = FlowStatus.PENDING

    def execute(self, workflow: Workflow) -> FlowRunResult:
        """Run every step in order, halting on the first failure."""
        self.status = FlowStatus.RUNNING
        logger.info(
            "Running flow %s (%d steps)", workflow.name, len(workflow.steps),
        )
        outcomes: list[StepOutcome] = []
        for index, step in enumerate(workflow.steps):
            outcome = self.run_step(index, step)
            outcomes.append(outcome)
            if outcome.status is StepStatus.FAILED:
                self.status = FlowStatus.ABORTED
                logger.error(
                    "Flow %s aborted at step %d (%s)",
                    workflow.name, index + 1, step,
                )
                return FlowRunResult(workflow.name, self.status, outcomes)
        self.status = FlowStatus.COMPLETED
        logger.info("Flow %s completed", workflow.name)
        return FlowRunResult(workflow.name, self.status, outcomes)

    def run_step(self, index: int, step: Step) -> StepOutcome:
        group = step.resolved_group()
        if group is None:
            # Skipped, not failed: later steps still run.
            logger.warning("Unknown group: %s for step: %s", step.group, step.command)
            return StepOutcome(index, step, StepStatus.SKIPPED)

        binding = self._bindings.get(group)
        if binding is None:
            error = ClimateError(
                source="mateflow.executor",
                error_type=ErrorType.CONFIGURATION_MISSING,
                message=f"No command family bound for group {group.value}",
                context={"step": index, "command": step.command},
            )
            logger.error("Step failed: %s: %s", step, error)
            return StepOutcome(index, step, StepStatus.FAILED, error=error)

        result = binding.factory.create(
            step.command, binding.context, step.parameters,
        ).bind(lambda command: command.execute())

        if isinstance(result, IOFailure):
            error = unsafe_perform_io(result.failure())
            logger.error("Step failed: %s: %s", step, error)
            return StepOutcome(index, step, StepStatus.FAILED, error=error)

        output = unsafe_perform_io(result.unwrap())
        if not output.successful:
            logger.error(
                "Step failed: %s: %s", step, output.error_text.strip() or "nonzero exit",
            )
            return StepOutcome(index, step, StepStatus.FAILED, output=output)

        logger.info("Step succeeded: %s", step)
        return StepOutcome(index, step, StepStatus.SUCCEEDED, output=output)
