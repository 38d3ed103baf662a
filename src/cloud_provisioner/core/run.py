"""
Execution record for a provisioning plan.

State Machine:
    NOT_STARTED -> RUNNING -> {SUCCEEDED, PARTIALLY_FAILED} -> TORN_DOWN

    - record() is only allowed while RUNNING, once per step
    - teardown is allowed from SUCCEEDED or PARTIALLY_FAILED
    - a run that never started has nothing to tear down
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from cloud_provisioner import constants as CONSTANTS

from .exceptions import CreationError, RunStateError, TeardownError
from .models import ResourceHandle
from .plan import Step


class RunStatus(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    PARTIALLY_FAILED = "partially_failed"
    TORN_DOWN = "torn_down"


@dataclass(frozen=True)
class TeardownFailure:
    handle: ResourceHandle
    error: BaseException


@dataclass
class TeardownReport:
    """
    Outcome of a teardown pass.

    Attributes:
        deleted: Handles deleted successfully, in deletion order
        failures: Handles whose deletion failed, with the error
    """

    deleted: list[ResourceHandle] = field(default_factory=list)
    failures: list[TeardownFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class PipelineRun:
    """
    Mutable execution record for one pass over a ProvisioningPlan.

    Attributes:
        steps: Steps in the order the executor will consider them
        handles: step name -> ResourceHandle, in completion order
        status: Current RunStatus
        failed_step: Name of the first step that failed, if any
        error: CreationError for failed_step
        cancelled: True if execution was interrupted by task cancellation
        teardown_report: Set once teardown has run
    """

    def __init__(self, steps: list[Step]):
        self.steps = list(steps)
        self.handles: dict[str, ResourceHandle] = {}
        self.status = RunStatus.NOT_STARTED
        self.failed_step: Optional[str] = None
        self.error: Optional[CreationError] = None
        self.cancelled = False
        self.teardown_report: Optional[TeardownReport] = None

    def __repr__(self) -> str:
        return (
            f"PipelineRun(status={self.status.value}, "
            f"created={list(self.handles)}, failed_step={self.failed_step!r})"
        )

    # ==========================================
    # Transitions
    # ==========================================

    def start(self) -> None:
        self._require(RunStatus.NOT_STARTED, action="start")
        self.status = RunStatus.RUNNING

    def record(self, step_name: str, handle: ResourceHandle) -> None:
        """Record a completed step. Each step is recorded exactly once."""
        self._require(RunStatus.RUNNING, action=f"record step '{step_name}'")
        if step_name in self.handles:
            raise RunStateError(f"Step '{step_name}' already has a handle", step=step_name)
        self.handles[step_name] = handle

    def fail(self, error: CreationError) -> None:
        """Remember the first creation failure; later ones are ignored."""
        self._require(RunStatus.RUNNING, action="record a failure")
        if self.error is None:
            self.failed_step = error.step
            self.error = error

    def finish(self) -> None:
        self._require(RunStatus.RUNNING, action="finish")
        if self.error is None and not self.cancelled:
            self.status = RunStatus.SUCCEEDED
        else:
            self.status = RunStatus.PARTIALLY_FAILED

    def check_can_tear_down(self) -> None:
        self._require(RunStatus.SUCCEEDED, RunStatus.PARTIALLY_FAILED, action="tear down")

    def mark_torn_down(self, report: TeardownReport) -> None:
        self.check_can_tear_down()
        self.teardown_report = report
        self.status = RunStatus.TORN_DOWN

    def _require(self, *allowed: RunStatus, action: str) -> None:
        if self.status not in allowed:
            expected = ", ".join(status.value for status in allowed)
            raise RunStateError(
                f"Cannot {action} while run is {self.status.value} (expected {expected})"
            )

    # ==========================================
    # Queries
    # ==========================================

    @property
    def created(self) -> list[ResourceHandle]:
        """Handles in creation order."""
        return list(self.handles.values())

    @property
    def ever_started(self) -> bool:
        return self.status is not RunStatus.NOT_STARTED

    def pending_steps(self) -> list[str]:
        """Steps that never produced a handle."""
        return [step.name for step in self.steps if step.name not in self.handles]


@dataclass
class PipelineResult:
    """
    A run together with the outcome of its teardown.

    Attributes:
        run: The executed PipelineRun
        teardown_error: Aggregate teardown failure, if any
    """

    run: PipelineRun
    teardown_error: Optional[TeardownError] = None

    @property
    def creation_error(self) -> Optional[CreationError]:
        return self.run.error

    @property
    def succeeded(self) -> bool:
        return self.creation_error is None and self.teardown_error is None and not self.run.cancelled

    @property
    def exit_code(self) -> int:
        if self.run.cancelled:
            return CONSTANTS.EXIT_CANCELLED
        if self.creation_error is not None:
            return CONSTANTS.EXIT_CREATION_FAILED
        if self.teardown_error is not None:
            return CONSTANTS.EXIT_TEARDOWN_FAILED
        return CONSTANTS.EXIT_OK
