"""
Custom exceptions for the provisioning pipeline.

This module defines a hierarchy of exceptions used throughout the
provisioning system to provide clear, actionable error messages.

Exception Hierarchy:
    ProvisioningError (base)
    ├── ConfigurationError - Missing or invalid process configuration
    ├── PlanError - Invalid provisioning plan
    │   ├── DuplicateStepError - Step name added twice
    │   ├── UnknownDependencyError - Dependency on a step not yet added
    │   └── CyclicDependencyError - Dependency graph contains a cycle
    ├── RunStateError - Illegal PipelineRun state transition
    ├── CreationError - A single step failed to provision
    └── TeardownError - One or more deletions failed during cleanup

Propagation:
    Configuration and plan errors surface before any resource is created.
    CreationError is recorded on the run and triggers teardown.
    TeardownError is raised once, after every deletion was attempted.
"""

from typing import Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .run import TeardownReport


class ProvisioningError(Exception):
    """
    Base exception for all provisioning-related errors.

    Attributes:
        message: Human-readable error description
        step: Optional step name where the error occurred
    """

    def __init__(self, message: str, step: Optional[str] = None):
        self.message = message
        self.step = step

        if step:
            full_message = f"{message} [step={step}]"
        else:
            full_message = message

        super().__init__(full_message)


class ConfigurationError(ProvisioningError):
    """
    Raised when process configuration is invalid or missing a required key.

    Example:
        >>> load_settings()
        ConfigurationError: Missing required configuration: TENANT_ID
    """

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)


class PlanError(ProvisioningError):
    """Base class for errors raised while building or ordering a plan."""


class DuplicateStepError(PlanError):
    """Raised when a step name is added to a plan twice."""

    def __init__(self, step_name: str):
        super().__init__(f"Step '{step_name}' is already part of the plan", step=step_name)


class UnknownDependencyError(PlanError):
    """
    Raised when a step depends on a name that was not previously added.

    Attributes:
        dependency: The dependency name that could not be resolved
    """

    def __init__(self, step_name: str, dependency: str):
        self.dependency = dependency
        super().__init__(
            f"Step '{step_name}' depends on unknown step '{dependency}'",
            step=step_name,
        )


class CyclicDependencyError(PlanError):
    """
    Raised when the dependency graph cannot be linearised.

    Attributes:
        cycle: Names of the steps left unordered (they sit on or behind a cycle)
    """

    def __init__(self, cycle: Iterable[str]):
        self.cycle = list(cycle)
        super().__init__(f"Cyclic dependency between steps: {', '.join(self.cycle)}")


class RunStateError(ProvisioningError):
    """Raised when an operation is not permitted in the run's current state."""


class CreationError(ProvisioningError):
    """
    Raised (and recorded on the run) when a step fails to provision.

    Wraps the underlying SDK exception with the step that was being
    realised.

    Attributes:
        resource_type: Kind of resource (e.g., "function_app")
        resource_name: Name of the resource that failed
        original_error: The underlying exception
    """

    def __init__(
        self,
        step_name: str,
        resource_type: str,
        resource_name: str,
        original_error: Optional[BaseException] = None
    ):
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.original_error = original_error

        message = f"Failed to create {resource_type} '{resource_name}'"
        if original_error:
            message += f": {original_error}"

        super().__init__(message, step=step_name)


class TeardownError(ProvisioningError):
    """
    Aggregate of every deletion that failed during teardown.

    Raised once, after all deletions were attempted. The resources listed
    here were not reclaimed and must be deleted manually.

    Attributes:
        report: The TeardownReport for the run
    """

    def __init__(self, report: 'TeardownReport'):
        self.report = report
        failed = ", ".join(
            f"{failure.handle.name} ({failure.error})" for failure in report.failures
        )
        super().__init__(f"Teardown failed for {len(report.failures)} resource(s): {failed}")

    @property
    def failed_steps(self) -> list[str]:
        return [failure.handle.step_name for failure in self.report.failures]
