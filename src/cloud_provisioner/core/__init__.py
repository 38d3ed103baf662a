"""
Core abstractions for the provisioning pipeline.

Modules:
    models: ResourceSpec, ResourceHandle, ResourceKind
    plan: ProvisioningPlan and Step
    run: PipelineRun state machine, TeardownReport, PipelineResult
    executor: PipelineExecutor (execute, teardown, run)
    protocols: ResourceClient interface
    config: Settings loaded from the environment
    exceptions: Error hierarchy

Usage:
    from cloud_provisioner.core import PipelineExecutor, ProvisioningPlan

    result = await PipelineExecutor().run(plan, client)
"""

from .exceptions import (
    ConfigurationError,
    CreationError,
    CyclicDependencyError,
    DuplicateStepError,
    PlanError,
    ProvisioningError,
    RunStateError,
    TeardownError,
    UnknownDependencyError,
)
from .models import ResourceHandle, ResourceKind, ResourceSpec
from .plan import ProvisioningPlan, Step
from .protocols import ResourceClient
from .run import PipelineResult, PipelineRun, RunStatus, TeardownFailure, TeardownReport
from .executor import PipelineExecutor

__all__ = [
    # Model
    "ResourceKind",
    "ResourceSpec",
    "ResourceHandle",
    "Step",
    "ProvisioningPlan",
    # Execution
    "PipelineExecutor",
    "PipelineRun",
    "PipelineResult",
    "RunStatus",
    "TeardownReport",
    "TeardownFailure",
    "ResourceClient",
    # Exceptions
    "ProvisioningError",
    "ConfigurationError",
    "PlanError",
    "DuplicateStepError",
    "UnknownDependencyError",
    "CyclicDependencyError",
    "RunStateError",
    "CreationError",
    "TeardownError",
]
