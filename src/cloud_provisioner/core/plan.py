"""
Provisioning plan: what to build and in which order.

A plan is an insertion-ordered set of named steps with declared
dependencies. It knows nothing about execution; the PipelineExecutor
walks it in topological order.

Usage:
    plan = ProvisioningPlan()
    plan.add_step(ResourceSpec(ResourceKind.RESOURCE_GROUP, "rg", "eastus"))
    plan.add_step(ResourceSpec(ResourceKind.APP_SERVICE_PLAN, "plan", "eastus"),
                  depends_on={"rg"})
    plan.topological_order()  # ["rg", "plan"]
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .exceptions import CyclicDependencyError, DuplicateStepError, UnknownDependencyError
from .models import ResourceSpec
from .protocols import CreateOperation


@dataclass(frozen=True)
class Step:
    """
    A ResourceSpec plus the steps it depends on.

    Attributes:
        name: Unique step name within the plan
        spec: Resource to create
        depends_on: Step names that must have produced a handle first
        operation: Optional creation coroutine; defaults to the client's create_or_update
    """

    name: str
    spec: ResourceSpec
    depends_on: tuple[str, ...] = ()
    operation: Optional[CreateOperation] = field(default=None, compare=False)


class ProvisioningPlan:
    """
    Ordered collection of Steps with dependency edges.

    add_step() validates eagerly, so a plan built only through it can
    never contain a cycle. Steps handed to the constructor are taken as
    they are and checked when topological_order() runs.
    """

    def __init__(self, steps: Optional[Iterable[Step]] = None):
        self._steps: dict[str, Step] = {}
        for step in steps or ():
            if step.name in self._steps:
                raise DuplicateStepError(step.name)
            self._steps[step.name] = step

    def add_step(
        self,
        spec: ResourceSpec,
        depends_on: Iterable[str] = (),
        operation: Optional[CreateOperation] = None,
        name: Optional[str] = None,
    ) -> str:
        """
        Add a step to the plan.

        Args:
            spec: Resource to create
            depends_on: Names of previously added steps
            operation: Optional creation coroutine overriding the client default
            name: Step name; defaults to spec.name

        Returns:
            The step name

        Raises:
            DuplicateStepError: If the name is already in the plan
            UnknownDependencyError: If a dependency was not added before
        """
        step_name = name or spec.name
        if step_name in self._steps:
            raise DuplicateStepError(step_name)

        # Keep declaration order but drop repeats
        dependencies = tuple(dict.fromkeys(depends_on))
        for dependency in dependencies:
            if dependency not in self._steps:
                raise UnknownDependencyError(step_name, dependency)

        self._steps[step_name] = Step(
            name=step_name,
            spec=spec,
            depends_on=dependencies,
            operation=operation,
        )
        return step_name

    def get_step(self, name: str) -> Step:
        return self._steps[name]

    @property
    def steps(self) -> list[Step]:
        """Steps in insertion order."""
        return list(self._steps.values())

    def __contains__(self, name: object) -> bool:
        return name in self._steps

    def __len__(self) -> int:
        return len(self._steps)

    def topological_order(self) -> list[str]:
        """
        Linearise the plan so every step follows all of its dependencies.

        Kahn's algorithm; among steps that are ready at the same time the
        one added first wins, so the result is deterministic.

        Raises:
            UnknownDependencyError: If a step references a name not in the plan
            CyclicDependencyError: If the dependency graph has a cycle
        """
        remaining: dict[str, int] = {}
        dependents: dict[str, list[str]] = {name: [] for name in self._steps}

        for step in self._steps.values():
            for dependency in step.depends_on:
                if dependency not in self._steps:
                    raise UnknownDependencyError(step.name, dependency)
                dependents[dependency].append(step.name)
            remaining[step.name] = len(step.depends_on)

        position = {name: index for index, name in enumerate(self._steps)}
        ready = [name for name in self._steps if remaining[name] == 0]
        order: list[str] = []

        while ready:
            current = ready.pop(0)
            order.append(current)
            for dependent in dependents[current]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    ready.append(dependent)
            ready.sort(key=position.__getitem__)

        if len(order) != len(self._steps):
            raise CyclicDependencyError(name for name in self._steps if name not in order)

        return order
