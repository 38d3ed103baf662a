"""
Protocol definitions for the provisioning pipeline.

The pipeline never talks to a cloud SDK directly. It consumes a
ResourceClient, and any object with matching coroutine methods
qualifies (structural subtyping, checked at runtime with isinstance()).

Design Pattern: Strategy Pattern
    - ResourceClient: how a spec becomes a live resource and back
    - CreateOperation: per-step override of the client's create call
"""

from typing import Awaitable, Callable, Mapping, Protocol, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ResourceHandle, ResourceSpec


@runtime_checkable
class ResourceClient(Protocol):
    """
    Protocol for the cloud-facing side of the pipeline.

    Both methods await the provider's long-running operation to
    completion before returning. Retrying transient failures, if any,
    is the client's job; the executor never retries.

    Example Implementation:
        class AzureResourceClient:
            async def create_or_update(self, spec, dependencies):
                poller = await self._web.app_service_plans.begin_create_or_update(...)
                plan = await poller.result()
                return ResourceHandle(...)

            async def delete(self, handle):
                await self._web.app_service_plans.delete(...)
    """

    async def create_or_update(
        self,
        spec: 'ResourceSpec',
        dependencies: Mapping[str, 'ResourceHandle'],
    ) -> 'ResourceHandle':
        """
        Create (or update) the resource described by spec.

        Args:
            spec: What to create.
            dependencies: Handles of the steps this one depends on, by step name.

        Returns:
            ResourceHandle for the created resource.
        """
        ...

    async def delete(self, handle: 'ResourceHandle') -> None:
        """
        Delete the resource behind handle and wait for completion.

        Raises:
            Any provider exception; the executor collects it into a TeardownError.
        """
        ...


CreateOperation = Callable[
    ['ResourceSpec', Mapping[str, 'ResourceHandle']],
    Awaitable['ResourceHandle'],
]
