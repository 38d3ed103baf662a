"""
Pipeline Executor - realises a ProvisioningPlan against a ResourceClient.

Architecture:
    PipelineExecutor.run(plan, client)
        → execute(plan, client)       create steps in dependency order
        → teardown(run, client)       delete every recorded handle, newest first

Failure Policy:
    - The first CreationError stops scheduling; nothing is retried here
    - Every handle recorded before the failure is kept for teardown
    - Teardown keeps going past failed deletions and raises one
      TeardownError at the end
    - Cancellation tears down what exists, then re-raises; a cancellation
      that arrives during teardown waits for teardown to finish

Concurrency:
    max_concurrency=1 (default) runs steps strictly one after another in
    topological order. Higher values start independent steps together;
    a step still never starts before all of its dependencies finished.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Mapping, Optional

from cloud_provisioner import constants as CONSTANTS

from .exceptions import CreationError, TeardownError
from .models import ResourceHandle
from .plan import ProvisioningPlan, Step
from .protocols import ResourceClient
from .run import PipelineResult, PipelineRun, RunStatus, TeardownFailure, TeardownReport

logger = logging.getLogger(__name__)


class PipelineExecutor:
    """
    Runs provisioning plans with guaranteed cleanup.

    Attributes:
        max_concurrency: Upper bound on steps in flight at once
    """

    def __init__(self, max_concurrency: int = CONSTANTS.DEFAULT_MAX_CONCURRENCY):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency

    # ==========================================
    # End-to-end
    # ==========================================

    async def run(
        self,
        plan: ProvisioningPlan,
        client: ResourceClient,
        run: Optional[PipelineRun] = None
    ) -> PipelineResult:
        """
        Execute the plan, then always tear it down.

        Plan errors propagate before anything is created. A creation
        failure does not raise; it is available on the result together
        with any teardown failure. If the caller is cancelled, teardown
        still completes before CancelledError propagates.

        Args:
            plan: The plan to realise
            client: ResourceClient for creation and deletion
            run: Optional run from prepare(), so the caller can inspect it
                 after a cancellation
        """
        run = await self.execute(plan, client, run=run)

        result = PipelineResult(run=run)
        result.teardown_error, interrupted = await self._teardown_to_completion(run, client)
        if interrupted:
            run.cancelled = True
            raise asyncio.CancelledError()
        return result

    def prepare(self, plan: ProvisioningPlan) -> PipelineRun:
        """
        Order the plan and build its (not yet started) run.

        Raises:
            PlanError: If the plan cannot be ordered
        """
        order = plan.topological_order()
        return PipelineRun([plan.get_step(name) for name in order])

    # ==========================================
    # Creation
    # ==========================================

    async def execute(
        self,
        plan: ProvisioningPlan,
        client: ResourceClient,
        run: Optional[PipelineRun] = None
    ) -> PipelineRun:
        """
        Create every step of the plan in dependency order.

        Args:
            plan: The plan to realise
            client: ResourceClient used for steps without their own operation
            run: Optional NOT_STARTED run from prepare(plan)

        Returns:
            PipelineRun in SUCCEEDED or PARTIALLY_FAILED state

        Raises:
            PlanError: If the plan cannot be ordered (nothing is created)
            RunStateError: If the given run was already started
            asyncio.CancelledError: After tearing down, if cancelled mid-run
        """
        if run is None:
            run = self.prepare(plan)
        run.start()
        logger.info(f"Executing provisioning plan with {len(run.steps)} step(s)")

        in_flight: dict[asyncio.Task, Step] = {}
        try:
            await self._schedule(run, client, in_flight)
        except asyncio.CancelledError:
            logger.warning("Provisioning cancelled, cleaning up created resources...")
            await self._drain_cancelled(run, in_flight)
            run.cancelled = True
            run.finish()
            teardown_error, _ = await self._teardown_to_completion(run, client)
            if teardown_error is not None:
                logger.error(str(teardown_error))
            raise

        run.finish()
        if run.status is RunStatus.SUCCEEDED:
            logger.info(f"✓ Provisioning complete: {len(run.handles)} resource(s) created")
        else:
            logger.error(
                f"Provisioning stopped at step '{run.failed_step}' "
                f"after creating {len(run.handles)} resource(s)"
            )
        return run

    async def _schedule(
        self,
        run: PipelineRun,
        client: ResourceClient,
        in_flight: dict[asyncio.Task, Step],
    ) -> None:
        pending = list(run.steps)

        while pending or in_flight:
            # No new work once a step has failed
            if run.error is None:
                for step in list(pending):
                    if len(in_flight) >= self.max_concurrency:
                        break
                    if all(dependency in run.handles for dependency in step.depends_on):
                        pending.remove(step)
                        task = asyncio.create_task(self._realize(step, run, client))
                        in_flight[task] = step

            if not in_flight:
                break

            done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                step = in_flight.pop(task)
                self._collect(run, step, task)

    async def _realize(self, step: Step, run: PipelineRun, client: ResourceClient) -> ResourceHandle:
        spec = step.spec
        dependencies: Mapping[str, ResourceHandle] = {
            name: run.handles[name] for name in step.depends_on
        }
        operation = step.operation or client.create_or_update

        logger.info(f"Creating {spec.kind.value} '{spec.name}' (step '{step.name}')...")
        handle = await operation(spec, dependencies)
        if not isinstance(handle, ResourceHandle):
            raise TypeError(
                f"Creation of step '{step.name}' returned {type(handle).__name__}, "
                f"expected ResourceHandle"
            )
        if handle.step_name != step.name:
            handle = replace(handle, step_name=step.name)
        return handle

    def _collect(self, run: PipelineRun, step: Step, task: asyncio.Task) -> None:
        # Only the step itself can cancel its task here; the caller's
        # cancellation lands in _schedule and never reaches this point.
        if task.cancelled():
            error = asyncio.CancelledError(f"Step '{step.name}' was cancelled")
        else:
            error = task.exception()
        if error is None:
            handle = task.result()
            run.record(step.name, handle)
            logger.info(f"✓ Created {handle.kind.value} '{handle.name}'")
            logger.debug(f"  id={handle.resource_id} metadata={dict(handle.metadata)}")
            return

        creation_error = CreationError(
            step_name=step.name,
            resource_type=step.spec.kind.value,
            resource_name=step.spec.name,
            original_error=error,
        )
        if run.error is None:
            logger.error(str(creation_error))
        else:
            logger.error(f"Additional failure while draining in-flight steps: {creation_error}")
        run.fail(creation_error)

    async def _drain_cancelled(self, run: PipelineRun, in_flight: dict[asyncio.Task, Step]) -> None:
        for task in in_flight:
            task.cancel()
        await asyncio.gather(*in_flight, return_exceptions=True)

        # Creations that finished before the cancel landed still need cleaning up
        for task, step in in_flight.items():
            if not task.cancelled() and task.exception() is None:
                run.record(step.name, task.result())
        in_flight.clear()

    # ==========================================
    # Teardown
    # ==========================================

    async def _teardown_to_completion(
        self,
        run: PipelineRun,
        client: ResourceClient
    ) -> tuple[Optional[TeardownError], bool]:
        """
        Run teardown to the end, even if the caller is cancelled meanwhile.

        Returns:
            (TeardownError or None, whether a cancellation arrived)
        """
        task = asyncio.ensure_future(self.teardown(run, client))
        interrupted = False
        while not task.done():
            try:
                await asyncio.wait({task})
            except asyncio.CancelledError:
                interrupted = True
                logger.warning("Cancellation received during teardown, finishing cleanup first...")

        error = task.exception()
        if error is not None and not isinstance(error, TeardownError):
            raise error
        return error, interrupted

    async def teardown(self, run: PipelineRun, client: ResourceClient) -> TeardownReport:
        """
        Delete every recorded handle, newest first.

        Args:
            run: A run in SUCCEEDED or PARTIALLY_FAILED state
            client: ResourceClient used for deletion

        Returns:
            TeardownReport (empty if the run never started)

        Raises:
            TeardownError: After all deletions were attempted, if any failed
            RunStateError: If the run is still running or already torn down
        """
        if not run.ever_started:
            logger.info("No resources were created. No clean up is necessary")
            return TeardownReport()

        run.check_can_tear_down()
        report = TeardownReport()

        for handle in reversed(run.created):
            logger.info(f"Deleting {handle.kind.value} '{handle.name}'...")
            try:
                await client.delete(handle)
            except Exception as e:
                logger.warning(f"  ✗ Failed to delete {handle.kind.value} '{handle.name}': {e}")
                report.failures.append(TeardownFailure(handle=handle, error=e))
            else:
                logger.info(f"  ✓ Deleted {handle.kind.value} '{handle.name}'")
                report.deleted.append(handle)

        run.mark_torn_down(report)

        if report.failures:
            raise TeardownError(report)
        return report
