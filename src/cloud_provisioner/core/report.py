"""Human-readable summary of a provisioning run."""

from typing import Optional

from .run import PipelineResult, TeardownReport


def format_summary(result: PipelineResult) -> str:
    """
    Summarise what was created, what failed and what must be reclaimed by hand.

    Example:
        Provisioning summary
          Status:      torn_down
          Failed step: webapp2 (Failed to create function_app 'webapp2-123': quota exceeded)
          Created:     rg, plan, webapp1
          Torn down:   webapp1, plan, rg
    """
    run = result.run
    lines = ["Provisioning summary", f"  Status:      {run.status.value}"]

    if run.cancelled:
        lines.append("  Cancelled:   yes")
    if run.error is not None:
        lines.append(f"  Failed step: {run.failed_step} ({run.error.message})")

    lines.append(f"  Created:     {_names(run.handles)}")
    not_run = [name for name in run.pending_steps() if name != run.failed_step]
    if not_run:
        lines.append(f"  Not run:     {', '.join(not_run)}")

    report: Optional[TeardownReport] = run.teardown_report
    if report is not None:
        lines.append(f"  Torn down:   {_names(h.step_name for h in report.deleted)}")
        if report.failures:
            lines.append("  Teardown failures (reclaim manually):")
            for failure in report.failures:
                handle = failure.handle
                lines.append(f"    - {handle.kind.value} '{handle.name}' {handle.resource_id}: {failure.error}")

    return "\n".join(lines)


def _names(names) -> str:
    names = list(names)
    return ", ".join(names) if names else "(none)"
