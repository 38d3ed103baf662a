"""
Cloud Provisioner - CLI Entry Point.

Runs the function-app/domain sample end to end: authenticate, create
every resource in dependency order, then delete everything again.

Usage:
    cloud-provisioner run [--region eastus] [--max-concurrency 2] [--debug]
    cloud-provisioner plan [--region eastus] [--prefix ci-]

Exit Codes:
    0   all resources created and deleted
    1   a resource failed to create (teardown still ran)
    2   everything was created, but teardown left resources behind
    3   configuration or plan error, nothing was created
    130 interrupted; created resources were torn down
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from cloud_provisioner import constants as CONSTANTS
from cloud_provisioner.core.config import load_settings
from cloud_provisioner.core.exceptions import ConfigurationError, PlanError
from cloud_provisioner.core.executor import PipelineExecutor
from cloud_provisioner.core.report import format_summary
from cloud_provisioner.core.run import PipelineResult
from cloud_provisioner.logger import logger, print_stack_trace, setup_logger
from cloud_provisioner.providers.azure import AzureNaming, AzureResourceClient, build_sample_plan


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloud-provisioner",
        description="Provision Azure function apps with a custom domain, then tear them down."
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Create all resources, then delete them")
    run_parser.add_argument("--region", help="Azure region (overrides REGION)")
    run_parser.add_argument(
        "--max-concurrency",
        type=int,
        default=CONSTANTS.DEFAULT_MAX_CONCURRENCY,
        help="Independent steps created at once (default: 1, sequential)"
    )
    run_parser.add_argument("--env-file", default=CONSTANTS.ENV_FILE, help="Optional dotenv file")

    plan_parser = subparsers.add_parser("plan", help="Print the step order without touching Azure")
    plan_parser.add_argument("--region", default=CONSTANTS.DEFAULT_REGION, help="Azure region")
    plan_parser.add_argument("--prefix", default="", help="Prefix for generated resource names")

    return parser


async def run_sample(
    region: Optional[str] = None,
    max_concurrency: int = CONSTANTS.DEFAULT_MAX_CONCURRENCY,
    env_file: Optional[str] = CONSTANTS.ENV_FILE,
    debug: bool = False
) -> int:
    """
    Run the sample end to end and return the process exit code.

    Configuration and plan errors are reported before anything is created.
    """
    overrides = {"REGION": region} if region else {}
    try:
        settings = load_settings(env_file=env_file, **overrides)
        setup_logger(debug_mode=debug or settings.debug)
        logger.debug(f"Settings: {settings.redacted()}")

        plan = build_sample_plan(
            settings.REGION,
            AzureNaming(settings.RESOURCE_PREFIX),
            certificate_thumbprint=settings.CERTIFICATE_THUMBPRINT
        )
        executor = PipelineExecutor(max_concurrency=max_concurrency)
        run = executor.prepare(plan)
    except (ConfigurationError, PlanError, ValueError) as e:
        logger.error(str(e))
        print_stack_trace()
        return CONSTANTS.EXIT_CONFIGURATION_ERROR

    async with AzureResourceClient.from_settings(settings) as client:
        try:
            result = await executor.run(plan, client, run=run)
        except asyncio.CancelledError:
            # Teardown already finished; show what was reclaimed before exiting
            print(format_summary(PipelineResult(run=run)))
            raise

    print(format_summary(result))
    if result.teardown_error is not None:
        logger.error(str(result.teardown_error))
    return result.exit_code


def show_plan(region: str, prefix: str) -> int:
    try:
        plan = build_sample_plan(region, AzureNaming(prefix))
        order = plan.topological_order()
    except (ConfigurationError, PlanError) as e:
        logger.error(str(e))
        return CONSTANTS.EXIT_CONFIGURATION_ERROR

    for index, name in enumerate(order, start=1):
        step = plan.get_step(name)
        after = f" (after {', '.join(step.depends_on)})" if step.depends_on else ""
        print(f"{index}. {name}: {step.spec.kind.value} '{step.spec.name}'{after}")
    return CONSTANTS.EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(debug_mode=args.debug)

    if args.command == "plan":
        return show_plan(args.region, args.prefix)

    try:
        return asyncio.run(run_sample(
            region=args.region,
            max_concurrency=args.max_concurrency,
            env_file=args.env_file,
            debug=args.debug
        ))
    except KeyboardInterrupt:
        logger.warning("Interrupted. Created resources were torn down before exiting.")
        return CONSTANTS.EXIT_CANCELLED


if __name__ == "__main__":
    sys.exit(main())
