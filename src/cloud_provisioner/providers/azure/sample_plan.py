"""
Function apps with a purchased domain: the sample provisioning plan.

Dependency Graph:
    resource-group
    ├── app-service-plan
    │   ├── function-app-1 ──┐
    │   └── function-app-2   ├── hostname-binding
    └── domain ──────────────┘

Both function apps are separate sites sharing one App Service Plan.
Teardown runs in reverse creation order, so the binding goes first and
the resource group last.
"""

from typing import Optional

from cloud_provisioner.core.exceptions import ConfigurationError
from cloud_provisioner.core.models import ResourceKind, ResourceSpec
from cloud_provisioner.core.plan import ProvisioningPlan

from .naming import AzureNaming, is_valid_site_name

STEP_RESOURCE_GROUP = "resource-group"
STEP_APP_SERVICE_PLAN = "app-service-plan"
STEP_FUNCTION_APP_1 = "function-app-1"
STEP_FUNCTION_APP_2 = "function-app-2"
STEP_DOMAIN = "domain"
STEP_HOSTNAME_BINDING = "hostname-binding"


def build_sample_plan(
    region: str,
    naming: Optional[AzureNaming] = None,
    certificate_thumbprint: str = ""
) -> ProvisioningPlan:
    """
    Build the function-app/domain plan.

    Args:
        region: Azure region for every regional resource
        naming: Resource names for this run; fresh random names if omitted
        certificate_thumbprint: Enables SNI SSL on the host name binding

    Returns:
        ProvisioningPlan with six steps

    Raises:
        ConfigurationError: If a generated site name is not a valid Azure site name
    """
    naming = naming or AzureNaming()
    for app_name in (naming.function_app_1, naming.function_app_2):
        if not is_valid_site_name(app_name):
            raise ConfigurationError(f"Invalid function app name '{app_name}'", key="RESOURCE_PREFIX")

    plan = ProvisioningPlan()

    rg = plan.add_step(
        ResourceSpec(ResourceKind.RESOURCE_GROUP, naming.resource_group, region),
        name=STEP_RESOURCE_GROUP,
    )
    app_service_plan = plan.add_step(
        ResourceSpec(ResourceKind.APP_SERVICE_PLAN, naming.app_service_plan, region),
        depends_on=[rg],
        name=STEP_APP_SERVICE_PLAN,
    )
    app_1 = plan.add_step(
        ResourceSpec(ResourceKind.FUNCTION_APP, naming.function_app_1, region),
        depends_on=[rg, app_service_plan],
        name=STEP_FUNCTION_APP_1,
    )
    plan.add_step(
        ResourceSpec(ResourceKind.FUNCTION_APP, naming.function_app_2, region),
        depends_on=[rg, app_service_plan],
        name=STEP_FUNCTION_APP_2,
    )
    domain = plan.add_step(
        ResourceSpec(ResourceKind.DOMAIN, naming.domain, region),
        depends_on=[rg],
        name=STEP_DOMAIN,
    )

    binding_config = {"host_name": naming.host_name}
    if certificate_thumbprint:
        binding_config["thumbprint"] = certificate_thumbprint
    plan.add_step(
        ResourceSpec(ResourceKind.HOSTNAME_BINDING, naming.host_name, region, binding_config),
        depends_on=[rg, app_1, domain],
        name=STEP_HOSTNAME_BINDING,
    )

    return plan
