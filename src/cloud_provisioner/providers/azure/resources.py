"""
Azure resource create/destroy implementations.

Components Managed:
    - Resource Group: container for every sample resource
    - App Service Plan: Standard S1 plan shared by both function apps
    - Function App: .NET function app hosted on the plan
    - Domain: App Service Domain purchase (hard-deleted on teardown)
    - Host Name Binding: {app}.{domain} CNAME binding, optional SNI SSL

Architecture:
    AzureResourceClient.create_or_update(spec, dependencies)
        → CREATORS[spec.kind](clients, spec, dependencies)
    AzureResourceClient.delete(handle)
        → DESTROYERS[handle.kind](clients, handle)

Critical Requirements:
    - Every component has a create/destroy pair
    - Every call awaits the long-running operation to completion
    - SDK errors are logged with context and re-raised, never swallowed
    - Deleting something that is already gone is not an error
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    HttpResponseError,
    ResourceNotFoundError,
)
from azure.mgmt.web.models import (
    Address,
    AppServicePlan,
    Contact,
    Domain,
    DomainPurchaseConsent,
    HostNameBinding,
    NameValuePair,
    Site,
    SiteConfig,
    SkuDescription,
    TopLevelDomainAgreementOption,
)

from cloud_provisioner import constants as CONSTANTS
from cloud_provisioner.core.models import ResourceHandle, ResourceKind, ResourceSpec

logger = logging.getLogger(__name__)


@dataclass
class AzureClients:
    """
    Async Azure management clients used by the create/destroy functions.

    Attributes:
        resource: azure.mgmt.resource.resources.aio.ResourceManagementClient
        web: azure.mgmt.web.aio.WebSiteManagementClient
    """

    resource: Any
    web: Any


# ==========================================
# Helper Functions
# ==========================================

def _find_dependency(
    dependencies: Mapping[str, ResourceHandle],
    kind: ResourceKind
) -> Optional[ResourceHandle]:
    for handle in dependencies.values():
        if handle.kind is kind:
            return handle
    return None


def _require_dependency(
    spec: ResourceSpec,
    dependencies: Mapping[str, ResourceHandle],
    kind: ResourceKind
) -> ResourceHandle:
    handle = _find_dependency(dependencies, kind)
    if handle is None:
        raise ValueError(f"{spec.kind.value} '{spec.name}' requires a {kind.value} dependency")
    return handle


def resource_group_for(spec: ResourceSpec, dependencies: Mapping[str, ResourceHandle]) -> str:
    """
    Resource group a spec deploys into.

    Taken from a resource_group dependency if there is one, otherwise
    from spec.config["resource_group"].

    Raises:
        ValueError: If neither is available
    """
    group = _find_dependency(dependencies, ResourceKind.RESOURCE_GROUP)
    if group is not None:
        return group.name
    rg_name = spec.config.get("resource_group")
    if not rg_name:
        raise ValueError(f"No resource group known for {spec.kind.value} '{spec.name}'")
    return rg_name


# ==========================================
# 1. Resource Group
# ==========================================

async def create_resource_group(
    clients: AzureClients,
    spec: ResourceSpec,
    dependencies: Mapping[str, ResourceHandle]
) -> ResourceHandle:
    logger.info(f"Creating Resource Group: {spec.name}")

    try:
        group = await clients.resource.resource_groups.create_or_update(
            resource_group_name=spec.name,
            parameters={"location": spec.region, "tags": dict(spec.config.get("tags", {}))}
        )
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED creating Resource Group: {e.message}")
        raise
    except HttpResponseError as e:
        logger.error(f"Failed to create Resource Group: {e.status_code} - {e.message}")
        raise

    return ResourceHandle(
        step_name=spec.name,
        kind=spec.kind,
        name=spec.name,
        resource_id=group.id,
        metadata={"resource_group": spec.name, "location": spec.region},
    )


async def destroy_resource_group(clients: AzureClients, handle: ResourceHandle) -> None:
    logger.info(f"Deleting Resource Group: {handle.name}")

    try:
        poller = await clients.resource.resource_groups.begin_delete(resource_group_name=handle.name)
        await poller.result()
    except ResourceNotFoundError:
        logger.info(f"Resource Group already deleted: {handle.name}")
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED deleting Resource Group: {e.message}")
        raise
    except AzureError as e:
        logger.error(f"Azure error deleting Resource Group: {type(e).__name__}: {e}")
        raise


# ==========================================
# 2. App Service Plan
# ==========================================

async def create_app_service_plan(
    clients: AzureClients,
    spec: ResourceSpec,
    dependencies: Mapping[str, ResourceHandle]
) -> ResourceHandle:
    rg_name = resource_group_for(spec, dependencies)
    sku = dict(spec.config.get("sku", CONSTANTS.APP_SERVICE_PLAN_SKU))

    logger.info(f"Creating App Service Plan: {spec.name} ({sku['tier']} {sku['name']})")

    plan_params = AppServicePlan(
        location=spec.region,
        sku=SkuDescription(
            name=sku["name"],
            tier=sku["tier"],
            capacity=sku.get("capacity", 1)
        ),
    )

    try:
        poller = await clients.web.app_service_plans.begin_create_or_update(
            resource_group_name=rg_name,
            name=spec.name,
            app_service_plan=plan_params
        )
        plan = await poller.result()
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED creating App Service Plan: {e.message}")
        raise
    except HttpResponseError as e:
        logger.error(f"Failed to create App Service Plan: {e.status_code} - {e.message}")
        raise

    return ResourceHandle(
        step_name=spec.name,
        kind=spec.kind,
        name=spec.name,
        resource_id=plan.id,
        metadata={"resource_group": rg_name},
    )


async def destroy_app_service_plan(clients: AzureClients, handle: ResourceHandle) -> None:
    rg_name = handle.metadata["resource_group"]
    logger.info(f"Deleting App Service Plan: {handle.name}")

    try:
        await clients.web.app_service_plans.delete(
            resource_group_name=rg_name,
            name=handle.name
        )
    except ResourceNotFoundError:
        logger.info(f"App Service Plan already deleted: {handle.name}")
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED deleting App Service Plan: {e.message}")
        raise
    except AzureError as e:
        logger.error(f"Azure error deleting App Service Plan: {type(e).__name__}: {e}")
        raise


# ==========================================
# 3. Function App
# ==========================================

async def create_function_app(
    clients: AzureClients,
    spec: ResourceSpec,
    dependencies: Mapping[str, ResourceHandle]
) -> ResourceHandle:
    """
    Create a function app on the App Service Plan it depends on.

    Each function app is its own site; two apps sharing a plan are two
    distinct resources.
    """
    rg_name = resource_group_for(spec, dependencies)
    plan = _require_dependency(spec, dependencies, ResourceKind.APP_SERVICE_PLAN)

    logger.info(f"Creating Function App: {spec.name} on plan {plan.name}")

    app_settings = {
        "FUNCTIONS_EXTENSION_VERSION": CONSTANTS.FUNCTIONS_EXTENSION_VERSION,
        "FUNCTIONS_WORKER_RUNTIME": CONSTANTS.FUNCTIONS_WORKER_RUNTIME,
    }
    app_settings.update(spec.config.get("app_settings", {}))

    params = Site(
        location=spec.region,
        kind="functionapp",
        server_farm_id=plan.resource_id,
        site_config=SiteConfig(
            net_framework_version=spec.config.get(
                "net_framework_version", CONSTANTS.NET_FRAMEWORK_VERSION
            ),
            app_settings=[NameValuePair(name=k, value=v) for k, v in app_settings.items()],
        ),
    )

    try:
        poller = await clients.web.web_apps.begin_create_or_update(
            resource_group_name=rg_name,
            name=spec.name,
            site_envelope=params
        )
        site = await poller.result()
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED creating Function App: {e.message}")
        raise
    except HttpResponseError as e:
        logger.error(f"Failed to create Function App: {e.status_code} - {e.message}")
        raise

    return ResourceHandle(
        step_name=spec.name,
        kind=spec.kind,
        name=spec.name,
        resource_id=site.id,
        metadata={
            "resource_group": rg_name,
            "server_farm_id": plan.resource_id,
            "default_host_name": site.default_host_name,
        },
    )


async def destroy_function_app(clients: AzureClients, handle: ResourceHandle) -> None:
    rg_name = handle.metadata["resource_group"]
    logger.info(f"Deleting Function App: {handle.name}")

    try:
        await clients.web.web_apps.delete(
            resource_group_name=rg_name,
            name=handle.name,
            delete_empty_server_farm=False
        )
    except ResourceNotFoundError:
        logger.info(f"Function App already deleted: {handle.name}")
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED deleting Function App: {e.message}")
        raise
    except AzureError as e:
        logger.error(f"Azure error deleting Function App: {type(e).__name__}: {e}")
        raise


# ==========================================
# 4. Domain
# ==========================================

async def _domain_agreement_keys(clients: AzureClients, domain_name: str) -> list[str]:
    """Legal agreement keys the registrant has to consent to for the domain's TLD."""
    tld = domain_name.rsplit(".", 1)[-1]
    keys = []
    agreements = clients.web.top_level_domains.list_agreements(
        name=tld,
        agreement_option=TopLevelDomainAgreementOption(include_privacy=True, for_transfer=False)
    )
    async for agreement in agreements:
        keys.append(agreement.agreement_key)
    return keys


async def create_domain(
    clients: AzureClients,
    spec: ResourceSpec,
    dependencies: Mapping[str, ResourceHandle]
) -> ResourceHandle:
    """
    Purchase an App Service Domain.

    The purchase is cancelled for a refund when the domain is
    hard-deleted during teardown.
    """
    rg_name = resource_group_for(spec, dependencies)
    contact_values = dict(spec.config.get("contact", CONSTANTS.DOMAIN_CONTACT))
    address = Address(**dict(contact_values.pop("address_mailing")))
    contact = Contact(address_mailing=address, **contact_values)

    logger.info(f"Purchasing Domain: {spec.name}")

    try:
        agreement_keys = await _domain_agreement_keys(clients, spec.name)
        consent = DomainPurchaseConsent(
            agreement_keys=agreement_keys,
            agreed_by=spec.config.get("agreed_by", CONSTANTS.DOMAIN_CONSENT_AGREED_BY),
            agreed_at=spec.config.get("agreed_at") or datetime.now(timezone.utc),
        )
        params = Domain(
            location="global",
            contact_admin=contact,
            contact_billing=contact,
            contact_registrant=contact,
            contact_tech=contact,
            privacy=spec.config.get("privacy", True),
            auto_renew=spec.config.get("auto_renew", False),
            consent=consent,
        )
        poller = await clients.web.domains.begin_create_or_update(
            resource_group_name=rg_name,
            domain_name=spec.name,
            domain=params
        )
        domain = await poller.result()
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED purchasing Domain: {e.message}")
        raise
    except HttpResponseError as e:
        logger.error(f"Failed to purchase Domain: {e.status_code} - {e.message}")
        raise

    return ResourceHandle(
        step_name=spec.name,
        kind=spec.kind,
        name=spec.name,
        resource_id=domain.id,
        metadata={"resource_group": rg_name},
    )


async def destroy_domain(clients: AzureClients, handle: ResourceHandle) -> None:
    rg_name = handle.metadata["resource_group"]
    logger.info(f"Deleting Domain: {handle.name}")

    try:
        await clients.web.domains.delete(
            resource_group_name=rg_name,
            domain_name=handle.name,
            force_hard_delete_domain=True
        )
    except ResourceNotFoundError:
        logger.info(f"Domain already deleted: {handle.name}")
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED deleting Domain: {e.message}")
        raise
    except AzureError as e:
        logger.error(f"Azure error deleting Domain: {type(e).__name__}: {e}")
        raise


# ==========================================
# 5. Host Name Binding
# ==========================================

async def create_hostname_binding(
    clients: AzureClients,
    spec: ResourceSpec,
    dependencies: Mapping[str, ResourceHandle]
) -> ResourceHandle:
    """
    Bind a host name under the purchased domain to a function app.

    Uses SNI SSL when spec.config carries a certificate thumbprint.
    """
    rg_name = resource_group_for(spec, dependencies)
    app = _require_dependency(spec, dependencies, ResourceKind.FUNCTION_APP)
    domain = _require_dependency(spec, dependencies, ResourceKind.DOMAIN)
    host_name = spec.config.get("host_name", spec.name)
    thumbprint = spec.config.get("thumbprint")

    logger.info(f"Binding http://{host_name} to app {app.name}...")

    binding = HostNameBinding(
        site_name=app.name,
        domain_id=domain.resource_id,
        custom_host_name_dns_record_type=CONSTANTS.HOSTNAME_DNS_RECORD_TYPE,
    )
    if thumbprint:
        binding.ssl_state = CONSTANTS.SSL_STATE_SNI
        binding.thumbprint = thumbprint

    try:
        result = await clients.web.web_apps.create_or_update_host_name_binding(
            resource_group_name=rg_name,
            name=app.name,
            host_name=host_name,
            host_name_binding=binding
        )
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED creating Host Name Binding: {e.message}")
        raise
    except HttpResponseError as e:
        logger.error(f"Failed to create Host Name Binding: {e.status_code} - {e.message}")
        raise

    return ResourceHandle(
        step_name=spec.name,
        kind=spec.kind,
        name=host_name,
        resource_id=result.id,
        metadata={
            "resource_group": rg_name,
            "site_name": app.name,
            "host_name": host_name,
            "ssl": bool(thumbprint),
        },
    )


async def destroy_hostname_binding(clients: AzureClients, handle: ResourceHandle) -> None:
    rg_name = handle.metadata["resource_group"]
    site_name = handle.metadata["site_name"]
    logger.info(f"Deleting Host Name Binding: {handle.name} from {site_name}")

    try:
        await clients.web.web_apps.delete_host_name_binding(
            resource_group_name=rg_name,
            name=site_name,
            host_name=handle.metadata["host_name"]
        )
    except ResourceNotFoundError:
        logger.info(f"Host Name Binding already deleted: {handle.name}")
    except ClientAuthenticationError as e:
        logger.error(f"PERMISSION DENIED deleting Host Name Binding: {e.message}")
        raise
    except AzureError as e:
        logger.error(f"Azure error deleting Host Name Binding: {type(e).__name__}: {e}")
        raise


Creator = Callable[[AzureClients, ResourceSpec, Mapping[str, ResourceHandle]], Awaitable[ResourceHandle]]
Destroyer = Callable[[AzureClients, ResourceHandle], Awaitable[None]]

CREATORS: dict[ResourceKind, Creator] = {
    ResourceKind.RESOURCE_GROUP: create_resource_group,
    ResourceKind.APP_SERVICE_PLAN: create_app_service_plan,
    ResourceKind.FUNCTION_APP: create_function_app,
    ResourceKind.DOMAIN: create_domain,
    ResourceKind.HOSTNAME_BINDING: create_hostname_binding,
}

DESTROYERS: dict[ResourceKind, Destroyer] = {
    ResourceKind.RESOURCE_GROUP: destroy_resource_group,
    ResourceKind.APP_SERVICE_PLAN: destroy_app_service_plan,
    ResourceKind.FUNCTION_APP: destroy_function_app,
    ResourceKind.DOMAIN: destroy_domain,
    ResourceKind.HOSTNAME_BINDING: destroy_hostname_binding,
}
