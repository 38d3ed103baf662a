"""
Azure ResourceClient implementation.

This module provides the Azure implementation of the ResourceClient
protocol: SDK client initialization, per-kind dispatch to the
create/destroy functions in resources.py, and a timeout around every
long-running operation.

SDK Clients Initialized:
    - ResourceManagementClient (aio): Resource Group management
    - WebSiteManagementClient (aio): App Service Plans, Function Apps,
      Domains and Host Name Bindings

Usage:
    credential = create_credential(settings)
    async with AzureResourceClient(credential, settings.SUBSCRIPTION_ID) as client:
        result = await PipelineExecutor().run(plan, client)
"""

import asyncio
import logging
from typing import Any, Mapping, Optional, TYPE_CHECKING

from cloud_provisioner import constants as CONSTANTS
from cloud_provisioner.core.models import ResourceHandle, ResourceSpec

from .resources import CREATORS, DESTROYERS, AzureClients

if TYPE_CHECKING:
    from cloud_provisioner.core.config import Settings

logger = logging.getLogger(__name__)


def create_credential(settings: 'Settings') -> Any:
    """
    Build the async service principal credential.

    The returned object is opaque to the pipeline; it is only handed to
    the SDK clients.
    """
    from azure.identity.aio import ClientSecretCredential

    return ClientSecretCredential(
        tenant_id=settings.TENANT_ID,
        client_id=settings.CLIENT_ID,
        client_secret=settings.CLIENT_SECRET
    )


class AzureResourceClient:
    """
    Azure implementation of the ResourceClient protocol.

    Use as an async context manager so the SDK clients (and, when owned,
    the credential) are closed after teardown.

    Attributes:
        subscription_id: Azure subscription all resources are created in
        operation_timeout: Seconds to wait for any single create/delete
        clients: AzureClients holding the SDK clients
    """

    def __init__(
        self,
        credential: Any,
        subscription_id: str,
        operation_timeout: float = CONSTANTS.DEFAULT_OPERATION_TIMEOUT_SECONDS,
        clients: Optional[AzureClients] = None,
        owns_credential: bool = True
    ):
        if not subscription_id:
            raise ValueError("subscription_id is required")
        self.subscription_id = subscription_id
        self.operation_timeout = operation_timeout
        self._credential = credential
        self._owns_credential = owns_credential
        self._clients = clients

    @classmethod
    def from_settings(cls, settings: 'Settings') -> 'AzureResourceClient':
        return cls(
            credential=create_credential(settings),
            subscription_id=settings.SUBSCRIPTION_ID,
            operation_timeout=settings.OPERATION_TIMEOUT_SECONDS,
        )

    @property
    def clients(self) -> AzureClients:
        if self._clients is None:
            self._clients = self._initialize_sdk_clients()
        return self._clients

    def _initialize_sdk_clients(self) -> AzureClients:
        from azure.mgmt.resource.resources.aio import ResourceManagementClient
        from azure.mgmt.web.aio import WebSiteManagementClient

        logger.info(f"Selected subscription: {self.subscription_id}")
        return AzureClients(
            resource=ResourceManagementClient(credential=self._credential, subscription_id=self.subscription_id),
            web=WebSiteManagementClient(credential=self._credential, subscription_id=self.subscription_id),
        )

    async def __aenter__(self) -> 'AzureResourceClient':
        if self._clients is None:
            self._clients = self._initialize_sdk_clients()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._clients is not None:
            await self._clients.web.close()
            await self._clients.resource.close()
            self._clients = None
        if self._owns_credential and self._credential is not None:
            await self._credential.close()

    # ==========================================
    # ResourceClient protocol
    # ==========================================

    async def create_or_update(
        self,
        spec: ResourceSpec,
        dependencies: Mapping[str, ResourceHandle]
    ) -> ResourceHandle:
        creator = CREATORS.get(spec.kind)
        if creator is None:
            raise ValueError(f"Unsupported resource kind: {spec.kind.value}")

        try:
            handle = await asyncio.wait_for(
                creator(self.clients, spec, dependencies),
                timeout=self.operation_timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Timed out after {self.operation_timeout}s creating {spec.kind.value} '{spec.name}'")
            raise

        logger.info(f"✓ {spec.kind.value} ready: {handle.resource_id}")
        return handle

    async def delete(self, handle: ResourceHandle) -> None:
        destroyer = DESTROYERS.get(handle.kind)
        if destroyer is None:
            raise ValueError(f"Unsupported resource kind: {handle.kind.value}")

        try:
            await asyncio.wait_for(
                destroyer(self.clients, handle),
                timeout=self.operation_timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Timed out after {self.operation_timeout}s deleting {handle.kind.value} '{handle.name}'")
            raise
