"""
Resource data model for the provisioning pipeline.

ResourceSpec describes what to create; ResourceHandle is what the
Resource Client hands back once it exists. Both are immutable: a spec is
fixed when the plan is built, and a handle is written once when its step
completes and only read afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ResourceKind(str, Enum):
    """Resource kinds the pipeline knows how to provision."""

    RESOURCE_GROUP = "resource_group"
    APP_SERVICE_PLAN = "app_service_plan"
    FUNCTION_APP = "function_app"
    DOMAIN = "domain"
    HOSTNAME_BINDING = "hostname_binding"


def _freeze(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ResourceSpec:
    """
    Identifies a resource to provision.

    Attributes:
        kind: ResourceKind of the resource
        name: Resource name as it will appear in the cloud
        region: Azure region (e.g., "eastus")
        config: Kind-specific settings; copied into a read-only mapping
    """

    kind: ResourceKind
    name: str
    region: str
    config: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name:
            raise ValueError("ResourceSpec.name is required")
        object.__setattr__(self, "kind", ResourceKind(self.kind))
        object.__setattr__(self, "config", _freeze(self.config))


@dataclass(frozen=True)
class ResourceHandle:
    """
    Reference to a successfully created resource.

    Carries enough information for the Resource Client to delete the
    resource later without consulting the plan again.

    Attributes:
        step_name: Plan step that produced this handle
        kind: ResourceKind of the resource
        name: Resource name
        resource_id: Provider-assigned identifier (ARM id for Azure)
        metadata: Provider-assigned details (resource group, parent site, ...)
    """

    step_name: str
    kind: ResourceKind
    name: str
    resource_id: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "kind", ResourceKind(self.kind))
        object.__setattr__(self, "metadata", _freeze(self.metadata))
