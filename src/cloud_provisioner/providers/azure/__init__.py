from .naming import AzureNaming
from .provider import AzureResourceClient, create_credential
from .sample_plan import build_sample_plan

__all__ = ["AzureNaming", "AzureResourceClient", "build_sample_plan", "create_credential"]
