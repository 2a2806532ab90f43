"""Provider catalog and generation client."""

from .client import GenerationClient, GenerationRequest
from .providers import (
    CATALOG,
    CATALOG_BY_NAME,
    ConfiguredProvider,
    ProviderRegistry,
    ProviderSpec,
    ProviderStatus,
    discover_providers,
    expand_tasks,
    provider_statuses,
)

__all__ = [
    "CATALOG",
    "CATALOG_BY_NAME",
    "ConfiguredProvider",
    "GenerationClient",
    "GenerationRequest",
    "ProviderRegistry",
    "ProviderSpec",
    "ProviderStatus",
    "discover_providers",
    "expand_tasks",
    "provider_statuses",
]
