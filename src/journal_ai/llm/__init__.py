from typing import Protocol, runtime_checkable

import httpx

from journal_ai.config import AppConfig
from journal_ai.llm.cloud import CloudProvider
from journal_ai.llm.local import LocalProvider
from journal_ai.llm.parse import parse_entry
from journal_ai.llm.prompts import build_request, emphasize
from journal_ai.models import ProviderId, ProviderResponse, StructuringRequest


@runtime_checkable
class StructuringProvider(Protocol):
    provider_id: ProviderId

    def structure(self, request: StructuringRequest) -> ProviderResponse:
        """Send one structuring request; raise ProviderCallError on failure."""
        ...


def build_providers(
    config: AppConfig,
    client: httpx.Client,
    only: ProviderId | None = None,
) -> list[StructuringProvider]:
    order = [only] if only is not None else config.provider_order
    providers: list[StructuringProvider] = []
    for provider_id in order:
        if provider_id is ProviderId.LOCAL:
            providers.append(LocalProvider(config.local, client))
        else:
            providers.append(CloudProvider(config.cloud, client))
    return providers


__all__ = [
    "StructuringProvider",
    "LocalProvider",
    "CloudProvider",
    "build_providers",
    "build_request",
    "emphasize",
    "parse_entry",
]
