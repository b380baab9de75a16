import logging
from typing import Any

import httpx

from journal_ai.config import CloudConfig
from journal_ai.errors import ErrorKind, ProviderCallError
from journal_ai.models import ProviderId, ProviderResponse, StructuringRequest

logger = logging.getLogger(__name__)


class CloudProvider:
    """OpenAI-compatible ``chat/completions`` endpoint authenticated with a bearer key."""

    provider_id = ProviderId.CLOUD

    def __init__(self, config: CloudConfig, client: httpx.Client) -> None:
        self.config = config
        self._client = client

    def __repr__(self) -> str:
        return f"CloudProvider(base_url={self.config.base_url!r}, model={self.config.model!r})"

    def _payload(self, request: StructuringRequest) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            "temperature": self.config.temperature,
            "response_format": {"type": "json_object"},
        }

    def structure(self, request: StructuringRequest) -> ProviderResponse:
        if not self.config.has_api_key:
            raise ProviderCallError(
                ErrorKind.AUTH_ERROR,
                "No API key configured. Set OPENAI_API_KEY or add api_key to [cloud]",
            )

        url = f"{self.config.base_url}/chat/completions"
        logger.debug("POST %s model=%s", url, self.config.model)

        try:
            response = self._client.post(
                url,
                headers={"Authorization": f"Bearer {self.config.api_key.strip()}"},
                json=self._payload(request),
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException as e:
            raise ProviderCallError(
                ErrorKind.TIMEOUT, f"API did not answer within {self.config.timeout:g}s"
            ) from e
        except httpx.ConnectError as e:
            raise ProviderCallError(
                ErrorKind.UNREACHABLE, f"Failed to connect to {self.config.base_url}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderCallError(ErrorKind.PROVIDER_ERROR, f"API request failed: {type(e).__name__}") from e

        if response.status_code in (401, 403):
            raise ProviderCallError(
                ErrorKind.AUTH_ERROR, f"API key rejected (HTTP {response.status_code})"
            )
        if response.status_code == 429:
            raise ProviderCallError(ErrorKind.RATE_LIMITED, "API rate limit reached (HTTP 429)")
        if not response.is_success:
            raise ProviderCallError(
                ErrorKind.PROVIDER_ERROR,
                f"HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderCallError(ErrorKind.PROVIDER_ERROR, "Failed to parse API response") from e

        if not isinstance(content, str):
            raise ProviderCallError(ErrorKind.PROVIDER_ERROR, "No response content from API")

        return ProviderResponse(raw_output=content, provider_id=self.provider_id)

    def is_available(self) -> bool:
        return self.config.has_api_key
