import logging
from typing import Any

import httpx

from journal_ai.config import LocalConfig
from journal_ai.errors import ErrorKind, ProviderCallError
from journal_ai.models import ProviderId, ProviderResponse, StructuringRequest

logger = logging.getLogger(__name__)


class LocalProvider:
    """Ollama running on this machine (``/api/generate``)."""

    provider_id = ProviderId.LOCAL

    def __init__(self, config: LocalConfig, client: httpx.Client) -> None:
        self.config = config
        self._client = client

    def _payload(self, request: StructuringRequest) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "prompt": request.user_prompt,
            "system": request.system_prompt,
            "stream": False,
            "format": "json",
            "options": {"temperature": self.config.temperature},
        }

    def structure(self, request: StructuringRequest) -> ProviderResponse:
        url = f"{self.config.base_url}/api/generate"
        logger.debug("POST %s model=%s", url, self.config.model)

        try:
            response = self._client.post(url, json=self._payload(request), timeout=self.config.timeout)
        except httpx.TimeoutException as e:
            raise ProviderCallError(
                ErrorKind.TIMEOUT, f"Ollama did not answer within {self.config.timeout:g}s"
            ) from e
        except httpx.ConnectError as e:
            raise ProviderCallError(
                ErrorKind.UNREACHABLE, f"Failed to connect to Ollama at {self.config.base_url}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderCallError(ErrorKind.PROVIDER_ERROR, f"Ollama request failed: {e}") from e

        if response.status_code == 404 or _mentions_missing_model(response):
            raise ProviderCallError(
                ErrorKind.MODEL_NOT_FOUND,
                f"model {self.config.model!r} not found (try: ollama pull {self.config.model})",
            )
        if not response.is_success:
            raise ProviderCallError(
                ErrorKind.PROVIDER_ERROR,
                f"Ollama API error {response.status_code}: {response.text[:200]}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderCallError(ErrorKind.PROVIDER_ERROR, "Failed to parse Ollama response") from e

        content = data.get("response") if isinstance(data, dict) else None
        if not isinstance(content, str):
            raise ProviderCallError(ErrorKind.PROVIDER_ERROR, "Ollama response has no generated text")

        return ProviderResponse(raw_output=content, provider_id=self.provider_id)

    def is_available(self) -> bool:
        try:
            response = self._client.get(f"{self.config.base_url}/api/tags", timeout=2.0)
        except httpx.HTTPError:
            return False
        return response.status_code == 200


def _mentions_missing_model(response: httpx.Response) -> bool:
    if response.is_success:
        return False
    text = response.text.lower()
    return "model" in text and "not found" in text
