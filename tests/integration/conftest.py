import os

import httpx
import pytest


def pytest_collection_modifyitems(config, items):
    skip_integration = os.getenv("SKIP_INTEGRATION", "").lower() in ("1", "true", "yes")
    integration_marker = pytest.mark.skip(reason="SKIP_INTEGRATION is set")

    for item in items:
        if "integration" in item.keywords and skip_integration:
            item.add_marker(integration_marker)


@pytest.fixture
def ollama_available():
    url = os.getenv("JOURNAL_AI_OLLAMA_URL", "http://localhost:11434")
    try:
        response = httpx.get(f"{url}/api/tags", timeout=5.0)
        return response.status_code == 200
    except httpx.HTTPError:
        return False


@pytest.fixture
def openai_available():
    return bool(os.getenv("OPENAI_API_KEY", ""))


@pytest.fixture
def skip_if_no_ollama(ollama_available):
    if not ollama_available:
        pytest.skip("Ollama not available at localhost:11434")


@pytest.fixture
def skip_if_no_openai(openai_available):
    if not openai_available:
        pytest.skip("OPENAI_API_KEY not configured")
