import os

import httpx
import pytest

from journal_ai.config import AppConfig, CloudConfig, LocalConfig
from journal_ai.llm import build_providers
from journal_ai.models import ProviderId, Success
from journal_ai.structuring import StructuringOrchestrator

pytestmark = pytest.mark.integration

NOTE = "had coffe with anna, we talked about the new garden project and planting tomatos next week"


class TestStructuringWithOllama:
    def test_structures_note_locally(self, skip_if_no_ollama):
        config = AppConfig(
            provider_order=[ProviderId.LOCAL],
            local=LocalConfig(
                base_url=os.getenv("JOURNAL_AI_OLLAMA_URL", "http://localhost:11434"),
                model=os.getenv("JOURNAL_AI_OLLAMA_MODEL", "llama3.2"),
                timeout=120.0,
            ),
        )

        with httpx.Client() as client:
            outcome = StructuringOrchestrator(build_providers(config, client)).run(NOTE)

        if isinstance(outcome, Success):
            assert outcome.entry.title
            assert outcome.entry.content
            assert outcome.entry.source_provider is ProviderId.LOCAL
        else:
            assert outcome.attempts


class TestStructuringWithOpenAI:
    def test_structures_note_in_cloud(self, skip_if_no_openai):
        config = AppConfig(
            provider_order=[ProviderId.CLOUD],
            cloud=CloudConfig(
                base_url=os.getenv("JOURNAL_AI_OPENAI_URL", "https://api.openai.com/v1"),
                api_key=os.getenv("OPENAI_API_KEY", ""),
            ),
        )

        with httpx.Client() as client:
            outcome = StructuringOrchestrator(build_providers(config, client)).run(NOTE)

        assert isinstance(outcome, Success), outcome
        assert outcome.entry.source_provider is ProviderId.CLOUD
        assert len(outcome.entry.tags) <= 10


class TestFallbackAgainstDeadEndpoint:
    def test_unreachable_local_falls_back_to_cloud(self, skip_if_no_openai):
        config = AppConfig(
            local=LocalConfig(base_url="http://127.0.0.1:9", timeout=2.0),
            cloud=CloudConfig(
                base_url=os.getenv("JOURNAL_AI_OPENAI_URL", "https://api.openai.com/v1"),
                api_key=os.getenv("OPENAI_API_KEY", ""),
            ),
        )

        with httpx.Client() as client:
            outcome = StructuringOrchestrator(build_providers(config, client)).run(NOTE)

        assert isinstance(outcome, Success), outcome
        assert outcome.entry.source_provider is ProviderId.CLOUD
        assert outcome.attempts[0].provider_id is ProviderId.LOCAL
        assert not outcome.attempts[0].succeeded
