from dataclasses import dataclass

import httpx

from journal_ai.config import AppConfig, default_config_path
from journal_ai.llm.cloud import CloudProvider
from journal_ai.llm.local import LocalProvider
from journal_ai.models import ProviderId
from journal_ai.publish import JournalSink


@dataclass(frozen=True)
class CheckResult:
    name: str
    ok: bool
    detail: str
    hint: str = ""


def run_checks(config: AppConfig, sink: JournalSink, client: httpx.Client) -> list[CheckResult]:
    checks: list[CheckResult] = []

    if config.source_path is not None:
        checks.append(CheckResult("config", True, f"loaded from {config.source_path}"))
    else:
        checks.append(
            CheckResult(
                "config",
                True,
                "no config file found, using defaults",
                hint=f"create {default_config_path()} to change providers or models",
            )
        )

    order = ", ".join(p.value for p in config.provider_order)
    checks.append(CheckResult("providers", True, f"priority order: {order}"))

    if ProviderId.LOCAL in config.provider_order:
        local = LocalProvider(config.local, client)
        if local.is_available():
            checks.append(
                CheckResult("local", True, f"Ollama is running at {config.local.base_url} (model {config.local.model})")
            )
        else:
            checks.append(
                CheckResult(
                    "local",
                    False,
                    f"Ollama not reachable at {config.local.base_url}",
                    hint="make sure Ollama is running: ollama serve",
                )
            )

    if ProviderId.CLOUD in config.provider_order:
        if CloudProvider(config.cloud, client).is_available():
            checks.append(CheckResult("cloud", True, f"API key set (model {config.cloud.model})"))
        else:
            checks.append(
                CheckResult("cloud", False, "API key not set", hint="export OPENAI_API_KEY=...")
            )

    if sink.is_available():
        checks.append(CheckResult("file-journal", True, "file-journal is installed"))
    else:
        checks.append(
            CheckResult(
                "file-journal",
                False,
                "file-journal not found in PATH",
                hint="install it from https://github.com/total70/file-journal",
            )
        )

    return checks
