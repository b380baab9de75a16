import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from journal_ai.errors import ConfigError
from journal_ai.models import DEFAULT_MAX_TAGS, ProviderId

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".journal-ai.toml"
DEFAULT_PROVIDER_ORDER = [ProviderId.LOCAL, ProviderId.CLOUD]


def default_config_path() -> Path:
    return Path.home() / ".config" / "journal-ai" / "config.toml"


@dataclass
class LocalConfig:
    base_url: str = "http://localhost:11434"
    model: str = "llama3.2"
    timeout: float = 60.0
    temperature: float = 0.1

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "model": self.model,
            "timeout": self.timeout,
            "temperature": self.temperature,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocalConfig":
        return cls(
            base_url=str(data.get("base_url", "http://localhost:11434")).rstrip("/"),
            model=str(data.get("model", "llama3.2")),
            timeout=float(data.get("timeout", 60.0)),
            temperature=float(data.get("temperature", 0.1)),
        )


@dataclass
class CloudConfig:
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    timeout: float = 60.0
    temperature: float = 0.1
    api_key: str = field(default="", repr=False)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())

    def to_dict(self) -> dict[str, Any]:
        # api_key stays out of anything that gets written or printed
        return {
            "base_url": self.base_url,
            "model": self.model,
            "timeout": self.timeout,
            "temperature": self.temperature,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CloudConfig":
        return cls(
            base_url=str(data.get("base_url", "https://api.openai.com/v1")).rstrip("/"),
            model=str(data.get("model", "gpt-4o-mini")),
            timeout=float(data.get("timeout", 60.0)),
            temperature=float(data.get("temperature", 0.1)),
            api_key=str(data.get("api_key", "")),
        )


@dataclass
class AppConfig:
    provider_order: list[ProviderId] = field(default_factory=lambda: list(DEFAULT_PROVIDER_ORDER))
    local: LocalConfig = field(default_factory=LocalConfig)
    cloud: CloudConfig = field(default_factory=CloudConfig)
    max_tags: int = DEFAULT_MAX_TAGS
    source_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_order": [p.value for p in self.provider_order],
            "local": self.local.to_dict(),
            "cloud": self.cloud.to_dict(),
            "max_tags": self.max_tags,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        try:
            order = _parse_provider_order(data)
            local = LocalConfig.from_dict(_section(data, "local", "ollama"))
            cloud = CloudConfig.from_dict(_section(data, "cloud", "openai"))
            max_tags = int(data.get("max_tags", DEFAULT_MAX_TAGS))
        except (TypeError, ValueError) as error:
            raise ConfigError(f"invalid configuration: {error}") from error
        if max_tags < 0:
            raise ConfigError("max_tags must be >= 0")
        return cls(provider_order=order, local=local, cloud=cloud, max_tags=max_tags)

    def with_model_override(self, provider_id: ProviderId, model: str) -> None:
        if provider_id is ProviderId.LOCAL:
            self.local.model = model
        else:
            self.cloud.model = model


def _section(data: dict[str, Any], name: str, legacy_name: str) -> dict[str, Any]:
    section = data.get(name, data.get(legacy_name, {}))
    if not isinstance(section, dict):
        raise ValueError(f"[{name}] must be a table")
    return section


def _parse_provider_order(data: dict[str, Any]) -> list[ProviderId]:
    if "provider_order" in data:
        raw = data["provider_order"]
        if isinstance(raw, str):
            raw = raw.split(",")
        if not isinstance(raw, list):
            raise ValueError("provider_order must be a list")
        return _dedupe_order(ProviderId.parse(str(p)) for p in raw if str(p).strip())

    # Older files name a single default provider; the other becomes the fallback.
    if "provider" in data:
        first = ProviderId.parse(str(data["provider"]))
        return _dedupe_order([first, *DEFAULT_PROVIDER_ORDER])

    return list(DEFAULT_PROVIDER_ORDER)


def _dedupe_order(providers) -> list[ProviderId]:
    order: list[ProviderId] = []
    for provider in providers:
        if provider not in order:
            order.append(provider)
    if not order:
        raise ValueError("provider_order must name at least one provider")
    return order


def _candidate_paths() -> list[Path]:
    return [Path(CONFIG_FILENAME), default_config_path()]


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(f"failed to read config {path}: {exc}") from exc


def _apply_env(config: AppConfig) -> AppConfig:
    api_key = os.getenv("OPENAI_API_KEY", "")
    if api_key and not config.cloud.has_api_key:
        config.cloud.api_key = api_key

    ollama_url = os.getenv("JOURNAL_AI_OLLAMA_URL")
    if ollama_url:
        config.local.base_url = ollama_url.rstrip("/")

    openai_url = os.getenv("JOURNAL_AI_OPENAI_URL")
    if openai_url:
        config.cloud.base_url = openai_url.rstrip("/")

    order = os.getenv("JOURNAL_AI_PROVIDER_ORDER")
    if order:
        try:
            config.provider_order = _parse_provider_order({"provider_order": order})
        except ValueError as error:
            raise ConfigError(f"JOURNAL_AI_PROVIDER_ORDER: {error}") from error
    return config


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration: defaults, then the TOML file, then environment overrides.

    An explicit ``path`` must exist. Without one, ``./.journal-ai.toml`` and
    ``~/.config/journal-ai/config.toml`` are tried in that order.
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"config file not found: {config_path}")
        candidates = [config_path]
    else:
        candidates = [p for p in _candidate_paths() if p.exists()]

    if candidates:
        source = candidates[0]
        logger.debug("Loading config from %s", source)
        config = AppConfig.from_dict(_load_toml(source))
        config.source_path = source
    else:
        logger.debug("No config file found, using defaults")
        config = AppConfig()

    return _apply_env(config)
