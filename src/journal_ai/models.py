from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Union

from journal_ai.errors import ErrorKind

MAX_TITLE_LENGTH = 120
DEFAULT_MAX_TAGS = 10


class ProviderId(str, Enum):
    LOCAL = "local"
    CLOUD = "cloud"

    @classmethod
    def parse(cls, value: "str | ProviderId") -> "ProviderId":
        if isinstance(value, ProviderId):
            return value
        normalized = value.strip().lower()
        # Names used by earlier config files.
        aliases = {"ollama": cls.LOCAL, "openai": cls.CLOUD}
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError as error:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"provider must be one of: {allowed} (got {value!r})") from error


@dataclass(frozen=True)
class StructuringRequest:
    raw_text: str
    system_prompt: str
    user_prompt: str
    provider_hint: ProviderId | None = None
    emphasized: bool = False

    def with_system_prompt(self, system_prompt: str) -> "StructuringRequest":
        return replace(self, system_prompt=system_prompt, emphasized=True)


@dataclass(frozen=True)
class ProviderResponse:
    raw_output: str
    provider_id: ProviderId


@dataclass(frozen=True)
class StructuredEntry:
    title: str
    content: str
    tags: tuple[str, ...]
    source_provider: ProviderId

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("title must be non-empty")
        if not self.content.strip():
            raise ValueError("content must be non-empty")
        if len(self.title) > MAX_TITLE_LENGTH:
            raise ValueError(f"title must be at most {MAX_TITLE_LENGTH} characters")

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "source_provider": self.source_provider.value,
        }


@dataclass(frozen=True)
class AttemptRecord:
    provider_id: ProviderId
    succeeded: bool
    failure_reason: str | None = None
    error_kind: ErrorKind | None = None
    reparse: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider_id.value,
            "succeeded": self.succeeded,
            "failure_reason": self.failure_reason,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "reparse": self.reparse,
        }


@dataclass(frozen=True)
class Success:
    entry: StructuredEntry
    attempts: tuple[AttemptRecord, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    attempts: tuple[AttemptRecord, ...] = field(default_factory=tuple)
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return False


StructuringOutcome = Union[Success, Failure]


@dataclass(frozen=True)
class PersistResult:
    output: str
    target: str
