from enum import Enum, IntEnum


class ErrorKind(str, Enum):
    EMPTY_INPUT = "empty_input"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    AUTH_ERROR = "auth_error"
    MODEL_NOT_FOUND = "model_not_found"
    PROVIDER_ERROR = "provider_error"
    MALFORMED_OUTPUT = "malformed_output"
    MISSING_FIELD = "missing_field"
    EXHAUSTED = "exhausted"
    PERSIST_FAILED = "persist_failed"
    CONFIG_ERROR = "config_error"


CALL_ERROR_KINDS = frozenset({
    ErrorKind.UNREACHABLE,
    ErrorKind.TIMEOUT,
    ErrorKind.RATE_LIMITED,
    ErrorKind.AUTH_ERROR,
    ErrorKind.MODEL_NOT_FOUND,
    ErrorKind.PROVIDER_ERROR,
})

# Transient failures. The rest point at misconfiguration but still fall back.
RECOVERABLE_CALL_ERRORS = frozenset({
    ErrorKind.UNREACHABLE,
    ErrorKind.TIMEOUT,
    ErrorKind.RATE_LIMITED,
})

PARSE_ERROR_KINDS = frozenset({
    ErrorKind.MALFORMED_OUTPUT,
    ErrorKind.MISSING_FIELD,
})


class ExitCode(IntEnum):
    SUCCESS = 0
    CONFIG_ERROR = 1
    # 2 is left to Click for usage errors.
    EXHAUSTED = 3
    PERSIST_FAILED = 4
    VALIDATION_FAILED = 5
    INTERRUPTED = 130


class JournalAIError(Exception):
    kind: ErrorKind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind

    @property
    def message(self) -> str:
        return str(self)


class EmptyInputError(JournalAIError):
    kind = ErrorKind.EMPTY_INPUT


class ConfigError(JournalAIError):
    kind = ErrorKind.CONFIG_ERROR


class ProviderCallError(JournalAIError):
    """A single provider request failed; ``kind`` is one of CALL_ERROR_KINDS."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        if kind not in CALL_ERROR_KINDS:
            raise ValueError(f"not a provider call error kind: {kind!r}")
        super().__init__(message, kind)

    @property
    def recoverable(self) -> bool:
        return self.kind in RECOVERABLE_CALL_ERRORS


class ParseError(JournalAIError):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        if kind not in PARSE_ERROR_KINDS:
            raise ValueError(f"not a parse error kind: {kind!r}")
        super().__init__(message, kind)


class PersistFailedError(JournalAIError):
    kind = ErrorKind.PERSIST_FAILED
