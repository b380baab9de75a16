import logging
from enum import Enum
from typing import Callable, Sequence

from journal_ai.errors import ErrorKind, ParseError, ProviderCallError
from journal_ai.llm import StructuringProvider
from journal_ai.llm.parse import parse_entry
from journal_ai.llm.prompts import build_request, emphasize
from journal_ai.models import (
    DEFAULT_MAX_TAGS,
    AttemptRecord,
    Failure,
    ProviderId,
    StructuredEntry,
    StructuringOutcome,
    StructuringRequest,
    Success,
)

logger = logging.getLogger(__name__)

Parser = Callable[[str, ProviderId, int], StructuredEntry]


class StructuringState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    CALLING = "calling"
    PARSING = "parsing"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


_ALLOWED_TRANSITIONS: dict[StructuringState, set[StructuringState]] = {
    StructuringState.IDLE: {StructuringState.BUILDING},
    StructuringState.BUILDING: {StructuringState.CALLING, StructuringState.EXHAUSTED},
    StructuringState.CALLING: {
        StructuringState.PARSING,
        StructuringState.RETRYING,
        StructuringState.EXHAUSTED,
    },
    StructuringState.PARSING: {
        StructuringState.SUCCEEDED,
        StructuringState.RETRYING,
        StructuringState.EXHAUSTED,
    },
    StructuringState.RETRYING: {StructuringState.CALLING},
    StructuringState.SUCCEEDED: set(),
    StructuringState.EXHAUSTED: set(),
}


def can_transition(current: StructuringState, target: StructuringState) -> bool:
    return target in _ALLOWED_TRANSITIONS.get(current, set())


class StructuringOrchestrator:
    """Drive prompt building, provider calls and parsing for one invocation.

    Providers are tried strictly in order. A call failure moves on to the next
    provider; a parse failure earns the same provider one retry with an emphasized
    prompt first. At most ``2 * len(providers)`` calls are made.
    """

    def __init__(
        self,
        providers: Sequence[StructuringProvider],
        parser: Parser = parse_entry,
        max_tags: int = DEFAULT_MAX_TAGS,
    ) -> None:
        self._providers = list(providers)
        self.parser = parser
        self.max_tags = max_tags

    def run(self, raw_text: str, provider_hint: ProviderId | None = None) -> StructuringOutcome:
        return _Run(self, provider_hint).execute(raw_text)

    def select(self, provider_hint: ProviderId | None) -> list[StructuringProvider]:
        if provider_hint is None:
            return list(self._providers)
        return [p for p in self._providers if p.provider_id is provider_hint]


class _Run:
    """State for a single ``run()``; discarded afterwards."""

    def __init__(self, orchestrator: StructuringOrchestrator, provider_hint: ProviderId | None) -> None:
        self._orchestrator = orchestrator
        self._hint = provider_hint
        self.state = StructuringState.IDLE
        self.attempts: list[AttemptRecord] = []

    def _move(self, target: StructuringState) -> None:
        if not can_transition(self.state, target):
            raise RuntimeError(f"invalid structuring transition: {self.state.value} -> {target.value}")
        logger.debug("structuring: %s -> %s", self.state.value, target.value)
        self.state = target

    def execute(self, raw_text: str) -> StructuringOutcome:
        self._move(StructuringState.BUILDING)
        # EmptyInputError propagates: it is a user error, never retried.
        request = build_request(raw_text, self._hint)

        providers = self._orchestrator.select(self._hint)
        if not providers:
            self._move(StructuringState.EXHAUSTED)
            wanted = self._hint.value if self._hint else "any"
            return Failure(ErrorKind.EXHAUSTED, (), f"no provider configured for {wanted}")

        for index, provider in enumerate(providers):
            if index > 0:
                self._move(StructuringState.RETRYING)
            entry = self._try_provider(provider, request)
            if entry is not None:
                self._move(StructuringState.SUCCEEDED)
                return Success(entry, tuple(self.attempts))

        self._move(StructuringState.EXHAUSTED)
        tried = ", ".join(p.provider_id.value for p in providers)
        return Failure(
            ErrorKind.EXHAUSTED,
            tuple(self.attempts),
            f"all providers failed ({tried})",
        )

    def _try_provider(
        self, provider: StructuringProvider, request: StructuringRequest
    ) -> StructuredEntry | None:
        self._move(StructuringState.CALLING)
        result = self._attempt(provider, request, reparse=False)
        if not isinstance(result, ParseError):
            return result

        self._move(StructuringState.RETRYING)
        self._move(StructuringState.CALLING)
        retried = self._attempt(provider, emphasize(request), reparse=True)
        if isinstance(retried, ParseError):
            return None
        return retried

    def _attempt(
        self, provider: StructuringProvider, request: StructuringRequest, reparse: bool
    ) -> StructuredEntry | ParseError | None:
        provider_id = provider.provider_id
        try:
            response = provider.structure(request)
        except ProviderCallError as error:
            state = "unavailable" if error.recoverable else "misconfigured"
            logger.warning("%s provider %s (%s): %s", provider_id.value, state, error.kind.value, error)
            self._record(provider_id, error, reparse)
            return None

        self._move(StructuringState.PARSING)
        try:
            entry = self._orchestrator.parser(
                response.raw_output, provider_id, self._orchestrator.max_tags
            )
        except ParseError as error:
            logger.warning(
                "%s provider returned unusable output (%s): %s",
                provider_id.value,
                error.kind.value,
                error,
            )
            self._record(provider_id, error, reparse)
            return error

        self.attempts.append(AttemptRecord(provider_id=provider_id, succeeded=True, reparse=reparse))
        return entry

    def _record(self, provider_id: ProviderId, error: ProviderCallError | ParseError, reparse: bool) -> None:
        self.attempts.append(
            AttemptRecord(
                provider_id=provider_id,
                succeeded=False,
                failure_reason=str(error),
                error_kind=error.kind,
                reparse=reparse,
            )
        )
