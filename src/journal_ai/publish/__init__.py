from abc import ABC, abstractmethod

from journal_ai.models import PersistResult, StructuredEntry


class JournalSink(ABC):
    @abstractmethod
    def persist(self, entry: StructuredEntry) -> PersistResult:
        """Store a validated entry; raise PersistFailedError on failure."""
        pass

    @abstractmethod
    def describe(self, entry: StructuredEntry) -> str:
        """Describe what persist() would do, without doing it."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the sink is installed/configured."""
        pass


def handoff(entry: StructuredEntry, sink: JournalSink) -> PersistResult:
    return sink.persist(entry)
