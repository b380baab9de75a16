import logging
import re
import shlex
import shutil
import subprocess

from journal_ai.errors import PersistFailedError
from journal_ai.models import PersistResult, StructuredEntry
from journal_ai.publish import JournalSink

logger = logging.getLogger(__name__)

FILE_JOURNAL_BIN = "file-journal"

_UNSAFE_CHARS_RE = re.compile(r"[\s/\\:?*\"'<>|]")
_HYPHEN_RUN_RE = re.compile(r"-{2,}")


def sanitize_title(title: str) -> str:
    """Map a title to a file-system-safe ``.md`` name, e.g. ``"Meeting: Q1" -> "meeting-q1.md"``."""
    safe = _UNSAFE_CHARS_RE.sub("-", title.strip()).lower()
    safe = _HYPHEN_RUN_RE.sub("-", safe)
    safe = safe.rstrip("-") or "entry"
    if not safe.endswith(".md"):
        safe = f"{safe}.md"
    return safe


def render_content(entry: StructuredEntry) -> str:
    if not entry.tags:
        return entry.content
    tag_line = " ".join(f"#{tag.replace(' ', '-')}" for tag in entry.tags)
    return f"{entry.content}\n\nTags: {tag_line}"


class FileJournalSink(JournalSink):
    def __init__(self, binary: str = FILE_JOURNAL_BIN, timeout: float = 30.0) -> None:
        self.binary = binary
        self.timeout = timeout

    def command(self, entry: StructuredEntry) -> list[str]:
        return [self.binary, "new", sanitize_title(entry.title), render_content(entry)]

    def persist(self, entry: StructuredEntry) -> PersistResult:
        cmd = self.command(entry)
        target = cmd[2]
        logger.debug("Running %s new %s", self.binary, target)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise PersistFailedError(
                f"{self.binary} not found in PATH. Please install it first: "
                "https://github.com/total70/file-journal"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise PersistFailedError(f"{self.binary} timed out after {self.timeout:g}s") from exc

        if result.returncode != 0:
            raise PersistFailedError(f"{self.binary} failed: {result.stderr.strip()}")

        return PersistResult(output=result.stdout.strip(), target=target)

    def describe(self, entry: StructuredEntry) -> str:
        cmd = self.command(entry)
        return (
            "[DRY RUN] Would create:\n"
            f"  Title: {cmd[2]}\n"
            f"  Command: {shlex.join(cmd)}"
        )

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None
