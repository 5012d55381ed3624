"""Protocol for source tree handlers."""

from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable

from musakb.models import SourceFile


@runtime_checkable
class Ingester(Protocol):
    """Protocol for source tree handlers.

    Implementations know the layout of one kind of input (the public
    MusaDSL checkout, a private composition folder) and decide which files
    are indexed, under which collection and with which chunker.
    Uses structural subtyping - no inheritance required.
    """

    @property
    def source_type(self) -> str:
        """Return identifier for this source type (e.g., 'musadsl', 'work')."""
        ...

    def can_handle(self, source: Path) -> bool:
        """Check if this ingester can process the given source."""
        ...

    def ingest(self, source: Path) -> Iterator[SourceFile]:
        """Yield source files in a deterministic order."""
        ...
