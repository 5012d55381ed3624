"""Ingester for a checkout of the public MusaDSL repositories."""

from pathlib import Path
from typing import Iterator

from musakb.models import DEMO_CODE, MARKDOWN, RUBY, SourceFile
from musakb.utils.identity import relative_source

# Companion gems whose README is indexed as gem_readme
COMPANION_GEMS = (
    "midi-events",
    "midi-parser",
    "midi-communications",
    "midi-communications-macos",
    "musalce-server",
)


class MusaDSLIngester:
    """Ingester for the MusaDSL source root.

    The root holds sibling checkouts (``musa-dsl``, ``musadsl-demo``, the
    MIDI gems, ``nota``). Files are yielded group by group, each group in
    sorted path order, so chunk ids are reproducible between builds.
    """

    source_type = "musadsl"

    def can_handle(self, source: Path) -> bool:
        """Check if this looks like a MusaDSL source root."""
        return (source / "musa-dsl").is_dir()

    def ingest(self, source: Path) -> Iterator[SourceFile]:
        root = source.expanduser().absolute()

        def files(pattern: str, kind: str, strategy: str, base: Path = root) -> Iterator[SourceFile]:
            for path in sorted(base.glob(pattern)):
                if path.is_file():
                    yield SourceFile(path, relative_source(path, root), kind, strategy)

        yield from files("musa-dsl/docs/**/*.md", "docs", MARKDOWN)
        yield from files("musa-dsl/lib/musa-dsl/**/*.rb", "api", RUBY)
        yield from files("musadsl-demo/demo-*/README.md", "demo_readme", MARKDOWN)
        yield from files("musadsl-demo/demo-*/musa/*.rb", "demo_code", DEMO_CODE)

        for gem_name in COMPANION_GEMS:
            readme = root / gem_name / "README.md"
            if readme.is_file():
                yield SourceFile(readme, f"{gem_name}/README.md", "gem_readme", MARKDOWN)

        musa_readme = root / "musa-dsl" / "README.md"
        if musa_readme.is_file():
            yield SourceFile(musa_readme, "musa-dsl/README.md", "gem_readme", MARKDOWN)

        yield from files("nota/data/best-practices/*.md", "best_practice", MARKDOWN)
