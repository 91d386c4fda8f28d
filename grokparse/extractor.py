from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .aliases import load_aliases
from .patterns import GrokPattern, PatternCatalog
from .types import Failed, Matched, ParseOutcome, Stats

logger = logging.getLogger(__name__)

NO_MATCH = "no match"


@dataclass
class Extractor:
    """Turns lines into field maps using one compiled pattern.

    Counts every line it sees in ``stats``, exactly once.
    """
    pattern: GrokPattern
    stats: Stats = field(default_factory=Stats)

    @classmethod
    def from_template(
        cls,
        template: str,
        patterns_dir: str | Path | None = None,
        no_default_patterns: bool = False,
        named_only: bool = False,
        stats: Stats | None = None,
    ) -> "Extractor":
        """Load aliases, seed the catalog and compile ``template``.

        Errors surface here, before any line is read.
        """
        aliases = load_aliases(patterns_dir) if patterns_dir is not None else {}
        catalog = PatternCatalog(aliases, include_defaults=not no_default_patterns)
        pattern = catalog.compile(template, named_only=named_only)
        logger.info("Using pattern %r with fields %s (%d fragments known)", template, pattern.fields, len(catalog))
        return cls(pattern=pattern, stats=stats if stats is not None else Stats())

    def extract(self, line: str) -> ParseOutcome:
        text = line.rstrip()
        captures = self.pattern.match(text)
        if captures is None:
            self.stats.failed += 1
            return Failed(reason=NO_MATCH, raw_line=line.rstrip("\r\n"))
        self.stats.parsed += 1
        return Matched(fields={k: captures[k] for k in sorted(captures)})
