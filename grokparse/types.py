from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Union

# Field name -> captured value, keys in ascending order
FieldMap = dict[str, str]


@dataclass(frozen=True)
class Matched:
    """A line that matched the compiled pattern."""
    fields: FieldMap = field(default_factory=dict)


@dataclass(frozen=True)
class Failed:
    """A line that did not match.

    - reason: short machine-friendly cause, e.g. "no match"
    - raw_line: the line as read, without its terminator
    """
    reason: str
    raw_line: str


ParseOutcome = Union[Matched, Failed]


@dataclass
class Stats:
    """Running counters for one run. Incremented by the Extractor only."""
    parsed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.parsed + self.failed

    def as_dict(self) -> dict[str, int]:
        return asdict(self)
