"""
Frequency Model

Aggregates extracted samples into per-pattern statistics:
- Occurrence count per pattern
- Start and end character counts
- Observed character counts per position
- First-order transition counts per position (previous char -> next char)

Patterns live in an arena: a list of entries addressed by stable integer
handles, plus an index from pattern symbols to handle.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ..exceptions import FormatError
from .pattern import ExtractedSample

Counts = Dict[str, int]


def _increment(counts: Counts, key: str, amount: int = 1):
    counts[key] = counts.get(key, 0) + amount


def _checked_counts(raw: Any, what: str) -> Counts:
    if not isinstance(raw, dict):
        raise FormatError(f"{what} must be a mapping, got {type(raw).__name__}")

    counts = {}
    for key, value in raw.items():
        if not isinstance(key, str) or isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise FormatError(f"{what} has an invalid entry: {key!r} -> {value!r}")
        counts[key] = value
    return counts


@dataclass
class PositionStat:
    """Character statistics for one position of a pattern"""
    observed: Counts = field(default_factory=dict)
    transitions: Dict[str, Counts] = field(default_factory=dict)

    def observe(self, ch: str, previous: Optional[str] = None):
        _increment(self.observed, ch)
        if previous is not None:
            _increment(self.transitions.setdefault(previous, {}), ch)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "observed": dict(self.observed),
            "transitions": {prev: dict(nxt) for prev, nxt in self.transitions.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PositionStat":
        if not isinstance(data, dict):
            raise FormatError("position entry must be a mapping")

        transitions = data.get("transitions", {})
        if not isinstance(transitions, dict):
            raise FormatError("transitions must be a mapping")

        return cls(
            observed=_checked_counts(data.get("observed"), "observed"),
            transitions={
                prev: _checked_counts(nxt, f"transitions[{prev!r}]")
                for prev, nxt in transitions.items()
            },
        )


@dataclass
class PatternEntry:
    """Aggregate statistics for every sample sharing one pattern"""
    pattern: str
    count: int = 0
    starts: Counts = field(default_factory=dict)
    ends: Counts = field(default_factory=dict)
    positions: List[PositionStat] = field(default_factory=list)

    def __post_init__(self):
        if not self.positions:
            self.positions = [PositionStat() for _ in self.pattern]

    def __len__(self) -> int:
        return len(self.pattern)

    def observe(self, extracted: ExtractedSample):
        """Fold one sample with this entry's pattern into the counts"""
        chars = extracted.characters
        self.count += 1

        if chars:
            _increment(self.starts, chars[0])
            _increment(self.ends, chars[-1])

        previous = None
        for stat, ch in zip(self.positions, chars):
            stat.observe(ch, previous)
            previous = ch

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern,
            "count": self.count,
            "starts": dict(self.starts),
            "ends": dict(self.ends),
            "positions": [stat.to_dict() for stat in self.positions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatternEntry":
        if not isinstance(data, dict):
            raise FormatError("pattern entry must be a mapping")

        pattern = data.get("pattern")
        count = data.get("count")
        positions = data.get("positions")

        if not isinstance(pattern, str):
            raise FormatError("pattern entry is missing its pattern")
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise FormatError(f"pattern {pattern!r} has an invalid count: {count!r}")
        if not isinstance(positions, list) or len(positions) != len(pattern):
            raise FormatError(f"pattern {pattern!r} must have one position entry per symbol")

        entry = cls(
            pattern=pattern,
            count=count,
            starts=_checked_counts(data.get("starts", {}), "starts"),
            ends=_checked_counts(data.get("ends", {}), "ends"),
            positions=[PositionStat.from_dict(p) for p in positions],
        )
        entry._check_totals()
        return entry

    def _check_totals(self):
        # every analyzed sample adds exactly one count to each of these
        if not self.pattern:
            return

        totals = {
            "starts": sum(self.starts.values()),
            "ends": sum(self.ends.values()),
        }
        for i, stat in enumerate(self.positions):
            totals[f"positions[{i}].observed"] = sum(stat.observed.values())

        for what, total in totals.items():
            if total != self.count:
                raise FormatError(
                    f"pattern {self.pattern!r}: {what} totals {total}, expected count {self.count}"
                )


class FrequencyModel:
    """
    Arena of pattern entries

    Handles are list indices and stay stable until ``reset``.
    """

    def __init__(self):
        self.entries: List[PatternEntry] = []
        self._index: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PatternEntry]:
        return iter(self.entries)

    @property
    def total_observations(self) -> int:
        return sum(entry.count for entry in self.entries)

    def add(self, extracted: ExtractedSample) -> int:
        """
        Record one extracted sample

        Args:
            extracted: Output of ``extract``

        Returns:
            Handle of the entry the sample was folded into
        """
        handle = self._index.get(extracted.pattern)
        if handle is None:
            handle = len(self.entries)
            self.entries.append(PatternEntry(pattern=extracted.pattern))
            self._index[extracted.pattern] = handle

        self.entries[handle].observe(extracted)
        return handle

    def append_entry(self, entry: PatternEntry) -> int:
        """Insert a fully built entry, used when restoring from an archive"""
        if entry.pattern in self._index:
            raise FormatError(f"duplicate pattern in archive: {entry.pattern!r}")

        handle = len(self.entries)
        self.entries.append(entry)
        self._index[entry.pattern] = handle
        return handle

    def reset(self):
        self.entries.clear()
        self._index.clear()
