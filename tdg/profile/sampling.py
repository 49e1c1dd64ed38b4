"""
Sampling Structures

Compiled, ready-to-sample form of a frequency model:
- WeightedChoice: cumulative weight table searched with one draw
- FallbackChain: ordered, tagged list of distributions, first non-empty wins
- ProfileSampler: pattern selection plus per-position character selection
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .frequency import FrequencyModel, PatternEntry


class WeightedChoice:
    """Discrete distribution over keys, weighted by integer counts"""

    def __init__(self, counts: Mapping[str, int]):
        self.keys: List[str] = list(counts.keys())
        self.cumulative = np.cumsum(np.fromiter(counts.values(), dtype=np.int64, count=len(self.keys)))
        self.total = int(self.cumulative[-1]) if len(self.keys) else 0

    def __bool__(self) -> bool:
        return self.total > 0

    def __len__(self) -> int:
        return len(self.keys)

    def choose(self, rng: np.random.Generator) -> str:
        """Draw one key; keys earlier in insertion order win ties"""
        if not self:
            raise ValueError("cannot sample from an empty distribution")

        draw = rng.integers(self.total)
        return self.keys[int(np.searchsorted(self.cumulative, draw, side="right"))]

    def probabilities(self) -> Dict[str, float]:
        if not self:
            return {}
        weights = np.diff(self.cumulative, prepend=0) / self.total
        return dict(zip(self.keys, weights.tolist()))


EMPTY = WeightedChoice({})


class Source(Enum):
    """Which distribution supplied a sampled character"""
    START = "start"
    TERMINAL = "terminal"
    TRANSITION = "transition"
    POSITIONAL = "positional"
    PATTERN = "pattern"


class FallbackChain:
    """Distributions tried in order; only the first non-empty one is used"""

    def __init__(self, links: Sequence[Tuple[Source, WeightedChoice]]):
        self.links = list(links)

    def resolve(self) -> Tuple[Source, WeightedChoice]:
        for source, choice in self.links:
            if choice:
                return source, choice
        raise LookupError("every distribution in the fallback chain is empty")

    def choose(self, rng: np.random.Generator) -> Tuple[Source, str]:
        source, choice = self.resolve()
        return source, choice.choose(rng)


@dataclass
class PositionSampler:
    """Compiled distributions for one position of a pattern"""
    positional: WeightedChoice
    pattern_wide: WeightedChoice
    transitions: Dict[str, WeightedChoice]
    start: Optional[WeightedChoice] = None
    terminal: Optional[Dict[str, WeightedChoice]] = None

    def chain(self, previous: Optional[str]) -> FallbackChain:
        links = []
        if self.start is not None:
            links.append((Source.START, self.start))
        if previous is not None:
            if self.terminal is not None:
                links.append((Source.TERMINAL, self.terminal.get(previous, EMPTY)))
            links.append((Source.TRANSITION, self.transitions.get(previous, EMPTY)))
        links.append((Source.POSITIONAL, self.positional))
        links.append((Source.PATTERN, self.pattern_wide))
        return FallbackChain(links)


class EntrySampler:
    """Character samplers for every position of one pattern"""

    def __init__(self, entry: PatternEntry, end_bias: bool = True):
        self.pattern = entry.pattern
        class_tables = self._class_tables(entry)
        last = len(entry) - 1

        self.positions: List[PositionSampler] = []
        for i, stat in enumerate(entry.positions):
            terminal = None
            if end_bias and i == last and i > 0 and entry.ends:
                terminal = {
                    prev: WeightedChoice({
                        ch: n * entry.ends.get(ch, 0) for ch, n in nxt.items()
                    })
                    for prev, nxt in stat.transitions.items()
                }

            self.positions.append(PositionSampler(
                positional=WeightedChoice(stat.observed),
                pattern_wide=class_tables[entry.pattern[i]],
                transitions={prev: WeightedChoice(nxt) for prev, nxt in stat.transitions.items()},
                start=WeightedChoice(entry.starts) if i == 0 else None,
                terminal=terminal,
            ))

    @staticmethod
    def _class_tables(entry: PatternEntry) -> Dict[str, WeightedChoice]:
        merged: Dict[str, Dict[str, int]] = {}
        for symbol, stat in zip(entry.pattern, entry.positions):
            bucket = merged.setdefault(symbol, {})
            for ch, n in stat.observed.items():
                bucket[ch] = bucket.get(ch, 0) + n
        return {symbol: WeightedChoice(counts) for symbol, counts in merged.items()}

    def generate(self, rng: np.random.Generator) -> Tuple[str, List[Source]]:
        chars = []
        sources = []
        previous = None
        for position in self.positions:
            source, ch = position.chain(previous).choose(rng)
            chars.append(ch)
            sources.append(source)
            previous = ch
        return "".join(chars), sources


class ProfileSampler:
    """
    Compiled sampler for a whole frequency model

    Built by ``Profile.pre_generate`` and discarded on the next ``analyze``.
    """

    def __init__(self, model: FrequencyModel, end_bias: bool = True):
        self.entries = [EntrySampler(entry, end_bias=end_bias) for entry in model]
        self.pattern_choice = WeightedChoice({entry.pattern: entry.count for entry in model})
        self._by_pattern = {sampler.pattern: sampler for sampler in self.entries}

    def __bool__(self) -> bool:
        return bool(self.pattern_choice)

    def choose_pattern(self, rng: np.random.Generator) -> str:
        return self.pattern_choice.choose(rng)

    def generate(self, rng: np.random.Generator) -> Tuple[str, List[Source]]:
        """Generate one value and report the source of each character"""
        pattern = self.choose_pattern(rng)
        return self._by_pattern[pattern].generate(rng)
