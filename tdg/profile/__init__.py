"""
Profiling Module

Pattern-and-Markov profiling engine:
- Pattern extraction by character class
- Frequency model of patterns, positions and transitions
- Compiled weighted sampling with a tagged fallback chain
- Versioned JSON archives
"""

from .pattern import CharacterClass, ExtractedSample, classify, extract, pattern_of
from .frequency import FrequencyModel, PatternEntry, PositionStat
from .sampling import FallbackChain, ProfileSampler, Source, WeightedChoice
from .archive import ARCHIVE_VERSION, archive_path
from .profile import Profile

__all__ = [
    # Extraction
    "CharacterClass",
    "ExtractedSample",
    "classify",
    "extract",
    "pattern_of",

    # Statistics
    "FrequencyModel",
    "PatternEntry",
    "PositionStat",

    # Sampling
    "FallbackChain",
    "ProfileSampler",
    "Source",
    "WeightedChoice",

    # Persistence
    "ARCHIVE_VERSION",
    "archive_path",

    "Profile",
]
