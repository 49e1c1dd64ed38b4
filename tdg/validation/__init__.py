"""
Validation Module

Diagnostic scoring of generated values:
- Levenshtein edit distance and normalized similarity
- Realism score against the closest reference sample
- Column-level realism reports (similarity, novelty, pattern coverage)
"""

from .distance import (
    levenshtein,
    similarity,
    realism_score,
    percent_difference,
)

from .realism import (
    RealismValidator,
    RealismMetric,
    RealismReport,
)

__all__ = [
    # Distances
    "levenshtein",
    "similarity",
    "realism_score",
    "percent_difference",

    # Reports
    "RealismValidator",
    "RealismMetric",
    "RealismReport",
]
