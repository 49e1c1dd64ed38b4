"""
Edit Distance Scoring

Levenshtein distance and the similarity scores derived from it.
"""

from typing import Iterable


def levenshtein(a: str, b: str) -> int:
    """Number of single-character insertions, deletions and substitutions turning a into b"""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """1 - levenshtein / max length; two empty strings are identical"""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def realism_score(candidate: str, references: Iterable[str]) -> float:
    """
    Similarity between a candidate and its closest reference

    Returns 1.0 for an exact copy of a reference, lower values for more novel
    output, and 0.0 when there are no references.
    """
    best = 0.0
    for reference in references:
        score = similarity(candidate, reference)
        if score > best:
            best = score
            if best == 1.0:
                break
    return best


def percent_difference(control: str, experiment: str) -> float:
    """Percent score (1 - ld / (len(control) + len(experiment))) * 100"""
    total = len(control) + len(experiment)
    if total == 0:
        return 100.0
    ld = levenshtein(control, experiment)
    return (1 - ld / total) * 100
