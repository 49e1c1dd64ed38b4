# realism.py: edit-distance scoring of generated values

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from ..profile.pattern import pattern_of
from .distance import realism_score

logger = logging.getLogger(__name__)


# =========================
# REPORT STRUCTURES
# =========================

@dataclass
class RealismMetric:
    name: str
    value: float
    passed: bool
    threshold: float
    details: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        status = "✓" if self.passed else "✗"
        return f"{status} {self.name}: {self.value:.3f} (threshold: {self.threshold})"


@dataclass
class RealismReport:
    overall_score: float
    passed: bool
    metrics: List[RealismMetric] = field(default_factory=list)
    column_scores: Dict[str, float] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)

    def add_metric(self, metric: RealismMetric):
        self.metrics.append(metric)

    def get_failed_metrics(self):
        return [m for m in self.metrics if not m.passed]

    def to_dict(self):
        return {
            "overall_score": self.overall_score,
            "passed": self.passed,
            "metrics": [m.__dict__ for m in self.metrics],
            "column_scores": self.column_scores,
            "summary": self.summary,
        }


# =========================
# VALIDATOR
# =========================

class RealismValidator:
    """
    Diagnostic comparison of generated values against reference samples

    Scores are reported, never enforced.
    """

    def __init__(self, threshold: float = 0.5):
        self.threshold = threshold

    def validate(self, reference: pd.Series, generated: pd.Series, column_name: str = "value") -> List[RealismMetric]:
        metrics = []

        ref = reference.fillna("").astype(str)
        gen = generated.fillna("").astype(str)
        if len(ref) == 0 or len(gen) == 0:
            return metrics

        unique_refs = list(dict.fromkeys(ref.tolist()))
        ref_set = set(unique_refs)
        ref_patterns = {pattern_of(value) for value in unique_refs}

        scores = np.array([realism_score(value, unique_refs) for value in gen])
        mean_score = float(scores.mean())
        metrics.append(RealismMetric(
            f"{column_name}_mean_similarity",
            mean_score,
            mean_score >= self.threshold,
            self.threshold,
            {"min": float(scores.min()), "max": float(scores.max())},
        ))

        copies = int(gen.isin(ref_set).sum())
        novelty = 1.0 - copies / len(gen)
        metrics.append(RealismMetric(
            f"{column_name}_novelty",
            novelty,
            novelty >= self.threshold,
            self.threshold,
            {"exact_copies": copies},
        ))

        covered = sum(pattern_of(value) in ref_patterns for value in gen)
        coverage = covered / len(gen)
        metrics.append(RealismMetric(
            f"{column_name}_pattern_coverage",
            coverage,
            coverage >= self.threshold,
            self.threshold,
            {"reference_patterns": len(ref_patterns)},
        ))

        return metrics

    def validate_frame(
        self,
        reference: pd.DataFrame,
        generated: pd.DataFrame,
        columns: Optional[List[str]] = None
    ) -> RealismReport:
        report = RealismReport(0, False)

        if columns is None:
            columns = [c for c in reference.columns if c in generated.columns]

        all_metrics = []
        for col in columns:
            mets = self.validate(reference[col], generated[col], col)
            all_metrics.extend(mets)

            if mets:
                report.column_scores[col] = float(np.mean([m.value for m in mets]))

        for m in all_metrics:
            report.add_metric(m)

        if all_metrics:
            report.overall_score = float(np.mean([m.value for m in all_metrics]))
            report.passed = report.overall_score >= self.threshold

        report.summary = {
            "total_metrics": len(all_metrics),
            "passed_metrics": sum(m.passed for m in all_metrics),
            "failed_metrics": sum(not m.passed for m in all_metrics),
            "columns": len(report.column_scores),
        }

        logger.info(f"Realism validation complete: overall score {report.overall_score:.3f}")
        return report
