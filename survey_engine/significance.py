"""Significance tests for two-city answer distributions"""
import logging
import math
from typing import Dict, List, Sequence

import numpy as np
from scipy.spatial.distance import jensenshannon
from scipy.stats import chi2_contingency

from survey_engine.models import DistributionEntry

logger = logging.getLogger(__name__)


def safe_float(value):
    """Convert value to float, replacing NaN and inf with None."""
    if value is None:
        return None
    try:
        fval = float(value)
        if math.isnan(fval) or math.isinf(fval):
            return None
        return fval
    except (ValueError, TypeError):
        return None


def _aligned(dist_a: Sequence[DistributionEntry], dist_b: Sequence[DistributionEntry], attr: str):
    labels: List[str] = [e.name for e in dist_a]
    labels.extend(e.name for e in dist_b if e.name not in labels)
    values_a = {e.name: getattr(e, attr) for e in dist_a}
    values_b = {e.name: getattr(e, attr) for e in dist_b}
    return (
        labels,
        np.array([values_a.get(label, 0) for label in labels], dtype=float),
        np.array([values_b.get(label, 0) for label in labels], dtype=float),
    )


class SignificanceTester:
    def __init__(self, alpha: float = 0.05):
        self.alpha = alpha

    def chi_square_test(self, dist_a: Sequence[DistributionEntry], dist_b: Sequence[DistributionEntry]) -> Dict:
        """Chi-square test of independence between group and answer."""
        try:
            labels, counts_a, counts_b = _aligned(dist_a, dist_b, "count")
            if counts_a.sum() == 0 or counts_b.sum() == 0:
                return {"test": "chi_square", "error": "One or both groups have no valid answers"}
            if len(labels) < 2:
                return {"test": "chi_square", "error": "Need at least 2 distinct answers"}

            contingency = np.array([counts_a, counts_b])
            chi2, p_value, dof, _ = chi2_contingency(contingency)
            p_value = safe_float(p_value)
            return {
                "test": "chi_square",
                "chi2": safe_float(chi2) or 0.0,
                "p_value": p_value,
                "dof": int(dof),
                "significant": p_value is not None and p_value < self.alpha,
                "interpretation": "Tests whether the answer mix depends on the city. Lower p-value means a real difference.",
            }
        except Exception as e:
            logger.error(f"Chi-square test error: {str(e)}")
            return {"test": "chi_square", "error": str(e)}

    def jensen_shannon(self, dist_a: Sequence[DistributionEntry], dist_b: Sequence[DistributionEntry]) -> Dict:
        """Jensen-Shannon distance between the two percent vectors (0 identical, 1 disjoint)."""
        try:
            _, p, q = _aligned(dist_a, dist_b, "percent")
            if p.sum() == 0 or q.sum() == 0:
                return {"test": "jensen_shannon", "error": "Cannot normalize: one or both distributions are empty"}
            distance = jensenshannon(p / p.sum(), q / q.sum(), base=2)
            return {
                "test": "jensen_shannon",
                "distance": safe_float(distance) or 0.0,
                "interpretation": "Measures how far apart the two answer distributions are. Lower means more similar.",
            }
        except Exception as e:
            logger.error(f"Jensen-Shannon distance error: {str(e)}")
            return {"test": "jensen_shannon", "error": str(e)}

    def compare(self, dist_a: Sequence[DistributionEntry], dist_b: Sequence[DistributionEntry]) -> Dict:
        tests = [self.chi_square_test(dist_a, dist_b), self.jensen_shannon(dist_a, dist_b)]
        chi = tests[0]
        return {
            "tests": tests,
            "significant": bool(chi.get("significant", False)),
        }
