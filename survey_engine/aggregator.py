"""Aggregator - response distributions and city comparisons"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from config.settings import Settings
from survey_engine.models import (
    KNOWN_CITIES, SURVEY_FIELDS, ComparisonEntry, ComparisonResult,
    DistributionEntry, SurveyRecord,
)

logger = logging.getLogger(__name__)


def filter_by_city(records: Iterable[SurveyRecord], city: str) -> List[SurveyRecord]:
    return [r for r in records if r.ciudad == city]


def group_by_city(records: Iterable[SurveyRecord], cities: Sequence[str] = KNOWN_CITIES) -> Dict[str, List[SurveyRecord]]:
    """Bucket records per known city. Records with any other city are left out."""
    groups = {city: [] for city in cities}
    for record in records:
        if record.ciudad in groups:
            groups[record.ciudad].append(record)
    return groups


class Aggregator:
    def __init__(self, missing_sentinels: Sequence[str] = ("nan", "null")):
        self.missing_sentinels = {s.lower() for s in missing_sentinels}

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Aggregator":
        settings = settings or Settings()
        return cls(missing_sentinels=settings.MISSING_SENTINELS)

    def normalize_answer(self, value: Optional[str]) -> Optional[str]:
        """Return the countable form of an answer, or None if it is missing or a sentinel."""
        if value is None:
            return None
        value = value.strip()
        if not value or value.lower() in self.missing_sentinels:
            return None
        if value.startswith('"'):
            value = value[1:]
        if value.endswith('"'):
            value = value[:-1]
        return value or None

    def count_answers(self, subset: Iterable[SurveyRecord], field: str) -> Dict[str, int]:
        """Counts per distinct answer, in first-encountered order."""
        if field not in SURVEY_FIELDS:
            raise ValueError(f"Unknown survey field: {field}")
        counts = {}
        for record in subset:
            answer = self.normalize_answer(getattr(record, field))
            if answer is None:
                continue
            counts[answer] = counts.get(answer, 0) + 1
        return counts

    def compute_distribution(self, subset: Iterable[SurveyRecord], field: str) -> List[DistributionEntry]:
        """
        Distribution of one field over a subset of records.

        Missing and sentinel answers are excluded from the denominator. When no
        valid answer exists every percent is 0. Entries are sorted by count,
        descending; equal counts keep first-encountered order.
        """
        counts = self.count_answers(subset, field)
        valid_total = sum(counts.values())
        entries = [
            DistributionEntry(
                name=name,
                count=count,
                percent=(count / valid_total * 100) if valid_total > 0 else 0.0,
            )
            for name, count in counts.items()
        ]
        return sorted(entries, key=lambda e: e.count, reverse=True)

    def compute_comparison(self, subset_a: Iterable[SurveyRecord], subset_b: Iterable[SurveyRecord], field: str,
                           group_a: str = "A", group_b: str = "B") -> ComparisonResult:
        """
        Compare one field between two subsets.

        Labels from either side are merged (missing side counts as 0%) and sorted
        by combined percent, descending. Equal combined percents keep the order in
        which labels were first encountered, group A before group B. The
        max-difference entry is the first one in that order holding the largest
        abs_diff.
        """
        subset_a, subset_b = list(subset_a), list(subset_b)
        dist_a = {e.name: e.percent for e in self.compute_distribution(subset_a, field)}
        dist_b = {e.name: e.percent for e in self.compute_distribution(subset_b, field)}

        labels = list(self.count_answers(subset_a, field))
        labels.extend(name for name in self.count_answers(subset_b, field) if name not in dist_a)

        entries = []
        for label in labels:
            percent_a = dist_a.get(label, 0.0)
            percent_b = dist_b.get(label, 0.0)
            entries.append(ComparisonEntry(
                name=label,
                percent_a=percent_a,
                percent_b=percent_b,
                abs_diff=abs(percent_a - percent_b),
            ))
        entries = sorted(entries, key=lambda e: e.combined, reverse=True)

        max_entry = self.max_difference(entries)
        leading = None
        if max_entry is not None:
            leading = group_a if max_entry.percent_a > max_entry.percent_b else group_b

        return ComparisonResult(
            field=field,
            group_a=group_a,
            group_b=group_b,
            entries=entries,
            max_difference=max_entry,
            leading_group=leading,
        )

    @staticmethod
    def max_difference(entries: Sequence[ComparisonEntry]) -> Optional[ComparisonEntry]:
        best = None
        for entry in entries:
            if best is None or entry.abs_diff > best.abs_diff:
                best = entry
        return best

    def compare_cities(self, records: Sequence[SurveyRecord], field: str,
                       city_a: str = "Quito", city_b: str = "Guayaquil") -> ComparisonResult:
        return self.compute_comparison(
            filter_by_city(records, city_a),
            filter_by_city(records, city_b),
            field,
            group_a=city_a,
            group_b=city_b,
        )
