"""Dashboard session - city tabs and comparative analysis"""
import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from config.settings import Settings
from survey_engine.aggregator import Aggregator, filter_by_city
from survey_engine.catalog import CITY_QUESTIONS, COMPARATIVE_QUESTIONS, validate_catalog
from survey_engine.insights import city_recommendations, city_summary, comparison_narrative
from survey_engine.loader import DataRetrievalError, load_survey_text
from survey_engine.models import KNOWN_CITIES, SURVEY_FIELDS, ComparisonResult, DistributionEntry, SurveyRecord
from survey_engine.record_parser import RecordParser
from survey_engine.significance import SignificanceTester
from survey_engine.utils.json_helpers import sanitize_for_json

logger = logging.getLogger(__name__)

RETRIEVAL_ERROR_MESSAGE = "Error cargando los datos. Asegúrate de que el archivo CSV está en la misma carpeta."


class SurveyDashboard:
    """
    Holds one load cycle of survey records and serves the views the
    presentation layer renders. Results are memoised per (city, field).

    A city of None stands for all records, including those whose city was
    not recognised.
    """

    def __init__(self, records: Sequence[SurveyRecord], catalog=CITY_QUESTIONS,
                 comparative_catalog=COMPARATIVE_QUESTIONS, settings: Optional[Settings] = None,
                 error: Optional[str] = None):
        self.settings = settings or Settings()
        self.records = list(records)
        self.catalog = validate_catalog(catalog)
        self.comparative_catalog = validate_catalog(comparative_catalog)
        self.error = error
        self.aggregator = Aggregator.from_settings(self.settings)
        self.tester = SignificanceTester(alpha=self.settings.SIGNIFICANCE_LEVEL)
        self._subsets: Dict[Optional[str], List[SurveyRecord]] = {}
        self._distributions: Dict[tuple, List[DistributionEntry]] = {}
        self._comparisons: Dict[tuple, ComparisonResult] = {}

    @classmethod
    def from_text(cls, text: str, settings: Optional[Settings] = None, **kwargs) -> "SurveyDashboard":
        settings = settings or Settings()
        records = RecordParser.from_settings(settings).parse(text)
        return cls(records, settings=settings, **kwargs)

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def city_records(self, city: Optional[str] = None) -> List[SurveyRecord]:
        if city not in self._subsets:
            self._subsets[city] = list(self.records) if city is None else filter_by_city(self.records, city)
        return self._subsets[city]

    def unassigned_records(self) -> List[SurveyRecord]:
        return [r for r in self.records if r.ciudad not in KNOWN_CITIES]

    def distribution(self, city: Optional[str], field: str) -> List[DistributionEntry]:
        key = (city, field)
        if key not in self._distributions:
            self._distributions[key] = self.aggregator.compute_distribution(self.city_records(city), field)
        return self._distributions[key]

    def comparison(self, field: str, city_a: Optional[str] = None, city_b: Optional[str] = None) -> ComparisonResult:
        city_a = city_a or self.settings.CITY_A
        city_b = city_b or self.settings.CITY_B
        key = (field, city_a, city_b)
        if key not in self._comparisons:
            self._comparisons[key] = self.aggregator.compute_comparison(
                self.city_records(city_a), self.city_records(city_b), field,
                group_a=city_a, group_b=city_b,
            )
        return self._comparisons[key]

    def chart_type(self, stats: Sequence[DistributionEntry]) -> str:
        return "donut" if len(stats) <= self.settings.DONUT_MAX_CATEGORIES else "bar"

    def _valid_responses(self, records: Sequence[SurveyRecord]) -> int:
        answered = 0
        for record in records:
            if any(self.aggregator.normalize_answer(getattr(record, f)) is not None
                   for f in SURVEY_FIELDS if f != "ciudad"):
                answered += 1
        return answered

    def city_view(self, city: Optional[str]) -> Dict:
        """Payload for one city tab (or the all-records view when city is None)."""
        records = self.city_records(city)
        association = self.distribution(city, "asociacion_fybeca")
        communication = self.distribution(city, "comunicacion_calidad")
        prices = self.distribution(city, "percepcion_precios")
        trust = self.distribution(city, "confianza_experta")
        label = city or "General"

        questions = []
        for idx, question in enumerate(self.catalog, start=1):
            stats = self.distribution(city, question.field)
            if not stats:
                continue
            questions.append({
                "field": question.field,
                "title": f"{idx}. {question.question_text}",
                "label": question.display_label,
                "chart": self.chart_type(stats),
                "total": sum(e.count for e in stats),
                "data": [e.to_chart() for e in stats],
            })

        return sanitize_for_json({
            "city": label,
            "respondents": len(records),
            "valid_responses": self._valid_responses(records),
            "summary": {
                "association": [e.to_chart() for e in association[:self.settings.SUMMARY_TOP_N]],
                "trust": [e.to_chart() for e in trust],
                "prices": [{"nivel": e.name, "valor": e.count, "percent": e.percent} for e in prices],
                "communication": [e.to_chart() for e in communication],
            },
            "questions": questions,
            "insights": city_summary(label, association, prices, trust),
            "recommendations": city_recommendations(label, prices, trust),
        })

    def comparison_view(self, city_a: Optional[str] = None, city_b: Optional[str] = None) -> Dict:
        """Payload for the comparative tab. Questions without answers in either city are omitted."""
        city_a = city_a or self.settings.CITY_A
        city_b = city_b or self.settings.CITY_B

        questions = []
        for question in self.comparative_catalog:
            result = self.comparison(question.field, city_a, city_b)
            narrative = comparison_narrative(result)
            if narrative is None:
                continue
            significance = self.tester.compare(
                self.distribution(city_a, question.field),
                self.distribution(city_b, question.field),
            )
            questions.append({
                "field": question.field,
                "label": question.display_label,
                "question": question.question_text,
                "data": result.to_chart(),
                "max_difference": result.max_difference,
                "leading_city": result.leading_group,
                **narrative,
                "significance": significance,
            })

        unassigned = len(self.unassigned_records())
        if unassigned:
            logger.info(f"{unassigned} records have an unrecognised city and are left out of the comparison")

        return sanitize_for_json({
            "cities": [city_a, city_b],
            "respondents": {city_a: len(self.city_records(city_a)), city_b: len(self.city_records(city_b))},
            "unassigned_records": unassigned,
            "questions": questions,
        })

    def distribution_frame(self, city: Optional[str], field: str) -> pd.DataFrame:
        stats = self.distribution(city, field)
        return pd.DataFrame([e.model_dump() for e in stats], columns=["name", "count", "percent"])

    def comparison_frame(self, field: str, city_a: Optional[str] = None, city_b: Optional[str] = None) -> pd.DataFrame:
        result = self.comparison(field, city_a, city_b)
        return pd.DataFrame(result.to_chart(), columns=["name", result.group_a, result.group_b, "diff"])


def load_dashboard(source: Optional[str] = None, settings: Optional[Settings] = None) -> SurveyDashboard:
    """
    Retrieve, parse and wrap the survey export.

    A retrieval failure yields an empty dashboard carrying the error message;
    no partial data is served.
    """
    settings = settings or Settings()
    try:
        text = load_survey_text(source, settings=settings)
    except DataRetrievalError as e:
        logger.error(f"Dashboard unavailable: {str(e)}")
        return SurveyDashboard([], settings=settings, error=RETRIEVAL_ERROR_MESSAGE)
    return SurveyDashboard.from_text(text, settings=settings)
