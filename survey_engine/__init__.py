"""Survey insights engine: parsing, aggregation and city comparison of survey exports"""
from .aggregator import Aggregator, filter_by_city, group_by_city
from .dashboard import SurveyDashboard, load_dashboard
from .loader import DataRetrievalError, load_survey_text
from .models import ComparisonEntry, ComparisonResult, DistributionEntry, SurveyRecord
from .record_parser import ColumnLayout, RecordParser, parse_survey_text

__all__ = [
    "Aggregator",
    "ColumnLayout",
    "ComparisonEntry",
    "ComparisonResult",
    "DataRetrievalError",
    "DistributionEntry",
    "RecordParser",
    "SurveyDashboard",
    "SurveyRecord",
    "filter_by_city",
    "group_by_city",
    "load_dashboard",
    "load_survey_text",
    "parse_survey_text",
]
