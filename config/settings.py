"""Settings"""
from pydantic_settings import BaseSettings
from typing import List
import logging
import os

# Resolve project root (directory containing config/ and survey_engine/) so .env is found regardless of cwd
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_ENV_PATH = os.path.join(_PROJECT_ROOT, ".env")


class Settings(BaseSettings):
    APP_NAME: str = "Estudio Fybeca - Survey Insights"
    DATA_SOURCE: str = "Encuesta_Fybeca_Quito_Guayaquil_Normalizada.csv"
    LOG_LEVEL: str = "INFO"
    # Parsing
    MIN_FIELDS_PER_ROW: int = 5
    COLUMN_MAPPING: str = "positional"  # "positional" or "header"
    # Aggregation
    MISSING_SENTINELS: List[str] = ["nan", "null"]
    CITY_A: str = "Quito"
    CITY_B: str = "Guayaquil"
    SIGNIFICANCE_LEVEL: float = 0.05
    # Presentation hints
    DONUT_MAX_CATEGORIES: int = 4
    SUMMARY_TOP_N: int = 5
    # Retrieval
    REQUEST_TIMEOUT: float = 10.0

    class Config:
        case_sensitive = True
        env_file = _ENV_PATH
        env_file_encoding = "utf-8"


def configure_logging(settings: Settings = None) -> None:
    """Install the root logging handler at the configured level."""
    settings = settings or Settings()
    level = getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
