"""Retrieval of the raw survey export"""
import logging
from pathlib import Path
from typing import Optional

import requests

from config.settings import Settings

logger = logging.getLogger(__name__)


class DataRetrievalError(RuntimeError):
    """The survey export could not be obtained."""


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def _read_file(path: Path) -> str:
    raw = path.read_bytes()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Fallback to latin-1
        logger.info(f"{path.name} is not UTF-8, decoding as latin-1")
        return raw.decode("latin-1")


def _fetch(url: str, timeout: float) -> str:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    if response.encoding is None or response.encoding.lower() == "iso-8859-1":
        response.encoding = response.apparent_encoding or "utf-8"
    return response.text


def load_survey_text(source: Optional[str] = None, settings: Optional[Settings] = None) -> str:
    """
    Return the full export text from a local path or an http(s) URL.

    Raises DataRetrievalError when the source cannot be read.
    """
    settings = settings or Settings()
    source = str(source or settings.DATA_SOURCE)
    try:
        if _is_url(source):
            text = _fetch(source, settings.REQUEST_TIMEOUT)
        else:
            text = _read_file(Path(source))
    except (OSError, requests.RequestException) as e:
        logger.error(f"Error loading survey data from {source}: {str(e)}")
        raise DataRetrievalError(f"Failed to load survey data from {source}: {str(e)}") from e

    logger.info(f"Loaded {len(text)} characters of survey data from {source}")
    return text
