"""Record Parser for delimited survey exports"""
import logging
import re
import unicodedata
from typing import Dict, List, Optional

from config.settings import Settings
from survey_engine.models import SurveyRecord

logger = logging.getLogger(__name__)

# Column order of the normalized export; city is always the last token
POSITIONAL_COLUMNS: Dict[str, int] = {
    "compras_dermocosmetica": 0,
    "compra_en_fybeca": 1,
    "asociacion_fybeca": 2,
    "descripcion_fybeca": 3,
    "comunicacion_calidad": 4,
    "aborda_problemas_reales": 5,
    # 6-11: content preferences, not mapped
    "percepcion_precios": 12,
    "influencia_totalmente_desacuerdo": 13,
    "influencia_desacuerdo": 14,
    "influencia_neutro": 15,
    "influencia_acuerdo": 16,
    "influencia_totalmente_acuerdo": 17,
    "confianza_experta": 18,
    "asesoria_adecuada": 19,
    # 20-25: trust factors, not mapped
    "mejora_para_elegir": 26,
}

# Normalized header prefixes used by the raw export for each field
HEADER_ALIASES: Dict[str, tuple] = {
    "compras_dermocosmetica": ("realiza_compras", "compras_dermocosmetica"),
    "compra_en_fybeca": ("has_comprado",),
    "asociacion_fybeca": ("cuando_piensas_en_fybeca",),
    "descripcion_fybeca": ("cual_de_las_siguientes_palabras",),
    "comunicacion_calidad": ("la_comunicacion_de_fybeca_sobre_dermocosmetica",),
    "aborda_problemas_reales": ("sientes_que_la_comunicacion",),
    "percepcion_precios": ("como_percibes_los_precios",),
    "confianza_experta": ("que_tanto_confias",),
    "asesoria_adecuada": ("crees_que_en_fybeca_puedes_recibir",),
    "ciudad": ("ciudad", "city"),
}

MAPPING_MODES = ("positional", "header")


def normalize_header(name: str) -> str:
    """'¿Cómo percibes los precios?' -> 'como_percibes_los_precios'"""
    name = unicodedata.normalize("NFKD", name or "")
    name = "".join(ch for ch in name if not unicodedata.combining(ch))
    name = re.sub(r"[^a-z0-9_\s]", "", name.strip().lower())
    return re.sub(r"\s+", "_", name.strip())


def clean_value(value: Optional[str]) -> Optional[str]:
    """Trim and drop one wrapping quote on each side. Empty values become None."""
    if value is None:
        return None
    value = value.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    value = value.strip()
    return value or None


def normalize_city(value: Optional[str]) -> Optional[str]:
    """Map free-text city markers onto 'Quito' / 'Guayaquil'; unknown text is kept as is."""
    value = clean_value(value)
    if value is None:
        return None
    lowered = value.lower()
    if "quito" in lowered or "uio" in lowered:
        return "Quito"
    if "guayaquil" in lowered or "gye" in lowered:
        return "Guayaquil"
    return value


class ColumnLayout:
    """Field -> column index mapping. A city index of None means 'last token'."""

    def __init__(self, columns: Dict[str, int], city_index: Optional[int] = None):
        self.columns = dict(columns)
        self.city_index = city_index

    @classmethod
    def positional(cls) -> "ColumnLayout":
        return cls(POSITIONAL_COLUMNS)

    @classmethod
    def from_header(cls, header: List[str]) -> "ColumnLayout":
        """
        Resolve column indices by header name.

        Fields whose header cannot be found are left unmapped and parse as None.
        """
        names = [normalize_header(h) for h in header]
        claimed = set()

        def find(field: str) -> Optional[int]:
            prefixes = (field,) + HEADER_ALIASES.get(field, ())
            for idx, name in enumerate(names):
                if idx in claimed or not name:
                    continue
                if any(name.startswith(p) for p in prefixes):
                    claimed.add(idx)
                    return idx
            return None

        city_index = find("ciudad")
        columns = {}
        for field in POSITIONAL_COLUMNS:
            idx = find(field)
            if idx is None:
                logger.warning(f"Header for '{field}' not found, field left unmapped")
                continue
            columns[field] = idx
        if city_index is None:
            logger.info("No city header found, reading city from the last column")
        return cls(columns, city_index=city_index)


class RecordParser:
    """Parse delimited survey text into SurveyRecord objects."""

    def __init__(self, layout: Optional[ColumnLayout] = None, min_fields: int = 5,
                 mapping: str = "positional"):
        if mapping not in MAPPING_MODES:
            raise ValueError(f"Unsupported column mapping: {mapping}. Use one of {MAPPING_MODES}")
        self.layout = layout or ColumnLayout.positional()
        self.min_fields = min_fields
        self.mapping = mapping
        self.skipped_rows = 0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RecordParser":
        settings = settings or Settings()
        return cls(min_fields=settings.MIN_FIELDS_PER_ROW, mapping=settings.COLUMN_MAPPING)

    @staticmethod
    def split_line(line: str) -> List[str]:
        """
        Split one line on commas outside double quotes.

        Quote characters toggle the quoted state and are dropped. Escaped
        quotes ("") inside a quoted field are not supported.
        """
        fields = []
        current = []
        in_quotes = False
        for char in line:
            if char == '"':
                in_quotes = not in_quotes
            elif char == "," and not in_quotes:
                fields.append("".join(current))
                current = []
            else:
                current.append(char)
        fields.append("".join(current))
        return fields

    def parse(self, text: str) -> List[SurveyRecord]:
        """
        Parse the full export text. Line 0 is the header.

        Blank lines and rows with fewer than `min_fields` tokens are skipped;
        nothing else is rejected.
        """
        lines = (text or "").split("\n")
        layout = self.layout
        if self.mapping == "header" and lines and lines[0].strip():
            layout = ColumnLayout.from_header(self.split_line(lines[0].strip()))

        records = []
        self.skipped_rows = 0
        for line_no, raw_line in enumerate(lines[1:], start=2):
            line = raw_line.strip()
            if not line:
                continue
            tokens = self.split_line(line)
            if len(tokens) < self.min_fields:
                self.skipped_rows += 1
                logger.debug(f"Skipping line {line_no}: {len(tokens)} fields (< {self.min_fields})")
                continue
            records.append(self._build_record(tokens, layout))

        logger.info(f"Parsed {len(records)} survey records ({self.skipped_rows} malformed rows skipped)")
        return records

    @staticmethod
    def _build_record(tokens: List[str], layout: ColumnLayout) -> SurveyRecord:
        values = {}
        for field, idx in layout.columns.items():
            if idx < len(tokens):
                values[field] = clean_value(tokens[idx])
        city_token = tokens[-1] if layout.city_index is None or layout.city_index >= len(tokens) \
            else tokens[layout.city_index]
        values["ciudad"] = normalize_city(city_token)
        return SurveyRecord(**values)


def parse_survey_text(text: str, settings: Optional[Settings] = None) -> List[SurveyRecord]:
    return RecordParser.from_settings(settings).parse(text)
