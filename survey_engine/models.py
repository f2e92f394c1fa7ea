"""Survey Models"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

KNOWN_CITIES = ("Quito", "Guayaquil")


class SurveyRecord(BaseModel):
    """One respondent's answers. Every answer is free text or None when missing."""

    model_config = ConfigDict(frozen=True)

    # Demographics
    ciudad: Optional[str] = None

    # Usage & association
    compras_dermocosmetica: Optional[str] = None
    compra_en_fybeca: Optional[str] = None
    asociacion_fybeca: Optional[str] = None
    descripcion_fybeca: Optional[str] = None

    # Communication
    comunicacion_calidad: Optional[str] = None
    aborda_problemas_reales: Optional[str] = None

    # Price perception
    percepcion_precios: Optional[str] = None

    # Decision factors (agreement scale)
    influencia_totalmente_desacuerdo: Optional[str] = None
    influencia_desacuerdo: Optional[str] = None
    influencia_neutro: Optional[str] = None
    influencia_acuerdo: Optional[str] = None
    influencia_totalmente_acuerdo: Optional[str] = None

    # Trust & advice
    confianza_experta: Optional[str] = None
    asesoria_adecuada: Optional[str] = None

    # Improvement areas (free text)
    mejora_para_elegir: Optional[str] = None


SURVEY_FIELDS = tuple(SurveyRecord.model_fields.keys())


class DistributionEntry(BaseModel):
    name: str
    count: int = Field(ge=0)
    percent: float = Field(ge=0.0, le=100.0)

    def to_chart(self) -> dict:
        """Shape used by donut and bar charts."""
        return {"name": self.name, "value": self.count, "percent": self.percent}


class ComparisonEntry(BaseModel):
    name: str
    percent_a: float = 0.0
    percent_b: float = 0.0
    abs_diff: float = 0.0

    @property
    def combined(self) -> float:
        return self.percent_a + self.percent_b


class ComparisonResult(BaseModel):
    field: str
    group_a: str
    group_b: str
    entries: List[ComparisonEntry] = []
    max_difference: Optional[ComparisonEntry] = None
    leading_group: Optional[str] = None

    @property
    def trailing_group(self) -> Optional[str]:
        if self.leading_group is None:
            return None
        return self.group_b if self.leading_group == self.group_a else self.group_a

    def to_chart(self) -> List[dict]:
        """Grouped-bar rows keyed by the two group labels."""
        return [
            {
                "name": entry.name,
                self.group_a: entry.percent_a,
                self.group_b: entry.percent_b,
                "diff": entry.abs_diff,
            }
            for entry in self.entries
        ]
