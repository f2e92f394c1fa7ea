"""Question catalog shared by the city and comparative views"""
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict

from survey_engine.models import SURVEY_FIELDS


class QuestionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    display_label: str
    question_text: str


# Per-city breakdown, in the order the city tab lists the questions
CITY_QUESTIONS: Tuple[QuestionSpec, ...] = (
    QuestionSpec(
        field="compras_dermocosmetica",
        display_label="Compras de dermocosmética",
        question_text="¿Realiza compras de dermocosmética?",
    ),
    QuestionSpec(
        field="compra_en_fybeca",
        display_label="Compra en Fybeca",
        question_text="¿Has comprado productos de dermocosmética en Fybeca alguna vez?",
    ),
    QuestionSpec(
        field="asociacion_fybeca",
        display_label="Asociación con la marca",
        question_text="Cuando piensas en Fybeca, ¿qué tan asociada la percibes con productos de dermocosmética?",
    ),
    QuestionSpec(
        field="descripcion_fybeca",
        display_label="Descripción de la Marca",
        question_text="¿Cuál de las siguientes palabras describe mejor a Fybeca en dermocosmética?",
    ),
    QuestionSpec(
        field="comunicacion_calidad",
        display_label="Calidad de Comunicación",
        question_text="La comunicación de Fybeca sobre dermocosmética es:",
    ),
    QuestionSpec(
        field="aborda_problemas_reales",
        display_label="¿Aborda problemas reales?",
        question_text="¿Sientes que la comunicación de Fybeca aborda problemas reales de la piel?",
    ),
    QuestionSpec(
        field="percepcion_precios",
        display_label="Percepción de Precios",
        question_text="¿Cómo percibes los precios de Fybeca en dermocosmética?",
    ),
    QuestionSpec(
        field="confianza_experta",
        display_label="Confianza como Experta",
        question_text="¿Qué tanto confías en Fybeca como experta en el cuidado de la piel?",
    ),
    QuestionSpec(
        field="asesoria_adecuada",
        display_label="¿Asesoría Adecuada?",
        question_text="¿Crees que en Fybeca puedes recibir asesoría adecuada?",
    ),
)

_COMPARATIVE_FIELDS = (
    "asociacion_fybeca",
    "percepcion_precios",
    "confianza_experta",
    "comunicacion_calidad",
    "descripcion_fybeca",
    "aborda_problemas_reales",
    "asesoria_adecuada",
)


def get_question(field: str, catalog=CITY_QUESTIONS) -> QuestionSpec:
    for question in catalog:
        if question.field == field:
            return question
    raise ValueError(f"Unknown question field: {field}")


COMPARATIVE_QUESTIONS: Tuple[QuestionSpec, ...] = tuple(
    get_question(field) for field in _COMPARATIVE_FIELDS
)


def validate_catalog(catalog) -> List[QuestionSpec]:
    """Reject catalogs that name fields the record schema does not have."""
    catalog = list(catalog)
    unknown = [q.field for q in catalog if q.field not in SURVEY_FIELDS]
    if unknown:
        raise ValueError(f"Catalog references unknown fields: {unknown}")
    return catalog
