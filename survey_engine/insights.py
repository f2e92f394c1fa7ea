"""Narrative insights and recommendations built from aggregated stats"""
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from survey_engine.models import ComparisonResult, DistributionEntry


def _asociacion(item: str, city: str, diff: float) -> str:
    return (f'La brecha en "{item}" indica que {city} ha logrado consolidar mejor la imagen de Fybeca '
            f'como destino dermocosmético. Esto podría deberse a una mayor madurez del mercado local '
            f'o a campañas pasadas que resonaron mejor en esta región.')


def _precios(item: str, city: str, diff: float) -> str:
    lowered = item.lower()
    if "altos" in lowered:
        return (f"Es una alerta que en {city} se perciba precios más altos. Esto puede generar una barrera "
                f"de entrada que podría estar desviando tráfico a competidores con mejor percepción de "
                f'"value-for-money".')
    if "bajos" in lowered:
        return (f"Que {city} destaque en esta percepción es positivo, sugiriendo que la estrategia de precios "
                f"o promociones está siendo interpretada correctamente como competitiva en esta plaza.")
    return (f'La diferencia en la percepción de "{item}" sugiere que el posicionamiento de precio no es '
            f"uniforme y requiere ajustes tácticos en la comunicación de {city}.")


def _confianza(item: str, city: str, diff: float) -> str:
    return (f'El liderazgo de {city} en el nivel "{item}" valida la calidad del servicio en punto de venta. '
            f"La confianza es el driver #1 en dermocosmética, por lo que esta plaza debe ser el modelo a "
            f"seguir para la otra ciudad.")


def _comunicacion(item: str, city: str, diff: float) -> str:
    return (f'La comunicación en {city} está siendo más efectiva para transmitir el mensaje (respuesta "{item}"). '
            f"Es necesario auditar los canales y mensajes utilizados en la ciudad con menor desempeño para "
            f"cerrar esta brecha.")


def _descripcion(item: str, city: str, diff: float) -> str:
    return (f'Que los usuarios de {city} asocien más a la marca con "{item}" revela el posicionamiento real '
            f'en su "Top of Mind". Esta percepción debe ser alineada con los valores corporativos deseados.')


def _problemas_reales(item: str, city: str, diff: float) -> str:
    return (f'La percepción de que Fybeca "{item}" en {city} indica una conexión emocional más fuerte. '
            f'Muestra que la oferta de productos está resolviendo necesidades ("pains") reales del cliente local.')


def _asesoria(item: str, city: str, diff: float) -> str:
    return (f'El diferencial en "{item}" apunta directamente a la capacitación del personal. {city} tiene '
            f"equipos de farmacia que están logrando cerrar mejor la venta consultiva.")


def _generic(item: str, city: str, diff: float) -> str:
    return (f'Esta diferencia significativa en "{item}" resalta un comportamiento de consumo distinto en '
            f"{city}, lo que justifica una segmentación regional en la estrategia de marketing y mix de productos.")


class QuestionKind(Enum):
    ASOCIACION = "asociacion_fybeca"
    PRECIOS = "percepcion_precios"
    CONFIANZA = "confianza_experta"
    COMUNICACION = "comunicacion_calidad"
    DESCRIPCION = "descripcion_fybeca"
    PROBLEMAS_REALES = "aborda_problemas_reales"
    ASESORIA = "asesoria_adecuada"
    GENERIC = "generic"

    @classmethod
    def for_field(cls, field: str) -> "QuestionKind":
        try:
            return cls(field)
        except ValueError:
            return cls.GENERIC

    @property
    def template(self) -> Callable[[str, str, float], str]:
        return _INSIGHT_TEMPLATES[self]


_INSIGHT_TEMPLATES: Dict[QuestionKind, Callable[[str, str, float], str]] = {
    QuestionKind.ASOCIACION: _asociacion,
    QuestionKind.PRECIOS: _precios,
    QuestionKind.CONFIANZA: _confianza,
    QuestionKind.COMUNICACION: _comunicacion,
    QuestionKind.DESCRIPCION: _descripcion,
    QuestionKind.PROBLEMAS_REALES: _problemas_reales,
    QuestionKind.ASESORIA: _asesoria,
    QuestionKind.GENERIC: _generic,
}

# {other} is the city trailing on the max-difference answer
_RECOMMENDATIONS: Dict[QuestionKind, str] = {
    QuestionKind.PRECIOS: ('Implementar una campaña de "Precios Justos" focalizada en {other} para equilibrar la '
                           'percepción de valor y reforzar el mensaje de "Fybeca tiene precios más bajos que la competencia".'),
    QuestionKind.ASOCIACION: ("Reforzar la presencia de marca en {other} mediante activaciones BTL que vinculen "
                              "a Fybeca con experto en piel."),
    QuestionKind.CONFIANZA: ("Capacitar al personal en {other} para mejorar la asesoría y elevar el nivel de "
                             "confianza técnica."),
    QuestionKind.ASESORIA: ("Investigar a profundidad las barreras en {other} y adaptar el mensaje publicitario "
                            "para mejorar la comprensión de las campañas con la cultura local."),
    QuestionKind.DESCRIPCION: "Reforzar en {other} el atributo de confianza con mensajes claros y consistentes.",
    QuestionKind.PROBLEMAS_REALES: ("Reforzar mensajes que conecten con problemas reales de la piel, "
                                    "especialmente en {other}."),
    QuestionKind.COMUNICACION: "Ajustar el tono y la estructura del mensaje para mejorar la comprensión en {other}.",
}


def key_difference(winning_label: str, leading_group: str, diff: float) -> str:
    return (f'En la opción "{winning_label}", {leading_group} supera a la otra ciudad por '
            f"{diff:.1f} puntos porcentuales.")


def comparative_insight(field: str, winning_label: str, leading_group: str, diff: float) -> str:
    return QuestionKind.for_field(field).template(winning_label, leading_group, diff)


def comparative_recommendation(field: str, leading_group: str, other_group: str) -> Optional[str]:
    text = _RECOMMENDATIONS.get(QuestionKind.for_field(field))
    if text is None:
        return None
    return text.format(leader=leading_group, other=other_group)


def comparison_narrative(result: ComparisonResult) -> Optional[Dict[str, Optional[str]]]:
    """Key difference, market analysis and recommendation for one compared question."""
    entry = result.max_difference
    if entry is None:
        return None
    return {
        "key_difference": key_difference(entry.name, result.leading_group, entry.abs_diff),
        "analysis": comparative_insight(result.field, entry.name, result.leading_group, entry.abs_diff),
        "recommendation": comparative_recommendation(result.field, result.leading_group, result.trailing_group),
    }


def _top(stats: Sequence[DistributionEntry]) -> Optional[DistributionEntry]:
    return stats[0] if stats else None


def city_summary(city: str, association: Sequence[DistributionEntry], prices: Sequence[DistributionEntry],
                 trust: Sequence[DistributionEntry]) -> List[str]:
    """Strategic analysis paragraphs for one city's tab."""
    top_assoc, top_price, top_trust = _top(association), _top(prices), _top(trust)

    assoc_pct = f"{top_assoc.percent:.1f}" if top_assoc else "0"
    assoc_name = top_assoc.name.lower() if top_assoc else "tienen esta percepción"
    strength = top_assoc is not None and ("Muy" in top_assoc.name or "Alguna" in top_assoc.name)
    price_pct = f"{top_price.percent:.1f}" if top_price else "0"
    price_name = top_price.name if top_price else ""
    trust_name = top_trust.name if top_trust else ""

    return [
        (f"La asociación de marca en {city} muestra que un {assoc_pct}% de los encuestados {assoc_name}. "
         f"Esto sugiere una {'fortaleza' if strength else 'área de oportunidad'} en la mente del consumidor local."),
        (f'En cuanto a precios, la percepción dominante ({price_pct}%) es que son "{price_name}". '
         f"Es crucial ajustar la comunicación promocional en esta plaza para alinear la percepción de valor "
         f"con la realidad comercial."),
        (f'La confianza como experta alcanza un nivel destacado en el segmento "{trust_name}", lo que valida '
         f"la estrategia de posicionamiento técnico en dermocosmética para el mercado de {city}."),
    ]


def city_recommendations(city: str, prices: Sequence[DistributionEntry],
                         trust: Sequence[DistributionEntry]) -> List[Dict[str, str]]:
    top_price, top_trust = _top(prices), _top(trust)

    recs = [
        {
            "title": "Fortalecer Asociación",
            "text": ("Capitalizar la alta asociación reforzando el mensaje de variedad." if city == "Quito"
                     else "Incrementar visibilidad de marca con campañas de alcance masivo."),
        },
        {
            "title": "Estrategia de Precios",
            "text": ("Mantener la percepción de precios competitivos."
                     if top_price is not None and "Más bajos" in top_price.name
                     else "Comunicar ofertas de valor y packs de ahorro para mejorar percepción."),
        },
        {
            "title": "Confianza Técnica",
            "text": (f"Aprovechar el {top_trust.percent if top_trust else 0:.2f}% de confianza en "
                     f'"{top_trust.name if top_trust else ""}" para posicionar servicios de dermo-análisis '
                     f"gratuitos en punto de venta."),
        },
        {
            "title": "Estrategia de Comunicación",
            "text": ('Activar una pieza aon en la campaña de Pricing Dermo para reforzar el mensaje de '
                     '"precios más bajos" y posicionar en el TOM de los clientes el mensaje de '
                     '"Fybeca tiene precios más bajos que la competencia"'),
        },
    ]
    if city == "Guayaquil":
        recs.append({
            "title": "Adaptación Cultural",
            "text": ("Generar en las campañas de Beauty y Dermo una pieza específica adaptada al tono y "
                     "códigos culturales de la región Costa."),
        })
    return recs
