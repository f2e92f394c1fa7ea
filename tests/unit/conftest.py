import pytest

from survey_engine.record_parser import POSITIONAL_COLUMNS

HEADER = ",".join(f"col{i}" for i in range(27)) + ",ciudad"


def _make_row(city="Quito", **answers):
    tokens = [""] * 27
    for field, value in answers.items():
        tokens[POSITIONAL_COLUMNS[field]] = f'"{value}"'
    tokens.append(f'"{city}"')
    return ",".join(tokens)


@pytest.fixture
def make_row():
    return _make_row


@pytest.fixture
def survey_text():
    rows = [
        _make_row("Quito", asociacion_fybeca="Muy asociada", percepcion_precios="Más altos",
                  confianza_experta="Mucho", comunicacion_calidad="Clara"),
        _make_row("UIO norte", asociacion_fybeca="Muy asociada", percepcion_precios="Iguales",
                  confianza_experta="Mucho", comunicacion_calidad="Clara"),
        _make_row("Quito", asociacion_fybeca="Poco asociada", percepcion_precios="Más altos",
                  confianza_experta="nan", comunicacion_calidad="Confusa"),
        _make_row("Guayaquil", asociacion_fybeca="Poco asociada", percepcion_precios="Más bajos",
                  confianza_experta="Algo", comunicacion_calidad="Clara"),
        _make_row("GYE", asociacion_fybeca="Nada asociada", percepcion_precios="Más bajos",
                  confianza_experta="Mucho", comunicacion_calidad="Confusa"),
        _make_row("Cuenca", asociacion_fybeca="Muy asociada", percepcion_precios="Iguales"),
    ]
    return "\n".join([HEADER] + rows + ["", "short,row"]) + "\n"
