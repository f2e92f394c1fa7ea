import pytest

from survey_engine.aggregator import Aggregator, filter_by_city, group_by_city
from survey_engine.models import SurveyRecord
from survey_engine.record_parser import parse_survey_text


@pytest.fixture
def aggregator():
    return Aggregator()


def _records(field, values, city="Quito"):
    return [SurveyRecord(**{field: v, "ciudad": city}) for v in values]


def test_distribution_counts_and_percents(aggregator):
    subset = _records("confianza_experta", ["Mucho", "Algo", "Mucho", "Poco"])
    dist = aggregator.compute_distribution(subset, "confianza_experta")
    assert [(e.name, e.count) for e in dist] == [("Mucho", 2), ("Algo", 1), ("Poco", 1)]
    assert dist[0].percent == pytest.approx(50.0)
    assert sum(e.percent for e in dist) == pytest.approx(100.0, abs=1e-6)


def test_distribution_excludes_missing_and_sentinels(aggregator):
    subset = _records("confianza_experta", ["Mucho", None, "", "  ", "nan", "NULL", "Null", "Algo"])
    dist = aggregator.compute_distribution(subset, "confianza_experta")
    assert sum(e.count for e in dist) == 2
    assert {e.name for e in dist} == {"Mucho", "Algo"}
    assert sum(e.percent for e in dist) == pytest.approx(100.0)


def test_distribution_strips_quote_artifacts(aggregator):
    subset = _records("asociacion_fybeca", ['"Muy asociada"', "Muy asociada", ' "Muy asociada'])
    dist = aggregator.compute_distribution(subset, "asociacion_fybeca")
    assert len(dist) == 1
    assert dist[0].name == "Muy asociada"
    assert dist[0].count == 3


def test_distribution_is_case_sensitive(aggregator):
    dist = aggregator.compute_distribution(_records("descripcion_fybeca", ["Confiable", "confiable"]),
                                           "descripcion_fybeca")
    assert len(dist) == 2


def test_distribution_ties_keep_first_encountered_order(aggregator):
    subset = _records("descripcion_fybeca", ["Cara", "Experta", "Cercana", "Experta", "Cara"])
    dist = aggregator.compute_distribution(subset, "descripcion_fybeca")
    assert [e.name for e in dist] == ["Cara", "Experta", "Cercana"]


def test_distribution_empty_subset(aggregator):
    assert aggregator.compute_distribution([], "percepcion_precios") == []


def test_distribution_only_sentinels_is_empty(aggregator):
    subset = _records("percepcion_precios", ["nan", None, "null"])
    assert aggregator.compute_distribution(subset, "percepcion_precios") == []


def test_round_trip_field_with_no_valid_answers(aggregator):
    records = parse_survey_text('h1,h2,h3,h4,h5\n"Sí","Alta",,"Neutro","Quito"')
    assert aggregator.compute_distribution(records, "asociacion_fybeca") == []


def test_unknown_field(aggregator):
    with pytest.raises(ValueError):
        aggregator.compute_distribution([], "edad")


def test_custom_sentinels():
    aggregator = Aggregator(missing_sentinels=["N/A"])
    dist = aggregator.compute_distribution(_records("asesoria_adecuada", ["n/a", "Sí", "nan"]), "asesoria_adecuada")
    assert {e.name for e in dist} == {"Sí", "nan"}


def test_comparison_entries_and_max_difference(aggregator):
    quito = _records("percepcion_precios", ["Altos", "Altos", "Iguales"], city="Quito")
    gye = _records("percepcion_precios", ["Iguales", "Bajos"], city="Guayaquil")
    result = aggregator.compute_comparison(quito, gye, "percepcion_precios", group_a="Quito", group_b="Guayaquil")

    assert [e.name for e in result.entries] == ["Iguales", "Altos", "Bajos"]
    by_name = {e.name: e for e in result.entries}
    assert by_name["Bajos"].percent_a == 0.0
    assert by_name["Bajos"].percent_b == pytest.approx(50.0)
    for entry in result.entries:
        assert entry.abs_diff == pytest.approx(abs(entry.percent_a - entry.percent_b))

    assert result.max_difference.name == "Altos"
    assert result.leading_group == "Quito"
    assert result.trailing_group == "Guayaquil"


def test_comparison_is_symmetric(aggregator):
    a = _records("confianza_experta", ["Mucho", "Mucho", "Algo", "Poco"])
    b = _records("confianza_experta", ["Algo", "Nada", "Mucho"])
    forward = {e.name: e for e in aggregator.compute_comparison(a, b, "confianza_experta").entries}
    backward = {e.name: e for e in aggregator.compute_comparison(b, a, "confianza_experta").entries}

    assert forward.keys() == backward.keys()
    for name, entry in forward.items():
        assert entry.percent_a == backward[name].percent_b
        assert entry.percent_b == backward[name].percent_a
        assert entry.abs_diff == pytest.approx(backward[name].abs_diff)


def test_max_difference_tie_picks_first_in_sort_order(aggregator):
    a = _records("descripcion_fybeca", ["Experta"])
    b = _records("descripcion_fybeca", ["Cara"])
    result = aggregator.compute_comparison(a, b, "descripcion_fybeca", group_a="Quito", group_b="Guayaquil")
    assert [e.abs_diff for e in result.entries] == [100.0, 100.0]
    assert result.max_difference.name == result.entries[0].name == "Experta"
    assert result.leading_group == "Quito"


def test_comparison_ties_keep_first_encountered_order(aggregator):
    # A's count order is Sí, No but "No" was answered first
    a = _records("asesoria_adecuada", ["No", "Sí", "Sí"])
    b = _records("asesoria_adecuada", ["No", "No", "Sí"])
    result = aggregator.compute_comparison(a, b, "asesoria_adecuada")
    assert [e.combined for e in result.entries] == pytest.approx([100.0, 100.0])
    assert [e.name for e in result.entries] == ["No", "Sí"]


def test_comparison_labels_only_in_b_follow_a_labels(aggregator):
    a = _records("descripcion_fybeca", ["Cara"])
    b = _records("descripcion_fybeca", ["Experta", "Cercana"])
    result = aggregator.compute_comparison(a, b, "descripcion_fybeca")
    assert [e.name for e in result.entries] == ["Cara", "Experta", "Cercana"]


def test_comparison_of_empty_subsets(aggregator):
    result = aggregator.compute_comparison([], [], "asesoria_adecuada")
    assert result.entries == []
    assert result.max_difference is None
    assert result.leading_group is None
    assert result.to_chart() == []


def test_comparison_chart_shape(aggregator):
    a = _records("asesoria_adecuada", ["Sí"])
    b = _records("asesoria_adecuada", ["No"])
    rows = aggregator.compute_comparison(a, b, "asesoria_adecuada", group_a="Quito", group_b="Guayaquil").to_chart()
    assert rows[0] == {"name": "Sí", "Quito": 100.0, "Guayaquil": 0.0, "diff": 100.0}


def test_filter_and_group_by_city(survey_text):
    records = parse_survey_text(survey_text)
    groups = group_by_city(records)
    assert len(groups["Quito"]) == 3
    assert len(groups["Guayaquil"]) == 2
    assert filter_by_city(records, "Quito") == groups["Quito"]
    assert filter_by_city(records, "Cuenca")[0].ciudad == "Cuenca"


def test_compare_cities_excludes_unrecognised_city(aggregator, survey_text):
    records = parse_survey_text(survey_text)
    result = aggregator.compare_cities(records, "asociacion_fybeca")
    by_name = {e.name: e for e in result.entries}
    # the Cuenca respondent answered "Muy asociada" but belongs to neither city
    assert by_name["Muy asociada"].percent_a == pytest.approx(200 / 3)
    assert by_name["Muy asociada"].percent_b == 0.0


def test_distribution_to_chart(aggregator):
    dist = aggregator.compute_distribution(_records("compra_en_fybeca", ["Sí"]), "compra_en_fybeca")
    assert dist[0].to_chart() == {"name": "Sí", "value": 1, "percent": 100.0}
