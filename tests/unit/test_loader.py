import pytest
import requests

from config.settings import Settings
from survey_engine import loader
from survey_engine.loader import DataRetrievalError, load_survey_text


class _FakeResponse:
    def __init__(self, text, status=200, encoding="utf-8"):
        self.text = text
        self.status_code = status
        self.encoding = encoding
        self.apparent_encoding = "utf-8"

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_reads_utf8_with_bom(tmp_path):
    path = tmp_path / "encuesta.csv"
    path.write_bytes("\ufeffh1,h2\nSí,Quito\n".encode("utf-8"))
    assert load_survey_text(str(path)).startswith("h1,h2")


def test_falls_back_to_latin1(tmp_path):
    path = tmp_path / "encuesta.csv"
    path.write_bytes("h1\nAsesoría,Quito\n".encode("latin-1"))
    assert "Asesoría" in load_survey_text(str(path))


def test_missing_file_raises(tmp_path):
    with pytest.raises(DataRetrievalError):
        load_survey_text(str(tmp_path / "nope.csv"))


def test_default_source_comes_from_settings(tmp_path):
    path = tmp_path / "default.csv"
    path.write_text("h\n1,2,3,4,Quito", encoding="utf-8")
    assert load_survey_text(settings=Settings(DATA_SOURCE=str(path))).endswith("Quito")


def test_fetches_url(monkeypatch):
    calls = {}

    def fake_get(url, timeout):
        calls["url"], calls["timeout"] = url, timeout
        return _FakeResponse("h\n1,2,3,4,GYE")

    monkeypatch.setattr(loader.requests, "get", fake_get)
    text = load_survey_text("https://example.org/encuesta.csv", settings=Settings(REQUEST_TIMEOUT=3.0))
    assert text.endswith("GYE")
    assert calls == {"url": "https://example.org/encuesta.csv", "timeout": 3.0}


def test_http_error_raises(monkeypatch):
    monkeypatch.setattr(loader.requests, "get", lambda url, timeout: _FakeResponse("", status=404))
    with pytest.raises(DataRetrievalError):
        load_survey_text("http://example.org/missing.csv")


def test_connection_error_raises(monkeypatch):
    def fake_get(url, timeout):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(loader.requests, "get", fake_get)
    with pytest.raises(DataRetrievalError):
        load_survey_text("http://example.org/encuesta.csv")
