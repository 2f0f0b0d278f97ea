"""Tests for free-text symptom intake."""

import asyncio
from types import SimpleNamespace

import pytest

from mesmtf.models.diagnosis import Duration, Severity
from mesmtf.services import symptom_intake
from mesmtf.services.symptom_intake import (
    detect_age,
    detect_risk_factors,
    detect_symptoms,
    parse_symptom_text,
    parse_text,
)


class _FakeCompletions:
    def __init__(self, content=None, error=None):
        self._content = content
        self._error = error

    async def create(self, **kwargs):
        if self._error:
            raise self._error
        message = SimpleNamespace(content=self._content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_groq(content=None, error=None):
    return SimpleNamespace(chat=SimpleNamespace(completions=_FakeCompletions(content, error)))


@pytest.fixture(autouse=True)
def no_llm(monkeypatch):
    monkeypatch.setattr(symptom_intake, "client", None)


class TestKeywordDetection:
    def test_synonyms(self):
        assert detect_symptoms("i keep throwing up") == ["Vomiting"]
        assert detect_symptoms("shortness of breath") == ["Difficulty breathing"]

    def test_verbatim_catalog_name(self):
        assert detect_symptoms("loss of appetite") == ["Loss of appetite"]

    def test_high_fever_is_more_specific(self):
        assert detect_symptoms("high fever that won't go away") == ["Persistent high fever"]

    def test_age(self):
        assert detect_age("my son is 4 years old") == 4
        assert detect_age("no age given") is None

    def test_risk_factors(self):
        flags = detect_risk_factors("We drink river water and I travelled to Kano last week")
        assert flags == {"untreatedWater": True, "recentTravel": True}


class TestParseText:
    def test_severity_and_duration_per_clause(self):
        request, unmatched = parse_text(
            "I have a severe headache for two weeks and chills since yesterday. I'm 70 years old"
        )
        assert request.selected_symptoms == ["Headache", "Chills"]
        assert request.observations["Headache"].severity == Severity.SEVERE
        assert request.observations["Headache"].duration == Duration.PROLONGED
        assert request.observations["Chills"].severity == Severity.UNSET
        assert request.observations["Chills"].duration == Duration.RECENT
        assert request.patient_age == 70
        assert unmatched == ["i'm 70 years old"]

    def test_no_observation_without_modifiers(self):
        request, _ = parse_text("cough")
        assert request.selected_symptoms == ["Cough"]
        assert request.observations == {}

    def test_symptoms_not_repeated(self):
        request, _ = parse_text("fever, fever again")
        assert request.selected_symptoms == ["Fever"]


class TestLlmFallback:
    def test_without_client_uses_keywords_only(self):
        result = asyncio.run(parse_symptom_text("fever and my pee looks like coca cola"))
        assert result.request.selected_symptoms == ["Fever"]
        assert result.llm_used is False
        assert result.unmatched == ["my pee looks like coca cola"]

    def test_llm_names_filtered_to_catalog(self, monkeypatch):
        monkeypatch.setattr(
            symptom_intake, "client",
            _fake_groq('{"symptoms": ["Dark urine", "Jaundice", "Fever"]}'),
        )
        result = asyncio.run(parse_symptom_text("fever and my pee looks like coca cola"))
        assert result.request.selected_symptoms == ["Fever", "Dark urine"]
        assert result.llm_used is True

    def test_llm_failure_degrades(self, monkeypatch, caplog):
        monkeypatch.setattr(symptom_intake, "client", _fake_groq(error=RuntimeError("rate limited")))
        result = asyncio.run(parse_symptom_text("fever and my pee looks like coca cola"))
        assert result.request.selected_symptoms == ["Fever"]
        assert result.llm_used is False
        assert "LLM symptom mapping failed" in caplog.text
