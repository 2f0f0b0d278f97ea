"""Tests for the end-to-end diagnosis flow."""

import asyncio

import pytest

from mesmtf.config import SESSIONS_TABLE
from mesmtf.errors import ValidationError
from mesmtf.models.diagnosis import DiagnosisRequest, SymptomObservation
from mesmtf.services.diagnosis_service import build_response, diagnose, run_diagnosis
from mesmtf.services.session_store import SessionStore


class TestDiagnose:
    def test_new_session_per_call(self, malaria_request):
        first = diagnose(malaria_request)
        second = diagnose(malaria_request)
        assert first.session_id != second.session_id
        assert first.results == second.results

    def test_session_holds_inputs(self, malaria_request):
        session = diagnose(malaria_request)
        assert session.request == malaria_request
        assert session.top_diagnosis == "Malaria"
        assert session.any_requires_lab_tests is True
        assert session.created_at.tzinfo is not None

    def test_unknown_symptom_rejected(self):
        with pytest.raises(ValidationError) as exc:
            diagnose(DiagnosisRequest(selected_symptoms=["Fever", "Toothache"]))
        assert exc.value.field == "selectedSymptoms.Toothache"

    def test_engine_validation_propagates(self):
        request = DiagnosisRequest(
            selected_symptoms=["Fever"],
            observations={"Cough": SymptomObservation(severity="mild")},
        )
        with pytest.raises(ValidationError):
            diagnose(request)


class TestResponse:
    def test_urgent_when_top_confidence_high(self, malaria_request):
        response = build_response(diagnose(malaria_request), recorded=True)
        assert response.urgency == "urgent"
        assert response.top_diagnosis == "Malaria"
        assert response.appointment_reason == "Preliminary diagnosis: possible Malaria"
        assert response.any_requires_lab_tests is True

    def test_standard_urgency(self):
        # Fever alone: malaria low band at 30%
        response = build_response(diagnose(DiagnosisRequest(selected_symptoms=["Fever"])), recorded=False)
        assert response.urgency == "standard"
        assert response.recorded is False

    def test_fallback_response(self):
        response = build_response(diagnose(DiagnosisRequest()), recorded=False)
        assert response.top_diagnosis == "Medical Evaluation Needed"
        assert response.any_requires_lab_tests is True
        assert response.appointment_reason == "Preliminary assessment: medical evaluation needed"


class TestRunDiagnosis:
    def test_recorded(self, malaria_request, record_store):
        response = asyncio.run(run_diagnosis(malaria_request, SessionStore(client=record_store)))
        assert response.recorded is True
        [row] = record_store.tables[SESSIONS_TABLE]
        assert row["id"] == response.session_id

    def test_store_failure_still_returns_results(self, malaria_request, failing_record_store):
        response = asyncio.run(run_diagnosis(malaria_request, SessionStore(client=failing_record_store)))
        assert response.recorded is False
        assert response.results
        assert response.results[0].disease == "Malaria"
        assert response.results[0].confidence_percentage == 79
