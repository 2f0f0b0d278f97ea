"""Tests for report export."""

import io
import json

import pandas as pd
import pytest

from mesmtf.errors import ValidationError
from mesmtf.models.diagnosis import DiagnosisRequest, SymptomObservation
from mesmtf.services.diagnosis_service import diagnose
from mesmtf.services.report import DISCLAIMER, NOT_SPECIFIED, export_report, report_filename


@pytest.fixture
def session():
    return diagnose(DiagnosisRequest(
        selected_symptoms=["Fever", "Chills", "Headache"],
        observations={"Fever": SymptomObservation(severity="severe", duration="days")},
        risk_factors={"endemicArea": True},
        patient_age=4,
    ))


class TestTextReport:
    def test_contains_inputs(self, session):
        text, media_type = export_report(session, "text")
        assert media_type == "text/plain"
        assert "Fever (severity: severe, duration: days)" in text
        assert f"Chills (severity: {NOT_SPECIFIED}, duration: {NOT_SPECIFIED})" in text
        assert "[endemicArea]: yes" in text
        assert "[recentTravel]: no" in text
        assert "Patient age:    4" in text
        assert session.session_id in text

    def test_contains_every_result(self, session):
        text, _ = export_report(session, "text")
        for r in session.results:
            assert f"{r.disease} - {r.confidence_percentage}% ({r.confidence_level.value})" in text
            assert r.advisory_message in text
        assert f"Top diagnosis: {session.top_diagnosis}" in text
        assert text.rstrip().endswith(DISCLAIMER)

    def test_fallback_session(self):
        text, _ = export_report(diagnose(DiagnosisRequest()), "text")
        assert "- None selected" in text
        assert "Medical Evaluation Needed" in text
        assert f"Patient age:    {NOT_SPECIFIED}" in text


class TestJsonReport:
    def test_structure(self, session):
        document, media_type = export_report(session, "json")
        assert media_type == "application/json"
        report = json.loads(document)
        assert report["sessionId"] == session.session_id
        assert report["patientAge"] == 4
        assert [s["symptom"] for s in report["symptoms"]] == ["Fever", "Chills", "Headache"]
        assert len(report["riskFactors"]) == 6
        assert len(report["diagnosisResults"]) == len(session.results)
        assert report["anyRequiresLabTests"] == session.any_requires_lab_tests
        result_keys = set(report["diagnosisResults"][0])
        assert {
            "disease", "confidencePercentage", "confidenceLevel", "totalScore",
            "matchingSymptoms", "criticalSymptomCount", "requiresLabTests",
            "recommendedDrugs", "advisoryMessage",
        } <= result_keys


class TestCsvReport:
    def test_one_row_per_result(self, session):
        document, media_type = export_report(session, "csv")
        assert media_type == "text/csv"
        df = pd.read_csv(io.StringIO(document))
        assert len(df) == len(session.results)
        assert list(df["disease"]) == [r.disease for r in session.results]
        assert set(df["riskFactors"]) == {"endemicArea"}
        assert "Fever (severe, days)" in df["symptoms"][0]


class TestExport:
    def test_unknown_format(self, session):
        with pytest.raises(ValidationError) as exc:
            export_report(session, "pdf")
        assert exc.value.field == "format"

    def test_filename(self, session):
        day = session.created_at.date().isoformat()
        assert report_filename(session, "text") == f"mesmtf-diagnosis-{day}.txt"
        assert report_filename(session, "csv") == f"mesmtf-diagnosis-{day}.csv"
