"""
Report Export

Formats an already computed diagnosis session as a downloadable document.
Every input field and every result field appears in each format.
"""

import io
import json
from datetime import datetime, timezone

import pandas as pd

from mesmtf.errors import ValidationError
from mesmtf.models.diagnosis import Duration, DiagnosisSession, Severity
from mesmtf.rules.risk_factors import RISK_FACTOR_COEFFICIENTS, RISK_FACTOR_LABELS

SYSTEM_TITLE = "MESMTF - Medical Expert System for Malaria and Typhoid Fever"
REPORT_VERSION = "1.0"
DISCLAIMER = (
    "This report is generated by an expert system for preliminary assessment only. "
    "Always consult a healthcare professional for accurate diagnosis and treatment."
)
NOT_SPECIFIED = "Not specified"

REPORT_FORMATS = ("text", "json", "csv")

_MEDIA_TYPES = {
    "text": "text/plain",
    "json": "application/json",
    "csv": "text/csv",
}


def _symptom_rows(session: DiagnosisSession) -> list[dict]:
    rows = []
    for symptom in dict.fromkeys(session.request.selected_symptoms):
        obs = session.request.observations.get(symptom)
        severity = obs.severity if obs else Severity.UNSET
        duration = obs.duration if obs else Duration.UNSET
        rows.append({
            "symptom": symptom,
            "severity": NOT_SPECIFIED if severity == Severity.UNSET else severity.value,
            "duration": NOT_SPECIFIED if duration == Duration.UNSET else duration.value,
        })
    return rows


def _risk_rows(session: DiagnosisSession) -> list[dict]:
    return [
        {
            "flag": name,
            "label": RISK_FACTOR_LABELS[name],
            "active": bool(session.request.risk_factors.get(name, False)),
        }
        for name in RISK_FACTOR_COEFFICIENTS
    ]


def build_report(session: DiagnosisSession, generated_at: datetime | None = None) -> dict:
    generated_at = generated_at or datetime.now(timezone.utc)
    age = session.request.patient_age
    return {
        "system": SYSTEM_TITLE,
        "version": REPORT_VERSION,
        "generatedAt": generated_at.isoformat(),
        "sessionId": session.session_id,
        "createdAt": session.created_at.isoformat(),
        "patientAge": age if age is not None else NOT_SPECIFIED,
        "symptoms": _symptom_rows(session),
        "riskFactors": _risk_rows(session),
        "diagnosisResults": [r.model_dump(mode="json", by_alias=True) for r in session.results],
        "topDiagnosis": session.top_diagnosis,
        "anyRequiresLabTests": session.any_requires_lab_tests,
        "disclaimer": DISCLAIMER,
    }


def render_json(report: dict) -> str:
    return json.dumps(report, indent=2)


def render_text(report: dict) -> str:
    lines = [
        report["system"],
        "=" * len(report["system"]),
        f"Report version: {report['version']}",
        f"Generated:      {report['generatedAt']}",
        f"Session:        {report['sessionId']}",
        f"Session date:   {report['createdAt']}",
        f"Patient age:    {report['patientAge']}",
        "",
        "SYMPTOMS",
    ]
    if report["symptoms"]:
        for row in report["symptoms"]:
            lines.append(f"- {row['symptom']} (severity: {row['severity']}, duration: {row['duration']})")
    else:
        lines.append("- None selected")

    lines += ["", "RISK FACTORS"]
    for row in report["riskFactors"]:
        lines.append(f"- {row['label']} [{row['flag']}]: {'yes' if row['active'] else 'no'}")

    lines += ["", "RESULTS"]
    for i, r in enumerate(report["diagnosisResults"], start=1):
        lines += [
            f"{i}. {r['disease']} - {r['confidencePercentage']}% ({r['confidenceLevel']})",
            f"   Total score:        {r['totalScore']}",
            f"   Matching symptoms:  {', '.join(r['matchingSymptoms']) or 'None'}",
            f"   Critical symptoms:  {r['criticalSymptomCount']}",
            f"   Lab tests required: {'yes' if r['requiresLabTests'] else 'no'}",
            f"   Recommended drugs:  {', '.join(r['recommendedDrugs']) or 'None'}",
            f"   Action:             {r['recommendedAction']}",
            f"   Advice:             {r['advisoryMessage']}",
            f"   Fallback result:    {'yes' if r['isFallback'] else 'no'}",
        ]

    lines += [
        "",
        f"Top diagnosis: {report['topDiagnosis']}",
        f"Any result requires lab tests: {'yes' if report['anyRequiresLabTests'] else 'no'}",
        "",
        report["disclaimer"],
    ]
    return "\n".join(lines) + "\n"


def render_csv(report: dict) -> str:
    """One row per result, with the session inputs repeated on every row."""
    symptoms = "; ".join(
        f"{row['symptom']} ({row['severity']}, {row['duration']})" for row in report["symptoms"]
    )
    active_flags = "; ".join(row["flag"] for row in report["riskFactors"] if row["active"])

    df = pd.DataFrame(report["diagnosisResults"])
    for column in ("matchingSymptoms", "recommendedDrugs"):
        df[column] = df[column].apply("; ".join)
    df.insert(0, "sessionId", report["sessionId"])
    df.insert(1, "createdAt", report["createdAt"])
    df.insert(2, "patientAge", report["patientAge"])
    df.insert(3, "symptoms", symptoms)
    df.insert(4, "riskFactors", active_flags)
    df["anyRequiresLabTests"] = report["anyRequiresLabTests"]

    buf = io.StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue()


_RENDERERS = {
    "text": render_text,
    "json": render_json,
    "csv": render_csv,
}


def export_report(session: DiagnosisSession, fmt: str = "text") -> tuple[str, str]:
    """Return (document, media type) for the requested format."""
    if fmt not in _RENDERERS:
        raise ValidationError("format", f"unknown report format {fmt!r}")
    return _RENDERERS[fmt](build_report(session)), _MEDIA_TYPES[fmt]


def report_filename(session: DiagnosisSession, fmt: str) -> str:
    ext = "txt" if fmt == "text" else fmt
    return f"mesmtf-diagnosis-{session.created_at.date().isoformat()}.{ext}"
