"""
Diagnosis Service

Ties the pure scoring path to the one side-effecting step:

    validate -> evaluate -> assemble -> DiagnosisSession -> record (best effort)

Results are built before persistence is attempted and are returned whether
or not the record store accepted the session.
"""

import uuid
from datetime import datetime, timezone

from mesmtf.errors import ValidationError
from mesmtf.models.diagnosis import DiagnosisRequest, DiagnosisResponse, DiagnosisSession
from mesmtf.models.profile import DiseaseProfile
from mesmtf.rules.catalog import SymptomCatalog, catalog
from mesmtf.rules.profiles import DISEASE_PROFILES
from mesmtf.scoring.engine import evaluate
from mesmtf.scoring.ranker import assemble
from mesmtf.services.session_store import SessionStore, session_store

# Top result at or above this percentage is booked as urgent
URGENT_CONFIDENCE = 70


def validate_request(request: DiagnosisRequest, symptom_catalog: SymptomCatalog = catalog) -> None:
    for symptom in request.selected_symptoms:
        if symptom not in symptom_catalog:
            raise ValidationError(f"selectedSymptoms.{symptom}", "unknown symptom")


def diagnose(
    request: DiagnosisRequest,
    profiles: tuple[DiseaseProfile, ...] = DISEASE_PROFILES,
    symptom_catalog: SymptomCatalog = catalog,
) -> DiagnosisSession:
    """Run the pure scoring path and wrap the outcome in a new session."""
    validate_request(request, symptom_catalog)
    scored = evaluate(
        request.selected_symptoms,
        request.observations,
        request.risk_factors,
        request.patient_age,
        profiles,
    )
    return DiagnosisSession(
        session_id=str(uuid.uuid4()),
        created_at=datetime.now(timezone.utc),
        request=request,
        results=tuple(assemble(scored)),
    )


def build_response(session: DiagnosisSession, recorded: bool) -> DiagnosisResponse:
    top = session.results[0]
    if top.is_fallback:
        reason = "Preliminary assessment: medical evaluation needed"
    else:
        reason = f"Preliminary diagnosis: possible {top.disease}"
    return DiagnosisResponse(
        session_id=session.session_id,
        created_at=session.created_at,
        results=list(session.results),
        any_requires_lab_tests=session.any_requires_lab_tests,
        top_diagnosis=session.top_diagnosis,
        urgency="urgent" if top.confidence_percentage >= URGENT_CONFIDENCE else "standard",
        appointment_reason=reason,
        recorded=recorded,
    )


async def run_diagnosis(request: DiagnosisRequest, store: SessionStore = session_store) -> DiagnosisResponse:
    session = diagnose(request)
    recorded = await store.record(session)
    return build_response(session, recorded)
