from typing import Literal

from fastapi import APIRouter, Query
from fastapi.responses import Response

from mesmtf.models.diagnosis import DiagnosisRequest, DiagnosisResponse, DiagnosisSession
from mesmtf.services.diagnosis_service import run_diagnosis
from mesmtf.services.report import export_report, report_filename

router = APIRouter()


@router.post("/evaluate", response_model=DiagnosisResponse)
async def evaluate_symptoms(request: DiagnosisRequest):
    """Score the selected symptoms against every disease profile and record the session."""
    return await run_diagnosis(request)


@router.post("/report")
async def download_report(
    session: DiagnosisSession,
    format: Literal["text", "json", "csv"] = Query("text", description="Report format"),
):
    """Export a finished session as a downloadable document."""
    document, media_type = export_report(session, format)
    filename = report_filename(session, format)
    return Response(
        content=document,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
