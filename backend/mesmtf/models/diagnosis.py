from datetime import datetime
from enum import Enum

from pydantic import Field, computed_field

from mesmtf.models.profile import CamelModel, ConfidenceBand, DiseaseProfile


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    UNSET = "unset"


class Duration(str, Enum):
    RECENT = "recent"
    DAYS = "days"
    PROLONGED = "prolonged"
    UNSET = "unset"


class SymptomObservation(CamelModel):
    severity: Severity = Severity.UNSET
    duration: Duration = Duration.UNSET


class DiagnosisRequest(CamelModel):
    selected_symptoms: list[str] = Field(default_factory=list)
    observations: dict[str, SymptomObservation] = Field(default_factory=dict)
    risk_factors: dict[str, bool] = Field(default_factory=dict)
    patient_age: int | None = None


class ScoredDisease(CamelModel):
    """A disease that cleared the reporting floor, before assembly."""
    profile: DiseaseProfile
    total_score: float
    critical_count: int
    confidence_level: ConfidenceBand
    confidence_percentage: int
    matching_symptoms: tuple[str, ...]


class DiagnosisResult(CamelModel):
    disease: str
    confidence_percentage: int  # 0-100
    confidence_level: ConfidenceBand
    total_score: float
    matching_symptoms: tuple[str, ...] = ()
    critical_symptom_count: int = 0
    requires_lab_tests: bool = False
    recommended_drugs: tuple[str, ...] = ()
    advisory_message: str = ""
    recommended_action: str = ""
    is_fallback: bool = False


class DiagnosisSession(CamelModel):
    session_id: str
    created_at: datetime
    request: DiagnosisRequest
    results: tuple[DiagnosisResult, ...] = Field(min_length=1)  # fallback result at minimum

    @computed_field
    @property
    def any_requires_lab_tests(self) -> bool:
        return any(r.requires_lab_tests for r in self.results)

    @computed_field
    @property
    def top_diagnosis(self) -> str | None:
        return self.results[0].disease if self.results else None


class DiagnosisResponse(CamelModel):
    session_id: str
    created_at: datetime
    results: list[DiagnosisResult]
    any_requires_lab_tests: bool
    top_diagnosis: str | None
    urgency: str  # "urgent" or "standard"
    appointment_reason: str
    recorded: bool  # durable copy written to the record store
