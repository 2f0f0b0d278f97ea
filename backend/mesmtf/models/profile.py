from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Frozen model exchanged with the presentation layer in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ConfidenceBand(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Thresholds(CamelModel):
    high: float
    medium: float
    low: float


class DiseaseProfile(CamelModel):
    name: str
    icd10: str = ""
    symptom_weights: dict[str, int]  # symptom -> base weight 1-4
    critical_symptoms: tuple[str, ...] = ()
    thresholds: Thresholds
    drug_recommendations: dict[ConfidenceBand, tuple[str, ...]]
    advisory_messages: dict[ConfidenceBand, str]

    def weight(self, symptom: str) -> int:
        return self.symptom_weights.get(symptom, 0)
