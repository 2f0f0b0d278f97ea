"""
Disease Rule Profiles

Static, per-disease scoring configuration. Each profile maps catalog symptoms
to base weights (1 = very weak ... 4 = very strong), names the critical
symptoms that can override threshold classification, and carries the drug
lists and advisory messages shown for each confidence band.

Profiles are validated once at import. An inconsistent profile raises
ConfigurationError, which stops the application from starting.
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from mesmtf.errors import ConfigurationError
from mesmtf.models.profile import ConfidenceBand, DiseaseProfile, Thresholds
from mesmtf.rules.risk_factors import RISK_FACTOR_COEFFICIENTS

logger = logging.getLogger(__name__)

HIGH = ConfidenceBand.HIGH
MEDIUM = ConfidenceBand.MEDIUM
LOW = ConfidenceBand.LOW

_MIN_WEIGHT = 1
_MAX_WEIGHT = 4

# ── Raw profile table ──
# Declaration order is the tie-break order for equal confidence.
_RAW_PROFILES: list[dict] = [
    {
        "name": "Malaria",
        "icd10": "B54",
        "symptom_weights": {
            "Fever": 4, "Chills": 4, "Sweating": 4, "Convulsions": 4,      # very strong
            "Headache": 3, "Vomiting": 3, "Fatigue": 3,                    # strong
            "Confusion": 3, "Dark urine": 3,
            "Nausea": 2, "Muscle pain": 2, "Abdominal pain": 2,            # weak
            "Loss of appetite": 1, "Diarrhea": 1, "Back pain": 1,          # very weak
        },
        "critical_symptoms": ("Confusion", "Convulsions", "Dark urine"),
        "thresholds": {"high": 15, "medium": 9, "low": 4},
        "drug_recommendations": {
            HIGH: ("Artesunate (IV)", "Artemether-Lumefantrine", "Quinine sulfate"),
            MEDIUM: ("Artemether-Lumefantrine", "Primaquine"),
            LOW: ("Paracetamol for symptom relief",),
        },
        "advisory_messages": {
            HIGH: "High probability of Malaria. Very strong signs detected. "
                  "Seek immediate medical attention; a blood smear or rapid diagnostic test is required.",
            MEDIUM: "Moderate probability of Malaria. Medical consultation recommended; "
                    "a blood test is required to confirm.",
            LOW: "Low probability of Malaria. Mild symptoms detected. "
                 "Monitor symptoms and consult a clinician if the condition worsens.",
        },
    },
    {
        "name": "Typhoid Fever",
        "icd10": "A01.0",
        "symptom_weights": {
            "Persistent high fever": 4, "Abdominal pain": 4,               # very strong
            "Headache": 3, "Weakness": 3, "Constipation": 3, "Bloody stool": 3,
            "Fever": 2, "Diarrhea": 2, "Loss of appetite": 2, "Rash": 2,   # weak
            "Fatigue": 2, "Confusion": 2,
        },
        "critical_symptoms": ("Bloody stool", "Confusion"),
        "thresholds": {"high": 14, "medium": 8, "low": 4},
        "drug_recommendations": {
            HIGH: ("Ceftriaxone", "Azithromycin", "Ciprofloxacin"),
            MEDIUM: ("Ciprofloxacin", "Amoxicillin"),
            LOW: ("Antipyretics for fever management",),
        },
        "advisory_messages": {
            HIGH: "High probability of Typhoid Fever. Very strong signs detected. "
                  "Urgent medical attention required; blood culture recommended.",
            MEDIUM: "Moderate probability of Typhoid Fever. Medical evaluation recommended; "
                    "a Widal test or blood culture is advised.",
            LOW: "Low probability of Typhoid Fever. General symptoms detected. "
                 "Rest, hydration and safe drinking water recommended.",
        },
    },
    {
        "name": "Influenza",
        "icd10": "J11.1",
        "symptom_weights": {
            "Fever": 3, "Cough": 3, "Sore throat": 3, "Muscle pain": 3,
            "Difficulty breathing": 3,
            "Runny nose": 2, "Headache": 2, "Fatigue": 2, "Chills": 2,
        },
        "critical_symptoms": ("Difficulty breathing",),
        "thresholds": {"high": 13, "medium": 8, "low": 4},
        "drug_recommendations": {
            HIGH: ("Oseltamivir", "Paracetamol"),
            MEDIUM: ("Oseltamivir",),
            LOW: ("Paracetamol", "Oral fluids"),
        },
        "advisory_messages": {
            HIGH: "High probability of Influenza. Start antiviral treatment within 48 hours "
                  "of symptom onset and watch for breathing difficulty.",
            MEDIUM: "Moderate probability of Influenza. Medical consultation recommended.",
            LOW: "Low probability of Influenza. Rest, fluids and symptom monitoring recommended.",
        },
    },
    {
        "name": "Pneumonia",
        "icd10": "J18.9",
        "symptom_weights": {
            "Cough": 4, "Difficulty breathing": 4,
            "Chest pain": 3, "Fever": 3,
            "Fatigue": 2, "Chills": 2, "Confusion": 2,
            "Sweating": 1,
        },
        "critical_symptoms": ("Difficulty breathing", "Chest pain"),
        "thresholds": {"high": 14, "medium": 9, "low": 5},
        "drug_recommendations": {
            HIGH: ("Amoxicillin-Clavulanate", "Azithromycin", "Ceftriaxone"),
            MEDIUM: ("Amoxicillin", "Doxycycline"),
            LOW: ("Paracetamol", "Oral fluids"),
        },
        "advisory_messages": {
            HIGH: "High probability of Pneumonia. Urgent medical attention required; "
                  "a chest X-ray is recommended.",
            MEDIUM: "Moderate probability of Pneumonia. Medical evaluation and chest "
                    "auscultation recommended.",
            LOW: "Low probability of Pneumonia. Monitor breathing and temperature.",
        },
    },
    {
        "name": "Gastroenteritis",
        "icd10": "A09",
        "symptom_weights": {
            "Diarrhea": 4, "Vomiting": 4,
            "Nausea": 3, "Abdominal pain": 3, "Dehydration": 3,
            "Fever": 2, "Bloody stool": 2,
            "Loss of appetite": 1,
        },
        "critical_symptoms": ("Dehydration", "Bloody stool"),
        "thresholds": {"high": 12, "medium": 7, "low": 3},
        "drug_recommendations": {
            HIGH: ("Oral rehydration salts", "IV fluids", "Zinc supplements"),
            MEDIUM: ("Oral rehydration salts", "Zinc supplements"),
            LOW: ("Oral rehydration salts",),
        },
        "advisory_messages": {
            HIGH: "High probability of Gastroenteritis with dehydration risk. "
                  "Seek medical care for rehydration and stool testing.",
            MEDIUM: "Moderate probability of Gastroenteritis. Keep hydrated and consult "
                    "a clinician if symptoms persist beyond two days.",
            LOW: "Low probability of Gastroenteritis. Oral fluids and a light diet recommended.",
        },
    },
]


def validate_profile(profile: DiseaseProfile) -> None:
    """Raise ConfigurationError if a profile breaks its invariants."""
    t = profile.thresholds
    if not (t.high > t.medium > t.low > 0):
        raise ConfigurationError(
            f"{profile.name}: thresholds must satisfy high > medium > low > 0 "
            f"(got high={t.high}, medium={t.medium}, low={t.low})"
        )

    for symptom, weight in profile.symptom_weights.items():
        if not _MIN_WEIGHT <= weight <= _MAX_WEIGHT:
            raise ConfigurationError(
                f"{profile.name}: weight for {symptom!r} must be between "
                f"{_MIN_WEIGHT} and {_MAX_WEIGHT} (got {weight})"
            )

    missing = [s for s in profile.critical_symptoms if s not in profile.symptom_weights]
    if missing:
        raise ConfigurationError(
            f"{profile.name}: critical symptoms missing from weight table: {missing}"
        )

    for band in ConfidenceBand:
        if band not in profile.drug_recommendations:
            raise ConfigurationError(f"{profile.name}: no drug recommendations for band {band.value}")
        if not profile.advisory_messages.get(band):
            raise ConfigurationError(f"{profile.name}: no advisory message for band {band.value}")


def load_profiles(raw_profiles: list[dict]) -> tuple[DiseaseProfile, ...]:
    """Build and validate the immutable profile registry."""
    profiles = []
    seen: set[str] = set()
    for raw in raw_profiles:
        try:
            profile = DiseaseProfile(
                name=raw["name"],
                icd10=raw.get("icd10", ""),
                symptom_weights=dict(raw["symptom_weights"]),
                critical_symptoms=tuple(raw.get("critical_symptoms", ())),
                thresholds=Thresholds(**raw["thresholds"]),
                drug_recommendations={band: tuple(drugs) for band, drugs in raw["drug_recommendations"].items()},
                advisory_messages=dict(raw["advisory_messages"]),
            )
        except (KeyError, PydanticValidationError) as e:
            raise ConfigurationError(f"Malformed disease profile {raw.get('name')!r}: {e}") from e
        if profile.name in seen:
            raise ConfigurationError(f"Duplicate disease profile: {profile.name}")
        validate_profile(profile)
        seen.add(profile.name)
        profiles.append(profile)

    for name, coefficient in RISK_FACTOR_COEFFICIENTS.items():
        if coefficient <= 1.0:
            raise ConfigurationError(f"Risk factor {name} must have a coefficient above 1.0")

    logger.info("Loaded %d disease profiles", len(profiles))
    return tuple(profiles)


DISEASE_PROFILES: tuple[DiseaseProfile, ...] = load_profiles(_RAW_PROFILES)


def get_profile(name: str) -> DiseaseProfile | None:
    for profile in DISEASE_PROFILES:
        if profile.name == name:
            return profile
    return None
