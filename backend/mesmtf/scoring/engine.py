"""
Scoring Engine

Pure weighted-scoring heuristic. For every disease profile:

    symptom_score = sum(weight * severity_mult * duration_mult) over matched symptoms
    total_score   = symptom_score * risk_mult * age_mult

The total is bucketed into a confidence band (critical symptoms override the
thresholds) and converted into a band-specific percentage. Diseases whose
percentage does not exceed the reporting floor are dropped.

Risk and age multipliers compound onto the already severity/duration weighted
score; they are not additive.
"""

import logging
import math
from collections.abc import Iterable, Mapping

from mesmtf.errors import ValidationError
from mesmtf.models.diagnosis import Duration, ScoredDisease, Severity, SymptomObservation
from mesmtf.models.profile import ConfidenceBand, DiseaseProfile
from mesmtf.rules.profiles import DISEASE_PROFILES
from mesmtf.rules.risk_factors import RISK_FACTOR_COEFFICIENTS, risk_multiplier

logger = logging.getLogger(__name__)

SEVERITY_MULTIPLIERS: dict[Severity, float] = {
    Severity.SEVERE: 2.0,
    Severity.MODERATE: 1.5,
    Severity.MILD: 1.0,
    Severity.UNSET: 1.0,
}

DURATION_MULTIPLIERS: dict[Duration, float] = {
    Duration.PROLONGED: 1.8,
    Duration.DAYS: 1.3,
    Duration.RECENT: 1.0,
    Duration.UNSET: 1.0,
}

# Under-5s and over-65s are weighted up
AGE_MULTIPLIER = 1.3
_YOUNG_AGE = 5
_OLD_AGE = 65

# Unrounded percentage must be strictly above this to be reported
REPORTING_FLOOR = 20

# (base, slope, ceiling) of the percentage formula per band
_BAND_PERCENTAGE: dict[ConfidenceBand, tuple[float, float, float]] = {
    ConfidenceBand.HIGH: (70, 1, 95),
    ConfidenceBand.MEDIUM: (50, 3, 80),
    ConfidenceBand.LOW: (30, 4, 50),
}

_NEUTRAL = SymptomObservation()


def validate_inputs(
    selected_symptoms: Iterable[str],
    observations: Mapping[str, SymptomObservation],
    risk_factors: Mapping[str, bool],
    patient_age: int | None,
) -> None:
    """Reject malformed input before anything is scored."""
    selected = set(selected_symptoms)
    for symptom in observations:
        if symptom not in selected:
            raise ValidationError(
                f"observations.{symptom}",
                "observation given for a symptom that was not selected",
            )
    for name in risk_factors:
        if name not in RISK_FACTOR_COEFFICIENTS:
            raise ValidationError(f"riskFactors.{name}", "unknown risk factor")
    if patient_age is not None and patient_age < 0:
        raise ValidationError("patientAge", "age must be zero or greater")


def age_multiplier(patient_age: int | None) -> float:
    if patient_age is None:
        return 1.0
    if patient_age < _YOUNG_AGE or patient_age > _OLD_AGE:
        return AGE_MULTIPLIER
    return 1.0


def symptom_score(
    profile: DiseaseProfile,
    selected_symptoms: list[str],
    observations: Mapping[str, SymptomObservation],
) -> float:
    score = 0.0
    for symptom in selected_symptoms:
        weight = profile.weight(symptom)
        if not weight:
            continue
        obs = observations.get(symptom, _NEUTRAL)
        score += weight * SEVERITY_MULTIPLIERS[obs.severity] * DURATION_MULTIPLIERS[obs.duration]
    return score


def classify(profile: DiseaseProfile, total_score: float, critical_count: int) -> ConfidenceBand | None:
    """Confidence band for a score, or None when the disease is not reported.

    Thresholds are closed lower bounds. Critical symptoms take precedence
    over the raw score.
    """
    t = profile.thresholds
    if critical_count >= 2 or total_score >= t.high:
        return ConfidenceBand.HIGH
    if critical_count >= 1 or total_score >= t.medium:
        return ConfidenceBand.MEDIUM
    if total_score >= t.low:
        return ConfidenceBand.LOW
    return None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def raw_percentage(profile: DiseaseProfile, band: ConfidenceBand, total_score: float) -> float:
    base, slope, ceiling = _BAND_PERCENTAGE[band]
    threshold = getattr(profile.thresholds, band.value)
    return max(0.0, min(ceiling, base + (total_score - threshold) * slope))


def confidence_percentage(profile: DiseaseProfile, band: ConfidenceBand, total_score: float) -> int:
    return _round_half_up(raw_percentage(profile, band, total_score))


def score_profile(
    profile: DiseaseProfile,
    selected_symptoms: list[str],
    observations: Mapping[str, SymptomObservation],
    risk_mult: float,
    age_mult: float,
) -> ScoredDisease | None:
    """Score a single disease. Returns None when it doesn't clear the floor."""
    total = symptom_score(profile, selected_symptoms, observations) * risk_mult * age_mult
    critical = set(selected_symptoms).intersection(profile.critical_symptoms)
    band = classify(profile, total, len(critical))
    if band is None:
        return None

    raw = raw_percentage(profile, band, total)
    if raw <= REPORTING_FLOOR:
        return None

    return ScoredDisease(
        profile=profile,
        total_score=total,
        critical_count=len(critical),
        confidence_level=band,
        confidence_percentage=_round_half_up(raw),
        matching_symptoms=tuple(s for s in selected_symptoms if s in profile.symptom_weights),
    )


def evaluate(
    selected_symptoms: Iterable[str],
    observations: Mapping[str, SymptomObservation] | None = None,
    risk_factors: Mapping[str, bool] | None = None,
    patient_age: int | None = None,
    profiles: tuple[DiseaseProfile, ...] = DISEASE_PROFILES,
) -> list[ScoredDisease]:
    """Score every profile against one patient's input.

    Returns the diseases that cleared the reporting floor, in profile
    declaration order. An empty selection yields an empty list.
    """
    observations = observations or {}
    risk_factors = risk_factors or {}
    # Keep the caller's order, drop duplicates
    selected = list(dict.fromkeys(selected_symptoms))
    validate_inputs(selected, observations, risk_factors, patient_age)

    if not selected:
        return []

    risk_mult = risk_multiplier(dict(risk_factors))
    age_mult = age_multiplier(patient_age)
    scored = []
    for profile in profiles:
        result = score_profile(profile, selected, observations, risk_mult, age_mult)
        if result is not None:
            scored.append(result)

    logger.debug(
        "Scored %d symptoms against %d profiles: %d reportable",
        len(selected), len(profiles), len(scored),
    )
    return scored
