"""Ranks scored diseases and assembles the user-facing result records."""

from mesmtf.models.diagnosis import DiagnosisResult, ScoredDisease
from mesmtf.models.profile import ConfidenceBand

RECOMMENDED_ACTIONS: dict[ConfidenceBand, str] = {
    ConfidenceBand.HIGH: "Urgent medical attention required",
    ConfidenceBand.MEDIUM: "Medical consultation recommended",
    ConfidenceBand.LOW: "Monitor symptoms",
}

FALLBACK_DISEASE = "Medical Evaluation Needed"

FALLBACK_RESULT = DiagnosisResult(
    disease=FALLBACK_DISEASE,
    confidence_percentage=50,
    confidence_level=ConfidenceBand.MEDIUM,
    total_score=0.0,
    requires_lab_tests=True,
    advisory_message=(
        "No disease profile matched the reported symptoms with enough confidence. "
        "A clinical evaluation and laboratory work-up are recommended."
    ),
    recommended_action="Further evaluation recommended",
    is_fallback=True,
)


def to_result(scored: ScoredDisease) -> DiagnosisResult:
    profile = scored.profile
    band = scored.confidence_level
    return DiagnosisResult(
        disease=profile.name,
        confidence_percentage=scored.confidence_percentage,
        confidence_level=band,
        total_score=round(scored.total_score, 2),
        matching_symptoms=scored.matching_symptoms,
        critical_symptom_count=scored.critical_count,
        requires_lab_tests=band == ConfidenceBand.HIGH or scored.critical_count > 0,
        recommended_drugs=profile.drug_recommendations[band],
        advisory_message=profile.advisory_messages[band],
        recommended_action=RECOMMENDED_ACTIONS[band],
    )


def assemble(scored_diseases: list[ScoredDisease]) -> list[DiagnosisResult]:
    """Order by descending confidence and build result records.

    Never returns an empty list: when nothing cleared the reporting floor the
    single fallback result is returned instead.
    """
    if not scored_diseases:
        return [FALLBACK_RESULT]

    # sorted() is stable, so ties keep profile declaration order
    ranked = sorted(scored_diseases, key=lambda s: s.confidence_percentage, reverse=True)
    return [to_result(s) for s in ranked]
