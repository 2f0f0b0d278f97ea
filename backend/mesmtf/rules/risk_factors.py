"""
Epidemiological risk flags and their score coefficients.

Every active flag compounds multiplicatively onto the weighted symptom score.
Coefficients are global: they apply to every disease profile.
"""

RISK_FACTOR_COEFFICIENTS: dict[str, float] = {
    "recentTravel":    1.4,
    "endemicArea":     1.4,
    "previousHistory": 1.3,
    "contactWithSick": 1.2,
    "poorSanitation":  1.5,
    "untreatedWater":  1.6,
}

RISK_FACTOR_LABELS: dict[str, str] = {
    "recentTravel": "Recent travel to a malaria or typhoid area",
    "endemicArea": "Lives in an endemic area",
    "previousHistory": "Previous history of the disease",
    "contactWithSick": "Contact with a confirmed case",
    "poorSanitation": "Poor sanitation at home",
    "untreatedWater": "Drinks untreated water",
}


def risk_multiplier(risk_factors: dict[str, bool]) -> float:
    """Product of the coefficients of all active flags (1.0 when none are active)."""
    multiplier = 1.0
    # Declaration order, so the float product doesn't depend on input ordering
    for name, coefficient in RISK_FACTOR_COEFFICIENTS.items():
        if risk_factors.get(name):
            multiplier *= coefficient
    return multiplier
