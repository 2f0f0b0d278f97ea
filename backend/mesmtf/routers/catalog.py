from fastapi import APIRouter

from mesmtf.rules.catalog import catalog
from mesmtf.rules.profiles import DISEASE_PROFILES
from mesmtf.rules.risk_factors import RISK_FACTOR_COEFFICIENTS, RISK_FACTOR_LABELS

router = APIRouter()


@router.get("/symptoms")
async def list_symptoms():
    """All recognized symptoms with the diseases that reference them."""
    return {
        "symptoms": [
            {
                "name": symptom,
                "diseases": catalog.diseases_for(symptom),
                "strength": catalog.strength(symptom),
            }
            for symptom in catalog.all_symptoms()
        ],
        "byStrength": catalog.symptoms_by_strength(),
    }


@router.get("/diseases")
async def list_diseases():
    return {
        "diseases": [
            {
                "name": p.name,
                "icd10": p.icd10,
                "thresholds": p.thresholds.model_dump(),
                "criticalSymptoms": list(p.critical_symptoms),
                "symptoms": sorted(p.symptom_weights),
            }
            for p in DISEASE_PROFILES
        ]
    }


@router.get("/risk-factors")
async def list_risk_factors():
    return {
        "riskFactors": [
            {"name": name, "label": RISK_FACTOR_LABELS[name], "coefficient": coefficient}
            for name, coefficient in RISK_FACTOR_COEFFICIENTS.items()
        ]
    }
