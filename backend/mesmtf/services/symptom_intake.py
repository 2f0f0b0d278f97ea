"""
Symptom Intake Service

Turns a patient's free-text description into a structured evaluation
request. Detection is deterministic via keyword patterns against the symptom
catalog. When a Groq key is configured and some phrases stay unmatched, an
LLM fallback maps them onto catalog names only; anything outside the catalog
is discarded. No scoring happens here.
"""

import json
import logging
import re

from groq import AsyncGroq
from mesmtf.config import GROQ_API_KEY
from mesmtf.models.diagnosis import DiagnosisRequest, Duration, Severity, SymptomObservation
from mesmtf.models.profile import CamelModel
from mesmtf.rules.catalog import SymptomCatalog, catalog

logger = logging.getLogger(__name__)

client = AsyncGroq(api_key=GROQ_API_KEY) if GROQ_API_KEY else None

LLM_MODEL = "llama-3.3-70b-versatile"


# ── Deterministic symptom detection ──
# Matched against each lowercased clause of the input. A symptom not listed
# here is still found when its catalog name appears verbatim.
SYMPTOM_PATTERNS: dict[str, list[str]] = {
    "Fever": [r"\bfever\b", r"\bfeverish\b", r"\btemperature\b", r"\bhot\s*body\b"],
    "Persistent high fever": [
        r"\b(high|persistent|continuous)\s*fever\b",
        r"\bfever\b.*\b(won'?t|not)\s*(go|going)\s*(away|down)",
    ],
    "Chills": [r"\bchills?\b", r"\bshiver", r"\bfeel(ing)?\s*cold\b"],
    "Sweating": [r"\bsweat", r"\bnight\s*sweats?\b"],
    "Headache": [r"\bheadache\b", r"\bhead\s*(hurts|pain|aches?)\b", r"\bmigraine\b"],
    "Vomiting": [r"\bvomit", r"\bthrowing\s*up\b", r"\bthrew\s*up\b"],
    "Nausea": [r"\bnause", r"\bqueasy\b", r"\bfeel(ing)?\s*sick\s*to\s*(my|the)\s*stomach\b"],
    "Fatigue": [r"\bfatigue", r"\btired", r"\bexhaust"],
    "Weakness": [r"\bweak(ness)?\b", r"\bno\s*strength\b"],
    "Muscle pain": [r"\bmuscle\s*(pain|aches?)\b", r"\bbody\s*(pain|aches?)\b", r"\baching\s*body\b"],
    "Back pain": [r"\bback\s*(pain|aches?|hurts)\b"],
    "Abdominal pain": [r"\babdominal\s*pain\b", r"\bstomach\s*(pain|aches?|hurts|cramps?)\b", r"\bbelly\s*(pain|aches?)\b"],
    "Diarrhea": [r"\bdiarrh", r"\bloose\s*(stool|motion)s?\b", r"\brunny\s*stool"],
    "Constipation": [r"\bconstipat", r"\bcan'?t\s*poop\b"],
    "Bloody stool": [r"\bblood(y)?\s*(in\s*(my|the)\s*)?(stool|poop)", r"\bstool\b.*\bblood"],
    "Loss of appetite": [r"\bloss\s*of\s*appetite\b", r"\bno\s*appetite\b", r"\bnot\s*(hungry|eating)\b"],
    "Rash": [r"\brash\b", r"\bspots\s*on\s*(my\s*)?(skin|chest|belly)\b"],
    "Confusion": [r"\bconfus", r"\bdisorient", r"\bdelirious\b"],
    "Convulsions": [r"\bconvuls", r"\bseizure"],
    "Dark urine": [r"\bdark\s*(urine|pee)\b", r"\b(cola|tea)[\s-]*colou?red\s*urine\b"],
    "Cough": [r"\bcough"],
    "Sore throat": [r"\bsore\s*throat\b", r"\bthroat\s*(hurts|pain)\b"],
    "Runny nose": [r"\brunny\s*nose\b", r"\bsniffl", r"\bblocked\s*nose\b"],
    "Difficulty breathing": [r"\b(difficulty|trouble|hard)\s*breathing\b", r"\bshort(ness)?\s*of\s*breath\b", r"\bbreathless"],
    "Chest pain": [r"\bchest\s*(pain|hurts|tightness)\b"],
    "Dehydration": [r"\bdehydrat", r"\bvery\s*thirsty\b", r"\bdry\s*mouth\b"],
}

SEVERITY_PATTERNS: list[tuple[Severity, str]] = [
    (Severity.SEVERE, r"\b(severe|severely|terrible|unbearable|intense|very\s*bad|really\s*bad|extreme)\b"),
    (Severity.MODERATE, r"\b(moderate|quite|pretty\s*bad|fairly)\b"),
    (Severity.MILD, r"\b(mild|slight|slightly|a\s*bit|a\s*little)\b"),
]

DURATION_PATTERNS: list[tuple[Duration, str]] = [
    (Duration.PROLONGED, r"\b(weeks?|months?|long\s*time|ages|persistent|chronic)\b"),
    (Duration.DAYS, r"\b(\d+|two|three|four|five|six|few|several|couple\s*of)\s*days\b"),
    (Duration.RECENT, r"\b(today|this\s*morning|tonight|yesterday|last\s*night|hours?|just\s*started)\b"),
]

RISK_PATTERNS: dict[str, list[str]] = {
    "recentTravel": [r"\b(travel+ed|trip|came\s*back\s*from|returned\s*from)\b"],
    "endemicArea": [r"\b(endemic|malaria\s*area|mosquito(es)?\s*everywhere)\b"],
    "previousHistory": [r"\b(had|history\s*of)\s*(malaria|typhoid)\b", r"\bbefore\b.*\b(malaria|typhoid)\b"],
    "contactWithSick": [r"\b(sister|brother|mother|father|child|friend|neighbou?r|someone)\b.*\b(sick|ill|has\s*(malaria|typhoid))\b"],
    "poorSanitation": [r"\b(open\s*(drain|sewer)|no\s*toilet|poor\s*sanitation|shared\s*latrine)\b"],
    "untreatedWater": [r"\b(well|river|stream|borehole|untreated|unboiled)\s*water\b"],
}

_CLAUSE_SPLIT = re.compile(r"[.,;!?\n]|\band\b|\bbut\b|\balso\b")


class IntakeResult(CamelModel):
    request: DiagnosisRequest
    unmatched: list[str] = []
    llm_used: bool = False


def split_clauses(text: str) -> list[str]:
    return [c.strip() for c in _CLAUSE_SPLIT.split(text.lower()) if c.strip()]


def _first_match(patterns: list[tuple], clause: str):
    for value, pattern in patterns:
        if re.search(pattern, clause):
            return value
    return None


def detect_symptoms(clause: str, symptom_catalog: SymptomCatalog = catalog) -> list[str]:
    found = []
    for symptom in symptom_catalog.all_symptoms():
        patterns = SYMPTOM_PATTERNS.get(symptom, []) + [r"\b" + re.escape(symptom.lower()) + r"\b"]
        if any(re.search(p, clause) for p in patterns):
            found.append(symptom)
    # "high fever" is the more specific match
    if "Persistent high fever" in found and "Fever" in found:
        found.remove("Fever")
    return found


def detect_risk_factors(text: str) -> dict[str, bool]:
    lower = text.lower()
    return {
        name: True
        for name, patterns in RISK_PATTERNS.items()
        if any(re.search(p, lower) for p in patterns)
    }


def detect_age(text: str) -> int | None:
    match = re.search(r"\b(\d{1,3})\s*(?:year|yr|y/?o|years?\s*old)\b", text.lower())
    return int(match.group(1)) if match else None


def parse_text(text: str, symptom_catalog: SymptomCatalog = catalog) -> tuple[DiagnosisRequest, list[str]]:
    """Deterministic pass. Returns the request and the clauses nothing matched."""
    selected: list[str] = []
    observations: dict[str, SymptomObservation] = {}
    unmatched: list[str] = []

    for clause in split_clauses(text):
        symptoms = detect_symptoms(clause, symptom_catalog)
        if not symptoms:
            unmatched.append(clause)
            continue
        severity = _first_match(SEVERITY_PATTERNS, clause) or Severity.UNSET
        duration = _first_match(DURATION_PATTERNS, clause) or Duration.UNSET
        for symptom in symptoms:
            if symptom in selected:
                continue
            selected.append(symptom)
            if severity != Severity.UNSET or duration != Duration.UNSET:
                observations[symptom] = SymptomObservation(severity=severity, duration=duration)

    request = DiagnosisRequest(
        selected_symptoms=selected,
        observations=observations,
        risk_factors=detect_risk_factors(text),
        patient_age=detect_age(text),
    )
    return request, unmatched


async def resolve_unmatched(phrases: list[str], symptom_catalog: SymptomCatalog = catalog) -> list[str]:
    """LLM fallback: map leftover phrases onto catalog symptom names."""
    if client is None or not phrases:
        return []

    names = symptom_catalog.all_symptoms()
    try:
        response = await client.chat.completions.create(
            model=LLM_MODEL,
            messages=[
                {"role": "system", "content": (
                    "Map the patient's phrases onto symptom names from this list ONLY: "
                    + ", ".join(names)
                    + '. Return JSON: {"symptoms": [names]}. '
                    "Use exact names from the list. Return an empty list if nothing fits. "
                    "Do NOT diagnose."
                )},
                {"role": "user", "content": "\n".join(phrases)},
            ],
            temperature=0,
            response_format={"type": "json_object"},
        )
        content = json.loads(response.choices[0].message.content)
    except Exception as e:
        logger.warning("LLM symptom mapping failed, using keyword matches only: %s", e)
        return []

    return [s for s in content.get("symptoms", []) if s in symptom_catalog]


async def parse_symptom_text(text: str) -> IntakeResult:
    request, unmatched = parse_text(text)
    extra = await resolve_unmatched(unmatched)
    new = [s for s in dict.fromkeys(extra) if s not in request.selected_symptoms]
    if not new:
        return IntakeResult(request=request, unmatched=unmatched, llm_used=bool(extra))

    merged = request.model_copy(update={"selected_symptoms": request.selected_symptoms + new})
    return IntakeResult(request=merged, unmatched=unmatched, llm_used=True)
