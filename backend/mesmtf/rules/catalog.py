"""Symptom catalog: the closed vocabulary of symptoms the profiles reference."""

from mesmtf.models.profile import DiseaseProfile
from mesmtf.rules.profiles import DISEASE_PROFILES

STRENGTH_CATEGORIES: dict[int, str] = {
    4: "very_strong",
    3: "strong",
    2: "weak",
    1: "very_weak",
}


class SymptomCatalog:
    """Symptom names, and which diseases reference each one."""

    def __init__(self, profiles: tuple[DiseaseProfile, ...] = DISEASE_PROFILES):
        self._profiles = profiles
        self._diseases: dict[str, list[str]] = {}
        self._max_weight: dict[str, int] = {}
        for profile in profiles:
            for symptom, weight in profile.symptom_weights.items():
                self._diseases.setdefault(symptom, []).append(profile.name)
                self._max_weight[symptom] = max(weight, self._max_weight.get(symptom, 0))

    def __contains__(self, symptom: str) -> bool:
        return symptom in self._diseases

    def __len__(self) -> int:
        return len(self._diseases)

    def all_symptoms(self) -> list[str]:
        return sorted(self._diseases)

    def diseases_for(self, symptom: str) -> list[str]:
        return list(self._diseases.get(symptom, []))

    def strength(self, symptom: str) -> str | None:
        """Category of the strongest weight any profile gives the symptom."""
        return STRENGTH_CATEGORIES.get(self._max_weight.get(symptom, 0))

    def symptoms_by_strength(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {name: [] for name in STRENGTH_CATEGORIES.values()}
        for symptom in self.all_symptoms():
            grouped[self.strength(symptom)].append(symptom)
        return grouped


catalog = SymptomCatalog()
