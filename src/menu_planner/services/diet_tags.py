"""Derivation of diet tags from a resident's medical record."""

from dataclasses import dataclass

from menu_planner.domain.residents import DietTagType, HealthAssessment, Resident

BLOOD_PRESSURE_HIGH_SYSTOLIC = 140
BLOOD_PRESSURE_HIGH_DIASTOLIC = 90

_DISEASE_TAGS: tuple[tuple[DietTagType, str, tuple[str, ...]], ...] = (
    (
        DietTagType.LOW_SUGAR,
        "Low Sugar",
        ("diabetes", "đái tháo đường", "tiểu đường"),
    ),
    (
        DietTagType.LOW_SODIUM,
        "Low Sodium",
        ("hypertension", "tăng huyết áp", "huyết áp cao"),
    ),
    (
        DietTagType.SOFT_TEXTURE,
        "Soft Texture",
        ("dysphagia", "khó nuốt", "rối loạn nuốt"),
    ),
)

_ALLERGY_TAGS: tuple[tuple[DietTagType, str, tuple[str, ...]], ...] = (
    (DietTagType.GLUTEN_FREE, "Gluten Free", ("gluten", "lúa mì")),
    (DietTagType.LACTOSE_FREE, "Lactose Free", ("lactose", "sữa", "milk", "dairy")),
)


@dataclass(frozen=True)
class DietTagSuggestion:
    """A diet tag the resident should carry, with its provenance."""

    tag_type: DietTagType
    tag_name: str
    source_type: str
    notes: str


@dataclass
class DietTagAssigner:
    """Suggests diet tags from conditions, allergies and vital signs."""

    def suggest(
        self, resident: Resident, assessment: HealthAssessment | None = None
    ) -> list[DietTagSuggestion]:
        """Return one suggestion per tag type, earliest source first."""
        suggestions: dict[DietTagType, DietTagSuggestion] = {}

        for disease in resident.chronic_diseases:
            if not disease.is_active:
                continue
            name = disease.name.lower()
            for tag_type, tag_name, markers in _DISEASE_TAGS:
                if tag_type not in suggestions and _mentions(name, markers):
                    suggestions[tag_type] = DietTagSuggestion(
                        tag_type=tag_type,
                        tag_name=tag_name,
                        source_type="medical_record",
                        notes=f"Auto-assigned from chronic disease: {disease.name}",
                    )

        for allergy in resident.allergies:
            substance = allergy.substance.lower()
            for tag_type, tag_name, markers in _ALLERGY_TAGS:
                if tag_type not in suggestions and _mentions(substance, markers):
                    suggestions[tag_type] = DietTagSuggestion(
                        tag_type=tag_type,
                        tag_name=tag_name,
                        source_type="medical_record",
                        notes=f"Auto-assigned from allergy: {allergy.substance}",
                    )

        latest = assessment or resident.latest_assessment
        if latest is not None:
            for suggestion in _from_assessment(latest):
                suggestions.setdefault(suggestion.tag_type, suggestion)

        return list(suggestions.values())


def _mentions(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def _from_assessment(assessment: HealthAssessment) -> list[DietTagSuggestion]:
    suggestions = []
    systolic = assessment.blood_pressure_systolic
    diastolic = assessment.blood_pressure_diastolic
    if systolic and diastolic and (
        systolic >= BLOOD_PRESSURE_HIGH_SYSTOLIC
        or diastolic >= BLOOD_PRESSURE_HIGH_DIASTOLIC
    ):
        suggestions.append(
            DietTagSuggestion(
                tag_type=DietTagType.LOW_SODIUM,
                tag_name="Low Sodium",
                source_type="vital_sign",
                notes=(
                    "Auto-assigned from high blood pressure: "
                    f"{systolic}/{diastolic} mmHg"
                ),
            )
        )
    if (
        assessment.cognitive_status == "SEVERE"
        or assessment.mobility_status == "DEPENDENT"
    ):
        suggestions.append(
            DietTagSuggestion(
                tag_type=DietTagType.SOFT_TEXTURE,
                tag_name="Soft Texture",
                source_type="vital_sign",
                notes=(
                    "Auto-assigned from cognitive/mobility status: "
                    f"{assessment.cognitive_status}/{assessment.mobility_status}"
                ),
            )
        )
    return suggestions
