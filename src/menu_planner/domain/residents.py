"""Domain models for residents and their dietary profile."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from uuid import UUID


class Severity(StrEnum):
    """Severity scale shared by allergies and chronic diseases."""

    MILD = "MILD"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"


class DiseaseStatus(StrEnum):
    """Whether a chronic disease is currently active."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class DietTagType(StrEnum):
    """Diet tag categories that drive dish suitability."""

    LOW_SUGAR = "LowSugar"
    LOW_SODIUM = "LowSodium"
    GLUTEN_FREE = "GlutenFree"
    LACTOSE_FREE = "LactoseFree"
    SOFT_TEXTURE = "SoftTexture"


@dataclass(frozen=True)
class Allergy:
    """Allergy to a substance."""

    substance: str
    severity: Severity = Severity.MODERATE


@dataclass(frozen=True)
class DietTag:
    """Diet tag assigned to a resident, optionally expiring."""

    tag_type: DietTagType
    tag_name: str = ""
    is_active: bool = True
    expires_at: date | None = None

    def is_active_on(self, on: date) -> bool:
        """Return True when the tag applies on the given evaluation date."""
        if not self.is_active:
            return False
        return self.expires_at is None or self.expires_at > on

    @property
    def display_name(self) -> str:
        return self.tag_name or str(self.tag_type)


@dataclass(frozen=True)
class ChronicDisease:
    """Chronic condition from the resident's medical record."""

    name: str
    severity: Severity = Severity.MODERATE
    status: DiseaseStatus = DiseaseStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == DiseaseStatus.ACTIVE


@dataclass(frozen=True)
class HealthAssessment:
    """Latest vital signs and functional status of a resident."""

    blood_pressure_systolic: int | None = None
    blood_pressure_diastolic: int | None = None
    cognitive_status: str | None = None
    mobility_status: str | None = None


@dataclass(frozen=True)
class Resident:
    """Snapshot of a resident with allergies, tags and conditions populated."""

    id: UUID
    name: str
    allergies: tuple[Allergy, ...] = ()
    diet_tags: tuple[DietTag, ...] = ()
    chronic_diseases: tuple[ChronicDisease, ...] = ()
    institution_id: UUID | None = None
    latest_assessment: HealthAssessment | None = field(default=None, compare=False)

    def active_tags(self, on: date) -> list[DietTag]:
        """Return diet tags active on the evaluation date."""
        return [tag for tag in self.diet_tags if tag.is_active_on(on)]

    def has_active_tag(self, tag_type: DietTagType, on: date) -> bool:
        return any(tag.tag_type == tag_type for tag in self.active_tags(on))
