"""Supabase repository for residents and their dietary profile."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from uuid import UUID

from supabase import Client

from menu_planner.domain.residents import (
    Allergy,
    ChronicDisease,
    DietTag,
    DietTagType,
    DiseaseStatus,
    HealthAssessment,
    Resident,
    Severity,
)
from menu_planner.services.planner import ResidentProvider

RESIDENT_SELECT = (
    "*, allergies(*), resident_diet_tags(*), chronic_diseases(*), "
    "health_assessments(*)"
)


@dataclass
class SupabaseResidentRepository(ResidentProvider):
    """Supabase-backed resident store."""

    client: Client

    def list_for_institution(self, institution_id: UUID, as_of: date) -> list[Resident]:
        """Return residents with only the diet tags active on ``as_of``."""
        response = (
            self.client.table("residents")
            .select(RESIDENT_SELECT)
            .eq("institution_id", str(institution_id))
            .order("full_name", desc=False)
            .execute()
        )
        return [_parse_resident(row, as_of) for row in response.data or []]


def _parse_resident(row: dict[str, object], as_of: date) -> Resident:
    institution_raw = row.get("institution_id")
    tags = [_parse_tag(tag) for tag in row.get("resident_diet_tags") or []]
    return Resident(
        id=UUID(str(row["id"])),
        name=str(row.get("full_name", "")),
        allergies=tuple(
            Allergy(
                substance=str(allergy.get("substance", "")),
                severity=_parse_severity(allergy.get("severity")),
            )
            for allergy in row.get("allergies") or []
        ),
        diet_tags=tuple(tag for tag in tags if tag.is_active_on(as_of)),
        chronic_diseases=tuple(
            ChronicDisease(
                name=str(disease.get("name", "")),
                severity=_parse_severity(disease.get("severity")),
                status=DiseaseStatus.ACTIVE
                if str(disease.get("status", "ACTIVE")).upper() == "ACTIVE"
                else DiseaseStatus.INACTIVE,
            )
            for disease in row.get("chronic_diseases") or []
        ),
        institution_id=UUID(str(institution_raw)) if institution_raw else None,
        latest_assessment=_latest_assessment(row.get("health_assessments") or []),
    )


def _parse_tag(row: dict[str, object]) -> DietTag:
    return DietTag(
        tag_type=DietTagType(str(row["tag_type"])),
        tag_name=str(row.get("tag_name") or ""),
        is_active=bool(row.get("is_active", True)),
        expires_at=_parse_expiry(row.get("expires_at")),
    )


def _parse_severity(raw: object) -> Severity:
    try:
        return Severity(str(raw).upper())
    except ValueError:
        return Severity.MODERATE


def _parse_expiry(raw: object) -> date | None:
    """Return the first day the tag no longer applies.

    A tag expiring partway through a day still applies on that day.
    """
    if not isinstance(raw, str) or not raw:
        return None
    expires = datetime.fromisoformat(raw)
    if expires.time() == time.min:
        return expires.date()
    return expires.date() + timedelta(days=1)


def _latest_assessment(rows: list[dict[str, object]]) -> HealthAssessment | None:
    if not rows:
        return None
    latest = max(rows, key=lambda row: str(row.get("measured_at") or ""))
    return HealthAssessment(
        blood_pressure_systolic=latest.get("blood_pressure_systolic"),
        blood_pressure_diastolic=latest.get("blood_pressure_diastolic"),
        cognitive_status=latest.get("cognitive_status"),
        mobility_status=latest.get("mobility_status"),
    )
