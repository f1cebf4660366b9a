"""Vulnerability record models for the simulated CVE catalog."""

from collections.abc import Iterable
from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CVE_ID_PATTERN = r"^CVE-\d{4}-\d+$"


class Severity(StrEnum):
    """Vulnerability severity levels."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @property
    def rank(self) -> int:
        """Display rank, critical highest."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.NONE: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class VulnerabilityRecord(BaseModel):
    """A single vulnerability known to the catalog.

    Records are immutable. Field names are snake_case in Python; the
    camelCase names (``affectedPackages``, ``publishedDate``, ``cvssScore``)
    are accepted on input and produced by ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(..., pattern=CVE_ID_PATTERN, description="CVE identifier")
    severity: Severity = Field(..., description="Severity rating")
    title: str = Field(..., description="Short title")
    description: str = Field(..., description="Full description")
    affected_packages: tuple[str, ...] = Field(
        ...,
        min_length=1,
        description="Lowercase package/ecosystem names, in dataset order",
    )
    published_date: date = Field(..., description="Publication date")
    cvss_score: float | None = Field(
        default=None,
        ge=0,
        le=10,
        description="CVSS score, when modelled",
    )
    references: tuple[str, ...] = Field(
        default=(),
        description="Reference URLs",
    )

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v: str | Severity) -> str | Severity:
        """Accept severities in any case."""
        return v.lower() if isinstance(v, str) else v

    @field_validator("published_date", mode="before")
    @classmethod
    def parse_date(cls, v: str | date) -> date:
        """Parse an ISO-8601 (YYYY-MM-DD) date string."""
        if isinstance(v, date):
            return v
        if isinstance(v, str):
            return datetime.strptime(v, "%Y-%m-%d").date()
        raise ValueError(f"Cannot parse date: {v}")

    @field_validator("references", mode="before")
    @classmethod
    def default_references(cls, v: Iterable[str] | None) -> Iterable[str]:
        """Treat a null reference list as empty."""
        return () if v is None else v

    @property
    def has_references(self) -> bool:
        """Check if the record carries any reference URLs."""
        return bool(self.references)


class SeveritySummary(BaseModel):
    """Per-severity counts over a set of records."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    none: int = 0
    total: int = 0

    @classmethod
    def from_records(cls, records: Iterable[VulnerabilityRecord]) -> "SeveritySummary":
        """Count records by severity.

        Args:
            records: Records to summarize.

        Returns:
            SeveritySummary with one counter per severity level.
        """
        counts = dict.fromkeys(Severity, 0)
        for record in records:
            counts[record.severity] += 1

        return cls(
            critical=counts[Severity.CRITICAL],
            high=counts[Severity.HIGH],
            medium=counts[Severity.MEDIUM],
            low=counts[Severity.LOW],
            none=counts[Severity.NONE],
            total=sum(counts.values()),
        )

    def count(self, severity: Severity) -> int:
        """Get the count for one severity level."""
        return int(getattr(self, severity.value))


def sort_by_severity(records: Iterable[VulnerabilityRecord]) -> list[VulnerabilityRecord]:
    """Order records for display, most severe first.

    The sort is stable, so records of equal severity keep their
    dataset order.
    """
    return sorted(records, key=lambda r: r.severity.rank, reverse=True)
