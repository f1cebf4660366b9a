"""Data models for cvelookup."""

from cvelookup.models.cve import (
    Severity,
    SeveritySummary,
    VulnerabilityRecord,
    sort_by_severity,
)
from cvelookup.models.family import DEFAULT_PACKAGE_FAMILIES, MatchMode, PackageFamily

__all__ = [
    "DEFAULT_PACKAGE_FAMILIES",
    "MatchMode",
    "PackageFamily",
    "Severity",
    "SeveritySummary",
    "VulnerabilityRecord",
    "sort_by_severity",
]
