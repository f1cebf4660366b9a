"""Pytest configuration and fixtures for cvelookup tests."""

import pytest

from cvelookup.config import Settings
from cvelookup.models.cve import Severity, VulnerabilityRecord
from cvelookup.services.catalog_service import VulnerabilityCatalog, load_records
from cvelookup.services.recent_search_service import RecentSearchStore
from cvelookup.utils.storage import MemoryStorage


class DelayRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def delay():
    """Delay recorder that returns immediately."""
    return DelayRecorder()


@pytest.fixture(scope="session")
def bundled_records():
    """Record definitions from the bundled dataset, duplicates included."""
    return load_records()


@pytest.fixture
def catalog(bundled_records, delay):
    """Catalog over the bundled dataset with no real delay."""
    return VulnerabilityCatalog(bundled_records, delay=delay)


@pytest.fixture
def sample_record_data():
    """Sample record as it appears in a dataset file."""
    return {
        "id": "CVE-2024-12345",
        "severity": "critical",
        "title": "Remote Code Execution in Example Server",
        "description": "A crafted request allows remote code execution.",
        "affected_packages": ["nginx", "openssl"],
        "published_date": "2024-01-15",
        "cvss_score": 9.8,
        "references": ["https://nvd.nist.gov/vuln/detail/CVE-2024-12345"],
    }


@pytest.fixture
def sample_record(sample_record_data):
    """Create a sample record instance."""
    return VulnerabilityRecord.model_validate(sample_record_data)


@pytest.fixture
def make_record():
    """Factory for small records."""

    def _make(
        cve_id: str,
        packages: tuple[str, ...] = ("nginx",),
        severity: Severity = Severity.MEDIUM,
        title: str = "Test vulnerability",
    ) -> VulnerabilityRecord:
        return VulnerabilityRecord(
            id=cve_id,
            severity=severity,
            title=title,
            description="Test description",
            affected_packages=packages,
            published_date="2024-01-01",
        )

    return _make


@pytest.fixture
def memory_storage():
    """Empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def recent_store(memory_storage):
    """Recent search store over in-memory storage."""
    return RecentSearchStore(memory_storage)


@pytest.fixture
def mock_settings(tmp_path):
    """Create settings for testing with zero delays and a temporary data dir."""
    return Settings(
        log_level="DEBUG",
        data_dir=tmp_path,
        catalog={"search_delay": 0, "detail_delay": 0},
        recent_searches={"storage_path": tmp_path / "recent-searches.json"},
    )
