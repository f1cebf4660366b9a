"""Simulated vulnerability catalog service.

Answers two questions against a fixed, in-memory dataset: which known
vulnerabilities affect a container image, and what are the details of a
given CVE. Both lookups are asynchronous and resolve after a simulated
network delay so callers can exercise their loading states.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable, Iterable, Iterator, Sequence
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any

from loguru import logger
from pydantic import ValidationError

from cvelookup.config import Settings
from cvelookup.models.cve import SeveritySummary, VulnerabilityRecord
from cvelookup.models.family import DEFAULT_PACKAGE_FAMILIES, PackageFamily

Delay = Callable[[float], Awaitable[Any]]

BUNDLED_DATASET = "cves.json"


class DatasetError(Exception):
    """Raised when a vulnerability dataset cannot be loaded."""


def load_records(path: Path | str | None = None) -> list[VulnerabilityRecord]:
    """Load record definitions from a JSON dataset.

    The dataset is a JSON array of record objects. Definitions are
    returned in file order, duplicates included; resolving them is the
    catalog's job.

    Args:
        path: Dataset file. None loads the dataset bundled with the package.

    Returns:
        List of parsed records.

    Raises:
        DatasetError: If the file cannot be read or a record is invalid.
    """
    try:
        if path is None:
            source = f"bundled {BUNDLED_DATASET}"
            text = resources.files("cvelookup.resources").joinpath(BUNDLED_DATASET).read_text(
                encoding="utf-8"
            )
        else:
            source = str(path)
            text = Path(path).read_text(encoding="utf-8")
        data = json.loads(text)
    except OSError as e:
        raise DatasetError(f"Cannot read dataset {source}: {e}") from e
    except json.JSONDecodeError as e:
        raise DatasetError(f"Dataset {source} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise DatasetError(f"Dataset {source} must be a JSON array of records")

    records = []
    for index, item in enumerate(data):
        try:
            records.append(VulnerabilityRecord.model_validate(item))
        except ValidationError as e:
            raise DatasetError(f"Invalid record #{index} in {source}: {e}") from e

    logger.debug(f"Loaded {len(records)} record definitions from {source}")
    return records


class VulnerabilityCatalog:
    """Read-only catalog of vulnerability records.

    The catalog is built once and never mutated. Records keep the order
    of the dataset; when an id is defined more than once, the last
    definition wins and takes the position of the first.
    """

    def __init__(
        self,
        records: Iterable[VulnerabilityRecord],
        families: Sequence[PackageFamily] = DEFAULT_PACKAGE_FAMILIES,
        search_delay: float = 1.5,
        detail_delay: float = 0.8,
        delay: Delay = asyncio.sleep,
    ):
        """Initialize the catalog.

        Args:
            records: Record definitions in dataset order.
            families: Ordered classification table; first match wins.
            search_delay: Seconds a search takes to resolve.
            detail_delay: Seconds a single lookup takes to resolve.
            delay: Awaitable sleep used to simulate latency.
        """
        resolved: dict[str, VulnerabilityRecord] = {}
        for record in records:
            if record.id in resolved:
                logger.warning(f"Duplicate definition of {record.id}; keeping the last one")
            resolved[record.id] = record

        self._records = MappingProxyType(resolved)
        self.families = tuple(families)
        self.search_delay = search_delay
        self.detail_delay = detail_delay
        self._delay = delay

    @classmethod
    def from_settings(cls, settings: Settings, delay: Delay = asyncio.sleep) -> "VulnerabilityCatalog":
        """Build a catalog from application settings.

        Args:
            settings: Application settings.
            delay: Awaitable sleep used to simulate latency.

        Returns:
            Catalog over the configured dataset.
        """
        catalog = cls(
            load_records(settings.catalog.dataset_path),
            search_delay=settings.catalog.search_delay,
            detail_delay=settings.catalog.detail_delay,
            delay=delay,
        )
        logger.info(f"Catalog ready with {len(catalog)} vulnerabilities")
        return catalog

    @property
    def records(self) -> MappingProxyType[str, VulnerabilityRecord]:
        """Read-only mapping of CVE id to record."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[VulnerabilityRecord]:
        return iter(self._records.values())

    def __contains__(self, cve_id: object) -> bool:
        return cve_id in self._records

    def classify(self, image: str) -> PackageFamily | None:
        """Find the package family an image name belongs to.

        Args:
            image: Container image name, in any case.

        Returns:
            The first matching family, or None if no family matches.
        """
        lower_image = image.lower()
        for family in self.families:
            if family.matches_image(lower_image):
                return family
        return None

    def match(self, image: str) -> list[VulnerabilityRecord]:
        """Get the records affecting an image, without any delay.

        Args:
            image: Container image name, e.g. ``nginx:1.25``.

        Returns:
            Matching records in dataset order, empty if the image is
            not recognised.
        """
        family = self.classify(image)
        if family is None:
            logger.debug(f"No package family for image {image!r}")
            return []

        results = [record for record in self if family.affects(record)]
        logger.debug(f"Image {image!r} classified as {family.name}: {len(results)} match(es)")
        return results

    async def search(self, image: str, registry: str | None = None) -> list[VulnerabilityRecord]:
        """Search the catalog for vulnerabilities affecting an image.

        Args:
            image: Container image name.
            registry: Registry the image comes from. Accepted for
                compatibility with real scanners; not used.

        Returns:
            Matching records in dataset order.
        """
        logger.info(f"Searching vulnerabilities for {image!r}")
        await self._delay(self.search_delay)
        return self.match(image)

    async def get_by_id(self, cve_id: str) -> VulnerabilityRecord | None:
        """Look up a single record.

        Args:
            cve_id: CVE identifier. Matching is exact and case-sensitive.

        Returns:
            The record, or None if the catalog has no such id.
        """
        await self._delay(self.detail_delay)
        record = self._records.get(cve_id)
        if record is None:
            logger.debug(f"{cve_id} not found in catalog")
        return record

    def summarize(self, records: Iterable[VulnerabilityRecord] | None = None) -> SeveritySummary:
        """Count records by severity.

        Args:
            records: Records to count. None counts the whole catalog.
        """
        return SeveritySummary.from_records(self if records is None else records)
