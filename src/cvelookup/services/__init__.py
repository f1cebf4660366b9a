"""Services for cvelookup."""

from cvelookup.services.catalog_service import (
    DatasetError,
    VulnerabilityCatalog,
    load_records,
)
from cvelookup.services.recent_search_service import POPULAR_EXAMPLES, RecentSearchStore

__all__ = [
    "POPULAR_EXAMPLES",
    "DatasetError",
    "RecentSearchStore",
    "VulnerabilityCatalog",
    "load_records",
]
