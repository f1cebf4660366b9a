"""cvelookup - Simulated vulnerability lookup for container images.

Match container image names against a curated CVE catalog and keep a
short history of recent searches.
"""

__version__ = "1.0.0"

from cvelookup.config import Settings

__all__ = ["Settings", "__version__"]
