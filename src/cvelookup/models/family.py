"""Package families used to classify container image names."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from cvelookup.models.cve import VulnerabilityRecord


class MatchMode(StrEnum):
    """How a family compares its package names to a record's packages."""

    EXACT = "exact"
    PREFIX = "prefix"


class PackageFamily(BaseModel):
    """One row of the image classification table.

    An image belongs to the family when its lowercased name contains any
    of ``keywords``. A record is affected when one of its packages equals
    (``EXACT``) or starts with (``PREFIX``) one of ``packages``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    keywords: tuple[str, ...] = Field(..., min_length=1)
    packages: tuple[str, ...] = Field(..., min_length=1)
    match_mode: MatchMode = MatchMode.EXACT

    def matches_image(self, image: str) -> bool:
        """Check if an image name falls into this family.

        Args:
            image: Image name, already lowercased.
        """
        return any(keyword in image for keyword in self.keywords)

    def matches_package(self, package: str) -> bool:
        """Check if a package name belongs to this family.

        Args:
            package: Package name from a record.
        """
        if self.match_mode is MatchMode.PREFIX:
            return package.startswith(self.packages)
        return package in self.packages

    def affects(self, record: VulnerabilityRecord) -> bool:
        """Check if any of the record's packages belongs to this family."""
        return any(self.matches_package(pkg) for pkg in record.affected_packages)


# Order matters: the first family whose keywords match the image wins.
DEFAULT_PACKAGE_FAMILIES: tuple[PackageFamily, ...] = (
    PackageFamily(name="web-server", keywords=("nginx", "apache"), packages=("nginx", "apache")),
    PackageFamily(
        name="sql-database",
        keywords=("postgres", "mysql", "mariadb"),
        packages=("postgres", "mysql", "mariadb"),
    ),
    PackageFamily(name="node", keywords=("node", "nodejs"), packages=("node", "npm")),
    PackageFamily(name="python", keywords=("python",), packages=("python", "python3")),
    PackageFamily(name="java", keywords=("java", "openjdk"), packages=("java", "openjdk")),
    PackageFamily(name="os", keywords=("ubuntu", "debian"), packages=("ubuntu", "debian")),
    PackageFamily(name="redis", keywords=("redis",), packages=("redis",)),
    PackageFamily(name="golang", keywords=("golang", "go"), packages=("golang", "go")),
    PackageFamily(
        name="container-runtime",
        keywords=("docker", "container"),
        packages=("docker", "containerd", "kubernetes"),
    ),
    PackageFamily(name="wordpress", keywords=("wordpress", "wp"), packages=("wordpress",)),
    PackageFamily(
        name="ruby",
        keywords=("ruby", "rails"),
        packages=("ruby", "rails", "ruby-on-rails"),
    ),
    PackageFamily(name="php", keywords=("php",), packages=("php", "php-fpm")),
    PackageFamily(name="mongodb", keywords=("mongo",), packages=("mongodb", "mongo")),
    PackageFamily(name="aws", keywords=("aws",), packages=("aws",), match_mode=MatchMode.PREFIX),
    PackageFamily(
        name="elastic",
        keywords=("elastic", "elk"),
        packages=("elasticsearch", "elk", "kibana"),
    ),
    PackageFamily(
        name="windows",
        keywords=("windows",),
        packages=("windows",),
        match_mode=MatchMode.PREFIX,
    ),
)
