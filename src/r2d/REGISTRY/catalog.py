# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Catalog of the pre-built rocker/r-ver base images.

The catalog is built once when this module is imported and is read-only
afterwards, so it can be shared freely between resolvers.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..MODELS.version import Version

DEFAULT_IMAGE = "rocker/r-ver"

# Versioned tags published for rocker/r-ver.
R_VER_TAGS = (
    "3.1.0", "3.1.1", "3.1.2", "3.1.3",
    "3.2.0", "3.2.1", "3.2.2", "3.2.3", "3.2.4", "3.2.5",
    "3.3.0", "3.3.1", "3.3.2", "3.3.3",
    "3.4.0", "3.4.1", "3.4.2", "3.4.3", "3.4.4",
    "3.5.0", "3.5.1", "3.5.2", "3.5.3",
    "3.6.0", "3.6.1", "3.6.2", "3.6.3",
    "4.0.0", "4.0.1", "4.0.2", "4.0.3", "4.0.4", "4.0.5",
    "4.1.0", "4.1.1", "4.1.2", "4.1.3",
    "4.2.0", "4.2.1", "4.2.2", "4.2.3",
    "4.3.0", "4.3.1", "4.3.2", "4.3.3",
    "4.4.0", "4.4.1", "4.4.2", "4.4.3",
    "4.5.0", "4.5.1",
)


@dataclass(frozen=True)
class CatalogEntry:
    """A base image tag together with the runtime version it ships."""

    version: Version
    tag: str


class VersionCatalog:
    """
    Immutable, version-ordered set of known base image tags.
    """

    def __init__(self, entries: Iterable[CatalogEntry]):
        """
        Args:
            entries: Catalog entries in any order.

        Raises:
            ValueError: If two entries share the same version.
        """
        by_version: Dict[Version, str] = {}
        for entry in entries:
            if entry.version in by_version:
                raise ValueError(f"Duplicate catalog version: {entry.version}")
            by_version[entry.version] = entry.tag

        self._entries: Tuple[CatalogEntry, ...] = tuple(
            CatalogEntry(version=version, tag=by_version[version]) for version in sorted(by_version)
        )
        self._by_version = by_version

    @classmethod
    def from_tags(cls, tags: Iterable[str]) -> "VersionCatalog":
        """Build a catalog whose tags are the version strings themselves."""
        return cls(CatalogEntry(version=Version.parse(tag), tag=tag) for tag in tags)

    def lookup(self, version: Version) -> Optional[str]:
        """Exact-match lookup of the tag for a version."""
        return self._by_version.get(version)

    def all(self) -> Tuple[CatalogEntry, ...]:
        """All entries in ascending version order."""
        return self._entries

    def versions(self) -> Tuple[Version, ...]:
        return tuple(entry.version for entry in self._entries)

    def latest(self) -> Optional[CatalogEntry]:
        return self._entries[-1] if self._entries else None

    def __contains__(self, version: object) -> bool:
        return version in self._by_version

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"VersionCatalog({len(self._entries)} entries)"


DEFAULT_CATALOG = VersionCatalog.from_tags(R_VER_TAGS)
