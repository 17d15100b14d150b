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
Resolution of a requested runtime version to a base image.
Picks the exact catalog tag when there is one, otherwise the nearest catalog
version or the requested version itself, and reports the substitution as a
warning alongside the result.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..MODELS.instructions import From
from ..MODELS.version import Version
from .catalog import DEFAULT_CATALOG, DEFAULT_IMAGE, CatalogEntry, VersionCatalog

logger = logging.getLogger(__name__)


class WarningKind(str, Enum):
    """Kinds of advisory notices a resolution can carry."""

    CLOSEST_MATCH_USED = "ClosestMatchUsed"
    UNVERIFIED_VERSION_USED = "UnverifiedVersionUsed"


@dataclass(frozen=True)
class ResolutionWarning:
    """Non-fatal notice that the resolved image differs from an exact catalog match."""

    kind: WarningKind
    requested: Version
    substituted: Version
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving a version: the image to build from plus any warnings.
    """

    image: str
    tag: str
    version: Version
    warnings: Tuple[ResolutionWarning, ...] = ()

    @property
    def reference(self) -> str:
        return f"{self.image}:{self.tag}"

    @property
    def exact(self) -> bool:
        return not self.warnings

    def to_from(self) -> From:
        """The FROM instruction for the resolved image."""
        return From(image=self.image, tag=self.tag)


class VersionResolver:
    """
    Maps requested runtime versions to base image tags of one image family.
    """

    def __init__(self, catalog: VersionCatalog = DEFAULT_CATALOG, image: str = DEFAULT_IMAGE):
        """
        :param catalog: Known image tags; never modified by the resolver.
        :param image: Image name the tags belong to.
        """
        self.catalog = catalog
        self.image = image

    def resolve(self, requested: Version, nearest: bool = True) -> Resolution:
        """
        Resolve a version to an image tag.

        :param requested: The runtime version wanted.
        :param nearest: Substitute the closest catalog version when there is no
            exact match. When False the requested version is used as the tag
            even though the image may not exist.
        :return: The resolution, with a warning when no exact match was found.
        """
        tag = self.catalog.lookup(requested)
        if tag is not None:
            logger.debug("Exact base image match for %s: %s:%s", requested, self.image, tag)
            return Resolution(image=self.image, tag=tag, version=requested)

        closest = self.closest(requested) if nearest else None
        if closest is None:
            warning = ResolutionWarning(
                kind=WarningKind.UNVERIFIED_VERSION_USED,
                requested=requested,
                substituted=requested,
                message=(
                    f"No base image found for version {requested} and closest match is "
                    f"disabled, returning input: {self.image}:{requested}"
                ),
            )
            logger.warning(warning.message)
            return Resolution(image=self.image, tag=str(requested), version=requested, warnings=(warning,))

        warning = ResolutionWarning(
            kind=WarningKind.CLOSEST_MATCH_USED,
            requested=requested,
            substituted=closest.version,
            message=(
                f"No base image found for version {requested}, using closest match "
                f"{closest.version}: {self.image}:{closest.tag}"
            ),
        )
        logger.warning(warning.message)
        return Resolution(image=self.image, tag=closest.tag, version=closest.version, warnings=(warning,))

    def resolve_string(self, text: str, nearest: bool = True) -> Resolution:
        """
        Parse and resolve a version string.

        :raises MalformedVersion: If the text is not a valid version.
        """
        return self.resolve(Version.parse(text), nearest=nearest)

    def closest(self, requested: Version) -> Optional[CatalogEntry]:
        """
        The catalog entry nearest to the requested version.

        Entries are ascending, so keeping the first minimum resolves ties to
        the smaller version.
        """
        best = None
        best_distance = None
        for entry in self.catalog.all():
            distance = entry.version.distance(requested)
            if best_distance is None or distance < best_distance:
                best, best_distance = entry, distance
        return best
