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
Runtime version values.
Parses version strings like '3.3.3' into comparable (major, minor, patch) triples.
"""

import re
from dataclasses import dataclass

from .errors import MalformedVersion

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$", re.ASCII)


@dataclass(frozen=True, order=True)
class Version:
    """
    An immutable (major, minor, patch) version.

    Versions compare lexicographically on the triple, so '3.10.0' sorts after
    '3.9.9'.
    """

    major: int
    minor: int
    patch: int

    # Weights used by encode(); a minor step always outweighs any patch step
    # and a major step any minor step, as long as components stay below 1000.
    MAJOR_WEIGHT = 1_000_000
    MINOR_WEIGHT = 1_000

    def __post_init__(self):
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise MalformedVersion(str(value), f"{name} must be a non-negative integer")

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a version string.

        Args:
            text: Version string with exactly three numeric components, e.g. '3.2.5'.

        Returns:
            The parsed Version.

        Raises:
            MalformedVersion: If the text is not of the form 'major.minor.patch'.
        """
        if not isinstance(text, str):
            raise MalformedVersion(repr(text), "expected a string")

        match = _VERSION_PATTERN.match(text.strip())
        if not match:
            raise MalformedVersion(text, "expected 'major.minor.patch'")

        major, minor, patch = (int(part) for part in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    def encode(self) -> int:
        """Scalar encoding used to measure the distance between versions."""
        return self.major * self.MAJOR_WEIGHT + self.minor * self.MINOR_WEIGHT + self.patch

    def distance(self, other: "Version") -> int:
        """Absolute distance between the encodings of two versions."""
        return abs(self.encode() - other.encode())

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"
