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
Image reference parsing.
Splits references like 'rocker/r-ver:3.3.3' or 'ghcr.io/org/image@sha256:abc'
into name, tag and digest without adding registry or tag defaults.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """
    Parsed Docker image reference.

    Examples:
        - rocker/r-ver -> name 'rocker/r-ver', no tag
        - rocker/r-ver:3.3.3 -> name 'rocker/r-ver', tag '3.3.3'
        - localhost:5000/r-base:4.0.0 -> registry 'localhost:5000', tag '4.0.0'
        - rocker/r-ver@sha256:abc123 -> digest 'sha256:abc123'
    """

    repository: str
    registry: Optional[str] = None
    tag: Optional[str] = None
    digest: Optional[str] = None

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse a Docker image reference string.

        Args:
            reference: Image reference string (e.g., 'rocker/r-ver:3.6.3')

        Returns:
            Parsed ImageReference object.

        Raises:
            ValueError: If the reference is empty or has an empty name, tag or digest.
        """
        if not reference or not reference.strip():
            raise ValueError("Empty image reference")
        reference = reference.strip()

        digest = None
        if "@" in reference:
            reference, digest = reference.rsplit("@", 1)
            if not digest:
                raise ValueError("Empty digest in image reference")

        tag = None
        last_colon = reference.rfind(":")
        if last_colon != -1:
            after_colon = reference[last_colon + 1 :]
            # A colon followed by a path belongs to a registry port
            if "/" not in after_colon:
                if not after_colon:
                    raise ValueError("Empty tag in image reference")
                tag = after_colon
                reference = reference[:last_colon]

        parts = reference.split("/")
        registry = None
        if len(parts) > 1:
            first_part = parts[0]
            if "." in first_part or ":" in first_part or first_part == "localhost":
                registry = first_part
                parts = parts[1:]

        repository = "/".join(parts)
        if not repository:
            raise ValueError("Empty repository in image reference")

        return cls(repository=repository, registry=registry, tag=tag, digest=digest)

    @property
    def name(self) -> str:
        """Image name including the registry, without tag or digest."""
        if self.registry:
            return f"{self.registry}/{self.repository}"
        return self.repository

    def __str__(self) -> str:
        if self.digest:
            return f"{self.name}@{self.digest}"
        if self.tag:
            return f"{self.name}:{self.tag}"
        return self.name
