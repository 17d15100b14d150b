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
Builders for seeding a Dockerfile model from an environment description.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..MODELS.dockerfile import Dockerfile
from ..MODELS.environment import CommandSpec, EnvironmentDescription
from ..MODELS.instructions import (
    Cmd, Comment, Copy, Entrypoint, Env, Expose, From, Label, Maintainer, Workdir,
)
from ..REGISTRY.resolver import Resolution, ResolutionWarning, VersionResolver
from .install_commands import package_installs, system_install

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """
    A generated Dockerfile together with the warnings raised while building it.
    """
    dockerfile: Dockerfile
    resolution: Optional[Resolution] = None

    @property
    def warnings(self) -> Tuple[ResolutionWarning, ...]:
        return self.resolution.warnings if self.resolution else ()


class DockerfileBuilder:
    """
    Turns an EnvironmentDescription into a Dockerfile model.

    Instructions are laid out as: base image, maintainer, environment
    variables, system packages, R packages, working directory, copied files,
    labels, exposed ports and finally ENTRYPOINT and CMD.
    """
    def __init__(self, resolver: Optional[VersionResolver] = None, nearest: bool = True):
        """
        Initializes the DockerfileBuilder.

        :param resolver: Resolver for the base image version.
        :param nearest: Use the closest available base image when the requested
            version has no image.
        """
        self.resolver = resolver or VersionResolver()
        self.nearest = nearest

    def build(self, description: EnvironmentDescription) -> BuildResult:
        """
        Builds the Dockerfile for an environment.

        :param description: The environment to describe.
        :return: The Dockerfile and the base image resolution, if any.
        :raises MalformedVersion: If the requested R version cannot be parsed.
        :raises InvalidInstructionArgument: If a value in the description is invalid.
        """
        image, resolution = self.base_image(description)

        maintainer = Maintainer(name=description.maintainer) if description.maintainer else None
        dockerfile = Dockerfile(
            image=image,
            maintainer=maintainer,
            cmd=self._command(Cmd, description.cmd),
        )
        if description.entrypoint:
            dockerfile.append(self._command(Entrypoint, description.entrypoint))

        if description.env:
            dockerfile.append(Env(variables=description.env))

        system_run = system_install(description.system_requirements)
        if system_run:
            dockerfile.append(system_run)
        dockerfile.extend(package_installs(description.packages, repos=description.cran_mirror))

        dockerfile.append(Workdir(path=description.workdir))
        for path in description.files:
            dockerfile.append(Copy(src=(path,), dest=path))

        if description.labels:
            dockerfile.append(Label(data=description.labels))

        for exposed in description.expose:
            dockerfile.append(Expose(
                port=exposed.port,
                protocol=exposed.protocol,
                host_port=exposed.host_port,
            ))

        for text in description.comments:
            dockerfile.add_footer(Comment(text=text))

        logger.info("Built Dockerfile with %d instructions from %s", len(dockerfile), image.reference)
        return BuildResult(dockerfile=dockerfile, resolution=resolution)

    def base_image(self, description: EnvironmentDescription) -> Tuple[From, Optional[Resolution]]:
        """
        Picks the FROM instruction for an environment.

        An explicit image wins over the R version; without either, the newest
        catalog image is used.
        """
        if description.image:
            logger.debug("Using base image override %s", description.image)
            return From.parse(description.image), None

        if description.r_version:
            resolution = self.resolver.resolve_string(description.r_version, nearest=self.nearest)
            return resolution.to_from(), resolution

        latest = self.resolver.catalog.latest()
        if latest is None:
            raise ValueError("No R version given and the image catalog is empty")
        logger.debug("No R version given, using newest image %s", latest.tag)
        resolution = self.resolver.resolve(latest.version)
        return resolution.to_from(), resolution

    @staticmethod
    def _command(kind, spec: CommandSpec):
        return kind(program=spec.program, params=spec.params, form=spec.form)
