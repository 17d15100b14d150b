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
Parsers for environment description files (YAML).

Example::

    r_version: "3.6.3"
    maintainer: "${USER}"
    system_requirements: [libxml2-dev]
    packages:
      - name: ggplot2
      - {name: dplyr, version: "1.0.7"}
      - {name: sf, source: github, repo: r-spatial/sf, ref: v1.0-9}
    files: [analysis.R]
    cmd: {program: Rscript, params: [analysis.R]}
"""
import logging
import os
from typing import Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ..MODELS.environment import EnvironmentDescription
from ..MODELS.errors import EnvironmentFileError
from ..UTILS.string_interpolation import EnvironmentInterpolator

logger = logging.getLogger(__name__)


class EnvironmentParser:
    """
    Parser for environment description files.
    """
    def __init__(self, context: Optional[Mapping[str, str]] = None, env_file: Optional[str] = None):
        """
        Initializes the parser with the variables used for interpolation.

        :param context: Variables for interpolation; defaults to the process environment.
        :param env_file: Optional .env file whose values override the context.
        """
        self.context: Dict[str, str] = dict(os.environ if context is None else context)
        if env_file:
            if not os.path.exists(env_file):
                raise EnvironmentFileError(f"Environment file not found: {env_file}")
            values = dotenv_values(env_file)
            self.context.update({k: v for k, v in values.items() if v is not None})

    def parse(self, path: str) -> EnvironmentDescription:
        """
        Parses an environment description from a path.

        :param path: Path to the YAML file.
        :return: The environment description.
        :raises EnvironmentFileError: If the file is missing or invalid.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise EnvironmentFileError(f"Cannot read {path}: {e}") from e
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> EnvironmentDescription:
        """
        Parses an environment description from YAML text.

        Variables that are not set interpolate to an empty string, with a warning.
        """
        try:
            content = EnvironmentInterpolator.interpolate(content, self.context)
        except KeyError as e:
            logger.warning("Unset variable in environment file: %s", e)
            content = EnvironmentInterpolator.interpolate(content, self.context, strict=False)

        # YAML rejects tabs even in otherwise blank content
        if not content.strip():
            content = ""

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise EnvironmentFileError(f"Invalid YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise EnvironmentFileError("Environment file must contain a mapping at the top level")

        # YAML reads 3.6 or 4 as numbers
        if isinstance(data.get("r_version"), (int, float)):
            data["r_version"] = str(data["r_version"])

        try:
            return EnvironmentDescription.model_validate(data)
        except ValidationError as e:
            raise EnvironmentFileError(f"Invalid environment description: {e}") from e
