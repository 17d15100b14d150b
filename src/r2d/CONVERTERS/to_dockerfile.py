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
Converters for rendering Dockerfile models to Dockerfile text.
"""
import json
import logging
import os
from typing import Callable, Dict, List, Type

from ..MODELS.dockerfile import Dockerfile
from ..MODELS.instructions import (
    Arg, Cmd, Comment, Copy, Entrypoint, Env, Expose, Form, From, Instruction,
    Label, Maintainer, Run, StopSignal, User, Volume, Workdir,
)

logger = logging.getLogger(__name__)

LINE_CONTINUATION = " \\\n"
CONTINUATION_INDENT = "  "


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _pairs(items) -> List[str]:
    return [f"{key}={_quote(value)}" for key, value in items]


def _command(instruction) -> str:
    if instruction.form == Form.SHELL:
        return " ".join(instruction.argv)
    return json.dumps(instruction.argv, ensure_ascii=False)


def _render_from(instruction: From) -> List[str]:
    return [f"FROM {instruction.reference}"]


def _render_maintainer(instruction: Maintainer) -> List[str]:
    return [f"LABEL maintainer={_quote(instruction.name)}"]


def _render_label(instruction: Label) -> List[str]:
    pairs = _pairs(instruction.items())
    if instruction.multi_line and len(pairs) > 1:
        separator = LINE_CONTINUATION + CONTINUATION_INDENT
        return ["LABEL " + separator.join(pairs)]
    return ["LABEL " + " ".join(pairs)]


def _render_command(instruction) -> List[str]:
    return [f"{instruction.instruction} {_command(instruction)}"]


def _render_copy(instruction: Copy) -> List[str]:
    return ["COPY " + json.dumps([*instruction.src, instruction.dest], ensure_ascii=False)]


def _render_workdir(instruction: Workdir) -> List[str]:
    return [f"WORKDIR {instruction.path}"]


def _render_env(instruction: Env) -> List[str]:
    return ["ENV " + " ".join(_pairs(instruction.items()))]


def _render_expose(instruction: Expose) -> List[str]:
    port = str(instruction.port)
    if instruction.protocol:
        port = f"{port}/{instruction.protocol}"
    lines = []
    # EXPOSE cannot publish ports; the host mapping is kept as documentation
    if instruction.host_port is not None:
        lines.append(f"# host port {instruction.host_port}")
    lines.append(f"EXPOSE {port}")
    return lines


def _render_comment(instruction: Comment) -> List[str]:
    if not instruction.text:
        return ["#"]
    return [f"# {line}".rstrip() for line in instruction.text.splitlines()]


def _render_user(instruction: User) -> List[str]:
    if instruction.group:
        return [f"USER {instruction.user}:{instruction.group}"]
    return [f"USER {instruction.user}"]


def _render_volume(instruction: Volume) -> List[str]:
    return ["VOLUME " + json.dumps(list(instruction.paths), ensure_ascii=False)]


def _render_arg(instruction: Arg) -> List[str]:
    if instruction.default is None:
        return [f"ARG {instruction.name}"]
    return [f"ARG {instruction.name}={_quote(instruction.default)}"]


def _render_stopsignal(instruction: StopSignal) -> List[str]:
    return [f"STOPSIGNAL {instruction.signal}"]


RENDERERS: Dict[Type[Instruction], Callable[..., List[str]]] = {
    From: _render_from,
    Maintainer: _render_maintainer,
    Label: _render_label,
    Run: _render_command,
    Entrypoint: _render_command,
    Cmd: _render_command,
    Copy: _render_copy,
    Workdir: _render_workdir,
    Env: _render_env,
    Expose: _render_expose,
    Comment: _render_comment,
    User: _render_user,
    Volume: _render_volume,
    Arg: _render_arg,
    StopSignal: _render_stopsignal,
}


def render_instruction(instruction: Instruction) -> List[str]:
    """
    Renders a single instruction.

    :param instruction: The instruction to render.
    :return: The Dockerfile lines for the instruction.
    :raises TypeError: If no renderer exists for the instruction type.
    """
    for kind in type(instruction).__mro__:
        renderer = RENDERERS.get(kind)
        if renderer is not None:
            return renderer(instruction)
    raise TypeError(f"No renderer for instruction type {type(instruction).__name__}")


def render(dockerfile: Dockerfile) -> str:
    """
    Renders a Dockerfile model to text.

    The output depends only on the instructions, so equal Dockerfiles render
    to identical text.

    :param dockerfile: The Dockerfile to render.
    :return: Dockerfile text ending in a newline, or an empty string.
    """
    lines: List[str] = []
    for instruction in dockerfile.instructions:
        lines.extend(render_instruction(instruction))
    for comment in dockerfile.footer:
        lines.extend(render_instruction(comment))
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


class DockerfileConverter:
    """
    Writes a Dockerfile model to disk.
    """

    def __init__(self, dockerfile: Dockerfile):
        """
        Initializes the converter.

        :param dockerfile: The Dockerfile to write.
        """
        self.dockerfile = dockerfile

    def convert(self, output_path: str = "Dockerfile") -> str:
        """
        Renders the Dockerfile and writes it to a file.

        :param output_path: Path of the file to write; parent directories are created.
        :return: The path written to.
        """
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(render(self.dockerfile))

        logger.info("Dockerfile written to %s", output_path)
        return output_path
