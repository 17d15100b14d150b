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
Models for the instructions of a Dockerfile.

Every instruction is an immutable value: constructing one validates its
arguments, and an instance can only be replaced, never changed in place.
"""
import re
from enum import Enum
from typing import ClassVar, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .errors import InvalidInstructionArgument

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SIGNAL = re.compile(r"^(SIG[A-Z0-9+\-]+|[1-9][0-9]*)$")

PROTOCOLS = ("tcp", "udp")


class Form(str, Enum):
    """
    Syntax used for RUN, CMD and ENTRYPOINT.
    """
    EXEC = "exec"
    SHELL = "shell"


def _require_text(value: str, what: str = "value") -> str:
    if not value or not value.strip():
        raise ValueError(f"{what} must not be empty")
    return value


def _check_port(value: int, field: str) -> int:
    if not 1 <= value <= 65535:
        raise ValueError(f"{field} must be an integer between 1 and 65535")
    return value


def _reject_bool(value):
    # Lax mode would turn True into 1 before any after-validator sees it
    if isinstance(value, bool):
        raise ValueError("must be an integer, not a boolean")
    return value


def _as_pairs(value):
    if isinstance(value, Mapping):
        return tuple(value.items())
    return value


def _check_pairs(value: Tuple[Tuple[str, str], ...], what: str) -> Tuple[Tuple[str, str], ...]:
    if not value:
        raise ValueError(f"at least one {what} is required")
    keys = [key for key, _ in value]
    if len(set(keys)) != len(keys):
        raise ValueError(f"duplicate {what} names")
    return value


def _strings(value) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, tuple):
        for item in value:
            yield from _strings(item)


class Instruction(BaseModel):
    """
    Base class for a single Dockerfile instruction.

    Subclasses set ``instruction`` to the directive keyword they render as.
    Text fields may not contain line breaks unless ``single_line`` is False,
    since each instruction renders as one directive.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    instruction: ClassVar[str] = ""
    single_line: ClassVar[bool] = True

    def __init__(self, **data):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise _as_invalid_argument(type(self), exc) from exc

    @model_validator(mode="after")
    def _no_line_breaks(self) -> "Instruction":
        if self.single_line:
            for name in type(self).model_fields:
                for text in _strings(getattr(self, name)):
                    if "\n" in text or "\r" in text:
                        raise InvalidInstructionArgument(name, "must not contain line breaks")
        return self

    @property
    def is_terminal(self) -> bool:
        """Whether the instruction belongs at the end of the Dockerfile."""
        return False

    def arguments(self) -> List[str]:
        """The parameters of the directive, as plain strings."""
        return []

    def render(self) -> List[str]:
        """The Dockerfile lines for this instruction."""
        from ..CONVERTERS.to_dockerfile import render_instruction

        return render_instruction(self)


def _as_invalid_argument(cls, exc: ValidationError) -> InvalidInstructionArgument:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or cls.__name__
    cause = error.get("ctx", {}).get("error")
    constraint = str(cause) if cause is not None else error["msg"]
    return InvalidInstructionArgument(field, constraint)


class From(Instruction):
    """
    Base image reference; always the first instruction of a Dockerfile.
    """
    instruction: ClassVar[str] = "FROM"

    image: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    @field_validator("image")
    @classmethod
    def _image_not_empty(cls, value: str) -> str:
        _require_text(value, "image name")
        if any(ch.isspace() for ch in value):
            raise ValueError("image name must not contain whitespace")
        return value

    @field_validator("tag", "digest")
    @classmethod
    def _no_blank_parts(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            _require_text(value)
        return value

    @model_validator(mode="after")
    def _tag_or_digest(self) -> "From":
        if self.tag is not None and self.digest is not None:
            raise InvalidInstructionArgument("digest", "tag and digest are mutually exclusive")
        return self

    @classmethod
    def parse(cls, reference: str) -> "From":
        """
        Build a FROM instruction from a reference such as 'rocker/r-ver:3.3.3'.
        """
        from ..REGISTRY.image_reference import ImageReference

        try:
            ref = ImageReference.parse(reference)
        except ValueError as exc:
            raise InvalidInstructionArgument("image", str(exc)) from exc
        return cls(image=ref.name, tag=ref.tag, digest=ref.digest)

    @property
    def reference(self) -> str:
        if self.digest:
            return f"{self.image}@{self.digest}"
        if self.tag:
            return f"{self.image}:{self.tag}"
        return self.image

    def arguments(self) -> List[str]:
        return [self.reference]


class Maintainer(Instruction):
    """
    Author of the image, written as the conventional ``maintainer`` label.
    """
    instruction: ClassVar[str] = "LABEL"

    name: str

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        return _require_text(value, "maintainer")

    def arguments(self) -> List[str]:
        return [f"maintainer={self.name}"]


class Label(Instruction):
    """
    Key/value metadata.

    All pairs of one Label render on a single line unless ``multi_line`` is
    set, in which case each pair gets its own continuation line. ``prefix``
    is prepended to every key, e.g. 'org.opencontainers.image.'.
    """
    instruction: ClassVar[str] = "LABEL"

    data: Tuple[Tuple[str, str], ...]
    multi_line: bool = False
    prefix: Optional[str] = None

    @field_validator("data", mode="before")
    @classmethod
    def _mapping_to_pairs(cls, value):
        return _as_pairs(value)

    @field_validator("data")
    @classmethod
    def _data_not_empty(cls, value: Tuple[Tuple[str, str], ...]) -> Tuple[Tuple[str, str], ...]:
        for key, _ in value:
            _require_text(key, "label key")
        return _check_pairs(value, "label")

    @field_validator("prefix")
    @classmethod
    def _prefix_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            _require_text(value, "label prefix")
        return value

    def items(self) -> List[Tuple[str, str]]:
        """Label pairs in insertion order with the prefix applied."""
        prefix = self.prefix or ""
        return [(f"{prefix}{key}", value) for key, value in self.data]

    def arguments(self) -> List[str]:
        return [f"{key}={value}" for key, value in self.items()]


class _Command(Instruction):
    program: str
    params: Tuple[str, ...] = ()
    form: Form = Form.EXEC

    @field_validator("program")
    @classmethod
    def _program_not_empty(cls, value: str) -> str:
        return _require_text(value, "program")

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.params]

    def arguments(self) -> List[str]:
        return self.argv


class Run(_Command):
    """
    Command executed while building the image.
    """
    instruction: ClassVar[str] = "RUN"


class Entrypoint(_Command):
    """
    Executable the container runs; rendered before CMD at the end of the file.
    """
    instruction: ClassVar[str] = "ENTRYPOINT"

    @property
    def is_terminal(self) -> bool:
        return True


class Cmd(_Command):
    """
    Default start-up command; always the last instruction.
    """
    instruction: ClassVar[str] = "CMD"

    @property
    def is_terminal(self) -> bool:
        return True


class Copy(Instruction):
    """
    Copies one or more files from the build context into the image.
    """
    instruction: ClassVar[str] = "COPY"

    src: Tuple[str, ...]
    dest: str

    @field_validator("src", mode="before")
    @classmethod
    def _single_source(cls, value):
        if isinstance(value, str):
            return (value,)
        return value

    @field_validator("src")
    @classmethod
    def _sources_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("at least one source path is required")
        for path in value:
            _require_text(path, "source path")
        return value

    @field_validator("dest")
    @classmethod
    def _dest_not_empty(cls, value: str) -> str:
        return _require_text(value, "destination")

    def arguments(self) -> List[str]:
        return [*self.src, self.dest]


class Workdir(Instruction):
    instruction: ClassVar[str] = "WORKDIR"

    path: str

    @field_validator("path")
    @classmethod
    def _path_not_empty(cls, value: str) -> str:
        return _require_text(value, "path")

    def arguments(self) -> List[str]:
        return [self.path]


class Env(Instruction):
    """
    Environment variables set in the image.
    """
    instruction: ClassVar[str] = "ENV"

    variables: Tuple[Tuple[str, str], ...]

    @field_validator("variables", mode="before")
    @classmethod
    def _mapping_to_pairs(cls, value):
        return _as_pairs(value)

    @field_validator("variables")
    @classmethod
    def _valid_names(cls, value: Tuple[Tuple[str, str], ...]) -> Tuple[Tuple[str, str], ...]:
        for name, _ in value:
            if not _IDENTIFIER.match(name):
                raise ValueError(f"{name!r} is not a valid variable name")
        return _check_pairs(value, "variable")

    def items(self) -> List[Tuple[str, str]]:
        return list(self.variables)

    def arguments(self) -> List[str]:
        return [f"{name}={value}" for name, value in self.variables]


class Expose(Instruction):
    """
    Port the container listens on.

    ``host_port`` documents the intended host mapping only; the EXPOSE
    directive itself cannot publish ports.
    """
    instruction: ClassVar[str] = "EXPOSE"

    port: int
    protocol: Optional[str] = None
    host_port: Optional[int] = None

    @field_validator("port", "host_port", mode="before")
    @classmethod
    def _not_boolean(cls, value):
        return _reject_bool(value)

    @field_validator("port")
    @classmethod
    def _port_range(cls, value: int) -> int:
        return _check_port(value, "port")

    @field_validator("host_port")
    @classmethod
    def _host_port_range(cls, value: Optional[int]) -> Optional[int]:
        if value is not None:
            _check_port(value, "host_port")
        return value

    @field_validator("protocol")
    @classmethod
    def _known_protocol(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.lower()
        if value not in PROTOCOLS:
            raise ValueError(f"protocol must be one of {', '.join(PROTOCOLS)}")
        return value

    def arguments(self) -> List[str]:
        if self.protocol:
            return [f"{self.port}/{self.protocol}"]
        return [str(self.port)]


class Comment(Instruction):
    """
    Free text; every line of it is rendered with a comment prefix.
    """
    instruction: ClassVar[str] = "#"
    single_line: ClassVar[bool] = False

    text: str

    def arguments(self) -> List[str]:
        return [self.text]


class User(Instruction):
    instruction: ClassVar[str] = "USER"

    user: str
    group: Optional[str] = None

    @field_validator("user")
    @classmethod
    def _user_not_empty(cls, value: str) -> str:
        return _require_text(value, "user")

    @field_validator("group")
    @classmethod
    def _group_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            _require_text(value, "group")
        return value

    def arguments(self) -> List[str]:
        if self.group:
            return [f"{self.user}:{self.group}"]
        return [self.user]


class Volume(Instruction):
    instruction: ClassVar[str] = "VOLUME"

    paths: Tuple[str, ...]

    @field_validator("paths", mode="before")
    @classmethod
    def _single_path(cls, value):
        if isinstance(value, str):
            return (value,)
        return value

    @field_validator("paths")
    @classmethod
    def _paths_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("at least one path is required")
        for path in value:
            _require_text(path, "path")
        return value

    def arguments(self) -> List[str]:
        return list(self.paths)


class Arg(Instruction):
    """
    Build-time variable, optionally with a default value.
    """
    instruction: ClassVar[str] = "ARG"

    name: str
    default: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"{value!r} is not a valid argument name")
        return value

    def arguments(self) -> List[str]:
        if self.default is None:
            return [self.name]
        return [f"{self.name}={self.default}"]


class StopSignal(Instruction):
    """
    System call signal sent to the container to make it exit.
    """
    instruction: ClassVar[str] = "STOPSIGNAL"

    signal: str

    @field_validator("signal", mode="before")
    @classmethod
    def _signal_number(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("signal")
    @classmethod
    def _known_signal(cls, value: str) -> str:
        if not _SIGNAL.match(value):
            raise ValueError("signal must be a name like SIGTERM or a positive number")
        return value

    def arguments(self) -> List[str]:
        return [self.signal]
