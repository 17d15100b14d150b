"""
Models describing the runtime environment a Dockerfile is generated for.
"""
from typing import Any, Dict, List, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from .instructions import Form


class PackageSource(str, Enum):
    """
    Where an R package is installed from.
    """
    CRAN = "cran"
    GITHUB = "github"


class PackageSpec(BaseModel):
    """
    An R package required by the environment.
    """
    name: str
    version: Optional[str] = None
    source: PackageSource = PackageSource.CRAN
    repo: Optional[str] = None  # 'user/repo' for GitHub packages
    ref: Optional[str] = None


class CommandSpec(BaseModel):
    """
    A command for CMD or ENTRYPOINT.
    """
    program: str
    params: List[str] = []
    form: Form = Form.EXEC


class ExposedPort(BaseModel):
    port: int
    protocol: Optional[str] = None
    host_port: Optional[int] = None


class EnvironmentDescription(BaseModel):
    """
    Everything known about a runtime environment that ends up in its Dockerfile.
    """
    # Base image
    r_version: Optional[str] = None
    image: Optional[str] = None  # explicit override, skips version resolution

    maintainer: Optional[str] = None

    # Dependencies
    system_requirements: List[str] = []
    packages: List[PackageSpec] = []
    cran_mirror: Optional[str] = None

    # Payload
    workdir: str = "/payload/"
    files: List[str] = []

    # Metadata
    env: Dict[str, str] = {}
    labels: Dict[str, str] = {}
    expose: List[ExposedPort] = []

    # Execution
    entrypoint: Optional[CommandSpec] = None
    cmd: CommandSpec = Field(default_factory=lambda: CommandSpec(program="R"))

    comments: List[str] = []

    @field_validator("env", "labels", mode="before")
    @classmethod
    def _scalars_as_text(cls, value: Any) -> Any:
        # YAML reads PORT: 8787 or version: 1.0 as numbers
        if not isinstance(value, dict):
            return value
        return {key: _scalar_text(item) for key, item in value.items()}


def _scalar_text(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value
