"""
Exceptions raised while resolving base images and assembling Dockerfiles.
"""
from typing import Optional


class R2DError(Exception):
    """
    Base class for all errors raised by r2d.
    """


class MalformedVersion(R2DError):
    """
    A version string could not be parsed into (major, minor, patch).
    """
    def __init__(self, text: str, reason: Optional[str] = None):
        self.text = text
        self.reason = reason
        message = f"Malformed version string: {text!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidInstructionArgument(R2DError):
    """
    An instruction was constructed with an argument violating its constraints.

    :param field: Name of the offending field.
    :param constraint: Human readable description of the violated constraint.
    """
    def __init__(self, field: str, constraint: str):
        self.field = field
        self.constraint = constraint
        super().__init__(f"Invalid value for '{field}': {constraint}")


class DuplicateTerminalInstruction(R2DError):
    """
    A second FROM, CMD or ENTRYPOINT was added to a Dockerfile.

    Only raised by Dockerfiles created with ``strict=True``; otherwise the new
    instruction replaces the existing one.
    """
    def __init__(self, instruction: str):
        self.instruction = instruction
        super().__init__(f"Dockerfile already contains a {instruction} instruction")


class EnvironmentFileError(R2DError):
    """
    An environment description file could not be read or validated.
    """
