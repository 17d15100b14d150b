"""
Model for a complete Dockerfile: an ordered sequence of instructions.

The sequence keeps three properties at all times:

* at most one FROM, and it is the first instruction;
* at most one ENTRYPOINT and one CMD, and they are the last instructions,
  ENTRYPOINT before CMD;
* any other instruction is added directly before that terminal block.
"""
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import DuplicateTerminalInstruction
from .instructions import Cmd, Comment, Entrypoint, From, Instruction, Maintainer


class Dockerfile:
    """
    Mutable build recipe that preserves the instruction ordering rules.

    Adding a FROM, CMD or ENTRYPOINT when one already exists replaces it, so
    callers can override the defaults a Dockerfile was seeded with.
    """
    def __init__(
        self,
        image: Optional[From] = None,
        cmd: Optional[Cmd] = None,
        entrypoint: Optional[Entrypoint] = None,
        maintainer: Optional[Maintainer] = None,
        strict: bool = False,
    ):
        """
        :param image: Base image instruction.
        :param cmd: Default start-up command.
        :param entrypoint: Entry point of the container.
        :param maintainer: Author label, placed directly after the base image.
        :param strict: Raise DuplicateTerminalInstruction instead of replacing an
            existing FROM, CMD or ENTRYPOINT.
        """
        self._instructions: List[Instruction] = []
        self._footer: List[Comment] = []
        self.strict = strict
        for instruction in (image, maintainer, entrypoint, cmd):
            if instruction is not None:
                self.append(instruction)

    def append(self, instruction: Instruction) -> "Dockerfile":
        """
        Adds an instruction, keeping the ordering rules.

        :param instruction: The instruction to add.
        :return: This Dockerfile, for chaining.
        :raises TypeError: If ``instruction`` is not an Instruction.
        :raises DuplicateTerminalInstruction: In strict mode, for a second FROM,
            CMD or ENTRYPOINT.

        A failed call leaves the Dockerfile unchanged.
        """
        if not isinstance(instruction, Instruction):
            raise TypeError(f"Expected an Instruction, got {type(instruction).__name__}")

        if isinstance(instruction, From):
            self._replace_or_insert(From, instruction, 0)
        elif isinstance(instruction, Entrypoint):
            self._replace_or_insert(Entrypoint, instruction, self._terminal_start())
        elif isinstance(instruction, Cmd):
            self._replace_or_insert(Cmd, instruction, len(self._instructions))
        else:
            self._instructions.insert(self._terminal_start(), instruction)
        return self

    def extend(self, instructions: Iterable[Instruction]) -> "Dockerfile":
        for instruction in instructions:
            self.append(instruction)
        return self

    def insert(self, index: int, instruction: Instruction) -> "Dockerfile":
        """
        Inserts a non-terminal instruction at a position of the body.

        The body is everything between the FROM and the terminal block; index 0
        is the slot right after the FROM.

        :raises IndexError: If the index falls outside the body.
        :raises TypeError: For FROM, CMD and ENTRYPOINT, which have fixed slots.
        """
        if not isinstance(instruction, Instruction):
            raise TypeError(f"Expected an Instruction, got {type(instruction).__name__}")
        if isinstance(instruction, From) or instruction.is_terminal:
            raise TypeError(f"{instruction.instruction} has a fixed position, use append()")

        start = self._body_start()
        end = self._terminal_start()
        if not 0 <= index <= end - start:
            raise IndexError(f"Body index {index} out of range 0..{end - start}")
        self._instructions.insert(start + index, instruction)
        return self

    def remove(self, instruction: Instruction) -> "Dockerfile":
        """
        Removes the first instruction equal to the given one.

        :raises ValueError: If no such instruction exists.
        """
        self._instructions.remove(instruction)
        return self

    def add_footer(self, comment: Comment) -> "Dockerfile":
        """Adds a comment rendered after all instructions."""
        if not isinstance(comment, Comment):
            raise TypeError(f"Expected a Comment, got {type(comment).__name__}")
        self._footer.append(comment)
        return self

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return tuple(self._instructions)

    @property
    def body(self) -> Tuple[Instruction, ...]:
        """Instructions between the FROM and the terminal block."""
        return tuple(self._instructions[self._body_start():self._terminal_start()])

    @property
    def footer(self) -> Tuple[Comment, ...]:
        return tuple(self._footer)

    @property
    def image(self) -> Optional[From]:
        return self._find(From)

    @property
    def cmd(self) -> Optional[Cmd]:
        return self._find(Cmd)

    @property
    def entrypoint(self) -> Optional[Entrypoint]:
        return self._find(Entrypoint)

    @property
    def maintainer(self) -> Optional[Maintainer]:
        return self._find(Maintainer)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def __repr__(self) -> str:
        kinds = ", ".join(instruction.instruction for instruction in self._instructions)
        return f"Dockerfile([{kinds}])"

    def _find(self, kind):
        for instruction in self._instructions:
            if isinstance(instruction, kind):
                return instruction
        return None

    def _replace_or_insert(self, kind, instruction: Instruction, position: int) -> None:
        for index, existing in enumerate(self._instructions):
            if isinstance(existing, kind):
                if self.strict:
                    raise DuplicateTerminalInstruction(instruction.instruction)
                self._instructions[index] = instruction
                return
        self._instructions.insert(position, instruction)

    def _body_start(self) -> int:
        if self._instructions and isinstance(self._instructions[0], From):
            return 1
        return 0

    def _terminal_start(self) -> int:
        index = len(self._instructions)
        while index > 0 and self._instructions[index - 1].is_terminal:
            index -= 1
        return index
