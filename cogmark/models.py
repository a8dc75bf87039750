"""Data models for cogmark."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .executor import Block


def split_lines(text: str) -> list[str]:
    """Split text into lines without their line endings.

    Lines end at ``\\n``; a trailing ``\\r`` is dropped from each line, and a
    final line ending does not produce an extra empty line.

    Examples:
        split_lines("a\\r\\nb\\n")  # ["a", "b"]
        split_lines("")  # []
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass
class LineCursor:
    """Position within the lines of a document.

    Attributes:
        lines: Document lines without line endings.
        position: Index of the next line to consume.
    """

    lines: list[str]
    position: int = 0

    @classmethod
    def from_text(cls, text: str) -> LineCursor:
        return cls(split_lines(text))

    def peek(self) -> str | None:
        if self.position >= len(self.lines):
            return None
        return self.lines[self.position]

    def advance(self) -> str | None:
        line = self.peek()
        if line is not None:
            self.position += 1
        return line


@dataclass
class OutputState:
    """Output accumulated while scanning a document.

    Attributes:
        chunks: Output text in document order.
        blocks_found: Whether at least one start-of-block line was seen.
    """

    chunks: list[str] = field(default_factory=list)
    blocks_found: bool = False

    @property
    def output(self) -> str:
        return "".join(self.chunks)

    def append(self, text: str) -> None:
        self.chunks.append(text)

    def append_line(self, line: str) -> None:
        self.chunks.append(f"{line}\n")


@dataclass
class RawText:
    """Scanning ordinary document text."""

    state: OutputState


@dataclass
class CodePending:
    """Positioned on a start-of-block line; the block source follows."""

    state: OutputState


@dataclass
class OutputPending:
    """Block source collected; replacing the output region that follows."""

    state: OutputState
    block: Block


@dataclass
class Done:
    """Input exhausted; `state` holds the final output."""

    state: OutputState


ParseState = Union[RawText, CodePending, OutputPending, Done]
