"""Marker recognition for block and output delimiters."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import NamedTuple

DEFAULT_START_BLOCK_MARKER = "[[[#!"
DEFAULT_END_BLOCK_MARKER = "]]]"
DEFAULT_END_OUTPUT_MARKER = "[[[end]]]"


class MarkerSet(NamedTuple):
    """The three literal delimiters recognized inside a document.

    Attributes:
        start_block: Opens a block; the text after it names the command.
        end_block: Closes the block source.
        end_output: Closes the generated output region.
    """

    start_block: str = DEFAULT_START_BLOCK_MARKER
    end_block: str = DEFAULT_END_BLOCK_MARKER
    end_output: str = DEFAULT_END_OUTPUT_MARKER


@dataclass(frozen=True)
class EndOutputLine:
    """Pieces of an end-of-output line, kept so the line can be rebuilt.

    Attributes:
        prefix: Text preceding the marker (comment leaders, indentation).
        marker: The marker text itself.
        checksum: Digest from a ``(checksum: ...)`` annotation, or None.
        suffix: Text following the marker and any annotation.
    """

    prefix: str
    marker: str
    checksum: str | None
    suffix: str

    def render(self, annotation: str = "") -> str:
        return f"{self.prefix}{self.marker}{annotation}{self.suffix}"


class LineMatchers:
    """Line predicates compiled from one `MarkerSet`.

    Markers are escaped, so they only ever match as literal substrings.

    Examples:
        matchers = LineMatchers(MarkerSet())
        matchers.start_of_block("// [[[#!bash")  # "bash"
    """

    def __init__(self, markers: MarkerSet):
        self.markers = markers
        self._start_block = re.compile(rf"{re.escape(markers.start_block)}(?P<command>.*)$")
        self._end_block = re.compile(re.escape(markers.end_block))
        self._end_output = re.compile(
            rf"^(?P<prefix>.*?)(?P<marker>{re.escape(markers.end_output)})"
            r"(?:\s*\(checksum: (?P<checksum>[0-9a-f]+)\))?"
            r"(?P<suffix>.*)$"
        )

    def start_of_block(self, line: str) -> str | None:
        """Return the stripped command following the start marker, or None."""
        match = self._start_block.search(line)
        if match is None:
            return None
        return match.group("command").strip()

    def is_end_of_block(self, line: str) -> bool:
        return self._end_block.search(line) is not None

    def end_of_output(self, line: str) -> EndOutputLine | None:
        """Split an end-of-output line into its parts, or return None.

        Examples:
            matchers.end_of_output("# [[[end]]] (checksum: 0cc175b9) #")
            # EndOutputLine("# ", "[[[end]]]", "0cc175b9", " #")
        """
        match = self._end_output.match(line)
        if match is None:
            return None
        return EndOutputLine(
            prefix=match.group("prefix"),
            marker=match.group("marker"),
            checksum=match.group("checksum"),
            suffix=match.group("suffix"),
        )


def compile_markers(markers: MarkerSet | None = None) -> LineMatchers:
    """Build fresh line matchers for a marker set."""
    return LineMatchers(markers or MarkerSet())
