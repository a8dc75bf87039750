"""Line-by-line scanner that runs blocks and splices their output."""

from __future__ import annotations

from .checksum import stamp_or_verify
from .config import CogConfig, validate_config
from .executor import Block, CommandRunner, execute_block
from .markers import LineMatchers, compile_markers
from .models import (
    CodePending,
    Done,
    LineCursor,
    OutputPending,
    OutputState,
    ParseState,
    RawText,
)


def normalize_output(output: str) -> str:
    """Normalize generated output to ``\\n`` line endings with a final newline.

    Output that does not end in a newline would otherwise run into the
    end-of-output line that follows it.

    Examples:
        normalize_output("a\\r\\nb")  # "a\\nb\\n"
        normalize_output("")  # ""
    """
    output = output.replace("\r\n", "\n")
    if output and not output.endswith("\n"):
        output += "\n"
    return output


def _add_meta_line(state: OutputState, line: str, config: CogConfig) -> None:
    if not config.delete_blocks:
        state.append_line(line)


def _run_block(block: Block, runner: CommandRunner | None) -> str:
    return normalize_output(execute_block(block, runner))


def _consume_raw_text(current: RawText, cursor: LineCursor, matchers: LineMatchers) -> ParseState:
    """Copy lines verbatim until a start-of-block line or the end of input."""
    state = current.state
    while True:
        line = cursor.peek()
        if line is None:
            return Done(state)
        if matchers.start_of_block(line) is not None:
            return CodePending(state)
        cursor.advance()
        state.append_line(line)


def _consume_code(
    current: CodePending, cursor: LineCursor, matchers: LineMatchers, config: CogConfig
) -> ParseState:
    """Collect a block's source up to and including its end-of-block line.

    A block left open at the end of input is dropped.
    """
    state = current.state
    start_line = cursor.advance()
    command = matchers.start_of_block(start_line)
    state.blocks_found = True
    _add_meta_line(state, start_line, config)

    body: list[str] = []
    while True:
        line = cursor.advance()
        if line is None:
            return Done(state)

        _add_meta_line(state, line, config)
        if matchers.is_end_of_block(line):
            return OutputPending(state, Block(command=command, body="".join(body)))

        body.append(f"{line}\n")


def _produce_output(
    current: OutputPending,
    cursor: LineCursor,
    matchers: LineMatchers,
    config: CogConfig,
    runner: CommandRunner | None,
) -> ParseState:
    """Replace the old output region with the block's fresh output.

    Lines up to the end-of-output line are discarded. Without an end-of-output
    line the fresh output is appended at the end of the document.
    """
    state = current.state
    embedded: list[str] = []
    while True:
        line = cursor.advance()
        if line is None:
            if not config.omit_output:
                state.append(_run_block(current.block, runner))
            return Done(state)

        end_line = matchers.end_of_output(line)
        if end_line is None:
            embedded.append(f"{line}\n")
            continue

        if config.omit_output:
            _add_meta_line(state, line, config)
            return RawText(state)

        output = _run_block(current.block, runner)
        annotation = stamp_or_verify(
            output, end_line.checksum, enabled=config.checksum, embedded="".join(embedded)
        )
        state.append(output)
        _add_meta_line(state, end_line.render(annotation), config)
        return RawText(state)


def evaluate(
    document: str, config: CogConfig | None = None, runner: CommandRunner | None = None
) -> OutputState:
    """Scan a document, run its blocks, and assemble the resulting text.

    Args:
        document: Full document text.
        config: Markers and switches controlling the scan. Defaults to a new
            `CogConfig` when omitted.
        runner: Command runner used for every block; defaults to running real
            subprocesses.

    Returns:
        OutputState: Assembled text and whether any block was found.

    Raises:
        ConfigError: If the configuration fails validation.
        BlockExecutionError: If a block's command fails.
        ChecksumMismatch: If checksums are enabled and embedded output does
            not match its annotation.
        OSError: If a command cannot be started.

    Examples:
        evaluate("[[[#!bash\\necho 1\\n]]]\\n[[[end]]]\\n").output
    """
    config = config or CogConfig()
    validate_config(config)
    matchers = compile_markers(config.markers)
    cursor = LineCursor.from_text(document)

    state: ParseState = RawText(OutputState())
    while True:
        if isinstance(state, RawText):
            state = _consume_raw_text(state, cursor, matchers)
        elif isinstance(state, CodePending):
            state = _consume_code(state, cursor, matchers, config)
        elif isinstance(state, OutputPending):
            state = _produce_output(state, cursor, matchers, config, runner)
        else:
            return state.state
