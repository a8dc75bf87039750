"""Running block commands."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Protocol

from .exceptions import BlockExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Block:
    """One executable unit taken from a document.

    Attributes:
        command: Command specification found after the start marker.
        body: Source lines between the start and end-of-block lines, each
            ending with a newline.
    """

    command: str
    body: str = ""


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of an external command."""

    returncode: int
    stdout: bytes
    stderr: bytes


class CommandRunner(Protocol):
    def __call__(self, argv: list[str], stdin: bytes) -> CommandResult: ...


class SubprocessRunner:
    """Run commands as child processes with every stream piped.

    The whole input is written and stdin closed before any output is read.
    A command that writes more than the OS pipe buffer holds before it has
    consumed all of its input blocks forever under this ordering. Once stdin
    is closed, stdout and stderr are drained together.
    """

    def __call__(self, argv: list[str], stdin: bytes) -> CommandResult:
        with subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        ) as process:
            # A command may exit without reading its input.
            try:
                process.stdin.write(stdin)
            except BrokenPipeError:
                pass
            try:
                process.stdin.close()
            except BrokenPipeError:
                pass
            # communicate() must not touch the closed stdin.
            process.stdin = None
            stdout, stderr = process.communicate()
        return CommandResult(returncode=process.returncode, stdout=stdout, stderr=stderr)


def split_command(command: str) -> list[str]:
    """Tokenize a command specification into program and arguments.

    Shell-style quoting is honored; a specification that cannot be tokenized
    (for example, with an unbalanced quote) is split on single spaces instead.

    Raises:
        OSError: If the specification names no program, so there is nothing
            to start.

    Examples:
        split_command('python3 -c "print(1)"')  # ["python3", "-c", "print(1)"]
        split_command("sh -c 'unbalanced")  # ["sh", "-c", "'unbalanced"]
    """
    try:
        argv = shlex.split(command)
    except ValueError:
        argv = command.split(" ")

    if not argv or not argv[0]:
        raise OSError(f"Cannot start block: no command given after the start marker ({command!r})")
    return argv


def execute_block(block: Block, runner: CommandRunner | None = None) -> str:
    """Run a block's command with its body on standard input.

    Args:
        block: Block to execute.
        runner: Command runner; defaults to a `SubprocessRunner`.

    Returns:
        str: Standard output of the command, decoded as UTF-8 with invalid
            sequences replaced.

    Raises:
        BlockExecutionError: If the command exits with a non-zero status.
        OSError: If the command is empty or cannot be started.
    """
    runner = runner or SubprocessRunner()
    argv = split_command(block.command)

    logger.debug("Running block command %r", argv)
    result = runner(argv, block.body.encode("utf-8"))
    logger.debug("Command %r exited with status %d", argv[0], result.returncode)

    if result.returncode != 0:
        raise BlockExecutionError(
            result.stderr.decode("utf-8", errors="replace"),
            command=block.command,
            returncode=result.returncode,
        )
    return result.stdout.decode("utf-8", errors="replace")
