"""Package-specific exception types."""

from __future__ import annotations

from .constants import (
    EXIT_BLOCK_FAILED,
    EXIT_CHECK_FAILED,
    EXIT_CHECKSUM_MISMATCH,
    EXIT_OK,
)


class CogError(RuntimeError):
    """Base class for errors that abort a document pass.

    Attributes:
        exit_code: Process exit status the CLI reports for this error.
    """

    exit_code = 1


class NoBlocksDetected(CogError):
    """Raised when a document holds no blocks and a warning was requested."""

    exit_code = EXIT_OK

    def __init__(self):
        super().__init__("No code blocks detected")


class BlockExecutionError(CogError):
    """Raised when a block's command exits with a non-zero status.

    Args:
        stderr: Standard error captured from the command.
        command: Command specification of the failing block.
        returncode: Exit status of the command.
    """

    exit_code = EXIT_BLOCK_FAILED

    def __init__(self, stderr: str, command: str | None = None, returncode: int | None = None):
        self.stderr = stderr
        self.command = command
        self.returncode = returncode
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        message = "Error occurred during block execution"
        if self.command is not None:
            message += f" ({self.command!r}"
            if self.returncode is not None:
                message += f" exited with status {self.returncode}"
            message += ")"
        if self.stderr:
            message += f": {self.stderr.rstrip()}"
        return message


class CheckFailed(CogError):
    """Raised in check-only mode when processing would change the document.

    Args:
        original: Document text as read.
        produced: Document text after processing.
    """

    exit_code = EXIT_CHECK_FAILED

    def __init__(self, original: str, produced: str):
        self.original = original
        self.produced = produced
        super().__init__("Generated output did not match the existing content")


class ChecksumMismatch(CogError):
    """Raised when a stamped checksum no longer matches the block's output.

    Args:
        old_digest: Digest found in the document.
        new_digest: Digest of the text that failed the comparison.
        source: Which text `new_digest` was computed from: ``"embedded"``
            for the output found in the document, ``"generated"`` for the
            output the command just produced.
    """

    exit_code = EXIT_CHECKSUM_MISMATCH

    def __init__(self, old_digest: str, new_digest: str, source: str = "generated"):
        self.old_digest = old_digest
        self.new_digest = new_digest
        self.source = source
        reason = "was edited by hand" if source == "embedded" else "is stale"
        super().__init__(
            f"Output checksum mismatch: expected {old_digest}, "
            f"got {new_digest} from the {source} output (the output {reason})"
        )
