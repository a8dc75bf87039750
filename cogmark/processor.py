"""Document-level processing policies."""

from __future__ import annotations

import logging

from .config import CogConfig, validate_config
from .exceptions import CheckFailed, NoBlocksDetected
from .executor import CommandRunner
from .parser import evaluate

logger = logging.getLogger(__name__)


class Processor:
    """Process documents with one configuration.

    Args:
        config: Markers and switches; defaults to a new `CogConfig`.
        runner: Command runner used for every block; defaults to running real
            subprocesses.

    Examples:
        Processor(CogConfig(delete_blocks=True)).process(text)
    """

    def __init__(self, config: CogConfig | None = None, runner: CommandRunner | None = None):
        self.config = config or CogConfig()
        validate_config(self.config)
        self.runner = runner

    def process(self, document: str) -> str:
        """Run every block in `document` and return the resulting text.

        Raises:
            NoBlocksDetected: If no block was found and `warn_if_no_blocks` is set.
            CheckFailed: If `check_only` is set and the result differs from
                `document`.
            BlockExecutionError: If a block's command fails.
            ChecksumMismatch: If embedded output does not match its checksum.
            OSError: If a command cannot be started.
        """
        result = evaluate(document, self.config, self.runner)
        logger.debug("Document processed (blocks found: %s)", result.blocks_found)

        if self.config.warn_if_no_blocks and not result.blocks_found:
            raise NoBlocksDetected()

        output = result.output
        if self.config.check_only and output != document:
            raise CheckFailed(document, output)
        return output


def process_document(
    document: str, config: CogConfig | None = None, runner: CommandRunner | None = None
) -> str:
    return Processor(config, runner).process(document)
