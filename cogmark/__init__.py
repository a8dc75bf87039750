"""
cogmark: run code blocks embedded in text files and splice in their output.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    cogmark README.md --replace

Library Usage:
    from pathlib import Path
    from cogmark import CogConfig, process_document

    content = Path("README.md").read_text()
    updated = process_document(content, CogConfig(checksum=True))
"""

from .checksum import compute_checksum, stamp_or_verify
from .config import CogConfig, ConfigError, build_config, load_config, parse_markers
from .exceptions import (
    BlockExecutionError,
    CheckFailed,
    ChecksumMismatch,
    CogError,
    NoBlocksDetected,
)
from .executor import Block, CommandResult, SubprocessRunner, execute_block, split_command
from .markers import LineMatchers, MarkerSet, compile_markers
from .models import OutputState
from .parser import evaluate
from .processor import Processor, process_document

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "process_document",
    "Processor",
    "evaluate",
    "execute_block",
    "split_command",
    "compile_markers",
    "compute_checksum",
    "stamp_or_verify",
    # Configuration
    "CogConfig",
    "build_config",
    "load_config",
    "parse_markers",
    # Data models
    "Block",
    "CommandResult",
    "LineMatchers",
    "MarkerSet",
    "OutputState",
    "SubprocessRunner",
    # Exceptions
    "BlockExecutionError",
    "CheckFailed",
    "ChecksumMismatch",
    "CogError",
    "ConfigError",
    "NoBlocksDetected",
    # Version
    "__version__",
]
