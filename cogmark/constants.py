"""Constants used across the cogmark package."""

from __future__ import annotations

# Exit codes reported by the CLI
EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_BLOCK_FAILED = 3
EXIT_CHECK_FAILED = 5
EXIT_CHECKSUM_MISMATCH = 7

# Checksum annotation written after the end-of-output marker
CHECKSUM_ANNOTATION = " (checksum: {digest})"

STDIO_PATH = "-"
MAX_FILE_SIZE_ENV_VAR = "COGMARK_MAX_FILE_SIZE"
