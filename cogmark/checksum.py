"""Checksums guarding generated output against hand edits."""

from __future__ import annotations

import hashlib

from .constants import CHECKSUM_ANNOTATION
from .exceptions import ChecksumMismatch


def compute_checksum(output: str) -> str:
    """Return the lowercase hex MD5 digest of `output` encoded as UTF-8.

    Examples:
        compute_checksum("1\\n")  # "b026324c6904b2a9cb4b88d6d61c81d1"
    """
    return hashlib.md5(output.encode("utf-8")).hexdigest()


def format_annotation(digest: str) -> str:
    return CHECKSUM_ANNOTATION.format(digest=digest)


def stamp_or_verify(
    output: str,
    previous: str | None,
    enabled: bool = True,
    embedded: str | None = None,
) -> str:
    """Produce the checksum annotation for a block's fresh output.

    When a previous digest exists it must match both the output currently
    embedded in the document (when given) and the freshly generated output.
    The first comparison catches hand edits, the second catches output that
    has drifted from its generator.

    Args:
        output: Output the block's command just produced.
        previous: Digest embedded in the document, if any.
        enabled: Whether checksums are written and checked at all.
        embedded: Output text found in the document before regeneration.

    Returns:
        str: Annotation to place after the end-of-output marker, or an empty
            string when checksums are disabled.

    Raises:
        ChecksumMismatch: If `previous` differs from either digest.

    Examples:
        stamp_or_verify("1\\n", None)  # " (checksum: b026...)"
        stamp_or_verify("1\\n", None, enabled=False)  # ""
    """
    if not enabled:
        return ""

    digest = compute_checksum(output)
    if previous is not None:
        if embedded is not None:
            embedded_digest = compute_checksum(embedded)
            if embedded_digest != previous:
                raise ChecksumMismatch(previous, embedded_digest, source="embedded")
        if digest != previous:
            raise ChecksumMismatch(previous, digest, source="generated")
    return format_annotation(digest)
