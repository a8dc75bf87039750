"""Colored diffs for check failures."""

from __future__ import annotations

import difflib

import click


def render_diff(original: str, produced: str, label: str = "document") -> str:
    """Render a unified diff between two document versions.

    Removed lines are styled red and added lines green; hunk headers are cyan.

    Args:
        original: Document text as read.
        produced: Document text after processing.
        label: Name shown in the diff headers.

    Returns:
        str: Styled diff text, empty when the texts are identical.
    """
    diff_lines = difflib.unified_diff(
        original.splitlines(keepends=True),
        produced.splitlines(keepends=True),
        fromfile=f"{label} (current)",
        tofile=f"{label} (generated)",
    )

    rendered = []
    for line in diff_lines:
        if not line.endswith("\n"):
            line += "\n"
        if line.startswith(("---", "+++")):
            rendered.append(click.style(line, bold=True))
        elif line.startswith("@@"):
            rendered.append(click.style(line, fg="cyan"))
        elif line.startswith("-"):
            rendered.append(click.style(line, fg="red"))
        elif line.startswith("+"):
            rendered.append(click.style(line, fg="green"))
        else:
            rendered.append(line)
    return "".join(rendered)
