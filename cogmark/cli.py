"""
Runs the code blocks embedded in a document and splices their output back in.
The result goes to stdout, to `--output`, or back into the input with `--replace`.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .config import ConfigError, build_config
from .constants import EXIT_IO_ERROR, STDIO_PATH
from .diff import render_diff
from .exceptions import CheckFailed, CogError, NoBlocksDetected
from .filesystem import collect_file_stat, get_max_file_size, read_document, write_document
from .processor import Processor

__all__ = ["cli"]


class CogClickException(click.ClickException):
    """Click error carrying a specific exit code, shown in red."""

    def __init__(self, message: str, exit_code: int, details: str | None = None):
        super().__init__(message)
        self.exit_code = exit_code
        self.details = details

    def show(self, file=None) -> None:
        click.secho(f"Error: {self.format_message()}", fg="red", err=True)
        if self.details:
            click.echo(self.details, err=True, nl=False)


def _flag(value: bool) -> bool | None:
    # Unset flags leave configuration file values in place.
    return True if value else None


@click.command()
@click.version_option()
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    help="Write the output to a file instead of stdout.",
)
@click.option(
    "-r",
    "--replace",
    is_flag=True,
    help="Write the output to the input file; supersedes --output.",
)
@click.option("-d", "--delete-blocks", is_flag=True, help="Delete the block markers and code.")
@click.option(
    "-e", "--warn-if-no-blocks", is_flag=True, help="Warn if the input has no code blocks."
)
@click.option(
    "-x", "--omit-output", is_flag=True, help="Omit all generated output without running blocks."
)
@click.option("--check", is_flag=True, help="Check that the input would not change if run again.")
@click.option(
    "-c", "--checksum", is_flag=True, help="Checksum the output to protect it against edits."
)
@click.option(
    "--markers",
    metavar="'START END END_OUTPUT'",
    help="The three space-separated markers delimiting blocks and their output.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log each command that runs.")
@click.argument("input_path", metavar="INPUT", type=click.Path(dir_okay=False, allow_dash=True))
def cli(
    input_path: str,
    output: str | None = None,
    replace: bool = False,
    delete_blocks: bool = False,
    warn_if_no_blocks: bool = False,
    omit_output: bool = False,
    check: bool = False,
    checksum: bool = False,
    markers: str | None = None,
    verbose: bool = False,
):
    """
    Run the code blocks embedded in INPUT and splice their output back in.

    INPUT is a file path, or `-` to read standard input.

    Args:
        input_path: Document to process, or ``-`` for standard input.
        output: Destination file; stdout when omitted.
        replace: Write back to the input file.
        delete_blocks: Remove markers and block code from the result.
        warn_if_no_blocks: Report documents without any block.
        omit_output: Drop generated output instead of running blocks.
        check: Fail when the document is not up to date; nothing is written.
        checksum: Stamp and verify output checksums.
        markers: Space-separated start, end, and end-of-output markers.
        verbose: Enable debug logging.

    Returns:
        None.

    Raises:
        click.BadParameter: If options conflict or configuration is invalid.
        click.ClickException: If reading, running, checking, or writing fails,
            with the exit code of the failure class.

    Examples:
        cogmark README.md --replace --checksum
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    reads_stdin = input_path == STDIO_PATH
    if replace and reads_stdin:
        raise click.BadParameter("standard input cannot be replaced", param_hint="'--replace'")

    search_path = Path.cwd() if reads_stdin else Path(input_path).resolve().parent
    try:
        config = build_config(
            search_path,
            delete_blocks=_flag(delete_blocks),
            warn_if_no_blocks=_flag(warn_if_no_blocks),
            omit_output=_flag(omit_output),
            check_only=_flag(check),
            checksum=_flag(checksum),
            markers=markers,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    initial_stat = None
    try:
        if replace:
            initial_stat = collect_file_stat(Path(input_path))
        document = read_document(input_path, max_file_size)
    except OSError as error:
        raise CogClickException(str(error), EXIT_IO_ERROR) from error

    try:
        result = Processor(config).process(document)
    except NoBlocksDetected as error:
        click.secho(f"Warning: {error} in {input_path}", fg="yellow", err=True)
        return
    except CheckFailed as error:
        details = render_diff(error.original, error.produced, label=input_path)
        raise CogClickException(str(error), error.exit_code, details) from error
    except CogError as error:
        raise CogClickException(str(error), error.exit_code) from error
    except OSError as error:
        raise CogClickException(str(error), EXIT_IO_ERROR) from error

    if config.check_only:
        return

    destination = Path(input_path) if replace else (Path(output) if output else None)
    if destination is None:
        click.echo(result, nl=False)
        return

    try:
        write_document(
            result,
            destination,
            expected_stat=initial_stat,
            warn=lambda message: click.echo(message, err=True),
        )
    except OSError as error:
        raise CogClickException(str(error), EXIT_IO_ERROR) from error


if __name__ == "__main__":
    cli()
