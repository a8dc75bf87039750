from __future__ import annotations

import pytest
from click.testing import CliRunner

from cogmark.executor import CommandResult


class FakeRunner:
    """Command runner returning canned results instead of spawning processes.

    By default each call echoes its standard input back, like `cat`.
    """

    def __init__(self, outputs: dict[str, str] | None = None, returncode: int = 0, stderr: str = ""):
        self.outputs = outputs or {}
        self.returncode = returncode
        self.stderr = stderr
        self.calls: list[tuple[list[str], str]] = []

    def __call__(self, argv: list[str], stdin: bytes) -> CommandResult:
        body = stdin.decode("utf-8")
        self.calls.append((argv, body))
        stdout = self.outputs.get(" ".join(argv), body)
        return CommandResult(
            returncode=self.returncode,
            stdout=stdout.encode("utf-8"),
            stderr=self.stderr.encode("utf-8"),
        )


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def fake_runner() -> FakeRunner:
    """Provides a runner that echoes block bodies back."""
    return FakeRunner()


@pytest.fixture()
def make_runner():
    """Provides a factory for runners with canned outputs."""
    return FakeRunner
