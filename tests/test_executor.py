from __future__ import annotations

import shutil
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from cogmark.exceptions import BlockExecutionError
from cogmark.executor import Block, CommandResult, SubprocessRunner, execute_block, split_command

requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")

PACKAGE_ROOT = Path(__file__).resolve().parents[1]


def test_split_command_honors_quotes():
    assert split_command('sh -c "echo hello world"') == ["sh", "-c", "echo hello world"]


def test_split_command_falls_back_to_spaces_on_unbalanced_quotes():
    assert split_command("sh -c 'unbalanced") == ["sh", "-c", "'unbalanced"]


@pytest.mark.parametrize("command", ["", "   "])
def test_split_command_rejects_empty_specification(command: str):
    with pytest.raises(OSError, match="no command given"):
        split_command(command)


def test_execute_block_passes_body_on_stdin(fake_runner):
    output = execute_block(Block("tool --flag 'a b'", "line 1\nline 2\n"), fake_runner)

    assert output == "line 1\nline 2\n"
    assert fake_runner.calls == [(["tool", "--flag", "a b"], "line 1\nline 2\n")]


def test_execute_block_raises_with_stderr_on_failure(make_runner):
    runner = make_runner(outputs={"tool": "discarded"}, returncode=2, stderr="boom\n")

    with pytest.raises(BlockExecutionError) as excinfo:
        execute_block(Block("tool"), runner)

    assert excinfo.value.stderr == "boom\n"
    assert excinfo.value.returncode == 2
    assert excinfo.value.command == "tool"
    assert "boom" in str(excinfo.value)
    assert "discarded" not in str(excinfo.value)


def test_execute_block_replaces_invalid_utf8():
    def runner(argv, stdin):
        return CommandResult(returncode=0, stdout=b"ok \xff\n", stderr=b"")

    assert execute_block(Block("tool"), runner) == "ok �\n"


@requires_sh
def test_subprocess_runner_runs_real_command():
    output = execute_block(Block("sh", "echo 1\necho 2\n"))

    assert output == "1\n2\n"


@requires_sh
def test_subprocess_runner_reports_exit_status():
    with pytest.raises(BlockExecutionError) as excinfo:
        execute_block(Block("sh", "echo oops >&2\nexit 4\n"))

    assert excinfo.value.returncode == 4
    assert excinfo.value.stderr == "oops\n"


@requires_sh
def test_subprocess_runner_tolerates_commands_ignoring_stdin():
    output = execute_block(Block('sh -c "echo ignored"', "unused\n" * 1000))

    assert output == "ignored\n"


@pytest.mark.skipif(shutil.which("cat") is None, reason="requires cat")
def test_subprocess_runner_echoes_input_below_pipe_buffer():
    # Input is written in full before output is read, so echoing back more
    # than the pipe buffer holds (64 KiB on Linux) would block forever.
    body = "x" * 1023 + "\n"
    body *= 16

    result = SubprocessRunner()(["cat"], body.encode("utf-8"))

    assert result.returncode == 0
    assert result.stdout.decode("utf-8") == body


def test_missing_program_raises_oserror():
    with pytest.raises(OSError):
        execute_block(Block("cogmark-test-no-such-program-xyz"))


@requires_sh
def test_subprocess_runner_drains_large_stderr():
    body = "head -c 200000 /dev/zero | tr '\\0' x >&2\necho ok\n"

    result = SubprocessRunner()(["sh"], body.encode("utf-8"))

    assert result.returncode == 0
    assert result.stdout == b"ok\n"
    assert result.stderr == b"x" * 200000


@requires_sh
def test_large_stderr_is_reported_on_failure():
    with pytest.raises(BlockExecutionError) as excinfo:
        execute_block(Block("sh", "head -c 100000 /dev/zero | tr '\\0' e >&2\nexit 2\n"))

    assert excinfo.value.returncode == 2
    assert len(excinfo.value.stderr) == 100000


@pytest.mark.skipif(shutil.which("cat") is None, reason="requires cat")
def test_echoing_input_beyond_pipe_buffer_blocks():
    # The runner only starts reading once all input is written, so cat fills
    # its stdout pipe and stops reading. Run it in a child interpreter so the
    # hang can be bounded by a timeout.
    script = textwrap.dedent(
        """
        from cogmark.executor import SubprocessRunner

        SubprocessRunner()(["cat"], b"x" * (4 * 1024 * 1024))
        """
    )

    with pytest.raises(subprocess.TimeoutExpired):
        subprocess.run(
            [sys.executable, "-c", script],
            cwd=PACKAGE_ROOT,
            capture_output=True,
            timeout=5,
        )
