from cogmark.config import CogConfig
from cogmark.executor import Block
from cogmark.markers import compile_markers
from cogmark.models import (
    CodePending,
    Done,
    LineCursor,
    OutputPending,
    OutputState,
    RawText,
)
from cogmark.parser import _consume_code, _consume_raw_text, _produce_output

MATCHERS = compile_markers()


def test_raw_text_copies_lines_until_start_of_block():
    cursor = LineCursor(["a", "b", "// [[[#!bash", "echo"])

    state = _consume_raw_text(RawText(OutputState()), cursor, MATCHERS)

    assert isinstance(state, CodePending)
    assert state.state.output == "a\nb\n"
    assert cursor.peek() == "// [[[#!bash"


def test_raw_text_finishes_at_end_of_input():
    state = _consume_raw_text(RawText(OutputState()), LineCursor(["only"]), MATCHERS)

    assert isinstance(state, Done)
    assert state.state.output == "only\n"
    assert state.state.blocks_found is False


def test_code_pending_collects_body_and_echoes_markers():
    cursor = LineCursor(["[[[#! sh -c 'cat' ", "one", "two", "]]]", "rest"])

    state = _consume_code(CodePending(OutputState()), cursor, MATCHERS, CogConfig())

    assert isinstance(state, OutputPending)
    assert state.block == Block(command="sh -c 'cat'", body="one\ntwo\n")
    assert state.state.blocks_found is True
    assert state.state.output == "[[[#! sh -c 'cat' \none\ntwo\n]]]\n"
    assert cursor.peek() == "rest"


def test_code_pending_deletes_markers_when_configured():
    cursor = LineCursor(["[[[#!bash", "echo 1", "]]]"])
    config = CogConfig(delete_blocks=True)

    state = _consume_code(CodePending(OutputState()), cursor, MATCHERS, config)

    assert isinstance(state, OutputPending)
    assert state.state.output == ""


def test_code_pending_drops_unterminated_block():
    cursor = LineCursor(["[[[#!bash", "echo 1"])

    state = _consume_code(CodePending(OutputState()), cursor, MATCHERS, CogConfig())

    assert isinstance(state, Done)
    assert state.state.blocks_found is True
    assert state.state.output == "[[[#!bash\necho 1\n"


def test_output_pending_replaces_old_output(fake_runner):
    cursor = LineCursor(["stale", "also stale", "[[[end]]]", "after"])
    pending = OutputPending(OutputState(), Block("gen", "fresh\n"))

    state = _produce_output(pending, cursor, MATCHERS, CogConfig(), fake_runner)

    assert isinstance(state, RawText)
    assert state.state.output == "fresh\n[[[end]]]\n"
    assert cursor.peek() == "after"


def test_output_pending_stamps_checksum(fake_runner):
    cursor = LineCursor(["<!-- [[[end]]] -->"])
    pending = OutputPending(OutputState(), Block("gen", "1\n"))

    state = _produce_output(pending, cursor, MATCHERS, CogConfig(checksum=True), fake_runner)

    assert state.state.output == (
        "1\n<!-- [[[end]]] (checksum: b026324c6904b2a9cb4b88d6d61c81d1) -->\n"
    )


def test_output_pending_drops_checksum_when_disabled(fake_runner):
    cursor = LineCursor(["[[[end]]] (checksum: 0123abcd)"])
    pending = OutputPending(OutputState(), Block("gen", "1\n"))

    state = _produce_output(pending, cursor, MATCHERS, CogConfig(), fake_runner)

    assert state.state.output == "1\n[[[end]]]\n"


def test_output_pending_omit_output_skips_command(fake_runner):
    cursor = LineCursor(["stale", "[[[end]]] (checksum: 0123abcd)"])
    pending = OutputPending(OutputState(), Block("gen", "1\n"))
    config = CogConfig(omit_output=True, checksum=True)

    state = _produce_output(pending, cursor, MATCHERS, config, fake_runner)

    assert isinstance(state, RawText)
    assert state.state.output == "[[[end]]] (checksum: 0123abcd)\n"
    assert fake_runner.calls == []


def test_output_pending_appends_output_at_end_of_input(fake_runner):
    cursor = LineCursor(["stale"])
    pending = OutputPending(OutputState(), Block("gen", "fresh\n"))

    state = _produce_output(pending, cursor, MATCHERS, CogConfig(), fake_runner)

    assert isinstance(state, Done)
    assert state.state.output == "fresh\n"


def test_output_pending_at_end_of_input_with_omit_output(fake_runner):
    pending = OutputPending(OutputState(), Block("gen", "fresh\n"))

    state = _produce_output(
        pending, LineCursor([]), MATCHERS, CogConfig(omit_output=True), fake_runner
    )

    assert isinstance(state, Done)
    assert state.state.output == ""
    assert fake_runner.calls == []


def test_line_cursor_peek_and_advance():
    cursor = LineCursor.from_text("a\r\nb\n")

    assert cursor.peek() == "a"
    assert cursor.advance() == "a"
    assert cursor.advance() == "b"
    assert cursor.peek() is None
    assert cursor.advance() is None
