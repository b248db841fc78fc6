from __future__ import annotations

"""
Unit tests for the Error Stream Interceptor.

Verifies:
1. Every complete line written is annotated exactly once.
2. Partial writes are buffered until a newline or a flush.
3. println accepts objects and strings without double wrapping.
4. Tracebacks and logging output resolve to the triggering code.
5. Concurrent writers never interleave or split lines.
6. Re-entrant output from inside the write path goes out raw.
"""

import inspect
import io
import logging
import os
import re
import threading
import traceback
from typing import List

from debugstream.core.annotator import Annotator
from debugstream.core.context import StreamState
from debugstream.core.interceptor import DebugErrStream

from conftest import ANNOTATED_LINE, FIXED_TIME

THIS_FILE = os.path.basename(__file__)
PREFIX = "[2024-03-09 14:05:07] "


def _stream(console: io.StringIO, state: StreamState | None = None) -> DebugErrStream:
    return DebugErrStream(console, state or StreamState(), Annotator(clock=lambda: FIXED_TIME))


def _lines(console: io.StringIO) -> List[str]:
    return console.getvalue().splitlines()


def test_print_is_annotated_with_caller_location(console: io.StringIO) -> None:
    stream = _stream(console)
    lineno = inspect.currentframe().f_lineno + 1  # type: ignore[union-attr]
    print("hello", file=stream)

    assert console.getvalue() == f"{PREFIX}({THIS_FILE}:{lineno}) : hello\n"


def test_each_line_of_a_write_is_annotated(console: io.StringIO) -> None:
    stream = _stream(console)
    stream.write("first\nsecond\n")

    lines = _lines(console)
    assert len(lines) == 2
    assert lines[0].endswith(": first")
    assert lines[1].endswith(": second")
    assert all(re.match(ANNOTATED_LINE, line) for line in lines)


def test_partial_write_is_buffered_until_newline(console: io.StringIO) -> None:
    stream = _stream(console)
    assert stream.write("par") == 3
    stream.write("tial")
    assert console.getvalue() == ""

    stream.write(" line\n")
    lines = _lines(console)
    assert len(lines) == 1
    assert lines[0].endswith(") : partial line")


def test_flush_emits_pending_fragment(console: io.StringIO) -> None:
    stream = _stream(console)
    stream.write("progress 50%")
    stream.flush()

    assert _lines(console)[0].endswith(") : progress 50%")
    stream.flush()
    assert len(_lines(console)) == 1


def test_println_object_and_string(console: io.StringIO) -> None:
    stream = _stream(console)
    stream.println({"k": 1})
    stream.println("text")

    lines = _lines(console)
    assert lines[0].endswith(") : {'k': 1}")
    assert lines[1].endswith(") : text")
    assert all(line.count("[2024-03-09 14:05:07]") == 1 for line in lines)


def test_println_keeps_multiline_message_as_one_record(console: io.StringIO) -> None:
    stream = _stream(console)
    stream.println("a\nb")
    assert console.getvalue().count(PREFIX) == 1
    assert console.getvalue().endswith(": a\nb\n")


def test_traceback_resolves_to_except_block(console: io.StringIO) -> None:
    stream = _stream(console)
    try:
        raise RuntimeError("kaboom")
    except RuntimeError:
        lineno = inspect.currentframe().f_lineno + 1  # type: ignore[union-attr]
        traceback.print_exc(file=stream)

    lines = _lines(console)
    assert lines[0].endswith(f"({THIS_FILE}:{lineno}) : Traceback (most recent call last):")
    assert lines[-1].endswith("RuntimeError: kaboom")
    assert all(f"({THIS_FILE}:{lineno}) : " in line for line in lines)


def test_logging_handler_resolves_to_log_call(console: io.StringIO) -> None:
    stream = _stream(console)
    log = logging.getLogger("debugstream.test.interceptor")
    log.propagate = False
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    log.addHandler(handler)
    try:
        lineno = inspect.currentframe().f_lineno + 1  # type: ignore[union-attr]
        log.warning("careful")
    finally:
        log.removeHandler(handler)

    assert console.getvalue() == f"{PREFIX}({THIS_FILE}:{lineno}) : WARNING careful\n"


def test_persistence_receives_the_console_text(console: io.StringIO) -> None:
    received: List[str] = []

    class _Recorder:
        def append(self, text: str) -> None:
            received.append(text)

    state = StreamState(persistence_enabled=True, persister=_Recorder())  # type: ignore[arg-type]
    stream = _stream(console, state)
    stream.write("persist me\n")

    assert received == [console.getvalue().rstrip("\n")]


def test_disabled_persistence_is_not_called(console: io.StringIO) -> None:
    class _Exploding:
        def append(self, text: str) -> None:
            raise AssertionError("must not persist")

    state = StreamState(persistence_enabled=False, persister=_Exploding())  # type: ignore[arg-type]
    _stream(console, state).write("console only\n")
    assert _lines(console)[0].endswith(": console only")


def test_reentrant_output_is_written_raw(console: io.StringIO) -> None:
    holder: List[DebugErrStream] = []

    class _Complaining:
        def append(self, text: str) -> None:
            holder[0].write("sink failure\n")

    state = StreamState(persistence_enabled=True, persister=_Complaining())  # type: ignore[arg-type]
    stream = _stream(console, state)
    holder.append(stream)
    stream.write("outer\n")

    lines = _lines(console)
    assert lines[0].endswith(": outer")
    assert lines[1] == "sink failure"


def test_concurrent_writers_never_interleave(console: io.StringIO) -> None:
    stream = _stream(console)
    threads = 8
    per_thread = 200

    def writer(n: int) -> None:
        for i in range(per_thread):
            stream.write(f"thread-{n} ")
            stream.write(f"message-{i}\n")

    workers = [threading.Thread(target=writer, args=(n,)) for n in range(threads)]
    for w in workers:
        w.start()
    for w in workers:
        w.join()

    lines = _lines(console)
    assert len(lines) == threads * per_thread
    pattern = re.compile(ANNOTATED_LINE + r"thread-\d+ message-\d+$")
    assert all(pattern.match(line) for line in lines)


def test_stream_protocol_delegation(console: io.StringIO) -> None:
    stream = _stream(console)
    assert stream.writable() is True
    assert stream.isatty() is False
    assert stream.encoding == "utf-8"
