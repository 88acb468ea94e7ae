"""Tests for raw-mode terminal sessions."""

import io
import termios

import pytest

from mole.ui import session as session_mod
from mole.ui.session import ApplyResult, SessionState, TerminalSession, begin_session, end_session
from mole.ui.terminal import (
    ANSI_CURSOR_HOME,
    ANSI_ENTER_ALT_SCREEN,
    ANSI_HIDE_CURSOR,
    ANSI_LEAVE_ALT_SCREEN,
    ANSI_SHOW_CURSOR,
)

ORIGINAL_LFLAG = termios.ECHO | termios.ICANON | termios.ISIG


class FakeTTYAttrs:
    """In-memory stand-in for the kernel's termios state of one fd."""

    def __init__(self):
        self.attrs = [0, 0, 0, ORIGINAL_LFLAG, 38400, 38400, [b"\x00"] * 32]
        self.set_calls: list[int] = []
        self.fail_set = False

    def tcgetattr(self, fd):
        return [list(a) if isinstance(a, list) else a for a in self.attrs]

    def tcsetattr(self, fd, when, attrs):
        if self.fail_set:
            raise termios.error("nope")
        self.set_calls.append(when)
        self.attrs = [list(a) if isinstance(a, list) else a for a in attrs]


@pytest.fixture
def fake_tty(monkeypatch: pytest.MonkeyPatch) -> FakeTTYAttrs:
    fake = FakeTTYAttrs()
    monkeypatch.setattr(session_mod, "_is_tty", lambda fd: True)
    monkeypatch.setattr(session_mod.termios, "tcgetattr", fake.tcgetattr)
    monkeypatch.setattr(session_mod.termios, "tcsetattr", fake.tcsetattr)
    return fake


class TestBegin:
    def test_enters_raw_mode(self, fake_tty: FakeTTYAttrs, tty_stream):
        session = TerminalSession(fd=0, stream=tty_stream)

        assert session.begin(use_alt_screen=True) is ApplyResult.APPLIED

        lflag = fake_tty.attrs[3]
        cc = fake_tty.attrs[6]
        assert not lflag & termios.ECHO
        assert not lflag & termios.ICANON
        assert lflag & termios.ISIG
        assert cc[termios.VINTR] == b"\x03"
        assert cc[termios.VMIN] == 1
        assert cc[termios.VTIME] == 0
        assert fake_tty.set_calls == [termios.TCSANOW]
        assert session.state is SessionState.RAW_ACTIVE
        assert session.active

    def test_alt_screen_sequences(self, fake_tty: FakeTTYAttrs, tty_stream):
        begin_session(True, fd=0, stream=tty_stream)
        output = tty_stream.getvalue()
        assert output.startswith(ANSI_ENTER_ALT_SCREEN)
        assert output.endswith(ANSI_HIDE_CURSOR)

    def test_inline_mode_homes_cursor(self, fake_tty: FakeTTYAttrs, tty_stream):
        begin_session(False, fd=0, stream=tty_stream)
        output = tty_stream.getvalue()
        assert ANSI_ENTER_ALT_SCREEN not in output
        assert output.startswith(ANSI_CURSOR_HOME)

    def test_double_begin_raises(self, fake_tty: FakeTTYAttrs, tty_stream):
        session = begin_session(True, fd=0, stream=tty_stream)
        with pytest.raises(RuntimeError):
            session.begin()

    def test_not_a_tty_is_skipped(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(session_mod, "_is_tty", lambda fd: False)
        stream = io.StringIO()

        session = TerminalSession(fd=0, stream=stream)

        assert session.begin() is ApplyResult.SKIPPED
        assert session.saved is None
        assert stream.getvalue() == ""

    def test_raw_mode_failure_is_ignored(self, fake_tty: FakeTTYAttrs, tty_stream):
        fake_tty.fail_set = True
        session = TerminalSession(fd=0, stream=tty_stream)
        assert session.begin() is ApplyResult.FAILED_IGNORED
        assert session.active


class TestEnd:
    def test_restores_original_attributes(self, fake_tty: FakeTTYAttrs, tty_stream):
        session = begin_session(True, fd=0, stream=tty_stream)

        assert end_session(session) is ApplyResult.APPLIED

        assert fake_tty.attrs[3] == ORIGINAL_LFLAG
        assert fake_tty.attrs[6][termios.VMIN] == b"\x00"
        assert fake_tty.set_calls[-1] == termios.TCSADRAIN
        assert session.state is SessionState.NORMAL
        assert not session.active

    def test_restore_order(self, fake_tty: FakeTTYAttrs, tty_stream):
        session = begin_session(True, fd=0, stream=tty_stream)
        tty_stream.seek(0)
        tty_stream.truncate()

        session.end()

        assert tty_stream.getvalue() == ANSI_SHOW_CURSOR + ANSI_LEAVE_ALT_SCREEN

    def test_inline_session_does_not_leave_alt_screen(self, fake_tty: FakeTTYAttrs, tty_stream):
        session = begin_session(False, fd=0, stream=tty_stream)
        session.end()
        assert ANSI_LEAVE_ALT_SCREEN not in tty_stream.getvalue()

    def test_end_is_idempotent(self, fake_tty: FakeTTYAttrs, tty_stream):
        session = begin_session(True, fd=0, stream=tty_stream)

        first = session.end()
        calls = len(fake_tty.set_calls)
        output = tty_stream.getvalue()
        second = session.end()

        assert first is ApplyResult.APPLIED
        assert second is ApplyResult.SKIPPED
        assert session.restore_count == 1
        assert len(fake_tty.set_calls) == calls
        assert tty_stream.getvalue() == output

    def test_end_without_begin_is_skipped(self):
        assert TerminalSession(fd=0, stream=io.StringIO()).end() is ApplyResult.SKIPPED

    def test_restore_failure_is_ignored(self, fake_tty: FakeTTYAttrs, tty_stream):
        session = begin_session(True, fd=0, stream=tty_stream)
        fake_tty.fail_set = True

        assert session.end() is ApplyResult.FAILED_IGNORED
        assert not session.active
        assert tty_stream.getvalue().endswith(ANSI_LEAVE_ALT_SCREEN)

    def test_session_can_be_reused(self, fake_tty: FakeTTYAttrs, tty_stream):
        session = begin_session(True, fd=0, stream=tty_stream)
        session.end()
        assert session.begin() is ApplyResult.APPLIED
        assert session.end() is ApplyResult.APPLIED
        assert session.restore_count == 2


def test_saved_state_is_not_aliased(fake_tty: FakeTTYAttrs, tty_stream):
    session = begin_session(True, fd=0, stream=tty_stream)
    saved_lflag = session.saved.attrs[3]
    snapshot = session.saved.attrs
    snapshot[6][0] = b"z"
    assert saved_lflag == ORIGINAL_LFLAG
    assert session.saved.attrs[6][0] == b"\x00"
