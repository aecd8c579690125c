"""Tests for terminal capability helpers."""

import locale
import sys
from types import SimpleNamespace

import pytest

from entracker.utils.terminal import supports_color, supports_utf8


@pytest.fixture(autouse=True)
def clear_terminal_caches() -> None:
    """Clear the caches for terminal capability functions before each test."""
    supports_utf8.cache_clear()
    supports_color.cache_clear()


def _fake_stdout(*, encoding: str | None, isatty: bool) -> SimpleNamespace:
    return SimpleNamespace(encoding=encoding, isatty=lambda: isatty)


def test_supports_utf8_with_stdout_encoding(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdout", _fake_stdout(encoding="UTF-8", isatty=True))

    assert supports_utf8()


def test_supports_utf8_uses_locale_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdout", _fake_stdout(encoding=None, isatty=True))
    monkeypatch.setattr(locale, "getpreferredencoding", lambda _: "latin-1")

    assert not supports_utf8()


def test_supports_color_on_linux_tty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdout", _fake_stdout(encoding="UTF-8", isatty=True))
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")

    assert supports_color()


@pytest.mark.parametrize(
    ("env", "isatty"),
    [({"NO_COLOR": "1"}, True), ({"TERM": "dumb"}, True), ({}, False)],
)
def test_supports_color_disabled(
    monkeypatch: pytest.MonkeyPatch, env: dict[str, str], isatty: bool
) -> None:
    """NO_COLOR, dumb terminals and pipes get plain output."""
    monkeypatch.setattr(sys, "stdout", _fake_stdout(encoding="UTF-8", isatty=isatty))
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)
    for key, value in env.items():
        monkeypatch.setenv(key, value)

    assert not supports_color()


def test_supports_color_windows_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdout", _fake_stdout(encoding="UTF-8", isatty=True))
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("WT_SESSION", "1")

    assert supports_color()


def test_supports_color_windows_without_capabilities(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(sys, "stdout", _fake_stdout(encoding="UTF-8", isatty=True))
    monkeypatch.setattr(sys, "platform", "win32")
    for key in ["NO_COLOR", "WT_SESSION", "ANSICON", "TERM_PROGRAM"]:
        monkeypatch.delenv(key, raising=False)

    assert not supports_color()
