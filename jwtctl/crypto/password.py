"""Deferred password sources for encrypted PEM private keys."""

import getpass
from collections.abc import Callable
from pathlib import Path

PasswordSupplier = Callable[[], str]


class MemoizedPassword:
    """Wraps a password source so it is consulted at most once."""

    def __init__(self, source: PasswordSupplier) -> None:
        self._source = source
        self._value: str | None = None
        self._called = False

    def __call__(self) -> str:
        if not self._called:
            self._called = True
            self._value = self._source()
        assert self._value is not None
        return self._value


def static_password(value: str) -> PasswordSupplier:
    """Supply a password already known to the caller."""
    return lambda: value


def prompt_password(key_file: Path | None = None) -> PasswordSupplier:
    """Ask for the password on the controlling terminal when first needed."""

    def _ask() -> str:
        location = f"({key_file}) " if key_file is not None else ""
        return getpass.getpass(f"Enter password {location}: ")

    return _ask
