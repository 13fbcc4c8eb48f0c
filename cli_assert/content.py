"""Content values and the predicates evaluated against captured output.

A predicate built from text decodes the captured bytes as UTF-8, replacing
invalid sequences, before comparing. A predicate built from bytes compares
the raw bytes, even when they happen to be valid UTF-8.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as t

from ._validators import validate_match_count
from .diff import changeset, render
from .errors import (
    DoesNotContainError,
    NotEqualError,
    PredicateError,
    PredicateFailedError,
    RegexMismatchError,
    UnexpectedContainsError,
    UnexpectedEqualError,
)

ContentLike: t.TypeAlias = "Content | str | bytes | bytearray | memoryview"


def decode_lossy(data: bytes) -> str:
    """Decode *data* as UTF-8, replacing invalid sequences."""
    return data.decode("utf-8", errors="replace")


def describe_bytes(data: bytes) -> str:
    """Return *data* as text when valid UTF-8, otherwise as a bytes literal."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return repr(data)


def _escape_bytes(data: bytes) -> str:
    return data.decode("utf-8", errors="backslashreplace")


@dc.dataclass(frozen=True, slots=True)
class Content:
    """An expected value: either text or raw bytes."""

    value: str | bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, str | bytes):
            msg = f"content must be str or bytes, not {type(self.value).__name__}"
            raise TypeError(msg)

    @classmethod
    def coerce(cls, value: ContentLike) -> Content:
        """Return *value* wrapped as :class:`Content`."""
        if isinstance(value, Content):
            return value
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, bytes | bytearray | memoryview):
            return cls(bytes(value))
        msg = f"content must be str or bytes, not {type(value).__name__}"
        raise TypeError(msg)

    @property
    def is_text(self) -> bool:
        """Return ``True`` for text content."""
        return isinstance(self.value, str)

    def describe(self) -> str:
        """Return a quoted representation used in failure messages."""
        return repr(self.value)


class ContentPredicate:
    """Base class for checks over one captured buffer.

    Subclasses are immutable; :meth:`verify` raises a
    :class:`~cli_assert.errors.PredicateError` subclass on mismatch.
    """

    __slots__ = ()

    def verify(self, got: bytes) -> None:
        """Raise :class:`PredicateError` unless *got* satisfies the predicate."""
        raise NotImplementedError

    def __call__(self, got: bytes) -> bool:
        """Return ``True`` if *got* satisfies the predicate."""
        try:
            self.verify(got)
        except PredicateError:
            return False
        return True


def _coerce_content(predicate: ContentPredicate, value: ContentLike) -> None:
    object.__setattr__(predicate, "content", Content.coerce(value))


@dc.dataclass(frozen=True, slots=True)
class Is(ContentPredicate):
    """Output equals ``content`` (or differs from it when negated).

    Text is compared line by line after trimming surrounding whitespace on
    both sides. Bytes are compared exactly.
    """

    content: Content
    expected_result: bool = True

    def __post_init__(self) -> None:
        _coerce_content(self, self.content)

    def verify(self, got: bytes) -> None:
        """Compare *got* with the expected content."""
        expected = self.content.value
        if isinstance(expected, str):
            observed = decode_lossy(got)
            changes = changeset(expected.strip(), observed.strip())
            matched = changes.is_same
            shown = expected
        else:
            observed = describe_bytes(got)
            changes = changeset(_escape_bytes(expected), _escape_bytes(got))
            matched = got == expected
            shown = describe_bytes(expected)

        if matched == self.expected_result:
            return
        if self.expected_result:
            raise NotEqualError(shown, observed, render(changes))
        raise UnexpectedEqualError(observed)


@dc.dataclass(frozen=True, slots=True)
class Contains(ContentPredicate):
    """Output contains ``content`` (or lacks it when negated); never trims."""

    content: Content
    expected_result: bool = True

    def __post_init__(self) -> None:
        _coerce_content(self, self.content)

    def verify(self, got: bytes) -> None:
        """Search *got* for the expected content."""
        needle = self.content.value
        if isinstance(needle, str):
            haystack = decode_lossy(got)
            found = needle in haystack
        else:
            haystack = describe_bytes(got)
            found = needle in got

        if found == self.expected_result:
            return
        if self.expected_result:
            raise DoesNotContainError(self.content.describe(), haystack)
        raise UnexpectedContainsError(self.content.describe(), haystack)


@dc.dataclass(frozen=True, slots=True)
class Satisfies(ContentPredicate):
    """Output satisfies a user-supplied ``func``; ``message`` explains failures."""

    func: t.Callable[[str], object]
    message: str

    def verify(self, got: bytes) -> None:
        """Call ``func`` with the decoded output."""
        text = decode_lossy(got)
        if not self.func(text):
            raise PredicateFailedError(self.message, text)


@dc.dataclass(frozen=True, slots=True)
class MatchesRegex(ContentPredicate):
    """Output matches ``pattern``.

    Without ``count`` one match anywhere is enough. With ``count`` the number
    of non-overlapping matches must be exactly ``count``. ``bytes`` patterns
    run against the raw output, ``str`` patterns against the decoded text.
    """

    pattern: re.Pattern[str] | re.Pattern[bytes]
    count: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, re.Pattern):
            object.__setattr__(self, "pattern", re.compile(self.pattern))
        if self.count is not None:
            validate_match_count(self.count)

    def _subject(self, got: bytes) -> str | bytes:
        if isinstance(self.pattern.pattern, bytes):
            return got
        return decode_lossy(got)

    def verify(self, got: bytes) -> None:
        """Match ``pattern`` against *got*."""
        subject = self._subject(got)
        pattern = t.cast("re.Pattern[t.Any]", self.pattern)
        source = self.pattern.pattern
        shown_pattern = source if isinstance(source, str) else repr(source)
        shown = subject if isinstance(subject, str) else describe_bytes(subject)

        if self.count is None:
            if pattern.search(subject) is None:
                raise RegexMismatchError(shown_pattern, shown)
            return

        observed = sum(1 for _ in pattern.finditer(subject))
        if observed != self.count:
            raise RegexMismatchError(
                shown_pattern,
                shown,
                expected_count=self.count,
                observed_count=observed,
            )


__all__ = [
    "Content",
    "ContentLike",
    "ContentPredicate",
    "Contains",
    "Is",
    "MatchesRegex",
    "Satisfies",
    "decode_lossy",
    "describe_bytes",
]
