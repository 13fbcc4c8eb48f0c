"""Line-oriented diffing and rendering of mismatch reports."""

from __future__ import annotations

import dataclasses as dc
import difflib
import enum
import io
import typing as t

from .color import color_enabled

_RESET: t.Final[str] = "\x1b[0m"
_RED: t.Final[str] = "31"
_GREEN: t.Final[str] = "32"
_WHITE: t.Final[str] = "37"
_ON_GREEN: t.Final[str] = "42"
_DIM: t.Final[str] = "2"

LINE_SEPARATOR: t.Final[str] = "\n"
WORD_SEPARATOR: t.Final[str] = " "


class DiffKind(enum.StrEnum):
    """Operations in an edit script."""

    SAME = "same"
    ADDED = "added"
    REMOVED = "removed"


@dc.dataclass(frozen=True, slots=True)
class Difference:
    """A single line (or word) of an edit script."""

    kind: DiffKind
    text: str


@dc.dataclass(frozen=True, slots=True)
class Changeset:
    """Edit script turning ``original`` into ``edited``."""

    original: str
    edited: str
    separator: str
    diffs: tuple[Difference, ...]

    @property
    def distance(self) -> int:
        """Return the number of added and removed entries."""
        return sum(1 for diff in self.diffs if diff.kind is not DiffKind.SAME)

    @property
    def is_same(self) -> bool:
        """Return ``True`` when both sides are identical."""
        return self.distance == 0


def changeset(
    original: str, edited: str, separator: str = LINE_SEPARATOR
) -> Changeset:
    """Compute the edit script between *original* and *edited*.

    Both values are split on *separator* and aligned with
    :class:`difflib.SequenceMatcher`. Replaced ranges are emitted as all
    removed entries followed by all added entries.
    """
    old = original.split(separator)
    new = edited.split(separator)
    matcher = difflib.SequenceMatcher(None, old, new, autojunk=False)
    diffs: list[Difference] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            diffs.extend(Difference(DiffKind.SAME, line) for line in old[i1:i2])
            continue
        diffs.extend(Difference(DiffKind.REMOVED, line) for line in old[i1:i2])
        diffs.extend(Difference(DiffKind.ADDED, line) for line in new[j1:j2])
    return Changeset(original, edited, separator, tuple(diffs))


def _paint(text: str, *codes: str) -> str:
    return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


def _render_words(removed: str, added: str) -> str:
    """Highlight the words of *added* that are not in *removed*."""
    words = changeset(removed, added, WORD_SEPARATOR)
    parts = []
    for diff in words.diffs:
        if diff.kind is DiffKind.SAME:
            parts.append(_paint(diff.text, _GREEN))
        elif diff.kind is DiffKind.ADDED:
            parts.append(_paint(diff.text, _WHITE, _ON_GREEN))
    return WORD_SEPARATOR.join(parts)


def render(changes: Changeset, *, color: bool | None = None) -> str:
    """Render *changes* as a textual diff.

    Unchanged lines are prefixed with a space, removed lines with ``-`` and
    added lines with ``+``. With colour enabled, an added line directly
    following a removed one is diffed word by word so the changed words
    stand out.
    """
    if color is None:
        color = color_enabled()

    out = io.StringIO()
    previous: Difference | None = None
    for diff in changes.diffs:
        if diff.kind is DiffKind.SAME:
            out.write(f" {diff.text}\n")
        elif diff.kind is DiffKind.REMOVED:
            line = f"-{diff.text}"
            out.write(f"{_paint(line, _RED) if color else line}\n")
        elif not color:
            out.write(f"+{diff.text}\n")
        elif previous is not None and previous.kind is DiffKind.REMOVED:
            words = _render_words(previous.text, diff.text)
            out.write(f"{_paint('+', _GREEN)}{words}\n")
        else:
            out.write(f"{_paint(f'+{diff.text}', _GREEN, _DIM)}\n")
        previous = diff
    return out.getvalue()


def render_diff(expected: str, actual: str, *, color: bool | None = None) -> str:
    """Return the rendered line diff between *expected* and *actual*."""
    return render(changeset(expected, actual), color=color)


__all__ = [
    "LINE_SEPARATOR",
    "WORD_SEPARATOR",
    "Changeset",
    "DiffKind",
    "Difference",
    "changeset",
    "render",
    "render_diff",
]
