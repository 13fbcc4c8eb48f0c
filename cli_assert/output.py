"""Bind content predicates to the stream they inspect."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as t

from .errors import OutputMismatchError, PredicateError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .content import ContentPredicate
    from .process import CapturedOutput


class OutputKind(enum.StrEnum):
    """Output streams of a child process."""

    STDOUT = "stdout"
    STDERR = "stderr"

    def select(self, output: CapturedOutput) -> bytes:
        """Return the bytes captured for this stream."""
        if self is OutputKind.STDOUT:
            return output.stdout
        return output.stderr


@dc.dataclass(frozen=True, slots=True)
class OutputPredicate:
    """A content predicate applied to one output stream."""

    kind: OutputKind
    predicate: ContentPredicate

    def verify(self, output: CapturedOutput) -> None:
        """Check the selected stream, tagging failures with the stream name."""
        try:
            self.predicate.verify(self.kind.select(output))
        except PredicateError as exc:
            raise OutputMismatchError(self.kind.value) from exc


__all__ = ["OutputKind", "OutputPredicate"]
