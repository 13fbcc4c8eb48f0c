"""Environment composition for spawned commands.

Children never inherit the caller's environment implicitly: the driver
passes exactly the mapping produced by :meth:`Environment.compile`.
"""

from __future__ import annotations

import collections.abc as cabc
import os
import typing as t

EnvironmentLike: t.TypeAlias = (
    "Environment | t.Mapping[str, object] | t.Iterable[tuple[str, object]]"
)

_REMOVED = object()


class Environment:
    """An immutable description of a child's environment.

    ``Environment.inherit()`` starts from ``os.environ`` as it is when the
    command runs; ``Environment.empty()`` starts from nothing. Overrides are
    applied in insertion order, so the last write for a key wins.
    """

    __slots__ = ("_inherit", "_overrides")

    def __init__(
        self,
        overrides: t.Iterable[tuple[str, object]] = (),
        *,
        inherit: bool = False,
    ) -> None:
        self._inherit = inherit
        self._overrides: tuple[tuple[str, object], ...] = tuple(
            (str(key), value if value is _REMOVED else str(value))
            for key, value in overrides
        )

    @classmethod
    def inherit(cls) -> Environment:
        """Return an environment based on the caller's variables."""
        return cls(inherit=True)

    @classmethod
    def empty(cls) -> Environment:
        """Return an environment with no variables."""
        return cls()

    @classmethod
    def coerce(cls, value: EnvironmentLike) -> Environment:
        """Build an :class:`Environment` from a mapping or key/value pairs.

        Anything other than an :class:`Environment` means "empty plus these
        variables".
        """
        if isinstance(value, Environment):
            return value
        if isinstance(value, cabc.Mapping):
            return cls(value.items())
        if isinstance(value, str | bytes):
            msg = "environment must be a mapping or key/value pairs"
            raise TypeError(msg)
        return cls(value)

    @property
    def inherits(self) -> bool:
        """Return ``True`` when the caller's environment is the base."""
        return self._inherit

    def insert(self, key: str, value: object) -> Environment:
        """Return a copy with *key* set to ``str(value)``."""
        return Environment((*self._overrides, (key, value)), inherit=self._inherit)

    def remove(self, key: str) -> Environment:
        """Return a copy with *key* unset."""
        return Environment((*self._overrides, (key, _REMOVED)), inherit=self._inherit)

    def compile(self) -> dict[str, str]:
        """Return the concrete variables to hand to the child."""
        env = dict(os.environ) if self._inherit else {}
        for key, value in self._overrides:
            if value is _REMOVED:
                env.pop(key, None)
            else:
                env[key] = t.cast("str", value)
        return env

    def __eq__(self, other: object) -> bool:
        """Compare base and overrides."""
        if not isinstance(other, Environment):
            return NotImplemented
        return (self._inherit, self._overrides) == (other._inherit, other._overrides)

    def __hash__(self) -> int:
        """Hash base and overrides."""
        return hash((self._inherit, self._overrides))

    def __repr__(self) -> str:
        """Return a debug representation."""
        base = "inherit" if self._inherit else "empty"
        items = ", ".join(
            f"-{key}" if value is _REMOVED else f"{key}={value!r}"
            for key, value in self._overrides
        )
        return f"Environment({base}{'; ' + items if items else ''})"


__all__ = ["Environment", "EnvironmentLike"]
