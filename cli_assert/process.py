"""Spawn a command, feed its stdin and capture everything it writes.

Stdin is fed on its own thread while two more threads drain stdout and
stderr, so a child that fills an output pipe before it has consumed its
input cannot deadlock against us. Nothing here times out: a child that
never exits blocks :func:`run_process` forever.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import shutil
import subprocess
import threading
import typing as t
from pathlib import Path

from .errors import SpawnError, StdinWriteError, format_command

logger = logging.getLogger(__name__)

StdinWriter: t.TypeAlias = t.Callable[[t.BinaryIO], object]
StdinSource: t.TypeAlias = "bytes | str | StdinWriter"


@dc.dataclass(frozen=True, slots=True)
class CapturedOutput:
    """Exit status and output of a finished process.

    ``exit_code`` is ``None`` when the process was terminated by a signal;
    ``signal`` then holds the signal number.
    """

    exit_code: int | None
    stdout: bytes = b""
    stderr: bytes = b""
    signal: int | None = None

    @classmethod
    def from_returncode(
        cls, returncode: int, stdout: bytes, stderr: bytes
    ) -> CapturedOutput:
        """Translate a :mod:`subprocess` return code."""
        if returncode < 0:
            return cls(None, stdout, stderr, signal=-returncode)
        return cls(returncode, stdout, stderr)

    @property
    def success(self) -> bool:
        """Return ``True`` if the process exited normally with code 0."""
        return self.exit_code == 0


@dc.dataclass(frozen=True, slots=True)
class ProcessRequest:
    """Everything needed to run a command once."""

    argv: tuple[str, ...]
    env: t.Mapping[str, str]
    cwd: Path | None = None
    stdin: tuple[StdinSource, ...] = ()

    def __post_init__(self) -> None:
        if not self.argv:
            msg = "argv must contain at least the program to run"
            raise ValueError(msg)

    @property
    def command_line(self) -> str:
        """Return the argv as a shell-style string."""
        return format_command(self.argv)


class ProcessRunner(t.Protocol):
    """Callable that executes a :class:`ProcessRequest`."""

    def __call__(self, request: ProcessRequest) -> CapturedOutput:
        """Run *request* to completion."""
        ...


def resolve_program(program: str, path: str | None = None) -> str:
    """Return the executable to launch for *program*.

    Bare names are looked up on the caller's ``PATH`` rather than the
    child's, which may be empty. Unresolvable names are returned unchanged
    so spawning reports the failure.
    """
    if os.sep in program or (os.altsep and os.altsep in program):
        return program
    search = path if path is not None else os.environ.get("PATH", os.defpath)
    return shutil.which(program, path=search) or program


def _drain(stream: t.BinaryIO, sink: list[bytes]) -> None:
    """Read *stream* to EOF into *sink*."""
    try:
        sink.append(stream.read())
    finally:
        stream.close()


def _write_source(stdin: t.BinaryIO, source: StdinSource) -> None:
    if isinstance(source, str):
        stdin.write(source.encode("utf-8"))
    elif isinstance(source, bytes | bytearray | memoryview):
        stdin.write(source)
    else:
        source(stdin)
    stdin.flush()


def _feed(
    stdin: t.BinaryIO,
    sources: t.Sequence[StdinSource],
    errors: list[BaseException],
) -> None:
    """Write each of *sources* to *stdin*, then close it.

    A child that exits (or closes its stdin) before consuming everything
    ends the feed quietly. Any other failure is stored in *errors* for the
    spawning thread to report.
    """
    try:
        for source in sources:
            _write_source(stdin, source)
    except BrokenPipeError:
        logger.debug("Child closed stdin before all input was written")
    except Exception as exc:  # noqa: BLE001 - re-raised by run_process
        errors.append(exc)
    finally:
        try:
            stdin.close()
        except BrokenPipeError:
            logger.debug("Child closed stdin before the final flush")


def _start_thread(
    name: str, target: t.Callable[..., None], *args: object
) -> threading.Thread:
    thread = threading.Thread(target=target, args=args, name=name, daemon=True)
    thread.start()
    return thread


def run_process(request: ProcessRequest) -> CapturedOutput:
    """Run *request* to completion and capture its status and output.

    Raises :class:`SpawnError` if the program cannot be started and
    :class:`StdinWriteError` if a stdin writer raised.
    """
    argv = list(request.argv)
    logger.debug("Spawning %s", request.command_line)
    try:
        proc = subprocess.Popen(  # noqa: S603 - argv is never passed to a shell
            argv,
            executable=resolve_program(argv[0]),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=dict(request.env),
            cwd=request.cwd,
            shell=False,
        )
    except (OSError, ValueError) as exc:
        raise SpawnError(argv) from exc

    stdin = t.cast("t.BinaryIO", proc.stdin)
    stdout = t.cast("t.BinaryIO", proc.stdout)
    stderr = t.cast("t.BinaryIO", proc.stderr)

    out_chunks: list[bytes] = []
    err_chunks: list[bytes] = []
    write_errors: list[BaseException] = []
    threads = [
        _start_thread("cli-assert-stdout", _drain, stdout, out_chunks),
        _start_thread("cli-assert-stderr", _drain, stderr, err_chunks),
        _start_thread("cli-assert-stdin", _feed, stdin, request.stdin, write_errors),
    ]
    for thread in threads:
        thread.join()
    returncode = proc.wait()
    logger.debug("%s exited with %s", request.command_line, returncode)

    if write_errors:
        raise StdinWriteError(argv) from write_errors[0]

    return CapturedOutput.from_returncode(
        returncode, b"".join(out_chunks), b"".join(err_chunks)
    )


__all__ = [
    "CapturedOutput",
    "ProcessRequest",
    "ProcessRunner",
    "StdinSource",
    "StdinWriter",
    "resolve_program",
    "run_process",
]
