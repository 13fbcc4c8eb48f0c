"""Process runner doubles for orchestrator tests."""

from __future__ import annotations

from cli_assert.process import CapturedOutput, ProcessRequest


class FakeRunner:
    """Return a canned :class:`CapturedOutput` and record each request."""

    def __init__(
        self,
        exit_code: int | None = 0,
        stdout: bytes | str = b"",
        stderr: bytes | str = b"",
        *,
        signal: int | None = None,
    ) -> None:
        self.output = CapturedOutput(
            exit_code,
            stdout.encode() if isinstance(stdout, str) else stdout,
            stderr.encode() if isinstance(stderr, str) else stderr,
            signal=signal,
        )
        self.requests: list[ProcessRequest] = []

    def __call__(self, request: ProcessRequest) -> CapturedOutput:
        """Record *request* and return the canned output."""
        self.requests.append(request)
        return self.output

    @property
    def last_request(self) -> ProcessRequest:
        """Return the most recent request."""
        assert self.requests, "runner was never called"
        return self.requests[-1]


class FailingRunner:
    """Raise *error* instead of running anything."""

    def __init__(self, error: BaseException) -> None:
        self.error = error

    def __call__(self, request: ProcessRequest) -> CapturedOutput:
        """Raise the configured error."""
        raise self.error
