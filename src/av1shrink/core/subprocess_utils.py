"""Subprocess utilities for external tool invocation.

This module provides the two ways av1shrink talks to ffmpeg and ffprobe:

- run_command(): run a program to completion and capture its output.
- StreamingProcess: run a program while reading its stdout line by line,
  used for the long-running encode that reports progress on stdout.

A non-zero exit code is data, not an error: both return it to the caller.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from collections import deque
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)

# Return code used when the program could not be started or timed out
FAILED_TO_RUN = -1


@dataclass(frozen=True)
class RunResult:
    """Captured result of a finished subprocess."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        """True if the process exited with code 0."""
        return self.returncode == 0


CommandRunner = Callable[[Sequence[str | Path]], RunResult]
"""Signature of run_command(), used to inject fakes in tests."""


def _command_name(args: Sequence[str]) -> str:
    return Path(args[0]).name if args else "unknown"


def run_command(
    args: Sequence[str | Path],
    timeout: float | None = None,
) -> RunResult:
    """Run an external command and capture its output.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        timeout: Timeout in seconds (None = no limit).

    Returns:
        RunResult with exit code and captured text. A program that cannot be
        started or that times out yields returncode -1 and an explanation in
        stderr; no exception is raised.
    """
    str_args = [str(arg) for arg in args]
    command_name = _command_name(str_args)

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": command_name, "arg_count": len(str_args)},
    )
    start_time = time.monotonic()

    try:
        result = subprocess.run(  # nosec B603 - caller validates args
            str_args,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %ss: %s", timeout, command_name)
        return RunResult(FAILED_TO_RUN, "", f"{command_name} timed out")
    except OSError as e:
        logger.debug("Could not start %s: %s", command_name, e)
        return RunResult(FAILED_TO_RUN, "", f"{command_name} could not be run: {e}")

    elapsed = time.monotonic() - start_time
    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": result.returncode,
        },
    )
    return RunResult(result.returncode, result.stdout or "", result.stderr or "")


class StreamingProcess:
    """A subprocess whose stdout is consumed line by line as it is produced.

    Stderr is drained on a daemon thread while the caller reads stdout.
    With keep_lines set, only the last keep_lines lines of each stream are
    kept.

    Usage:
        with StreamingProcess(cmd) as proc:
            for line in proc.iter_stdout():
                handle(line)
        result = proc.result()
    """

    STDERR_DRAIN_TIMEOUT: float = 5.0

    def __init__(
        self, args: Sequence[str | Path], keep_lines: int | None = None
    ) -> None:
        self.args = [str(arg) for arg in args]
        self.keep_lines = keep_lines
        self.stdout_lines: deque[str] = deque(maxlen=keep_lines)
        self.stderr_lines: deque[str] = deque(maxlen=keep_lines)
        self.returncode: int | None = None
        self._process: subprocess.Popen[str] | None = None
        # Filled by the reader thread, copied to stderr_lines on finish
        self._stderr_tail: deque[str] = deque(maxlen=keep_lines)
        self._stderr_lock = threading.Lock()
        self._reader: threading.Thread | None = None

    def __enter__(self) -> StreamingProcess:
        try:
            self._process = subprocess.Popen(  # nosec B603
                self.args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            self.stderr_lines.append(
                f"{_command_name(self.args)} could not be run: {e}"
            )
            self.returncode = FAILED_TO_RUN
            return self

        self._reader = threading.Thread(target=self._read_stderr, daemon=True)
        self._reader.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._process is None:
            return
        if self._process.poll() is None:
            logger.warning("Killing %s before completion", _command_name(self.args))
            self._process.kill()
        self._finish()

    def _read_stderr(self) -> None:
        assert self._process is not None and self._process.stderr is not None
        try:
            for line in self._process.stderr:
                with self._stderr_lock:
                    self._stderr_tail.append(line.rstrip("\r\n"))
        except (ValueError, OSError) as e:
            logger.debug("Stderr reader stopped: %s", e)

    def iter_stdout(self) -> Iterator[str]:
        """Yield stdout lines (without trailing newline) until the pipe closes."""
        if self._process is None or self._process.stdout is None:
            return
        for line in self._process.stdout:
            line = line.rstrip("\r\n")
            self.stdout_lines.append(line)
            yield line
        self._finish()

    def _finish(self) -> None:
        assert self._process is not None
        if self.returncode is not None:
            return
        self._process.wait()
        if self._reader is not None:
            self._reader.join(timeout=self.STDERR_DRAIN_TIMEOUT)
        with self._stderr_lock:
            self.stderr_lines = deque(self._stderr_tail, maxlen=self.keep_lines)
        self.returncode = self._process.returncode

    def result(self) -> RunResult:
        """Return the captured output once the process has finished."""
        if self.returncode is None:
            raise RuntimeError("Process has not finished")
        return RunResult(
            self.returncode,
            "\n".join(self.stdout_lines),
            "\n".join(self.stderr_lines),
        )
