"""
Process — run an external command to completion and capture its output.

Captured streams are decoded as UTF-8; undecodable bytes become U+FFFD.

Follows the shell exit-code conventions for launch failures so that
callers only ever branch on an integer:
  127  executable not found
  126  executable found but not runnable
"""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


@dataclass(frozen=True)
class ProcessResult:
    """Exit code and captured streams of one finished command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


class CommandRunner(Protocol):
    def run(self, args: List[str]) -> ProcessResult: ...


class ProcessRunner:
    """Blocking ``subprocess.run`` wrapper; no timeout unless one is given."""

    def __init__(self, cwd: Optional[str] = None, timeout: Optional[float] = None):
        self.cwd = cwd
        self.timeout = timeout

    def run(self, args: List[str]) -> ProcessResult:
        """Execute *args* and return (exit code, stdout, stderr)."""
        logger.debug("exec: %s", " ".join(args))
        try:
            result = subprocess.run(
                args,
                cwd=self.cwd,
                capture_output=True,
                timeout=self.timeout,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            return ProcessResult(EXIT_NOT_FOUND, "", str(e))
        except PermissionError as e:
            return ProcessResult(EXIT_NOT_EXECUTABLE, "", str(e))
        return ProcessResult(result.returncode, result.stdout, result.stderr)
