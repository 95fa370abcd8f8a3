"""
Error hierarchy for rjs_filter.

Every failure of a dump surfaces as one of these after the temp files
of that dump have been removed.  Callers that do not care about the
cause can catch ``RJsFilterError``.
"""
from __future__ import annotations

from typing import List, Optional


class RJsFilterError(Exception):
    """Base exception for all r.js filter errors."""


class InterpreterNotFoundError(RJsFilterError):
    """The optimizer exited with 127: the interpreter path did not resolve."""

    def __init__(self, command: List[str]):
        self.command = list(command)
        super().__init__("Path to node executable could not be resolved.")


class OptimizerFailureError(RJsFilterError):
    """The optimizer exited non-zero (other than 127)."""

    def __init__(
        self,
        command: List[str],
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
        input: Optional[str] = None,
    ):
        self.command = list(command)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.input = input

        message = f"An error occurred while running:\n{' '.join(self.command)}"
        if stderr:
            message += f"\n\nError Output:\n{stderr.rstrip()}"
        if stdout:
            message += f"\n\nOutput:\n{stdout.rstrip()}"
        if input is not None:
            message += f"\n\nInput:\n{input}"
        super().__init__(message)


class OutputMissingError(RJsFilterError):
    """The optimizer reported success but left no output file."""

    def __init__(self, output_path: str):
        self.output_path = output_path
        super().__init__("Error creating output file.")


class UnresolvedModuleError(RJsFilterError):
    """Multi-output build, but the asset belongs to none of the declared modules."""

    def __init__(self, source_location: str, module_names: List[str]):
        self.source_location = source_location
        self.module_names = list(module_names)
        super().__init__(
            f"No build module matches {source_location} "
            f"(declared: {', '.join(self.module_names) or 'none'})"
        )
