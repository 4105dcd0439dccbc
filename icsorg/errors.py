"""Why an icsorg run stopped, and the exit status that goes with it.

Missing calendar fields are never errors. A run aborts only when one of its
stages cannot continue: the configuration is unusable, the ICS source cannot
be acquired, the calendar cannot be expanded, or the org file cannot be
written. Each stage has its own ``IcsOrgError`` subclass.
"""
from __future__ import annotations

import logging
import sys
from enum import IntEnum
from typing import Optional

LOG = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Exit status of the icsorg command."""
    SUCCESS = 0
    ERROR = 1  # calendar not expandable, org file not writable
    CONFIG_ERROR = 3
    NETWORK_ERROR = 5
    NOT_FOUND = 6  # ICS file missing or unreadable
    INTERRUPTED = 130


class IcsOrgError(Exception):
    """A run aborted in ``stage``; ``code`` is the exit status to report."""

    stage = "convert"
    default_code = ExitCode.ERROR

    def __init__(self, message: str, hint: Optional[str] = None, code: Optional[ExitCode] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.code = ExitCode(code) if code is not None else self.default_code

    def __str__(self) -> str:
        return self.message

    def diagnostics(self) -> dict:
        return {"message": self.message, "code": int(self.code), "hint": self.hint, "stage": self.stage}


class ConfigError(IcsOrgError):
    """rc file, environment or switches are unusable."""
    stage = "config"
    default_code = ExitCode.CONFIG_ERROR


class SourceError(IcsOrgError):
    """The ICS file could not be read, or the URL could not be fetched."""
    stage = "acquire"
    default_code = ExitCode.NOT_FOUND


class ExpansionError(IcsOrgError):
    stage = "expand"


class SinkError(IcsOrgError):
    stage = "write"


def handle_error(error: BaseException, verbose: bool = False) -> int:
    """Report ``error`` on stderr and return the exit status for it."""
    if isinstance(error, IcsOrgError):
        LOG.debug("run aborted in stage %s", error.stage)
        print(f"Error: {error.message}", file=sys.stderr)
        if error.hint:
            print(f"Hint: {error.hint}", file=sys.stderr)
        return int(error.code)

    if isinstance(error, KeyboardInterrupt):
        print("\nInterrupted.", file=sys.stderr)
        return int(ExitCode.INTERRUPTED)

    print(f"Error: {error}", file=sys.stderr)
    if verbose:
        import traceback
        traceback.print_exception(type(error), error, error.__traceback__)
    return int(ExitCode.ERROR)
