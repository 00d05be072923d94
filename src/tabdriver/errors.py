"""Operational error signals for a driver session.

Every browser or filesystem failure is wrapped into a SessionError at the
call site and propagated up to the CLI, which reports it and exits 1.
"""
from enum import Enum


class SessionStep(Enum):
    """Pipeline step that failed."""
    CONNECT = "connect"               # attach to an existing browser
    LAUNCH = "launch"                 # spawn a new browser
    TAB = "tab"                       # open the tab / its CDP session
    STEALTH = "stealth"               # register the stealth shim
    NAVIGATE = "navigate"             # goto or reload
    COOKIES_FETCH = "cookies_fetch"
    COOKIES_DELETE = "cookies_delete"
    COOKIES_WRITE = "cookies_write"
    EVALUATE = "evaluate"             # internal script evaluation
    PAYLOAD_READ = "payload_read"
    PAYLOAD_EVAL = "payload_eval"


class SessionError(Exception):
    """Exception carrying the SessionStep that failed."""

    def __init__(self, step: SessionStep, message: str = ""):
        self.step = step
        super().__init__(message or f"{step.value} failed")
