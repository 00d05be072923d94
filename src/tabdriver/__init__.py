"""tabdriver: single-shot Chromium session driver over CDP.

Launches or attaches to a browser, opens one tab, optionally navigates,
clears storage, exports cookies to JSON and injects a script payload.
"""
__version__ = "0.1.0"

from .config import SessionConfig  # noqa: F401,E402
from .errors import SessionStep, SessionError  # noqa: F401,E402
from .driver import run_session  # noqa: F401,E402
