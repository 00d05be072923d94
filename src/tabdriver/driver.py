"""Session driver: the fixed sequence of steps one run performs.

Requires an injected Playwright instance. Never exits the process: every
failure propagates as SessionError to the caller (the CLI).
"""
import logging
import sys
from typing import Callable

from .browser.cookies import export_cookies
from .browser.session import log_browser_version, open_browser, open_tab
from .browser.stealth import install_stealth
from .config import SessionConfig
from .payload import inject_payload

log = logging.getLogger(__name__)


def run_session(config: SessionConfig, playwright, *,
                read_line: Callable[[], str] | None = None) -> None:
    """Drive one browser session as described by *config*.

    Args:
        config: Resolved session configuration.
        playwright: A started Playwright instance (``sync_playwright().start()``
            or the value bound by ``with sync_playwright() as p``).
        read_line: Blocking operator-input source for the confirm and wait
            gates. Defaults to ``sys.stdin.readline``.
    """
    if read_line is None:
        read_line = sys.stdin.readline

    with open_browser(playwright, config) as handle:
        if config.wants_output:
            log.info("Saving cookies to '%s'", config.output)
        elif config.clean:
            log.warning("--clean has no effect without --output")
        if config.wants_payload:
            log.info("Using payload from '%s'", config.payload)

        if log.isEnabledFor(logging.DEBUG):
            log_browser_version(handle)

        with open_tab(handle, config) as tab:
            if config.stealth:
                install_stealth(tab.cdp)

            if config.url:
                tab.navigate(config.url)

            if config.confirm:
                log.info("Waiting for user confirmation to proceed...")
                read_line()

            if config.wants_output:
                export_cookies(
                    tab, config.output,
                    clean=config.wants_clean,
                    settle_delay=config.settle_delay,
                )

            if config.wants_payload:
                inject_payload(tab, config.payload)

            if config.wait:
                log.info("Hanging browser, press Enter to exit...")
                read_line()

            log.info("Exiting instance...")
