"""Browser handle and tab lifecycle.

The caller owns the Playwright instance; this module only acquires a
browser from it (launch or attach) and opens the single tab a run works
in. Both are context managers so the tab is closed and an owned browser
torn down however the run ends.
"""
import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from playwright.sync_api import Error as PlaywrightError

from ..config import SessionConfig
from ..errors import SessionError, SessionStep
from .chrome import build_launch_args, find_system_chrome, launch_cdp_browser, terminate_process
from .ua import resolve_user_agent

log = logging.getLogger(__name__)

# 0 disables Playwright's default 30s timeout: navigation waits on the
# browser's own load signal only.
NAVIGATION_TIMEOUT = 0


@dataclass
class BrowserHandle:
    browser: Any
    owned: bool = False
    proc: Any = None          # system Chrome child, if this run spawned one
    profile_dir: str = ""     # throwaway user-data dir to remove on release


class Tab:
    """One page plus the CDP session bound to it."""

    def __init__(self, page, context, cdp, owns_context: bool = False):
        self.page = page
        self.context = context
        self.cdp = cdp
        self.owns_context = owns_context
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def navigate(self, url: str) -> None:
        """Navigate and block until the load event."""
        log.debug("Navigating to '%s'", url)
        try:
            self.page.goto(url, wait_until="load", timeout=NAVIGATION_TIMEOUT)
        except PlaywrightError as e:
            raise SessionError(
                SessionStep.NAVIGATE, f"Error occurred while navigating to '{url}': {e}"
            ) from e

    def reload(self) -> None:
        try:
            self.page.reload(wait_until="load", timeout=NAVIGATION_TIMEOUT)
        except PlaywrightError as e:
            raise SessionError(
                SessionStep.NAVIGATE, f"Error occurred while reloading page: {e}"
            ) from e

    def evaluate(
        self,
        expression: str,
        *,
        step: SessionStep = SessionStep.EVALUATE,
        action: str = "evaluating script",
    ) -> dict:
        """Run *expression* with ``Runtime.evaluate`` in the page.

        Returns the CDP ``RemoteObject`` of the result. A protocol failure
        or an exception thrown inside the page raises SessionError(*step*).
        """
        try:
            response = self.cdp.send(
                "Runtime.evaluate",
                {"expression": expression, "returnByValue": False},
            )
        except PlaywrightError as e:
            raise SessionError(step, f"Error occurred while {action}: {e}") from e

        details = response.get("exceptionDetails")
        if details:
            raise SessionError(step, f"Error occurred while {action}: {_describe_exception(details)}")
        return response.get("result", {})

    def close(self, raise_errors: bool = True) -> None:
        """Force-close the page, skipping ``beforeunload`` handlers.

        Idempotent. Closes the browsing context too when this tab created it,
        even if closing the page failed.
        """
        if self._closed:
            return
        self._closed = True
        errors = []
        if self.page is not None:
            try:
                self.page.close(run_before_unload=False)
            except PlaywrightError as e:
                errors.append(e)
        if self.owns_context:
            try:
                self.context.close()
            except PlaywrightError as e:
                errors.append(e)
        if not errors:
            return
        if raise_errors:
            raise SessionError(
                SessionStep.TAB, f"Error occurred while closing tab: {errors[0]}"
            ) from errors[0]
        for e in errors:
            log.warning("Failed to close tab cleanly: %s", e)


def _describe_exception(details: dict) -> str:
    exception = details.get("exception") or {}
    return exception.get("description") or details.get("text") or "script raised an exception"


def connect_browser(playwright, endpoint: str) -> BrowserHandle:
    """Attach to an existing browser at a ``ws://`` (or ``http://``) endpoint."""
    log.info("Connecting to existing browser instance at %s", endpoint)
    try:
        browser = playwright.chromium.connect_over_cdp(endpoint)
    except PlaywrightError as e:
        raise SessionError(
            SessionStep.CONNECT, f"Error occurred while connecting to '{endpoint}': {e}"
        ) from e
    return BrowserHandle(browser=browser, owned=False)


def launch_browser(playwright, config: SessionConfig) -> BrowserHandle:
    """Launch a new browser process.

    Uses a system Chrome over CDP when one is configured or found, else
    Playwright's bundled Chromium. Either way the browser gets the UA (and
    incognito) flags from :func:`build_launch_args`.
    """
    user_agent = resolve_user_agent(config.user_agent)
    args = build_launch_args(user_agent, incognito=config.incognito)
    log.info("Launching new %s browser instance", "headful" if config.headful else "headless")

    chrome_path = config.chrome_path or find_system_chrome()
    if chrome_path:
        profile_dir = config.user_data_dir or tempfile.mkdtemp(prefix="tabdriver-")
        throwaway = "" if config.user_data_dir else profile_dir
        try:
            browser, proc = launch_cdp_browser(
                playwright, chrome_path,
                headed=config.headful, port=config.debug_port,
                user_data_dir=profile_dir,
                extra_args=args,
            )
        except (PlaywrightError, RuntimeError, OSError) as e:
            if throwaway:
                shutil.rmtree(throwaway, ignore_errors=True)
            raise SessionError(
                SessionStep.LAUNCH, f"Error occurred while launching '{chrome_path}': {e}"
            ) from e
        return BrowserHandle(browser=browser, owned=True, proc=proc, profile_dir=throwaway)

    log.debug("No system Chrome found, using Playwright Chromium")
    try:
        browser = playwright.chromium.launch(headless=not config.headful, args=args)
    except PlaywrightError as e:
        raise SessionError(
            SessionStep.LAUNCH, f"Error occurred while launching Chromium: {e}"
        ) from e
    return BrowserHandle(browser=browser, owned=True)


def release_browser(handle: BrowserHandle) -> None:
    """Tear down an owned browser. A borrowed one is left running."""
    if not handle.owned:
        return
    if handle.proc is not None:
        terminate_process(handle.proc)
    else:
        try:
            handle.browser.close()
        except PlaywrightError as e:
            log.warning("Failed to close browser cleanly: %s", e)
    if handle.profile_dir:
        shutil.rmtree(handle.profile_dir, ignore_errors=True)


def log_browser_version(handle: BrowserHandle) -> None:
    """Log ``Browser.getVersion`` details at debug level."""
    try:
        cdp = handle.browser.new_browser_cdp_session()
        version = cdp.send("Browser.getVersion")
    except PlaywrightError as e:
        log.debug("Could not read browser information: %s", e)
        return
    log.debug(
        "Browser information:\n\t- User-Agent: %s\n\t- Product information: %s"
        "\n\t- JavaScript Version: %s",
        version.get("userAgent"), version.get("product"), version.get("jsVersion"),
    )


@contextmanager
def open_browser(playwright, config: SessionConfig):
    """Acquire the run's browser handle. Yields a BrowserHandle."""
    if config.mode == "attach":
        handle = connect_browser(playwright, config.connect)
    else:
        handle = launch_browser(playwright, config)
    try:
        yield handle
    finally:
        release_browser(handle)


@contextmanager
def open_tab(handle: BrowserHandle, config: SessionConfig):
    """Open the run's single tab. Yields a Tab, closed on exit.

    In attach mode with incognito an isolated browsing context is created
    for it; otherwise the browser's default context is used.
    """
    browser = handle.browser
    page = None
    owns_context = False
    try:
        if config.wants_incognito_context:
            log.debug("Creating incognito browsing context")
            context, owns_context = browser.new_context(), True
        elif browser.contexts:
            context, owns_context = browser.contexts[0], False
        else:
            context, owns_context = browser.new_context(), True
        page = context.new_page()
        cdp = context.new_cdp_session(page)
        cdp.send("Network.enable")
    except PlaywrightError as e:
        # don't leave a half-opened tab or context in the browser
        if page is not None or owns_context:
            Tab(page, context, None, owns_context=owns_context).close(raise_errors=False)
        raise SessionError(SessionStep.TAB, f"Error occurred while opening tab: {e}") from e

    tab = Tab(page, context, cdp, owns_context=owns_context)
    try:
        yield tab
    except BaseException:
        tab.close(raise_errors=False)
        raise
    tab.close()
