"""Cookie fetch, storage clearing, and JSON export over CDP."""
import json
import logging
import time

from playwright.sync_api import Error as PlaywrightError

from ..errors import SessionError, SessionStep

log = logging.getLogger(__name__)


def fetch_cookies(tab) -> list[dict]:
    """Return the cookies visible to the tab's current URL, as CDP reports them."""
    try:
        response = tab.cdp.send("Network.getCookies")
    except PlaywrightError as e:
        raise SessionError(
            SessionStep.COOKIES_FETCH, f"Error occurred while fetching cookies: {e}"
        ) from e
    return response.get("cookies", [])


def delete_cookies(tab, cookies: list[dict]) -> int:
    """Delete each cookie by name and domain.

    Path and URL are left unconstrained, so every cookie sharing a
    name/domain pair goes, whatever its path. Returns the number of
    delete calls made.
    """
    for cookie in cookies:
        try:
            tab.cdp.send(
                "Network.deleteCookies",
                {"name": cookie["name"], "domain": cookie["domain"]},
            )
        except PlaywrightError as e:
            raise SessionError(
                SessionStep.COOKIES_DELETE,
                f"Error occurred while deleting cookie '{cookie['name']}': {e}",
            ) from e
    return len(cookies)


def clear_storage(tab, settle_delay: float) -> None:
    """Drop cookies and localStorage, reload, and let the page settle."""
    log.debug("Deleting cookies...")
    deleted = delete_cookies(tab, fetch_cookies(tab))
    tab.evaluate("localStorage.clear()", action="clearing localStorage")
    tab.reload()
    # load fires before some pages re-set their cookies
    time.sleep(settle_delay)
    log.debug("Cookies deleted successfully (%d)", deleted)


def write_cookies(cookies: list[dict], path: str) -> None:
    """Serialize *cookies* to JSON at *path* in a single write."""
    log.debug("Writing cookies to '%s'...", path)
    data = json.dumps(cookies)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(data)
    except OSError as e:
        raise SessionError(
            SessionStep.COOKIES_WRITE, f"Error occurred while writing cookies: {e}"
        ) from e


def export_cookies(tab, path: str, *, clean: bool = False, settle_delay: float = 0.0) -> list[dict]:
    """Optionally clear storage, then write the tab's cookies to *path*.

    Returns the exported cookie list.
    """
    if clean:
        clear_storage(tab, settle_delay)
    cookies = fetch_cookies(tab)
    write_cookies(cookies, path)
    log.info("Cookies successfully saved to '%s'", path)
    return cookies
