"""browser: Playwright/CDP primitives for a single driver session.

Auto-discovery of a system Chrome is macOS and Linux only.
"""
from .chrome import find_system_chrome, launch_cdp_browser, build_launch_args  # noqa: F401
from .cookies import fetch_cookies, delete_cookies, clear_storage, export_cookies  # noqa: F401
from .session import BrowserHandle, Tab, open_browser, open_tab  # noqa: F401
from .stealth import build_stealth_shim, install_stealth  # noqa: F401
from .ua import build_user_agent, resolve_user_agent  # noqa: F401
