"""Chrome discovery and CDP launch.

macOS and Linux only for auto-discovery; an explicit binary path works
anywhere Chrome runs.
"""
import logging
import os
import platform
import shutil
import subprocess
import time
import urllib.request

log = logging.getLogger(__name__)


def find_system_chrome() -> str | None:
    """Find Chrome or Edge binary on the system.

    Returns the path to the browser executable, or None if not found.
    """
    system = platform.system()
    if system == "Darwin":
        candidates = [
            "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
            "/Applications/Google Chrome Canary.app/Contents/MacOS/Google Chrome Canary",
            "/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge",
            "/Applications/Chromium.app/Contents/MacOS/Chromium",
        ]
    elif system == "Linux":
        candidates = [
            "google-chrome",
            "google-chrome-stable",
            "chromium-browser",
            "chromium",
            "microsoft-edge",
            "microsoft-edge-stable",
        ]
    else:
        return None

    for candidate in candidates:
        if system == "Darwin":
            if os.path.isfile(candidate):
                return candidate
        else:
            path = shutil.which(candidate)
            if path:
                return path
    return None


def build_launch_args(user_agent: str, *, incognito: bool = False) -> list[str]:
    """Browser flags shared by system Chrome and bundled Chromium launches."""
    args = [f"--user-agent={user_agent}"]
    if incognito:
        log.debug("Launching instance with incognito flag")
        args.append("--incognito")
    return args


def build_chrome_command(
    chrome_path: str,
    *,
    headed: bool = False,
    port: int = 9222,
    user_data_dir: str = "",
    extra_args: list[str] | None = None,
) -> list[str]:
    """Full argv for a system Chrome started with remote debugging."""
    args = [
        chrome_path,
        f"--remote-debugging-port={port}",
        "--no-first-run",
        "--no-default-browser-check",
    ]
    if user_data_dir:
        args.append(f"--user-data-dir={user_data_dir}")
    if extra_args:
        args.extend(extra_args)
    if not headed:
        args.append("--headless=new")
    args.append("about:blank")
    return args


def _debugger_answers(cdp_url: str) -> bool:
    try:
        urllib.request.urlopen(f"{cdp_url}/json/version", timeout=1)
    except OSError:
        return False
    return True


def launch_cdp_browser(
    playwright,
    chrome_path: str,
    *,
    headed: bool = False,
    port: int = 9222,
    user_data_dir: str = "",
    extra_args: list[str] | None = None,
):
    """Launch system Chrome with remote debugging and connect via CDP.

    Returns ``(browser, chrome_proc)`` on success. Raises ``RuntimeError``
    if *port* already has a debugger on it, if Chrome exits early, or if it
    never exposes the debugger, and re-raises the connect error; a spawned
    process is terminated in every case.
    """
    cdp_url = f"http://127.0.0.1:{port}"
    # A foreign browser on the port would answer the readiness poll below.
    if _debugger_answers(cdp_url):
        raise RuntimeError(f"port {port} is already in use by another debugger")

    if user_data_dir:
        os.makedirs(user_data_dir, exist_ok=True)

    args = build_chrome_command(
        chrome_path,
        headed=headed,
        port=port,
        user_data_dir=user_data_dir,
        extra_args=extra_args,
    )

    log.debug("Launching Chrome via CDP: %s", os.path.basename(chrome_path))
    proc = subprocess.Popen(
        args,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )

    # Wait for the debugger to be ready
    for _ in range(30):
        if proc.poll() is not None:
            raise RuntimeError(
                f"Chrome exited unexpectedly (code {proc.returncode})"
            )
        if _debugger_answers(cdp_url):
            break
        time.sleep(0.3)
    else:
        terminate_process(proc)
        raise RuntimeError("Chrome failed to start with remote debugging")

    try:
        browser = playwright.chromium.connect_over_cdp(cdp_url)
    except Exception:
        terminate_process(proc)
        raise
    log.debug("Connected to Chrome via CDP (port %d)", port)
    return browser, proc


def terminate_process(proc) -> None:
    """Terminate *proc*, escalating to kill if it ignores SIGTERM."""
    if proc.poll() is not None:
        return
    proc.terminate()
    try:
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait(timeout=5)
