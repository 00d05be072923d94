"""Command-line entry point: flags -> SessionConfig -> run_session."""
import argparse
import logging
import os
import sys

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from . import __version__
from .config import DEFAULT_DEBUG_PORT, RELOAD_SETTLE_DELAY, SessionConfig
from .driver import run_session
from .errors import SessionError

PROG = "tabdriver"

log = logging.getLogger(PROG)

STEALTH_HELP = (
    "Enable stealth mode. Stealth mode may not work as intended and only "
    "lead to an easier detection of an automated browser. It tries to "
    "bypass (generalize) the following JS objects: webdriver, permissions, "
    "plugins, webgl vendor."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Drive a Chromium tab over CDP: navigate, export cookies, inject a script.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    instance = parser.add_mutually_exclusive_group(required=True)
    instance.add_argument("-c", "--connect", metavar="ws_url",
                          help="Connect to an existing browser instance via WebSocket.")
    instance.add_argument("-n", "--new", action="store_true",
                          help="Launch a new browser instance.")

    parser.add_argument("-u", "--url", metavar="target_url",
                        help="Set an URL for the target tab.")
    parser.add_argument("-H", "--headful", action="store_true",
                        help="Run browser in headful mode (requires --new).")
    parser.add_argument("-C", "--clean", action="store_true",
                        help="Start the tab with a clean localStorage and cookies (requires --output).")
    parser.add_argument("-p", "--payload", metavar="file",
                        help="Specify a JavaScript payload file to inject into the target tab.")
    parser.add_argument("-o", "--output", metavar="file",
                        help="Output cookies to the specified file.")
    parser.add_argument("-w", "--wait", action="store_true",
                        help="Hang browser after executing tasks.")
    parser.add_argument("-y", "--confirm", action="store_true",
                        help="Confirm before executing tasks.")
    parser.add_argument("-a", "--user-agent", metavar="ua",
                        help="Specify a custom User-Agent (requires --new).")
    parser.add_argument("-i", "--incognito", action="store_true",
                        help="Enable incognito mode.")
    parser.add_argument("-s", "--stealth", action="store_true", help=STEALTH_HELP)
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose output.")

    launch = parser.add_argument_group("launch options")
    launch.add_argument("--chrome-path", metavar="path",
                        help="Chrome/Chromium binary to launch (requires --new).")
    launch.add_argument("--port", type=int, metavar="n",
                        help=f"Remote debugging port for a launched Chrome "
                             f"(default {DEFAULT_DEBUG_PORT}, requires --new).")
    launch.add_argument("--user-data-dir", metavar="dir",
                        help="Profile directory for a launched Chrome (requires --new).")
    parser.add_argument("--settle-ms", type=int, metavar="ms",
                        default=int(RELOAD_SETTLE_DELAY * 1000),
                        help="Delay after the --clean reload before reading cookies "
                             "(default %(default)s).")
    return parser


def parse_config(argv: list[str] | None = None) -> SessionConfig:
    """Parse *argv* into a SessionConfig. Usage errors exit via argparse."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.new:
        launch_only = [
            flag for flag, value in (
                ("--headful", args.headful),
                ("--user-agent", args.user_agent),
                ("--chrome-path", args.chrome_path),
                ("--port", args.port is not None),
                ("--user-data-dir", args.user_data_dir),
            ) if value
        ]
        if launch_only:
            parser.error(f"{', '.join(launch_only)} requires --new")
    if args.port is not None and not 1 <= args.port <= 65535:
        parser.error("--port must be between 1 and 65535")
    if args.chrome_path and not os.path.isfile(args.chrome_path):
        parser.error(f"--chrome-path '{args.chrome_path}' is not a file")
    if args.settle_ms < 0:
        parser.error("--settle-ms must not be negative")

    return SessionConfig(
        connect=args.connect,
        new=args.new,
        url=args.url,
        headful=args.headful,
        user_agent=args.user_agent,
        incognito=args.incognito,
        stealth=args.stealth,
        clean=args.clean,
        payload=args.payload,
        output=args.output,
        wait=args.wait,
        confirm=args.confirm,
        verbose=args.verbose,
        chrome_path=args.chrome_path,
        debug_port=args.port if args.port is not None else DEFAULT_DEBUG_PORT,
        user_data_dir=args.user_data_dir,
        settle_delay=args.settle_ms / 1000,
    )


def configure_logging(verbose: bool = False) -> None:
    """Send package log records to stdout, prefixed with the program name."""
    logger = logging.getLogger(PROG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(f"[{PROG}] %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def main(argv: list[str] | None = None) -> int:
    """Run one session. Returns the process exit status."""
    config = parse_config(argv)
    configure_logging(config.verbose)
    try:
        with sync_playwright() as playwright:
            run_session(config, playwright)
    except SessionError as e:
        log.error("%s", e)
        return 1
    except PlaywrightError as e:
        # raised by sync_playwright() itself, e.g. driver not installed
        log.error("Error occurred while starting Playwright: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
