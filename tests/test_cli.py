"""Tests for flag parsing and the CLI's top-level error handling."""
import logging
import os
import tempfile
from unittest.mock import MagicMock, patch

import pytest

from tabdriver.cli import configure_logging, main, parse_config
from tabdriver.errors import SessionError, SessionStep


@pytest.fixture(autouse=True)
def reset_package_logger():
    """main() and configure_logging() attach a stdout handler; drop it after each test."""
    yield
    package_logger = logging.getLogger("tabdriver")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


def _usage_error(argv):
    with pytest.raises(SystemExit) as exc:
        parse_config(argv)
    return exc.value.code


def test_connect_and_new_together_rejected():
    assert _usage_error(["--connect", "ws://x", "--new"]) == 2


def test_neither_connect_nor_new_rejected():
    assert _usage_error(["--url", "https://example.com"]) == 2


def test_headful_requires_new():
    assert _usage_error(["-c", "ws://x", "--headful"]) == 2


def test_user_agent_requires_new():
    assert _usage_error(["-c", "ws://x", "-a", "UA/1"]) == 2


def test_launch_options_require_new():
    assert _usage_error(["-c", "ws://x", "--port", "9333"]) == 2
    assert _usage_error(["-c", "ws://x", "--chrome-path", "/usr/bin/chromium"]) == 2


def test_port_out_of_range_rejected():
    assert _usage_error(["-n", "--port", "0"]) == 2
    assert _usage_error(["-n", "--port", "70000"]) == 2
    assert _usage_error(["-n", "--port", "-1"]) == 2


def test_port_in_range_accepted():
    assert parse_config(["-n", "--port", "9333"]).debug_port == 9333


def test_missing_chrome_path_rejected():
    assert _usage_error(["-n", "--chrome-path", "/nonexistent/chrome"]) == 2


def test_existing_chrome_path_accepted():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "chrome")
        open(path, "w").close()
        assert parse_config(["-n", "--chrome-path", path]).chrome_path == path


def test_negative_settle_rejected():
    assert _usage_error(["-n", "--settle-ms", "-5"]) == 2


def test_short_flags_build_config():
    config = parse_config([
        "-n", "-H", "-a", "UA/1", "-u", "https://example.com", "-C", "-o", "out.json",
        "-p", "payload.js", "-w", "-y", "-i", "-s", "-v",
    ])
    assert config.mode == "launch"
    assert config.headful is True
    assert config.user_agent == "UA/1"
    assert config.url == "https://example.com"
    assert config.clean and config.wants_clean
    assert config.output == "out.json"
    assert config.payload == "payload.js"
    assert config.wait and config.confirm and config.incognito
    assert config.stealth and config.verbose


def test_defaults():
    config = parse_config(["--connect", "ws://127.0.0.1:9222/devtools/browser/x"])
    assert config.mode == "attach"
    assert config.connect == "ws://127.0.0.1:9222/devtools/browser/x"
    assert config.headful is False
    assert config.output is None and config.payload is None
    assert config.debug_port == 9222
    assert config.settle_delay == 0.6


def test_settle_ms_converted_to_seconds():
    assert parse_config(["-n", "--settle-ms", "1500"]).settle_delay == 1.5


def _patched_playwright():
    sp = MagicMock()
    # MagicMock's __exit__ is truthy and would swallow exceptions
    sp.return_value.__exit__.return_value = False
    return sp


def test_main_returns_zero_on_success():
    with patch("tabdriver.cli.sync_playwright", _patched_playwright()), \
            patch("tabdriver.cli.run_session") as run:
        assert main(["-n"]) == 0
    run.assert_called_once()
    assert run.call_args.args[0].new is True


def test_main_returns_one_on_session_error(capsys):
    err = SessionError(SessionStep.PAYLOAD_READ, "Error occurred reading payload file: nope")
    with patch("tabdriver.cli.sync_playwright", _patched_playwright()), \
            patch("tabdriver.cli.run_session", side_effect=err):
        assert main(["-n", "-p", "missing.js"]) == 1
    out = capsys.readouterr().out
    assert "[tabdriver] Error occurred reading payload file: nope" in out


def test_configure_logging_prefix_and_level(capsys):
    configure_logging(verbose=False)
    logger = logging.getLogger("tabdriver.driver")
    logger.debug("hidden")
    logger.info("shown")
    out = capsys.readouterr().out
    assert "[tabdriver] shown" in out
    assert "hidden" not in out

    configure_logging(verbose=True)
    logger.debug("now visible")
    assert "[tabdriver] now visible" in capsys.readouterr().out
