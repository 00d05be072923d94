"""Tests for SessionConfig invariants and derived properties."""
import dataclasses

import pytest

from tabdriver.config import RELOAD_SETTLE_DELAY, SessionConfig


def test_requires_exactly_one_mode():
    with pytest.raises(ValueError):
        SessionConfig()
    with pytest.raises(ValueError):
        SessionConfig(connect="ws://x", new=True)


def test_launch_only_fields_rejected_when_attaching():
    with pytest.raises(ValueError, match="headful"):
        SessionConfig(connect="ws://x", headful=True)
    with pytest.raises(ValueError, match="user_agent"):
        SessionConfig(connect="ws://x", user_agent="UA/1")


def test_is_immutable():
    config = SessionConfig(new=True)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.url = "https://example.com"


def test_mode():
    assert SessionConfig(new=True).mode == "launch"
    assert SessionConfig(connect="ws://x").mode == "attach"


def test_clean_gated_by_output():
    assert SessionConfig(new=True, clean=True).wants_clean is False
    assert SessionConfig(new=True, clean=True, output="c.json").wants_clean is True
    assert SessionConfig(new=True, output="c.json").wants_clean is False


def test_incognito_context_only_when_attaching():
    assert SessionConfig(connect="ws://x", incognito=True).wants_incognito_context is True
    assert SessionConfig(new=True, incognito=True).wants_incognito_context is False
    assert SessionConfig(connect="ws://x").wants_incognito_context is False


def test_default_settle_delay():
    assert SessionConfig(new=True).settle_delay == RELOAD_SETTLE_DELAY == 0.6
