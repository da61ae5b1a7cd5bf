"""Tests for the full-replace size gate"""

import pytest

from script_bridge.services.size_gate import (
    DEFAULT_SET_SCRIPT_MAX_LINES,
    MAX_LINES_ENV,
    get_set_script_max_lines,
    should_allow_set_script,
)

from .fixtures import SIMPLE_SCRIPT, numbered_script


@pytest.mark.parametrize("script", ["", "   \n\n   "])
def test_empty_scripts_always_allowed(script):
    assert should_allow_set_script(script, 30)
    assert should_allow_set_script(script, 0)


def test_threshold_is_inclusive():
    assert should_allow_set_script(numbered_script(30), 30)
    assert not should_allow_set_script(numbered_script(31), 30)


def test_small_script():
    assert should_allow_set_script(SIMPLE_SCRIPT, DEFAULT_SET_SCRIPT_MAX_LINES)
    assert should_allow_set_script("single line", DEFAULT_SET_SCRIPT_MAX_LINES)


@pytest.mark.parametrize(
    "lines,threshold,allowed",
    [(31, 10, False), (31, 50, True), (100, 50, False), (100, 100, True), (1, 0, False)],
)
def test_custom_thresholds(lines, threshold, allowed):
    assert should_allow_set_script(numbered_script(lines), threshold) is allowed


def test_trailing_newline_counts_as_a_line():
    assert not should_allow_set_script(numbered_script(30) + "\n", 30)


def test_max_lines_default(monkeypatch):
    monkeypatch.delenv(MAX_LINES_ENV, raising=False)
    assert get_set_script_max_lines() == 30
    assert get_set_script_max_lines(12) == 12


def test_max_lines_from_environment(monkeypatch):
    monkeypatch.setenv(MAX_LINES_ENV, "50")
    assert get_set_script_max_lines(12) == 50


@pytest.mark.parametrize("value", ["abc", "-5"])
def test_invalid_environment_value_is_ignored(monkeypatch, value):
    monkeypatch.setenv(MAX_LINES_ENV, value)
    assert get_set_script_max_lines() == 30
