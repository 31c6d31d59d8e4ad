"""Tests for podcaster/context.py."""

from podcaster.context import CONCLUSION_CONTEXT_WINDOW, ROUND_CONTEXT_WINDOW, build_context, join_names


def test_window_sizes():
    assert ROUND_CONTEXT_WINDOW == 4
    assert CONCLUSION_CONTEXT_WINDOW == 6


def test_build_context_takes_last_entries():
    history = [f"t{i}" for i in range(1, 8)]
    assert build_context(history, 4) == "t4\n\nt5\n\nt6\n\nt7"


def test_build_context_short_history():
    assert build_context(["a", "b"], 6) == "a\n\nb"


def test_build_context_empty():
    assert build_context([], 4) == ""


def test_build_context_zero_window():
    assert build_context(["a", "b"], 0) == ""


def test_join_names():
    assert join_names([]) == ""
    assert join_names(["Ann"]) == "Ann"
    assert join_names(["Ann", "Bo"]) == "Ann and Bo"
    assert join_names(["Ann", "Bo", "Cy"]) == "Ann, Bo and Cy"
