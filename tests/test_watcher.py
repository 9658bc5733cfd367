"""Tests for blogsite.watcher module."""

from __future__ import annotations

import sys
import types
from typing import List

import pytest

from blogsite.watcher import check_watchfiles_available, run_watch_loop, start_watcher

# ---------------------------------------------------------------------------
# Optional dependency check
# ---------------------------------------------------------------------------


def test_check_watchfiles_available_raises_when_missing(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "watchfiles", None)

    with pytest.raises(ImportError, match="pip install blogsite\\[watch\\]"):
        check_watchfiles_available()


def test_check_watchfiles_available_succeeds_when_installed(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "watchfiles", types.ModuleType("watchfiles"))

    check_watchfiles_available()  # no exception


# ---------------------------------------------------------------------------
# Rebuild loop
# ---------------------------------------------------------------------------


def test_rebuilds_once_per_batch() -> None:
    batches = [
        {(2, "/site/posts/a.md"), (1, "/site/posts/b.md")},
        {(3, "/site/posts/c.md")},
    ]
    rebuilds: List[int] = []
    events: List[str] = []

    run_watch_loop(
        changes_iter=iter(batches),
        rebuild=lambda: rebuilds.append(1),
        on_event=events.append,
        on_error=lambda exc: pytest.fail(f"unexpected error: {exc}"),
    )

    assert len(rebuilds) == 2
    assert events[0] == "Changes detected (/site/posts/a.md, /site/posts/b.md), rebuilding blog..."
    assert events.count("Blog rebuilt successfully") == 2


def test_empty_batches_are_ignored() -> None:
    rebuilds: List[int] = []
    run_watch_loop(
        changes_iter=iter([set()]),
        rebuild=lambda: rebuilds.append(1),
        on_event=lambda msg: None,
        on_error=lambda exc: None,
    )
    assert rebuilds == []


def test_failed_rebuild_is_reported_and_loop_continues() -> None:
    calls: List[int] = []
    errors: List[BaseException] = []

    def rebuild() -> None:
        calls.append(1)
        if len(calls) == 1:
            raise OSError("disk full")

    run_watch_loop(
        changes_iter=iter([{(2, "a.md")}, {(2, "b.md")}]),
        rebuild=rebuild,
        on_event=lambda msg: None,
        on_error=errors.append,
    )

    assert len(calls) == 2
    assert [str(exc) for exc in errors] == ["disk full"]


def test_start_watcher_requires_posts_dir(monkeypatch, tmp_path) -> None:
    monkeypatch.setitem(sys.modules, "watchfiles", types.ModuleType("watchfiles"))

    with pytest.raises(FileNotFoundError, match="does not exist"):
        start_watcher(tmp_path / "missing", lambda: None, on_event=print, on_error=print)
