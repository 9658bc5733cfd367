"""Watch mode: rebuild the site when posts change."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional, Set, Tuple


def check_watchfiles_available() -> None:
    """Raise ImportError with a helpful message if watchfiles is not installed."""
    import importlib

    try:
        importlib.import_module("watchfiles")
    except ImportError:
        raise ImportError(
            "watchfiles is required for live rebuilds. Install it with: pip install blogsite[watch]"
        ) from None


def make_watchfiles_iter(
    watch_path: Path,
    stop_event: Optional[threading.Event] = None,
) -> Iterator[Set[Tuple[Any, str]]]:
    """Create a blocking iterator of change batches using watchfiles.watch()."""
    import watchfiles

    return watchfiles.watch(watch_path, debounce=200, stop_event=stop_event, recursive=True)


def run_watch_loop(
    *,
    changes_iter: Iterable[Set[Tuple[Any, str]]],
    rebuild: Callable[[], object],
    on_event: Callable[[str], None],
    on_error: Callable[[BaseException], None],
) -> None:
    """Rebuild once per batch of changes. A failed rebuild does not stop the loop."""
    for raw_changes in changes_iter:
        if not raw_changes:
            continue
        names = ", ".join(sorted(str(Path(p)) for _, p in raw_changes))
        on_event(f"Changes detected ({names}), rebuilding blog...")

        try:
            rebuild()
        except Exception as exc:
            on_error(exc)
            continue

        on_event("Blog rebuilt successfully")


def start_watcher(
    posts_dir: Path,
    rebuild: Callable[[], object],
    *,
    on_event: Callable[[str], None],
    on_error: Callable[[BaseException], None],
    stop_event: Optional[threading.Event] = None,
) -> threading.Thread:
    check_watchfiles_available()
    if not posts_dir.is_dir():
        raise FileNotFoundError(f"Posts directory {posts_dir} does not exist")

    def target() -> None:
        run_watch_loop(
            changes_iter=make_watchfiles_iter(posts_dir, stop_event),
            rebuild=rebuild,
            on_event=on_event,
            on_error=on_error,
        )

    thread = threading.Thread(target=target, name="blogsite-watcher", daemon=True)
    thread.start()
    return thread
