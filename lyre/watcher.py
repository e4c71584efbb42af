"""Watch mode for Lyre.

Rebuilds the whole site whenever a post or one of the two templates
changes. Rebuilds never overlap: change events that arrive while a build
is running are coalesced into a single follow-up build.

Key classes:
- RebuildScheduler: Single-flight runner for the build callable.
- SiteWatcher: Wires watchdog events to the scheduler.
- _ChangeHandler: File system event handler filtering relevant paths.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import BuildConfig, build_site
from .exceptions import BuildError
from .utils import is_markdown


def _spawn_thread(target: Callable[[], None]) -> None:
    threading.Thread(target=target, daemon=True).start()


def run_build(build: Callable[[], object]) -> bool:
    """Run one build, printing any failure instead of raising it.

    Returns:
        True when the build completed.
    """
    try:
        build()
    except BuildError as exc:
        print(f"Build failed: {exc.source_path}: {exc.message}")
        return False
    except Exception as exc:
        print(f"Build failed: {type(exc).__name__}: {exc}")
        return False
    return True


class RebuildScheduler:
    """Runs a build callable at most once at a time.

    ``request`` starts a build in the background when idle. While a build
    is running, any number of further requests leave exactly one pending
    rerun, started as soon as the current build finishes.

    Attributes:
        build: Callable performing one full build.
    """

    def __init__(
        self,
        build: Callable[[], object],
        spawn: Callable[[Callable[[], None]], None] = _spawn_thread,
    ):
        self.build = build
        self._spawn = spawn
        self._lock = threading.Lock()
        self._running = False
        self._pending = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pending(self) -> bool:
        return self._pending

    def request(self) -> bool:
        """Ask for a rebuild.

        Returns:
            True if a new build run was started, False if the request was
            folded into the pending rerun of an active build.
        """
        with self._lock:
            if self._running:
                self._pending = True
                return False
            self._running = True
        self._spawn(self._run)
        return True

    def _run(self) -> None:
        while True:
            run_build(self.build)
            with self._lock:
                if not self._pending:
                    self._running = False
                    return
                self._pending = False


class SiteWatcher:
    """Watches the content directory and templates and rebuilds on change.

    Attributes:
        project_root: Root directory of the project.
        config: Build configuration.
        scheduler: Single-flight rebuild scheduler.
    """

    def __init__(
        self,
        project_root: Path,
        config: BuildConfig,
        scheduler: RebuildScheduler | None = None,
    ):
        self.project_root = project_root
        self.config = config
        self.content_dir = (project_root / config.content_dir).resolve()
        self.template_paths = {
            (project_root / config.template).resolve(),
            (project_root / config.post_template).resolve(),
        }
        self.scheduler = scheduler or RebuildScheduler(self.build)
        self._observer: Observer | None = None

    def build(self) -> None:
        build_site(self.project_root, self.config)

    def is_relevant(self, path: Path) -> bool:
        """True for either template and markdown posts in the content directory.

        Other files under the content directory, such as generated waveforms
        and videos when ``media_root`` points there, are ignored.
        """
        resolved = path.resolve()
        if resolved in self.template_paths:
            return True
        if not is_markdown(resolved):
            return False
        try:
            resolved.relative_to(self.content_dir)
        except ValueError:
            return False
        return True

    def start(self) -> None:
        """Build once, then rebuild on every change until interrupted."""
        run_build(self.build)
        print("Watching for changes...")
        self._start_observer()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def _start_observer(self) -> None:
        handler = _ChangeHandler(self)
        observer = Observer()
        if self.content_dir.exists():
            observer.schedule(handler, str(self.content_dir), recursive=True)
        for folder in {path.parent for path in self.template_paths}:
            if folder.exists():
                observer.schedule(handler, str(folder), recursive=False)
        observer.start()
        self._observer = observer


_CHANGE_EVENTS = {"created", "modified", "deleted", "moved"}


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: SiteWatcher):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event):
        # builds read every watched file; ignore open/close events
        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        paths = [Path(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(Path(dest))
        if not any(self.watcher.is_relevant(path) for path in paths):
            return
        print(f"Change detected ({event.event_type}): {event.src_path}")
        self.watcher.scheduler.request()
