"""Live reload of plugin scripts.

A ``watchdog`` observer thread watches every plugin directory recursively
and publishes qualifying filesystem events into a queue.  A single
coordinator thread drains the queue, coalesces bursts of events into one
batch, and performs one full :meth:`PluginRegistry.rebuild` per batch.

If the observer cannot be started (missing inotify support, watch limit
reached, permission problems) the failure is logged once and the
registry keeps serving its current snapshot without live reload.

Example
-------
>>> watcher = FileWatcher(registry)
>>> watcher.start()
True
>>> # ... edit ~/.local/share/bunnylol/commands/github.py ...
>>> watcher.stop()
"""
from __future__ import annotations

import logging
import queue
import threading
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from bunnylol.plugins.loader import is_plugin_script
from bunnylol.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS: float = 0.2

_RELEVANT_EVENTS: frozenset[str] = frozenset({"created", "modified", "deleted", "moved"})

_CLOSE = object()


class PluginChangeHandler(FileSystemEventHandler):
    """Forwards plugin-script events to a channel.

    Parameters
    ----------
    channel:
        Queue receiving the path of every relevant event.
    """

    def __init__(self, channel: "queue.Queue[object]") -> None:
        super().__init__()
        self._channel = channel

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELEVANT_EVENTS:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        for raw in paths:
            path = raw.decode() if isinstance(raw, bytes) else raw
            if path and is_plugin_script(path):
                logger.debug("Plugin change detected: %s %s", event.event_type, path)
                self._channel.put(path)
                return


class FileWatcher:
    """Rebuilds a :class:`PluginRegistry` whenever plugin scripts change.

    Parameters
    ----------
    registry:
        Registry to rebuild.
    directories:
        Directories to watch.  Defaults to the registry's plugin
        directories at the time :meth:`start` is called.
    debounce_seconds:
        Quiet period used to coalesce a burst of events into one rebuild.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        directories: list[Path] | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._registry = registry
        self._directories = directories
        self._debounce_seconds = debounce_seconds
        self._channel: "queue.Queue[object]" = queue.Queue()
        self._observer: Observer | None = None
        self._coordinator: threading.Thread | None = None
        self._rebuilds = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Start watching.

        Returns
        -------
        bool
            True when live reload is active, False when the observer
            could not be started and only the static snapshot is served.
        """
        if self.is_watching:
            return True

        directories = (
            self._directories
            if self._directories is not None
            else self._registry.path_resolver.plugin_dirs()
        )
        handler = PluginChangeHandler(self._channel)
        observer = Observer()
        try:
            for directory in directories:
                observer.schedule(handler, str(directory), recursive=True)
            observer.start()
        except Exception as exc:
            logger.warning(
                "Plugin live reload disabled, file watching failed to start: %s", exc
            )
            return False

        self._observer = observer
        self._coordinator = threading.Thread(
            target=self._coordinate,
            daemon=True,
            name="bunnylol-plugin-reload",
        )
        self._coordinator.start()
        logger.info(
            "Watching %d plugin directories for changes: %s",
            len(directories),
            ", ".join(str(d) for d in directories),
        )
        return True

    def stop(self, timeout: float | None = 5.0) -> None:
        """Release the watch handles and stop the coordinator thread."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout)
            self._observer = None
        if self._coordinator is not None:
            self._channel.put(_CLOSE)
            self._coordinator.join(timeout)
            self._coordinator = None

    def __enter__(self) -> "FileWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_watching(self) -> bool:
        """True while the observer and coordinator are running."""
        return self._observer is not None and self._coordinator is not None

    @property
    def rebuild_count(self) -> int:
        """Number of rebuilds triggered by filesystem events."""
        return self._rebuilds

    # ------------------------------------------------------------------
    # Coordinator
    # ------------------------------------------------------------------

    def _coordinate(self) -> None:
        while True:
            item = self._channel.get()
            if item is _CLOSE:
                return
            batch = [item]
            closing = False
            while True:
                try:
                    item = self._channel.get(timeout=self._debounce_seconds)
                except queue.Empty:
                    break
                if item is _CLOSE:
                    closing = True
                    break
                batch.append(item)

            logger.info("Reloading plugins after %d change(s)", len(batch))
            try:
                self._registry.rebuild()
            except Exception:
                logger.exception("Plugin rebuild failed; keeping previous snapshot")
            else:
                self._rebuilds += 1
            if closing:
                return
