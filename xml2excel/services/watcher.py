from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from ..db.document_log import DocumentSink
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ConvertConfig
from ..models.conversion import ConversionResult
from .converter import ConvertOptions
from .orchestrator import ProcessingError, process_path

"""Directory watching.

Two threads share a queue.Queue:

- DirectoryWatcher polls the source directory and enqueues a PathEvent for
  every file that newly appears there.
- SettleQueueConsumer waits until an event is ``settle_seconds`` old (the
  writer of the file should be done by then) and hands the path to the
  handler. Repeated events for a path still waiting are merged.

Files already present when watching starts are not reported; the CLI runs a
batch sweep for those first.
"""

__all__ = [
    "PathEvent",
    "DirectoryWatcher",
    "SettleQueueConsumer",
    "watch",
]

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class PathEvent:
    path: Path
    detected_at: float  # clock() の値 (既定 time.monotonic)


class DirectoryWatcher:
    """Poll ``directory`` and report newly appeared files."""

    def __init__(
        self,
        directory: Path,
        suffixes: Iterable[str],
        events: queue.Queue[PathEvent],
        clock: Clock = time.monotonic,
    ) -> None:
        if not directory.is_dir():
            raise ProcessingError(f"Directory not found: {directory}")
        self.directory = directory
        self.suffixes = tuple(s.lower() for s in suffixes)
        self.events = events
        self._clock = clock
        self._seen: set[Path] = set()
        self._seen = self._snapshot()

    def _snapshot(self) -> set[Path]:
        try:
            return {
                p
                for p in self.directory.iterdir()
                if p.is_file() and p.suffix.lower() in self.suffixes and not p.name.startswith(".")
            }
        except OSError as e:
            logger.warning("watch: cannot list %s: %s", self.directory, e)
            return set(self._seen)

    def poll(self) -> list[Path]:
        """Enqueue events for files that appeared since the last poll."""
        current = self._snapshot()
        appeared = sorted(current - self._seen)
        # 削除されたファイルは忘れる (再作成で再検知)
        self._seen = current
        now = self._clock()
        for path in appeared:
            logger.debug("watch: detected %s", path.name)
            self.events.put(PathEvent(path=path, detected_at=now))
        return appeared

    def run(self, stop_event: threading.Event, interval: float = 1.0) -> None:
        while not stop_event.is_set():
            self.poll()
            stop_event.wait(interval)


class SettleQueueConsumer:
    """Run ``handler`` for each queued path once it has settled."""

    def __init__(
        self,
        events: queue.Queue[PathEvent],
        handler: Callable[[Path], object],
        settle_seconds: float = 0.5,
        clock: Clock = time.monotonic,
    ) -> None:
        self.events = events
        self.handler = handler
        self.settle_seconds = settle_seconds
        self._clock = clock
        self._pending: dict[Path, float] = {}

    @property
    def pending(self) -> list[Path]:
        return sorted(self._pending)

    def _drain(self) -> None:
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return
            # 同一パスは最新の検知時刻で待ち直す
            self._pending[event.path] = max(
                self._pending.get(event.path, event.detected_at), event.detected_at
            )

    def process_ready(self, now: float | None = None) -> list[Path]:
        """Handle every pending path whose settle delay has elapsed."""
        self._drain()
        if now is None:
            now = self._clock()
        ready = sorted(p for p, t in self._pending.items() if t + self.settle_seconds <= now)
        for path in ready:
            del self._pending[path]
            if not path.exists():
                logger.info("watch: %s vanished before conversion", path.name)
                continue
            try:
                self.handler(path)
            except Exception:
                logger.exception("watch: handler failed for %s", path.name)
        return ready

    def run(self, stop_event: threading.Event, tick: float = 0.1) -> None:
        while not stop_event.is_set():
            self.process_ready()
            stop_event.wait(tick)
        # 停止時に待機中のものは捨てない
        self.process_ready(now=float("inf"))


def watch(
    config: ConvertConfig,
    sink: DocumentSink | None = None,
    stop_event: threading.Event | None = None,
) -> list[ConversionResult]:
    """Convert files as they appear in the source directory until ``stop_event`` is set.

    Blocks the calling thread. KeyboardInterrupt stops both workers cleanly.

    Returns:
        results of every conversion performed while watching
    """
    stop = stop_event or threading.Event()
    events: queue.Queue[PathEvent] = queue.Queue()
    error_log = ErrorLogBuffer()
    options = ConvertOptions.from_config(config)
    results: list[ConversionResult] = []

    def handle(path: Path) -> None:
        result = process_path(path, config, sink, error_log, options)
        results.append(result)
        log_path = error_log.flush()
        if log_path is not None:
            logger.info("error log written: %s", log_path)

    watcher = DirectoryWatcher(Path(config.source_directory), (config.direction.source_suffix,), events)
    consumer = SettleQueueConsumer(events, handle, settle_seconds=config.settle_seconds)

    threads = [
        threading.Thread(
            target=watcher.run,
            args=(stop, config.poll_interval_seconds),
            name="xml2excel-watcher",
            daemon=True,
        ),
        threading.Thread(target=consumer.run, args=(stop,), name="xml2excel-consumer", daemon=True),
    ]
    logger.info(
        "watching %s for %s files (settle=%.2fs)",
        config.source_directory,
        config.direction.source_suffix,
        config.settle_seconds,
    )
    for t in threads:
        t.start()
    try:
        while not stop.is_set():
            stop.wait(0.2)
    except KeyboardInterrupt:
        logger.info("watch: interrupted")
    finally:
        stop.set()
        for t in threads:
            t.join()
    return results
