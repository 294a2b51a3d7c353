"""
Non-blocking log persistence.

Log calls only enqueue; a daemon thread drains the queue in batches and hands
entries to the active backends (see log_backends). The worker starts on the
first persisted entry, not at import time.
"""

import json
import queue
import sys
import threading
import time
from typing import Any, Dict, List, Optional
from .log_backends import get_active_backends

_MAX_QUEUE = 10000
_MAX_BATCH = 100


class LogPersistenceHandler:
    """Queue + background writer shared by every persisting AppLogger."""

    def __init__(self, maxsize: int = _MAX_QUEUE) -> None:
        self._queue: "queue.Queue[Dict[str, Any]]" = queue.Queue(maxsize=maxsize)
        self._shutdown_event = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

        self._total_logs = 0
        self._failed_logs = 0
        self._total_write_time = 0.0

    def _ensure_worker(self) -> None:
        if self._worker is not None and self._worker.is_alive():
            return
        with self._start_lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._shutdown_event.clear()
            self._worker = threading.Thread(
                target=self._drain,
                daemon=True,
                name="LogPersistenceWorker",
            )
            self._worker.start()

    def _drain(self) -> None:
        while not self._shutdown_event.is_set() or not self._queue.empty():
            try:
                batch = [self._queue.get(timeout=0.5)]
            except queue.Empty:
                continue

            while len(batch) < _MAX_BATCH:
                try:
                    batch.append(self._queue.get_nowait())
                except queue.Empty:
                    break

            try:
                self._write_batch(batch)
            finally:
                for _ in batch:
                    self._queue.task_done()

    def _write_batch(self, batch: List[Dict[str, Any]]) -> None:
        start = time.perf_counter()
        try:
            for backend in get_active_backends():
                for entry in batch:
                    if not backend.write(entry):
                        self._failed_logs += 1
            self._total_logs += len(batch)
        except Exception as e:
            print(f"Failed to write log batch: {e}", file=sys.stderr)
            self._failed_logs += len(batch)
        finally:
            self._total_write_time += time.perf_counter() - start

    def enqueue_log(self, log_entry: Dict[str, Any]) -> bool:
        """Queue an entry; returns False (and counts a drop) when full."""
        self._ensure_worker()
        try:
            self._queue.put_nowait(_jsonable(log_entry))
            return True
        except queue.Full:
            self._failed_logs += 1
            return False

    def get_metrics(self) -> Dict[str, Any]:
        avg = self._total_write_time / self._total_logs if self._total_logs else 0
        return {
            "total_logs": self._total_logs,
            "failed_logs": self._failed_logs,
            "queue_size": self._queue.qsize(),
            "avg_write_time_ms": avg * 1000,
            "worker_alive": bool(self._worker and self._worker.is_alive()),
        }

    def shutdown(self, timeout: float = 5.0) -> None:
        """Flush what is queued and stop the worker."""
        self._shutdown_event.set()
        if self._worker and self._worker.is_alive():
            self._worker.join(timeout=timeout)


def _jsonable(entry: Dict[str, Any]) -> Dict[str, Any]:
    # Entries cross a thread boundary, so freeze them as JSON-safe values now.
    return json.loads(json.dumps(entry, default=str, ensure_ascii=False))


_persistence_handler = LogPersistenceHandler()


def persist_log(log_entry: Dict[str, Any]) -> bool:
    return _persistence_handler.enqueue_log(log_entry)


def get_persistence_metrics() -> Dict[str, Any]:
    return _persistence_handler.get_metrics()


def shutdown_persistence(timeout: float = 5.0) -> None:
    _persistence_handler.shutdown(timeout)


__all__ = [
    "persist_log",
    "get_persistence_metrics",
    "shutdown_persistence",
    "LogPersistenceHandler",
]
