"""Async dispatcher: decouples sample processing from the persistence sink.

Wraps a PredictionSink with a bounded queue + worker threads so that
TopicMonitor.on_sample returns right after enqueue instead of blocking on
an HTTP/SQL call. A slow or failing sink never stalls live ingestion:
when the queue is full the event is dropped (at-most-once, best effort).
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

from ..domain.events import PredictionEvent
from ..metrics import DISPATCH_EVENTS
from .sinks import PredictionSink

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000
DEFAULT_NUM_WORKERS = 2


class AsyncPredictionDispatcher:
    """Queue + worker threads wrapper for a PredictionSink.

    - monitor → dispatch() returns immediately
    - worker threads → sink.save() (may block on I/O)
    - bounded queue drops instead of applying backpressure
    """

    def __init__(
        self,
        sink: PredictionSink,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        num_workers: int = DEFAULT_NUM_WORKERS,
    ):
        self._sink = sink
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._num_workers = num_workers
        self._stop_event = threading.Event()

        # Metrics
        self._enqueued = 0
        self._dropped = 0
        self._sent = 0
        self._errors = 0
        self._lock = threading.Lock()

        self._workers: list[threading.Thread] = []

    def __call__(self, event: PredictionEvent) -> bool:
        return self.dispatch(event)

    def start(self) -> None:
        """Start worker threads."""
        self._stop_event.clear()
        for i in range(self._num_workers):
            t = threading.Thread(
                target=self._worker_loop,
                args=(i,),
                daemon=True,
                name=f"prediction-sink-{i}",
            )
            t.start()
            self._workers.append(t)
        logger.info(
            "[DISPATCH] Started workers=%d queue_max=%d",
            self._num_workers, self._queue.maxsize,
        )

    def stop(self, drain: bool = True) -> None:
        """Stop workers. If drain=True, deliver remaining events first."""
        if drain and self._workers:
            self._queue.join()
        self._stop_event.set()
        for t in self._workers:
            t.join(timeout=5.0)
        self._workers.clear()
        logger.info("[DISPATCH] Stopped. %s", self.metrics)

    def dispatch(self, event: PredictionEvent) -> bool:
        """Enqueue event for async persistence. Returns False if dropped."""
        try:
            self._queue.put_nowait(event)
            with self._lock:
                self._enqueued += 1
            return True
        except queue.Full:
            with self._lock:
                self._dropped += 1
            DISPATCH_EVENTS.labels(result="dropped").inc()
            logger.warning("[DISPATCH] Queue full, dropped topic=%s", event.topic)
            return False

    def _worker_loop(self, worker_id: int) -> None:
        while not self._stop_event.is_set():
            try:
                event = self._queue.get(timeout=0.5)
            except queue.Empty:
                continue

            try:
                self._deliver(event, worker_id)
            finally:
                self._queue.task_done()

    def _deliver(self, event: PredictionEvent, worker_id: Optional[int] = None) -> bool:
        try:
            self._sink.save(event)
        except Exception as e:
            with self._lock:
                self._errors += 1
            DISPATCH_EVENTS.labels(result="failed").inc()
            logger.error(
                "[DISPATCH] Worker %s failed to persist topic=%s: %s",
                worker_id, event.topic, e,
            )
            return False
        with self._lock:
            self._sent += 1
        DISPATCH_EVENTS.labels(result="sent").inc()
        return True

    @property
    def metrics(self) -> dict:
        with self._lock:
            return {
                "queue_depth": self._queue.qsize(),
                "queue_max": self._queue.maxsize,
                "enqueued": self._enqueued,
                "dropped": self._dropped,
                "sent": self._sent,
                "errors": self._errors,
            }
