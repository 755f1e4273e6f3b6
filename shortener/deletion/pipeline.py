"""Asynchronous batched soft deletion of short URLs.

Handlers enqueue deletion intents and return immediately (202 Accepted). A
single worker thread owns the buffer of pending intents and hands them to the
data store in batches.

Flush triggers:
    - the periodic tick (every `flush_interval` seconds);
    - the buffer reaching `buffer_length` intents;
    - the stop signal (final drain).

A failed flush keeps the buffer and retries on the next tick only; the size
trigger is suspended until a flush succeeds again. Intents are delivered at
least once. Duplicates are harmless: soft deletion is
idempotent, and the store ignores intents for keys the user does not own.

Classes:
    DeletionPipeline:
        Single-consumer worker exposing `start()`, `enqueue()` and `stop()`.

Example:
    >>> from shortener.dao import URLMemoryDAO
    >>> from shortener.models import DeletionIntent
    >>> pipeline = DeletionPipeline(URLMemoryDAO(), buffer_length=5, flush_interval=10.0)
    >>> pipeline.start()
    >>> pipeline.enqueue(DeletionIntent(short_url='YBbxJEcQ9vq', user_id='9b2f6a8e-1c1d-4a8b-9a43-0c6f4a6f2b7e'))
    True
    >>> pipeline.stop()
    True
"""

import time
import queue
import logging
import threading

from shortener.constants import Defaults
from shortener.dao.base import URLBaseDAO
from shortener.models import DeletionIntent


logger = logging.getLogger(__name__)

# Wakes the worker without carrying an intent
_STOP = object()


class DeletionPipeline:
    """Buffered deletion worker

    Attributes:
        dao (URLBaseDAO): store receiving `delete_urls(*intents)`
        buffer_length (int): buffer size that triggers an immediate flush
        flush_interval (float): seconds between periodic flushes
        shutdown_timeout (float): seconds `stop()` waits for the final drain
    """

    def __init__(
        self,
        dao: URLBaseDAO,
        buffer_length: int = Defaults.DELETE_BUFFER_LENGTH,
        flush_interval: float = Defaults.DELETE_FLUSH_INTERVAL,
        shutdown_timeout: float = Defaults.SHUTDOWN_TIMEOUT,
    ):
        self.dao = dao
        self.buffer_length = buffer_length
        self.flush_interval = flush_interval
        self.shutdown_timeout = shutdown_timeout

        self._queue: queue.Queue = queue.Queue()
        self._done = threading.Event()
        self._thread = threading.Thread(target=self._run, name='deletion-pipeline', daemon=True)
        self._buffer: list[DeletionIntent] = []
        self._stop_lock = threading.Lock()
        self._enqueue_lock = threading.Lock()
        self._stopped = False
        self._result = True
        self._retry_pending = False
        self._final_flush_ok = True

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        if self._thread.is_alive() or self._done.is_set():
            return
        self._thread.start()
        logger.info(
            'Deletion pipeline started.',
            extra={'buffer_length': self.buffer_length, 'flush_interval': self.flush_interval, 'event': 'DELETION_PIPELINE_STARTED'},
        )

    def enqueue(self, intent: DeletionIntent) -> bool:
        """Queue an intent for deletion; returns False if the pipeline is stopped."""
        with self._enqueue_lock:
            if not self._done.is_set():
                self._queue.put(intent)
                return True
        logger.warning(
            'Deletion pipeline is stopped, dropping intent.',
            extra={'short_url': intent.short_url, 'user_id': intent.user_id, 'event': 'DELETION_INTENT_DROPPED'},
        )
        return False

    def stop(self) -> bool:
        """Signal the worker to drain and wait up to `shutdown_timeout`

        Idempotent: later calls return the result of the first one.

        Returns:
            bool: True if the worker drained in time and the final flush succeeded, False otherwise
        """
        with self._stop_lock:
            if self._stopped:
                return self._result
            self._stopped = True

            with self._enqueue_lock:
                self._done.set()
            if not self._thread.is_alive():
                # Never started: drain whatever was queued on the caller's thread
                if self._thread.ident is None:
                    self._drain()
                    self._result = self._flush()
                return self._result

            self._queue.put(_STOP)
            self._thread.join(timeout=self.shutdown_timeout)
            timed_out = self._thread.is_alive()
            self._result = not timed_out and self._final_flush_ok

        if timed_out:
            logger.error(
                'Deletion pipeline did not drain before the shutdown timeout.',
                extra={'timeout': self.shutdown_timeout, 'pending': len(self._buffer), 'event': 'DELETION_PIPELINE_TIMEOUT'},
            )
        elif not self._result:
            logger.error(
                'Deletion pipeline failed to flush pending intents on shutdown.',
                extra={'pending': len(self._buffer), 'event': 'DELETION_PIPELINE_FLUSH_LOST'},
            )
        else:
            logger.info('Deletion pipeline stopped.', extra={'event': 'DELETION_PIPELINE_STOPPED'})
        return self._result

    def _run(self) -> None:
        next_tick = time.monotonic() + self.flush_interval
        while True:
            try:
                item = self._queue.get(timeout=max(0.0, next_tick - time.monotonic()))
            except queue.Empty:
                self._flush()
                next_tick = time.monotonic() + self.flush_interval
                continue

            if item is _STOP:
                self._drain()
                self._final_flush_ok = self._flush()
                return

            self._buffer.append(item)
            if len(self._buffer) >= self.buffer_length and not self._retry_pending:
                self._flush()

    def _drain(self) -> None:
        """Move every queued intent into the buffer."""
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is not _STOP:
                self._buffer.append(item)

    def _flush(self) -> bool:
        if not self._buffer:
            return True
        try:
            self.dao.delete_urls(*self._buffer)
        except Exception:
            # Keep the buffer, the next tick retries
            logger.exception(
                'Failed to flush deletion intents.',
                extra={'pending': len(self._buffer), 'event': 'DELETION_FLUSH_FAILED'},
            )
            self._retry_pending = True
            return False

        logger.debug('Deletion intents flushed.', extra={'count': len(self._buffer), 'event': 'DELETION_FLUSHED'})
        self._buffer = []
        self._retry_pending = False
        return True
