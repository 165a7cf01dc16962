# collector/poller.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from functools import partial
from typing import Callable, List, Optional

from ..config import MonitorConfig
from .metrics import Metric, build_metrics
from .publisher import Host, Publisher, Value
from .runner import run_command

log = logging.getLogger(__name__)


class Poller:
    """Sample every enabled metric now, then again every `config.rate` seconds.

    Each tick hands its metrics to a shared thread pool and returns without
    waiting, so a slow tick can overlap the next one. At most
    `config.max_workers` commands run at a time; the rest queue up.
    Stopping only prevents new ticks; commands already running finish or
    time out on their own.
    """

    def __init__(
        self,
        config: MonitorConfig,
        host: Host,
        runner: Optional[Callable[..., Optional[str]]] = None,
    ):
        self.config = config
        self.metrics: List[Metric] = build_metrics(config)
        self.publisher = Publisher(host, config.source_id)
        self._run = partial(runner or run_command, timeout=config.command_timeout)
        self._lock = threading.Lock()
        self._pool: Optional[ThreadPoolExecutor] = None
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                log.debug("poller already running")
                return
            stop = threading.Event()
            self._stop = stop
            self._thread = threading.Thread(
                target=self._loop, args=(stop,), name="pi-monitor-timer", daemon=True
            )
            self._thread.start()
        log.info("poller started: %d metrics every %ss", len(self.metrics), self.config.rate)

    def stop(self) -> None:
        with self._lock:
            thread, stop = self._thread, self._stop
            if thread is None:
                return
            self._thread = self._stop = None
        stop.set()
        if thread is not threading.current_thread():
            thread.join()
        log.info("poller stopped")

    def close(self) -> None:
        """Stop and drop queued collectors; running commands are left to finish."""
        self.stop()
        with self._lock:
            pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(wait=False, cancel_futures=True)

    def sweep(self) -> List[Future]:
        """Submit one collection per metric and return immediately."""
        pool = self._executor()
        return [pool.submit(self._collect, metric) for metric in self.metrics]

    def run_once(self) -> None:
        """Blocking sweep: returns once every metric has published or given up."""
        wait(self.sweep())

    # ------------------------------------------------------------------

    def _executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._pool is None:
                self._pool = ThreadPoolExecutor(
                    max_workers=self.config.max_workers, thread_name_prefix="pi-monitor"
                )
            return self._pool

    def _loop(self, stop: threading.Event) -> None:
        while not stop.is_set():
            self.sweep()
            stop.wait(self.config.rate)

    def _collect(self, metric: Metric) -> Optional[Value]:
        try:
            return metric.collect(self._run, self.publisher)
        except Exception:
            log.exception("collector %s failed", metric.name)
            return None
