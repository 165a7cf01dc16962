# pi_monitor/host.py
"""
Host callbacks the publisher can hand updates to.

• LogHost   → one JSON line per update on stdout (pipe into anything)
• HttpHost  → POST each update as a delta to a Signal K style endpoint
"""
from __future__ import annotations

import json
import logging
import sys
import threading
from typing import IO, Optional

import requests

from .collector.publisher import Envelope

log = logging.getLogger(__name__)

DELTA_CONTEXT = "vessels.self"


class LogHost:
    def __init__(self, stream: Optional[IO[str]] = None):
        self.stream = stream or sys.stdout
        self._lock = threading.Lock()

    def __call__(self, source_id: str, envelope: Envelope) -> None:
        line = json.dumps({"source": source_id, **envelope}, ensure_ascii=False)
        with self._lock:
            print(line, file=self.stream, flush=True)


class HttpHost:
    def __init__(self, url: str, timeout: float = 5, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self, source_id: str, envelope: Envelope) -> None:
        updates = [dict(u, source={"label": source_id}) for u in envelope["updates"]]
        payload = {"context": DELTA_CONTEXT, "updates": updates}
        try:
            r = self.session.post(self.url, json=payload, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as exc:
            log.warning("POST %s failed: %s", self.url, exc)
