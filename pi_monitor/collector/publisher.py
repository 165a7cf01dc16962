# collector/publisher.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Union

log = logging.getLogger(__name__)

Value = Union[float, int, str]
Envelope = Dict[str, Any]
Host = Callable[[str, Envelope], None]


def make_envelope(path: str, value: Value) -> Envelope:
    """Single-value update message as the host bus expects it."""
    return {"updates": [{"values": [{"path": path, "value": value}]}]}


class Publisher:
    """Forward one (path, value) pair at a time to the host callback."""

    def __init__(self, host: Host, source_id: str):
        self.host = host
        self.source_id = source_id

    def publish(self, path: str, value: Value) -> bool:
        envelope = make_envelope(path, value)
        try:
            self.host(self.source_id, envelope)
        except Exception as exc:  # host errors stay local to this metric
            log.error("host rejected %s=%r: %s", path, value, exc)
            return False
        log.debug("published %s=%r", path, value)
        return True
