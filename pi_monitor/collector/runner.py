# collector/runner.py
from __future__ import annotations

import logging
import os
import signal
import subprocess
from typing import Optional

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds


def _kill_group(proc: subprocess.Popen) -> None:
    # sh and every stage of its pipeline share the session started for it
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_command(cmd: str, timeout: float = DEFAULT_TIMEOUT) -> Optional[str]:
    """Run `cmd` through `sh -c` and return its stdout, or None on failure.

    Spawn errors, timeouts and non-zero exits are logged and swallowed so a
    broken utility only costs that metric its sample for this tick. On timeout
    the whole pipeline is killed, not just the shell. Bytes that are not valid
    UTF-8 come back as U+FFFD.
    """
    try:
        proc = subprocess.Popen(
            ["sh", "-c", cmd],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            start_new_session=True,
        )
    except OSError as exc:
        log.error("could not spawn %r: %s", cmd, exc)
        return None

    with proc:
        try:
            out, err = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_group(proc)
            proc.communicate()
            log.warning("%r timed out after %ss", cmd, timeout)
            return None

    err = err.strip()
    if proc.returncode != 0:
        log.warning("%r exited with %d: %s", cmd, proc.returncode, err)
        return None
    if err:
        log.warning("%r wrote to stderr: %s", cmd, err)
    return out
