from __future__ import annotations

import math
import re
from typing import Dict, List, NamedTuple, Optional

KELVIN_OFFSET = 273.15

# mpstat -P ALL columns: time CPU %usr %nice %sys %iowait %irq %soft %steal %guest %gnice %idle
MPSTAT_CORE_COL = 1
MPSTAT_IDLE_COL = 11

_ALL_MARKER = re.compile(r"all", re.IGNORECASE | re.MULTILINE)
_CORE_ID = re.compile(r"[0-9]*")
_SPACES = re.compile(r" +")


class CpuUtil(NamedTuple):
    total: Optional[float]
    per_core: Dict[int, float]


# -----------------------------
# Helpers
# -----------------------------

def _to_float(value: Optional[str]) -> Optional[float]:
    """Parse a trimmed numeric token; None for blanks, junk, NaN or inf."""
    if value is None:
        return None
    try:
        num = float(value.strip())
    except ValueError:
        return None
    return num if math.isfinite(num) else None


def _after(text: str, sep: str) -> Optional[str]:
    """Second field of `text.split(sep)`, or None when `sep` is absent."""
    parts = text.split(sep)
    return parts[1] if len(parts) > 1 else None


def _columns(line: str) -> List[str]:
    # runs of spaces collapse to one; leading/trailing spaces still yield empty fields
    return _SPACES.sub(" ", line.rstrip("\r")).split(" ")


def _lines(text: str) -> List[str]:
    return re.sub(r"[\r\n]+$", "", text).split("\n")


def _utilisation(idle: float) -> float:
    return round((100 - idle) / 100, 2)


# -----------------------------
# Public API
# -----------------------------

def parse_gpu_temp(text: str) -> Optional[float]:
    """`temp=45.0'C` -> 318.15 (Kelvin)."""
    tail = _after(text, "=")
    if tail is None:
        return None
    celsius = _to_float(tail.split("'")[0])
    return None if celsius is None else round(celsius + KELVIN_OFFSET, 2)


def parse_cpu_temp(text: str) -> Optional[float]:
    """Thermal-zone millidegrees Celsius -> Kelvin."""
    milli = _to_float(text)
    return None if milli is None else round(milli / 1000 + KELVIN_OFFSET, 2)


def parse_core_voltage(text: str) -> Optional[float]:
    """`volt=1.2000V` -> 1.2"""
    tail = _after(text, "=")
    if tail is None:
        return None
    volts = _to_float(tail.split("V")[0])
    return None if volts is None else round(volts, 4)


def parse_bat_voltage(text: str) -> Optional[float]:
    """Millivolts from mopicli -> volts."""
    millivolts = _to_float(text)
    return None if millivolts is None else round(millivolts / 1000, 5)


def parse_throttled(text: str) -> Optional[str]:
    """`throttled=0x50000` -> "0", the last hex digit, kept as a string.

    Returns None when nothing follows the `=`.
    """
    tail = _after(text, "=")
    if tail is None:
        return None
    flag = tail.split("\n")[0].rstrip("\r")[-1:]
    return flag or None


def parse_cpu_count(text: Optional[str]) -> int:
    """Core count from /proc/cpuinfo; anything unusable counts as one core."""
    try:
        count = int((text or "").strip())
    except ValueError:
        return 1
    return count if count > 0 else 1


def parse_load_average(count_text: Optional[str], load_text: str) -> Optional[float]:
    """One-minute load average divided by the number of cores."""
    load = _to_float(load_text)
    if load is None:
        return None
    return load / parse_cpu_count(count_text)


def parse_cpu_util(text: str) -> Optional[CpuUtil]:
    """Parse `mpstat -P ALL` rows into aggregate and per-core utilisation.

    A row whose CPU column is numeric is a per-core row, keyed 1-based;
    anything else (``all``) is the aggregate row. Rows that are too short or
    carry a non-numeric ``%idle`` are ignored. Returns None when the output
    has no ``all`` marker at all.
    """
    if not _ALL_MARKER.search(text):
        return None

    total: Optional[float] = None
    per_core: Dict[int, float] = {}
    for line in _lines(text):
        cols = _columns(line)
        if len(cols) <= MPSTAT_IDLE_COL:
            continue
        idle = _to_float(cols[MPSTAT_IDLE_COL])
        if idle is None:
            continue
        core = cols[MPSTAT_CORE_COL]
        if _CORE_ID.fullmatch(core):
            if core:
                per_core[int(core) + 1] = _utilisation(idle)
        elif total is None:
            total = _utilisation(idle)
    return CpuUtil(total, per_core)


def parse_mem_util(text: str) -> Optional[float]:
    """Used/total from the `Mem:` row of `free`."""
    for line in _lines(text):
        cols = _columns(line)
        if cols[0] != "Mem:" or len(cols) < 3:
            continue
        total, used = _to_float(cols[1]), _to_float(cols[2])
        if total is None or used is None or total == 0:
            return None
        return round(used / total, 2)
    return None


def parse_sd_util(text: str) -> Optional[float]:
    """Integer percent from df -> fraction."""
    try:
        percent = int(text.strip())
    except ValueError:
        return None
    return percent / 100


def per_core_path(base: str, core: int) -> str:
    """environment.rpi.cpu.utilisation -> environment.rpi.cpu.core.<n>.utilisation"""
    parts = base.split(".")
    head = parts[:-1] or parts[:1]  # x -> x.core.1.x
    return ".".join(head + ["core", str(core), parts[-1]])
