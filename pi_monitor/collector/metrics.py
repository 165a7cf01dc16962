# collector/metrics.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..config import MonitorConfig
from . import parsers
from .publisher import Publisher, Value

log = logging.getLogger(__name__)

Runner = Callable[[str], Optional[str]]

BAT_VOLTAGE_CMD = "/usr/sbin/mopicli -v|awk '{print $4}'"
CORE_VOLTAGE_CMD = "/opt/vc/bin/vcgencmd measure_volts core"
THROTTLED_CMD = "/opt/vc/bin/vcgencmd get_throttled"
GPU_TEMP_CMD = "/opt/vc/bin/vcgencmd measure_temp"
CPU_TEMP_CMD = "cat /sys/class/thermal/thermal_zone0/temp"
CPU_UTIL_CMD = "S_TIME_FORMAT='ISO' mpstat -P ALL|grep \\:|grep -v \\%"
MEM_UTIL_CMD = "free"
SD_UTIL_CMD = "df /|grep -v Used|awk '{print $5}'|awk 'gsub(\"%\",\"\")'"
NUM_CPU_CMD = "grep 'model name' /proc/cpuinfo | wc -l"
ONE_MIN_LOAD_CMD = "uptime|grep \"load average\"|awk -F: '{print $5}'|awk -F, '{print $1}'"


@dataclass(frozen=True)
class Metric:
    """One health reading: a shell command, its parser and where to publish it."""

    name: str
    command: str
    path: str
    parse: Callable[..., Optional[Value]]

    def sample(self, run: Runner) -> Optional[Value]:
        raw = run(self.command)
        if raw is None:
            return None
        log.debug("got %s %r", self.name, raw)
        return self.parse(raw)

    def collect(self, run: Runner, publisher: Publisher) -> Optional[Value]:
        value = self.sample(run)
        if value is None:
            log.debug("no %s sample this tick", self.name)
            return None
        log.debug("%s is %r", self.name, value)
        publisher.publish(self.path, value)
        return value


@dataclass(frozen=True)
class LoadAverageMetric(Metric):
    count_command: str = NUM_CPU_CMD

    def sample(self, run: Runner) -> Optional[Value]:
        cpus = run(self.count_command)  # None falls back to one core
        raw = run(self.command)
        if raw is None:
            return None
        log.debug("got cpu count %r, load %r", cpus, raw)
        return self.parse(cpus, raw)


@dataclass(frozen=True)
class CpuUtilMetric(Metric):
    publish_per_core: bool = False

    def collect(self, run: Runner, publisher: Publisher) -> Optional[Value]:
        raw = run(self.command)
        if raw is None:
            return None
        log.debug("got cpu utilisation %r", raw)
        util = self.parse(raw)
        if util is None or util.total is None:
            log.debug("no %s sample this tick", self.name)
            return None

        if self.publish_per_core:
            for core, value in sorted(util.per_core.items()):
                publisher.publish(parsers.per_core_path(self.path, core), value)
        publisher.publish(self.path, util.total)
        return util.total


def build_metrics(config: MonitorConfig) -> List[Metric]:
    """Enabled metrics in sweep order."""
    metrics = [Metric("gpu_temp", GPU_TEMP_CMD, config.path_gpu_temp, parsers.parse_gpu_temp)]
    if config.enable_cpu_temp:
        metrics.append(Metric("cpu_temp", CPU_TEMP_CMD, config.path_cpu_temp, parsers.parse_cpu_temp))
    metrics += [
        Metric("core_voltage", CORE_VOLTAGE_CMD, config.path_core_voltage, parsers.parse_core_voltage),
        Metric("bat_voltage", BAT_VOLTAGE_CMD, config.path_bat_voltage, parsers.parse_bat_voltage),
        Metric("throttled", THROTTLED_CMD, config.path_throttled, parsers.parse_throttled),
        LoadAverageMetric("load_average", ONE_MIN_LOAD_CMD, config.path_load_average, parsers.parse_load_average),
        CpuUtilMetric(
            "cpu_util", CPU_UTIL_CMD, config.path_cpu_util, parsers.parse_cpu_util,
            publish_per_core=config.publish_per_core,
        ),
        Metric("mem_util", MEM_UTIL_CMD, config.path_mem_util, parsers.parse_mem_util),
        Metric("sd_util", SD_UTIL_CMD, config.path_sd_util, parsers.parse_sd_util),
    ]
    return metrics
