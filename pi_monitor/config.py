# pi_monitor/config.py
"""
Run configuration for the Pi monitor.

Precedence (lowest → highest):
    1. defaults below
    2. JSON file passed with --config
    3. PI_MON_<FIELD> environment variables, e.g.

        export PI_MON_RATE=10
        export PI_MON_PATH_GPU_TEMP=environment.pi.gpu.temperature
        export PI_MON_ENABLE_CPU_TEMP=true
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "PI_MON_"
SOURCE_ID = "signalk-raspberry-pi-monitoring2"


class MonitorConfig(BaseModel):
    """The user running the monitor must be in the video group to get GPU temperature.
    sysstat must be installed to activate mpstat."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path_throttled: str = Field(
        "environment.rpi.throttled",
        title="Path for System Status (vcgencmd get_throttled)",
    )
    path_load_average: str = Field(
        "environment.rpi.load_average",
        title="Path for one minute Load Average (scaled by cpus)",
    )
    path_core_voltage: str = Field("environment.rpi.core.voltage", title="Path for Core Voltage (V)")
    path_bat_voltage: str = Field("environment.rpi.bat.voltage", title="Path for MoPi Bat Voltage (V)")
    path_cpu_temp: str = Field("environment.rpi.cpu.temperature", title="Path for CPU temperature (K)")
    path_gpu_temp: str = Field("environment.rpi.gpu.temperature", title="Path for GPU temperature (K)")
    path_cpu_util: str = Field(
        "environment.rpi.cpu.utilisation",
        title="Path for CPU utilisation (Please install sysstat for per core monitoring)",
    )
    path_mem_util: str = Field("environment.rpi.memory.utilisation", title="Path for memory utilisation")
    path_sd_util: str = Field("environment.rpi.sd.utilisation", title="Path for SD card utilisation")
    rate: float = Field(30, gt=0, title="Sample Rate (in seconds)")

    enable_cpu_temp: bool = Field(False, title="Sample CPU temperature from thermal_zone0")
    publish_per_core: bool = Field(False, title="Publish per-core CPU utilisation")
    command_timeout: float = Field(10, gt=0, title="Seconds before a command is abandoned")
    max_workers: int = Field(16, ge=1, title="Collectors allowed to run at once")
    source_id: str = Field(SOURCE_ID, title="Source identifier put on every update")


def _from_env(environ: Mapping[str, str]) -> Dict[str, str]:
    found = {}
    for name in MonitorConfig.model_fields:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is not None:
            found[name] = raw
    return found


def load_config(
    path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> MonitorConfig:
    """Build the run config from defaults, an optional JSON file and the environment.

    Raises pydantic.ValidationError for bad values and OSError/ValueError for
    an unreadable or malformed file.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        data.update(json.loads(Path(path).read_text(encoding="utf-8")))
    data.update(_from_env(os.environ if environ is None else environ))
    return MonitorConfig(**data)


def config_schema() -> Dict[str, Any]:
    """JSON schema shown to users configuring the monitor."""
    return MonitorConfig.model_json_schema()
