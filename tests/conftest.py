import pytest

from pi_monitor.collector import metrics

CANNED = {
    metrics.GPU_TEMP_CMD: "temp=45.0'C\n",
    metrics.CPU_TEMP_CMD: "50000\n",
    metrics.CORE_VOLTAGE_CMD: "volt=1.2000V\n",
    metrics.BAT_VOLTAGE_CMD: "12500\n",
    metrics.THROTTLED_CMD: "throttled=0x50000\n",
    metrics.NUM_CPU_CMD: "4\n",
    metrics.ONE_MIN_LOAD_CMD: " 2.00\n",
    metrics.CPU_UTIL_CMD: (
        "12:00:01     all    2.51    0.00    1.00    0.25    0.00    0.24    0.00    0.00    0.00   96.00\n"
        "12:00:01       0    3.00    0.00    1.00    0.00    0.00    0.00    0.00    0.00    0.00   80.00\n"
    ),
    metrics.MEM_UTIL_CMD: "Mem: 1000 400 600 0 0 0\n",
    metrics.SD_UTIL_CMD: "55\n",
}


class FakeRunner:
    """Stands in for run_command: canned stdout per command, None for unknown ones."""

    def __init__(self, outputs=None):
        self.outputs = dict(CANNED if outputs is None else outputs)
        self.calls = []

    def __call__(self, cmd, timeout=None):
        self.calls.append(cmd)
        out = self.outputs.get(cmd)
        if isinstance(out, Exception):
            raise out
        return out


class RecordingHost:
    def __init__(self):
        self.received = []

    def __call__(self, source_id, envelope):
        self.received.append((source_id, envelope))

    @property
    def values(self):
        return {
            v["path"]: v["value"]
            for _, env in self.received
            for u in env["updates"]
            for v in u["values"]
        }


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def host():
    return RecordingHost()
