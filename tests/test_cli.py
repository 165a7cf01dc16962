import json

from typer.testing import CliRunner

from pi_monitor.cli import app
from pi_monitor.collector import poller

from conftest import FakeRunner

cli = CliRunner()


def _updates(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


def test_schema_command():
    result = cli.invoke(app, ["schema"])
    assert result.exit_code == 0
    assert "path_gpu_temp" in json.loads(result.output)["properties"]


def test_run_once_prints_updates(monkeypatch):
    monkeypatch.setattr(poller, "run_command", FakeRunner())
    result = cli.invoke(app, ["run", "--once"], env={"PI_MON_RATE": "5"})
    assert result.exit_code == 0
    paths = {u["updates"][0]["values"][0]["path"] for u in _updates(result.output)}
    assert "environment.rpi.gpu.temperature" in paths
    assert len(paths) == 8


def test_sample_uses_config_file(monkeypatch, tmp_path):
    monkeypatch.setattr(poller, "run_command", FakeRunner())
    cfg = tmp_path / "pi.json"
    cfg.write_text(json.dumps({"path_sd_util": "pi.sd", "enable_cpu_temp": True}))
    result = cli.invoke(app, ["sample", "--config", str(cfg)])
    assert result.exit_code == 0
    values = {u["updates"][0]["values"][0]["path"]: u["updates"][0]["values"][0]["value"]
              for u in _updates(result.output)}
    assert values["pi.sd"] == 0.55
    assert values["environment.rpi.cpu.temperature"] == 323.15


def test_bad_config_exits_2(tmp_path):
    cfg = tmp_path / "pi.json"
    cfg.write_text(json.dumps({"rate": -1}))
    result = cli.invoke(app, ["run", "--once", "--config", str(cfg)])
    assert result.exit_code == 2
