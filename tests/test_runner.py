import logging
import os
import subprocess
import time

from pi_monitor.collector import runner


def test_stdout_is_returned():
    assert runner.run_command("echo temp=45.0\\'C") == "temp=45.0'C\n"


def test_pipelines_go_through_sh():
    assert runner.run_command("printf 'a b\\nc d\\n' | awk '{print $2}'") == "b\nd\n"


def test_non_zero_exit_is_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        assert runner.run_command("echo broken >&2; exit 3") is None
    assert "exited with 3" in caplog.text
    assert "broken" in caplog.text


def test_stderr_on_success_is_logged(caplog):
    with caplog.at_level(logging.WARNING):
        assert runner.run_command("echo 55; echo noisy >&2") == "55\n"
    assert "noisy" in caplog.text


def test_timeout_is_skipped():
    assert runner.run_command("sleep 5", timeout=0.2) is None


def test_spawn_failure_is_skipped(monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise FileNotFoundError("sh")

    monkeypatch.setattr(subprocess, "Popen", boom)
    with caplog.at_level(logging.ERROR):
        assert runner.run_command("free") is None
    assert "could not spawn" in caplog.text


def test_undecodable_output_does_not_raise():
    out = runner.run_command("printf '\\377\\376 55\\n'")
    assert out == "\ufffd\ufffd 55\n"


def _procs_running(marker):
    found = []
    for pid in os.listdir("/proc"):
        if not pid.isdigit():
            continue
        try:
            with open(f"/proc/{pid}/cmdline", "rb") as f:
                cmdline = f.read().replace(b"\0", b" ").decode(errors="replace")
        except OSError:
            continue
        if marker in cmdline:
            found.append(pid)
    return found


def test_timeout_kills_whole_pipeline():
    assert runner.run_command("sleep 7.71 | cat", timeout=0.3) is None
    deadline = time.monotonic() + 2
    while _procs_running("sleep 7.71") and time.monotonic() < deadline:
        time.sleep(0.05)
    assert _procs_running("sleep 7.71") == []
