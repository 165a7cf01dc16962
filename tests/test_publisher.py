import logging

from pi_monitor.collector.publisher import Publisher, make_envelope


def test_envelope_shape():
    assert make_envelope("environment.rpi.sd.utilisation", 0.55) == {
        "updates": [{"values": [{"path": "environment.rpi.sd.utilisation", "value": 0.55}]}]
    }


def test_one_envelope_per_value(host):
    pub = Publisher(host, "rpi")
    assert pub.publish("a.b", 1.5)
    assert pub.publish("a.c", "0")
    assert host.received == [("rpi", make_envelope("a.b", 1.5)), ("rpi", make_envelope("a.c", "0"))]


def test_host_failure_is_contained(caplog):
    def broken_host(source_id, envelope):
        raise RuntimeError("bus down")

    with caplog.at_level(logging.ERROR):
        assert Publisher(broken_host, "rpi").publish("a.b", 1) is False
    assert "bus down" in caplog.text
