"""pi_monitor.collector
Shell out to the Pi's utilities, parse what they print, publish the readings.

Modules
-------
runner   : run one `sh -c` command, stdout or None
parsers  : turn vcgencmd / mpstat / free / df text into numbers
metrics  : the metric table (command + parser + output path)
publisher: wrap a reading in an update envelope for the host
poller   : start/stop timer driving the sweeps
"""

__all__ = ["runner", "parsers", "metrics", "publisher", "poller"]
