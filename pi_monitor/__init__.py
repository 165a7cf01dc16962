"""pi_monitor
Raspberry Pi health metrics poller.

Modules
-------
config           : run configuration (defaults, JSON file, PI_MON_* env)
host             : callbacks that receive update envelopes
cli              : `pi-monitor` command line
collector.poller : timer that sweeps all metrics every `rate` seconds
"""

__version__ = "0.1.0"
