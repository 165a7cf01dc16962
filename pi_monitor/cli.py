#!/usr/bin/env python
"""
pi-monitor run [--config FILE] [--url URL] [--once]
pi-monitor sample [--config FILE]
pi-monitor schema

Example:
    PI_MON_RATE=10 pi-monitor run --url http://localhost:3000/signalk/v1/api/
"""
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from .collector.poller import Poller
from .config import MonitorConfig, config_schema, load_config
from .host import HttpHost, LogHost

app = typer.Typer(add_completion=False, help="Raspberry Pi health metrics poller")


@app.callback()
def _setup_logging() -> None:
    logging.basicConfig(
        level=os.getenv("PI_MON_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s  %(levelname)s %(message)s",
    )


def _load(path: Optional[Path]) -> MonitorConfig:
    try:
        return load_config(path)
    except (ValidationError, OSError, ValueError, TypeError) as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(2)


@app.command()
def run(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
    url: Optional[str] = typer.Option(None, help="POST updates here instead of printing them"),
    once: bool = typer.Option(False, "--once", help="take one sample of everything and exit"),
):
    """Sample now, then keep sampling every `rate` seconds until interrupted."""
    cfg = _load(config)
    host = HttpHost(url) if url else LogHost()
    poller = Poller(cfg, host)
    if once:
        poller.run_once()
        poller.close()
        return

    poller.start()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        poller.close()


@app.command()
def sample(config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file")):
    """One sweep, printed as JSON lines."""
    poller = Poller(_load(config), LogHost())
    poller.run_once()
    poller.close()


@app.command()
def schema():
    """Print the configuration JSON schema."""
    typer.echo(json.dumps(config_schema(), indent=2))


if __name__ == "__main__":
    app()          # `python -m pi_monitor.cli run --once`
