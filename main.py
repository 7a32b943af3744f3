#!/usr/bin/env python3
"""netwatch - Network diagnostics CLI Entry Point."""
import sys
import os
import json
import signal
import threading
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import click
from rich.console import Console
from rich.table import Table
from rich.markup import escape

from __version__ import __version__

console = Console()


def _init_components(config_path=None, verbose=False, log_dir=None, probe=None):
    """Lazy initialization of all components."""
    from utils.logger import setup_logging
    from config import load_config
    from monitor.monitor import NetworkMonitor

    config = load_config(config_path)
    if log_dir:
        config["paths"]["log_dir"] = log_dir

    log_cfg = config.get("logging", {})
    setup_logging("DEBUG" if verbose else log_cfg.get("level", "INFO"), log_cfg.get("file"))

    monitor = NetworkMonitor(config, probe=probe)
    return {"config": config, "monitor": monitor}


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML")
@click.option("--log-dir", default=None, help="Directory for observation logs")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="netwatch")
@click.pass_context
def cli(ctx, config_path, log_dir, verbose):
    """netwatch - Interface, DNS, latency, exposure and certificate checks."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["log_dir"] = log_dir
    ctx.obj["verbose"] = verbose


def _get_components(ctx):
    if "_components" not in ctx.obj:
        try:
            ctx.obj["_components"] = _init_components(
                ctx.obj.get("config_path"),
                ctx.obj.get("verbose"),
                ctx.obj.get("log_dir"),
                probe=ctx.obj.get("probe"),
            )
        except ValueError as e:
            raise click.UsageError(str(e))
    return ctx.obj["_components"]


def _report(ctx, result, as_json):
    """Print a CheckResult and exit with its exit code."""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        if result.ok:
            console.print(f"[green]✓[/green] {result.check} {result.target}")
        else:
            console.print(f"[red]✗[/red] {result.check} {result.target}: "
                          + escape(f"[{getattr(result.error, 'kind', 'error')}] {result.error}"))
        for obs in result.observations:
            if obs.metric == "duration_ms":
                console.print(f"  DNS lookup: {obs.value} ms")
            elif obs.metric == "not_after":
                console.print(f"  Expires: {obs.value.isoformat()}")
            else:
                console.print(f"  {obs.metric}: exit {obs.value}")
        for alert in result.alerts:
            console.print(f"  [bold yellow]{alert.severity}[/bold yellow] {escape(alert.message)}")
    ctx.exit(result.exit_code)


# ──────────────────────────────────────────────────────
# POLL
# ──────────────────────────────────────────────────────
@cli.command()
@click.argument("interface", required=False)
@click.option("--interval", type=float, default=None, help="Seconds between reads (default: 10)")
@click.pass_context
def poll(ctx, interface, interval):
    """Watch an interface's address and log every change (runs until stopped)."""
    c = _get_components(ctx)
    poller = c["monitor"].get_poller(interface, interval)
    stop = threading.Event()

    def _handle_term(signum, frame):
        stop.set()

    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGTERM, _handle_term)

    console.print(f"[bold]Watching {poller.config.interface}[/bold] every {poller.config.interval}s "
                  f"→ {poller.sink.path}")
    try:
        state = poller.run(stop, on_change=lambda e: console.print(
            f"  {e.interface}: {e.old or 'none'} → {e.new or 'none'}"))
    except KeyboardInterrupt:
        stop.set()
        return
    console.print(f"Stopped after {state.changes} change(s)")


# ──────────────────────────────────────────────────────
# SINGLE-SHOT CHECKS
# ──────────────────────────────────────────────────────
@cli.command()
@click.argument("domain", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def dns(ctx, domain, as_json):
    """Time one DNS resolution; warn if it exceeds the threshold (500 ms)."""
    c = _get_components(ctx)
    _report(ctx, c["monitor"].run_check("dns_check", domain), as_json)


@cli.command()
@click.argument("host", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def health(ctx, host, as_json):
    """Run ping and iperf3 against a host and log their raw output."""
    c = _get_components(ctx)
    _report(ctx, c["monitor"].run_check("network_health", host), as_json)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def audit(ctx, as_json):
    """Snapshot firewall rules and listening sockets."""
    c = _get_components(ctx)
    _report(ctx, c["monitor"].run_check("firewall_audit"), as_json)


@cli.command("ssl")
@click.argument("domain", required=False)
@click.option("--port", type=int, default=None, help="TLS port (default: 443)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def ssl_check(ctx, domain, port, as_json):
    """Check a certificate's expiry date; warn if under 30 days remain."""
    c = _get_components(ctx)
    if port:
        c["config"]["ssl_expiry"]["port"] = port
    _report(ctx, c["monitor"].run_check("ssl_expiry", domain), as_json)


# ──────────────────────────────────────────────────────
# LOGS
# ──────────────────────────────────────────────────────
LOG_SECTIONS = ["poller", "dns_check", "network_health", "firewall_audit", "ssl_expiry"]


@cli.group()
def logs():
    """Read observation logs."""
    pass


@logs.command("show")
@click.argument("log", type=str)
@click.option("--limit", default=20, type=int, help="Number of entries to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON lines")
@click.pass_context
def logs_show(ctx, log, limit, as_json):
    """Parse a log (a file path or one of: poller, dns_check, network_health, firewall_audit, ssl_expiry)."""
    from config import log_path
    from utils.formatters import time_ago
    from utils.log_parser import parse_log

    if log in LOG_SECTIONS:
        c = _get_components(ctx)
        path = log_path(c["config"], log)
    else:
        path = Path(log)
    if not path.exists():
        console.print(f"[dim]No log at {path}[/dim]")
        return

    entries = parse_log(path)[-limit:]
    if as_json:
        for e in entries:
            click.echo(json.dumps({
                "timestamp": e.timestamp.isoformat(),
                "target": e.target,
                "level": e.level,
                "message": e.message,
                "fields": e.fields,
                "raw": e.raw,
            }, default=str))
        return

    table = Table(title=str(path), show_header=True)
    table.add_column("Time", style="dim")
    table.add_column("Age", style="dim")
    table.add_column("Target")
    table.add_column("Level", no_wrap=True)
    table.add_column("Message")
    styles = {"WARNING": "yellow", "ERROR": "red", "INFO": "green"}
    for e in entries:
        table.add_row(e.timestamp.isoformat(), time_ago(e.timestamp), e.target,
                      f"[{styles[e.level]}]{e.level}[/{styles[e.level]}]", escape(e.message))
    console.print(table)


# ──────────────────────────────────────────────────────
# SCHEDULE (in-process)
# ──────────────────────────────────────────────────────
@cli.group("schedule")
def schedule_group():
    """Run the single-shot checks periodically in this process."""
    pass


@schedule_group.command("run")
@click.option("--once", is_flag=True, help="Run every scheduled check once and exit")
@click.pass_context
def schedule_run(ctx, once):
    """Run checks on the intervals from the `schedule` config section."""
    from monitor.scheduler import CheckScheduler

    c = _get_components(ctx)
    scheduler = CheckScheduler(c["monitor"])
    scheduler.on_result(lambda r: console.print(
        f"  {'[green]✓[/green]' if r.ok else '[red]✗[/red]'} {r.check} {r.target}"
        + (f" ({len(r.alerts)} alert(s))" if r.alerts else "")))

    if once:
        scheduler.run_all()
        failed = [name for name, n in scheduler.failures.items() if n]
        ctx.exit(1 if failed else 0)

    stop = threading.Event()
    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGTERM, lambda signum, frame: stop.set())
    try:
        scheduler.run_forever(stop)
    except KeyboardInterrupt:
        stop.set()


# ──────────────────────────────────────────────────────
# CRON
# ──────────────────────────────────────────────────────
@cli.group()
def cron():
    """Manage crontab entries for the single-shot checks."""
    pass


def _cron_manager(ctx):
    from service.cron import CronManager, default_project_dir

    project_dir = default_project_dir()
    config_path = ctx.obj.get("config_path")
    if config_path:
        config_path = os.path.abspath(config_path)
    c = _get_components(ctx)
    log_dir = Path(c["config"]["paths"]["log_dir"]).expanduser().resolve()
    return CronManager(project_dir, config_path=config_path,
                       output_log=str(log_dir / "cron.log")), c


@cron.command("show")
@click.option("--installed", is_flag=True, help="Show the jobs currently in the crontab instead")
@click.pass_context
def cron_show(ctx, installed):
    """Print the crontab block that `cron install` would write."""
    manager, c = _cron_manager(ctx)
    if installed:
        try:
            jobs = manager.installed_jobs()
        except (RuntimeError, FileNotFoundError) as e:
            console.print(f"[red]✗[/red] {escape(str(e))}")
            ctx.exit(1)
        for job in jobs:
            click.echo(job)
        return
    for line in manager.render(c["config"].get("schedule", {})):
        click.echo(line)


@cron.command("install")
@click.pass_context
def cron_install(ctx):
    """Install (or replace) the netwatch crontab block."""
    manager, c = _cron_manager(ctx)
    try:
        jobs = manager.install(c["config"].get("schedule", {}))
    except (RuntimeError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        ctx.exit(1)
    console.print(f"[green]✓[/green] Installed {len(jobs)} cron job(s)")
    for job in jobs:
        console.print(f"  [dim]{escape(job)}[/dim]")


@cron.command("uninstall")
@click.pass_context
def cron_uninstall(ctx):
    """Remove the netwatch crontab block."""
    manager, _ = _cron_manager(ctx)
    try:
        removed = manager.uninstall()
    except (RuntimeError, FileNotFoundError) as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        ctx.exit(1)
    if removed:
        console.print("[green]✓[/green] Removed netwatch cron jobs")
    else:
        console.print("[dim]No netwatch cron jobs installed[/dim]")


if __name__ == "__main__":
    cli()
