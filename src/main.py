#!/usr/bin/env python3
"""
NetLog - net control operator's log
Command line entry point

Commands:
- sessions: list stored nets
- show: stations and communications log of one net
- export: write an ICS-309 CSV file
- lookup: callsign directory lookup
- cache: list or clear cached callsign records
"""

import logging
import os
import sys
from pathlib import Path

import click
from rich.table import Table

# Add src to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from __version__ import __version__
from amateur.callsign import FccCallsignDirectory
from commands import netlog
from commands.base import ResultStatus
from netlog.config import NetLogConfig
from netlog.persistence import PersistenceError, SqliteNetLogRepository
from utils.console import (
    get_console,
    print_error,
    print_heading,
    print_success,
    print_warning,
)
from utils.logging_config import setup_logging


def _short_time(value):
    """HH:MM:SS from an exported timestamp"""
    if not value:
        return ""
    return value[11:19]


def _open_repository(ctx) -> SqliteNetLogRepository:
    config: NetLogConfig = ctx.obj['config']
    db_path = ctx.obj.get('db') or config.get_db_path()
    try:
        return SqliteNetLogRepository(Path(db_path))
    except PersistenceError as e:
        print_error(f"Cannot open database {db_path}: {e}")
        sys.exit(1)


@click.group()
@click.option('--db', type=click.Path(dir_okay=False), help='SQLite database file')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              help='Configuration file (default ~/.config/netlog/netlog.json)')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Write logs to this file')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.version_option(__version__, prog_name='netlog')
@click.pass_context
def main(ctx, db, config_path, log_file, debug):
    """Net control operator's log (ICS-309)"""
    config = NetLogConfig.load(Path(config_path) if config_path else None)
    level = logging.DEBUG if debug else config.get_log_level()
    setup_logging(level=level, log_file=log_file or config.log_file or None)

    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['db'] = db


@main.command()
@click.pass_context
def sessions(ctx):
    """List stored nets"""
    result = netlog.list_sessions(_open_repository(ctx))
    if not result:
        print_error(result.message)
        sys.exit(1)

    console = get_console()
    if not result.data['sessions']:
        console.print("[dim]No nets stored yet[/dim]")
        return

    table = Table(title="Stored Nets")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Frequency")
    table.add_column("NCS", style="callsign")
    table.add_column("Started")
    table.add_column("Status")

    for s in result.data['sessions']:
        table.add_row(
            s['id'],
            s['name'],
            s['frequency'],
            s['net_control_op'],
            s['started_at'],
            f"[status.{s['status']}]{s['status']}[/status.{s['status']}]",
        )

    console.print(table)


@main.command()
@click.argument('session_id')
@click.pass_context
def show(ctx, session_id):
    """Show the stations and log of one net"""
    config: NetLogConfig = ctx.obj['config']
    result = netlog.show_session(_open_repository(ctx), session_id,
                                 timeout=config.flush_timeout)
    if not result:
        print_error(result.message)
        sys.exit(1)

    console = get_console()
    data = result.data
    session = data['session']

    print_heading(f"{session['name']} - {session['frequency']}")
    console.print(f"Net Control: [callsign]{session['net_control_op']}[/callsign] "
                  f"({session['net_control_name']})")
    console.print(f"Started: {session['started_at']}  Ended: {session['ended_at'] or '-'}  "
                  f"Status: [status.{session['status']}]{session['status']}[/status.{session['status']}]")
    if data['duration']:
        console.print(f"Duration: {data['duration']}")

    stations = Table(title="Checked In Stations")
    stations.add_column("#", justify="right")
    stations.add_column("Station", style="callsign")
    stations.add_column("Name")
    stations.add_column("Location")
    stations.add_column("Check-In")
    stations.add_column("Last TX")
    for p in data['participants']:
        stations.add_row(
            str(p['check_in_number']),
            data['display'].get(p['callsign'], p['callsign']),
            p['name'],
            p['location'],
            _short_time(p['check_in_time']),
            _short_time(data['last_transmission'].get(p['callsign'])),
        )
    console.print(stations)

    log = Table(title="Communications Log")
    log.add_column("#", justify="right")
    log.add_column("Time")
    log.add_column("From", style="callsign")
    log.add_column("To", style="callsign")
    log.add_column("Message")
    for e in data['log_entries']:
        log.add_row(str(e['entry_number']), _short_time(e['time']),
                    e['from_callsign'], e['to_callsign'], e['message'])
    console.print(log)

    stats = data['stats']
    console.print(f"[dim]{stats['participants']} stations, {stats['log_entries']} entries, "
                  f"{stats['unacknowledged']} unacknowledged[/dim]")


@main.command()
@click.argument('session_id')
@click.option('-o', '--output', type=click.Path(), help='Output file or directory')
@click.option('--stdout', 'to_stdout', is_flag=True, help='Print CSV instead of writing a file')
@click.pass_context
def export(ctx, session_id, output, to_stdout):
    """Export a net as ICS-309 CSV"""
    config: NetLogConfig = ctx.obj['config']
    repository = _open_repository(ctx)

    if to_stdout:
        result = netlog.render_csv(repository, session_id, timeout=config.flush_timeout)
        if not result:
            print_error(result.message)
            sys.exit(1)
        click.echo(result.data['csv'])
        return

    result = netlog.export_session(repository, session_id, Path(output) if output else None,
                                   timeout=config.flush_timeout)
    if not result:
        print_error(result.message)
        sys.exit(1)
    if result.status == ResultStatus.WARNING:
        print_warning(result.message)
    else:
        print_success(result.message)


def _callsign_directory(ctx):
    config: NetLogConfig = ctx.obj['config']
    if not config.lookup_enabled:
        return None
    return FccCallsignDirectory(timeout=config.lookup_timeout, use_cache=config.lookup_cache)


@main.command()
@click.argument('callsign')
@click.pass_context
def lookup(ctx, callsign):
    """Look up a callsign (FCC ULS)"""
    directory = _callsign_directory(ctx)

    result = netlog.lookup_callsign(directory, callsign)
    if not result:
        print_error(result.message)
        sys.exit(1)

    info = result.data['info']
    table = Table(show_header=False, title=info['callsign'])
    table.add_column("Field", style="dim")
    table.add_column("Value")
    for key in ('name', 'city', 'state', 'license_class', 'grant_date', 'expiration_date'):
        if info.get(key):
            table.add_row(key.replace('_', ' ').title(), str(info[key]))
    get_console().print(table)


@main.command()
@click.option('--clear', is_flag=True, help='Delete all cached records')
@click.pass_context
def cache(ctx, clear):
    """List or clear cached callsign records"""
    config: NetLogConfig = ctx.obj['config']
    directory = _callsign_directory(ctx) if config.lookup_cache else None
    result = netlog.callsign_cache(directory, clear=clear)
    if not result:
        print_error(result.message)
        sys.exit(1)

    if clear:
        print_success(result.message)
        return

    console = get_console()
    console.print(f"[dim]{result.message}[/dim]")
    for callsign in result.data['callsigns']:
        console.print(f"[callsign]{callsign}[/callsign]")


if __name__ == '__main__':
    main()
