"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Statsview, a product of Garudex Labs

CLI commands for running and querying the stats web service.
"""

import sys
from typing import Optional

import click
import requests

from statsview.exceptions import InvalidStatNameError
from statsview.monitoring.http_server import STATS_PATH, StatsWebServer
from statsview.monitoring.metrics import initialize_stats_registry


@click.command('serve')
@click.option(
    '--host',
    '-H',
    default=None,
    help='Host to bind to (default: server.host from configuration)',
)
@click.option(
    '--port',
    '-p',
    type=click.IntRange(0, 65535),
    default=None,
    help='Port to listen on (default: server.port from configuration)',
)
@click.option(
    '--local-ip',
    default=None,
    help='Address advertised in monitor output (default: machine hostname)',
)
@click.option(
    '--role',
    '-r',
    default=None,
    help='Role name advertised in monitor output',
)
@click.option(
    '--stat',
    '-s',
    'stats',
    multiple=True,
    help='Register a stat at startup (can be specified multiple times)',
)
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int], local_ip: Optional[str],
          role: Optional[str], stats: tuple):
    """
    Run the stats web service until interrupted.

    Examples:

        statsview serve --port 11000 --role storage

        statsview serve -s num_queries -s num_slow_queries --local-ip 10.0.0.5
    """
    cli_ctx = ctx.obj
    server_config = cli_ctx.config.server

    registry = initialize_stats_registry()
    for name in stats:
        try:
            registry.register_stat(name)
        except InvalidStatNameError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    server = StatsWebServer(
        host=host or server_config.host,
        port=server_config.port if port is None else port,
        local_ip=server_config.local_ip if local_ip is None else local_ip,
        role=role or server_config.role,
        stats_registry=registry,
    )

    try:
        server.start()
    except OSError as e:
        click.echo(f"Error: Failed to start stats web server: {e}", err=True)
        sys.exit(1)

    click.echo(f"Serving stats at {server.get_url()}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        click.echo("Shutting down")
    finally:
        server.stop()


@click.command('get')
@click.option(
    '--url',
    '-u',
    default=None,
    help='Base URL of the stats web service (default: from configuration)',
)
@click.option(
    '--format',
    '-f',
    'output_format',
    type=click.Choice(['plain', 'json', 'monitor']),
    default='plain',
    help='Output format (default: plain)',
)
@click.option(
    '--stats',
    '-s',
    default=None,
    help='Comma separated stat names (default: all stats)',
)
@click.option(
    '--timeout',
    type=float,
    default=5.0,
    help='Request timeout in seconds (default: 5)',
)
@click.pass_context
def get(ctx, url: Optional[str], output_format: str, stats: Optional[str], timeout: float):
    """
    Fetch stats from a running stats web service.

    Examples:

        statsview get --format json --stats num_queries,num_slow_queries

        statsview get -u http://10.0.0.5:11000 -f monitor
    """
    cli_ctx = ctx.obj
    if url is None:
        server_config = cli_ctx.config.server
        host = "127.0.0.1" if server_config.host == "0.0.0.0" else server_config.host
        url = f"http://{host}:{server_config.port}"

    params = {}
    if output_format != 'plain':
        params['format'] = output_format
    if stats:
        params['stats'] = stats

    try:
        response = requests.get(url.rstrip('/') + STATS_PATH, params=params, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        click.echo(f"Error: Failed to fetch stats: {e}", err=True)
        sys.exit(1)

    click.echo(response.text, nl=not response.text.endswith("\n"))
