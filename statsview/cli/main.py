"""
CLI entry point for Statsview.

Provides command-line interface for running the stats web service and
querying a running instance.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click


from statsview._version import __version__
from statsview.config.settings import get_default_config_path, load_config
from statsview.exceptions import ConfigurationError
from statsview.logging_config import setup_logging
from statsview.cli.context import CLIContext, pass_context


@click.group()
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f'Path to configuration file (default: {get_default_config_path()})',
)
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Set logging level (default: logging.level from configuration)',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output',
)
@click.version_option(version=__version__, prog_name='statsview')
@pass_context
def cli(ctx: CLIContext, config: Optional[Path], log_level: Optional[str], verbose: bool):
    """
    Statsview - HTTP query endpoint for process counters and gauges.

    Serves named stats as plain text, JSON or push-monitoring datapoints.
    """
    ctx.verbose = verbose
    ctx.config_path = str(config) if config else None

    try:
        ctx.config = load_config(ctx.config_path)
    except ConfigurationError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)

    try:
        effective_log_level = log_level.upper() if log_level else ctx.config.logging.level
        log_file = Path(ctx.config.logging.file) if ctx.config.logging.file else None
        setup_logging(
            level=effective_log_level,
            log_file=log_file,
            json_format=ctx.config.logging.format == "json",
        )

        if verbose:
            logger = logging.getLogger("statsview")
            logger.info(f"Loaded configuration from: {ctx.config_path or 'defaults'}")
            logger.info(f"Log level: {effective_log_level}")
    except OSError as e:
        click.echo(f"Error: Failed to set up logging: {e}", err=True)
        sys.exit(1)


# Import and register web service commands
from statsview.cli.serve import get, serve
cli.add_command(serve)
cli.add_command(get)


def main():
    """Console script entry point."""
    cli()


if __name__ == '__main__':
    main()
