"""
Command line entry points: run the server, run one cycle, dump the store.
"""
from __future__ import annotations

import json
import logging
import os
import sys

import click

from app_utils import configure_logging
from relay import ConfigError, RelaySettings, build_service, load_settings

logger = logging.getLogger(__name__)


def _settings_or_exit() -> RelaySettings:
    try:
        return load_settings(os.getenv("RELAY_DOTENV", ".env"))
    except ConfigError as exc:
        logger.critical("%s. Please set them and restart. Exiting.", exc)
        sys.exit(1)


@click.group()
@click.option("--log-level", default=None, help="Override RELAY_LOG_LEVEL.")
def cli(log_level):
    configure_logging(level=log_level)


@cli.command()
@click.option("--host", default=None, help="Bind host (default APP_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (default APP_PORT).")
@click.option("--no-scheduler", is_flag=True, help="Serve without the background cycle.")
def serve(host, port, no_scheduler):
    """Start the web server and the background processing cycle."""
    from app import create_app

    settings = _settings_or_exit()
    service = build_service(settings)
    app = create_app(service, start_scheduler=not no_scheduler)
    host = host or settings.host
    port = port or settings.port
    logger.info("Starting Flask server on http://%s:%s", host, port)
    try:
        app.run(host=host, port=port, debug=False, use_reloader=False, threaded=True)
    finally:
        service.scheduler.shutdown()


@cli.command()
def process():
    """Run a single processing cycle and print its result."""
    service = build_service(_settings_or_exit())
    result = service.run_cycle()
    click.echo(json.dumps(result.to_dict(), indent=2))
    if not result.success:
        sys.exit(1)


@cli.command()
@click.option("--limit", default=10, show_default=True, help="Newest items to print (0 for all).")
def show(limit):
    """Print stored records, newest first."""
    service = build_service(_settings_or_exit())
    items, item_count = service.load_items_newest_first()
    if limit:
        items = items[:limit]
    click.echo(f"{item_count} items in {service.store.path}")
    for item in items:
        click.echo(json.dumps(item.model_dump(mode="json"), ensure_ascii=False))


if __name__ == "__main__":  # pragma: no cover
    cli()
