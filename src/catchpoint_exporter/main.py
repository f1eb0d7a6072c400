"""
catchpoint-exporter entry point.

Usage:
    catchpoint-exporter --bearer-token T --node-ids 1,2     Serve /metrics
    catchpoint-exporter --mock                             Serve simulated data
    catchpoint-exporter --mock snapshot                    One scrape, printed
    catchpoint-exporter --bearer-token T watch             Live terminal view
"""

from __future__ import annotations

import logging

import click

from catchpoint_exporter import __version__
from catchpoint_exporter.collector.base import CatchpointAPI
from catchpoint_exporter.collector.catchpoint_client import CatchpointClient
from catchpoint_exporter.collector.exporter import CatchpointCollector, build_registry
from catchpoint_exporter.collector.mock_client import MockCatchpointClient
from catchpoint_exporter.config import (
    DEFAULT_BASE_URL,
    Config,
    ConfigError,
    RateLimiter,
    parse_node_ids,
)
from catchpoint_exporter.server import DEFAULT_METRICS_PATH, serve_metrics

log = logging.getLogger("catchpoint_exporter")

ENV_PREFIX = "CATCHPOINT_EXPORTER_"
MOCK_NODE_IDS = (1, 2, 3)
LOG_LEVELS = ["debug", "info", "warning", "error"]


def build_source(obj: dict) -> tuple[CatchpointAPI, Config]:
    """Validate the CLI settings and build the API client they describe.

    Raises ConfigError when the settings can't be used.
    """
    node_ids = parse_node_ids(obj["node_ids"])
    rate_limiter = RateLimiter(obj["request_delay"])

    if obj["mock"]:
        config = Config(
            bearer_token=obj["bearer_token"] or "mock",
            node_ids=node_ids or MOCK_NODE_IDS,
            rate_limiter=RateLimiter(0),
        )
        config.validate()
        return MockCatchpointClient(), config

    config = Config(
        bearer_token=obj["bearer_token"] or "",
        node_ids=node_ids,
        rate_limiter=rate_limiter,
        base_url=obj["base_url"],
        timeout_seconds=obj["timeout"],
    )
    config.validate()
    if not config.node_ids:
        log.warning("No node ids configured, per-node metrics will be empty")

    api = CatchpointClient(
        config.bearer_token,
        base_url=config.base_url,
        timeout_seconds=config.timeout_seconds,
    )
    return api, config


def _source_or_exit(ctx) -> tuple[CatchpointAPI, Config]:
    try:
        return build_source(ctx.obj)
    except ConfigError as e:
        log.error("Configuration is invalid: %s", e)
        click.echo(f"Configuration is invalid: {e}", err=True)
        raise SystemExit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="catchpoint-exporter")
@click.option("--bearer-token", envvar=ENV_PREFIX + "BEARER_TOKEN", default=None,
              help="Bearer token for the Catchpoint API")
@click.option("--node-ids", envvar=ENV_PREFIX + "NODE_IDS", default=None,
              help="Comma-separated node ids to report on (e.g. 1,2,3)")
@click.option("--request-delay", envvar=ENV_PREFIX + "REQUEST_DELAY", default=1.0, type=float,
              help="Delay before each API request in seconds, to stay under rate limits")
@click.option("--base-url", envvar=ENV_PREFIX + "BASE_URL", default=DEFAULT_BASE_URL,
              help="Catchpoint API base URL")
@click.option("--timeout", default=10.0, type=float, help="HTTP timeout per API request in seconds")
@click.option("--port", envvar=ENV_PREFIX + "PORT", default=8080, type=int,
              help="Port to serve metrics on")
@click.option("--web.telemetry-path", "metrics_path", envvar=ENV_PREFIX + "WEB_TELEMETRY_PATH",
              default=DEFAULT_METRICS_PATH, help="Path under which to expose metrics")
@click.option("--mock", is_flag=True, default=False, help="Use simulated Catchpoint data")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default="info", help="Logging level")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, bearer_token: str, node_ids: str, request_delay: float, base_url: str,
        timeout: float, port: int, metrics_path: str, mock: bool, log_level: str,
        verbose: bool):
    """Catchpoint exporter - expose Catchpoint node and test data to Prometheus."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, log_level.upper()),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["bearer_token"] = bearer_token
    ctx.obj["node_ids"] = node_ids
    ctx.obj["request_delay"] = request_delay
    ctx.obj["base_url"] = base_url
    ctx.obj["timeout"] = timeout
    ctx.obj["port"] = port
    ctx.obj["metrics_path"] = metrics_path
    ctx.obj["mock"] = mock

    # No subcommand means serve
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.pass_context
def serve(ctx):
    """Serve Prometheus metrics over HTTP."""
    api, config = _source_or_exit(ctx)
    registry = build_registry(api, config)
    click.echo(f"Serving {api.name()} metrics at :{ctx.obj['port']}{ctx.obj['metrics_path']}")
    try:
        serve_metrics(registry, port=ctx.obj["port"], metrics_path=ctx.obj["metrics_path"])
    finally:
        api.close()


@cli.command()
@click.option("--output", type=click.Choice(["table", "text"]), default="table",
              help="table (Rich) or text (Prometheus exposition format)")
@click.pass_context
def snapshot(ctx, output: str):
    """Run a single scrape and print the result."""
    api, config = _source_or_exit(ctx)

    try:
        if output == "text":
            from prometheus_client import generate_latest

            click.echo(generate_latest(build_registry(api, config)).decode(), nl=False)
        else:
            from catchpoint_exporter.dashboard.terminal import print_snapshot

            print_snapshot(CatchpointCollector(api, config))
    finally:
        api.close()


@cli.command()
@click.option("--refresh", default=30.0, help="Seconds between scrapes")
@click.pass_context
def watch(ctx, refresh: float):
    """Scrape repeatedly and show the latest values in a live table."""
    from catchpoint_exporter.dashboard.terminal import run_watch

    api, config = _source_or_exit(ctx)
    try:
        run_watch(CatchpointCollector(api, config), refresh_interval=refresh)
    finally:
        api.close()


if __name__ == "__main__":
    cli()
