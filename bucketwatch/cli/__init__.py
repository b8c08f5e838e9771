import asyncio
import logging
import sys
from importlib import metadata
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import click
from appdirs import user_log_dir
from rich.console import Console
from rich.logging import RichHandler

from bucketwatch.config import ClientConfig
from bucketwatch.exceptions import NotificationDecodeError
from bucketwatch.notification import KNOWN_EVENTS, build_arn, listen_bucket_notification
from bucketwatch.transport import HttpTransport

console = Console()

app_logger = logging.getLogger("bucketwatch")
# Capture everything from 'bucketwatch', handlers decide what to keep
app_logger.setLevel(logging.DEBUG)

app_name = "bucketwatch"

logger = logging.getLogger(__name__)


def _setup_file_logging() -> Path:
    log_dir = Path(user_log_dir(app_name))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file_path = log_dir / f"{app_name}.log"
    file_handler = TimedRotatingFileHandler(
        filename=str(log_file_path), when="D", interval=1, backupCount=7, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    app_logger.addHandler(file_handler)
    return log_file_path


# -v count to console log level and the colour it is announced in
_CONSOLE_LEVELS = {1: (logging.INFO, "blue"), 2: (logging.DEBUG, "green")}


def _setup_console_logging(verbose: int, log_file_path: Path) -> None:
    level, colour = _CONSOLE_LEVELS[verbose]
    handler = RichHandler(
        console=console,
        level=level,
        show_time=False,
        markup=True,
        rich_tracebacks=True,
        tracebacks_suppress=[click],
    )
    app_logger.addHandler(handler)
    console.print(
        f"[italic {colour}]Logging {logging.getLevelName(level)} to the console, "
        f"everything to {log_file_path}[/]",
        highlight=False,
    )


@click.group(invoke_without_command=True)
@click.option(
    "--verbose", "-v", count=True, help="Increase verbosity. -v for INFO, -vv for DEBUG logs."
)
@click.option("--version", is_flag=True, help="Show bucketwatch version.")
@click.pass_context
def cli(ctx: click.Context, verbose: int, version: bool) -> None:
    if version:
        _version()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        ctx.exit(0)

    log_file_path = _setup_file_logging()
    # httpx logs every request at INFO, which is noise for a long-running listener
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if verbose:
        _setup_console_logging(min(verbose, len(_CONSOLE_LEVELS)), log_file_path)


@click.command()
@click.argument("bucket")
@click.option(
    "--endpoint",
    envvar="BUCKETWATCH_ENDPOINT",
    required=True,
    help="S3 endpoint, e.g. localhost:9000 or https://play.min.io",
)
@click.option("--region", envvar="AWS_REGION", default=None, help="Region to sign requests for")
@click.option("--profile", envvar="AWS_PROFILE", default=None, help="AWS profile for credentials")
@click.option("--insecure", is_flag=True, help="Use plain HTTP when the endpoint has no scheme")
@click.option("--prefix", default="", help="Only objects whose key starts with this")
@click.option("--suffix", default="", help="Only objects whose key ends with this")
@click.option(
    "--event",
    "events",
    multiple=True,
    help="Event name to listen for, can be repeated. Defaults to all events.",
)
def listen(  # noqa: PLR0913
    bucket: str,
    endpoint: str,
    region: str | None,
    profile: str | None,
    insecure: bool,
    prefix: str,
    suffix: str,
    events: tuple[str, ...],
) -> None:
    """Print bucket notifications as they happen. Stop with Ctrl+C."""
    config = ClientConfig(endpoint=endpoint, region=region, profile=profile, secure=not insecure)
    for event in events:
        if event not in KNOWN_EVENTS:
            logger.warning("Event '%s' is not a known S3 event name", event)

    console.print(f"[bold cyan]Listening[/bold cyan] on bucket [bold]{bucket}[/bold]...")
    try:
        failed = asyncio.run(_listen(config, bucket, prefix, suffix, list(events)))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped listening.[/yellow]")
        return
    if failed:
        sys.exit(1)


async def _listen(
    config: ClientConfig, bucket: str, prefix: str, suffix: str, events: list[str]
) -> bool:
    failed = False

    def on_notification(record: dict) -> None:
        s3 = record.get("s3", {})
        console.print(
            f"[grey][{record.get('eventTime', '-')}][/grey] "
            f"[bold]{record.get('eventName', '?')}[/bold] "
            f"[bold blue]{s3.get('bucket', {}).get('name', bucket)}[/bold blue]/"
            f"[cyan]{s3.get('object', {}).get('key', '')}[/cyan]",
            highlight=False,
        )

    def on_error(error: Exception) -> None:
        nonlocal failed
        if isinstance(error, NotificationDecodeError):
            console.print(f"[yellow]Skipped record: {error}[/yellow]")
            return
        failed = True
        console.print(f"[bold red]Error:[/bold red] {error}")

    async with HttpTransport(config) as transport:
        poller = listen_bucket_notification(transport, bucket, prefix, suffix, events)
        poller.on("notification", on_notification)
        poller.on("error", on_error)
        await poller.join()
    return failed


@click.command()
@click.argument("partition")
@click.argument("service")
@click.argument("region")
@click.argument("account_id")
@click.argument("resource")
def arn(partition: str, service: str, region: str, account_id: str, resource: str) -> None:
    """Build a notification target ARN, e.g. arn minio sqs us-east-1 1 webhook."""
    click.echo(build_arn(partition, service, region, account_id, resource))


@click.command()
def events() -> None:
    """List the known bucket event names."""
    for event in KNOWN_EVENTS:
        click.echo(event)


cli.add_command(listen)
cli.add_command(arn)
cli.add_command(events)


def _version() -> None:
    console.print(f"bucketwatch version: {metadata.version('bucketwatch')}", highlight=False)
    sys.exit(0)
