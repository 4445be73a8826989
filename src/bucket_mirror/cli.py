"""Command-line interface for Bucket Mirror."""

import signal
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bucket_mirror import __version__
from bucket_mirror.cancellation import CancellationToken
from bucket_mirror.config import Config
from bucket_mirror.config_manager import get_config_path, load_config, save_config
from bucket_mirror.errors import ConfigurationError
from bucket_mirror.events import configure_logging
from bucket_mirror.scheduler import MirrorScheduler, PassReport

app = typer.Typer(
    name="bucket-mirror",
    help="Mirror an S3 bucket onto a local directory on a fixed interval.",
    add_completion=False,
)
console = Console()


# Message templates for consistent formatting
class Messages:
    CONFIG_LOAD_ERROR = "Error loading configuration: {error}"
    CONFIG_SAVED = "Configuration saved to {path}"
    CONFIG_MISSING = "{error}. Pass it as an option, set it in the environment or run 'bucket-mirror init'"
    CLIENT_ERROR = "Failed to create S3 client: {error}"
    PASS_FAILED = "Pass did not complete ({outcome}): {error}"
    PASS_COMPLETED = "Pass completed"
    STOPPED = "Mirror stopped after {passes} pass(es)"


def error_msg(message: str) -> str:
    """Format error message with consistent styling."""
    return f"[red]{escape(message)}[/red]"


def success_msg(message: str) -> str:
    """Format success message with consistent styling."""
    return f"[green]{escape(message)}[/green]"


def _load_and_configure(
    bucket: Optional[str] = None,
    local_root: Optional[str] = None,
    interval: Optional[float] = None,
    profile: Optional[str] = None,
    region: Optional[str] = None,
    verbose: bool = False,
) -> Config:
    """Resolve configuration: options over environment over config file."""
    try:
        config = Config.from_env(Config.from_dict(load_config(get_config_path())))
        config.apply({
            "bucket": bucket,
            "local_root": local_root,
            "interval": interval,
            "profile": profile,
            "region": region,
        })
        if verbose:
            config.verbose = True
        return config
    except Exception as e:
        console.print(error_msg(Messages.CONFIG_LOAD_ERROR.format(error=e)))
        raise typer.Exit(1)


def _validate_configuration(config: Config) -> None:
    """Validate required configuration settings."""
    try:
        config.validate_for_mirror()
    except ConfigurationError as e:
        console.print(error_msg(Messages.CONFIG_MISSING.format(error=e)))
        raise typer.Exit(1)


def _initialize_scheduler(config: Config, token: CancellationToken) -> MirrorScheduler:
    """Create the S3 client once and hand it to the scheduler."""
    try:
        return MirrorScheduler.from_config(config, token=token)
    except Exception as e:
        console.print(error_msg(Messages.CLIENT_ERROR.format(error=e)))
        raise typer.Exit(1)


def _install_signal_handlers(token: CancellationToken) -> None:
    """Cancel the token on SIGINT or SIGTERM."""
    def _handler(signum, frame):
        token.cancel(signal.Signals(signum).name)
    
    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def _display_report(report: PassReport) -> None:
    """Display a pass summary."""
    table = Table(title="Mirror Pass", border_style="bright_black")
    table.add_column("Outcome", style="bright_black")
    table.add_column("Pages", justify="right")
    table.add_column("Created", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Downloaded", justify="right")
    table.add_column("Failed", justify="right")
    table.add_row(
        report.outcome.value,
        str(report.pages),
        str(report.created),
        str(report.skipped),
        str(report.downloaded),
        str(report.failed),
    )
    console.print(table)


def _prepare(
    bucket: Optional[str],
    local_root: Optional[str],
    interval: Optional[float],
    profile: Optional[str],
    region: Optional[str],
    verbose: bool,
) -> MirrorScheduler:
    """Shared setup for the run and once commands."""
    config = _load_and_configure(bucket, local_root, interval, profile, region, verbose)
    _validate_configuration(config)
    configure_logging(config.verbose)
    
    token = CancellationToken()
    _install_signal_handlers(token)
    return _initialize_scheduler(config, token)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"bucket-mirror {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Mirror an S3 bucket onto a local directory on a fixed interval."""


@app.command()
def run(
    bucket: Optional[str] = typer.Option(None, help="S3 bucket to mirror"),
    local_root: Optional[str] = typer.Option(None, help="Local directory receiving the mirror"),
    interval: Optional[float] = typer.Option(None, help="Seconds to wait between passes (default: 3600)"),
    profile: Optional[str] = typer.Option(None, help="AWS profile"),
    region: Optional[str] = typer.Option(None, help="AWS region"),
    verbose: bool = typer.Option(False, help="Verbose output"),
) -> None:
    """Mirror the bucket repeatedly until interrupted."""
    scheduler = _prepare(bucket, local_root, interval, profile, region, verbose)
    passes = scheduler.run()
    console.print(success_msg(Messages.STOPPED.format(passes=passes)))


@app.command()
def once(
    bucket: Optional[str] = typer.Option(None, help="S3 bucket to mirror"),
    local_root: Optional[str] = typer.Option(None, help="Local directory receiving the mirror"),
    profile: Optional[str] = typer.Option(None, help="AWS profile"),
    region: Optional[str] = typer.Option(None, help="AWS region"),
    verbose: bool = typer.Option(False, help="Verbose output"),
) -> None:
    """Run a single mirror pass and report the result."""
    scheduler = _prepare(bucket, local_root, None, profile, region, verbose)
    scheduler.run(max_passes=1)
    
    report = scheduler.last_report
    if report is None:
        raise typer.Exit(1)
    
    _display_report(report)
    if not report.completed:
        console.print(error_msg(Messages.PASS_FAILED.format(outcome=report.outcome.value, error=report.error)))
        raise typer.Exit(1)
    console.print(success_msg(Messages.PASS_COMPLETED))


@app.command()
def init(
    bucket: str = typer.Option(..., help="S3 bucket to mirror"),
    local_root: str = typer.Option(..., help="Local directory receiving the mirror"),
    profile: Optional[str] = typer.Option(None, help="AWS profile"),
    region: Optional[str] = typer.Option(None, help="AWS region"),
    interval: Optional[float] = typer.Option(None, help="Seconds to wait between passes"),
) -> None:
    """Save default settings to the user config file."""
    config_data = {"bucket": bucket, "local_root": str(Path(local_root).expanduser().resolve())}
    if profile:
        config_data["profile"] = profile
    if region:
        config_data["region"] = region
    if interval is not None:
        config_data["interval"] = interval
    
    config_path = get_config_path()
    save_config(config_path, config_data)
    console.print(success_msg(Messages.CONFIG_SAVED.format(path=config_path)))


@app.command("show-config")
def show_config() -> None:
    """Show the resolved configuration."""
    config = _load_and_configure()
    
    table = Table(title="Bucket Mirror Configuration", border_style="bright_black")
    table.add_column("Setting", style="bright_black")
    table.add_column("Value")
    for name, value in config.masked().items():
        table.add_row(name, "" if value is None else str(value))
    console.print(table)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
