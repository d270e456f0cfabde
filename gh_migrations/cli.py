"""Command-line interface for launching and archiving organization migrations."""

import asyncio
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .core.config import BlobStoreConfig, RunConfig, get_settings
from .core.exceptions import ConfigurationError, StorageSetupError
from .core.logging import get_logger, setup_logging
from .models.migration import MigrationReport, MigrationStatus, parse_repo_list
from .services.orchestrator import run_migrations

logger = get_logger(__name__)

REPORT_FILENAME = "migration_report.json"
EXIT_INCOMPLETE = 1
EXIT_STORAGE_SETUP = 3


def _print_report(report: MigrationReport) -> None:
    for failure in report.launch_failures:
        click.echo(f"  {failure.org}/{failure.repo}: launch failed ({failure.error})")

    for outcome in report.outcomes:
        line = f"  {outcome.org}/{outcome.repo} [{outcome.migration_id}]: {outcome.status.value}"
        if outcome.status is MigrationStatus.EXPORTED and outcome.artifact is not None:
            if outcome.artifact.delivered_remotely:
                line += f" -> blob {outcome.artifact.remote_key}"
            else:
                line += f" -> {outcome.artifact.local_path}"
        elif outcome.error:
            line += f" ({outcome.error})"
        click.echo(line)

    counts = report.summary()
    click.echo(
        f"Exported {counts[MigrationStatus.EXPORTED.value]}/{counts['launched']} launched migrations, "
        f"{counts['launch_failed']} failed to launch."
    )


def _write_report(report: MigrationReport, outdir: Path) -> Path:
    outdir.mkdir(parents=True, exist_ok=True)
    report_path = outdir / REPORT_FILENAME
    report_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    return report_path


@click.command(name="gh-migrations", context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="gh-migrations")
@click.option(
    "--repos", "-r",
    envvar="GITHUB_REPOS",
    required=True,
    help="Comma delimited list of orgs/repos (ex. github/github,torvalds/linux)",
)
@click.option(
    "--endpoint", "-e",
    envvar="GITHUB_ENDPOINT",
    required=True,
    help="The API endpoint of the GitHub instance (ex. api.github.com)",
)
@click.option(
    "--outdir", "-o",
    envvar="GITHUB_OUTDIR",
    default="archives",
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="The output directory for the archives",
)
@click.option(
    "--token", "-t",
    envvar="GITHUB_TOKEN",
    required=True,
    help="The personal access token for the migrations API",
)
@click.option(
    "--production", "-p",
    envvar="GITHUB_PRODUCTION",
    is_flag=True,
    default=False,
    help="Lock the source repositories while they are migrated",
)
@click.option(
    "--azure-connection-string",
    envvar="AZURE_STORAGE_CONNECTION_STRING",
    default=None,
    help="Azure Storage connection string for relocating archives",
)
@click.option(
    "--azure-container",
    envvar="AZURE_STORAGE_CONTAINER",
    default=None,
    help="Azure Blob container that receives the archives",
)
def cli(
    repos: str,
    endpoint: str,
    outdir: Path,
    token: str,
    production: bool,
    azure_connection_string: Optional[str],
    azure_container: Optional[str],
) -> None:
    """Start organization migrations and download their archives."""
    try:
        settings = get_settings()
    except ValidationError as e:
        raise click.UsageError(f"Invalid settings: {e}")
    setup_logging(settings)

    try:
        requests = parse_repo_list(repos)
    except ConfigurationError as e:
        raise click.BadParameter(str(e), param_hint="'--repos'")

    if bool(azure_connection_string) != bool(azure_container):
        raise click.UsageError(
            "--azure-connection-string and --azure-container must be given together"
        )

    remote_store = None
    if azure_connection_string:
        remote_store = BlobStoreConfig(
            connection_string=azure_connection_string,
            container=azure_container,
        )

    run_config = RunConfig(
        lock_repositories=production,
        output_dir=outdir,
        remote_store=remote_store,
    )

    logger.info(
        "Starting migration run",
        repositories=[str(r) for r in requests],
        endpoint=endpoint,
        output_dir=str(outdir),
        lock_repositories=production,
        remote_store=remote_store.container if remote_store else None
    )

    try:
        report = asyncio.run(run_migrations(requests, run_config, token, endpoint, settings))
    except StorageSetupError as e:
        logger.error("Remote storage setup failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_STORAGE_SETUP)

    _print_report(report)
    report_path = _write_report(report, outdir)
    logger.info("Wrote migration report", file_path=str(report_path))

    if not report.all_exported:
        sys.exit(EXIT_INCOMPLETE)


def main() -> NoReturn:
    load_dotenv()
    cli()
