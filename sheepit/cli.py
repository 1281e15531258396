"""SheepIt command line interface."""

import asyncio
from pathlib import Path
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.table import Table

from sheepit import __version__
from sheepit.client import PollOutcome, SheepItClient, poll_until_settled
from sheepit.config import settings
from sheepit.core.exceptions import SheepItError
from sheepit.ingest import IngestionResult, ingest_listing, list_folder
from sheepit.models.pipeline import StatusView
from sheepit.utils.logging import configure_logging

app = typer.Typer(
    help="Deploy a local folder to GitHub and Vercel in one step.",
    no_args_is_help=True,
)

console = Console()

UserIdOption = Annotated[
    str,
    typer.Option("--user-id", envvar="SHEEPIT_USER_ID", help="Session user id"),
]
ApiUrlOption = Annotated[
    str | None,
    typer.Option("--api-url", envvar="SHEEPIT_API_URL", help="SheepIt API base URL"),
]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"sheepit {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version"
        ),
    ] = False,
) -> None:
    """SheepIt: one-click deploys."""


def _scan(folder: Path) -> IngestionResult:
    if not folder.is_dir():
        console.print(f"[red]Not a directory: {folder}[/red]")
        raise typer.Exit(code=1)
    try:
        return ingest_listing(list_folder(folder))
    except SheepItError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1) from e


def _print_scan(result: IngestionResult) -> None:
    table = Table(title="Scan")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Files", str(len(result.files)))
    table.add_row("Root", result.root_name or "-")
    table.add_row("Framework", result.detection.framework or "none")
    table.add_row("Build command", result.detection.build_command or "-")
    table.add_row("Output directory", result.detection.output_directory or "-")
    # Keys only; values stay local.
    table.add_row("Env vars", ", ".join(v.key for v in result.env_vars) or "-")
    console.print(table)


def _print_status(view: StatusView) -> None:
    project = view.project
    console.print(f"[bold]{project.name}[/bold] ({project.id}): {project.status.value}")
    if view.deployment:
        console.print(f"  Deployment: {view.deployment.status.value}")
        if view.deployment.error_message:
            console.print(f"  [red]{view.deployment.error_message}[/red]")
    if project.deployment_url:
        console.print(f"  URL: {project.deployment_url}")
    if project.custom_domain:
        domain_status = project.domain_status.value if project.domain_status else "-"
        console.print(f"  Domain: {project.custom_domain} ({domain_status})")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Bind host")] = None,
    port: Annotated[int | None, typer.Option(help="Bind port")] = None,
    reload: Annotated[bool, typer.Option(help="Reload on code changes")] = False,
) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "sheepit.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


@app.command()
def scan(
    folder: Annotated[Path, typer.Argument(help="Folder to scan")],
) -> None:
    """Ingest a folder and report what would be deployed."""
    _print_scan(_scan(folder))


async def _deploy(
    client: SheepItClient,
    result: IngestionResult,
    name: str,
    repo_name: str | None,
    vercel_project_name: str | None,
    zone_id: str | None,
    zone_name: str | None,
    subdomain: str | None,
) -> PollOutcome:
    project = await client.create_project(name)
    console.print(f"Created project {project.id} ({project.subdomain})")

    pushed = await client.push(project.id, result.files, repo_name)
    console.print(f"Pushed {pushed.file_count} files to {pushed.github_url}")

    deployed = await client.deploy(project.id, vercel_project_name, result.env_vars or None)
    console.print(f"Deployment {deployed.vercel_deployment_id} started")

    with console.status("Waiting for Vercel..."):
        polled = await poll_until_settled(lambda: client.get_status(project.id))
    if polled.view:
        _print_status(polled.view)

    if polled.outcome == PollOutcome.LIVE and zone_id and zone_name:
        domain = await client.set_domain(project.id, zone_id, zone_name, subdomain)
        console.print(f"Domain {domain.custom_domain}: {domain.domain_status.value}")

    return polled.outcome


@app.command()
def deploy(
    folder: Annotated[Path, typer.Argument(help="Folder to deploy")],
    user_id: UserIdOption,
    api_url: ApiUrlOption = None,
    name: Annotated[str | None, typer.Option(help="Project name")] = None,
    repo_name: Annotated[str | None, typer.Option(help="GitHub repository name")] = None,
    vercel_project_name: Annotated[
        str | None, typer.Option(help="Vercel project name")
    ] = None,
    domain_zone_id: Annotated[str | None, typer.Option(help="Cloudflare zone id")] = None,
    domain_zone_name: Annotated[
        str | None, typer.Option(help="Cloudflare zone name")
    ] = None,
    subdomain: Annotated[
        str | None, typer.Option(help="Subdomain label, '@' for the apex")
    ] = None,
) -> None:
    """Ingest, push, deploy and wait for the site to go live."""
    configure_logging()
    result = _scan(folder)
    _print_scan(result)
    if not result.files:
        console.print("[red]No files to deploy[/red]")
        raise typer.Exit(code=1)

    client = SheepItClient(base_url=api_url, user_id=user_id)
    try:
        outcome = asyncio.run(
            _deploy(
                client,
                result,
                name or result.root_name or folder.resolve().name,
                repo_name,
                vercel_project_name,
                domain_zone_id,
                domain_zone_name,
                subdomain,
            )
        )
    except SheepItError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1) from e
    except httpx.HTTPError as e:
        console.print(f"[red]Cannot reach the SheepIt API: {e}[/red]")
        raise typer.Exit(code=1) from e

    if outcome == PollOutcome.PENDING:
        console.print("[yellow]Still building; check again with 'sheepit status'.[/yellow]")
    elif outcome == PollOutcome.FAILED:
        raise typer.Exit(code=1)


@app.command()
def status(
    project_id: Annotated[str, typer.Argument(help="Project id")],
    user_id: UserIdOption,
    api_url: ApiUrlOption = None,
) -> None:
    """Show a project's current deployment status."""
    client = SheepItClient(base_url=api_url, user_id=user_id)
    try:
        view = asyncio.run(client.get_status(project_id))
    except SheepItError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1) from e
    _print_status(view)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
