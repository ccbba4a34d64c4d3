# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from google_auth_oauthlib.flow import InstalledAppFlow
from rich.console import Console
from rich.table import Table
from ..core.config import Config
from ..core.errors import LiliBoxError
from ..infrastructure.drive import DriveClient, SCOPES
from ..infrastructure.tmdb import TmdbClient
from ..services.catalog_service import CatalogService
from ..services.enrich_service import EnrichService

app = typer.Typer(help="LiliBox - Browse and stream your Google Drive media.")
console = Console()


def _load_config(config_path: str) -> Config:
    try:
        return Config.load(config_path)
    except Exception as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1)


@app.command("list")
def list_catalog(config_path: str = "config.yaml", metadata: bool = True):
    """
    List the media folder grouped by show, optionally with TMDB metadata.
    """
    config = _load_config(config_path)
    drive_client = DriveClient.from_token_file(config.token_path, timeout=config.request_timeout)
    tmdb_client = TmdbClient(config.tmdb_api_key, image_base_url=config.tmdb_image_base_url)
    enrich_service = EnrichService(tmdb_client, max_workers=config.enrichment_workers)
    catalog_service = CatalogService(config, drive_client, enrich_service)

    console.print(f"Listing Drive folder [cyan]{config.media_folder_id}[/cyan]...")
    try:
        groups = catalog_service.list_catalog(enrich=metadata)
    except LiliBoxError as e:
        console.print(f"[red]{e.kind}:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Media Catalog")
    table.add_column("Show", style="magenta")
    table.add_column("Seasons", style="green")
    table.add_column("Episodes", justify="right")
    table.add_column("TMDB Title", style="yellow")
    table.add_column("Rating", justify="right", style="cyan")

    for group in groups:
        table.add_row(
            group.show_name,
            ", ".join(group.seasons.keys()),
            str(len(group.episodes)),
            group.metadata.name if group.metadata else "",
            f"{group.metadata.vote_average:.1f}" if group.metadata and group.metadata.vote_average else "",
        )

    console.print(table)
    console.print(f"\nFound [bold]{len(groups)}[/bold] shows.")


@app.command("auth")
def authorize(config_path: str = "config.yaml", port: int = 0):
    """
    Authorize read-only access to Google Drive and store the token.
    """
    config = _load_config(config_path)

    if not config.credentials_path.exists():
        console.print(f"[red]{config.credentials_path} not found![/red]")
        console.print("1. Go to https://console.developers.google.com/")
        console.print("2. Create a project and enable the Google Drive API")
        console.print("3. Create an OAuth 2.0 Client ID (Desktop app) and download the JSON")
        console.print(f"4. Save it as {config.credentials_path}")
        raise typer.Exit(1)

    if config.token_path.exists():
        console.print("[green]Token already exists. Authentication setup complete![/green]")
        return

    console.print("Open the URL below in a browser and approve access. The code returns to this machine.")
    flow = InstalledAppFlow.from_client_secrets_file(str(config.credentials_path), scopes=SCOPES)
    credentials = flow.run_local_server(port=port, open_browser=False)

    config.token_path.write_text(credentials.to_json(), encoding="utf-8")
    console.print(f"[green]Token stored in {config.token_path}.[/green]")
    console.print("Next: set media_folder_id (or MEDIA_FOLDER_ID) and run the server.")


if __name__ == "__main__":
    app()
