# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from lilibox.cli.main import app as cli_app
from lilibox.server.app import Server

app = typer.Typer(help="LiliBox - Browse and stream your Google Drive media.")

# Add CLI commands
app.registered_commands.extend(cli_app.registered_commands)

@app.command("server")
def run_server(config_path: str = "config.yaml"):
    """
    Run the web server.
    """
    server = Server(config_path)
    server.run()

if __name__ == "__main__":
    app()
