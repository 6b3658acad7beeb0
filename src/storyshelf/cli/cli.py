"""CLI entrypoint: Typer app definition and command registration"""

import typer

from storyshelf.cli.commands import (
    ingest_cmd, init_cmd, list_cmd, preview_cmd, publish_cmd, show_cmd, versions_cmd,
)


app = typer.Typer(name="storyshelf", no_args_is_help=True, help="Story ingestion and version publishing")

app.command(name="init")(init_cmd)
app.command(name="ingest")(ingest_cmd)
app.command(name="publish")(publish_cmd)
app.command(name="preview")(preview_cmd)
app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="versions")(versions_cmd)
