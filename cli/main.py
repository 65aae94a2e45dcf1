"""LickUI CLI: entry-point for the proxy pipeline and page editing.

Usage:
    python cli/main.py --help

Commands:
    fetch     → proxy a URL and print the normalised page
    scope     → namespace a stylesheet under a container selector
    edit      → load a page, apply instructions or chat, write the result
    serve     → run the HTTP API with uvicorn
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from lickui.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json

import typer

from lickui import proxy
from lickui.config import configure_logging, settings
from lickui.render.scoper import scope_css

from cli.commands.edit import edit_app

app = typer.Typer(
    name="lickui",
    help="LickUI CLI: proxy, render and restyle any website.",
    no_args_is_help=True,
)
app.add_typer(edit_app, name="edit")


@app.callback()
def main() -> None:
    configure_logging()


# ---------------------------------------------------------------------------
# Proxy
# ---------------------------------------------------------------------------
@app.command("fetch")
def fetch(
    url: str = typer.Argument(..., help="Absolute URL of the page to proxy."),
    as_json: bool = typer.Option(True, "--json/--summary", help="Print the raw response or a summary."),
) -> None:
    """Fetch a URL through the proxy pipeline."""
    result = asyncio.run(proxy.handle(url))
    page = result.page

    if as_json:
        typer.echo(json.dumps(page.to_wire(), indent=2))
    else:
        typer.echo(f"[fetch] Status : {result.status_code}")
        if page.success:
            typer.echo(f"[fetch] Title  : {page.title or '(none)'}")
            typer.echo(f"[fetch] Base   : {page.base_url}")
            typer.echo(f"[fetch] HTML   : {len(page.body_html)} chars")
            typer.echo(f"[fetch] CSS    : {len(page.css)} chars")
        else:
            typer.echo(f"[fetch] Error  : {page.error}")

    if not page.success:
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# CSS scoping
# ---------------------------------------------------------------------------
@app.command("scope")
def scope(
    css_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Stylesheet to scope."),
    container: str = typer.Option(
        None, "--container", help="Container selector (default: .<PREVIEW_CONTAINER_CLASS>)."
    ),
) -> None:
    """Print a stylesheet with every rule restricted to one container."""
    selector = container or f".{settings.container_class}"
    typer.echo(scope_css(css_file.read_text(encoding="utf-8"), selector))


# ---------------------------------------------------------------------------
# HTTP server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the LickUI HTTP API."""
    import uvicorn

    uvicorn.run("lickui.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
