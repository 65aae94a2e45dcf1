"""Edit commands: load a page into a session, change it, save the preview."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from lickui.assistant.chat import send_message
from lickui.assistant.conversation import QUICK_PROMPTS, quick_prompt
from lickui.errors import InvalidInputError
from lickui.mutation.extraction import extract_json_object
from lickui.mutation.models import ApplicationReport, InstructionBatch
from lickui.session import PreviewSession

edit_app = typer.Typer(help="Load a page and change it by instruction.", no_args_is_help=True)


def _load(url: str, select: Optional[str]) -> PreviewSession:
    session = PreviewSession()
    result = asyncio.run(session.load(url))
    if result is None or not result.page.success:
        error = result.page.error if result is not None else "load superseded"
        typer.echo(f"❌ Could not load {url}: {error}")
        raise typer.Exit(code=1)

    typer.echo(f"🌐 Loaded: {result.page.title}")
    if select:
        node = session.find(select)
        if node is None:
            typer.echo(f"❌ No element matches {select!r}")
            raise typer.Exit(code=1)
        typer.echo(f"📍 Selected: {session.select(node)}")
    return session


def _print_report(report: ApplicationReport) -> None:
    for outcome in report.outcomes:
        mark = "✅" if outcome.applied else "⚠️"
        detail = f"{outcome.matched} element(s)" if outcome.applied else outcome.error
        via = " (selected element)" if outcome.used_selection else ""
        typer.echo(f" {mark} {outcome.kind} {outcome.selector!r}: {detail}{via}")


def _write(session: PreviewSession, out: Optional[Path]) -> None:
    if out is not None:
        out.write_text(session.render(), encoding="utf-8")
        typer.echo(f"💾 Wrote preview to {out}")


@edit_app.command("apply")
def edit_apply(
    url: str = typer.Argument(..., help="Page to load."),
    instructions: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="JSON instructions (or a reply containing them)."
    ),
    select: Optional[str] = typer.Option(None, "--select", help="Selector of the element to select first."),
    out: Optional[Path] = typer.Option(None, "--out", help="Where to write the rendered preview."),
) -> None:
    """Apply an instruction file to a freshly loaded page."""
    session = _load(url, select)

    payload = extract_json_object(instructions.read_text(encoding="utf-8"))
    if payload is None:
        typer.echo("❌ No JSON object found in the instruction file.")
        raise typer.Exit(code=1)

    report = session.apply(InstructionBatch.from_payload(payload))
    _print_report(report)
    if report.message:
        typer.echo(f"✓ {report.message}")
    _write(session, out)


@edit_app.command("chat")
def edit_chat(
    url: str = typer.Argument(..., help="Page to load."),
    message: Optional[str] = typer.Argument(None, help="Describe the change in plain words."),
    quick: Optional[str] = typer.Option(
        None, "--quick", help=f"Use a canned prompt instead: {', '.join(QUICK_PROMPTS)}."
    ),
    select: Optional[str] = typer.Option(None, "--select", help="Selector of the element to select first."),
    out: Optional[Path] = typer.Option(None, "--out", help="Where to write the rendered preview."),
) -> None:
    """Ask the chat model to change a freshly loaded page."""
    if quick:
        try:
            message = quick_prompt(quick)
        except InvalidInputError as exc:
            typer.echo(f"❌ {exc}")
            raise typer.Exit(code=1)
    if not message:
        typer.echo("❌ Give a MESSAGE or --quick.")
        raise typer.Exit(code=1)

    session = _load(url, select)

    reply = asyncio.run(send_message(session, message))
    typer.echo(reply.content)
    if reply.report is not None:
        _print_report(reply.report)
    _write(session, out)
    if reply.type == "error":
        raise typer.Exit(code=1)
