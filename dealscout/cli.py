"""
DealScout command line - persona switching, scoring, bulk feedback and export.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional, List

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dealscout.config import settings
from dealscout.core.exceptions import DealScoutException, NoActivePersonaError
from dealscout.database import build_engine, build_session_factory, init_db
from dealscout.models.feedback import FeedbackAction, EntityType
from dealscout.schemas.scoring import Recommendation, ScoreStatus
from dealscout.services.export_service import ExportService
from dealscout.services.feedback_service import FeedbackService
from dealscout.services.persona_service import PersonaService
from dealscout.services.scoring_service import ScoringService

app = typer.Typer(name="dealscout", help="DealScout - persona-based candidate scoring")
console = Console()
logger = logging.getLogger(__name__)

_state = {"database_url": None}

RECOMMENDATION_STYLES = {
    Recommendation.STRONG_PASS: "bold green",
    Recommendation.SOFT_PASS: "green",
    Recommendation.BORDERLINE: "yellow",
    Recommendation.PASS: "red",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show service logs."),
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="Override DATABASE_URL for this invocation."
    ),
) -> None:
    """Configure logging and the database for every command."""
    _state["database_url"] = database_url or settings.DATABASE_URL
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _split(value: Optional[str]) -> List[str]:
    """Split a comma-separated option into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _run(operation):
    """Run an async operation against a fresh session and report domain errors."""
    async def runner():
        engine = build_engine(_state["database_url"] or settings.DATABASE_URL)
        try:
            await init_db(engine)
            async with build_session_factory(engine)() as session:
                return await operation(session)
        finally:
            await engine.dispose()

    try:
        return asyncio.run(runner())
    except NoActivePersonaError as exc:
        console.print(f"[yellow]{exc.message}[/yellow] Try [bold]dealscout switch <persona>[/bold].")
        raise typer.Exit(code=1) from exc
    except DealScoutException as exc:
        console.print(f"[bold red]Error:[/] {exc.message}")
        raise typer.Exit(code=1) from exc


async def _persona(session, ref: Optional[str]):
    """Resolve --persona, or fall back to the active persona."""
    persona_service = PersonaService(session)
    if ref:
        return await persona_service.resolve(ref)
    persona = await persona_service.get_active()
    if persona is None:
        raise NoActivePersonaError()
    return persona


@app.command()
def personas():
    """
    List personas. The active one is marked with an arrow.
    """
    async def op(session):
        return await PersonaService(session).list()

    items = _run(op)
    if not items:
        console.print("No personas yet. Run [bold]dealscout init-defaults[/bold] to add the starter set.")
        return

    table = Table(title="Personas")
    table.add_column("", width=2)
    table.add_column("Name", style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Threshold", justify="right")
    table.add_column("Default action")
    for persona in items:
        bulk_settings = persona.bulk_settings or {}
        table.add_row(
            "→" if persona.is_active else "",
            persona.name,
            str(persona.id)[:8],
            str(bulk_settings.get("confidence_threshold", "")),
            str(bulk_settings.get("default_action", "")),
        )
    console.print(table)


@app.command()
def switch(persona: str = typer.Argument(..., help="Persona name or ID.")):
    """
    Make a persona the active one.
    """
    async def op(session):
        persona_service = PersonaService(session)
        target = await persona_service.resolve(persona)
        return await persona_service.set_active(target.id)

    active = _run(op)
    console.print(f"✅ Active persona: [bold]{active.name}[/bold]")


@app.command("init-defaults")
def init_defaults():
    """
    Append the starter personas (Early Stage VC, Growth Stage VC, Private Equity, Investment Banker).
    """
    async def op(session):
        return await PersonaService(session).initialize_defaults()

    created = _run(op)
    console.print(f"✅ Added {len(created)} personas.")
    for persona in created:
        console.print(f"  • {persona.name}")


@app.command()
def score(
    attributes: str = typer.Argument(..., help="Comma-separated attributes, e.g. 'serial_founder,prior_exit'."),
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Persona name or ID (default: active)."),
):
    """
    Score a candidate's attributes.
    """
    async def op(session):
        scoring_service = ScoringService(session)
        if persona:
            target = await PersonaService(session).resolve(persona)
            return await scoring_service.score(target, _split(attributes))
        return await scoring_service.score_active(_split(attributes))

    result = _run(op)
    if result.status == ScoreStatus.NO_PERSONA:
        console.print("[yellow]No persona loaded.[/yellow] Try [bold]dealscout switch <persona>[/bold].")

    style = RECOMMENDATION_STYLES[result.recommendation]
    console.print(f"Score: [bold]{result.score}[/bold]/100  [{style}]{result.recommendation.value}[/{style}]")
    if result.matched:
        console.print("Matched: " + ", ".join(result.matched))


def _bulk(action: str, entity_ids: str, attributes: Optional[str], entity_type: str, persona: Optional[str]):
    ids = _split(entity_ids)

    async def op(session):
        target = await _persona(session, persona)
        recorded = await FeedbackService(session).bulk_record(
            target.id, ids, action, _split(attributes), entity_type
        )
        return target, recorded

    target, recorded = _run(op)
    icon = "👍" if action == FeedbackAction.LIKE else "👎"
    console.print(f"{icon} {action.capitalize()}d {recorded} {entity_type}(s) for [bold]{target.name}[/bold]")


@app.command("bulk-like")
def bulk_like(
    entity_ids: str = typer.Argument(..., help="Comma-separated entity IDs."),
    attributes: Optional[str] = typer.Option(None, "--attributes", "-a", help="Comma-separated attributes."),
    entity_type: str = typer.Option(EntityType.PERSON, "--type", "-t", help="person or company."),
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Persona name or ID (default: active)."),
):
    """
    Like many entities with the same attributes.
    """
    _bulk(FeedbackAction.LIKE, entity_ids, attributes, entity_type, persona)


@app.command("bulk-dislike")
def bulk_dislike(
    entity_ids: str = typer.Argument(..., help="Comma-separated entity IDs."),
    attributes: Optional[str] = typer.Option(None, "--attributes", "-a", help="Comma-separated attributes."),
    entity_type: str = typer.Option(EntityType.PERSON, "--type", "-t", help="person or company."),
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Persona name or ID (default: active)."),
):
    """
    Dislike many entities with the same attributes.
    """
    _bulk(FeedbackAction.DISLIKE, entity_ids, attributes, entity_type, persona)


@app.command()
def stats(
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Persona name or ID (default: active)."),
):
    """
    Show feedback totals for a persona.
    """
    async def op(session):
        target = await _persona(session, persona)
        return target, await FeedbackService(session).stats(target.id)

    target, result = _run(op)
    console.print(f"[bold]{target.name}[/bold]")
    console.print(f"  Total feedback: {result.total}")
    console.print(f"  Likes: {result.likes}")
    console.print(f"  Dislikes: {result.dislikes}")
    console.print(f"  Agreement with AI: {result.agreement_rate}%")


@app.command()
def weights(
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Persona name or ID (default: active)."),
    limit: int = typer.Option(settings.TOP_WEIGHTS_LIMIT, "--limit", "-n", min=1, help="How many weights to show."),
):
    """
    Show the strongest learned weights.
    """
    async def op(session):
        target = await _persona(session, persona)
        return target, await FeedbackService(session).top_weights(target.id, limit)

    target, entries = _run(op)
    if not entries:
        console.print(f"No learned weights for [bold]{target.name}[/bold] yet.")
        return

    table = Table(title=f"Learned weights: {target.name}")
    table.add_column("Attribute")
    table.add_column("Weight", justify="right")
    table.add_column("👍", justify="right")
    table.add_column("👎", justify="right")
    for entry in entries:
        color = "green" if entry.weight > 0 else "red" if entry.weight < 0 else "white"
        table.add_row(
            entry.attribute,
            f"[{color}]{entry.weight:+.2f}[/{color}]",
            str(entry.like_count),
            str(entry.dislike_count),
        )
    console.print(table)


@app.command()
def export(
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Persona name or ID (default: active)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write here instead of stdout."),
    all_personas: bool = typer.Option(False, "--all", help="Export every persona that has data."),
    dpo: bool = typer.Option(False, "--dpo", help="Write DPO preference pairs as JSON Lines."),
):
    """
    Export feedback and learned weights as training data.
    """
    async def op(session):
        export_service = ExportService(session)
        if dpo:
            persona_id = None if all_personas else (await _persona(session, persona)).id
            return await export_service.dpo_examples(persona_id)
        if all_personas:
            return await export_service.export_all()
        target = await _persona(session, persona)
        return await export_service.export(target.id)

    data = _run(op)
    if dpo:
        payload = "\n".join(example.model_dump_json() for example in data)
        summary = f"{len(data)} DPO examples"
    elif all_personas:
        payload = data.model_dump_json(indent=2)
        summary = f"{len(data.personas)} personas"
    else:
        payload = data.model_dump_json(indent=2)
        summary = f"{data.feedback_count} feedback records and {data.weights_count} weights"

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        console.print(f"✅ Exported {summary} to {output}")
    elif dpo:
        typer.echo(payload)
    else:
        console.print_json(payload)


@app.command("sync-queue")
def sync_queue():
    """
    Show entries waiting to be pushed upstream.
    """
    async def op(session):
        return await FeedbackService(session).pending_sync()

    items = _run(op)
    if not items:
        console.print("Sync queue is empty.")
        return

    table = Table(title="Pending sync")
    table.add_column("Entity")
    table.add_column("Type")
    table.add_column("Action")
    table.add_column("Attempts", justify="right")
    table.add_column("Last error", style="dim")
    for item in items:
        table.add_row(item.entity_id, item.entity_type, item.action, str(item.attempts), item.last_error or "")
    console.print(table)


if __name__ == "__main__":
    app()
