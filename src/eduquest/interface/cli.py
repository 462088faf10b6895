"""EduQuest CLI: inspect and drive the flashcard mastery tracker."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import click
import typer

from eduquest.application.config import AppConfig, resolve_config
from eduquest.domain.exceptions import CorruptMasteryTableError, DeckFormatError, EduquestError
from eduquest.domain.srs.models import CardMastery

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="eduquest: spaced-repetition mastery tracker for EduQuest flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage eduquest configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def humanize_error(error: Exception) -> str:
    """Turn an eduquest exception into a one-line message for the terminal."""
    if isinstance(error, CorruptMasteryTableError):
        return (
            f"{error}. Fix or delete the file, or set "
            "EDUQUEST_RECOVER_CORRUPT_STATE=1 to start from an empty table."
        )
    if isinstance(error, DeckFormatError):
        return f"Invalid deck: {error}"
    return str(error)


def _resolve(ctx: typer.Context) -> AppConfig:
    obj = ctx.obj or {}
    return resolve_config(
        {
            "data_dir": obj.get("data_dir"),
            "storage_backend": obj.get("storage_backend"),
        }
    )


def _store(ctx: typer.Context):
    from eduquest.application.factory import get_mastery_store

    return get_mastery_store(_resolve(ctx))


def _fail(error: EduquestError):
    typer.secho(humanize_error(error), fg="red", err=True)
    raise typer.Exit(1)


def _echo_mastery(mastery: CardMastery, json_output: bool):
    from eduquest.application.srs.serialization import mastery_to_dict

    if json_output:
        typer.echo(json.dumps(mastery_to_dict(mastery), indent=2))
        return

    if mastery.level == 0 and mastery.next_review == 0:
        due = "never reviewed"
    else:
        from datetime import datetime

        due = datetime.fromtimestamp(mastery.next_review / 1000).strftime("%Y-%m-%d %H:%M")
    typer.echo(
        f"{mastery.id}  level {mastery.level}/5  interval {mastery.last_interval}d  due {due}"
    )


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding the mastery table.")
    ] = None,
    storage_backend: Annotated[
        str | None, typer.Option("--backend", help="Storage backend: file, memory.")
    ] = None,
):
    """Global settings for eduquest."""
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["storage_backend"] = storage_backend
    if verbose:
        logging.getLogger("eduquest").setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command("card-id")
def card_id_cmd(
    text: Annotated[str, typer.Argument(help="Front-text of the flashcard.")],
):
    """Print the storage identity of a flashcard."""
    from eduquest.application.card_identity import card_id

    typer.echo(card_id(text))


@app.command()
def show(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Front-text of the flashcard.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the current mastery of a card."""
    try:
        mastery = _store(ctx).get_card_mastery(front)
    except EduquestError as e:
        _fail(e)
    _echo_mastery(mastery, json_output)


@app.command()
def review(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Front-text of the flashcard.")],
    mastered: Annotated[
        bool,
        typer.Option("--mastered/--skipped", help="Outcome of the review."),
    ] = True,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """[bold green]Record[/bold green] a review outcome for a card."""
    try:
        mastery = _store(ctx).record_review(front, mastered)
    except EduquestError as e:
        _fail(e)
    _echo_mastery(mastery, json_output)


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    due: Annotated[bool, typer.Option("--due", help="Only cards due now.")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List every stored mastery record."""
    from eduquest.application.srs.serialization import mastery_to_dict

    store = _store(ctx)
    try:
        records = store.due_cards() if due else list(store.get_all_mastery().values())
    except EduquestError as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps([mastery_to_dict(m) for m in records], indent=2))
        return

    if not records:
        typer.secho("No cards found.", fg="yellow")
        return
    for mastery in records:
        _echo_mastery(mastery, json_output=False)


@app.command("queue")
def queue(
    ctx: typer.Context,
    deck: Annotated[Path, typer.Argument(help="Deck file (.json, .yaml, .yml).")],
    limit: Annotated[int | None, typer.Option(help="Maximum due cards.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show which cards of a deck are due, weakest first."""
    from eduquest.application.queue_builder import build_review_queue
    from eduquest.infrastructure.deck_loader import load_deck

    try:
        cards = load_deck(deck)
        result = build_review_queue(_store(ctx), cards, limit=limit)
    except EduquestError as e:
        _fail(e)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "due": [
                        {"front": q.card.front, "id": q.mastery.id, "level": q.mastery.level}
                        for q in result.due
                    ],
                    "upcoming": [
                        {
                            "front": q.card.front,
                            "id": q.mastery.id,
                            "level": q.mastery.level,
                            "nextReview": q.mastery.next_review,
                        }
                        for q in result.upcoming
                    ],
                    "duplicates": [c.front for c in result.duplicates],
                    "truncated": result.truncated,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Due: {len(result.due)}  Upcoming: {len(result.upcoming)}")
    for q in result.due:
        typer.echo(f"  [L{q.mastery.level}] {q.card.front}")
    if result.truncated:
        typer.secho(f"{result.truncated} more due card(s) over the limit", fg="yellow")
    if result.duplicates:
        typer.secho(f"Duplicate fronts skipped: {len(result.duplicates)}", fg="yellow")


@app.command()
def study(
    ctx: typer.Context,
    deck: Annotated[Path, typer.Argument(help="Deck file (.json, .yaml, .yml).")],
    all_cards: Annotated[
        bool, typer.Option("--all", help="Study every card, not just due ones.")
    ] = False,
    limit: Annotated[int | None, typer.Option(help="Maximum due cards.")] = None,
):
    """Run an interactive review session over a deck.

    Answer [bold]y[/bold] when you recalled the card, [bold]n[/bold] to skip it
    (it comes back later in the session), [bold]q[/bold] to stop.
    """
    from eduquest.application.queue_builder import build_review_queue
    from eduquest.application.review_session import ReviewSession
    from eduquest.infrastructure.deck_loader import load_deck

    store = _store(ctx)
    try:
        cards = load_deck(deck)
        if not all_cards:
            result = build_review_queue(store, cards, limit=limit)
            cards = [q.card for q in result.due]
    except EduquestError as e:
        _fail(e)

    if not cards:
        typer.secho("Nothing due. Come back later.", fg="green")
        return

    session = ReviewSession(store, cards)
    while not session.finished:
        card = session.current
        badge = session.mastery()
        typer.echo(f"\n[{session.remaining} left | L{badge.level}] {card.front}")
        typer.prompt("Press Enter to flip", default="", show_default=False)
        typer.echo(f"  {card.back}")
        if card.hint:
            typer.echo(f"  Hint: {card.hint}")

        answer = typer.prompt(
            "Mastered?",
            default="y",
            type=click.Choice(["y", "n", "q"], case_sensitive=False),
        ).lower()
        if answer == "q":
            break
        updated = session.answer(answer == "y")
        typer.echo(f"  -> level {updated.level}, next in {updated.last_interval}d")

    typer.secho(
        f"\nSession done: {session.mastered_count} mastered, {session.skipped_count} skipped.",
        fg="green",
    )


@app.command()
def reset(
    ctx: typer.Context,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation.")
    ] = False,
):
    """Delete all mastery progress."""
    if not force:
        typer.confirm("Delete all mastery progress?", abort=True)
    _store(ctx).clear()
    typer.secho("Mastery table cleared.", fg="green")


@app.command()
def serve(
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API used by the web client."""
    import uvicorn

    config = resolve_config({"host": host, "port": port})
    uvicorn.run("eduquest.server:app", host=config.host, port=config.port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
