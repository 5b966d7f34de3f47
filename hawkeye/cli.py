"""Typer CLI — score targets, manage history, watchlist, key and preferences."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.table import Table

from hawkeye import __version__
from hawkeye.config import Preferences
from hawkeye.errors import FetchFailure, MissingCredential

if TYPE_CHECKING:
    from hawkeye.core.engine import MugEngine

app = typer.Typer(
    name="hawkeye",
    help="HawkEye — mug likelihood for Torn targets",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool = False, config_level: str | None = None) -> None:
    if verbose:
        level = logging.DEBUG
    elif config_level:
        level = getattr(logging, config_level.upper(), logging.INFO)
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


async def _open_engine(config: str | None) -> MugEngine:
    from hawkeye.config import Settings
    from hawkeye.core.engine import MugEngine

    return await MugEngine.open(Settings.load(config))


def _run(coro: Any) -> Any:
    """Run a coroutine, turning user-visible errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except MissingCredential as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1) from None
    except FetchFailure as e:
        console.print(f"[red]Refresh failed:[/] {e}")
        raise typer.Exit(1) from None


def _parse_pref(raw: str) -> tuple[str, Any]:
    if "=" not in raw:
        raise typer.BadParameter(f"expected key=value, got {raw!r}")
    key, value = raw.split("=", 1)
    key, value = key.strip(), value.strip()
    if key not in Preferences.model_fields:
        raise typer.BadParameter(
            f"unknown preference {key!r} (one of: {', '.join(Preferences.model_fields)})"
        )
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return key, True
    if lowered in ("false", "no", "off"):
        return key, False
    return key, value


@app.command()
def score(
    targets: list[str] = typer.Argument(help="Target player ids"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to config YAML"),
    verbose: bool = typer.Option(False, "-v", "--verbose"),
):
    """Score one or more targets."""
    _setup_logging(verbose)

    async def _score():
        async with await _open_engine(config) as engine:
            if not engine.session.prefs.enabled:
                return None
            return await engine.assess_many(targets)

    results = _run(_score())
    if results is None:
        console.print("[yellow]HawkEye is disabled (prefs --set enabled=true)[/]")
        return

    table = Table(title="Mug Likelihood")
    table.add_column("Target", style="cyan")
    table.add_column("Band")
    table.add_column("Score", justify="right")
    table.add_column("Personal", justify="right")
    table.add_column("Top signals", style="dim")

    for tid in targets:
        a = results.get(str(tid))
        if a is None:
            table.add_row(str(tid), "[dim]n/a[/]", "-", "-", "")
            continue
        color = a.category.color
        signals = ", ".join(f"{k} {v:+.2f}" for k, v in a.top_contributions())
        table.add_row(
            a.target_id,
            f"[{color}]{a.category.label}[/{color}]",
            str(a.score),
            f"{a.features.personal_sample_count} mugs",
            signals,
        )
    console.print(table)


@app.command()
def refresh(
    force: bool = typer.Option(False, "--force", "-f", help="Ignore the cache TTL"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to config YAML"),
    verbose: bool = typer.Option(False, "-v", "--verbose"),
):
    """Refresh your attack log from the Torn API."""
    _setup_logging(verbose)

    async def _refresh():
        async with await _open_engine(config) as engine:
            before = engine.history.last_fetch
            records = await engine.refresh_history(force=force)
            return records, engine.history.last_fetch != before

    records, fetched = _run(_refresh())
    total = sum(r.money for r in records)
    if fetched:
        console.print(f"[green]Attack logs refreshed.[/] {len(records)} mugs, ${total:,} total")
    else:
        console.print(
            f"[yellow]Attack logs still fresh, not refetched.[/] {len(records)} mugs, "
            f"${total:,} total (use --force to refetch)"
        )


@app.command()
def hours(
    config: str | None = typer.Option(None, "--config", "-c", help="Path to config YAML"),
    target: str | None = typer.Option(None, "--target", "-t", help="Show one target's hours"),
):
    """Show the decay-weighted expected mug by TCT hour."""

    async def _models():
        async with await _open_engine(config) as engine:
            return await engine.build_models()

    models = _run(_models())
    if target is not None:
        personal = models.personal(target)
        if personal is None:
            console.print(f"No mugs recorded against {target}")
            return
        buckets = personal.by_hour
        title = f"Target {target} by hour (TCT)"
    else:
        buckets = models.global_hours
        title = "All mugs by hour (TCT)"

    table = Table(title=title)
    table.add_column("Hour", style="cyan", justify="right")
    table.add_column("Mugs", justify="right")
    table.add_column("Expected $", justify="right", style="green")
    for hour, bucket in enumerate(buckets):
        if bucket.count:
            table.add_row(f"{hour:02d}", str(bucket.count), f"{bucket.expected_money:,.0f}")
    console.print(table)


@app.command()
def watch(
    target: str = typer.Argument(help="Target player id"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to config YAML"),
):
    """Toggle a target on the watchlist."""

    async def _toggle():
        async with await _open_engine(config) as engine:
            return await engine.toggle_watch(target)

    watched = _run(_toggle())
    console.print(f"{target}: {'Watching' if watched else 'Not watching'}")


@app.command()
def watchlist(
    config: str | None = typer.Option(None, "--config", "-c", help="Path to config YAML"),
):
    """List watched targets."""

    async def _ids():
        async with await _open_engine(config) as engine:
            return engine.watchlist.ids

    ids = _run(_ids())
    if not ids:
        console.print("Watchlist is empty")
        return
    for tid in ids:
        console.print(f"  {tid}")


@app.command("cache-clear")
def cache_clear(
    target: str | None = typer.Argument(None, help="Only this target's signals"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to config YAML"),
):
    """Drop cached profile and market signals."""

    async def _clear():
        async with await _open_engine(config) as engine:
            return await engine.clear_signals(target)

    removed = _run(_clear())
    scope = f" for {target}" if target is not None else ""
    console.print(f"Cleared {removed} cached signal(s){scope}")


@app.command()
def key(
    api_key: str = typer.Argument(help="Your Torn API key (stored locally)"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to config YAML"),
):
    """Store your Torn API key."""

    async def _set():
        async with await _open_engine(config) as engine:
            return await engine.set_credential(api_key)

    changed = _run(_set())
    console.print("[green]Saved[/]" if changed else "Key unchanged")


@app.command()
def prefs(
    set_: list[str] = typer.Option(None, "--set", "-s", help="key=value, repeatable"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to config YAML"),
):
    """Show or change preferences."""
    changes = dict(_parse_pref(raw) for raw in set_ or [])

    async def _prefs():
        async with await _open_engine(config) as engine:
            if changes:
                return await engine.session.update_preferences(**changes)
            return engine.session.prefs

    try:
        current = _run(_prefs())
    except ValueError as e:
        console.print(f"[red]Invalid preferences:[/] {e}")
        raise typer.Exit(1) from None

    table = Table(title="Preferences")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for name, value in current.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


@app.command()
def version():
    """Show version."""
    console.print(f"HawkEye v{__version__}")


def main() -> None:
    app()
