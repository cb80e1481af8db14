"""CLI interface for Apollyo word discovery."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import DEFAULT_CONFIG_PATH, Settings
from .core.orchestrator import SearchOrchestrator
from .errors import ApollyoError
from .models import WordResult
from .scoring.heuristics import score_word

console = Console()


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )
    # Quiet noisy HTTP libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def fail(message: str):
    console.print(f"[red]{message}[/red]")
    raise SystemExit(1)


def results_table(results: List[WordResult], title: str, limit: int) -> Table:
    table = Table(title=title)
    table.add_column("Word", style="cyan")
    table.add_column("Overall", justify="right", style="green")
    table.add_column("Rarity", justify="right")
    table.add_column("Market", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Len", justify="right")
    table.add_column("Source", style="dim")

    for r in results[:limit]:
        table.add_row(
            r.word,
            f"{r.scores.overall:.3f}",
            f"{r.scores.rarity:.2f}",
            f"{r.scores.market_potential:.2f}",
            f"{r.scores.confidence:.2f}",
            str(r.metadata.length),
            r.source,
        )
    return table


def save_json(output: str, payload: Any):
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(payload, f, indent=2)
    console.print(f"[green]Saved to {output}[/green]")


def build_request(
    mode: Optional[str],
    min_length: int,
    max_length: int,
    starts_with: Optional[str],
    ends_with: Optional[str],
    contains: Optional[str],
    excludes: Optional[str],
    rarity_min: Optional[float],
    market_min: Optional[float],
    difficulty: Optional[str],
    max_results: Optional[int],
    depth: Optional[int],
) -> Dict[str, Any]:
    pattern = {
        'startsWith': starts_with,
        'endsWith': ends_with,
        'contains': contains,
        'excludes': excludes,
    }
    filters: Dict[str, Any] = {
        'length': {'min': min_length, 'max': max_length},
        'pattern': {k: v for k, v in pattern.items() if v},
    }
    if rarity_min is not None:
        filters['rarity'] = {'min': rarity_min, 'max': 1.0}
    if market_min is not None:
        filters['marketPotential'] = {'min': market_min}
    if difficulty:
        filters['pronunciation'] = {'difficulty': difficulty}

    request: Dict[str, Any] = {'filters': filters}
    if mode:
        request['mode'] = mode
    if max_results is not None:
        request['maxResults'] = max_results
    if depth is not None:
        request['depth'] = depth
    return request


def filter_options(f):
    """Length, pattern and hyper score options shared by ``search`` and ``both``."""
    options = [
        click.option('--min-length', default=3, help='Minimum word length'),
        click.option('--max-length', default=12, help='Maximum word length'),
        click.option('--starts-with', default=None, help='Required prefix'),
        click.option('--ends-with', default=None, help='Required suffix'),
        click.option('--contains', default=None, help='Required substring'),
        click.option('--excludes', default=None, help='Forbidden substring'),
        click.option('--rarity-min', type=float, default=None, help='Minimum rarity (hyper)'),
        click.option('--market-min', type=float, default=None, help='Minimum market potential (hyper)'),
        click.option('--difficulty', type=click.Choice(['easy', 'medium', 'hard', 'any']), default=None,
                     help='Pronunciation difficulty (hyper)'),
        click.option('--max-results', '-n', type=int, default=None, help='Maximum results (10-10000)'),
        click.option('--depth', '-d', type=int, default=None, help='Crawl depth (1-5)'),
        click.option('--openai-key', envvar='OPENAI_API_KEY', default=None, help='Key for AI filter analysis'),
        click.option('--output', '-o', default=None, help='Output file (JSON)'),
        click.option('--show', default=50, help='Rows to display'),
    ]
    for option in reversed(options):
        f = option(f)
    return f


async def _close_after(orchestrator: SearchOrchestrator, coro):
    orchestrator.start()
    try:
        return await coro
    finally:
        await orchestrator.aclose()


@click.group()
@click.version_option(version="0.1.0")
@click.option('--config', 'config_path', default=DEFAULT_CONFIG_PATH, help='Path to config YAML')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
@click.pass_context
def cli(ctx, config_path, verbose):
    """Apollyo - discover rare, brandable English-like words."""
    setup_logging(verbose)
    ctx.obj = Settings.load(config_path)


@cli.command()
@click.option('--mode', '-m', type=click.Choice(['speed', 'hyper']), default='speed', help='Search mode')
@filter_options
@click.pass_obj
def search(settings, mode, min_length, max_length, starts_with, ends_with, contains, excludes,
           rarity_min, market_min, difficulty, max_results, depth, openai_key, output, show):
    """Search for words in speed or hyper mode."""
    request = build_request(mode, min_length, max_length, starts_with, ends_with, contains, excludes,
                            rarity_min, market_min, difficulty, max_results, depth)
    orchestrator = SearchOrchestrator.from_settings(settings, openai_key=openai_key)

    try:
        with console.status(f"[bold green]Running {mode} search..."):
            results = asyncio.run(_close_after(orchestrator, orchestrator.search(request)))
    except ApollyoError as e:
        fail(str(e))

    if results:
        console.print(results_table(results, f"{mode.title()} Results", show))
        console.print(f"\n[bold green]Found {len(results)} words[/bold green]")
    else:
        console.print("[yellow]No words found. Try relaxing the filters.[/yellow]")

    if output:
        save_json(output, [r.to_dict() for r in results])


@cli.command()
@filter_options
@click.pass_obj
def both(settings, min_length, max_length, starts_with, ends_with, contains, excludes,
         rarity_min, market_min, difficulty, max_results, depth, openai_key, output, show):
    """Run both modes and merge their results."""
    request = build_request(None, min_length, max_length, starts_with, ends_with, contains, excludes,
                            rarity_min, market_min, difficulty, max_results, depth)
    orchestrator = SearchOrchestrator.from_settings(settings, openai_key=openai_key)

    try:
        with console.status("[bold green]Running speed and hyper searches..."):
            results = asyncio.run(_close_after(orchestrator, orchestrator.search_both(request)))
    except ApollyoError as e:
        fail(str(e))

    console.print(f"[green]Speed:[/green] {len(results.speed)} words")
    console.print(f"[green]Hyper:[/green] {len(results.hyper)} words")
    console.print(f"[bold]Combined:[/bold] {len(results.combined)} words\n")
    if results.combined:
        console.print(results_table(results.combined, "Combined Results", show))

    if output:
        save_json(output, results.to_dict())


@cli.command()
@click.argument('words', nargs=-1)
@click.pass_obj
def validate(settings, words):
    """Validate words without searching."""
    orchestrator = SearchOrchestrator.from_settings(settings)
    try:
        validations = orchestrator.validate_words(w.strip().lower() for w in words if w.strip())
    except ApollyoError as e:
        fail(str(e))

    table = Table(title="Validation")
    table.add_column("Word", style="cyan")
    table.add_column("Valid", justify="center")
    table.add_column("Confidence", justify="right")
    table.add_column("Rarity", justify="right")
    table.add_column("Market", justify="right")
    table.add_column("Issues", style="dim")

    for word, result in validations:
        table.add_row(
            word,
            "[green]Y[/green]" if result.is_valid else "[red]N[/red]",
            f"{result.confidence:.2f}",
            f"{result.rarity_score:.2f}",
            f"{result.market_potential:.2f}",
            "; ".join(result.issues) or "-",
        )

    console.print(table)


@cli.command()
@click.argument('word')
def score(word):
    """Score a single word."""
    result = score_word(word.strip().lower())

    console.print(f"\n[bold]Word:[/bold] {result.word}")
    console.print(f"[bold green]Market Potential:[/bold green] {result.market_potential:.3f}")
    console.print(f"\n[bold]Breakdown:[/bold]")
    console.print(f"  Rarity:                 {result.rarity:.3f}")
    console.print(f"  Pronounceability:       {result.pronounceability:.3f}")
    console.print(f"  Memorability:           {result.memorability:.3f}")
    console.print(f"  Professionalism:        {result.professionalism:.3f}")
    console.print(f"  Linguistic flexibility: {result.linguistic_flexibility:.3f}")


@cli.command()
@click.option('--select', '-s', multiple=True, help='Word you liked')
@click.option('--reject', '-r', multiple=True, help='Word to never show again')
@click.option('--blacklist', '-b', multiple=True, help='Regex of words to never show again')
@click.pass_obj
def learn(settings, select, reject, blacklist):
    """Teach later searches from your picks."""
    if not (select or reject or blacklist):
        fail("Nothing to learn. Use --select, --reject or --blacklist.")

    orchestrator = SearchOrchestrator.from_settings(settings)
    try:
        orchestrator.learn(selected=select, rejected=reject, blacklist=blacklist)
    except ApollyoError as e:
        fail(str(e))

    state = orchestrator.session.learning
    console.print(f"[green]Preferred patterns:[/green] {len(state.preferred_patterns)}")
    console.print(f"[green]Rejected words:[/green] {len(state.rejected_words)}")
    console.print(f"[green]Blacklist patterns:[/green] {len(state.blacklist)}")


@cli.command()
@click.option('--reset', is_flag=True, help='Start a fresh session')
@click.pass_obj
def session(settings, reset):
    """Show session statistics."""
    orchestrator = SearchOrchestrator.from_settings(settings)

    if reset:
        orchestrator.reset_session()
        console.print("[green]Session reset.[/green]")

    stats = orchestrator.session_stats()
    console.print("\n[bold]Session Statistics:[/bold]")
    console.print(f"  Session: {stats['sessionId']}")
    console.print(f"  Age: {stats['duration'] / 60:.1f} min")
    console.print(f"  Searches: {stats['totalSearches']}")
    console.print(f"  Unique words returned: {stats['uniqueWords']}")
    console.print(f"  Sources used: {stats['sourcesUsed']}")

    table = Table(title="Strategies")
    table.add_column("Strategy", style="cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Success rate", justify="right", style="green")
    for s in stats['strategies']:
        table.add_row(s['name'], str(s['priority']), f"{s['successRate']:.2f}")
    console.print(table)


def main():
    cli()


if __name__ == '__main__':
    main()
