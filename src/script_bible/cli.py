"""Command-line interface for Script Bible."""

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from script_bible import __version__

console = Console()


def _load(path: str) -> str:
    from script_bible.ingest.loader import load_manuscript

    return load_manuscript(Path(path))


def _run_analysis(text: str, mode: str, relationships: str | None):
    """Run one analysis and return the session holding its result."""
    from script_bible.errors import ScriptBibleError
    from script_bible.extract.extractor import LocalExtractor
    from script_bible.llm import LLMClient
    from script_bible.session import AnalysisSession
    from script_bible.smart import SmartExtractor

    def report(message: str) -> None:
        console.print(f"[dim]{escape(message)}[/dim]")

    smart = None
    if mode == "smart":
        smart = SmartExtractor(LLMClient(progress_callback=report), progress_callback=report)

    session = AnalysisSession(
        text,
        smart_extractor=smart,
        local_extractor=LocalExtractor(relationship_policy=relationships, progress_callback=report),
    )

    try:
        with console.status(f"Analyzing ({mode})..."):
            session.analyze(mode)
    except ScriptBibleError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise SystemExit(1)

    return session


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Script Bible - extract characters, scenes, props and lighting from scripts."""
    pass


@main.command()
def status() -> None:
    """Show configuration and LLM backend availability."""
    from script_bible.config import get_settings
    from script_bible.llm import LLMClient

    settings = get_settings()
    console.print("[bold]Script Bible Status[/bold]\n")
    console.print(f"LLM provider: {settings.llm_provider}")

    client = LLMClient()
    console.print(f"Model: {client.model}")
    if client.is_available:
        console.print("[green]✓[/green] LLM backend reachable")
    else:
        console.print("[red]✗[/red] LLM backend not reachable (smart mode unavailable)")

    console.print(f"Relationship policy: {settings.relationship_policy}")
    console.print(f"Exports directory: {settings.exports_dir}")


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--mode", "-m", type=click.Choice(["local", "smart"]), default="local", help="Extraction path")
@click.option("--output", "-o", type=click.Path(), help="Write the result as JSON to this file")
@click.option(
    "--relationships",
    type=click.Choice(["first_pair", "scene_cooccurrence"]),
    default=None,
    help="Relationship inference policy (local mode)",
)
def analyze(path: str, mode: str, output: str | None, relationships: str | None) -> None:
    """Analyze a manuscript and print the setting bible."""
    from script_bible.export import to_json
    from script_bible.extract.resolver import PLACEHOLDER_ID

    text = _load(path)
    console.print(f"[bold]Analyzing:[/bold] {escape(Path(path).name)}")
    console.print(f"[dim]{len(text):,} characters[/dim]\n")

    session = _run_analysis(text, mode, relationships)
    result = session.result

    console.print(f"[bold]Style:[/bold] {escape(result.style)}")
    if mode == "local":
        stats = session.local_extractor.last_stats
        breakdown = ", ".join(f"{kind}: {count}" for kind, count in stats.lines_by_kind.items())
        console.print(f"[dim]{stats.total_lines} lines ({breakdown})[/dim]")
    if any(c.id == PLACEHOLDER_ID for c in result.characters):
        console.print("[yellow]No character markup found (expected 角色：名字 or 名字：台词 lines)[/yellow]")
    console.print()

    table = Table(title="Characters")
    table.add_column("Name", style="cyan")
    table.add_column("Role")
    table.add_column("Category")
    table.add_column("Visual states")
    for c in result.characters:
        table.add_row(escape(c.name), c.role.value, c.category.value, escape(", ".join(c.visual_states)))
    console.print(table)

    table = Table(title="Scenes")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Time")
    table.add_column("Visual states")
    for s in result.scenes:
        table.add_row(escape(s.name), s.type.value, escape(s.time), escape(", ".join(s.visual_states)))
    console.print(table)

    console.print(f"Props: {len(result.props)}  Lighting: {len(result.lighting)}  Skills: {len(result.skills)}")
    for rel in result.relationships:
        console.print(f"  {escape(rel.source)} -[{escape(rel.type)}]-> {escape(rel.target)}")

    if output:
        Path(output).write_text(to_json(result), encoding="utf-8")
        console.print(f"\n[green]✓[/green] Saved to {output}")


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("quote")
@click.option("--context", "-c", default=40, help="Characters of context around the match")
def locate(path: str, quote: str, context: int) -> None:
    """Find where QUOTE appears in a manuscript."""
    from script_bible.anchor.locator import QuoteLocator

    text = _load(path)
    span = QuoteLocator().locate(quote, text)

    if span is None:
        console.print("[yellow]Quote not found[/yellow]")
        return

    console.print(f"[green]✓[/green] [{span.start}, {span.end}) via {span.strategy} match")
    before = text[max(0, span.start - context):span.start]
    after = text[span.end:span.end + context]
    console.print(f"{escape(before)}[bold black on yellow]{escape(span.text(text))}[/]{escape(after)}")


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--format", "-f", "formats",
    type=click.Choice(["json", "markdown", "text", "csv"]),
    multiple=True,
    help="Formats to write (default: all)",
)
@click.option("--out", "-o", "out_dir", type=click.Path(), help="Output directory")
@click.option("--mode", "-m", type=click.Choice(["local", "smart"]), default="local")
def export(path: str, formats: tuple[str, ...], out_dir: str | None, mode: str) -> None:
    """Analyze a manuscript and write report files."""
    from script_bible.config import get_settings
    from script_bible.export import FORMATS, write_exports

    text = _load(path)
    result = _run_analysis(text, mode, None).result

    directory = Path(out_dir) if out_dir else get_settings().exports_dir
    written = write_exports(result, directory, formats or FORMATS)
    for file_path in written:
        console.print(f"[green]✓[/green] {file_path}")


if __name__ == "__main__":
    main()
