"""CLI entry point for mindvault."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.tree import Tree

from .config import load_config, DEFAULT_CONFIG
from .errors import ClusterAdjustmentError, StoreError, ThoughtValidationError
from .models import AdjustmentType, Category, validate_content

console = Console()

# Errors reported to the user as a red one-liner and a non-zero exit.
USER_ERRORS = (ThoughtValidationError, ClusterAdjustmentError, StoreError, KeyError)


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Route all log records through rich on stderr."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--ai/--no-ai", default=None, help="Override ai_mode from config")
@click.pass_context
def cli(ctx, config_path, verbose, ai):
    """mindvault - Journal your thoughts and find the patterns in them."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["ai"] = ai
    config = load_config(config_path)
    configure_logging("DEBUG" if verbose else config.get("log_level", "WARNING"))


def _get_config(ctx) -> dict:
    config = load_config(ctx.obj.get("config_path"))
    if ctx.obj.get("ai") is not None:
        config["ai_mode"] = ctx.obj["ai"]
    return config


def _get_journal(ctx):
    from .journal import Journal
    from .storage import get_thought_store

    config = _get_config(ctx)
    return Journal(get_thought_store(config), config)


def _fail(ctx, error: Exception):
    message = f"Not found: {error.args[0]}" if isinstance(error, KeyError) else str(error)
    console.print(f"[red]{message}[/]")
    ctx.exit(1)


def _preview(text: str, width: int = 70) -> str:
    text = text.replace("\n", " ")
    return text if len(text) <= width else text[: width - 3] + "..."


def _thought_table(title: str, thoughts) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Category", style="cyan")
    table.add_column("Created", style="green")
    table.add_column("Content", max_width=70)
    for t in thoughts:
        table.add_row(t.id, t.category.value, t.created_at.strftime("%Y-%m-%d %H:%M"), _preview(t.content))
    return table


@cli.command()
@click.option("--path", default=None, help="Custom mindvault directory")
@click.pass_context
def init(ctx, path):
    """Initialize a mindvault directory and configuration."""
    import yaml

    if path:
        base = Path(path).expanduser().resolve()
    else:
        base = Path("~/.mindvault").expanduser()

    console.print(f"[bold green]Initializing mindvault at {base}[/]")
    base.mkdir(parents=True, exist_ok=True)

    config_file = base / "config.yaml"
    if not config_file.exists():
        cfg = dict(DEFAULT_CONFIG)
        cfg["store_path"] = str(base / "thoughts.json")
        header = (
            "# Claude API key for AI mode (or set ANTHROPIC_API_KEY env var)\n"
            "# claude_api_key: sk-ant-your-key-here\n\n"
        )
        config_file.write_text(header + yaml.dump(cfg, default_flow_style=False, sort_keys=False))
        console.print(f"  Created config: {config_file}")

    console.print("[bold green]✓ mindvault initialized![/]")
    console.print(f"  Run: mindvault --config {config_file} add \"your first thought\"")


@cli.command()
@click.argument("content")
@click.pass_context
def add(ctx, content):
    """Add a thought; it is categorized automatically."""
    from .nlp.sentiment import analyze_sentiment

    journal = _get_journal(ctx)
    try:
        thought = journal.add_thought(content)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return

    sentiment = analyze_sentiment(thought.content)
    console.print(f"[green]✓ Added {thought.id}[/] [cyan]({thought.category.value})[/]")
    console.print(f"  Sentiment: {sentiment.polarity} ({sentiment.score:+.2f})")


@cli.command()
@click.argument("thought_id")
@click.argument("content")
@click.pass_context
def edit(ctx, thought_id, content):
    """Replace the content of a thought."""
    journal = _get_journal(ctx)
    try:
        thought = journal.update_thought(thought_id, content)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return
    console.print(f"[green]✓ Updated {thought.id}[/]")


@cli.command()
@click.argument("thought_id")
@click.pass_context
def delete(ctx, thought_id):
    """Delete a thought."""
    journal = _get_journal(ctx)
    try:
        journal.delete_thought(thought_id)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return
    console.print(f"[green]✓ Deleted {thought_id}[/]")


@cli.command("list")
@click.option("--category", type=click.Choice([c.value for c in Category]), default=None)
@click.option("--limit", "-n", default=20, help="Maximum number of thoughts")
@click.pass_context
def list_(ctx, category, limit):
    """List thoughts, newest first."""
    journal = _get_journal(ctx)
    try:
        thoughts = journal.list_thoughts(Category(category) if category else None)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return

    if not thoughts:
        console.print("[yellow]No thoughts yet. Add one with 'mindvault add'.[/]")
        return
    console.print(_thought_table(f"Thoughts ({len(thoughts)})", thoughts[:limit]))


@cli.command()
@click.argument("text")
@click.pass_context
def analyze(ctx, text):
    """Categorize and score the sentiment of TEXT without saving it."""
    from .nlp.categorizer import categorize
    from .nlp.sentiment import analyze_sentiment

    try:
        text = validate_content(text)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return

    result = categorize(text)
    sentiment = analyze_sentiment(text)

    console.print(f"[bold]Category:[/] [cyan]{result.category.value}[/] (confidence {result.confidence:.2f})")
    if result.subcategories:
        console.print(f"  Also: {', '.join(c.value for c in result.subcategories)}")
    console.print(f"  [dim]{result.reasoning}[/]")
    console.print(
        f"[bold]Sentiment:[/] {sentiment.polarity} (score {sentiment.score:+.2f}, "
        f"magnitude {sentiment.magnitude:.2f}, confidence {sentiment.confidence:.2f})"
    )
    for match in sentiment.emotions:
        console.print(f"  → {match.emotion.value} {match.intensity:.2f}: {', '.join(match.context)}")


@cli.command()
@click.argument("query")
@click.option("--n", "-n", default=10, help="Number of results")
@click.pass_context
def search(ctx, query, n):
    """Fuzzy search over thoughts."""
    journal = _get_journal(ctx)
    try:
        results = journal.search(query)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return

    if not results:
        console.print("[yellow]No matching thoughts.[/]")
        return
    console.print(_thought_table(f"Search: '{query}'", results[:n]))


@cli.command()
@click.argument("thought_id")
@click.pass_context
def related(ctx, thought_id):
    """Show thoughts most similar to THOUGHT_ID."""
    journal = _get_journal(ctx)
    try:
        results = journal.related(thought_id)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return

    if not results:
        console.print("[yellow]No related thoughts.[/]")
        return
    table = _thought_table(f"Related to {thought_id}", results)
    console.print(table)


def _print_hierarchy(hierarchy) -> None:
    tree = Tree("[bold]Clusters[/]")
    for root in hierarchy.root_clusters:
        branch = tree.add(f"[cyan]{root.name}[/] [dim]{root.id} ({len(root.thought_ids)} thoughts)[/]")
        if root.description:
            branch.add(f"[dim]{root.description}[/]")
        for child in hierarchy.children(root.id):
            branch.add(f"[magenta]{child.name}[/] [dim]{child.id} ({len(child.thought_ids)} thoughts)[/]")
    console.print(tree)


@cli.command()
@click.option("--show", is_flag=True, help="Show the saved clusters without recomputing")
@click.pass_context
def cluster(ctx, show):
    """Group related thoughts into clusters."""
    journal = _get_journal(ctx)
    try:
        if show:
            hierarchy = journal.clusters()
        else:
            console.print("[blue]Clustering thoughts...[/]")
            hierarchy = journal.refresh_clusters()
    except USER_ERRORS as e:
        _fail(ctx, e)
        return

    if not hierarchy.all_clusters:
        console.print("[yellow]No clusters found. Add more related thoughts.[/]")
        return

    if not show:
        strategy = journal.last_strategy or "unknown"
        console.print(f"[green]✓ Found {len(hierarchy.all_clusters)} cluster(s)[/] [dim](strategy: {strategy})[/]")
    _print_hierarchy(hierarchy)


@cli.command()
@click.argument("adjustment", type=click.Choice([t.value for t in AdjustmentType]))
@click.argument("cluster_id")
@click.option("--name", default=None, help="New or child cluster name")
@click.option("--thought", "thought_ids", multiple=True, help="Thought id (repeatable)")
@click.option("--source", "source_ids", multiple=True, help="Cluster id to merge in (repeatable)")
@click.option("--parent", default=None, help="New parent cluster id; omit to make a root")
@click.pass_context
def adjust(ctx, adjustment, cluster_id, name, thought_ids, source_ids, parent):
    """Manually adjust a cluster."""
    kind = AdjustmentType(adjustment)
    if kind is AdjustmentType.RENAME_CLUSTER:
        data = {"new_name": name}
    elif kind in (AdjustmentType.ADD_THOUGHT, AdjustmentType.REMOVE_THOUGHT):
        data = {"thought_id": thought_ids[0]} if thought_ids else {}
    elif kind is AdjustmentType.MERGE_CLUSTERS:
        data = {"source_cluster_ids": list(source_ids)}
    elif kind is AdjustmentType.MOVE_TO_PARENT:
        data = {"parent_id": parent}
    else:
        data = {"thought_ids": list(thought_ids), "name": name}

    journal = _get_journal(ctx)
    try:
        hierarchy = journal.adjust_cluster(kind, cluster_id, data)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return
    console.print(f"[green]✓ Applied {kind.value} to {cluster_id}[/]")
    _print_hierarchy(hierarchy)


@cli.command()
@click.pass_context
def recap(ctx):
    """Summarize the last week of thoughts."""
    journal = _get_journal(ctx)
    try:
        result = journal.weekly_recap()
    except USER_ERRORS as e:
        _fail(ctx, e)
        return

    if result is None:
        console.print("[yellow]No thoughts in the recap window.[/]")
        return

    console.print(f"\n[bold]Recap since {result.week_starting:%Y-%m-%d}[/]")
    console.print(f"  Thoughts: {result.thought_count}")
    console.print(f"  Top themes: {', '.join(result.top_themes)}")
    if result.average_sentiment is not None:
        console.print(f"  Average sentiment: {result.average_sentiment:+.2f}")
    console.print("\n  [bold]Categories:[/]")
    for category, count in sorted(result.category_breakdown.items(), key=lambda kv: -kv[1]):
        console.print(f"    {category.value}: {count}")
    for insight in result.emotional_insights:
        console.print(f"  [cyan]• {insight}[/]")
    if result.suggested_revisit:
        console.print(f"\n  [bold]Worth revisiting:[/] {_preview(result.suggested_revisit.content)}")


@cli.command()
@click.option("--range", "time_range", type=click.Choice(["week", "month", "all"]), default="week")
@click.pass_context
def stats(ctx, time_range):
    """Show thought statistics."""
    from .recap.analytics import thought_analytics

    journal = _get_journal(ctx)
    try:
        result = thought_analytics(
            journal.list_thoughts(),
            time_range=time_range,
            clusters=list(journal.clusters().all_clusters.values()),
        )
    except USER_ERRORS as e:
        _fail(ctx, e)
        return

    if result is None:
        console.print(f"[yellow]No thoughts in range '{time_range}'.[/]")
        return

    console.print(f"\n[bold]📊 Thought Statistics ({time_range})[/]")
    console.print(f"  Total thoughts: {result.total_thoughts}")
    console.print(f"  Average sentiment: {result.average_sentiment:+.2f}")
    console.print(f"  Average intensity: {result.average_magnitude:.2f}")
    console.print("\n  [bold]Categories:[/]")
    for category, count in sorted(result.category_distribution.items(), key=lambda kv: -kv[1]):
        console.print(f"    {category.value}: {count}")
    if result.emotion_distribution:
        console.print("\n  [bold]Emotions:[/]")
        for emotion, total in sorted(result.emotion_distribution.items(), key=lambda kv: -kv[1]):
            console.print(f"    {emotion}: {total:.2f}")
    busiest = max(range(24), key=lambda h: result.hour_pattern[h])
    console.print(f"\n  Most active hour: {busiest:02d}:00")
    for insight in result.insights:
        console.print(f"  [cyan]• {insight}[/]")


@cli.command("export")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
def export_(ctx, path):
    """Export all thoughts and clusters to a JSON file."""
    journal = _get_journal(ctx)
    try:
        journal.export_data(path)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return
    console.print(f"[green]✓ Exported to {path}[/]")


@cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_(ctx, path):
    """Import thoughts from an export file."""
    journal = _get_journal(ctx)
    try:
        count = journal.import_data(path)
    except USER_ERRORS as e:
        _fail(ctx, e)
        return
    console.print(f"[green]✓ Imported {count} thought(s)[/]")


@cli.command()
@click.confirmation_option(prompt="Delete all thoughts and clusters?")
@click.pass_context
def reset(ctx):
    """Delete every thought, cluster and adjustment."""
    journal = _get_journal(ctx)
    try:
        journal.reset()
    except USER_ERRORS as e:
        _fail(ctx, e)
        return
    console.print("[green]✓ Journal reset[/]")


if __name__ == "__main__":
    cli()
