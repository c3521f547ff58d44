"""Console and HTML rendering for WTK results."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .core.analyzer import CostProjection, Recommendation, WorkspaceAnalysis
from .core.optimizer import FileOutcome, OutcomeStatus
from .core.pricing import PricingCatalog, PricingTier
from .core.rewriter import CompressionResult
from .utils.patterns import potential_indicator
from .utils.tokenizer import savings_percent

TEMPLATES_DIR = Path(__file__).resolve().parent / "data"
TIER_COLORS = {
    PricingTier.FREE: "green",
    PricingTier.BUDGET: "yellow",
    PricingTier.STANDARD: "dark_orange",
    PricingTier.PREMIUM: "red",
}


def format_cost(value: float | None) -> str:
    """Dollar amount, or "unknown" when a model could not be priced."""
    if value is None:
        return "unknown"
    return f"${value:,.2f}"


def savings_color(percent: int) -> str:
    return "green" if percent >= 50 else ("yellow" if percent >= 25 else "white")


def bar(value: float, maximum: float, width: int = 20) -> str:
    """Block bar of value relative to maximum."""
    ratio = min(value / maximum, 1) if maximum > 0 else 0
    filled = round(width * max(ratio, 0))
    return "█" * filled + "░" * (width - filled)


def show_analysis(console: Console, analysis: WorkspaceAnalysis, monthly: float | None) -> None:
    """Token breakdown per file plus the top recommendations."""
    console.print(Panel("[bold cyan]Token Usage Analysis[/bold cyan]", expand=False))

    if not analysis.files:
        console.print("[yellow]No workspace files found[/yellow]")
    else:
        table = Table(show_header=True, header_style="bold")
        table.add_column("File")
        table.add_column("Tokens", justify="right")
        table.add_column("Share")
        table.add_column("Compressible", justify="right")

        for filename, stats in sorted(analysis.files.items(), key=lambda x: x[1].tokens, reverse=True):
            color = potential_indicator(stats.compression_potential)
            table.add_row(
                filename,
                f"{stats.tokens:,}",
                bar(stats.tokens, analysis.total_tokens),
                f"[{color}]{stats.compression_potential}%[/{color}]",
            )
        console.print(table)

    for filename, reason in analysis.skipped.items():
        console.print(f"[yellow]Could not read {filename}: {escape(reason)}[/yellow]")

    console.print(f"\n[bold]System prompt total:[/bold] {analysis.system_prompt_size:,} tokens")
    console.print(f"[bold]Monthly cost estimate:[/bold] {format_cost(monthly)}")

    show_recommendations(console, analysis.recommendations[:5])


def show_recommendations(console: Console, recommendations: list[Recommendation]) -> None:
    if not recommendations:
        return

    console.print("\n[bold]Recommendations[/bold]")
    for i, rec in enumerate(recommendations, 1):
        color = "red" if rec.priority == "high" else "yellow"
        parts = []
        if rec.tokens_saved is not None:
            parts.append(f"save ~{rec.tokens_saved:,} tokens")
        parts.append(f"~{format_cost(rec.monthly_savings)}/month")
        console.print(f"  {i}. [{color}]{rec.description}[/{color}] ({', '.join(parts)})")


def show_preview_table(console: Console, previews: list[CompressionResult]) -> None:
    """Before/after token counts for every file."""
    if not previews:
        console.print("[yellow]No workspace files found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("File")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")
    table.add_column("Saved", justify="right")
    table.add_column("%", justify="right")

    for result in previews:
        color = savings_color(result.savings_percent)
        table.add_row(
            result.filename,
            f"{result.original_tokens:,}",
            f"{result.compressed_tokens:,}",
            f"[{color}]{result.tokens_saved:,}[/{color}]",
            f"{result.savings_percent}%",
        )
    console.print(table)

    before = sum(r.original_tokens for r in previews)
    after = sum(r.compressed_tokens for r in previews)
    pct = savings_percent(before, after)
    console.print(f"\n[bold]Total:[/bold] {before:,} → {after:,} tokens ({pct}%)")


def show_preview_file(console: Console, result: CompressionResult, limit: int = 500) -> None:
    """Side-by-side excerpt of one file before and after compression."""

    def excerpt(text: str) -> str:
        return text[:limit] + ("..." if len(text) > limit else "")

    console.print(Panel(Text(excerpt(result.original_text)), title=f"BEFORE ({result.original_tokens:,} tokens)"))
    console.print(Panel(Text(excerpt(result.compressed_text)), title=f"AFTER ({result.compressed_tokens:,} tokens)"))
    console.print(f"[bold]Savings:[/bold] {result.savings_percent}%")
    if result.applied_rules:
        console.print(f"[dim]Rules: {', '.join(result.applied_rules)}[/dim]")


def show_outcomes(console: Console, outcomes: list[FileOutcome]) -> int:
    """Per-file results of an optimize run. Returns total tokens saved."""
    total = 0
    for outcome in outcomes:
        if outcome.status is OutcomeStatus.COMPRESSED and outcome.result:
            r = outcome.result
            console.print(
                f"[green]✓[/green] {outcome.filename}: {r.original_tokens:,} → "
                f"{r.compressed_tokens:,} tokens ({r.savings_percent}% saved)"
            )
            total += outcome.tokens_saved
        elif outcome.status is OutcomeStatus.NO_BENEFIT:
            console.print(f"[dim]- {outcome.filename}: no compression benefit[/dim]")
        else:
            console.print(f"[red]✗ {outcome.filename}: {escape(outcome.error or '')}[/red]")
    return total


def show_catalog(console: Console, catalog: PricingCatalog) -> None:
    """Available models grouped by tier."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Tier")
    table.add_column("Model")
    table.add_column("Input $/M", justify="right")
    table.add_column("Output $/M", justify="right")

    for tier, entries in catalog.by_tier().items():
        color = TIER_COLORS[tier]
        for entry in entries:
            table.add_row(
                f"[{color}]{tier.value}[/{color}]",
                entry.display_name,
                f"{entry.input_price:g}",
                f"{entry.output_price:g}",
            )
    console.print(table)


def show_projections(console: Console, projections: list[CostProjection], catalog: PricingCatalog) -> None:
    if not projections:
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Model")
    table.add_column("Current", justify="right")
    table.add_column("Optimized", justify="right")
    table.add_column("Saved", justify="right")

    for p in projections:
        table.add_row(
            catalog.display_name(p.model_id),
            format_cost(p.current.monthly),
            format_cost(p.optimized.monthly),
            f"[green]{format_cost(p.monthly_savings)}[/green] ({p.savings_percent}%)",
        )
    console.print(table)


# ==================== HTML ====================


def render_html(
    analysis: WorkspaceAnalysis,
    previews: list[CompressionResult],
    projections: list[CostProjection],
    catalog: PricingCatalog,
) -> str:
    """Render the dashboard as a standalone HTML page."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["cost"] = format_cost
    template = env.get_template("dashboard.html.j2")

    return template.render(
        generated=datetime.now().isoformat(timespec="seconds"),
        analysis=analysis,
        previews=previews,
        projections=projections,
        catalog=catalog,
        tokens_saved=sum(max(0, r.tokens_saved) for r in previews),
    )


def export_html(path: Path, **kwargs) -> Path:
    path.write_text(render_html(**kwargs), encoding="utf-8")
    return path
