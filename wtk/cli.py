"""WTK CLI commands."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from . import __version__
from .core.analyzer import Analyzer
from .core.backup import BackupManager
from .core.config import Config
from .core.errors import WtkError
from .core.optimizer import Optimizer
from .core.rewriter import Rewriter, load_block_templates
from .core.workspace import find_workspace
from .logging_config import logger, setup_logging
from .report import (
    export_html,
    format_cost,
    show_analysis,
    show_catalog,
    show_outcomes,
    show_preview_file,
    show_preview_table,
    show_projections,
    show_recommendations,
)

console = Console()


class WtkGroup(click.Group):
    """Group that turns WTK errors into a message and exit code 1."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except WtkError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            ctx.exit(1)


@click.group(cls=WtkGroup, invoke_without_command=True)
@click.version_option(__version__, "--version", prog_name="wtk")
@click.option(
    "--workspace",
    "-w",
    type=click.Path(file_okay=False, path_type=Path),
    help="Workspace directory (defaults to the current directory)",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Config file")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, workspace: Path | None, config_path: Path | None, verbose: bool):
    """WTK - Workspace Token Kit: shrink agent context files and estimate savings."""
    workspace = find_workspace(workspace)
    config = Config(config_path=config_path, workspace=workspace)
    setup_logging("DEBUG" if verbose else config.get("logging.level", "WARNING"), force=True)
    logger.debug(f"Workspace: {workspace}")

    ctx.obj = {"workspace": workspace, "config": config}

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _workspace(ctx: click.Context) -> Path:
    return ctx.obj["workspace"]


def _config(ctx: click.Context) -> Config:
    return ctx.obj["config"]


def _optimizer(ctx: click.Context) -> Optimizer:
    config = _config(ctx)
    templates_path = config.get("compression.block_templates")
    rewriter = Rewriter(
        block_templates=load_block_templates(Path(templates_path)) if templates_path else None
    )
    return Optimizer(_workspace(ctx), config=config, rewriter=rewriter)


# ==================== Analysis Commands ====================


@cli.command()
@click.pass_context
def analyze(ctx: click.Context):
    """Show token usage per workspace file and estimated costs."""
    analyzer = Analyzer(_config(ctx))
    analysis = analyzer.analyze_workspace(_workspace(ctx))
    costs = analyzer.session_costs(analysis)
    show_analysis(console, analysis, costs.monthly if costs else None)


@cli.command()
@click.argument("target", default="all")
@click.pass_context
def preview(ctx: click.Context, target: str):
    """Preview compression for one file, or 'all' files."""
    optimizer = _optimizer(ctx)

    if target == "all":
        console.print(Panel("[bold cyan]Compression Preview - All Files[/bold cyan]", expand=False))
        show_preview_table(console, optimizer.preview_workspace())
        return

    show_preview_file(console, optimizer.preview_file(_workspace(ctx) / target))


@cli.command()
@click.pass_context
def models(ctx: click.Context):
    """Compare the current model with cheaper alternatives."""
    analyzer = Analyzer(_config(ctx))
    analysis = analyzer.analyze_workspace(_workspace(ctx))
    catalog = analyzer.catalog
    current = analyzer.current_model
    costs = analyzer.session_costs(analysis)

    console.print(Panel("[bold cyan]Model Usage & Cost Analysis[/bold cyan]", expand=False))
    console.print(f"[bold]Current model:[/bold] {catalog.display_name(current)}")
    console.print(f"[bold]Current monthly cost:[/bold] {format_cost(costs.monthly if costs else None)}")

    switches = analyzer.model_switch_recommendations(analysis)
    if switches:
        show_recommendations(console, switches)
    else:
        console.print("\n[green]Current model configuration looks cost-efficient[/green]")

    console.print("\n[bold]Available models[/bold]")
    show_catalog(console, catalog)


@cli.command()
@click.option("--html", "html_path", type=click.Path(dir_okay=False, path_type=Path), help="Write an HTML report")
@click.pass_context
def dashboard(ctx: click.Context, html_path: Path | None):
    """Usage, compression preview and cost projections in one view."""
    analyzer = Analyzer(_config(ctx))
    analysis = analyzer.analyze_workspace(_workspace(ctx))
    previews = _optimizer(ctx).preview_workspace()
    projections = analyzer.cost_projections(analysis)

    if html_path:
        export_html(
            html_path,
            analysis=analysis,
            previews=previews,
            projections=projections,
            catalog=analyzer.catalog,
        )
        console.print(f"[green]HTML dashboard saved to {html_path}[/green]")
        return

    costs = analyzer.session_costs(analysis)
    show_analysis(console, analysis, costs.monthly if costs else None)
    console.print("\n[bold]Compression Preview[/bold]")
    show_preview_table(console, previews)
    console.print("\n[bold]Cost Projections (monthly)[/bold]")
    show_projections(console, projections, analyzer.catalog)


# ==================== File Commands ====================


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Output file")
@click.pass_context
def compress(ctx: click.Context, file: Path, output: Path | None):
    """Write a compressed copy of FILE (FILE.compressed.md by default)."""
    result, written = _optimizer(ctx).compress_to_file(file, output)
    console.print(f"[bold]File:[/bold] {file.name}")
    console.print(f"  Original:   {result.original_tokens:,} tokens")
    console.print(f"  Compressed: {result.compressed_tokens:,} tokens")
    console.print(f"  Savings:    {result.savings_percent}%")
    console.print(f"[green]Saved to {written.name}[/green]")


@cli.command()
@click.option("--confirm", is_flag=True, help="Rewrite workspace files in place")
@click.pass_context
def apply(ctx: click.Context, confirm: bool):
    """Compress all workspace files in place (originals backed up)."""
    if not confirm:
        console.print(
            "[yellow]This replaces workspace files with compressed versions.[/yellow]\n"
            "Originals are backed up with a .backup extension.\n"
            "To proceed, run: wtk apply --confirm"
        )
        sys.exit(1)

    optimizer = _optimizer(ctx)
    outcomes = optimizer.optimize_workspace()
    total = show_outcomes(console, outcomes)
    changed = sum(1 for o in outcomes if o.tokens_saved > 0)

    persistent = optimizer.backups.enable_persistent_mode()
    monthly = Analyzer(_config(ctx)).monthly_savings(total)

    console.print(f"\n[bold]Files optimized:[/bold] {changed}/{len(outcomes)}")
    console.print(f"[bold]Tokens saved:[/bold] {total:,}")
    console.print(f"[bold]Estimated savings:[/bold] ~{format_cost(monthly)}/month")
    if persistent:
        console.print("[bold]Persistent mode: ON[/bold] (new content will be written compactly)")
    console.print("[dim]Backups created (.backup); 'wtk revert' restores originals[/dim]")


@cli.command()
@click.argument("target", default="all")
@click.option("--list", "list_only", is_flag=True, help="List available backups")
@click.pass_context
def revert(ctx: click.Context, target: str, list_only: bool):
    """Restore files from backups and turn off persistent mode."""
    backups = BackupManager(_workspace(ctx))

    if list_only:
        found = backups.list_backups()
        if not found:
            console.print("[yellow]No backups found[/yellow]")
            return
        for path in found:
            console.print(f"  {path.name[: -len('.backup')]}")
        return

    if target == "all" and not backups.list_backups():
        console.print("[yellow]No backups found - nothing to revert[/yellow]")
        return

    restored = backups.restore(target)
    backups.disable_persistent_mode()
    for name in restored:
        console.print(f"[green]Restored {name}[/green]")
    console.print(f"\n{len(restored)} file(s) restored. Persistent mode: OFF")


@cli.command("config")
@click.option("--show", is_flag=True, help="Show current configuration")
@click.option("--init", is_flag=True, help="Initialize configuration file")
@click.pass_context
def config_command(ctx: click.Context, show: bool, init: bool):
    """Manage WTK configuration."""
    config = _config(ctx)

    if init:
        config.save()
        console.print(f"[green]Configuration saved to {config.config_path}[/green]")
        return

    console.print(f"[bold]Configuration file:[/bold] {config.config_path}")
    console.print(f"[bold]Workspace:[/bold] {_workspace(ctx)}")
    console.print(f"[bold]Current model:[/bold] {config.get('analysis.current_model')}")
    console.print(f"[bold]Known files:[/bold] {', '.join(config.get('workspace.common', []))}")
    if show:
        import yaml

        click.echo(yaml.dump(config.as_dict(), default_flow_style=False, sort_keys=False))


def main() -> None:
    cli()
