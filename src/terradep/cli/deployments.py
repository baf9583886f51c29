"""Deployment listing CLI command."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from terradep.cli.graph import build_scanner, scanner_options
from terradep.cli.main import Context, pass_context

console = Console()


@click.command()
@scanner_options
@pass_context
def deployments(
    ctx: Context,
    dirs: tuple[Path, ...],
    exclude: tuple[str, ...],
    s3_region: bool,
    s3_encryption: bool,
) -> None:
    """
    List deployments and the states they own.

    External states, referenced but not found under any directory, are
    listed too.

    Examples:

        terradep deployments -d infra
    """
    from terradep.core.errors import TerradepError

    scanner = build_scanner(ctx, exclude, s3_region, s3_encryption)
    try:
        dependency_graph = scanner.scan_all(str(d) for d in dirs)
    except TerradepError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise SystemExit(1)

    if len(dependency_graph) == 0:
        console.print("[yellow]No deployments found[/yellow]")
        return

    heads = set(dependency_graph.heads)
    table = Table(title="Terraform Deployments")
    table.add_column("Path", style="cyan", overflow="fold")
    table.add_column("State", no_wrap=True)
    table.add_column("Depends on", justify="right")
    table.add_column("Head")

    for node in sorted(dependency_graph.nodes(), key=lambda n: (n.is_external, n.path or str(n.state))):
        table.add_row(
            node.path or "[dim]external[/dim]",
            str(node.state),
            str(len(node.children)),
            "[green]yes[/green]" if node in heads else "-",
        )

    console.print(table)
