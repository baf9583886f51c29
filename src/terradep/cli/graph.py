"""Graph generation CLI command."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape

from terradep.cli.main import Context, pass_context

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def scanner_options(command):
    """Options shared by every command that scans directories."""
    options = [
        click.option(
            "--dir",
            "-d",
            "dirs",
            multiple=True,
            required=True,
            type=click.Path(path_type=Path),
            help="Recursively analyze directory (repeatable)",
        ),
        click.option(
            "--exclude",
            "-x",
            multiple=True,
            help="Directory name to skip, in addition to the configured ones (repeatable)",
        ),
        click.option(
            "--s3-region/--no-s3-region",
            default=False,
            help="S3 states in different regions are different states",
        ),
        click.option(
            "--s3-encryption/--no-s3-encryption",
            default=False,
            help="S3 states with different encryption are different states",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def build_scanner(ctx: Context, exclude: tuple[str, ...], s3_region: bool, s3_encryption: bool):
    """Create a scanner from the configuration file and explicit flags."""
    from terradep.core.scanner import Scanner

    click_ctx = click.get_current_context()

    def explicit(name: str, value: bool) -> bool | None:
        if click_ctx.get_parameter_source(name) == ParameterSource.DEFAULT:
            return None
        return value

    config = ctx.config
    config = config.override(
        exclude=sorted(config.excluded | set(exclude)) if exclude else None,
        s3_region=explicit("s3_region", s3_region),
        s3_encryption=explicit("s3_encryption", s3_encryption),
    )
    logger.debug("using %r", config)
    return Scanner.from_config(config)


@click.command()
@scanner_options
@click.option(
    "--format",
    "-F",
    "output_format",
    type=click.Choice(["dot", "mermaid", "jsonl"]),
    default="dot",
    help="Output format",
)
@click.option(
    "--out",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write output to file instead of stdout; fails when the file exists unless --force",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite the file given with --out; its content WILL BE LOST",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Scan and build the graph without writing it, e.g. to lint the configuration",
)
@pass_context
def graph(
    ctx: Context,
    dirs: tuple[Path, ...],
    exclude: tuple[str, ...],
    s3_region: bool,
    s3_encryption: bool,
    output_format: str,
    out: Path | None,
    force: bool,
    dry_run: bool,
) -> None:
    """
    Build the dependency graph of Terraform deployments.

    Every directory is scanned recursively, the graphs are merged and
    written in the chosen format.

    Examples:

        # Write DOT graph of two directories
        terradep graph -d infra/network -d infra/apps > graph.dot

        # Render with graphviz
        terradep graph -d infra -o graph.dot && dot -Tsvg graph.dot -o graph.svg

        # Only check the configuration can be scanned
        terradep graph -d infra --dry-run
    """
    from terradep.core.encoding import encode
    from terradep.core.errors import TerradepError

    if out is not None and out.exists() and not force and not dry_run:
        console.print(f"[red]Error:[/red] output file already exists and --force is not set: {out}", soft_wrap=True)
        raise SystemExit(1)

    scanner = build_scanner(ctx, exclude, s3_region, s3_encryption)

    try:
        dependency_graph = scanner.scan_all(str(d) for d in dirs)
        encoded = encode(dependency_graph, output_format)
    except TerradepError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise SystemExit(1)

    logger.info("scan successful: %r", dependency_graph)

    if dry_run:
        console.print(
            f"[green]✓[/green] {len(dependency_graph)} deployments, "
            f"{len(dependency_graph.heads)} heads"
        )
        return

    if out is None:
        click.echo(encoded, nl=False)
        return

    if out.exists():
        logger.info("force enabled, overwriting output file: %s", out)
    try:
        out.write_bytes(encoded)
    except OSError as e:
        console.print(f"[red]Error:[/red] writing {escape(str(out))}: {escape(e.strerror or str(e))}", soft_wrap=True)
        raise SystemExit(1)
    console.print(f"[green]Generated:[/green] {out}", soft_wrap=True)
