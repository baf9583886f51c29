"""Main CLI entry point for terradep."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from terradep import __version__

console = Console(stderr=True)

# --log-file given without a value
AUTO_LOG_FILE = ""


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.verbose: bool = False
        self._config = None

    @property
    def config(self):
        """Lazy-load scanner configuration."""
        if self._config is None:
            from terradep.core.config import ScannerConfig
            from terradep.core.errors import TerradepError

            if self.config_path is None:
                self._config = ScannerConfig()
            else:
                try:
                    self._config = ScannerConfig.load(self.config_path)
                except TerradepError as e:
                    raise click.ClickException(str(e)) from e
        return self._config


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.version_option(version=__version__, prog_name="terradep")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration YAML file",
)
@click.option(
    "-l",
    "--log-file",
    type=str,
    is_flag=False,
    flag_value=AUTO_LOG_FILE,
    default=None,
    help="Write logs to file instead of stderr; with an empty value (--log-file=) the name is generated from the current time",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@pass_context
def cli(ctx: Context, config: Path | None, log_file: str | None, verbose: bool) -> None:
    """
    Terradep - dependency graphs of Terraform deployments.

    Finds deployments, follows their terraform_remote_state references
    and renders the dependencies between them.
    """
    from terradep.logs import configure_logging, default_log_file

    ctx.config_path = config
    ctx.verbose = verbose

    log_path: Path | None = None
    if log_file is not None:
        log_path = default_log_file() if log_file == AUTO_LOG_FILE else Path(log_file)
    try:
        configure_logging(verbose=verbose, log_file=log_path)
    except OSError as e:
        console.print(f"[red]Error:[/red] opening log file {escape(str(log_path))}: {escape(e.strerror or str(e))}", soft_wrap=True)
        raise SystemExit(1)


# Import and register subcommands
from terradep.cli.deployments import deployments  # noqa: E402
from terradep.cli.graph import graph  # noqa: E402

cli.add_command(deployments)
cli.add_command(graph)


if __name__ == "__main__":
    cli()
