"""
CLI for owo.

Like tree, but writes every file's contents into a single Markdown document.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.table import Table

from owo import __version__
from owo.core.config import LoggingConfig, OwoConfig, load_config
from owo.core.errors import ConfigurationError, OutputWriteError
from owo.services import BundleResult, BundleService, write_output

# Initialize Rich Consoles
console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="owo",
    help="Like tree but outputs file contents to a single markdown file",
    add_completion=False,
)

_LOG_HANDLER_NAME = "owo-cli"


def _configure_logging(cfg: LoggingConfig, verbose: bool) -> None:
    """Attach a Rich handler to the package logger at the configured level."""
    level_name = "DEBUG" if verbose else cfg.level.upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {cfg.level}")

    package_logger = logging.getLogger("owo")
    for handler in list(package_logger.handlers):
        if handler.get_name() == _LOG_HANDLER_NAME:
            package_logger.removeHandler(handler)

    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    handler.set_name(_LOG_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(cfg.format))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


def _apply_cli_overrides(
    cfg: OwoConfig,
    ignore: Optional[str],
    with_dotfiles: bool,
    no_default_ignore: bool,
    no_gitignore: bool,
    concurrency: Optional[int],
    timeout: Optional[float],
    max_bytes: Optional[int],
    binary_placeholder: bool,
) -> OwoConfig:
    """Layer command-line values over the file/env configuration."""
    if ignore is not None:
        cfg.scan.ignore_pattern = ignore
    if with_dotfiles:
        cfg.scan.with_dotfiles = True
    if no_default_ignore:
        cfg.scan.use_default_ignore = False
    if no_gitignore:
        cfg.scan.respect_gitignore = False
    if concurrency is not None:
        cfg.read.max_concurrency = concurrency
    if timeout is not None:
        cfg.read.read_timeout = timeout
    if max_bytes is not None:
        cfg.read.max_file_bytes = max_bytes
    if binary_placeholder:
        cfg.output.binary_placeholder = True
    return cfg


def _print_summary(result: BundleResult, output_path: Path) -> None:
    summary = Table.grid(padding=1)
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Total Files:", str(result.total_files))
    summary.add_row("Total Bytes:", str(result.total_bytes))
    summary.add_row("Ignored Entries:", str(result.ignored_entries))
    summary.add_row("Duration:", f"{result.duration_seconds:.2f}s")

    if result.failed_files:
        summary.add_row("Failed Files:", f"[red]{len(result.failed_files)}[/red]")
    if result.skipped_directories:
        summary.add_row(
            "Skipped Directories:", f"[yellow]{len(result.skipped_directories)}[/yellow]"
        )

    console.print(
        Panel(
            summary,
            title="[bold green]Bundle Complete[/bold green]",
            border_style="green",
            expand=False,
        )
    )

    if result.failed_files:
        console.print("\n[bold red]Failed Files:[/bold red]")
        for f in result.failed_files[:5]:
            console.print(f"  - {escape(f)}")
        if len(result.failed_files) > 5:
            console.print(f"  ... and {len(result.failed_files) - 5} more")

    console.print(f"Successfully wrote output to {escape(str(output_path))}")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"owo {__version__}")
        raise typer.Exit()


@app.command()
def bundle(
    path: Path = typer.Argument(Path("."), help="Directory to traverse"),
    output: Path = typer.Option(..., "--output", "-o", help="Output file"),
    ignore: Optional[str] = typer.Option(
        None,
        "--ignore",
        "-I",
        help="Ignore files/directories whose name or relative path contains a match "
        "for this regex (e.g. 'node_modules|\\.log'), added to the whole-name "
        "defaults obj|bin|build|dist|.git|.env.*",
    ),
    with_dotfiles: bool = typer.Option(
        False, "--with-dotfiles", "--wdf", "-w", help="Include hidden files and directories"
    ),
    no_default_ignore: bool = typer.Option(
        False, "--no-default-ignore", help="Use --ignore instead of the default patterns"
    ),
    no_gitignore: bool = typer.Option(
        False, "--no-gitignore", help="Do not apply .gitignore rules"
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-j", min=1, help="Maximum number of files read at once"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-file read timeout in seconds"
    ),
    max_bytes: Optional[int] = typer.Option(
        None, "--max-bytes", min=0, help="Report files larger than this as errors (0 = no limit)"
    ),
    binary_placeholder: bool = typer.Option(
        False, "--binary-placeholder", help="Replace non-UTF-8 files with a size note"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML or JSON configuration file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Print version information",
    ),
):
    """Write the contents of every file under PATH into one Markdown document."""
    load_dotenv(find_dotenv(usecwd=True))

    try:
        cfg = _apply_cli_overrides(
            load_config(config_file),
            ignore=ignore,
            with_dotfiles=with_dotfiles,
            no_default_ignore=no_default_ignore,
            no_gitignore=no_gitignore,
            concurrency=concurrency,
            timeout=timeout,
            max_bytes=max_bytes,
            binary_placeholder=binary_placeholder,
        )
        _configure_logging(cfg.logging, verbose)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=err_console,
            transient=True,
        ) as progress:
            task = progress.add_task("Initializing...", total=None)

            def update_progress(current: int, total: int, message: str) -> None:
                progress.update(task, completed=current, total=total or None, description=message)

            service = BundleService(config=cfg, progress_callback=update_progress)
            result = service.run(path)

        output_path = write_output(output, result.content)

    except (ConfigurationError, OutputWriteError) as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    _print_summary(result, output_path)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
