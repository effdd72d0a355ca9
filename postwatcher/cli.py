"""CLI commands for PostWatcher."""

import asyncio
import logging
from pathlib import Path

import click

from .config import Config, ensure_directories, load_config
from .links import parse_markdown_links
from .llm import ModelClient
from .processor import DEFAULT_CONCURRENCY, BatchResult, process_input_file
from .tophub import TOPHUB_URL
from .trends import run_trends
from .watcher import DirectoryWatcher, StabilityPolicy

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging format for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.version_option(package_name="postwatcher")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project root holding .env, local_inputs/, outputs/ and archive/",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, root: Path, verbose: bool):
    """PostWatcher - Turn link lists into styled posts and analyze trends."""
    setup_logging(verbose)
    ctx.obj = root


def _load(ctx: click.Context) -> Config:
    return load_config(ctx.obj)


@cli.command()
@click.option("--no-verify", is_flag=True, help="Do not run the verification command")
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=DEFAULT_CONCURRENCY,
    show_default=True,
    help="Articles processed at the same time",
)
@click.option(
    "--stable-age",
    type=float,
    default=StabilityPolicy.min_stable_age,
    show_default=True,
    help="Seconds a file must stay unchanged before it is read",
)
@click.pass_context
def watch(ctx: click.Context, no_verify: bool, concurrency: int, stable_age: float):
    """Watch local_inputs/ for link lists and process each one."""
    config = _load(ctx)
    ensure_directories(config.input_dir, config.output_dir, config.archive_dir)

    click.echo(click.style("PostWatcher: Article List Watcher", fg="cyan", bold=True))
    click.echo(f"Watching directory: {config.input_dir}")
    click.echo("Drop a markdown file with links here to start!")
    if config.mock_mode:
        click.echo(click.style("Mock mode is on: no model calls will be made.", fg="yellow"))
    click.echo()

    client = ModelClient(config)
    watcher = DirectoryWatcher(
        config.input_dir, StabilityPolicy(min_stable_age=stable_age)
    )

    async def handle(path: Path) -> None:
        result = await process_input_file(
            config, client, path, concurrency=concurrency, run_verify=not no_verify
        )
        _print_batch_result(result)

    try:
        asyncio.run(watcher.run(handle))
    except KeyboardInterrupt:
        click.echo("Stopped watching.")


@cli.command()
@click.argument("list_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--no-verify", is_flag=True, help="Do not run the verification command")
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=DEFAULT_CONCURRENCY,
    show_default=True,
    help="Articles processed at the same time",
)
@click.pass_context
def process(ctx: click.Context, list_file: Path, no_verify: bool, concurrency: int):
    """Process a single link list file once."""
    config = _load(ctx)
    ensure_directories(config.output_dir, config.archive_dir)

    try:
        result = asyncio.run(
            process_input_file(
                config,
                ModelClient(config),
                list_file,
                concurrency=concurrency,
                run_verify=not no_verify,
            )
        )
    except (OSError, UnicodeDecodeError):
        logger.exception("Failed to process input file %s", list_file.name)
        raise SystemExit(1)
    _print_batch_result(result)


@cli.command()
@click.option("--url", default=TOPHUB_URL, show_default=True, help="Hot-list page URL")
@click.pass_context
def trends(ctx: click.Context, url: str):
    """Scrape the hot list and write a trend analysis report."""
    config = _load(ctx)
    ensure_directories(config.trends_dir)

    try:
        report_path = asyncio.run(run_trends(config, ModelClient(config), url=url))
    except Exception:
        logger.exception("Error running hot-list analysis")
        raise SystemExit(1)

    click.echo(click.style(f"Report written to {report_path}", fg="green"))


@cli.command()
@click.argument("list_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def links(list_file: Path):
    """Show the links found in a list file without processing it."""
    items = parse_markdown_links(list_file.read_text(encoding="utf-8"))
    if not items:
        click.echo(click.style(f"No valid links found in {list_file.name}", fg="yellow"))
        return

    click.echo(click.style(f"Links in {list_file.name} ({len(items)}):", fg="cyan", bold=True))
    for index, item in enumerate(items, start=1):
        click.echo(f"  {index}. {item.title}")
        click.echo(f"     {item.link}")


def _print_batch_result(result: BatchResult):
    """Print a single batch summary."""
    if not result.found:
        return

    status_color = "green" if result.succeeded else "yellow"
    click.echo(click.style(f"  {result.filename}", fg="white", bold=True))
    click.echo(
        f"    Found: {result.found} | "
        + click.style(f"Saved: {result.succeeded}", fg=status_color)
        + f" | Skipped: {result.skipped} | Failed: {result.failed}"
    )
    if result.archived_to:
        click.echo(f"    Archived to: {result.archived_to}")


if __name__ == "__main__":
    cli()
