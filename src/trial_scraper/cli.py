"""CLI entrypoint for the clinical trial scraper."""
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from .cache import setup_cache
from .clients.firecrawl import FirecrawlClient
from .config import load_settings
from .crawl import CrawlOrchestrator
from .errors import ScraperError
from .filters import filter_recruiting_trials
from .logging import setup_logger
from .model import TrialRecord
from .trial_parser import build_trial_record

app = typer.Typer(help="Collect clinical trials that are open for enrollment.")
logger = logging.getLogger(__name__)


def write_trials(trials: List[TrialRecord], output: Optional[Path] = None) -> None:
    """Write trials as pretty-printed JSON to a file or standard output.

    Args:
        trials: Trials to write
        output: Target file, stdout when None
    """
    content = json.dumps([trial.model_dump() for trial in trials], indent=2, ensure_ascii=False)
    if output is None:
        typer.echo(content)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        f.write(content + "\n")
    logger.info(f"Saved {len(trials)} trials to {output}")


@app.command()
def crawl(
    start_url: Optional[str] = typer.Option(
        None,
        "--start-url",
        help="Page to start crawling from (default: START_URL env var or the registry search page)"
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        help="Maximum number of pages to crawl (default: LIMIT env var or 50)"
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        help="Maximum crawl depth (default: MAX_DEPTH env var or 2)"
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML file with settings"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write JSON to this file instead of stdout"
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: LOG_LEVEL env var or INFO)"
    ),
):
    """Crawl the trial registry and print recruiting trials as JSON."""
    try:
        settings = load_settings(
            config,
            start_url=start_url,
            limit=limit,
            max_depth=max_depth,
            log_level=log_level,
        )
        api_key = settings.require_api_key()
    except ScraperError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    setup_logger("trial_scraper", settings.log_level, settings.log_file)

    session = setup_cache(settings.firecrawl_api_base, enabled=settings.cache_scrapes)
    client = FirecrawlClient(
        api_key,
        api_base=settings.firecrawl_api_base,
        timeout=settings.request_timeout,
        session=session,
    )
    orchestrator = CrawlOrchestrator(client, settings.crawl_config())

    try:
        trials = orchestrator.run()
    except ScraperError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    write_trials(trials, output)


@app.command()
def parse(
    files: List[Path] = typer.Argument(..., help="Markdown study pages to parse"),
    include_all: bool = typer.Option(
        False,
        "--all",
        help="Emit every parsed trial, not only recruiting ones"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write JSON to this file instead of stdout"
    ),
):
    """Parse saved study pages without calling the acquisition service."""
    setup_logger("trial_scraper", logging.INFO)

    trials = []
    for path in files:
        try:
            markdown = path.read_text(encoding="utf-8")
        except OSError as e:
            typer.echo(f"Error: cannot read {path}: {e}", err=True)
            raise typer.Exit(code=1)

        trial = build_trial_record(markdown, path.resolve().as_uri())
        if not trial.nct_id:
            logger.warning(f"Skipping {path}: no NCT identifier")
            continue
        trials.append(trial)

    if not include_all:
        trials = filter_recruiting_trials(trials)
    write_trials(trials, output)


if __name__ == "__main__":
    app()
