"""
PolyRatings AI summary generator
Usage: poly-summaries [options]

Runs:
    poly-summaries                       Next bounded batch (resumes from saved cursor)
    poly-summaries --mode full           Regenerate every professor
    poly-summaries --professor "A B"     Inspect one professor, nothing is saved

Environment:
    GEMINI_API_KEY      Required. May also be set in .env
    SUMMARY_RUN_MODE    Optional run mode override ("batch" or "full")

Do not run two instances against the same output directory at the same time;
state files are read at start and overwritten at the end of each run.
"""

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console

from poly_summaries.agents.record_aggregator import aggregate_professors
from poly_summaries.coordinator import SummaryCoordinator
from poly_summaries.models.config import RunMode, SystemParams, resolve_run_mode
from poly_summaries.models.professor import ProfessorRecord
from poly_summaries.utils.credential_manager import (
    CredentialManager,
    MissingCredentialError,
)
from poly_summaries.utils.csv_fetcher import CSVFetcher, CSVFetchError
from poly_summaries.utils.llm_helpers import SummaryClient
from poly_summaries.utils.logger import configure_logging, get_logger
from poly_summaries.utils.progress_tracker import ProgressTracker
from poly_summaries.utils.state_store import StateStore

console = Console()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poly-summaries",
        description="Generate AI summaries for PolyRatings professors",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in RunMode],
        help="Run mode (overrides SUMMARY_RUN_MODE and the config file)",
    )
    parser.add_argument("--config", type=Path, help="Path to system_params.json")
    parser.add_argument("--batch-size", type=_positive_int, help="Professors per batch")
    parser.add_argument("--output-dir", type=str, help="Directory for state files")
    parser.add_argument("--professor", type=str, help="Summarize a single professor")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides the config file)",
    )
    return parser


def load_params(args: argparse.Namespace) -> SystemParams:
    """Load config and apply command-line overrides."""
    params = SystemParams.load(args.config)
    if args.batch_size is not None:
        params.batch_config.batch_size = args.batch_size
    if args.output_dir is not None:
        params.storage.output_dir = args.output_dir
    if args.log_level is not None:
        params.log_level = args.log_level
    return params


async def load_professors(
    params: SystemParams, correlation_id: str
) -> list[ProfessorRecord]:
    """Fetch both CSV sources and aggregate them."""
    fetcher = CSVFetcher(
        correlation_id=correlation_id, timeout=params.sources.fetch_timeout
    )
    ratings, comments = await fetcher.fetch_sources(
        params.sources.ratings_url, params.sources.comments_url
    )
    return aggregate_professors(
        ratings,
        comments,
        max_comment_length=params.batch_config.max_comment_length,
        site_base_url=params.sources.site_base_url,
    )


def print_record(record: ProfessorRecord) -> None:
    console.print("[bold]Professor Data:[/bold]")
    console.print(f"   Name: {record.name}")
    console.print(f"   Rating: {record.rating}/4.0")
    console.print(f"   Num Evals: {record.num_evals}")
    console.print(f"   Clarity: {record.clarity}/4.0")
    console.print(f"   Helpfulness: {record.helpfulness}/4.0")
    console.print(f"   Department: {record.department}")
    console.print(f"   Courses: {record.courses}")
    console.print(f"   Comments length: {len(record.comments)} chars")
    console.print(f"   Link: {record.link}\n")


async def inspect_professor(
    name: str, params: SystemParams, api_key: str, correlation_id: str
) -> int:
    """Summarize one professor and print it without touching persisted state."""
    professors = await load_professors(params, correlation_id)
    record = next((p for p in professors if p.name == name.strip()), None)
    if record is None:
        console.print(f'[red][X] Professor "{name}" not found in data[/red]')
        return EXIT_FAILURE

    print_record(record)
    async with SummaryClient(
        api_key=api_key, params=params, correlation_id=correlation_id
    ) as client:
        summary = await client.summarize(record)

    console.print("[bold]Summary:[/bold]")
    console.print(summary)
    return EXIT_OK


async def run_summaries(
    params: SystemParams, mode: RunMode, api_key: str, correlation_id: str
) -> int:
    """Run one bounded batch or a full regeneration."""
    professors = await load_professors(params, correlation_id)
    console.print(f"[green]Loaded {len(professors)} total professors[/green]")

    state_store = StateStore.from_config(params.storage)
    async with SummaryClient(
        api_key=api_key, params=params, correlation_id=correlation_id
    ) as client:
        coordinator = SummaryCoordinator(
            params=params,
            summary_client=client,
            state_store=state_store,
            progress_tracker=ProgressTracker(),
            correlation_id=correlation_id,
        )
        report = await coordinator.run(professors, mode)

    if report.completed_cycle:
        console.print("[bold green]All professors processed![/bold green]")
    elif mode is RunMode.BATCH:
        console.print(f"Progress saved. Next start index: {report.next_index}")

    if report.processed:
        results = state_store.load_results()
        console.print("\n[bold]Latest batch:[/bold]")
        for name in report.processed:
            console.print(f"[bold]{name}[/bold]: {results.get(name, '')}\n")

    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    credentials = CredentialManager()

    try:
        params = load_params(args)
        mode = resolve_run_mode(params, args.mode)
    except (FileNotFoundError, json.JSONDecodeError, ValidationError, ValueError) as e:
        console.print(f"[red][X] Invalid configuration: {e}[/red]")
        return EXIT_CONFIG_ERROR

    configure_logging(log_file=params.log_file, log_level=params.log_level)
    correlation_id = str(uuid.uuid4())
    logger = get_logger(correlation_id=correlation_id, phase="startup", component="cli")

    try:
        api_key = credentials.get_gemini_api_key()
    except MissingCredentialError:
        return EXIT_FAILURE

    logger.info(
        "Starting run",
        mode=mode.value,
        batch_size=params.batch_config.batch_size,
        model=params.api.model,
        output_dir=params.storage.output_dir,
    )

    try:
        if args.professor:
            return asyncio.run(
                inspect_professor(args.professor, params, api_key, correlation_id)
            )
        return asyncio.run(run_summaries(params, mode, api_key, correlation_id))
    except CSVFetchError as e:
        logger.error("Aborting run, professor data unavailable", error=str(e))
        console.print(f"[red][X] {e}[/red]")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
