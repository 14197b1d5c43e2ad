"""CLI entry point for the candidate ranking engine."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from talentrank.adapters.file import FileSource
from talentrank.adapters.sqlite import InMemoryMatchSink, SqliteMatchSink
from talentrank.core.config import Settings
from talentrank.core.db import get_matches, init_db
from talentrank.core.lexicon import load_lexicon
from talentrank.core.schemas import BatchResult, RankingRunRecord
from talentrank.pipeline.explainer import format_shortlist, score_band
from talentrank.pipeline.orchestrator import export_batch_json, rank_job

DEFAULT_CONFIG = "config/settings.yaml"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Candidate ranking engine - score and shortlist retrieved candidates for a job",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- rank subcommand ---
    rank_parser = subparsers.add_parser("rank", help="Score and rank a batch of candidates")
    rank_parser.add_argument(
        "--input",
        required=True,
        help=(
            "Path to a batch file (YAML or JSON) with a job and its retrieved candidates; "
            "only the top ranking.top_k by similarity are scored"
        ),
    )
    rank_parser.add_argument(
        "--config",
        default=None,
        help=f"Path to settings YAML file (default: {DEFAULT_CONFIG} if present)",
    )
    rank_parser.add_argument(
        "--top",
        type=int,
        default=3,
        help="Number of candidates to show in the shortlist (default: 3)",
    )
    rank_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export the full ranking to format (json)",
    )
    rank_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Score and rank without writing to the database",
    )
    rank_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- show subcommand ---
    show_parser = subparsers.add_parser("show", help="Show stored matches for a job")
    show_parser.add_argument("--job-id", required=True, help="Job identifier")
    show_parser.add_argument(
        "--config",
        default=None,
        help=f"Path to settings YAML file (default: {DEFAULT_CONFIG} if present)",
    )
    show_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    """Load settings; an implicit default path that does not exist yields defaults."""
    if path is None:
        if not Path(DEFAULT_CONFIG).exists():
            return Settings()
        path = DEFAULT_CONFIG
    return Settings.from_yaml(path)


async def run_rank(args: argparse.Namespace, settings: Settings) -> BatchResult:
    """Rank the batch file and print the shortlist (or JSON export)."""
    source = FileSource.from_file(args.input)
    lexicon = load_lexicon(settings.lexicon_path)

    if args.dry_run:
        print("[DRY RUN] Results will not be stored")
        batch = await rank_job(
            source.job.id, source, source, InMemoryMatchSink(), settings, lexicon=lexicon,
        )
    else:
        conn = init_db(settings.database.path, timeout=settings.ranking.persist_timeout_s)
        sink = SqliteMatchSink(conn)
        try:
            started_at = datetime.now()
            batch = await rank_job(
                source.job.id, source, source, sink, settings, lexicon=lexicon,
            )
            await asyncio.to_thread(
                sink.record_run,
                RankingRunRecord(
                    job_id=batch.job_id,
                    batch_size=len(batch.ranked) + len(batch.failures),
                    ranked_count=len(batch.ranked),
                    failed_count=len(batch.failures),
                    started_at=started_at,
                    finished_at=datetime.now(),
                ),
            )
        finally:
            # Abandoned writes may still hold the connection in a worker thread.
            await asyncio.to_thread(sink.close)

    if args.export == "json":
        print(export_batch_json(batch))
    else:
        candidates = {c.id: c for c in source.candidates}
        print(format_shortlist(batch, source.job, candidates, settings.scoring, top_n=args.top))
    return batch


def cmd_show(args: argparse.Namespace, settings: Settings) -> None:
    """Handle show subcommand."""
    conn = init_db(settings.database.path)
    try:
        matches = get_matches(conn, args.job_id)
    finally:
        conn.close()

    if not matches:
        print(f"No stored matches for job {args.job_id}")
        return

    print(f"{len(matches)} stored matches for job {args.job_id}:")
    for i, m in enumerate(matches, start=1):
        print(
            f"  {i}. {m.candidate_id}: {m.final_score:.2f} "
            f"({score_band(m.final_score)}, confidence {m.confidence}%)"
        )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "show":
        cmd_show(args, settings)
        return

    try:
        asyncio.run(run_rank(args, settings))
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
