"""Orchestrator: validates a batch, scores every pair, persists, ranks.

Data flow:
  1. Batch validation (rejected as a whole before any work)
  2. Feature extraction + composite score + explanation per candidate (pure)
  3. Concurrent upsert per candidate, each bounded by a timeout
  4. Stable sort of the persisted results by final score
"""

import asyncio
import json
import logging

from talentrank.adapters.base import CandidateRetriever, JobStore, MatchSink
from talentrank.core.config import RankingConfig, ScoringConfig, Settings
from talentrank.core.errors import InvalidBatchError, PersistenceError
from talentrank.core.lexicon import Lexicon, load_lexicon
from talentrank.core.schemas import (
    BatchResult,
    Job,
    MatchResult,
    RankingFailure,
    RetrievedCandidate,
)
from talentrank.pipeline.scorer import rank_results, score_pair

logger = logging.getLogger(__name__)


async def rank_candidates(
    job: Job | None,
    batch: list[RetrievedCandidate],
    sink: MatchSink,
    lexicon: Lexicon | None = None,
    scoring: ScoringConfig | None = None,
    ranking: RankingConfig | None = None,
) -> BatchResult:
    """Score, persist and rank one batch of retrieved candidates for a job.

    A candidate whose write fails or times out is reported in
    ``BatchResult.failures`` and left out of the ranking; the rest of the
    batch is unaffected. Writes are not retried.

    Raises:
        InvalidBatchError: the job is missing or has no description, or the
            batch is empty or repeats a candidate id.
    """
    job = _validate_batch(job, batch)
    lexicon = lexicon or load_lexicon()
    scoring = scoring or ScoringConfig()
    ranking = ranking or RankingConfig()

    logger.info("Ranking %d candidates for job %s", len(batch), job.id)

    results = [score_pair(job, retrieved, lexicon, scoring) for retrieved in batch]

    outcomes = await _persist_all(sink, results, ranking)

    persisted: list[MatchResult] = []
    failures: list[RankingFailure] = []
    for result, reason in zip(results, outcomes):
        if reason is None:
            persisted.append(result)
        else:
            failures.append(RankingFailure(candidate_id=result.candidate_id, reason=reason))

    ranked = rank_results(persisted)
    logger.info(
        "Job %s: %d ranked, %d failed", job.id, len(ranked), len(failures),
    )
    return BatchResult(job_id=job.id, ranked=ranked, failures=failures)


async def rank_job(
    job_id: str,
    store: JobStore,
    retriever: CandidateRetriever,
    sink: MatchSink,
    settings: Settings,
    lexicon: Lexicon | None = None,
) -> BatchResult:
    """Fetch a job, retrieve its top candidates, and rank them."""
    job = await store.get_job(job_id)
    if job is None:
        msg = f"job not found: {job_id}"
        raise InvalidBatchError(msg)
    batch = await retriever.retrieve(job, settings.ranking.top_k)
    logger.info("Retrieved %d candidates for job %s", len(batch), job_id)
    return await rank_candidates(
        job, batch, sink,
        lexicon=lexicon,
        scoring=settings.scoring,
        ranking=settings.ranking,
    )


def export_batch_json(batch: BatchResult) -> str:
    """Export a ranked batch as a JSON string."""
    data = {
        "job_id": batch.job_id,
        "ranked": [
            {"rank": i, **result.model_dump()}
            for i, result in enumerate(batch.ranked, start=1)
        ],
        "failures": [f.model_dump() for f in batch.failures],
    }
    return json.dumps(data, indent=2)


def _validate_batch(job: Job | None, batch: list[RetrievedCandidate]) -> Job:
    if job is None:
        msg = "batch has no job"
        raise InvalidBatchError(msg)
    if not job.description.strip():
        msg = f"job {job.id} has an empty description"
        raise InvalidBatchError(msg)
    if not batch:
        msg = f"batch for job {job.id} has no candidates"
        raise InvalidBatchError(msg)
    seen: set[str] = set()
    for retrieved in batch:
        cid = retrieved.candidate.id
        if cid in seen:
            msg = f"candidate {cid} appears more than once in batch for job {job.id}"
            raise InvalidBatchError(msg)
        seen.add(cid)
    return job


async def _persist_all(
    sink: MatchSink,
    results: list[MatchResult],
    ranking: RankingConfig,
) -> list[str | None]:
    """Upsert every result; return a failure reason per result (None on success)."""
    semaphore = asyncio.Semaphore(ranking.max_concurrency)
    tasks = [
        asyncio.create_task(_persist_one(sink, r, semaphore, ranking.persist_timeout_s))
        for r in results
    ]

    _, pending = await asyncio.wait(tasks, timeout=ranking.batch_timeout_s)
    if pending:
        logger.warning(
            "Batch timeout after %.1fs: abandoning %d pending writes",
            ranking.batch_timeout_s, len(pending),
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    outcomes: list[str | None] = []
    for task in tasks:
        if task.cancelled():
            outcomes.append("abandoned: batch timed out before the write completed")
        else:
            outcomes.append(task.result())
    return outcomes


async def _persist_one(
    sink: MatchSink,
    result: MatchResult,
    semaphore: asyncio.Semaphore,
    timeout: float,
) -> str | None:
    async with semaphore:
        try:
            await asyncio.wait_for(sink.upsert(result), timeout=timeout)
        except asyncio.TimeoutError:
            reason = f"timeout after {timeout:g}s"
        except PersistenceError as e:
            reason = str(e)
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"
            logger.exception("Unexpected sink error for candidate %s", result.candidate_id)
        else:
            return None
    logger.warning("Could not persist candidate %s: %s", result.candidate_id, reason)
    return reason
