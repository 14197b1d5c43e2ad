"""File-backed job store and retriever for batch files exported by retrieval.

Batch file layout (YAML or JSON)::

    job:
      id: job-1
      title: Senior Backend Engineer
      level: Senior
      location: Remote
      description: ...
    candidates:
      - id: cand-1
        similarity: 0.82
        years_of_experience: 5
        location: remote
        resume_text: ...
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from talentrank.adapters.base import CandidateRetriever, JobStore
from talentrank.core.schemas import Candidate, Job, RetrievedCandidate

logger = logging.getLogger(__name__)


class CandidateEntry(Candidate):
    """A candidate row in a batch file, carrying its similarity."""

    similarity: float = 0.0


class BatchFile(BaseModel):
    job: Job
    candidates: list[CandidateEntry] = Field(default_factory=list)


class FileSource(JobStore, CandidateRetriever):
    """Serves one job and its pre-retrieved candidates from a batch file."""

    def __init__(self, batch: BatchFile) -> None:
        self._batch = batch

    @property
    def job(self) -> Job:
        return self._batch.job

    @property
    def candidates(self) -> list[Candidate]:
        return [Candidate(**c.model_dump(exclude={"similarity"})) for c in self._batch.candidates]

    async def get_job(self, job_id: str) -> Job | None:
        if job_id == self._batch.job.id:
            return self._batch.job
        return None

    async def retrieve(self, job: Job, top_k: int) -> list[RetrievedCandidate]:
        """Candidates by similarity descending; file order breaks ties."""
        if job.id != self._batch.job.id:
            return []
        entries = sorted(self._batch.candidates, key=lambda c: c.similarity, reverse=True)
        if len(entries) > top_k:
            logger.warning(
                "Batch for job %s has %d candidates; keeping the top %d by similarity, skipping %d",
                job.id, len(entries), top_k, len(entries) - top_k,
            )
        return [
            RetrievedCandidate(
                candidate=Candidate(**e.model_dump(exclude={"similarity"})),
                similarity=e.similarity,
            )
            for e in entries[:top_k]
        ]

    @classmethod
    def from_file(cls, path: str | Path) -> "FileSource":
        """Load a batch file (YAML or JSON)."""
        path = Path(path)
        if not path.exists():
            msg = f"Batch file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls(BatchFile.model_validate(raw))
