"""Abstract contracts for the collaborators around the ranking engine."""

from abc import ABC, abstractmethod

from talentrank.core.schemas import Job, MatchResult, RetrievedCandidate


class JobStore(ABC):
    """Provides job records by identifier."""

    @abstractmethod
    async def get_job(self, job_id: str) -> Job | None:
        """Return the job, or None if it does not exist."""


class CandidateRetriever(ABC):
    """Semantic retrieval: candidates for a job, each with a similarity in [0, 1]."""

    @abstractmethod
    async def retrieve(self, job: Job, top_k: int) -> list[RetrievedCandidate]:
        """Return up to ``top_k`` candidates, best match first."""


class MatchSink(ABC):
    """Persistence target for match results.

    Implementations must keep at most one stored result per
    (job_id, candidate_id) and raise PersistenceError when a write fails.
    """

    @abstractmethod
    async def upsert(self, result: MatchResult) -> None:
        """Create or fully replace the stored result for the pair."""
