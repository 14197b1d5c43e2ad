"""Core data models for the candidate ranking engine."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Job(BaseModel):
    """A job opening, owned by the job store. Read-only to the scorer."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    level: str | None = None
    location: str | None = None
    description: str = ""
    department: str | None = None
    employment_type: str | None = None


class Candidate(BaseModel):
    """A candidate profile, owned by the candidate store."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    years_of_experience: int | None = Field(default=None, ge=0)
    location: str | None = None
    resume_text: str = ""
    current_company: str | None = None
    current_position: str | None = None


class RetrievedCandidate(BaseModel):
    """Wrapper that pairs a frozen Candidate with its retrieval similarity.

    The similarity is not range-checked here; the semantic extractor clamps it.
    """

    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    similarity: float = 0.0


class FeatureScores(BaseModel):
    """The four normalized sub-scores of one (job, candidate) pair."""

    model_config = ConfigDict(frozen=True)

    experience: float = Field(ge=0.0, le=1.0)
    location: float = Field(ge=0.0, le=1.0)
    skills: float = Field(ge=0.0, le=1.0)
    semantic: float = Field(ge=0.0, le=1.0)


class SkillEvidence(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill: str
    evidence: str


class MatchResult(BaseModel):
    """Scored and explained outcome for one (job_id, candidate_id) pair.

    Holds no timestamps or random values: scoring the same inputs twice
    produces identical content.
    """

    model_config = ConfigDict(frozen=True)

    job_id: str
    candidate_id: str
    features: FeatureScores
    final_score: float = Field(ge=0.0, le=1.0)
    confidence: int = Field(ge=60, le=100)
    summary: str
    top_skills: list[SkillEvidence] = Field(default_factory=list, max_length=5)
    confidence_factors: list[str] = Field(default_factory=list)


class RankingFailure(BaseModel):
    """A candidate that was scored but could not be persisted."""

    model_config = ConfigDict(frozen=True)

    candidate_id: str
    reason: str


class BatchResult(BaseModel):
    """Output of one ranking batch: ordered results plus per-candidate failures."""

    job_id: str
    ranked: list[MatchResult] = Field(default_factory=list)
    failures: list[RankingFailure] = Field(default_factory=list)


class RankingRunRecord(BaseModel):
    """Summary of a single ranking batch run."""

    job_id: str
    batch_size: int
    ranked_count: int
    failed_count: int
    started_at: datetime
    finished_at: datetime
