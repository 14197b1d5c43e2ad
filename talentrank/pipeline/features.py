"""Feature extractors: one normalized sub-score (0.0-1.0) per signal.

Every extractor is a pure function of the job and candidate. Missing inputs
score the extractor's default instead of raising, so a sparse profile is
never dropped from a batch.
"""

from talentrank.core.lexicon import Lexicon
from talentrank.core.schemas import Candidate, FeatureScores, Job, RetrievedCandidate

EXACT_LOCATION_SCORE = 1.0
PARTIAL_LOCATION_SCORE = 0.7
OTHER_LOCATION_SCORE = 0.2

# No job keywords means no information either way.
NEUTRAL_SKILL_SCORE = 0.5


def experience_alignment(job: Job, candidate: Candidate, lexicon: Lexicon) -> float:
    """Score how close the candidate's years are to the level's target years.

    ``max(0, 1 - |years - target| / 10)``; 0.0 when either side is unknown.
    """
    target = lexicon.target_years(job.level)
    years = candidate.years_of_experience
    if target is None or years is None:
        return 0.0
    return max(0.0, 1.0 - abs(years - target) / 10.0)


def location_affinity(job: Job, candidate: Candidate) -> float:
    """1.0 for the same place, 0.7 when one contains the other, 0.2 otherwise."""
    job_loc = _clean(job.location)
    cand_loc = _clean(candidate.location)
    if not job_loc or not cand_loc:
        return 0.0
    if job_loc == cand_loc:
        return EXACT_LOCATION_SCORE
    if job_loc in cand_loc or cand_loc in job_loc:
        return PARTIAL_LOCATION_SCORE
    return OTHER_LOCATION_SCORE


def matched_keywords(
    job: Job, candidate: Candidate, lexicon: Lexicon,
) -> tuple[list[str], list[str]]:
    """Return (relevant, matched) technical keywords for the pair.

    ``relevant`` are keywords found in the job title or description,
    ``matched`` the subset also found in the candidate's resume text.
    """
    job_text = f"{job.title} {job.description}".lower()
    cand_text = candidate.resume_text.lower()
    relevant = [kw for kw in lexicon.tech_keywords if kw in job_text]
    matched = [kw for kw in relevant if kw in cand_text]
    return relevant, matched


def skill_overlap(job: Job, candidate: Candidate, lexicon: Lexicon) -> float:
    """Fraction of the job's technical keywords that the candidate mentions."""
    relevant, matched = matched_keywords(job, candidate, lexicon)
    if not relevant:
        return NEUTRAL_SKILL_SCORE
    return len(matched) / len(relevant)


def semantic_similarity(retrieved: RetrievedCandidate) -> float:
    """Pass through the retrieval similarity, clamped to [0, 1]."""
    return max(0.0, min(1.0, retrieved.similarity))


def extract_features(job: Job, retrieved: RetrievedCandidate, lexicon: Lexicon) -> FeatureScores:
    """Run all four extractors for one (job, candidate) pair."""
    candidate = retrieved.candidate
    return FeatureScores(
        experience=experience_alignment(job, candidate, lexicon),
        location=location_affinity(job, candidate),
        skills=skill_overlap(job, candidate, lexicon),
        semantic=semantic_similarity(retrieved),
    )


def _clean(value: str | None) -> str:
    return (value or "").strip().lower()
