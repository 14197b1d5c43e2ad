"""Composite scoring of (job, candidate) pairs.

final_score = clamp(sum(weight_i * score_i), 0, 1) with weights from
ScoringConfig. Confidence maps the final score onto 60-100, never 0 or a
certainty, via round(final * 85 + 15).
"""

import logging
import math

from talentrank.core.config import ScoringConfig
from talentrank.core.lexicon import Lexicon, load_lexicon
from talentrank.core.schemas import FeatureScores, Job, MatchResult, RetrievedCandidate
from talentrank.pipeline.explainer import (
    build_confidence_factors,
    build_summary,
    extract_top_skills,
)
from talentrank.pipeline.features import extract_features

logger = logging.getLogger(__name__)

CONFIDENCE_SCALE = 85
CONFIDENCE_OFFSET = 15
MIN_CONFIDENCE = 60
MAX_CONFIDENCE = 100


def composite_score(features: FeatureScores, config: ScoringConfig) -> float:
    """Weighted sum of the four sub-scores, clamped to [0, 1]."""
    total = (
        config.skills_weight * features.skills
        + config.semantic_weight * features.semantic
        + config.experience_weight * features.experience
        + config.location_weight * features.location
    )
    return max(0.0, min(1.0, total))


def confidence_for(final_score: float) -> int:
    """Bounded confidence in [60, 100]. Halves round up."""
    raw = math.floor(final_score * CONFIDENCE_SCALE + CONFIDENCE_OFFSET + 0.5)
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, raw))


def score_pair(
    job: Job,
    retrieved: RetrievedCandidate,
    lexicon: Lexicon | None = None,
    config: ScoringConfig | None = None,
) -> MatchResult:
    """Score and explain a single pair. Pure: no I/O, no clock, no randomness."""
    lexicon = lexicon or load_lexicon()
    config = config or ScoringConfig()
    candidate = retrieved.candidate

    features = extract_features(job, retrieved, lexicon)
    final_score = composite_score(features, config)
    top_skills = extract_top_skills(job, candidate, lexicon)

    logger.debug(
        "Scored %s for job %s: final=%.3f (exp=%.2f loc=%.2f skills=%.2f sem=%.2f)",
        candidate.id, job.id, final_score,
        features.experience, features.location, features.skills, features.semantic,
    )

    return MatchResult(
        job_id=job.id,
        candidate_id=candidate.id,
        features=features,
        final_score=final_score,
        confidence=confidence_for(final_score),
        summary=build_summary(job, candidate, final_score, top_skills),
        top_skills=top_skills,
        confidence_factors=build_confidence_factors(job, candidate, features, lexicon),
    )


def rank_results(results: list[MatchResult]) -> list[MatchResult]:
    """Sort by final score descending. Equal scores keep their input order."""
    return sorted(results, key=lambda r: r.final_score, reverse=True)
