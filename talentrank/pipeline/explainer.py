"""Deterministic, template-driven explanations for match results.

Bands by final score:
  >= 0.8  Excellent
  >= 0.6  Good
  >= 0.4  Fair
  else    Limited
"""

from talentrank.core.config import ScoringConfig
from talentrank.core.lexicon import Lexicon
from talentrank.core.schemas import (
    BatchResult,
    Candidate,
    FeatureScores,
    Job,
    MatchResult,
    SkillEvidence,
)
from talentrank.pipeline.features import EXACT_LOCATION_SCORE, PARTIAL_LOCATION_SCORE

MAX_TOP_SKILLS = 5
SKILL_EVIDENCE = "mentioned in profile and required for role"

_BANDS: list[tuple[float, str]] = [
    (0.8, "Excellent"),
    (0.6, "Good"),
    (0.4, "Fair"),
]

_CLOSINGS: list[tuple[float, str]] = [
    (0.7, "Strong technical background and good role alignment."),
    (0.5, "Decent fit with some gaps to assess."),
]
_DEFAULT_CLOSING = "Potential candidate but requires careful evaluation."

# Scores are weighted float sums; snap them before comparing against band edges.
_EDGE_DIGITS = 9


def score_band(final_score: float) -> str:
    score = round(final_score, _EDGE_DIGITS)
    for threshold, band in _BANDS:
        if score >= threshold:
            return band
    return "Limited"


def extract_top_skills(job: Job, candidate: Candidate, lexicon: Lexicon) -> list[SkillEvidence]:
    """Skills whose variants appear in both the job description and the resume.

    Lexicon order, at most five, never padded.
    """
    job_text = job.description.lower()
    cand_text = candidate.resume_text.lower()
    skills: list[SkillEvidence] = []
    for skill, variants in lexicon.skills.items():
        in_profile = any(v in cand_text for v in variants)
        required = any(v in job_text for v in variants)
        if in_profile and required:
            skills.append(SkillEvidence(skill=skill, evidence=SKILL_EVIDENCE))
            if len(skills) == MAX_TOP_SKILLS:
                break
    return skills


def describe_experience(years: int | None) -> str:
    if years is None:
        return "unspecified"
    return f"{years} year" if years == 1 else f"{years} years"


def build_summary(
    job: Job,
    candidate: Candidate,
    final_score: float,
    top_skills: list[SkillEvidence],
) -> str:
    """One-paragraph screening summary: band, experience, matched skills."""
    band = score_band(final_score)
    experience = describe_experience(candidate.years_of_experience)
    skills_text = ", ".join(s.skill for s in top_skills) if top_skills else "general skills"
    score = round(final_score, _EDGE_DIGITS)
    closing = next((text for threshold, text in _CLOSINGS if score >= threshold), _DEFAULT_CLOSING)
    return (
        f"{band} match for {job.title}. "
        f"Candidate has {experience} experience with {skills_text}. "
        f"{closing}"
    )


def build_confidence_factors(
    job: Job,
    candidate: Candidate,
    features: FeatureScores,
    lexicon: Lexicon,
) -> list[str]:
    """Short human-readable notes on which signals contributed to the score."""
    factors: list[str] = []

    target = lexicon.target_years(job.level)
    if target is not None and candidate.years_of_experience is not None:
        factors.append(
            f"Experience: {candidate.years_of_experience} years (target: {target})"
        )

    if features.location == EXACT_LOCATION_SCORE:
        factors.append("Location: Perfect match")
    elif features.location == PARTIAL_LOCATION_SCORE:
        factors.append("Location: Partial match")
    elif features.location > 0.0:
        factors.append("Location: Different region")

    factors.append(f"Skills relevance: {features.skills * 100:.0f}%")
    factors.append(f"Resume similarity: {features.semantic * 100:.0f}%")
    return factors


def format_shortlist(
    batch: BatchResult,
    job: Job,
    candidates: dict[str, Candidate] | None = None,
    config: ScoringConfig | None = None,
    top_n: int = 3,
) -> str:
    """Render the top of a ranked batch as a plain-text shortlist report."""
    config = config or ScoringConfig()
    candidates = candidates or {}
    lines = [f"Shortlist for {job.title} ({job.id})"]

    if not batch.ranked:
        lines.append("No candidates ranked.")
    for i, result in enumerate(batch.ranked[:top_n], start=1):
        lines.append("")
        lines.extend(_format_entry(i, result, candidates.get(result.candidate_id), config))

    remaining = len(batch.ranked) - top_n
    if remaining > 0:
        lines.append("")
        lines.append(f"+ {remaining} more candidates in the full ranking.")

    if batch.failures:
        lines.append("")
        lines.append(f"{len(batch.failures)} candidates could not be saved:")
        for failure in batch.failures:
            lines.append(f"  - {failure.candidate_id}: {failure.reason}")

    return "\n".join(lines)


def _format_entry(
    rank: int,
    result: MatchResult,
    candidate: Candidate | None,
    config: ScoringConfig,
) -> list[str]:
    name = candidate.name if candidate and candidate.name else result.candidate_id
    f = result.features
    skills = ", ".join(s.skill for s in result.top_skills) or "none detected"
    lines = [
        f"{rank}. {name} [{score_band(result.final_score)}]",
        f"   Overall Score: {round(result.final_score * 100)}/100 | Confidence: {result.confidence}%",
        f"   {result.summary}",
        f"   Key Skills: {skills}",
        "   Score Breakdown:",
        _breakdown_line("Experience Match", f.experience, config.experience_weight),
        _breakdown_line("Location Fit", f.location, config.location_weight),
        _breakdown_line("Skills Relevance", f.skills, config.skills_weight),
        _breakdown_line("Resume Similarity", f.semantic, config.semantic_weight),
    ]
    if candidate and (candidate.current_position or candidate.current_company):
        role = " at ".join(p for p in (candidate.current_position, candidate.current_company) if p)
        lines.append(f"   Current: {role}")
    return lines


def _breakdown_line(label: str, score: float, weight: float) -> str:
    points = round(weight * 100)
    return f"   - {label}: {round(score * points)}/{points}"
