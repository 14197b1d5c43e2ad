"""Tests for the composite scorer."""

import pytest

from talentrank.core.config import ScoringConfig
from talentrank.core.schemas import Candidate, FeatureScores, Job, MatchResult, RetrievedCandidate
from talentrank.pipeline.scorer import composite_score, confidence_for, rank_results, score_pair


def _job(**overrides: object) -> Job:
    defaults: dict[str, object] = {
        "id": "job-1",
        "title": "Senior Backend Engineer",
        "level": "Senior",
        "location": "Remote",
        "description": "Backend role using python and aws.",
    }
    defaults.update(overrides)
    return Job(**defaults)  # type: ignore[arg-type]


def _retrieved(
    cid: str = "cand-1",
    *,
    similarity: float = 0.8,
    years: int | None = 5,
    location: str | None = "remote",
    resume_text: str = "Python developer with five years of Django work.",
) -> RetrievedCandidate:
    return RetrievedCandidate(
        candidate=Candidate(
            id=cid,
            years_of_experience=years,
            location=location,
            resume_text=resume_text,
        ),
        similarity=similarity,
    )


def _features(value: float) -> FeatureScores:
    return FeatureScores(experience=value, location=value, skills=value, semantic=value)


# ---------------------------------------------------------------------------
# Composite score and confidence
# ---------------------------------------------------------------------------


class TestCompositeScore:
    def test_weights_applied(self) -> None:
        f = FeatureScores(experience=0.9, location=1.0, skills=0.5, semantic=0.8)
        assert composite_score(f, ScoringConfig()) == pytest.approx(0.75)

    def test_all_ones(self) -> None:
        assert composite_score(_features(1.0), ScoringConfig()) == pytest.approx(1.0)

    def test_all_zeros(self) -> None:
        assert composite_score(_features(0.0), ScoringConfig()) == 0.0

    def test_custom_weights(self) -> None:
        config = ScoringConfig(
            skills_weight=1.0, semantic_weight=0.0, experience_weight=0.0, location_weight=0.0,
        )
        f = FeatureScores(experience=1.0, location=1.0, skills=0.2, semantic=1.0)
        assert composite_score(f, config) == pytest.approx(0.2)


class TestConfidence:
    def test_example_value(self) -> None:
        assert confidence_for(0.75) == 79

    def test_floor_at_sixty(self) -> None:
        assert confidence_for(0.0) == 60
        assert confidence_for(0.3) == 60

    def test_ceiling_at_hundred(self) -> None:
        assert confidence_for(1.0) == 100

    def test_half_rounds_up(self) -> None:
        # 0.5 * 85 + 15 = 57.5 -> 58 -> clamped to 60; 0.9 * 85 + 15 = 91.5 -> 92
        assert confidence_for(0.9) == 92

    def test_always_in_bounds(self) -> None:
        for i in range(101):
            assert 60 <= confidence_for(i / 100) <= 100


# ---------------------------------------------------------------------------
# score_pair
# ---------------------------------------------------------------------------


class TestScorePair:
    def test_end_to_end_example(self) -> None:
        result = score_pair(_job(), _retrieved())
        assert result.features.experience == pytest.approx(0.9)
        assert result.features.location == 1.0
        assert result.features.skills == 0.5
        assert result.features.semantic == pytest.approx(0.8)
        assert result.final_score == pytest.approx(0.75)
        assert result.confidence == 79
        assert result.summary.startswith("Good match for Senior Backend Engineer.")
        assert [s.skill for s in result.top_skills] == ["python"]

    def test_key_fields(self) -> None:
        result = score_pair(_job(id="j9"), _retrieved("c9"))
        assert (result.job_id, result.candidate_id) == ("j9", "c9")

    def test_deterministic(self) -> None:
        first = score_pair(_job(), _retrieved())
        second = score_pair(_job(), _retrieved())
        assert first.model_dump_json() == second.model_dump_json()

    def test_missing_years_scores_zero_experience(self) -> None:
        result = score_pair(_job(), _retrieved(years=None))
        assert result.features.experience == 0.0
        assert "unspecified" in result.summary

    def test_no_keywords_neutral_skill_score(self) -> None:
        job = _job(title="Office Manager", description="Manage the office calendar.")
        for text in ("", "Python and AWS", "Office work"):
            assert score_pair(job, _retrieved(resume_text=text)).features.skills == 0.5

    def test_bounds_with_sparse_and_extreme_inputs(self) -> None:
        cases = [
            _retrieved(similarity=5.0, years=50, location=None, resume_text=""),
            _retrieved(similarity=-1.0, years=0, location="Mars"),
            _retrieved(similarity=1.0, years=6, resume_text="python aws"),
        ]
        for r in cases:
            result = score_pair(_job(), r)
            for value in result.features.model_dump().values():
                assert 0.0 <= value <= 1.0
            assert 0.0 <= result.final_score <= 1.0
            assert 60 <= result.confidence <= 100


# ---------------------------------------------------------------------------
# Ranking order
# ---------------------------------------------------------------------------


class TestRankResults:
    def _result(self, cid: str, score: float) -> MatchResult:
        return MatchResult(
            job_id="job-1",
            candidate_id=cid,
            features=_features(score),
            final_score=score,
            confidence=confidence_for(score),
            summary="",
        )

    def test_sorted_descending(self) -> None:
        ranked = rank_results([self._result("a", 0.2), self._result("b", 0.9), self._result("c", 0.5)])
        assert [r.candidate_id for r in ranked] == ["b", "c", "a"]

    def test_ties_keep_input_order(self) -> None:
        results = [
            self._result("z", 0.5),
            self._result("top", 0.9),
            self._result("a", 0.5),
            self._result("m", 0.5),
        ]
        ranked = rank_results(results)
        assert [r.candidate_id for r in ranked] == ["top", "z", "a", "m"]

    def test_empty(self) -> None:
        assert rank_results([]) == []
