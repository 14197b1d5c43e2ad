"""Tests for the SQLite and in-memory match sinks."""

import asyncio
import sqlite3
from datetime import datetime
from pathlib import Path

import pytest

from talentrank.adapters.sqlite import InMemoryMatchSink, SqliteMatchSink
from talentrank.core.db import count_matches, get_matches, init_db
from talentrank.core.errors import PersistenceError
from talentrank.core.schemas import FeatureScores, MatchResult, RankingRunRecord


def _match(candidate_id: str = "c1", score: float = 0.5) -> MatchResult:
    return MatchResult(
        job_id="job-1",
        candidate_id=candidate_id,
        features=FeatureScores(experience=0.0, location=0.0, skills=0.5, semantic=score),
        final_score=score,
        confidence=70,
        summary="Fair match.",
    )


class TestSqliteMatchSink:
    @pytest.fixture
    def db(self, tmp_path: Path) -> sqlite3.Connection:
        return init_db(tmp_path / "test.db")

    async def test_upsert_writes_row(self, db: sqlite3.Connection) -> None:
        sink = SqliteMatchSink(db)
        await sink.upsert(_match("c1"))
        assert count_matches(db, "job-1") == 1

    async def test_upsert_is_idempotent(self, db: sqlite3.Connection) -> None:
        sink = SqliteMatchSink(db)
        await sink.upsert(_match("c1", score=0.2))
        await sink.upsert(_match("c1", score=0.6))
        stored = get_matches(db, "job-1")
        assert len(stored) == 1
        assert stored[0].final_score == 0.6

    async def test_sqlite_error_wrapped(self, db: sqlite3.Connection) -> None:
        db.execute("DROP TABLE job_candidate_matches")
        db.commit()
        sink = SqliteMatchSink(db)
        with pytest.raises(PersistenceError, match="c1"):
            await sink.upsert(_match("c1"))

    async def test_cancelled_write_is_not_committed(self, tmp_path: Path) -> None:
        path = tmp_path / "locked.db"
        sink = SqliteMatchSink(init_db(path))
        blocker = sqlite3.connect(path, isolation_level=None)
        blocker.execute("BEGIN EXCLUSIVE")
        try:
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(sink.upsert(_match("c1")), timeout=0.2)
        finally:
            blocker.execute("COMMIT")
            blocker.close()
        # close waits for the worker that was still blocked on the lock
        await asyncio.to_thread(sink.close)

        check = init_db(path)
        try:
            assert count_matches(check, "job-1") == 0
        finally:
            check.close()

    async def test_upsert_after_close_fails(self, db: sqlite3.Connection) -> None:
        sink = SqliteMatchSink(db)
        sink.close()
        with pytest.raises(PersistenceError, match="closed"):
            await sink.upsert(_match("c1"))

    def test_record_run(self, db: sqlite3.Connection) -> None:
        sink = SqliteMatchSink(db)
        now = datetime.now()
        row_id = sink.record_run(
            RankingRunRecord(
                job_id="job-1", batch_size=2, ranked_count=2, failed_count=0,
                started_at=now, finished_at=now,
            ),
        )
        row = db.execute("SELECT * FROM ranking_runs WHERE id = ?", (row_id,)).fetchone()
        assert row["ranked_count"] == 2


class TestInMemoryMatchSink:
    async def test_keyed_by_pair(self) -> None:
        sink = InMemoryMatchSink()
        await sink.upsert(_match("c1", score=0.2))
        await sink.upsert(_match("c1", score=0.4))
        await sink.upsert(_match("c2"))
        assert len(sink.results) == 2
        assert sink.results[("job-1", "c1")].final_score == 0.4
