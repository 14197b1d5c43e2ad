"""SQLite database layer for match results and ranking run tracking."""

import json
import sqlite3
import threading
from pathlib import Path

from talentrank.core.schemas import (
    FeatureScores,
    MatchResult,
    RankingRunRecord,
    SkillEvidence,
)

_MATCHES_TABLE = """
CREATE TABLE IF NOT EXISTS job_candidate_matches (
    job_id              TEXT    NOT NULL,
    candidate_id        TEXT    NOT NULL,
    experience_score    REAL    NOT NULL,
    location_score      REAL    NOT NULL,
    skills_score        REAL    NOT NULL,
    similarity_score    REAL    NOT NULL,
    final_score         REAL    NOT NULL,
    confidence          INTEGER NOT NULL,
    screening_summary   TEXT    NOT NULL DEFAULT '',
    top_skills_json     TEXT    NOT NULL DEFAULT '[]',
    confidence_factors_json TEXT NOT NULL DEFAULT '[]',
    PRIMARY KEY (job_id, candidate_id)
);
"""

_RANKING_RUNS_TABLE = """
CREATE TABLE IF NOT EXISTS ranking_runs (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id          TEXT NOT NULL,
    batch_size      INTEGER NOT NULL,
    ranked_count    INTEGER NOT NULL,
    failed_count    INTEGER NOT NULL,
    started_at      TEXT NOT NULL,
    finished_at     TEXT NOT NULL
);
"""


def init_db(path: str | Path, timeout: float = 5.0) -> sqlite3.Connection:
    """Create the database and tables, returning a connection.

    The connection may be used from worker threads; callers serialise access.
    ``timeout`` is SQLite's busy timeout in seconds.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_MATCHES_TABLE)
    conn.execute(_RANKING_RUNS_TABLE)
    conn.commit()
    return conn


def upsert_match(
    conn: sqlite3.Connection,
    result: MatchResult,
    abandoned: threading.Event | None = None,
) -> bool:
    """Insert a match, replacing every field if (job_id, candidate_id) exists.

    The write is a single statement committed on its own, so a failure leaves
    any previously stored row untouched. If ``abandoned`` is set by the time
    the statement has run, the transaction is rolled back instead of committed.

    Returns True if the row was committed.
    """
    f = result.features
    try:
        conn.execute(
            """
            INSERT INTO job_candidate_matches
                (job_id, candidate_id, experience_score, location_score,
                 skills_score, similarity_score, final_score, confidence,
                 screening_summary, top_skills_json, confidence_factors_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(job_id, candidate_id)
            DO UPDATE SET
                experience_score = excluded.experience_score,
                location_score = excluded.location_score,
                skills_score = excluded.skills_score,
                similarity_score = excluded.similarity_score,
                final_score = excluded.final_score,
                confidence = excluded.confidence,
                screening_summary = excluded.screening_summary,
                top_skills_json = excluded.top_skills_json,
                confidence_factors_json = excluded.confidence_factors_json
            """,
            (
                result.job_id,
                result.candidate_id,
                f.experience,
                f.location,
                f.skills,
                f.semantic,
                result.final_score,
                result.confidence,
                result.summary,
                json.dumps([s.model_dump() for s in result.top_skills]),
                json.dumps(result.confidence_factors),
            ),
        )
        if abandoned is not None and abandoned.is_set():
            conn.rollback()
            return False
        conn.commit()
        return True
    except sqlite3.Error:
        conn.rollback()
        raise


def get_matches(conn: sqlite3.Connection, job_id: str) -> list[MatchResult]:
    """Return stored matches for a job, best first (ties by candidate id)."""
    rows = conn.execute(
        """
        SELECT * FROM job_candidate_matches
        WHERE job_id = ?
        ORDER BY final_score DESC, candidate_id
        """,
        (job_id,),
    ).fetchall()
    return [_row_to_match(row) for row in rows]


def count_matches(conn: sqlite3.Connection, job_id: str | None = None) -> int:
    """Count stored matches, optionally for a single job."""
    if job_id is None:
        row = conn.execute("SELECT COUNT(*) FROM job_candidate_matches").fetchone()
    else:
        row = conn.execute(
            "SELECT COUNT(*) FROM job_candidate_matches WHERE job_id = ?",
            (job_id,),
        ).fetchone()
    return int(row[0])


def insert_ranking_run(conn: sqlite3.Connection, record: RankingRunRecord) -> int:
    """Record a completed ranking batch. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO ranking_runs
            (job_id, batch_size, ranked_count, failed_count, started_at, finished_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            record.job_id,
            record.batch_size,
            record.ranked_count,
            record.failed_count,
            record.started_at.isoformat(),
            record.finished_at.isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def _row_to_match(row: sqlite3.Row) -> MatchResult:
    return MatchResult(
        job_id=row["job_id"],
        candidate_id=row["candidate_id"],
        features=FeatureScores(
            experience=row["experience_score"],
            location=row["location_score"],
            skills=row["skills_score"],
            semantic=row["similarity_score"],
        ),
        final_score=row["final_score"],
        confidence=row["confidence"],
        summary=row["screening_summary"],
        top_skills=[SkillEvidence(**s) for s in json.loads(row["top_skills_json"])],
        confidence_factors=json.loads(row["confidence_factors_json"]),
    )
