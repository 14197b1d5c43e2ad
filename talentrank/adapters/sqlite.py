"""Match sinks: SQLite-backed and in-memory."""

import asyncio
import logging
import sqlite3
import threading

from talentrank.adapters.base import MatchSink
from talentrank.core.db import insert_ranking_run, upsert_match
from talentrank.core.errors import PersistenceError
from talentrank.core.schemas import MatchResult, RankingRunRecord

logger = logging.getLogger(__name__)


class SqliteMatchSink(MatchSink):
    """Writes match results into ``job_candidate_matches``.

    Each write runs in a worker thread so callers can bound it with a timeout.
    Statements on the shared connection are serialised by a connection guard;
    uniqueness per key comes from the table's primary key.

    A write whose caller is cancelled (timeout or batch abandonment) is marked
    abandoned: if it has not started it is skipped, if it is running the
    connection is interrupted, and if its statement still completes the
    transaction is rolled back rather than committed.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._guard = threading.Lock()
        self._state = threading.Lock()
        self._running: threading.Event | None = None
        self._closed = False

    async def upsert(self, result: MatchResult) -> None:
        abandoned = threading.Event()
        try:
            await asyncio.to_thread(self._write, result, abandoned)
        except asyncio.CancelledError:
            with self._state:
                abandoned.set()
                if self._running is abandoned:
                    self._conn.interrupt()
            logger.debug("Abandoned write (%s, %s)", result.job_id, result.candidate_id)
            raise

    def record_run(self, record: RankingRunRecord) -> int:
        """Insert a ranking run row once in-flight writes have drained."""
        with self._guard:
            return insert_ranking_run(self._conn, record)

    def close(self) -> None:
        """Close the connection after any in-flight write has finished."""
        with self._guard:
            self._closed = True
            self._conn.close()

    def _write(self, result: MatchResult, abandoned: threading.Event) -> None:
        with self._guard:
            with self._state:
                if self._closed:
                    msg = f"sink closed before writing ({result.job_id}, {result.candidate_id})"
                    raise PersistenceError(msg)
                if abandoned.is_set():
                    return
                self._running = abandoned
            try:
                stored = upsert_match(self._conn, result, abandoned)
            except sqlite3.Error as e:
                msg = f"upsert failed for ({result.job_id}, {result.candidate_id}): {e}"
                raise PersistenceError(msg) from e
            finally:
                with self._state:
                    self._running = None
        if stored:
            logger.debug("Stored match (%s, %s)", result.job_id, result.candidate_id)
        else:
            logger.debug("Rolled back abandoned match (%s, %s)", result.job_id, result.candidate_id)


class InMemoryMatchSink(MatchSink):
    """Keeps results in a dict keyed by (job_id, candidate_id). Used for dry runs."""

    def __init__(self) -> None:
        self.results: dict[tuple[str, str], MatchResult] = {}

    async def upsert(self, result: MatchResult) -> None:
        self.results[(result.job_id, result.candidate_id)] = result
