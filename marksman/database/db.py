"""
SQLite database manager for Marksman.

Persists stored target patterns (as a HistoryBackend) and AI coaching
feedback. Database file: ~/.marksman/marksman.db
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from marksman.models.session import SessionType
from marksman.models.shot import NormalizedShot, StoredTargetPattern
from marksman.utils.config import Config

logger = logging.getLogger(__name__)

SCHEMA_FILE = Path(__file__).parent / "schema.sql"


class Database:
    """SQLite wrapper implementing the HistoryBackend protocol.

    HistoryStore serializes calls, so one connection is shared across
    threads.
    """

    def __init__(self, db_path: Optional[Path | str] = None):
        self.db_path = db_path or Config.get_db_path()
        self.conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self):
        """Initialize database connection and create tables."""
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        if str(self.db_path) != ":memory:":
            self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")

        # Create tables from schema
        schema = SCHEMA_FILE.read_text()
        self.conn.executescript(schema)
        self.conn.commit()
        logger.info(f"Database initialized at {self.db_path}")

    def close(self):
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    # =========================================================================
    # Target patterns (HistoryBackend)
    # =========================================================================

    def load(self) -> list[StoredTargetPattern]:
        """Load every stored pattern, most recent first."""
        rows = self.conn.execute(
            "SELECT * FROM target_patterns ORDER BY timestamp DESC, rowid DESC"
        ).fetchall()
        return [self._row_to_pattern(r) for r in rows]

    def insert(self, pattern: StoredTargetPattern):
        """Insert a pattern; an existing id raises sqlite3.IntegrityError."""
        shots_json = json.dumps([[s.u, s.v] for s in pattern.normalized_shots])
        with self.conn:
            self.conn.execute("""
                INSERT INTO target_patterns (
                    id, timestamp, session_type, pressure_level,
                    normalized_shots_json, mpi_u, mpi_v,
                    group_radius, outlier_count, shot_count
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                pattern.id, pattern.timestamp.isoformat(),
                pattern.session_type.value, pattern.pressure_level,
                shots_json, pattern.mpi.u, pattern.mpi.v,
                pattern.group_radius, pattern.outlier_count,
                pattern.shot_count,
            ))

    def remove(self, pattern_id: str):
        """Delete one pattern; unknown ids are ignored."""
        with self.conn:
            self.conn.execute(
                "DELETE FROM target_patterns WHERE id = ?", (pattern_id,)
            )

    def clear(self):
        """Delete every pattern."""
        with self.conn:
            self.conn.execute("DELETE FROM target_patterns")
        logger.info("All target patterns deleted")

    def _row_to_pattern(self, r: sqlite3.Row) -> StoredTargetPattern:
        shots = tuple(NormalizedShot(u, v)
                      for u, v in json.loads(r["normalized_shots_json"]))
        return StoredTargetPattern(
            id=r["id"],
            timestamp=datetime.fromisoformat(r["timestamp"]),
            session_type=SessionType(r["session_type"]),
            normalized_shots=shots,
            mpi=NormalizedShot(r["mpi_u"], r["mpi_v"]),
            group_radius=r["group_radius"],
            outlier_count=r["outlier_count"],
        )

    # =========================================================================
    # AI Feedback
    # =========================================================================

    def save_ai_feedback(
        self,
        pattern_id: Optional[str],
        feedback_type: str,
        prompt: str,
        response: str,
        model: str = "claude-sonnet-4-20250514",
        tokens: int = 0,
    ) -> int:
        """Save AI coaching feedback."""
        with self.conn:
            cur = self.conn.execute("""
                INSERT INTO ai_feedback
                    (pattern_id, feedback_type, prompt, response, model, tokens_used)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (pattern_id, feedback_type, prompt, response, model, tokens))
        return cur.lastrowid

    def get_ai_feedback(self, pattern_id: Optional[str] = None,
                        feedback_type: Optional[str] = None) -> list[dict]:
        """Get AI feedback for a pattern or of one type, newest first."""
        if pattern_id:
            rows = self.conn.execute(
                "SELECT * FROM ai_feedback WHERE pattern_id = ? ORDER BY id DESC",
                (pattern_id,),
            ).fetchall()
        elif feedback_type:
            rows = self.conn.execute(
                "SELECT * FROM ai_feedback WHERE feedback_type = ? ORDER BY id DESC",
                (feedback_type,),
            ).fetchall()
        else:
            rows = []
        return [dict(r) for r in rows]
