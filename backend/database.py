"""SQLite database setup and report storage.

Table: seo_reports
- id (text, primary key)
- url, title, description, keywords (text)
- headings, meta_tags (JSON text)
- ai_analysis (text)
- title_length, description_length (integer)
- has_title, has_description, has_keywords, has_h1 (integer 0/1)
- created_at, updated_at (ISO datetime text)

Table: analysis_history
- id (text, primary key)
- url (text)
- status (pending | success | error)
- error (text, nullable)
- created_at, updated_at (ISO datetime text)
"""

import sqlite3
import uuid
from datetime import datetime, timezone

import config
from models import AnalysisStatus, ReportRecord

_BOOL_COLUMNS = ("has_title", "has_description", "has_keywords", "has_h1")

_SUMMARY_COLUMNS = (
    "id, url, title, description, title_length, description_length, "
    "has_title, has_description, has_keywords, has_h1, created_at, updated_at"
)


def get_connection() -> sqlite3.Connection:
    """Return a connection to the SQLite database."""
    conn = sqlite3.connect(config.DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _new_id() -> str:
    return uuid.uuid4().hex


def _row_to_report(row: sqlite3.Row) -> dict:
    report = dict(row)
    for column in _BOOL_COLUMNS:
        if column in report:
            report[column] = bool(report[column])
    return report


def init_db() -> None:
    """Create the tables if they do not exist."""
    conn = get_connection()
    try:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS seo_reports (
                id TEXT PRIMARY KEY,
                url TEXT NOT NULL,
                title TEXT,
                description TEXT,
                keywords TEXT,
                headings TEXT,
                meta_tags TEXT,
                ai_analysis TEXT NOT NULL,
                title_length INTEGER NOT NULL DEFAULT 0,
                description_length INTEGER NOT NULL DEFAULT 0,
                has_title INTEGER NOT NULL DEFAULT 0,
                has_description INTEGER NOT NULL DEFAULT 0,
                has_keywords INTEGER NOT NULL DEFAULT 0,
                has_h1 INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS analysis_history (
                id TEXT PRIMARY KEY,
                url TEXT NOT NULL,
                status TEXT NOT NULL,
                error TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_seo_reports_created_at ON seo_reports (created_at)")
        conn.commit()
    finally:
        conn.close()


def insert_report(record: ReportRecord) -> dict:
    """Store a new report and return it as read back from the table."""
    report_id = _new_id()
    now = _now()
    conn = get_connection()
    try:
        conn.execute(
            """
            INSERT INTO seo_reports (
                id, url, title, description, keywords, headings, meta_tags, ai_analysis,
                title_length, description_length, has_title, has_description, has_keywords, has_h1,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                report_id,
                record["url"],
                record["title"],
                record["description"],
                record["keywords"],
                record["headings"],
                record["meta_tags"],
                record["ai_analysis"],
                record["title_length"],
                record["description_length"],
                int(record["has_title"]),
                int(record["has_description"]),
                int(record["has_keywords"]),
                int(record["has_h1"]),
                now,
                now,
            ),
        )
        conn.commit()
        row = conn.execute("SELECT * FROM seo_reports WHERE id = ?", (report_id,)).fetchone()
        return _row_to_report(row)
    finally:
        conn.close()


def get_report(report_id: str) -> dict | None:
    """Fetch a report by id, or None."""
    conn = get_connection()
    try:
        row = conn.execute("SELECT * FROM seo_reports WHERE id = ?", (report_id,)).fetchone()
        return _row_to_report(row) if row is not None else None
    finally:
        conn.close()


def delete_report(report_id: str) -> bool:
    """Delete a report. Returns False when no such id exists."""
    conn = get_connection()
    try:
        cursor = conn.execute("DELETE FROM seo_reports WHERE id = ?", (report_id,))
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_reports(limit: int = 10, offset: int = 0, url_filter: str | None = None) -> tuple[list[dict], int]:
    """Return one page of report summaries (newest first) and the total match count."""
    where = ""
    params: list = []
    if url_filter:
        where = "WHERE LOWER(url) LIKE '%' || LOWER(?) || '%' ESCAPE '\\'"
        params.append(_escape_like(url_filter))

    conn = get_connection()
    try:
        total = conn.execute(f"SELECT COUNT(*) FROM seo_reports {where}", params).fetchone()[0]
        rows = conn.execute(
            f"""
            SELECT {_SUMMARY_COLUMNS}
            FROM seo_reports
            {where}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
            """,
            [*params, limit, offset],
        ).fetchall()
        return [_row_to_report(row) for row in rows], total
    finally:
        conn.close()


def create_analysis_history(url: str) -> str:
    """Record a new pending analysis attempt and return its id."""
    history_id = _new_id()
    now = _now()
    conn = get_connection()
    try:
        conn.execute(
            "INSERT INTO analysis_history (id, url, status, error, created_at, updated_at) VALUES (?, ?, ?, NULL, ?, ?)",
            (history_id, url, "pending", now, now),
        )
        conn.commit()
        return history_id
    finally:
        conn.close()


def update_analysis_history(history_id: str, status: AnalysisStatus, error: str | None = None) -> bool:
    """
    Move a pending attempt to its terminal status.
    Only pending rows are touched, so an attempt transitions at most once.
    """
    conn = get_connection()
    try:
        cursor = conn.execute(
            "UPDATE analysis_history SET status = ?, error = ?, updated_at = ? WHERE id = ? AND status = 'pending'",
            (status, error, _now(), history_id),
        )
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()


def get_analysis_history(history_id: str) -> dict | None:
    conn = get_connection()
    try:
        row = conn.execute("SELECT * FROM analysis_history WHERE id = ?", (history_id,)).fetchone()
        return dict(row) if row is not None else None
    finally:
        conn.close()
