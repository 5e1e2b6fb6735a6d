"""Project store.

Persists projects and the notes and links attached to them in SQLite. Every
record belongs to the user that created it.
"""

import json
import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

# Framework text columns on the projects table
FRAMEWORK_COLUMNS = (
    'concept', 'problem_solved',
    'target_market', 'market_validation',
    'business_model', 'value_proposition',
    'action_plan', 'milestones',
    'resources', 'metrics',
)

PROJECT_COLUMNS = (
    'title', 'description', 'category', 'tags', 'status', 'priority',
    'progress', 'current_step', 'source_folder',
) + FRAMEWORK_COLUMNS


class ProjectStoreError(Exception):
    """Raised when a record can't be validated or written."""
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict]:
    if row is None:
        return None
    record = dict(row)
    if 'tags' in record:
        record['tags'] = json.loads(record['tags'] or '[]')
    return record


class ProjectStore:
    """SQLite store for projects, notes and links.

    A single connection is shared by API worker threads; writes are
    serialized with a lock.
    """

    def __init__(self, db_path: str) -> None:
        db_dir = os.path.dirname(db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir)

        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self) -> None:
        """Create tables and indexes if they don't exist."""
        framework_columns = ",\n".join(f"{c} TEXT" for c in FRAMEWORK_COLUMNS)
        cursor = self.conn.cursor()
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS projects (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                title TEXT NOT NULL,
                description TEXT,
                category TEXT,
                tags TEXT,
                status TEXT DEFAULT 'idea',
                priority TEXT DEFAULT 'medium',
                progress INTEGER DEFAULT 0,
                current_step INTEGER DEFAULT 1,
                {framework_columns},
                created_at TEXT
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS notes (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                project_id TEXT REFERENCES projects(id),
                title TEXT NOT NULL,
                content TEXT,
                category TEXT,
                tags TEXT,
                created_at TEXT
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS links (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                project_id TEXT REFERENCES projects(id),
                url TEXT NOT NULL,
                title TEXT,
                description TEXT,
                category TEXT,
                tags TEXT,
                created_at TEXT
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_projects_user ON projects(user_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_notes_project ON notes(project_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_links_project ON links(project_id)")
        self.conn.commit()

        self._migrate_add_columns()

    def _migrate_add_columns(self) -> None:
        """Add new columns to existing databases if they don't exist."""
        cursor = self.conn.cursor()
        cursor.execute("PRAGMA table_info(projects)")
        existing_columns = {row[1] for row in cursor.fetchall()}

        migrations = [
            ("source_folder", "TEXT"),
        ]

        for col_name, col_type in migrations:
            if col_name not in existing_columns:
                cursor.execute(f"ALTER TABLE projects ADD COLUMN {col_name} {col_type}")

        self.conn.commit()

    def _insert(self, table: str, record: Dict) -> Dict:
        columns = ", ".join(record)
        placeholders = ", ".join("?" for _ in record)
        values = [
            json.dumps(v) if k == 'tags' else v
            for k, v in record.items()
        ]
        try:
            with self._lock:
                self.conn.execute(
                    f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", values
                )
                self.conn.commit()
        except sqlite3.Error as e:
            raise ProjectStoreError(f"Failed to write {table} record: {e}")
        return record

    # =========================================================================
    # Writes
    # =========================================================================

    def create_project(self, user_id: str, title: str, **fields) -> Dict:
        """Insert a project and return it as a dict."""
        if not user_id:
            raise ProjectStoreError("A project needs an owner")
        if not title or not title.strip():
            raise ProjectStoreError("A project needs a title")
        unknown = set(fields) - set(PROJECT_COLUMNS)
        if unknown:
            raise ProjectStoreError(f"Unknown project fields: {sorted(unknown)}")

        record = {
            'id': str(uuid.uuid4()),
            'user_id': user_id,
            'title': title.strip(),
            'description': None,
            'category': None,
            'tags': [],
            'status': 'idea',
            'priority': 'medium',
            'progress': 0,
            'current_step': 1,
        }
        record.update(fields)
        record['tags'] = list(record.get('tags') or [])
        record['created_at'] = _now()
        return self._insert('projects', record)

    def create_note(self, user_id: str, project_id: Optional[str], title: str,
                    content: str = "", category: Optional[str] = None,
                    tags: Optional[List[str]] = None) -> Dict:
        """Insert a note attached to a project."""
        if not (title or "").strip() and not (content or "").strip():
            raise ProjectStoreError("A note needs a title or content")
        record = {
            'id': str(uuid.uuid4()),
            'user_id': user_id,
            'project_id': project_id,
            'title': (title or "").strip() or "Note",
            'content': content or "",
            'category': category,
            'tags': list(tags or []),
            'created_at': _now(),
        }
        return self._insert('notes', record)

    def create_link(self, user_id: str, project_id: Optional[str], url: str,
                    title: str = "", description: str = "",
                    category: Optional[str] = None,
                    tags: Optional[List[str]] = None) -> Dict:
        """Insert a link attached to a project."""
        if not (url or "").strip():
            raise ProjectStoreError("A link needs a URL")
        record = {
            'id': str(uuid.uuid4()),
            'user_id': user_id,
            'project_id': project_id,
            'url': url.strip(),
            'title': title or url.strip(),
            'description': description or "",
            'category': category,
            'tags': list(tags or []),
            'created_at': _now(),
        }
        return self._insert('links', record)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_project(self, project_id: str) -> Optional[Dict]:
        cursor = self.conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,))
        return _row_to_dict(cursor.fetchone())

    def list_projects(self, user_id: str) -> List[Dict]:
        cursor = self.conn.execute(
            "SELECT * FROM projects WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (user_id,),
        )
        return [_row_to_dict(row) for row in cursor.fetchall()]

    def list_notes(self, project_id: str) -> List[Dict]:
        cursor = self.conn.execute(
            "SELECT * FROM notes WHERE project_id = ? ORDER BY created_at, rowid", (project_id,)
        )
        return [_row_to_dict(row) for row in cursor.fetchall()]

    def list_links(self, project_id: str) -> List[Dict]:
        cursor = self.conn.execute(
            "SELECT * FROM links WHERE project_id = ? ORDER BY created_at, rowid", (project_id,)
        )
        return [_row_to_dict(row) for row in cursor.fetchall()]

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()
