"""
Database connection manager for Roadworthy Inspections.
SQLite with one connection per request.
"""
import logging
import os
import sqlite3
from flask import g, current_app

logger = logging.getLogger(__name__)

# Columns added after the first release: (table, column, definition)
MIGRATIONS = [
    ('inspections', 'uploaded_to_vicroads_at', 'TEXT'),
]


def connect(db_path):
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


def get_db():
    """Get database connection for current request."""
    if 'db' not in g:
        g.db = connect(current_app.config['DATABASE_PATH'])
    return g.db


def close_db(e=None):
    """Close database connection at end of request."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db(app):
    """Create tables if missing and apply column migrations."""
    app.teardown_appcontext(close_db)

    db_path = app.config['DATABASE_PATH']

    # Ensure data directory exists
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    conn = connect(db_path)
    try:
        schema_path = os.path.join(os.path.dirname(__file__), 'schema.sql')
        with open(schema_path, 'r') as f:
            conn.executescript(f.read())
        apply_migrations(conn)
        conn.commit()
    finally:
        conn.close()
    logger.info("Database initialized at %s", db_path)


def apply_migrations(conn):
    """Add any missing columns. Returns the list of columns added."""
    added = []
    for table, column, definition in MIGRATIONS:
        columns = [row[1] for row in conn.execute(f"PRAGMA table_info({table})")]
        if column in columns:
            continue
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
        logger.info("Added %s column to %s table", column, table)
        added.append(column)
    return added


def query_db(query, args=(), one=False):
    """Execute query and return results."""
    cur = get_db().execute(query, args)
    rv = cur.fetchall()
    cur.close()
    return (rv[0] if rv else None) if one else rv


def execute_db(query, args=()):
    """Execute query and commit. Returns the affected row count."""
    db = get_db()
    cur = db.execute(query, args)
    db.commit()
    return cur.rowcount
