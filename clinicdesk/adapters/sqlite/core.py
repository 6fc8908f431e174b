import os
import sqlite3
import threading

from clinicdesk.config.settings import Config

# Single-writer critical section shared by every service call on the store.
db_lock = threading.RLock()

_EXTENSION_KEY = 'clinicdesk.db'
_default_db = None


def _load_schema(db) -> None:
    schema_path = os.path.join(os.path.dirname(__file__), 'schema.sql')
    if not os.path.exists(schema_path):
        raise FileNotFoundError(f'schema.sql not found next to {__file__}')
    with open(schema_path, 'r', encoding='utf-8') as f:
        db.executescript(f.read())


def open_db(db_path: str = ':memory:') -> sqlite3.Connection:
    """Open a store and make sure its schema exists. ':memory:' gives a private in-memory store."""
    if db_path != ':memory:':
        db_dir = os.path.dirname(db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

    # Shared across Flask worker threads; every access goes through db_lock.
    db = sqlite3.connect(db_path, check_same_thread=False)
    db.row_factory = sqlite3.Row
    db.execute('PRAGMA foreign_keys = ON')
    _load_schema(db)
    return db


def init_app(app) -> sqlite3.Connection:
    db = open_db(app.config['DATABASE_PATH'])
    app.extensions[_EXTENSION_KEY] = db
    return db


def get_db() -> sqlite3.Connection:
    """The store of the running app, or a process-wide default outside of one."""
    global _default_db
    from flask import current_app, has_app_context

    if has_app_context() and _EXTENSION_KEY in current_app.extensions:
        return current_app.extensions[_EXTENSION_KEY]

    if _default_db is None:
        _default_db = open_db(Config.DATABASE_PATH)
    return _default_db


def next_sequence(db, name: str) -> int:
    """Advance and return the named counter. Runs inside the caller's transaction."""
    db.execute(
        'INSERT INTO sequences (name, value) VALUES (?, 1) '
        'ON CONFLICT(name) DO UPDATE SET value = value + 1',
        (name,)
    )
    return db.execute('SELECT value FROM sequences WHERE name = ?', (name,)).fetchone()['value']


def init_db_command():
    """Drop every clinic table and recreate the schema."""
    db = get_db()
    with db_lock:
        tables = [r['name'] for r in db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
        ).fetchall()]
        db.execute('PRAGMA foreign_keys = OFF')
        for table in tables:
            db.execute(f'DROP TABLE IF EXISTS {table}')
        db.commit()
        db.execute('PRAGMA foreign_keys = ON')
        _load_schema(db)

    print('Initialized the database.')
