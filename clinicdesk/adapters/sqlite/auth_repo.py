import sqlite3
from typing import Optional

from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.common.utils import clinic_now, format_db_datetime


class AuthRepository:
    """Low-level DB operations for staff accounts."""

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    def get_raw_by_username(self, username: str) -> Optional[sqlite3.Row]:
        return self.db.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone()

    def update_failed_attempts(self, user_id: int, failed_attempts: int, locked_until: Optional[str]):
        self.db.execute(
            "UPDATE users SET failed_attempts=?, locked_until=? WHERE id=?",
            (failed_attempts, locked_until, user_id),
        )

    def reset_failed_attempts(self, user_id: int):
        self.db.execute(
            "UPDATE users SET failed_attempts=0, locked_until=NULL WHERE id=?",
            (user_id,),
        )

    def set_last_login(self, user_id: int):
        self.db.execute(
            "UPDATE users SET last_login=? WHERE id=?",
            (format_db_datetime(clinic_now()), user_id),
        )

    def create_user(self, username: str, password_hash: bytes, role: str, full_name: Optional[str] = None,
                    recovery_phone: Optional[str] = None) -> int:
        cursor = self.db.execute(
            "INSERT INTO users (username, password_hash, role, full_name, recovery_phone) VALUES (?, ?, ?, ?, ?)",
            (username, password_hash, role, full_name, recovery_phone),
        )
        return cursor.lastrowid

    def update_user_password(self, user_id: int, password_hash: bytes):
        self.db.execute(
            "UPDATE users SET password_hash = ?, failed_attempts = 0, locked_until = NULL WHERE id = ?",
            (password_hash, user_id),
        )
