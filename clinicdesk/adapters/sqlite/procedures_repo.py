from typing import List, Optional

from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.domain.procedures import Procedure


class ProcedureRepository:
    """Repository for the procedure catalog (read-only for the clinic workflow)."""

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    def get_by_id(self, procedure_id: int) -> Optional[Procedure]:
        row = self.db.execute(
            'SELECT * FROM procedures WHERE id = ?', (procedure_id,)
        ).fetchone()
        return self._map_row(row) if row else None

    def list_all(self) -> List[Procedure]:
        rows = self.db.execute('SELECT * FROM procedures ORDER BY code').fetchall()
        return [self._map_row(row) for row in rows]

    def add_catalog_entry(self, code: str, proc_name: str, price: float, description: str = '') -> int:
        """Used by the seed loader only."""
        if price < 0:
            raise ValueError('Procedure price cannot be negative')
        cursor = self.db.execute(
            'INSERT INTO procedures (code, proc_name, description, price) VALUES (?, ?, ?, ?)',
            (code, proc_name, description, price)
        )
        return cursor.lastrowid

    def _map_row(self, row) -> Procedure:
        return Procedure(
            id=row['id'],
            code=row['code'],
            proc_name=row['proc_name'],
            description=row['description'],
            price=row['price'],
        )
