from typing import List, Optional

from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.common.utils import format_db_datetime, parse_datetime
from clinicdesk.domain.visits import Prescription, Visit, VisitItem


class VisitRepository:
    """Visits together with the items and prescriptions they own."""

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    # ---- Visits ----
    def create(self, visit: Visit) -> int:
        cursor = self.db.execute(
            '''INSERT INTO visits (
                appt_id, visit_date, complaint, diagnosis, treatment, total_amount, status
            ) VALUES (?, ?, ?, ?, ?, ?, ?)''',
            (visit.appt_id, format_db_datetime(visit.visit_date), visit.complaint,
             visit.diagnosis, visit.treatment, visit.total_amount, visit.status)
        )
        return cursor.lastrowid

    def get_by_id(self, visit_id: int) -> Optional[Visit]:
        row = self.db.execute('SELECT * FROM visits WHERE id = ?', (visit_id,)).fetchone()
        return self._load(row) if row else None

    def get_by_appt_id(self, appt_id: int) -> Optional[Visit]:
        row = self.db.execute('SELECT * FROM visits WHERE appt_id = ?', (appt_id,)).fetchone()
        return self._load(row) if row else None

    def update_notes(self, visit_id: int, complaint: str, diagnosis: str, treatment: str):
        self.db.execute(
            'UPDATE visits SET complaint = ?, diagnosis = ?, treatment = ? WHERE id = ?',
            (complaint, diagnosis, treatment, visit_id)
        )

    def set_total(self, visit_id: int, total_amount: float):
        self.db.execute('UPDATE visits SET total_amount = ? WHERE id = ?', (total_amount, visit_id))

    def set_status(self, visit_id: int, status: str):
        self.db.execute('UPDATE visits SET status = ? WHERE id = ?', (status, visit_id))

    # ---- Items ----
    def add_item(self, item: VisitItem) -> int:
        cursor = self.db.execute(
            'INSERT INTO visit_items (visit_id, procedure_id, qty, price, amount) VALUES (?, ?, ?, ?, ?)',
            (item.visit_id, item.procedure_id, item.qty, item.price, item.amount)
        )
        return cursor.lastrowid

    def get_item(self, visit_id: int, item_id: int) -> Optional[VisitItem]:
        row = self.db.execute(
            '''SELECT vi.*, pr.proc_name FROM visit_items vi
               LEFT JOIN procedures pr ON pr.id = vi.procedure_id
               WHERE vi.visit_id = ? AND vi.id = ?''',
            (visit_id, item_id)
        ).fetchone()
        return self._map_item(row) if row else None

    def update_item(self, item: VisitItem):
        self.db.execute(
            'UPDATE visit_items SET procedure_id = ?, qty = ?, price = ?, amount = ? WHERE id = ?',
            (item.procedure_id, item.qty, item.price, item.amount, item.id)
        )

    def delete_item(self, visit_id: int, item_id: int) -> bool:
        cursor = self.db.execute(
            'DELETE FROM visit_items WHERE visit_id = ? AND id = ?', (visit_id, item_id)
        )
        return cursor.rowcount > 0

    def list_items(self, visit_id: int) -> List[VisitItem]:
        rows = self.db.execute(
            '''SELECT vi.*, pr.proc_name FROM visit_items vi
               LEFT JOIN procedures pr ON pr.id = vi.procedure_id
               WHERE vi.visit_id = ? ORDER BY vi.id''',
            (visit_id,)
        ).fetchall()
        return [self._map_item(r) for r in rows]

    # ---- Prescriptions ----
    def add_prescription(self, rx: Prescription) -> int:
        cursor = self.db.execute(
            'INSERT INTO prescriptions (visit_id, medication, instructions) VALUES (?, ?, ?)',
            (rx.visit_id, rx.medication, rx.instructions)
        )
        return cursor.lastrowid

    def get_prescription(self, rx_id: int) -> Optional[Prescription]:
        row = self.db.execute('SELECT * FROM prescriptions WHERE id = ?', (rx_id,)).fetchone()
        return self._map_prescription(row) if row else None

    def update_prescription(self, rx: Prescription):
        self.db.execute(
            'UPDATE prescriptions SET medication = ?, instructions = ? WHERE id = ?',
            (rx.medication, rx.instructions, rx.id)
        )

    def delete_prescription(self, rx_id: int) -> bool:
        cursor = self.db.execute('DELETE FROM prescriptions WHERE id = ?', (rx_id,))
        return cursor.rowcount > 0

    def list_prescriptions(self, visit_id: int) -> List[Prescription]:
        rows = self.db.execute(
            'SELECT * FROM prescriptions WHERE visit_id = ? ORDER BY id', (visit_id,)
        ).fetchall()
        return [self._map_prescription(r) for r in rows]

    # ---- Mapping ----
    def _load(self, row) -> Visit:
        visit = Visit(
            id=row['id'],
            appt_id=row['appt_id'],
            visit_date=parse_datetime(row['visit_date']),
            complaint=row['complaint'],
            diagnosis=row['diagnosis'],
            treatment=row['treatment'],
            total_amount=row['total_amount'],
            status=row['status'],
        )
        visit.items = self.list_items(visit.id)
        visit.prescriptions = self.list_prescriptions(visit.id)
        return visit

    def _map_item(self, row) -> VisitItem:
        return VisitItem(
            id=row['id'],
            visit_id=row['visit_id'],
            procedure_id=row['procedure_id'],
            qty=row['qty'],
            price=row['price'],
            amount=row['amount'],
            proc_name=row['proc_name'] if 'proc_name' in row.keys() else None,
        )

    def _map_prescription(self, row) -> Prescription:
        return Prescription(
            id=row['id'],
            visit_id=row['visit_id'],
            medication=row['medication'],
            instructions=row['instructions'],
        )
