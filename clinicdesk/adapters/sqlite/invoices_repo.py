from datetime import date
from typing import Dict, List, Optional

from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.common.utils import day_bounds, format_db_datetime, parse_datetime
from clinicdesk.domain.invoices import Invoice

_JOINED_SELECT = '''
    SELECT i.*, p.full_name AS patient_name, p.mrn
    FROM invoices i
    LEFT JOIN visits v ON v.id = i.visit_id
    LEFT JOIN appointments a ON a.id = v.appt_id
    LEFT JOIN patients p ON p.id = a.patient_id
'''


class InvoiceRepository:
    """Repository for issued invoices."""

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    def create(self, invoice: Invoice) -> int:
        cursor = self.db.execute(
            '''INSERT INTO invoices (
                visit_id, invoice_no, invoice_date, subtotal, total_amount, status
            ) VALUES (?, ?, ?, ?, ?, ?)''',
            (invoice.visit_id, invoice.invoice_no, format_db_datetime(invoice.invoice_date),
             invoice.subtotal, invoice.total_amount, invoice.status)
        )
        return cursor.lastrowid

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        row = self.db.execute(_JOINED_SELECT + ' WHERE i.id = ?', (invoice_id,)).fetchone()
        return self._map_row(row) if row else None

    def get_by_visit_id(self, visit_id: int) -> Optional[Invoice]:
        row = self.db.execute(_JOINED_SELECT + ' WHERE i.visit_id = ?', (visit_id,)).fetchone()
        return self._map_row(row) if row else None

    def list_all(self, search: Optional[str] = None, patient_id: Optional[int] = None) -> List[Invoice]:
        """Invoices with patient name and MRN, newest first."""
        query = _JOINED_SELECT + ' WHERE 1=1'
        params = []

        if search:
            pattern = f'%{search}%'
            query += ' AND (i.invoice_no LIKE ? OR p.mrn LIKE ?)'
            params.extend([pattern, pattern])

        if patient_id:
            query += ' AND a.patient_id = ?'
            params.append(patient_id)

        query += ' ORDER BY i.invoice_date DESC, i.id DESC'
        rows = self.db.execute(query, params).fetchall()
        return [self._map_row(r) for r in rows]

    def get_day_totals(self, day: date) -> Dict:
        start, end = day_bounds(day)
        row = self.db.execute(
            '''SELECT COUNT(*) AS cnt, COALESCE(SUM(total_amount), 0) AS total
               FROM invoices WHERE invoice_date >= ? AND invoice_date < ?''',
            (start, end)
        ).fetchone()
        return {'count': row['cnt'], 'total_amount': float(row['total'])}

    def _map_row(self, row) -> Invoice:
        keys = row.keys()
        return Invoice(
            id=row['id'],
            visit_id=row['visit_id'],
            invoice_no=row['invoice_no'],
            invoice_date=parse_datetime(row['invoice_date']),
            subtotal=row['subtotal'],
            total_amount=row['total_amount'],
            status=row['status'],
            patient_name=row['patient_name'] if 'patient_name' in keys else None,
            mrn=row['mrn'] if 'mrn' in keys else None,
        )
