from typing import List, Optional

from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.domain.patients import Patient


class PatientRepository:
    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    def get_by_id(self, patient_id: int) -> Optional[Patient]:
        row = self.db.execute(
            'SELECT * FROM patients WHERE id = ?', (patient_id,)
        ).fetchone()
        return self._map_row(row) if row else None

    def get_by_mrn(self, mrn: str) -> Optional[Patient]:
        """Case-insensitive exact match (the column is COLLATE NOCASE)."""
        row = self.db.execute(
            'SELECT * FROM patients WHERE mrn = ?', (mrn,)
        ).fetchone()
        return self._map_row(row) if row else None

    def list_by_mobile(self, mobile_no: str) -> List[Patient]:
        rows = self.db.execute(
            'SELECT * FROM patients WHERE mobile_no = ? ORDER BY id', (mobile_no,)
        ).fetchall()
        return [self._map_row(row) for row in rows]

    def list_all(self) -> List[Patient]:
        rows = self.db.execute('SELECT * FROM patients ORDER BY id').fetchall()
        return [self._map_row(row) for row in rows]

    def search(self, query: str) -> List[Patient]:
        pattern = f'%{query}%'
        rows = self.db.execute(
            '''SELECT * FROM patients
               WHERE full_name LIKE ? OR mrn LIKE ? OR mobile_no LIKE ?
               ORDER BY id''',
            (pattern, pattern, pattern)
        ).fetchall()
        return [self._map_row(row) for row in rows]

    def create(self, patient: Patient) -> int:
        cursor = self.db.execute(
            '''INSERT INTO patients (
                mrn, password_hash, full_name, father_name, dob, gender, mobile_no, address
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)''',
            (patient.mrn, patient.password_hash, patient.full_name, patient.father_name,
             patient.dob, patient.gender, patient.mobile_no, patient.address)
        )
        return cursor.lastrowid

    def update_password(self, patient_id: int, password_hash: bytes):
        self.db.execute(
            'UPDATE patients SET password_hash = ? WHERE id = ?',
            (password_hash, patient_id)
        )

    def _map_row(self, row) -> Patient:
        return Patient(
            id=row['id'],
            mrn=row['mrn'],
            full_name=row['full_name'],
            father_name=row['father_name'],
            dob=row['dob'],
            gender=row['gender'],
            mobile_no=row['mobile_no'],
            address=row['address'],
            created_at=row['created_at'],
            password_hash=row['password_hash'],
        )
