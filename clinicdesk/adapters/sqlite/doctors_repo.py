from typing import List, Optional

from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.domain.doctors import Doctor

# Columns a staff edit may change.
EDITABLE_FIELDS = ('doctor_code', 'registration_no', 'full_name', 'specialty', 'active', 'image')


class DoctorRepository:
    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    def get_by_id(self, doctor_id: int) -> Optional[Doctor]:
        row = self.db.execute('SELECT * FROM doctors WHERE id = ?', (doctor_id,)).fetchone()
        return self._map_row(row) if row else None

    def get_by_code(self, doctor_code: str) -> Optional[Doctor]:
        row = self.db.execute(
            'SELECT * FROM doctors WHERE doctor_code = ?', (doctor_code,)
        ).fetchone()
        return self._map_row(row) if row else None

    def list_all(self, active_only: bool = False) -> List[Doctor]:
        query = 'SELECT * FROM doctors'
        if active_only:
            query += " WHERE active = 'Y'"
        rows = self.db.execute(query + ' ORDER BY id').fetchall()
        return [self._map_row(row) for row in rows]

    def create(self, doctor: Doctor) -> int:
        cursor = self.db.execute(
            '''INSERT INTO doctors (doctor_code, registration_no, full_name, specialty, active, image)
               VALUES (?, ?, ?, ?, ?, ?)''',
            (doctor.doctor_code, doctor.registration_no, doctor.full_name,
             doctor.specialty, doctor.active, doctor.image)
        )
        return cursor.lastrowid

    def update(self, doctor: Doctor):
        self.db.execute(
            '''UPDATE doctors SET
                doctor_code=?, registration_no=?, full_name=?, specialty=?, active=?, image=?
               WHERE id=?''',
            (doctor.doctor_code, doctor.registration_no, doctor.full_name,
             doctor.specialty, doctor.active, doctor.image, doctor.id)
        )

    def _map_row(self, row) -> Doctor:
        return Doctor(
            id=row['id'],
            doctor_code=row['doctor_code'],
            registration_no=row['registration_no'],
            full_name=row['full_name'],
            specialty=row['specialty'],
            active=row['active'],
            image=row['image'],
        )
