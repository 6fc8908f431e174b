from datetime import date
from typing import List, Optional

from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.common.utils import day_bounds, format_db_datetime, parse_datetime
from clinicdesk.domain.appointments import Appointment

_JOINED_SELECT = '''
    SELECT a.*, p.full_name AS patient_name, p.mrn, p.mobile_no,
           d.full_name AS doctor_name, d.specialty
    FROM appointments a
    LEFT JOIN patients p ON p.id = a.patient_id
    LEFT JOIN doctors d ON d.id = a.doctor_id
'''


class AppointmentRepository:
    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    def create(self, appt: Appointment) -> int:
        cursor = self.db.execute(
            '''INSERT INTO appointments (
                appt_no, patient_id, doctor_id, scheduled_at, duration_min, status, remarks
            ) VALUES (?, ?, ?, ?, ?, ?, ?)''',
            (appt.appt_no, appt.patient_id, appt.doctor_id,
             format_db_datetime(appt.scheduled_at), appt.duration_min,
             appt.status, appt.remarks)
        )
        return cursor.lastrowid

    def get_by_id(self, appt_id: int) -> Optional[Appointment]:
        row = self.db.execute(_JOINED_SELECT + ' WHERE a.id = ?', (appt_id,)).fetchone()
        return self._map_row(row) if row else None

    def list_all(self, patient_id: Optional[int] = None, day: Optional[date] = None) -> List[Appointment]:
        """Denormalised appointments, earliest first."""
        query = _JOINED_SELECT + ' WHERE 1=1'
        params = []

        if patient_id:
            query += ' AND a.patient_id = ?'
            params.append(patient_id)

        if day:
            start, end = day_bounds(day)
            query += ' AND a.scheduled_at >= ? AND a.scheduled_at < ?'
            params.extend([start, end])

        query += ' ORDER BY a.scheduled_at ASC, a.id ASC'
        rows = self.db.execute(query, params).fetchall()
        return [self._map_row(row) for row in rows]

    def list_active(self, doctor_id: Optional[int] = None) -> List[Appointment]:
        """Non-cancelled appointments, of one doctor when `doctor_id` is given."""
        query = "SELECT * FROM appointments WHERE status != 'CANCELLED'"
        params = []
        if doctor_id is not None:
            query += ' AND doctor_id = ?'
            params.append(doctor_id)
        rows = self.db.execute(query + ' ORDER BY scheduled_at', params).fetchall()
        return [self._map_row(row) for row in rows]

    def update_status(self, appt_id: int, status: str):
        self.db.execute('UPDATE appointments SET status = ? WHERE id = ?', (status, appt_id))

    def _map_row(self, row) -> Appointment:
        keys = row.keys()
        return Appointment(
            id=row['id'],
            appt_no=row['appt_no'],
            patient_id=row['patient_id'],
            doctor_id=row['doctor_id'],
            scheduled_at=parse_datetime(row['scheduled_at']),
            duration_min=row['duration_min'],
            status=row['status'],
            remarks=row['remarks'] or '',
            patient_name=row['patient_name'] if 'patient_name' in keys else None,
            mrn=row['mrn'] if 'mrn' in keys else None,
            mobile_no=row['mobile_no'] if 'mobile_no' in keys else None,
            doctor_name=row['doctor_name'] if 'doctor_name' in keys else None,
            specialty=row['specialty'] if 'specialty' in keys else None,
        )
