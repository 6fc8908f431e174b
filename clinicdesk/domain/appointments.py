from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional


class AppointmentStatus:
    SCHEDULED = 'SCHEDULED'
    CHECKED_IN = 'CHECKED_IN'
    IN_PROGRESS = 'IN_PROGRESS'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'
    NO_SHOW = 'NO_SHOW'

    ALL = (SCHEDULED, CHECKED_IN, IN_PROGRESS, COMPLETED, CANCELLED, NO_SHOW)


@dataclass
class Appointment:
    id: Optional[int]
    appt_no: str
    patient_id: int
    doctor_id: Optional[int]
    scheduled_at: datetime
    duration_min: int
    status: str = AppointmentStatus.SCHEDULED
    remarks: str = ''

    # Joined fields (optional)
    patient_name: Optional[str] = None
    mrn: Optional[str] = None
    mobile_no: Optional[str] = None
    doctor_name: Optional[str] = None
    specialty: Optional[str] = None

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(minutes=self.duration_min)


def find_conflict(existing: Iterable[Appointment], start: datetime, duration_min: int,
                  buffer_min: int) -> Optional[Appointment]:
    """
    First non-cancelled appointment whose busy interval, widened by `buffer_min`
    on each side, intersects [start, start + duration_min).
    """
    end = start + timedelta(minutes=duration_min)
    gap = timedelta(minutes=buffer_min)
    for appt in existing:
        if appt.status == AppointmentStatus.CANCELLED:
            continue
        if start < appt.ends_at + gap and end > appt.scheduled_at - gap:
            return appt
    return None
