from dataclasses import dataclass
from typing import Optional


class UserRole:
    ADMIN = 'ADMIN'
    RECEPTION = 'RECEPTION'
    DOCTOR = 'DOCTOR'
    PATIENT = 'PATIENT'

    STAFF = (ADMIN, RECEPTION, DOCTOR)


@dataclass
class User:
    """The logged-in identity. Patients log in with their MRN and are not stored here."""
    user_id: int
    username: str
    full_name: str
    role: str
    mrn: Optional[str] = None
    recovery_phone: Optional[str] = None

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def is_patient(self):
        return self.role == UserRole.PATIENT
