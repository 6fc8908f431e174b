from dataclasses import dataclass
from typing import Optional


@dataclass
class Doctor:
    id: Optional[int]
    doctor_code: str
    full_name: str
    specialty: str
    registration_no: Optional[str] = None
    active: str = 'Y'
    image: Optional[str] = None

    @property
    def is_active(self):
        return self.active == 'Y'
