from dataclasses import dataclass, field
from typing import Optional

from clinicdesk.common.utils import calculate_age


@dataclass
class Patient:
    id: Optional[int]
    mrn: str
    full_name: str
    father_name: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None
    mobile_no: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None
    password_hash: Optional[bytes] = field(default=None, repr=False, compare=False,
                                           metadata={'private': True})

    @property
    def age(self):
        return calculate_age(self.dob)
