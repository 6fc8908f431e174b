from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional


class VisitStatus:
    OPEN = 'OPEN'
    BILLED = 'BILLED'
    CLOSED = 'CLOSED'  # reserved


@dataclass
class VisitItem:
    id: Optional[int]
    visit_id: int
    procedure_id: int
    price: float
    qty: int = 1
    amount: float = 0

    # Joined fields (optional)
    proc_name: Optional[str] = None


@dataclass
class Prescription:
    id: Optional[int]
    visit_id: int
    medication: str
    instructions: str = ''


@dataclass
class Visit:
    id: Optional[int]
    appt_id: int
    visit_date: datetime
    complaint: str = ''
    diagnosis: str = ''
    treatment: str = ''
    total_amount: float = 0
    status: str = VisitStatus.OPEN
    items: List[VisitItem] = field(default_factory=list)
    prescriptions: List[Prescription] = field(default_factory=list)


# Clinical notes that a partial visit update may touch.
NOTE_FIELDS = ('complaint', 'diagnosis', 'treatment')


def visit_total(items: Iterable[VisitItem]) -> float:
    return sum(item.amount for item in items)
