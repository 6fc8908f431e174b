from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from clinicdesk.domain.doctors import Doctor
from clinicdesk.domain.patients import Patient
from clinicdesk.domain.visits import Prescription, Visit, VisitItem


class InvoiceStatus:
    UNPAID = 'UNPAID'
    PAID = 'PAID'
    CANCELLED = 'CANCELLED'


@dataclass
class Invoice:
    id: Optional[int]
    visit_id: int
    invoice_no: str
    invoice_date: datetime
    subtotal: float
    total_amount: float
    status: str = InvoiceStatus.UNPAID

    # Joined fields (optional)
    patient_name: Optional[str] = None
    mrn: Optional[str] = None


@dataclass
class InvoiceDetails:
    """Everything the invoice, receipt and prescription documents print."""
    invoice: Invoice
    visit: Visit
    patient: Patient
    doctor: Doctor
    items: List[VisitItem] = field(default_factory=list)
    prescriptions: List[Prescription] = field(default_factory=list)


def format_invoice_no(year: int, sequence: int) -> str:
    return f"INV-{year}-{sequence:04d}"
