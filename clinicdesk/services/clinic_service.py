import math
from datetime import date, timedelta
from typing import List, Optional

from clinicdesk.adapters.sqlite.appointments_repo import AppointmentRepository
from clinicdesk.adapters.sqlite.core import get_db, next_sequence
from clinicdesk.adapters.sqlite.doctors_repo import EDITABLE_FIELDS, DoctorRepository
from clinicdesk.adapters.sqlite.invoices_repo import InvoiceRepository
from clinicdesk.adapters.sqlite.patients_repo import PatientRepository
from clinicdesk.adapters.sqlite.procedures_repo import ProcedureRepository
from clinicdesk.adapters.sqlite.visits_repo import VisitRepository
from clinicdesk.common.errors import NotFound, SchedulingConflict, ValidationError
from clinicdesk.common.utils import (
    canonical_mrn, clinic_now, format_mrn, generate_appointment_no, mrn_candidates, parse_datetime,
)
from clinicdesk.common.validators import validate_dob, validate_gender, validate_mobile_no
from clinicdesk.config.settings import current_settings
from clinicdesk.domain.appointments import Appointment, AppointmentStatus, find_conflict
from clinicdesk.domain.doctors import Doctor
from clinicdesk.domain.invoices import Invoice, InvoiceDetails, format_invoice_no
from clinicdesk.domain.patients import Patient
from clinicdesk.domain.procedures import Procedure
from clinicdesk.domain.visits import NOTE_FIELDS, Prescription, Visit, VisitItem, VisitStatus, visit_total
from clinicdesk.services.activity_logger import ActionCategory, ActionType, log_activity
from clinicdesk.services.auth_service import hash_password
from clinicdesk.services.transactions import synchronized, transactional


def _require_int(value, name: str, entity: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} is required', entity)
    if number <= 0:
        raise ValidationError(f'{name} is required', entity)
    return number


def _price(value, entity: str) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError('Price must be a number', entity)
    if not math.isfinite(price):
        raise ValidationError('Price must be a finite number', entity)
    if price < 0:
        raise ValidationError('Price cannot be negative', entity)
    return price


class ClinicService:
    """
    Facade over the clinic store: registration, scheduling, the clinical
    visit lifecycle and invoicing.

    Every write runs under the store lock in a single transaction, so a
    rejected operation leaves no partial state behind.
    """

    def __init__(self, db=None, settings=None, clock=None):
        self.db = db if db is not None else get_db()
        self.settings = settings if settings is not None else current_settings()
        self.clock = clock or clinic_now
        self.patient_repo = PatientRepository(self.db)
        self.doctor_repo = DoctorRepository(self.db)
        self.procedure_repo = ProcedureRepository(self.db)
        self.appt_repo = AppointmentRepository(self.db)
        self.visit_repo = VisitRepository(self.db)
        self.invoice_repo = InvoiceRepository(self.db)

    # ---- Patients ----
    @synchronized
    def list_patients(self, search: Optional[str] = None) -> List[Patient]:
        if search and search.strip():
            return self.patient_repo.search(search.strip())
        return self.patient_repo.list_all()

    @synchronized
    def search_patients(self, text: str) -> List[Patient]:
        """Case-insensitive substring match on name, MRN or mobile number."""
        if not text or not text.strip():
            return []
        return self.patient_repo.search(text.strip())

    @synchronized
    def get_patient(self, patient_id: int) -> Optional[Patient]:
        return self.patient_repo.get_by_id(patient_id)

    @synchronized
    def find_patient_by_mrn(self, mrn: str) -> Optional[Patient]:
        if not mrn:
            return None
        return self.patient_repo.get_by_mrn(mrn.strip())

    @synchronized
    def resolve_patient(self, identifier: str) -> Optional[Patient]:
        """
        Map a typed identifier to a patient: exact MRN first, then the
        zero-padded MRN of a bare number or an 'mrn'-prefixed number.
        None means the caller should treat the input as a new registration.
        """
        for candidate in mrn_candidates(identifier):
            patient = self.patient_repo.get_by_mrn(candidate)
            if patient:
                return patient
        return None

    @transactional('register_patient')
    def register_patient(self, data: dict) -> Patient:
        return self._register(data)

    def _register(self, data: dict) -> Patient:
        supplied_mrn = (data.get('mrn') or '').strip()
        if supplied_mrn:
            existing = self.resolve_patient(supplied_mrn)
            if existing:
                return existing
            mrn = canonical_mrn(supplied_mrn)
            if mrn is None:
                raise ValidationError(f"'{supplied_mrn}' is not a valid MRN", 'patient')
        else:
            mrn = None

        full_name = (data.get('full_name') or '').strip()
        if not full_name:
            raise ValidationError('Patient name is required', 'patient')

        mobile_no = (data.get('mobile_no') or '').strip() or None
        if mobile_no and not validate_mobile_no(mobile_no):
            raise ValidationError('Mobile number must be 11 digits starting with 03', 'patient')
        dob = (data.get('dob') or '').strip() or None
        if dob and not validate_dob(dob):
            raise ValidationError('Date of birth must be a past date (YYYY-MM-DD)', 'patient')
        gender = data.get('gender') or None
        if gender and not validate_gender(gender):
            raise ValidationError('Gender must be Male, Female or Other', 'patient')

        password = data.get('password') or self.settings['DEFAULT_PATIENT_PASSWORD']
        patient = Patient(
            id=None,
            mrn=mrn or self._next_free_mrn(),
            full_name=full_name,
            father_name=(data.get('father_name') or '').strip(),
            dob=dob,
            gender=gender,
            mobile_no=mobile_no,
            address=(data.get('address') or '').strip(),
            password_hash=hash_password(password, self.settings['BCRYPT_ROUNDS']),
        )
        patient.id = self.patient_repo.create(patient)

        log_activity(
            action_type=ActionType.PATIENT_CREATE,
            action_category=ActionCategory.PATIENT,
            description=f'Patient registered - {patient.mrn} {patient.full_name}',
            target_type='patient',
            target_id=patient.id,
            patient_id=patient.id,
            db=self.db,
        )
        return self.patient_repo.get_by_id(patient.id)

    def _next_free_mrn(self) -> str:
        while True:
            mrn = format_mrn(next_sequence(self.db, 'mrn'))
            if self.patient_repo.get_by_mrn(mrn) is None:
                return mrn

    @synchronized
    def patient_history(self, patient_id: int) -> List[Appointment]:
        if self.patient_repo.get_by_id(patient_id) is None:
            raise NotFound('patient', patient_id)
        return self.appt_repo.list_all(patient_id=patient_id)

    # ---- Doctors & catalog ----
    @synchronized
    def list_doctors(self, active_only: bool = False) -> List[Doctor]:
        return self.doctor_repo.list_all(active_only=active_only)

    @transactional('add_doctor')
    def add_doctor(self, data: dict) -> Doctor:
        doctor = Doctor(
            id=None,
            doctor_code=(data.get('doctor_code') or '').strip(),
            full_name=(data.get('full_name') or '').strip(),
            specialty=(data.get('specialty') or '').strip(),
            registration_no=data.get('registration_no') or None,
            active=data.get('active') or 'Y',
            image=data.get('image') or None,
        )
        self._validate_doctor(doctor)
        doctor.id = self.doctor_repo.create(doctor)

        log_activity(
            action_type=ActionType.DOCTOR_CREATE,
            action_category=ActionCategory.DOCTOR,
            description=f'Doctor added - {doctor.doctor_code} {doctor.full_name}',
            target_type='doctor',
            target_id=doctor.id,
            db=self.db,
        )
        return doctor

    @transactional('update_doctor')
    def update_doctor(self, doctor_id: int, data: dict) -> Doctor:
        doctor = self.doctor_repo.get_by_id(doctor_id)
        if doctor is None:
            raise NotFound('doctor', doctor_id)

        old_active = doctor.active
        for key in EDITABLE_FIELDS:
            if key in data:
                value = data[key]
                setattr(doctor, key, value.strip() if isinstance(value, str) else value)
        self._validate_doctor(doctor)
        self.doctor_repo.update(doctor)

        log_activity(
            action_type=ActionType.DOCTOR_UPDATE,
            action_category=ActionCategory.DOCTOR,
            target_type='doctor',
            target_id=doctor.id,
            old_value=old_active,
            new_value=doctor.active,
            db=self.db,
        )
        return doctor

    def _validate_doctor(self, doctor: Doctor):
        if not doctor.doctor_code or not doctor.full_name or not doctor.specialty:
            raise ValidationError('Doctor code, name and specialty are required', 'doctor', doctor.id)
        if doctor.active not in ('Y', 'N'):
            raise ValidationError("Active flag must be 'Y' or 'N'", 'doctor', doctor.id)
        same_code = self.doctor_repo.get_by_code(doctor.doctor_code)
        if same_code and same_code.id != doctor.id:
            raise ValidationError(f'Doctor code {doctor.doctor_code} is already in use', 'doctor', doctor.id)

    @synchronized
    def list_procedures(self) -> List[Procedure]:
        return self.procedure_repo.list_all()

    # ---- Scheduling ----
    @synchronized
    def list_appointments(self, patient_id: Optional[int] = None, day: Optional[date] = None) -> List[Appointment]:
        return self.appt_repo.list_all(patient_id=patient_id, day=day)

    @synchronized
    def get_appointment(self, appt_id: int) -> Optional[Appointment]:
        return self.appt_repo.get_by_id(appt_id)

    @transactional('create_appointment')
    def create_appointment(self, patient_id, doctor_id=None, scheduled_at=None,
                           duration_min=None, remarks: str = '') -> Appointment:
        return self._book(patient_id, doctor_id, scheduled_at, duration_min, remarks)

    @transactional('book_walk_in')
    def book_walk_in(self, data: dict) -> Appointment:
        """
        Front-desk booking in one step: use the patient the typed MRN resolves
        to, otherwise register a new patient (DOB estimated from `age`), then
        book. Nothing is stored when any step fails.
        """
        patient = None
        if data.get('patient_id'):
            patient = self.patient_repo.get_by_id(_require_int(data['patient_id'], 'patient_id', 'appointment'))
            if patient is None:
                raise NotFound('patient', data['patient_id'])
        elif data.get('mrn'):
            patient = self.resolve_patient(data['mrn'])

        if patient is None:
            registration = {key: data.get(key) for key in
                            ('mrn', 'full_name', 'father_name', 'gender', 'mobile_no', 'address', 'dob')}
            if not registration['dob'] and data.get('age') not in (None, ''):
                age = _require_int(data['age'], 'age', 'patient')
                registration['dob'] = f'{self.clock().year - age}-01-01'
            patient = self._register(registration)

        return self._book(patient.id, data.get('doctor_id'), data.get('scheduled_at'),
                          data.get('duration_min'), data.get('remarks', ''))

    def _book(self, patient_id, doctor_id, scheduled_at, duration_min, remarks) -> Appointment:
        patient_id = _require_int(patient_id, 'patient_id', 'appointment')
        doctor_id = _require_int(doctor_id, 'doctor_id', 'appointment')

        start = parse_datetime(scheduled_at)
        if start is None:
            raise ValidationError('scheduled_at must be a valid timestamp', 'appointment')

        if duration_min in (None, ''):
            duration_min = self.settings['DEFAULT_APPOINTMENT_MINUTES']
        duration_min = _require_int(duration_min, 'duration_min', 'appointment')
        max_minutes = self.settings['MAX_APPOINTMENT_MINUTES']
        if duration_min > max_minutes:
            raise ValidationError(f'duration_min cannot exceed {max_minutes} minutes', 'appointment')

        buffer_min = self.settings['SCHEDULING_BUFFER_MINUTES']
        try:
            start + timedelta(minutes=duration_min + buffer_min)
            start - timedelta(minutes=buffer_min)
        except OverflowError:
            raise ValidationError('scheduled_at is out of range', 'appointment')

        if self.patient_repo.get_by_id(patient_id) is None:
            raise NotFound('patient', patient_id)

        doctor = self.doctor_repo.get_by_id(doctor_id)
        if doctor is None:
            raise NotFound('doctor', doctor_id)
        if not doctor.is_active:
            raise ValidationError(f'{doctor.full_name} is not taking appointments', 'doctor', doctor.id)

        clinic_wide = self.settings['SCHEDULING_SCOPE'] == 'clinic'
        existing = self.appt_repo.list_active(doctor_id=None if clinic_wide else doctor_id)
        clash = find_conflict(existing, start, duration_min, buffer_min)
        if clash:
            raise SchedulingConflict(
                f'This slot overlaps appointment {clash.appt_no} or violates the '
                f'{buffer_min}-minute gap rule.',
                conflicting_id=clash.id,
            )

        appt = Appointment(
            id=None,
            appt_no=generate_appointment_no(self.clock().year),
            patient_id=patient_id,
            doctor_id=doctor_id,
            scheduled_at=start,
            duration_min=duration_min,
            status=AppointmentStatus.SCHEDULED,
            remarks=(remarks or '').strip(),
        )
        appt.id = self.appt_repo.create(appt)

        log_activity(
            action_type=ActionType.APPOINTMENT_CREATE,
            action_category=ActionCategory.APPOINTMENT,
            description=f'Appointment booked - {appt.appt_no} at {start:%Y-%m-%d %H:%M}',
            target_type='appointment',
            target_id=appt.id,
            patient_id=patient_id,
            db=self.db,
        )
        return self.appt_repo.get_by_id(appt.id)

    @transactional('update_appointment_status')
    def update_appointment_status(self, appt_id: int, status: str) -> Appointment:
        """Overwrite the status. Any known status may replace any other."""
        status = (status or '').strip().upper()
        if status not in AppointmentStatus.ALL:
            raise ValidationError(f"Unknown appointment status '{status}'", 'appointment', appt_id)

        appt = self.appt_repo.get_by_id(appt_id)
        if appt is None:
            raise NotFound('appointment', appt_id)

        self._set_appointment_status(appt, status)
        return self.appt_repo.get_by_id(appt_id)

    def _set_appointment_status(self, appt: Appointment, status: str):
        self.appt_repo.update_status(appt.id, status)
        log_activity(
            action_type=ActionType.APPOINTMENT_STATUS,
            action_category=ActionCategory.APPOINTMENT,
            target_type='appointment',
            target_id=appt.id,
            patient_id=appt.patient_id,
            old_value=appt.status,
            new_value=status,
            db=self.db,
        )

    # ---- Clinical visits ----
    @synchronized
    def get_visit(self, visit_id: int) -> Optional[Visit]:
        return self.visit_repo.get_by_id(visit_id)

    @synchronized
    def get_visit_by_appointment(self, appt_id: int) -> Optional[Visit]:
        return self.visit_repo.get_by_appt_id(appt_id)

    def _require_visit(self, visit_id: int) -> Visit:
        visit = self.visit_repo.get_by_id(visit_id)
        if visit is None:
            raise NotFound('visit', visit_id)
        return visit

    @transactional('start_visit')
    def start_visit(self, appt_id: int, complaint: str = '') -> Visit:
        """
        Open the visit of a (normally checked-in) appointment and move the
        appointment to IN_PROGRESS. An appointment has at most one visit; if
        it already has one, that visit is returned unchanged.
        """
        appt = self.appt_repo.get_by_id(appt_id)
        if appt is None:
            raise NotFound('appointment', appt_id)

        existing = self.visit_repo.get_by_appt_id(appt_id)
        if existing:
            return existing

        visit = Visit(id=None, appt_id=appt_id, visit_date=self.clock(), complaint=complaint or '')
        visit.id = self.visit_repo.create(visit)
        self._set_appointment_status(appt, AppointmentStatus.IN_PROGRESS)

        log_activity(
            action_type=ActionType.VISIT_START,
            action_category=ActionCategory.VISIT,
            target_type='visit',
            target_id=visit.id,
            patient_id=appt.patient_id,
            db=self.db,
        )
        return self.visit_repo.get_by_id(visit.id)

    @transactional('update_visit')
    def update_visit(self, visit_id: int, data: dict) -> Visit:
        """Merge clinical notes (complaint, diagnosis, treatment). Status is untouched."""
        visit = self._require_visit(visit_id)
        for key in NOTE_FIELDS:
            if key in data:
                setattr(visit, key, data[key] or '')
        self.visit_repo.update_notes(visit_id, visit.complaint, visit.diagnosis, visit.treatment)

        log_activity(
            action_type=ActionType.VISIT_UPDATE,
            action_category=ActionCategory.VISIT,
            target_type='visit',
            target_id=visit_id,
            db=self.db,
        )
        return self.visit_repo.get_by_id(visit_id)

    def _recompute_total(self, visit_id: int) -> float:
        total = visit_total(self.visit_repo.list_items(visit_id))
        self.visit_repo.set_total(visit_id, total)
        return total

    def _require_procedure(self, procedure_id) -> Procedure:
        procedure = self.procedure_repo.get_by_id(procedure_id)
        if procedure is None:
            raise NotFound('procedure', procedure_id)
        return procedure

    @transactional('add_visit_item')
    def add_visit_item(self, visit_id: int, procedure_id: int, price=None) -> VisitItem:
        """Bill one unit of a procedure, at the catalog price unless `price` overrides it."""
        procedure = self._require_procedure(procedure_id)
        self._require_visit(visit_id)

        amount = procedure.price if price is None else _price(price, 'visit_item')
        item = VisitItem(id=None, visit_id=visit_id, procedure_id=procedure.id,
                         price=amount, qty=1, amount=amount)
        item.id = self.visit_repo.add_item(item)
        total = self._recompute_total(visit_id)

        log_activity(
            action_type=ActionType.ITEM_ADD,
            action_category=ActionCategory.VISIT,
            description=f'Treatment item added - {procedure.proc_name}',
            target_type='visit',
            target_id=visit_id,
            amount=amount,
            new_value=str(total),
            db=self.db,
        )
        return self.visit_repo.get_item(visit_id, item.id)

    @transactional('update_visit_item')
    def update_visit_item(self, visit_id: int, item_id: int, procedure_id=None, price=None) -> VisitItem:
        """Edit an item in place; the item keeps its id."""
        self._require_visit(visit_id)
        item = self.visit_repo.get_item(visit_id, item_id)
        if item is None:
            raise NotFound('visit_item', item_id)

        old_amount = item.amount
        if procedure_id is not None and _require_int(procedure_id, 'procedure_id', 'visit_item') != item.procedure_id:
            procedure = self._require_procedure(procedure_id)
            item.procedure_id = procedure.id
            item.price = procedure.price
        if price is not None:
            item.price = _price(price, 'visit_item')
        item.amount = item.price * item.qty

        self.visit_repo.update_item(item)
        total = self._recompute_total(visit_id)

        log_activity(
            action_type=ActionType.ITEM_UPDATE,
            action_category=ActionCategory.VISIT,
            target_type='visit',
            target_id=visit_id,
            amount=item.amount,
            old_value=str(old_amount),
            new_value=str(total),
            db=self.db,
        )
        return self.visit_repo.get_item(visit_id, item_id)

    @transactional('delete_visit_item')
    def delete_visit_item(self, visit_id: int, item_id: int) -> Visit:
        self._require_visit(visit_id)
        if not self.visit_repo.delete_item(visit_id, item_id):
            raise NotFound('visit_item', item_id)
        total = self._recompute_total(visit_id)

        log_activity(
            action_type=ActionType.ITEM_DELETE,
            action_category=ActionCategory.VISIT,
            target_type='visit',
            target_id=visit_id,
            new_value=str(total),
            db=self.db,
        )
        return self.visit_repo.get_by_id(visit_id)

    @transactional('add_prescription')
    def add_prescription(self, visit_id: int, medication: str, instructions: str = '') -> Prescription:
        self._require_visit(visit_id)
        medication = (medication or '').strip()
        if not medication:
            raise ValidationError('Medication name is required', 'prescription')

        rx = Prescription(id=None, visit_id=visit_id, medication=medication,
                          instructions=(instructions or '').strip())
        rx.id = self.visit_repo.add_prescription(rx)

        log_activity(
            action_type=ActionType.RX_ADD,
            action_category=ActionCategory.VISIT,
            description=f'Prescription added - {medication}',
            target_type='visit',
            target_id=visit_id,
            db=self.db,
        )
        return rx

    @transactional('update_prescription')
    def update_prescription(self, rx_id: int, medication: str, instructions: str = '') -> Prescription:
        rx = self.visit_repo.get_prescription(rx_id)
        if rx is None:
            raise NotFound('prescription', rx_id)
        medication = (medication or '').strip()
        if not medication:
            raise ValidationError('Medication name is required', 'prescription', rx_id)

        old_value = rx.medication
        rx.medication = medication
        rx.instructions = (instructions or '').strip()
        self.visit_repo.update_prescription(rx)

        log_activity(
            action_type=ActionType.RX_UPDATE,
            action_category=ActionCategory.VISIT,
            target_type='visit',
            target_id=rx.visit_id,
            old_value=old_value,
            new_value=medication,
            db=self.db,
        )
        return rx

    @transactional('delete_prescription')
    def delete_prescription(self, rx_id: int):
        rx = self.visit_repo.get_prescription(rx_id)
        if rx is None or not self.visit_repo.delete_prescription(rx_id):
            raise NotFound('prescription', rx_id)

        log_activity(
            action_type=ActionType.RX_DELETE,
            action_category=ActionCategory.VISIT,
            target_type='visit',
            target_id=rx.visit_id,
            old_value=rx.medication,
            db=self.db,
        )

    # ---- Billing ----
    @transactional('finalize_visit')
    def finalize_visit_and_invoice(self, visit_id: int) -> Invoice:
        """
        Bill the visit, complete its appointment and issue the invoice.

        A visit is invoiced once: finalizing an already invoiced visit returns
        the existing invoice. The invoice copies the visit total, so later item
        edits do not change it.
        """
        visit = self._require_visit(visit_id)

        existing = self.invoice_repo.get_by_visit_id(visit_id)
        if existing:
            return existing

        appt = self.appt_repo.get_by_id(visit.appt_id)
        if appt is None:
            raise NotFound('appointment', visit.appt_id)

        self.visit_repo.set_status(visit_id, VisitStatus.BILLED)
        self._set_appointment_status(appt, AppointmentStatus.COMPLETED)

        now = self.clock()
        sequence = next_sequence(self.db, f'invoice-{now.year}')
        total = float(visit.total_amount)
        invoice = Invoice(
            id=None,
            visit_id=visit_id,
            invoice_no=format_invoice_no(now.year, sequence),
            invoice_date=now,
            subtotal=total,
            total_amount=total,
        )
        invoice.id = self.invoice_repo.create(invoice)

        log_activity(
            action_type=ActionType.INVOICE_CREATE,
            action_category=ActionCategory.INVOICE,
            description=f'Invoice issued - {invoice.invoice_no}',
            target_type='invoice',
            target_id=invoice.id,
            patient_id=appt.patient_id,
            amount=total,
            db=self.db,
        )
        return self.invoice_repo.get_by_id(invoice.id)

    @synchronized
    def list_invoices(self, search: Optional[str] = None, patient_id: Optional[int] = None) -> List[Invoice]:
        return self.invoice_repo.list_all(search=(search or '').strip() or None, patient_id=patient_id)

    @synchronized
    def get_invoice_details(self, invoice_id: int) -> Optional[InvoiceDetails]:
        """invoice -> visit -> appointment -> patient and doctor; None if any link is missing."""
        invoice = self.invoice_repo.get_by_id(invoice_id)
        if invoice is None:
            return None

        visit = self.visit_repo.get_by_id(invoice.visit_id)
        if visit is None:
            return None

        appt = self.appt_repo.get_by_id(visit.appt_id)
        if appt is None:
            return None

        patient = self.patient_repo.get_by_id(appt.patient_id)
        doctor = self.doctor_repo.get_by_id(appt.doctor_id) if appt.doctor_id else None
        if patient is None or doctor is None:
            return None

        return InvoiceDetails(
            invoice=invoice,
            visit=visit,
            patient=patient,
            doctor=doctor,
            items=list(visit.items),
            prescriptions=list(visit.prescriptions),
        )

    # ---- Dashboard ----
    @synchronized
    def dashboard_summary(self, day: Optional[date] = None) -> dict:
        day = day or self.clock().date()
        statuses = [a.status for a in self.appt_repo.list_all(day=day)]

        def count(*wanted):
            return sum(1 for s in statuses if s in wanted)

        invoices = self.invoice_repo.get_day_totals(day)
        return {
            'day': day.isoformat(),
            'appointments': len(statuses),
            'pending': count(AppointmentStatus.SCHEDULED, AppointmentStatus.CHECKED_IN),
            'scheduled': count(AppointmentStatus.SCHEDULED),
            'checked_in': count(AppointmentStatus.CHECKED_IN, AppointmentStatus.IN_PROGRESS,
                                AppointmentStatus.COMPLETED),
            'cancelled': count(AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW),
            'active_doctors': len(self.doctor_repo.list_all(active_only=True)),
            'invoices': invoices['count'],
            'revenue': invoices['total_amount'],
        }
