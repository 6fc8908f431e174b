"""Demo fixtures: the practice's doctors, procedure catalog, a few patients and today's bookings."""
from datetime import datetime

from clinicdesk.adapters.sqlite.core import db_lock
from clinicdesk.adapters.sqlite.procedures_repo import ProcedureRepository
from clinicdesk.domain.appointments import AppointmentStatus
from clinicdesk.services.auth_service import AuthService
from clinicdesk.services.clinic_service import ClinicService

DOCTORS = [
    {'doctor_code': 'DOC001', 'registration_no': 'PMDC-12345-B', 'full_name': 'Dr. Bashir Khan D.H.',
     'specialty': 'Senior Dental Surgeon'},
    {'doctor_code': 'DOC002', 'registration_no': 'PMDC-77889-A', 'full_name': 'Dr. Ayesha Khan',
     'specialty': 'Orthodontist'},
    {'doctor_code': 'DOC003', 'registration_no': 'PMDC-11223-O', 'full_name': 'Dr. Omar Rizvi',
     'specialty': 'Endodontist'},
]

PATIENTS = [
    {'mrn': 'MRN0001', 'full_name': 'Irfan Ali', 'father_name': 'Ghulam Ali', 'dob': '1985-05-20',
     'gender': 'Male', 'mobile_no': '0304-4444444', 'address': 'Phool Nagar'},
    {'mrn': 'MRN0002', 'full_name': 'Sadia Bibi', 'father_name': 'Abdul Rehman', 'dob': '1990-11-02',
     'gender': 'Female', 'mobile_no': '0305-5555555', 'address': 'Phool Nagar'},
    {'mrn': 'MRN0003', 'full_name': 'Amina', 'father_name': 'Ahmad Khan', 'dob': '1995-03-15',
     'gender': 'Female', 'mobile_no': '0306-6666666', 'address': 'Phool Nagar'},
    {'mrn': 'MRN0004', 'full_name': 'Faiza', 'father_name': 'Muhammad Ali', 'dob': '1998-07-22',
     'gender': 'Female', 'mobile_no': '0307-7777777', 'address': 'Phool Nagar'},
]

PROCEDURES = [
    ('P001', 'Oral Exam', 500, 'Routine oral checkup'),
    ('P002', 'Scaling', 1500, 'Teeth cleaning'),
    ('P003', 'Filling', 3000, 'Composite filling'),
    ('P004', 'Root Canal', 8000, 'RCT Anterior'),
]


def seed_reference_data(db):
    """Procedure catalog. Skipped when the catalog already has entries."""
    repo = ProcedureRepository(db)
    with db_lock, db:
        if repo.list_all():
            return False
        for code, name, price, description in PROCEDURES:
            repo.add_catalog_entry(code, name, price, description)
    return True


def seed_demo_data(db, settings) -> bool:
    """Load the demo fixtures into an empty store. Returns False if doctors already exist."""
    auth = AuthService(db, settings)
    clinic = ClinicService(db, settings)

    auth.ensure_admin()
    seed_reference_data(db)

    if clinic.list_doctors():
        return False

    print("[Seed] Adding doctors...")
    doctors = [clinic.add_doctor(d) for d in DOCTORS]

    print("[Seed] Adding patients...")
    patients = [clinic.register_patient(p) for p in PATIENTS]

    print("[Seed] Booking today's appointments...")
    today = clinic.clock().date()
    clinic.create_appointment(
        patients[0].id, doctor_id=doctors[0].id,
        scheduled_at=datetime(today.year, today.month, today.day, 10, 0),
        duration_min=15, remarks='Regular checkup',
    )
    second = clinic.create_appointment(
        patients[1].id, doctor_id=doctors[1].id,
        scheduled_at=datetime(today.year, today.month, today.day, 11, 30),
        duration_min=15, remarks='Braces adjustment',
    )
    clinic.update_appointment_status(second.id, AppointmentStatus.CHECKED_IN)

    print("[Seed] Demo data loaded.")
    return True
