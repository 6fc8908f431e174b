from datetime import datetime

import pytest

from clinicdesk.adapters.sqlite.core import open_db
from clinicdesk.app import create_app
from clinicdesk.config.settings import TestConfig, settings_from_object
from clinicdesk.services.auth_service import AuthService
from clinicdesk.services.clinic_service import ClinicService
from clinicdesk.services.seed import seed_reference_data

NOW = datetime(2025, 3, 10, 9, 0)


@pytest.fixture
def settings():
    return settings_from_object(TestConfig)


@pytest.fixture
def db():
    conn = open_db(':memory:')
    yield conn
    conn.close()


@pytest.fixture
def service(db, settings):
    seed_reference_data(db)
    return ClinicService(db, settings, clock=lambda: NOW)


@pytest.fixture
def auth(db, settings):
    service = AuthService(db, settings)
    service.ensure_admin()
    return service


@pytest.fixture
def doctor(service):
    return service.add_doctor({'doctor_code': 'DOC001', 'full_name': 'Dr. Bashir Khan',
                               'specialty': 'Dental Surgeon'})


@pytest.fixture
def other_doctor(service):
    return service.add_doctor({'doctor_code': 'DOC002', 'full_name': 'Dr. Ayesha Khan',
                               'specialty': 'Orthodontist'})


@pytest.fixture
def patient(service):
    return service.register_patient({'full_name': 'Irfan Ali', 'mobile_no': '0304-4444444',
                                     'dob': '1985-05-20', 'gender': 'Male'})


@pytest.fixture
def procedures(service):
    return {p.code: p for p in service.list_procedures()}


@pytest.fixture
def visit(service, patient, doctor):
    appt = service.create_appointment(patient.id, doctor.id, datetime(2025, 3, 10, 10, 0), 15)
    service.update_appointment_status(appt.id, 'CHECKED_IN')
    return service.start_visit(appt.id, 'Toothache')


@pytest.fixture
def app():
    return create_app(settings_from_object(TestConfig))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    resp = client.post('/auth/login', json={'identifier': 'Admin', 'password': 'admin123'})
    assert resp.status_code == 200
    return client
