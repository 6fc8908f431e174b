import pytest

from clinicdesk.common.errors import NotFound, ValidationError


def test_mrns_are_assigned_in_sequence(service):
    for name in ('Irfan Ali', 'Sadia Bibi', 'Amina'):
        service.register_patient({'full_name': name})

    fourth = service.register_patient({'full_name': 'Faiza', 'mobile_no': '0307-7777777'})
    assert fourth.mrn == 'MRN0004'


def test_generated_mrn_skips_taken_numbers(service):
    service.register_patient({'full_name': 'Imported', 'mrn': 'MRN0001'})
    created = service.register_patient({'full_name': 'Walk-in'})
    assert created.mrn == 'MRN0002'


def test_existing_mrn_returns_stored_patient(service, patient):
    again = service.register_patient({'mrn': patient.mrn, 'full_name': 'Someone Else'})

    assert again.id == patient.id
    assert again.full_name == 'Irfan Ali'
    assert len(service.list_patients()) == 1


def test_supplied_mrn_is_canonicalised(service):
    created = service.register_patient({'mrn': 'mrn12', 'full_name': 'Bilal'})
    assert created.mrn == 'MRN0012'
    assert service.register_patient({'mrn': '12', 'full_name': 'Bilal'}).id == created.id


def test_invalid_mrn_is_rejected(service):
    with pytest.raises(ValidationError):
        service.register_patient({'mrn': 'ABC-1', 'full_name': 'Bilal'})


@pytest.mark.parametrize('identifier', ['4', 'mrn4', 'MRN0004', 'mrn0004', ' 4 '])
def test_resolve_patient_forms(service, identifier):
    for name in ('A', 'B', 'C', 'Faiza'):
        service.register_patient({'full_name': name})

    found = service.resolve_patient(identifier)
    assert found is not None
    assert found.full_name == 'Faiza'


def test_resolve_unknown_means_new_registration(service, patient):
    assert service.resolve_patient('77') is None
    assert service.resolve_patient('') is None


def test_registration_validates_fields(service):
    with pytest.raises(ValidationError):
        service.register_patient({'full_name': '  '})
    with pytest.raises(ValidationError):
        service.register_patient({'full_name': 'Amina', 'mobile_no': '12345'})
    with pytest.raises(ValidationError):
        service.register_patient({'full_name': 'Amina', 'dob': '2999-01-01'})
    with pytest.raises(ValidationError):
        service.register_patient({'full_name': 'Amina', 'gender': 'Unknown'})
    assert service.list_patients() == []


def test_password_is_stored_hashed(service, patient):
    assert patient.password_hash
    assert b'password123' not in bytes(patient.password_hash)
    assert 'password_hash' not in repr(patient)


def test_search_patients(service, patient):
    service.register_patient({'full_name': 'Sadia Bibi', 'mobile_no': '0305-5555555'})

    assert [p.full_name for p in service.search_patients('irfan')] == ['Irfan Ali']
    assert [p.full_name for p in service.search_patients('0305')] == ['Sadia Bibi']
    assert len(service.list_patients('MRN000')) == 2
    assert service.search_patients('') == []


def test_patient_history(service, patient, doctor):
    service.create_appointment(patient.id, doctor.id, '2025-03-10 10:00', 15)
    assert len(service.patient_history(patient.id)) == 1

    with pytest.raises(NotFound):
        service.patient_history(999)


def test_doctor_lifecycle(service, doctor):
    assert doctor.active == 'Y'

    updated = service.update_doctor(doctor.id, {'active': 'N', 'specialty': 'Endodontist'})
    assert updated.active == 'N'
    assert updated.specialty == 'Endodontist'
    assert service.list_doctors(active_only=True) == []
    assert len(service.list_doctors()) == 1


def test_doctor_validation(service, doctor):
    with pytest.raises(ValidationError):
        service.add_doctor({'doctor_code': 'DOC009', 'full_name': 'Dr. X'})
    with pytest.raises(ValidationError):
        service.add_doctor({'doctor_code': 'DOC001', 'full_name': 'Dr. X', 'specialty': 'GP'})
    with pytest.raises(ValidationError):
        service.update_doctor(doctor.id, {'active': 'maybe'})
    with pytest.raises(NotFound):
        service.update_doctor(999, {'active': 'N'})
