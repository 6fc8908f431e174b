import pytest
from werkzeug.security import generate_password_hash

from clinicdesk.adapters.sqlite.auth_repo import AuthRepository
from clinicdesk.common.errors import ValidationError
from clinicdesk.domain.user import UserRole
from clinicdesk.services.auth_service import check_password, hash_password


def test_admin_login(auth):
    user = auth.login('Admin', 'admin123')

    assert user.role == UserRole.ADMIN
    assert user.is_admin
    assert user.full_name == 'Administrator'


def test_ensure_admin_is_idempotent(auth):
    assert auth.ensure_admin() is False


def test_bad_password_and_unknown_user(auth):
    assert auth.login('Admin', 'wrong') is None
    assert auth.login('nobody', 'admin123') is None
    assert auth.login('', '') is None


def test_lockout_after_repeated_failures(auth, settings):
    for _ in range(settings['MAX_FAILED_LOGINS']):
        assert auth.login('Admin', 'wrong') is None

    assert auth.login('Admin', 'admin123') is None


def test_success_resets_failed_counter(auth, db):
    auth.login('Admin', 'wrong')
    auth.login('Admin', 'admin123')

    row = AuthRepository(db).get_raw_by_username('Admin')
    assert row['failed_attempts'] == 0
    assert row['last_login'] is not None


def test_patient_login_by_mrn(auth, service, patient):
    user = auth.login(patient.mrn.lower(), 'password123')

    assert user.role == UserRole.PATIENT
    assert user.user_id == patient.id
    assert user.mrn == patient.mrn


def test_legacy_hash_is_upgraded(auth, db):
    repo = AuthRepository(db)
    with db:
        repo.create_user('legacy', generate_password_hash('old-secret'), UserRole.RECEPTION)

    assert auth.login('legacy', 'old-secret').role == UserRole.RECEPTION
    assert bytes(repo.get_raw_by_username('legacy')['password_hash']).startswith(b'$2')


def test_check_password():
    stored = hash_password('s3cret', rounds=4)
    assert check_password('s3cret', stored) == (True, False)
    assert check_password('nope', stored) == (False, False)
    assert check_password('s3cret', None) == (False, False)


def test_admin_recovery(auth):
    assert auth.verify_admin_recovery('Admin', '0333-4216580')
    assert not auth.verify_admin_recovery('Admin', '0300-0000000')

    assert auth.reset_admin_password('Admin', 'n3w-pass')
    assert auth.login('Admin', 'n3w-pass') is not None
    assert not auth.reset_admin_password('ghost', 'n3w-pass')


def test_patient_recovery_lists_every_family_member(auth, service):
    father = service.register_patient({'full_name': 'Ghulam Ali', 'mobile_no': '0304-4444444'})
    son = service.register_patient({'full_name': 'Irfan Ali', 'mobile_no': '0304-4444444'})
    service.register_patient({'full_name': 'Sadia Bibi', 'mobile_no': '0305-5555555'})

    found = auth.verify_patient_recovery('0304-4444444')
    assert {p.mrn for p in found} == {father.mrn, son.mrn}
    assert auth.verify_patient_recovery('') == []

    assert auth.reset_patient_password(son.mrn, 'family-pass')
    assert auth.login(son.mrn, 'family-pass').user_id == son.id
    assert auth.login(father.mrn, 'family-pass') is None


def test_register_user(auth):
    assert auth.register_user('reception1', 'rec123', UserRole.RECEPTION, 'Front Desk')
    assert not auth.register_user('reception1', 'other', UserRole.RECEPTION)

    with pytest.raises(ValidationError):
        auth.register_user('intruder', 'x', 'ROOT')
    with pytest.raises(ValidationError):
        auth.register_user('blank', '', UserRole.DOCTOR)
