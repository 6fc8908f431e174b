from datetime import datetime, timedelta
from typing import List, Optional

import bcrypt
from werkzeug.security import check_password_hash

from clinicdesk.adapters.sqlite.auth_repo import AuthRepository
from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.adapters.sqlite.patients_repo import PatientRepository
from clinicdesk.common.errors import ValidationError
from clinicdesk.common.utils import clinic_now
from clinicdesk.config.settings import current_settings
from clinicdesk.domain.patients import Patient
from clinicdesk.domain.user import User, UserRole
from clinicdesk.services.activity_logger import ActionCategory, ActionType, log_activity
from clinicdesk.services.transactions import synchronized, transactional


def hash_password(password: str, rounds: int = 12) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))


def check_password(password: str, stored_hash) -> tuple[bool, bool]:
    """
    Verify a password against a stored hash.

    Returns (ok, needs_rehash). bcrypt hashes ($2...) are checked directly;
    anything else is tried as a werkzeug hash (pbkdf2/scrypt), which is
    accepted once and then flagged for migration to bcrypt.
    """
    if not stored_hash:
        return False, False
    if isinstance(stored_hash, str):
        stored_hash = stored_hash.encode("utf-8")

    if stored_hash.startswith(b"$2"):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), stored_hash), False
        except ValueError:
            return False, False

    try:
        ok = check_password_hash(stored_hash.decode("utf-8"), password)
    except (ValueError, TypeError):
        # check_password_hash may raise for unexpected formats
        ok = False
    return ok, ok


class AuthService:
    """Staff and patient sign-in, lockout and password recovery."""

    def __init__(self, db=None, settings=None):
        self.db = db if db is not None else get_db()
        self.settings = settings if settings is not None else current_settings()
        self.repo = AuthRepository(self.db)
        self.patient_repo = PatientRepository(self.db)

    # ---- Internal helpers (lockout logic) ----
    def _is_locked(self, user_row: dict) -> bool:
        locked_until = user_row.get("locked_until")
        if not locked_until:
            return False
        try:
            return clinic_now() < datetime.fromisoformat(str(locked_until))
        except ValueError:
            return False

    def _increment_failed(self, user_row: dict):
        new_val = (user_row.get("failed_attempts") or 0) + 1
        lock_until: Optional[str] = None
        if new_val >= self.settings["MAX_FAILED_LOGINS"]:
            lock_until = (clinic_now() + timedelta(minutes=self.settings["LOCKOUT_MINUTES"])).isoformat(timespec="seconds")
            new_val = 0
        self.repo.update_failed_attempts(user_row["id"], new_val, lock_until)

    def _hash(self, password: str) -> bytes:
        if not password:
            raise ValidationError("Password cannot be empty", "user")
        return hash_password(password, self.settings["BCRYPT_ROUNDS"])

    # ---- Core login attempts ----
    def _attempt_staff_login(self, username: str, password: str) -> Optional[dict]:
        user = self.repo.get_raw_by_username(username)
        if not user:
            return None

        user_dict = dict(user)
        if not user_dict.get("is_active", 1):
            return None

        # Lockout check before password verify
        if self._is_locked(user_dict):
            return None

        password_ok, needs_rehash = check_password(password, user_dict.get("password_hash"))
        if not password_ok:
            self._increment_failed(user_dict)
            return None

        if needs_rehash:
            self.repo.update_user_password(user_dict["id"], self._hash(password))

        self.repo.reset_failed_attempts(user_dict["id"])
        self.repo.set_last_login(user_dict["id"])
        return user_dict

    def _attempt_patient_login(self, mrn: str, password: str) -> Optional[Patient]:
        patient = self.patient_repo.get_by_mrn(mrn)
        if not patient:
            return None
        password_ok, needs_rehash = check_password(password, patient.password_hash)
        if not password_ok:
            return None
        if needs_rehash:
            self.patient_repo.update_password(patient.id, self._hash(password))
        return patient

    # ---- Public API ----
    @transactional("login")
    def login(self, identifier: str, password: str) -> Optional[User]:
        """Staff username first, then patient MRN (case-insensitive). None on bad credentials."""
        identifier = (identifier or "").strip()
        if not identifier or not password:
            return None

        staff = self._attempt_staff_login(identifier, password)
        if staff:
            user = User(
                user_id=staff["id"],
                username=staff["username"],
                full_name=staff.get("full_name") or staff["username"],
                role=staff["role"],
                recovery_phone=staff.get("recovery_phone"),
            )
        else:
            patient = self._attempt_patient_login(identifier, password)
            if patient is None:
                log_activity(
                    action_type=ActionType.LOGIN_FAILED,
                    action_category=ActionCategory.AUTH,
                    description=f"Failed sign-in attempt - {identifier}",
                    user_id=0,
                    username=identifier,
                    db=self.db,
                )
                return None
            user = User(
                user_id=patient.id,
                username=patient.mrn,
                full_name=patient.full_name,
                role=UserRole.PATIENT,
                mrn=patient.mrn,
            )

        log_activity(
            action_type=ActionType.LOGIN,
            action_category=ActionCategory.AUTH,
            description=f"Signed in {user.role} - {user.username}",
            user_id=user.user_id,
            username=user.username,
            db=self.db,
        )
        return user

    @transactional("logout")
    def record_logout(self, user: dict):
        log_activity(
            action_type=ActionType.LOGOUT,
            action_category=ActionCategory.AUTH,
            description=f"Signed out {user.get('role')} - {user.get('username')}",
            user_id=user.get("user_id"),
            username=user.get("username"),
            db=self.db,
        )

    # ---- Recovery ----
    @synchronized
    def verify_admin_recovery(self, username: str, phone: str) -> bool:
        user = self.repo.get_raw_by_username((username or "").strip())
        if not user or not phone:
            return False
        return user["role"] == UserRole.ADMIN and user["recovery_phone"] == phone.strip()

    @transactional("reset_admin_password")
    def reset_admin_password(self, username: str, new_password: str) -> bool:
        user = self.repo.get_raw_by_username((username or "").strip())
        if not user or user["role"] != UserRole.ADMIN:
            return False
        self.repo.update_user_password(user["id"], self._hash(new_password))

        log_activity(
            action_type=ActionType.PASSWORD_RESET,
            action_category=ActionCategory.AUTH,
            description=f"Password reset - {user['username']}",
            target_type="user",
            target_id=user["id"],
            db=self.db,
        )
        return True

    @synchronized
    def verify_patient_recovery(self, phone: str) -> List[Patient]:
        """Every patient registered with this mobile number (families often share one)."""
        if not phone or not phone.strip():
            return []
        return self.patient_repo.list_by_mobile(phone.strip())

    @transactional("reset_patient_password")
    def reset_patient_password(self, mrn: str, new_password: str) -> bool:
        patient = self.patient_repo.get_by_mrn((mrn or "").strip())
        if not patient:
            return False
        self.patient_repo.update_password(patient.id, self._hash(new_password))

        log_activity(
            action_type=ActionType.PASSWORD_RESET,
            action_category=ActionCategory.AUTH,
            description=f"Password reset - {patient.mrn}",
            target_type="patient",
            target_id=patient.id,
            patient_id=patient.id,
            db=self.db,
        )
        return True

    # ---- Account setup (CLI / startup) ----
    @transactional("register_user")
    def register_user(self, username: str, password: str, role: str = UserRole.ADMIN,
                      full_name: str | None = None, recovery_phone: str | None = None) -> bool:
        if role not in UserRole.STAFF:
            raise ValidationError(f"Unknown staff role '{role}'", "user")
        if self.repo.get_raw_by_username(username):
            return False
        self.repo.create_user(username, self._hash(password), role, full_name, recovery_phone)
        return True

    def ensure_admin(self) -> bool:
        """Create the configured administrator if the account does not exist yet."""
        return self.register_user(
            self.settings["ADMIN_USERNAME"],
            self.settings["ADMIN_PASSWORD"],
            UserRole.ADMIN,
            self.settings["ADMIN_FULL_NAME"],
            self.settings["ADMIN_RECOVERY_PHONE"],
        )
