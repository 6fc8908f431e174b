import functools
import secrets

from flask import Blueprint, g, jsonify, request, session

from clinicdesk.common.errors import AuthFailure, ValidationError
from clinicdesk.common.utils import to_json
from clinicdesk.domain.user import UserRole
from clinicdesk.services.auth_service import AuthService
from clinicdesk.services.clinic_service import ClinicService


bp = Blueprint("auth", __name__, url_prefix="/auth")


def request_data() -> dict:
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


@bp.before_app_request
def load_logged_in_user():
    g.user = session.get("user")


@bp.route("/login", methods=("POST",))
def login():
    data = request_data()
    user = AuthService().login(data.get("identifier") or data.get("username", ""), data.get("password", ""))

    if user is None:
        raise AuthFailure("Invalid username/MRN or password, or the account is temporarily locked.")

    session.clear()
    session["user"] = to_json(user)
    return jsonify({"user": session["user"]})


@bp.route("/logout", methods=("POST",))
def logout():
    if g.user:
        AuthService().record_logout(g.user)

    session.clear()
    return jsonify({"ok": True})


@bp.route("/me")
def me():
    if g.user is None:
        raise AuthFailure("Not signed in")
    return jsonify({"user": g.user})


@bp.route("/register", methods=("POST",))
def register():
    """Patient self-registration. The MRN is always assigned by the clinic."""
    data = request_data()
    password = data.get("password") or secrets.token_urlsafe(6)

    payload = {key: data.get(key) for key in ("full_name", "father_name", "dob", "gender", "mobile_no", "address")}
    payload["password"] = password
    patient = ClinicService().register_patient(payload)

    body = {"patient": to_json(patient)}
    if not data.get("password"):
        # Shown once; only the hash is stored.
        body["password"] = password
    return jsonify(body), 201


# ---- Password recovery ----
@bp.route("/recovery/admin/verify", methods=("POST",))
def verify_admin_recovery():
    data = request_data()
    username = (data.get("username") or "").strip()
    if not AuthService().verify_admin_recovery(username, data.get("phone", "")):
        raise AuthFailure("Username and recovery phone do not match")

    session["recovery_admin"] = username
    return jsonify({"verified": True, "username": username})


@bp.route("/recovery/admin/reset", methods=("POST",))
def reset_admin_password():
    data = request_data()
    username = (data.get("username") or "").strip()
    if not username or session.get("recovery_admin") != username:
        raise AuthFailure("Verify the recovery phone first")

    if not AuthService().reset_admin_password(username, data.get("new_password", "")):
        raise AuthFailure("Account not found")

    session.pop("recovery_admin", None)
    return jsonify({"ok": True})


@bp.route("/recovery/patient/verify", methods=("POST",))
def verify_patient_recovery():
    data = request_data()
    patients = AuthService().verify_patient_recovery(data.get("phone", ""))
    if not patients:
        raise AuthFailure("No patient is registered with this mobile number")

    session["recovery_mrns"] = [p.mrn for p in patients]
    return jsonify({
        "patients": [{"mrn": p.mrn, "full_name": p.full_name} for p in patients],
    })


@bp.route("/recovery/patient/reset", methods=("POST",))
def reset_patient_password():
    data = request_data()
    mrn = (data.get("mrn") or "").strip()
    allowed = [m.lower() for m in session.get("recovery_mrns", [])]
    if not mrn or mrn.lower() not in allowed:
        raise AuthFailure("Verify the mobile number first")

    if not AuthService().reset_patient_password(mrn, data.get("new_password", "")):
        raise AuthFailure("Patient not found")

    session.pop("recovery_mrns", None)
    return jsonify({"ok": True})


# ---- Access decorators ----
def login_required(view):
    @functools.wraps(view)
    def wrapped_view(**kwargs):
        if g.user is None:
            raise AuthFailure("Sign in required")

        return view(**kwargs)

    return wrapped_view


def staff_required(view):
    @functools.wraps(view)
    def wrapped_view(**kwargs):
        if g.user is None:
            raise AuthFailure("Sign in required")
        if g.user.get("role") == UserRole.PATIENT:
            return jsonify({"error": "Staff only"}), 403

        return view(**kwargs)

    return wrapped_view


def is_patient() -> bool:
    return bool(g.user) and g.user.get("role") == UserRole.PATIENT


def require_fields(data: dict, *names):
    missing = [n for n in names if data.get(n) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def admin_required(view):
    @functools.wraps(view)
    def wrapped_view(**kwargs):
        if g.user is None:
            raise AuthFailure("Sign in required")
        if g.user.get("role") != UserRole.ADMIN:
            return jsonify({"error": "Administrator only"}), 403

        return view(**kwargs)

    return wrapped_view
