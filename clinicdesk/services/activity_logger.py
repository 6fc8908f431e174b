"""
Activity Logger Service
Writes the audit trail of every clinic operation to the activity_logs table
"""

from clinicdesk.adapters.sqlite.core import db_lock, get_db
from clinicdesk.common.utils import clinic_now, format_db_datetime


# Operation types (action_type)
class ActionType:
    # Login / logout
    LOGIN = 'login'
    LOGIN_FAILED = 'login_failed'
    LOGOUT = 'logout'
    PASSWORD_RESET = 'password_reset'

    # Patients
    PATIENT_CREATE = 'patient_create'

    # Doctors
    DOCTOR_CREATE = 'doctor_create'
    DOCTOR_UPDATE = 'doctor_update'

    # Appointments
    APPOINTMENT_CREATE = 'appointment_create'
    APPOINTMENT_STATUS = 'appointment_status'

    # Visits
    VISIT_START = 'visit_start'
    VISIT_UPDATE = 'visit_update'
    ITEM_ADD = 'item_add'
    ITEM_UPDATE = 'item_update'
    ITEM_DELETE = 'item_delete'
    RX_ADD = 'rx_add'
    RX_UPDATE = 'rx_update'
    RX_DELETE = 'rx_delete'

    # Invoices
    INVOICE_CREATE = 'invoice_create'

    # Rejected operations
    OPERATION_FAILED = 'operation_failed'


# Operation categories (action_category)
class ActionCategory:
    AUTH = 'auth'
    PATIENT = 'patient'
    DOCTOR = 'doctor'
    APPOINTMENT = 'appointment'
    VISIT = 'visit'
    INVOICE = 'invoice'
    ERROR = 'error'


ACTION_DESCRIPTIONS = {
    ActionType.LOGIN: 'Signed in',
    ActionType.LOGIN_FAILED: 'Failed sign-in attempt',
    ActionType.LOGOUT: 'Signed out',
    ActionType.PASSWORD_RESET: 'Password reset',

    ActionType.PATIENT_CREATE: 'Patient registered',

    ActionType.DOCTOR_CREATE: 'Doctor added',
    ActionType.DOCTOR_UPDATE: 'Doctor updated',

    ActionType.APPOINTMENT_CREATE: 'Appointment booked',
    ActionType.APPOINTMENT_STATUS: 'Appointment status changed',

    ActionType.VISIT_START: 'Visit opened',
    ActionType.VISIT_UPDATE: 'Clinical notes saved',
    ActionType.ITEM_ADD: 'Treatment item added',
    ActionType.ITEM_UPDATE: 'Treatment item edited',
    ActionType.ITEM_DELETE: 'Treatment item removed',
    ActionType.RX_ADD: 'Prescription added',
    ActionType.RX_UPDATE: 'Prescription edited',
    ActionType.RX_DELETE: 'Prescription removed',

    ActionType.INVOICE_CREATE: 'Invoice issued',

    ActionType.OPERATION_FAILED: 'Operation rejected',
}


def _request_actor():
    """(user_id, username, ip_address, user_agent) of the current request, if any."""
    from flask import has_request_context, request, session

    if not has_request_context():
        return None, None, None, None

    user = session.get('user') or {}
    ip_address = request.remote_addr
    user_agent = request.headers.get('User-Agent', '')[:200]
    return user.get('user_id'), user.get('username'), ip_address, user_agent


def log_activity(
    action_type: str,
    action_category: str,
    description: str = None,
    target_type: str = None,
    target_id: int = None,
    patient_id: int = None,
    amount: float = 0,
    old_value: str = None,
    new_value: str = None,
    user_id: int = None,
    username: str = None,
    db=None,
):
    """
    Record an operation in the audit log.

    The row is written on the caller's connection without committing, so it
    lands or rolls back together with the operation it describes.

    Args:
        action_type: operation type (from ActionType)
        action_category: category (from ActionCategory)
        description: custom text; defaults to ACTION_DESCRIPTIONS
        target_type: entity kind ('appointment', 'visit', 'invoice', ...)
        target_id: entity id
        patient_id: related patient
        amount: money involved, if any
        old_value / new_value: before and after for edits
        user_id / username: actor; taken from the session when omitted
    """
    db = db if db is not None else get_db()

    req_user_id, req_username, ip_address, user_agent = _request_actor()
    if user_id is None:
        user_id, username = req_user_id, req_username

    if user_id is None:
        user_id = 0
        username = username or 'system'

    if description is None:
        description = ACTION_DESCRIPTIONS.get(action_type, action_type)

    db.execute("""
        INSERT INTO activity_logs (
            user_id, username, action_type, action_category, description,
            target_type, target_id, patient_id, amount, old_value, new_value,
            ip_address, user_agent, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        user_id, username, action_type, action_category, description,
        target_type, target_id, patient_id, amount or 0, old_value, new_value,
        ip_address, user_agent, format_db_datetime(clinic_now())
    ))


def log_failure(operation: str, error, db=None):
    """Record a rejected operation: error kind, operation and entity id. Commits on its own."""
    db = db if db is not None else get_db()
    try:
        with db:
            log_activity(
                action_type=ActionType.OPERATION_FAILED,
                action_category=ActionCategory.ERROR,
                description=f'{operation}: [{error.kind}] {error.message}',
                target_type=error.entity,
                target_id=error.entity_id if isinstance(error.entity_id, int) else None,
                new_value=error.kind,
                db=db,
            )
    except Exception as e:
        # The audit log must never mask the original error.
        print(f"[ActivityLogger] Error logging failure of {operation}: {e}")


def get_activity_logs(
    action_type: str = None,
    action_category: str = None,
    target_type: str = None,
    target_id: int = None,
    patient_id: int = None,
    limit: int = 100,
    offset: int = 0,
    db=None,
) -> list:
    """List audit rows, newest first, with optional filters."""
    db = db if db is not None else get_db()

    query = "SELECT * FROM activity_logs WHERE 1=1"
    params = []

    if action_type:
        query += " AND action_type = ?"
        params.append(action_type)

    if action_category:
        query += " AND action_category = ?"
        params.append(action_category)

    if target_type:
        query += " AND target_type = ?"
        params.append(target_type)

    if target_id:
        query += " AND target_id = ?"
        params.append(target_id)

    if patient_id:
        query += " AND patient_id = ?"
        params.append(patient_id)

    query += " ORDER BY id DESC LIMIT ? OFFSET ?"
    params.extend([limit, offset])

    with db_lock:
        rows = db.execute(query, params).fetchall()
    return [dict(row) for row in rows]
