from datetime import date

from flask import Blueprint, g, jsonify, request

from clinicdesk.api.auth import is_patient, login_required, request_data, require_fields, staff_required
from clinicdesk.common.errors import NotFound, ValidationError
from clinicdesk.common.utils import to_json
from clinicdesk.services.clinic_service import ClinicService

bp = Blueprint('appointments', __name__, url_prefix='/api/appointments')


def _parse_day(value):
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid day '{value}', expected YYYY-MM-DD", 'appointment')


@bp.route('/')
@login_required
def index():
    """Appointments ordered by time. Patients only ever see their own."""
    patient_id = request.args.get('patient_id', type=int)
    if is_patient():
        patient_id = g.user['user_id']

    appointments = ClinicService().list_appointments(
        patient_id=patient_id,
        day=_parse_day(request.args.get('day')),
    )
    return jsonify({'appointments': to_json(appointments)})


@bp.route('/', methods=('POST',))
@login_required
def create():
    """
    Book an appointment. Staff may send `mrn` (resolved, or registered when
    new, together with `full_name`, `mobile_no` and `age`) instead of `patient_id`.
    """
    data = request_data()
    require_fields(data, 'doctor_id', 'scheduled_at')
    service = ClinicService()

    if is_patient():
        appt = service.create_appointment(
            g.user['user_id'],
            doctor_id=data.get('doctor_id'),
            scheduled_at=data.get('scheduled_at'),
            duration_min=data.get('duration_min'),
            remarks=data.get('remarks', ''),
        )
    else:
        appt = service.book_walk_in(data)
    return jsonify({'appointment': to_json(appt)}), 201


@bp.route('/<int:appt_id>')
@login_required
def detail(appt_id):
    appt = ClinicService().get_appointment(appt_id)
    if appt is None or (is_patient() and appt.patient_id != g.user['user_id']):
        raise NotFound('appointment', appt_id)
    return jsonify({'appointment': to_json(appt)})


@bp.route('/<int:appt_id>/status', methods=('POST', 'PATCH'))
@staff_required
def update_status(appt_id):
    data = request_data()
    require_fields(data, 'status')
    appt = ClinicService().update_appointment_status(appt_id, data['status'])
    return jsonify({'appointment': to_json(appt)})
