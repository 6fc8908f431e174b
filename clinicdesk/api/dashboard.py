from datetime import date

from flask import Blueprint, jsonify, request

from clinicdesk.api.auth import admin_required, staff_required
from clinicdesk.common.errors import ValidationError
from clinicdesk.services.activity_logger import get_activity_logs
from clinicdesk.services.clinic_service import ClinicService

bp = Blueprint('dashboard', __name__, url_prefix='/api')


@bp.route('/dashboard')
@staff_required
def index():
    day = request.args.get('day')
    try:
        day = date.fromisoformat(day) if day else None
    except ValueError:
        raise ValidationError(f"Invalid day '{day}', expected YYYY-MM-DD")
    return jsonify(ClinicService().dashboard_summary(day))


@bp.route('/activity')
@admin_required
def activity():
    logs = get_activity_logs(
        action_type=request.args.get('action_type'),
        action_category=request.args.get('action_category'),
        target_type=request.args.get('target_type'),
        target_id=request.args.get('target_id', type=int),
        patient_id=request.args.get('patient_id', type=int),
        limit=request.args.get('limit', 100, type=int),
        offset=request.args.get('offset', 0, type=int),
    )
    return jsonify({'logs': logs})
