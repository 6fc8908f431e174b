from flask import Blueprint, jsonify, request

from clinicdesk.api.auth import login_required, request_data, staff_required
from clinicdesk.common.utils import to_json
from clinicdesk.services.clinic_service import ClinicService

bp = Blueprint('doctors', __name__, url_prefix='/api')


@bp.route('/doctors')
@login_required
def index():
    active_only = request.args.get('active') in ('1', 'true', 'Y')
    return jsonify({'doctors': to_json(ClinicService().list_doctors(active_only=active_only))})


@bp.route('/doctors', methods=('POST',))
@staff_required
def create():
    doctor = ClinicService().add_doctor(request_data())
    return jsonify({'doctor': to_json(doctor)}), 201


@bp.route('/doctors/<int:doctor_id>', methods=('PATCH', 'PUT'))
@staff_required
def update(doctor_id):
    """Edit a doctor; send {"active": "N"} to deactivate."""
    doctor = ClinicService().update_doctor(doctor_id, request_data())
    return jsonify({'doctor': to_json(doctor)})


@bp.route('/procedures')
@login_required
def procedures():
    return jsonify({'procedures': to_json(ClinicService().list_procedures())})
