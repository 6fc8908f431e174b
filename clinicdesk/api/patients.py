from flask import Blueprint, g, jsonify, request

from clinicdesk.api.auth import is_patient, login_required, request_data, staff_required
from clinicdesk.common.errors import NotFound
from clinicdesk.common.utils import to_json
from clinicdesk.services.clinic_service import ClinicService

bp = Blueprint('patients', __name__, url_prefix='/api/patients')


@bp.route('/')
@staff_required
def index():
    """All patients, or those whose name, MRN or mobile contains `q`."""
    patients = ClinicService().list_patients(request.args.get('q'))
    return jsonify({'patients': to_json(patients)})


@bp.route('/', methods=('POST',))
@staff_required
def create():
    """Staff registration. Re-registering an existing MRN returns the stored patient."""
    patient = ClinicService().register_patient(request_data())
    return jsonify({'patient': to_json(patient)}), 201


@bp.route('/resolve')
@staff_required
def resolve():
    """Look up a typed MRN ('MRN0004', 'mrn4', '4'). 404 means: register a new patient."""
    identifier = request.args.get('q', '')
    patient = ClinicService().resolve_patient(identifier)
    if patient is None:
        raise NotFound('patient', identifier)
    return jsonify({'patient': to_json(patient), 'age': patient.age})


@bp.route('/<int:patient_id>')
@login_required
def detail(patient_id):
    if is_patient() and g.user['user_id'] != patient_id:
        return jsonify({'error': 'You can only view your own record'}), 403

    patient = ClinicService().get_patient(patient_id)
    if patient is None:
        raise NotFound('patient', patient_id)
    return jsonify({'patient': to_json(patient), 'age': patient.age})


@bp.route('/<int:patient_id>/history')
@login_required
def history(patient_id):
    if is_patient() and g.user['user_id'] != patient_id:
        return jsonify({'error': 'You can only view your own record'}), 403

    appointments = ClinicService().patient_history(patient_id)
    return jsonify({'appointments': to_json(appointments)})
