from flask import Blueprint, g, jsonify, request

from clinicdesk.api.auth import is_patient, login_required
from clinicdesk.common.errors import NotFound
from clinicdesk.common.utils import to_json
from clinicdesk.services.clinic_service import ClinicService

bp = Blueprint('billing', __name__, url_prefix='/api/invoices')


@bp.route('/')
@login_required
def index():
    """Newest first. `q` matches invoice number or MRN."""
    patient_id = g.user['user_id'] if is_patient() else request.args.get('patient_id', type=int)
    invoices = ClinicService().list_invoices(search=request.args.get('q'), patient_id=patient_id)
    return jsonify({'invoices': to_json(invoices)})


@bp.route('/<int:invoice_id>')
@login_required
def detail(invoice_id):
    details = ClinicService().get_invoice_details(invoice_id)
    if details is None or (is_patient() and details.patient.id != g.user['user_id']):
        raise NotFound('invoice', invoice_id)
    return jsonify(to_json(details))
