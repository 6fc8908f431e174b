from flask import Blueprint, jsonify

from clinicdesk.api.auth import request_data, require_fields, staff_required
from clinicdesk.common.errors import NotFound
from clinicdesk.common.utils import to_json
from clinicdesk.services.clinic_service import ClinicService

bp = Blueprint('clinical', __name__, url_prefix='/api/visits')


def _price_override(data: dict):
    """A blank form field means the catalog price; 0 is a real price."""
    price = data.get('price')
    if isinstance(price, str) and not price.strip():
        return None
    return price


@bp.route('/by-appointment/<int:appt_id>')
@staff_required
def by_appointment(appt_id):
    visit = ClinicService().get_visit_by_appointment(appt_id)
    if visit is None:
        raise NotFound('visit', appt_id)
    return jsonify({'visit': to_json(visit)})


@bp.route('/', methods=('POST',))
@staff_required
def start():
    """Open the visit of an appointment (or return the one already open)."""
    data = request_data()
    require_fields(data, 'appt_id')
    visit = ClinicService().start_visit(data['appt_id'], data.get('complaint', ''))
    return jsonify({'visit': to_json(visit)}), 201


@bp.route('/<int:visit_id>')
@staff_required
def detail(visit_id):
    visit = ClinicService().get_visit(visit_id)
    if visit is None:
        raise NotFound('visit', visit_id)
    return jsonify({'visit': to_json(visit)})


@bp.route('/<int:visit_id>', methods=('PATCH',))
@staff_required
def update_notes(visit_id):
    visit = ClinicService().update_visit(visit_id, request_data())
    return jsonify({'visit': to_json(visit)})


# ---- Treatment items ----
@bp.route('/<int:visit_id>/items', methods=('POST',))
@staff_required
def add_item(visit_id):
    data = request_data()
    require_fields(data, 'procedure_id')
    service = ClinicService()
    item = service.add_visit_item(visit_id, data['procedure_id'], _price_override(data))
    return jsonify({'item': to_json(item), 'total_amount': service.get_visit(visit_id).total_amount}), 201


@bp.route('/<int:visit_id>/items/<int:item_id>', methods=('PATCH',))
@staff_required
def update_item(visit_id, item_id):
    data = request_data()
    service = ClinicService()
    item = service.update_visit_item(visit_id, item_id, data.get('procedure_id') or None, _price_override(data))
    return jsonify({'item': to_json(item), 'total_amount': service.get_visit(visit_id).total_amount})


@bp.route('/<int:visit_id>/items/<int:item_id>', methods=('DELETE',))
@staff_required
def delete_item(visit_id, item_id):
    visit = ClinicService().delete_visit_item(visit_id, item_id)
    return jsonify({'visit': to_json(visit)})


# ---- Prescriptions ----
@bp.route('/<int:visit_id>/prescriptions', methods=('POST',))
@staff_required
def add_prescription(visit_id):
    data = request_data()
    rx = ClinicService().add_prescription(visit_id, data.get('medication'), data.get('instructions', ''))
    return jsonify({'prescription': to_json(rx)}), 201


@bp.route('/prescriptions/<int:rx_id>', methods=('PATCH', 'PUT'))
@staff_required
def update_prescription(rx_id):
    data = request_data()
    rx = ClinicService().update_prescription(rx_id, data.get('medication'), data.get('instructions', ''))
    return jsonify({'prescription': to_json(rx)})


@bp.route('/prescriptions/<int:rx_id>', methods=('DELETE',))
@staff_required
def delete_prescription(rx_id):
    ClinicService().delete_prescription(rx_id)
    return jsonify({'ok': True})


@bp.route('/<int:visit_id>/finalize', methods=('POST',))
@staff_required
def finalize(visit_id):
    invoice = ClinicService().finalize_visit_and_invoice(visit_id)
    return jsonify({'invoice': to_json(invoice)}), 201
