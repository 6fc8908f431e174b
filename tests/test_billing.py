from datetime import date

from clinicdesk.domain.appointments import AppointmentStatus
from clinicdesk.domain.visits import VisitStatus


def bill(service, visit, procedures, *codes):
    for code in codes:
        service.add_visit_item(visit.id, procedures[code].id)
    return service.finalize_visit_and_invoice(visit.id)


def test_finalize_issues_invoice(service, visit, procedures):
    invoice = bill(service, visit, procedures, 'P001', 'P002')

    assert invoice.invoice_no == 'INV-2025-0001'
    assert invoice.subtotal == 2000
    assert invoice.total_amount == 2000
    assert invoice.status == 'UNPAID'
    assert service.get_visit(visit.id).status == VisitStatus.BILLED
    assert service.get_appointment(visit.appt_id).status == AppointmentStatus.COMPLETED


def test_finalize_twice_returns_same_invoice(service, visit, procedures):
    first = bill(service, visit, procedures, 'P001')
    second = service.finalize_visit_and_invoice(visit.id)

    assert second.id == first.id
    assert len(service.list_invoices()) == 1


def test_invoice_is_a_snapshot(service, visit, procedures):
    invoice = bill(service, visit, procedures, 'P001', 'P002')
    service.add_visit_item(visit.id, procedures['P003'].id)

    details = service.get_invoice_details(invoice.id)
    assert details.invoice.total_amount == 2000
    assert details.visit.total_amount == 5000


def test_invoice_details(service, visit, procedures, patient, doctor):
    service.add_prescription(visit.id, 'Ibuprofen')
    invoice = bill(service, visit, procedures, 'P001')

    details = service.get_invoice_details(invoice.id)
    assert details.patient.id == patient.id
    assert details.doctor.id == doctor.id
    assert [i.proc_name for i in details.items] == ['Oral Exam']
    assert [p.medication for p in details.prescriptions] == ['Ibuprofen']
    assert service.get_invoice_details(999) is None


def test_invoice_numbers_increase(service, visit, procedures, patient, doctor):
    bill(service, visit, procedures, 'P001')
    appt = service.create_appointment(patient.id, doctor.id, '2025-03-10 15:00', 15)
    second = service.finalize_visit_and_invoice(service.start_visit(appt.id).id)

    assert second.invoice_no == 'INV-2025-0002'


def test_list_invoices_search(service, visit, procedures, patient):
    invoice = bill(service, visit, procedures, 'P001')

    assert [i.id for i in service.list_invoices('INV-2025')] == [invoice.id]
    assert [i.mrn for i in service.list_invoices(patient.mrn)] == [patient.mrn]
    assert service.list_invoices('INV-1999') == []


def test_dashboard_summary(service, visit, procedures, patient, doctor):
    service.create_appointment(patient.id, doctor.id, '2025-03-10 16:00', 15)
    cancelled = service.create_appointment(patient.id, doctor.id, '2025-03-10 17:00', 15)
    service.update_appointment_status(cancelled.id, 'CANCELLED')
    bill(service, visit, procedures, 'P002')

    summary = service.dashboard_summary()
    assert summary['day'] == '2025-03-10'
    assert summary['appointments'] == 3
    assert summary['scheduled'] == 1
    assert summary['pending'] == 1
    assert summary['checked_in'] == 1
    assert summary['cancelled'] == 1
    assert summary['active_doctors'] == 1
    assert summary['invoices'] == 1
    assert summary['revenue'] == 1500

    assert service.dashboard_summary(date(2025, 1, 1))['appointments'] == 0
