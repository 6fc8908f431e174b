def login_patient(client, mrn, password='password123'):
    resp = client.post('/auth/login', json={'identifier': mrn, 'password': password})
    assert resp.status_code == 200
    return resp.get_json()['user']


def setup_clinic(client):
    doctor = client.post('/api/doctors', json={
        'doctor_code': 'DOC001', 'full_name': 'Dr. Bashir Khan', 'specialty': 'Dental Surgeon',
    }).get_json()['doctor']
    patient = client.post('/api/patients/', json={
        'full_name': 'Irfan Ali', 'mobile_no': '0304-4444444',
    }).get_json()['patient']
    return doctor, patient


def test_requires_login(client):
    resp = client.get('/api/patients/')
    assert resp.status_code == 401
    assert 'error' in resp.get_json()


def test_login_and_me(admin_client):
    me = admin_client.get('/auth/me').get_json()['user']
    assert me['username'] == 'Admin'

    admin_client.post('/auth/logout')
    assert admin_client.get('/auth/me').status_code == 401


def test_bad_login(client):
    resp = client.post('/auth/login', json={'identifier': 'Admin', 'password': 'nope'})
    assert resp.status_code == 401


def test_front_desk_flow(admin_client):
    doctor, patient = setup_clinic(admin_client)
    assert patient['mrn'] == 'MRN0001'
    assert 'password_hash' not in patient

    resolved = admin_client.get('/api/patients/resolve?q=1').get_json()
    assert resolved['patient']['id'] == patient['id']
    assert admin_client.get('/api/patients/resolve?q=99').status_code == 404

    resp = admin_client.post('/api/appointments/', json={
        'patient_id': patient['id'], 'doctor_id': doctor['id'],
        'scheduled_at': '2030-01-07T10:00:00', 'duration_min': 15,
    })
    assert resp.status_code == 201
    appt = resp.get_json()['appointment']

    clash = admin_client.post('/api/appointments/', json={
        'patient_id': patient['id'], 'doctor_id': doctor['id'],
        'scheduled_at': '2030-01-07T10:10:00', 'duration_min': 15,
    })
    assert clash.status_code == 409

    day = admin_client.get('/api/appointments/?day=2030-01-07').get_json()['appointments']
    assert [a['id'] for a in day] == [appt['id']]
    assert day[0]['patient_name'] == 'Irfan Ali'

    checked = admin_client.post(f"/api/appointments/{appt['id']}/status", json={'status': 'CHECKED_IN'})
    assert checked.get_json()['appointment']['status'] == 'CHECKED_IN'

    visit = admin_client.post('/api/visits/', json={'appt_id': appt['id'], 'complaint': 'Pain'}).get_json()['visit']
    procedures = {p['code']: p for p in admin_client.get('/api/procedures').get_json()['procedures']}

    added = admin_client.post(f"/api/visits/{visit['id']}/items", json={'procedure_id': procedures['P001']['id']})
    assert added.get_json()['total_amount'] == 500
    added = admin_client.post(f"/api/visits/{visit['id']}/items", json={'procedure_id': procedures['P002']['id']})
    assert added.get_json()['total_amount'] == 2000

    rx = admin_client.post(f"/api/visits/{visit['id']}/prescriptions", json={'medication': 'Ibuprofen'})
    assert rx.status_code == 201

    notes = admin_client.patch(f"/api/visits/{visit['id']}", json={'diagnosis': 'Caries'})
    assert notes.get_json()['visit']['diagnosis'] == 'Caries'

    invoice = admin_client.post(f"/api/visits/{visit['id']}/finalize").get_json()['invoice']
    assert invoice['invoice_no'].endswith('-0001')
    assert invoice['total_amount'] == 2000

    details = admin_client.get(f"/api/invoices/{invoice['id']}").get_json()
    assert details['patient']['mrn'] == 'MRN0001'
    assert details['doctor']['full_name'] == 'Dr. Bashir Khan'
    assert len(details['items']) == 2

    listed = admin_client.get('/api/invoices/?q=MRN0001').get_json()['invoices']
    assert [i['id'] for i in listed] == [invoice['id']]


def test_validation_and_not_found(admin_client):
    resp = admin_client.post('/api/appointments/', json={'scheduled_at': '2030-01-07T10:00:00'})
    assert resp.status_code == 400

    doctor, _ = setup_clinic(admin_client)
    resp = admin_client.post('/api/appointments/', json={
        'patient_id': 42, 'doctor_id': doctor['id'], 'scheduled_at': '2030-01-07T10:00:00',
    })
    assert resp.status_code == 404

    assert admin_client.get('/api/visits/999').status_code == 404
    assert admin_client.get('/api/appointments/?day=yesterday').status_code == 400


def test_patient_sees_only_own_records(client, admin_client):
    doctor, patient = setup_clinic(admin_client)
    other = admin_client.post('/api/patients/', json={'full_name': 'Sadia Bibi'}).get_json()['patient']
    admin_client.post('/api/appointments/', json={
        'patient_id': other['id'], 'doctor_id': doctor['id'], 'scheduled_at': '2030-01-07T09:00:00',
    })
    admin_client.post('/auth/logout')

    login_patient(client, patient['mrn'])
    booked = client.post('/api/appointments/', json={
        'patient_id': other['id'], 'doctor_id': doctor['id'], 'scheduled_at': '2030-01-07T12:00:00',
    })
    assert booked.status_code == 201
    assert booked.get_json()['appointment']['patient_id'] == patient['id']

    mine = client.get('/api/appointments/').get_json()['appointments']
    assert {a['patient_id'] for a in mine} == {patient['id']}

    assert client.get(f"/api/patients/{other['id']}").status_code == 403
    assert client.get('/api/patients/').status_code == 403
    assert client.get('/api/dashboard').status_code == 403


def test_self_registration_returns_generated_password(client):
    resp = client.post('/auth/register', json={'full_name': 'Faiza', 'mobile_no': '0307-7777777'})
    assert resp.status_code == 201
    body = resp.get_json()

    user = login_patient(client, body['patient']['mrn'], body['password'])
    assert user['role'] == 'PATIENT'


def test_patient_recovery_flow(client, admin_client):
    _, patient = setup_clinic(admin_client)
    admin_client.post('/auth/logout')

    assert client.post('/auth/recovery/patient/reset',
                       json={'mrn': patient['mrn'], 'new_password': 'x1'}).status_code == 401

    verified = client.post('/auth/recovery/patient/verify', json={'phone': '0304-4444444'}).get_json()
    assert [p['mrn'] for p in verified['patients']] == [patient['mrn']]

    resp = client.post('/auth/recovery/patient/reset', json={'mrn': patient['mrn'], 'new_password': 'x1'})
    assert resp.status_code == 200
    login_patient(client, patient['mrn'], 'x1')


def test_admin_recovery_flow(client):
    resp = client.post('/auth/recovery/admin/verify', json={'username': 'Admin', 'phone': '0333-4216580'})
    assert resp.status_code == 200

    resp = client.post('/auth/recovery/admin/reset', json={'username': 'Admin', 'new_password': 'fresh'})
    assert resp.status_code == 200
    assert client.post('/auth/login', json={'identifier': 'Admin', 'password': 'fresh'}).status_code == 200


def test_dashboard_and_activity(admin_client):
    setup_clinic(admin_client)

    summary = admin_client.get('/api/dashboard').get_json()
    assert summary['active_doctors'] == 1

    logs = admin_client.get('/api/activity?action_type=patient_create').get_json()['logs']
    assert len(logs) == 1
    assert logs[0]['username'] == 'Admin'


def test_rejected_operation_is_audited(admin_client):
    admin_client.post('/api/patients/', json={'full_name': ''})

    logs = admin_client.get('/api/activity?action_category=error').get_json()['logs']
    assert logs and logs[0]['new_value'] == 'validation'


def test_doctor_update(admin_client):
    doctor, _ = setup_clinic(admin_client)

    resp = admin_client.patch(f"/api/doctors/{doctor['id']}", json={'active': 'N'})
    assert resp.get_json()['doctor']['active'] == 'N'
    assert admin_client.get('/api/doctors?active=1').get_json()['doctors'] == []


def test_blank_price_uses_catalog_price(admin_client):
    doctor, patient = setup_clinic(admin_client)
    appt = admin_client.post('/api/appointments/', json={
        'patient_id': patient['id'], 'doctor_id': doctor['id'], 'scheduled_at': '2030-01-07T10:00:00',
    }).get_json()['appointment']
    visit = admin_client.post('/api/visits/', json={'appt_id': appt['id']}).get_json()['visit']
    procedures = {p['code']: p for p in admin_client.get('/api/procedures').get_json()['procedures']}

    added = admin_client.post(f"/api/visits/{visit['id']}/items",
                              data={'procedure_id': procedures['P002']['id'], 'price': ''})
    assert added.status_code == 201
    assert added.get_json()['item']['amount'] == 1500

    item_id = added.get_json()['item']['id']
    free = admin_client.patch(f"/api/visits/{visit['id']}/items/{item_id}", json={'price': 0})
    assert free.get_json()['total_amount'] == 0

    resp = admin_client.post(f"/api/visits/{visit['id']}/items",
                             json={'procedure_id': procedures['P001']['id'], 'price': 'nan'})
    assert resp.status_code == 400


def test_booking_requires_doctor(admin_client):
    _, patient = setup_clinic(admin_client)
    resp = admin_client.post('/api/appointments/', json={
        'patient_id': patient['id'], 'scheduled_at': '2030-01-07T10:00:00',
    })
    assert resp.status_code == 400


def test_walk_in_booking_registers_patient(admin_client):
    doctor, _ = setup_clinic(admin_client)
    resp = admin_client.post('/api/appointments/', json={
        'full_name': 'Amina', 'mobile_no': '0306-6666666', 'age': 30,
        'doctor_id': doctor['id'], 'scheduled_at': '2030-01-07T11:00:00',
    })
    assert resp.status_code == 201
    appt = resp.get_json()['appointment']
    assert appt['patient_name'] == 'Amina'
    assert appt['mrn'] == 'MRN0002'

    again = admin_client.post('/api/appointments/', json={
        'mrn': 'mrn2', 'doctor_id': doctor['id'], 'scheduled_at': '2030-01-08T11:00:00',
    })
    assert again.get_json()['appointment']['patient_id'] == appt['patient_id']
