"""JSON API tests."""
from conftest import manual_item, catalog_item


def _create(api, **overrides):
    body = {
        'company': 'casablanca',
        'client_name': 'Ana Pérez',
        'client_email': 'ana@example.com',
        'items': [manual_item()],
    }
    body.update(overrides)
    return api.client.post('/quotations/', json=body)


def test_requires_login(api):
    resp = api.client.get('/quotations/')
    assert resp.status_code == 401
    assert resp.get_json()['error'] == 'unauthorized'


def test_seller_creates_quotation(api):
    api.login('seller')
    resp = _create(api)
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['quotation_number'] == 'CASA-400'
    assert data['total'] == '123760.00'
    assert data['seller_id'] == api.ids['seller']
    assert data['created_by_id'] == api.ids['seller']


def test_list_quotations(api):
    api.login('seller')
    _create(api)
    _create(api, company='kubica')
    data = api.client.get('/quotations/?company=kubica').get_json()
    assert data['total'] == 1
    assert data['quotations'][0]['quotation_number'] == 'KUB-1000'


def test_create_form_errors(api):
    api.login('seller')
    resp = _create(api, client_name='')
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['error'] == 'validation_error'
    assert 'client_name' in body['errors']


def test_create_item_errors(api):
    api.login('seller')
    resp = _create(api, items=[catalog_item(quantity=0)])
    assert resp.status_code == 400
    assert resp.get_json()['errors']


def test_unknown_company(api):
    api.login('manager')
    resp = _create(api, company='nowhere')
    assert resp.status_code == 500
    assert resp.get_json()['error'] == 'configuration_error'


def test_worker_cannot_create(api):
    api.login('worker')
    assert _create(api).status_code == 403


def test_unknown_quotation(api):
    api.login('manager')
    resp = api.client.get('/quotations/missing')
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'not_found'


def test_draft_totals(api):
    api.login('seller')
    resp = api.client.post('/quotations/draft/totals', json={
        'company': 'casablanca',
        'discount_percent': '10',
        'items': [catalog_item(unit_price='100000', quantity=2)],
    })
    assert resp.status_code == 200
    assert resp.get_json()['totals']['total'] == '214200.00'


def test_create_from_draft(api):
    api.login('seller')
    resp = api.client.post('/quotations/draft', json={'draft': {
        'company': 'kubica',
        'client': {'name': 'Luis'},
        'items': [catalog_item()],
    }})
    assert resp.status_code == 201
    assert resp.get_json()['quotation_number'] == 'KUB-1000'


def test_accept_reject_and_revert(api):
    api.login('seller')
    first = _create(api).get_json()['id']
    second = _create(api).get_json()['id']

    assert api.client.post(f'/quotations/{first}/status', json={'status': 'accepted'}).status_code == 403

    api.login('manager')
    resp = api.client.post(f'/quotations/{first}/status', json={
        'status': 'accepted',
        'seller_id': api.ids['seller'],
        'seller_payout': '50000',
        'worker_assignments': [{'worker_id': api.ids['worker'], 'payout': '30000'}],
    })
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['quotation']['status'] == 'accepted'
    assert body['job_id']

    again = api.client.post(f'/quotations/{first}/status', json={'status': 'accepted'})
    assert again.status_code == 400
    assert again.get_json()['error'] == 'invalid_transition'

    assert api.client.post(f'/quotations/{second}/status', json={'status': 'rejected'}).status_code == 200

    reverted = api.client.post(f'/quotations/{first}/status', json={'status': 'pending'}).get_json()
    assert reverted['quotation']['status'] == 'pending'
    assert reverted['side_effects_kept'] is True

    assert len(api.client.get('/jobs/').get_json()) == 1
    clients = api.client.get('/clients/').get_json()
    assert len(clients) == 1
    detail = api.client.get(f"/clients/{clients[0]['id']}").get_json()
    assert len(detail['jobs']) == 1
    assigned = api.client.get(f'/quotations/{first}/assignments').get_json()
    assert [a['payout'] for a in assigned] == ['30000.00']


def test_edit_and_history(api):
    api.login('seller')
    quotation_id = _create(api).get_json()['id']
    missing = api.client.put(f'/quotations/{quotation_id}', json={'items': [manual_item(quantity=2)]})
    assert missing.status_code == 400

    resp = api.client.put(f'/quotations/{quotation_id}', json={
        'description': 'Two units',
        'items': [manual_item(quantity=2)],
    })
    assert resp.status_code == 200
    assert resp.get_json()['total'] == '247520.00'
    history = api.client.get(f'/quotations/{quotation_id}/history').get_json()
    assert [h['description'] for h in history] == ['Two units']


def test_payment(api):
    api.login('seller')
    quotation_id = _create(api).get_json()['id']
    api.login('manager')
    assert api.client.post(f'/quotations/{quotation_id}/payment', json={'amount_paid': '10'}).status_code == 400
    api.client.post(f'/quotations/{quotation_id}/status', json={'status': 'accepted'})
    resp = api.client.post(f'/quotations/{quotation_id}/payment', json={'amount_paid': '60000'})
    assert resp.status_code == 200
    assert resp.get_json()['payment_status'] == 'partially_paid'


def test_costs_and_reconciliation(api):
    api.login('seller')
    quotation_id = _create(api, items=[manual_item(quantity=15)]).get_json()['id']
    assert api.client.get(f'/costs/{quotation_id}/labor').status_code == 403

    api.login('manager')
    resp = api.client.post(f'/costs/{quotation_id}/labor', json={
        'calculation_type': 'amount', 'manual_amount': '100', 'scope': 'per_unit',
    })
    assert resp.status_code == 201
    record_id = resp.get_json()['id']

    bad = api.client.post(f'/costs/{quotation_id}/petty', json={
        'description': 'Glue', 'amount': '10', 'scope': 'partial', 'applied_units': '20',
    })
    assert bad.status_code == 400

    report = api.client.get(f'/quotations/{quotation_id}/reconciliation').get_json()
    assert report['actual']['labor'] == '1500.00'

    resp = api.client.put(f'/costs/labor/{record_id}', json={'scope': 'total'})
    assert resp.status_code == 200
    report = api.client.get(f'/quotations/{quotation_id}/reconciliation').get_json()
    assert report['actual']['labor'] == '100.00'

    assert api.client.delete(f'/costs/labor/{record_id}').status_code == 204
    assert api.client.get(f'/costs/{quotation_id}/labor').get_json() == []


def test_liquidations(api):
    api.login('seller')
    quotation_id = _create(api).get_json()['id']
    api.login('manager')
    api.client.post(f'/quotations/{quotation_id}/status', json={
        'status': 'accepted',
        'worker_assignments': [{'worker_id': api.ids['worker'], 'payout': '30000'}],
    })

    too_much = api.client.post('/liquidations/', json={'person_id': api.ids['worker'], 'amount': '30001'})
    assert too_much.status_code == 400
    assert too_much.get_json()['balance_pending'] == '30000.00'

    resp = api.client.post('/liquidations/', json={
        'person_id': api.ids['worker'], 'amount': '30000', 'method': 'cash',
    })
    assert resp.status_code == 201

    again = api.client.post('/liquidations/', json={'person_id': api.ids['worker'], 'amount': '1'})
    assert again.status_code == 400

    balances = api.client.get('/liquidations/balances').get_json()
    worker = [b for b in balances if b['person_id'] == api.ids['worker']][0]
    assert worker['balance_pending'] == '0.00'
    summary = api.client.get('/liquidations/summary').get_json()
    assert summary['liquidated_this_month'] == '30000.00'

    api.login('worker')
    own = api.client.get(f"/liquidations/people/{api.ids['worker']}").get_json()
    assert own['balance']['earned'] == '30000.00'
    assert len(own['liquidations']) == 1
    assert api.client.get(f"/liquidations/people/{api.ids['seller']}").status_code == 403


def test_profitability_report(api):
    api.login('seller')
    quotation_id = _create(api, items=[catalog_item(unit_price='10000')]).get_json()['id']
    assert api.client.get('/reports/profitability').status_code == 403
    api.login('admin')
    api.client.post(f'/quotations/{quotation_id}/status', json={'status': 'accepted'})
    stats = api.client.get('/reports/profitability').get_json()
    assert stats['projects_count'] == 1
    assert stats['projects'][0]['profit'] == '11900.00'


def test_activity_trail(api):
    api.login('seller')
    quotation_id = _create(api).get_json()['id']
    api.login('manager')
    api.client.post(f'/quotations/{quotation_id}/status', json={'status': 'accepted'})
    trail = api.client.get(f'/quotations/{quotation_id}/activity').get_json()
    assert [entry['action'] for entry in trail] == ['quotation.create', 'quotation.accept']
    assert trail[0]['user_id'] == api.ids['seller']
    assert trail[1]['details'] == 'CASA-400'


def test_pricing_settings(api):
    api.login('manager')
    assert api.client.get('/settings/pricing').get_json() == {'iva_percent': '19', 'margin_percent': '30'}
    assert api.client.put('/settings/pricing', json={'iva_percent': '16'}).status_code == 403

    api.login('admin')
    assert api.client.put('/settings/pricing', json={'iva_percent': '150'}).status_code == 400
    resp = api.client.put('/settings/pricing', json={'iva_percent': '16'})
    assert resp.status_code == 200
    assert resp.get_json()['iva_percent'] == '16'
    assert resp.get_json()['margin_percent'] == '30'

    api.login('seller')
    created = _create(api, items=[catalog_item(unit_price='1000')]).get_json()
    assert created['total'] == '1160.00'


def test_audit_log_admin_only(api):
    api.login('seller')
    _create(api)
    assert api.client.get('/settings/audit-log').status_code == 403
    api.login('admin')
    log = api.client.get('/settings/audit-log').get_json()
    assert log['total'] == 1
    assert log['entries'][0]['action'] == 'quotation.create'


def test_non_finite_numbers_are_form_errors(api):
    api.login('seller')
    resp = _create(api, margin_percent='NaN')
    assert resp.status_code == 400
    assert 'margin_percent' in resp.get_json()['errors']
    quotation_id = _create(api).get_json()['id']

    api.login('manager')
    resp = api.client.post(f'/costs/{quotation_id}/petty', json={'description': 'Glue', 'amount': 'Infinity'})
    assert resp.status_code == 400
    resp = api.client.post('/liquidations/', json={'person_id': api.ids['worker'], 'amount': 'NaN'})
    assert resp.status_code == 400
