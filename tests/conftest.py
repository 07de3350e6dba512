"""Shared fixtures."""
from types import SimpleNamespace

import pytest

from quoting import create_app, db
from quoting.models import User


@pytest.fixture
def app():
    app = create_app('testing')
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def db_ctx(app, app_ctx):
    db.create_all()
    yield
    db.session.remove()
    db.drop_all()


def _staff():
    people = {
        'admin': User(username='admin', role='admin'),
        'manager': User(username='manager', role='manager'),
        'seller': User(username='seller', full_name='Sara Seller', role='seller'),
        'worker': User(username='worker', full_name='Walter Worker', role='worker', specialty='carpentry'),
        'worker2': User(username='worker2', role='worker'),
    }
    db.session.add_all(people.values())
    db.session.commit()
    return people


@pytest.fixture
def staff(db_ctx):
    """Users for service tests (inside an app context)."""
    return SimpleNamespace(**_staff())


@pytest.fixture
def api(app):
    """Test client plus staff ids, without a long-lived app context.

    Every request then gets a fresh app context, so the logged-in user is
    loaded per request.
    """
    with app.app_context():
        db.create_all()
        ids = {name: user.id for name, user in _staff().items()}
    client = app.test_client()

    def login(role):
        with client.session_transaction() as sess:
            sess['_user_id'] = ids[role]
            sess['_fresh'] = True

    yield SimpleNamespace(client=client, login=login, ids=ids, app=app)
    with app.app_context():
        db.session.remove()
        db.drop_all()


def manual_item(item_id='m1', quantity=1, materials=None, services=None, **extra):
    data = {
        'type': 'manual',
        'id': item_id,
        'name': 'Custom wardrobe',
        'quantity': quantity,
        'materials': materials if materials is not None else [
            {'name': 'Melamine board', 'quantity': '2', 'unit_price': '30000'},
        ],
        'services': services if services is not None else [
            {'name': 'Assembly', 'hours': '4', 'hourly_rate': '5000'},
        ],
        'margin_percent': '30',
    }
    data.update(extra)
    return data


def catalog_item(item_id='c1', quantity=1, unit_price='100000', **extra):
    data = {
        'type': 'catalog',
        'id': item_id,
        'catalog_ref_id': 'sofa-01',
        'name': 'Sofa',
        'quantity': quantity,
        'unit_price': unit_price,
    }
    data.update(extra)
    return data


@pytest.fixture
def items():
    return SimpleNamespace(manual=manual_item, catalog=catalog_item)


@pytest.fixture
def make_quotation(staff, items):
    from quoting.services import QuotationService

    def make(company='casablanca', item_list=None, **kwargs):
        fields = {
            'client_name': 'Ana Pérez',
            'client_email': 'ana@example.com',
            'client_phone': '+56 9 1111 2222',
        }
        fields.update(kwargs)
        return QuotationService.create_quotation(
            company=company,
            items_data=item_list if item_list is not None else [items.manual()],
            **fields,
        )
    return make
