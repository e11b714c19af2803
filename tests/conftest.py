import os, sys
import tempfile
import pytest

# Ensure project root in path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app import create_app
from config import Config
from extensions import cache


class TestConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'test-secret'
    BACKEND_URL = 'http://backend.test:3000'
    LOCAL_TIMEZONE = 'Asia/Jakarta'
    CACHE_TYPE = 'SimpleCache'
    LOG_DIR = tempfile.mkdtemp(prefix='pos_admin_logs_')


HEALTHY = {'ok': True, 'latency': 3, 'message': 'Connected', 'data': {'status': 'ok', 'db': 'ok'}}
DOWN = {'ok': False, 'latency': 5, 'message': 'Connection refused', 'data': None}


@pytest.fixture(scope='session')
def test_app():
    app = create_app(TestConfig)
    yield app


@pytest.fixture(autouse=True)
def clear_cache(test_app):
    with test_app.app_context():
        cache.clear()
    yield


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def backend_health(monkeypatch):
    """Switchable stand-in for GET /health; starts healthy."""
    state = {'result': dict(HEALTHY), 'calls': []}

    def fake_check(url=None):
        state['calls'].append(url)
        return dict(state['result'])

    import services.health
    import routes.main
    import routes.settings
    monkeypatch.setattr(services.health, 'check_backend_health', fake_check)
    monkeypatch.setattr(routes.main, 'check_backend_health', fake_check)
    monkeypatch.setattr(routes.settings, 'check_backend_health', fake_check)
    return state


@pytest.fixture()
def fake_backend(monkeypatch, backend_health):
    """In-memory products/orders behind the backend_api functions."""
    from services import backend_api

    store = {
        'products': {
            1: {'id': 1, 'name': 'Brownies', 'description': 'Fudgy', 'price': 50000, 'imageUrl': None},
            2: {'id': 2, 'name': 'Nastar', 'description': None, 'price': 12500, 'imageUrl': None},
        },
        'orders': {
            10: {
                'id': 10, 'customerName': 'Budi', 'notes': None,
                'pickupDate': '2024-05-01T03:30:00.000Z', 'createdAt': '2024-04-28T02:00:00.000Z',
                'items': [
                    {'id': 100, 'itemType': 'product', 'productId': 1, 'amount': 2,
                     'priceAtSale': None, 'product': {'id': 1, 'name': 'Brownies', 'price': 50000}},
                    {'id': 101, 'itemType': 'custom', 'customName': 'Gift box', 'customPrice': 15000,
                     'notes': 'red ribbon'},
                ],
            },
        },
        'calls': [],
        'next_id': 50,
    }

    def _not_found(kind, key):
        raise backend_api.BackendNotFoundError(f'{kind} not found', status=404)

    def list_products():
        store['calls'].append(('list_products',))
        return list(store['products'].values())

    def get_product(pid):
        store['calls'].append(('get_product', pid))
        if pid not in store['products']:
            _not_found('Product', pid)
        return store['products'][pid]

    def create_product(data, image=None):
        store['calls'].append(('create_product', data, image))
        store['next_id'] += 1
        row = dict(data, id=store['next_id'])
        store['products'][row['id']] = row
        return row

    def update_product(pid, data, image=None):
        store['calls'].append(('update_product', pid, data, image))
        row = dict(store['products'][pid], **data)
        store['products'][pid] = row
        return row

    def delete_product(pid):
        store['calls'].append(('delete_product', pid))
        store['products'].pop(pid, None)
        return {'ok': True}

    def list_orders():
        store['calls'].append(('list_orders',))
        return list(store['orders'].values())

    def get_order(oid):
        store['calls'].append(('get_order', oid))
        if oid not in store['orders']:
            _not_found('Order', oid)
        return store['orders'][oid]

    def create_order(data):
        store['calls'].append(('create_order', data))
        store['next_id'] += 1
        row = dict(data, id=store['next_id'])
        store['orders'][row['id']] = row
        return row

    def update_order(oid, data):
        store['calls'].append(('update_order', oid, data))
        row = dict(store['orders'][oid], **data)
        store['orders'][oid] = row
        return row

    def delete_order(oid):
        store['calls'].append(('delete_order', oid))
        store['orders'].pop(oid, None)
        return {'ok': True}

    def print_order(oid):
        store['calls'].append(('print_order', oid))
        return {'printed': True, 'devicePath': '/dev/usb/lp0', 'orderId': oid}

    for fn in (list_products, get_product, create_product, update_product, delete_product,
               list_orders, get_order, create_order, update_order, delete_order, print_order):
        monkeypatch.setattr(backend_api, fn.__name__, fn)
    return store


def calls_named(store, name):
    return [c for c in store['calls'] if c[0] == name]
