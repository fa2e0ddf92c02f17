import pytest
import threading
from decimal import Decimal

from comandas import create_app
from comandas.database import get_session, create_tables, drop_tables
from comandas.exceptions import PushDeliveryError
from comandas.models import User, UserRole, Category, Product, PushSubscription


class FakePushClient:
    """
    Stand-in for WebPushClient.

    outcomes maps an endpoint to the exception its delivery raises; any other
    endpoint succeeds. send() is called from worker threads, so calls is
    guarded by a lock.
    """

    def __init__(self, outcomes=None, configured=True):
        self.outcomes = dict(outcomes or {})
        self.configured = configured
        self.calls = []
        self._lock = threading.Lock()

    def is_configured(self):
        return self.configured

    def send(self, subscription_info, payload):
        with self._lock:
            self.calls.append((subscription_info, payload))
        error = self.outcomes.get(subscription_info['endpoint'])
        if error is not None:
            raise error

    @property
    def endpoints(self):
        with self._lock:
            return sorted(info['endpoint'] for info, _ in self.calls)


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite, inline push fan-out)."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(autouse=True)
def database(app):
    """Fresh schema for every test."""
    create_tables()
    yield
    get_session().remove()
    drop_tables()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture(scope='function')
def session():
    """Database session (thread-local, shared with requests made by the test client)."""
    session = get_session()
    yield session
    session.rollback()


@pytest.fixture(scope='function')
def push_client(app):
    """Replace the VAPID client with a recording fake for the duration of a test."""
    original = app.extensions['push_client']
    fake = FakePushClient()
    app.extensions['push_client'] = fake
    yield fake
    app.extensions['push_client'] = original


def _create_user(session, username, password, role):
    user = User(username=username, role=role)
    user.set_password(password)
    session.add(user)
    session.commit()
    return user.id


@pytest.fixture(scope='function')
def admin_id(session):
    """Create admin 'admin' / 'admin123'."""
    return _create_user(session, 'admin', 'admin123', UserRole.ADMIN.value)


@pytest.fixture(scope='function')
def waiter_id(session):
    """Create waiter 'mozo' / 'mozo123'."""
    return _create_user(session, 'mozo', 'mozo123', UserRole.WAITER.value)


def _login(client, username, password):
    response = client.post('/api/login', json={'username': username, 'password': password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()['token']


def _bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_id):
    return _bearer(_login(client, 'admin', 'admin123'))


@pytest.fixture(scope='function')
def waiter_headers(client, waiter_id):
    return _bearer(_login(client, 'mozo', 'mozo123'))


@pytest.fixture(scope='function')
def category_id(session):
    category = Category(name='Bebidas')
    session.add(category)
    session.commit()
    return category.id


@pytest.fixture(scope='function')
def products(session, category_id):
    """Two products: 'Coca Cola' at 10.00 and 'Empanada' at 2.50."""
    coke = Product(name='Coca Cola', price=Decimal('10.00'), category_id=category_id)
    empanada = Product(name='Empanada', price=Decimal('2.50'))
    session.add_all([coke, empanada])
    session.commit()
    return {'coke': coke.id, 'empanada': empanada.id}


@pytest.fixture(scope='function')
def subscriptions(session, admin_id, waiter_id):
    """
    Three stored subscriptions (A, B, C) spread over two users.

    The registry keeps one per user through the API; rows are inserted
    directly here to get more than one.
    """
    rows = [
        PushSubscription(user_id=admin_id, endpoint='https://push.example/A', p256dh='pA', auth='aA'),
        PushSubscription(user_id=waiter_id, endpoint='https://push.example/B', p256dh='pB', auth='aB'),
        PushSubscription(user_id=waiter_id, endpoint='https://push.example/C', p256dh='pC', auth='aC'),
    ]
    session.add_all(rows)
    session.commit()
    return ['https://push.example/A', 'https://push.example/B', 'https://push.example/C']


@pytest.fixture(scope='function')
def failing_delivery():
    """Factory for a non-gone delivery error."""
    def make(endpoint, status=429):
        return PushDeliveryError('rate limited', endpoint=endpoint, upstream_status=status)
    return make


@pytest.fixture(scope='function')
def login_as(client):
    """login_as(username, password) -> Authorization headers."""
    def login(username, password):
        return _bearer(_login(client, username, password))
    return login


@pytest.fixture(scope='function')
def make_push_client():
    """Build a FakePushClient: make_push_client(outcomes={endpoint: exception})."""
    return FakePushClient
