"""
Pytest configuration and fixtures for the PetSched API tests.

Every test gets its own app bound to a temporary SQLite file, with the Stripe
and SMTP adapters replaced by in-memory doubles.
"""
import hashlib
import hmac
import io
import json
import time
import uuid

import pytest

from petsched import create_app
from petsched.config import TestingConfig
from petsched.services.payment_service import PaymentService

WEBHOOK_SECRET = 'whsec_test_secret'
PNG_BYTES = (b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00'
             b'\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00'
             b'\x00\x00\x00IEND\xaeB`\x82')


class StripeStub(dict):
    """Dict with attribute access, like the objects the stripe library returns."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)


class FakePaymentService(PaymentService):
    """Real webhook verification and pricing; Stripe API calls are recorded instead of sent."""

    def __init__(self):
        super().__init__('sk_test_fake', webhook_secret=WEBHOOK_SECRET)
        self.calls = []
        self.intent_status = 'succeeded'

    def _call(self, description, fn, *args, **kwargs):
        self.calls.append((description, args, kwargs))
        if description == 'creating payment intent':
            return StripeStub(id='pi_test_123', client_secret='pi_test_123_secret_abc', amount=kwargs['amount'])
        if description == 'retrieving payment intent':
            return StripeStub(id=args[0], status=self.intent_status)
        if description == 'creating customer':
            return StripeStub(id='cus_test_123', email=kwargs.get('email'), name=kwargs.get('name'))
        if description == 'creating subscription':
            return StripeStub(id='sub_test_123', status='incomplete', customer=kwargs['customer'])
        if description == 'cancelling subscription':
            return StripeStub(id=args[0], cancel_at_period_end=True)
        if description == 'listing payment methods':
            return StripeStub(data=[StripeStub(id='pm_card_visa', type='card')])
        if description == 'creating refund':
            return StripeStub(id='re_test_123', amount=kwargs['amount'], status='succeeded')
        return StripeStub(id=args[0] if args else None)

    def descriptions(self):
        return [call[0] for call in self.calls]


class FakeEmailService:
    def __init__(self):
        self.sent = []
        self.fail = False

    def _send(self, kind, to, **context):
        if self.fail:
            return {'success': False, 'error': 'SMTP connection refused'}
        message_id = f'<{uuid.uuid4()}@petsched.test>'
        self.sent.append({'kind': kind, 'to': to, 'message_id': message_id, **context})
        return {'success': True, 'message_id': message_id}

    def send_appointment_confirmation(self, appointment, pet, user):
        return self._send('confirmation', user['email'], appointment=appointment, pet=pet)

    def send_appointment_reminder(self, appointment, pet, user):
        return self._send('reminder', user['email'], appointment=appointment, pet=pet)

    def send_welcome_email(self, user):
        return self._send('welcome', user['email'])


def sign_webhook(payload, secret=WEBHOOK_SECRET, timestamp=None):
    timestamp = timestamp or int(time.time())
    signature = hmac.new(secret.encode(), f'{timestamp}.{payload}'.encode(), hashlib.sha256).hexdigest()
    return f't={timestamp},v1={signature}'


def stripe_event(event_type, obj, event_id=None):
    return json.dumps({
        'id': event_id or f'evt_{uuid.uuid4().hex[:16]}',
        'object': 'event',
        'type': event_type,
        'data': {'object': obj},
    })


@pytest.fixture
def payments():
    return FakePaymentService()


@pytest.fixture
def emails():
    return FakeEmailService()


@pytest.fixture
def config_class(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'petsched.db'}"

    class Config(TestingConfig):
        DATABASE_URL = database_url
        SQLALCHEMY_DATABASE_URI = database_url
        UPLOAD_FOLDER = str(tmp_path / 'uploads')
        STRIPE_WEBHOOK_SECRET = WEBHOOK_SECRET

    return Config


@pytest.fixture
def app(config_class, payments, emails):
    app = create_app(config_class, payment_service=payments, email_service=emails)
    yield app
    app.extensions['petsched'].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions['petsched']


@pytest.fixture
def database(services):
    return services.database


@pytest.fixture
def clinic_id(database):
    clinic_id = str(uuid.uuid4())
    database.run(
        """INSERT INTO clinics (id, name, email, subscription_tier, subscription_status, created_at, updated_at)
           VALUES (?, ?, ?, 'basic', 'active', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)""",
        [clinic_id, 'Happy Paws', 'clinic@happypaws.test']
    )
    return clinic_id


def register_and_login(client, email, role='client', clinic_id=None, password='secret123', name='Test User'):
    response = client.post('/api/auth/register', json={
        'email': email, 'password': password, 'name': name, 'role': role, 'clinic_id': clinic_id
    })
    assert response.status_code == 201, response.get_json()
    response = client.post('/api/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()['data']


@pytest.fixture
def client_login(client, clinic_id):
    return register_and_login(client, 'owner@example.com', clinic_id=clinic_id, name='Pet Owner')


@pytest.fixture
def admin_login(client, clinic_id):
    return register_and_login(client, 'admin@example.com', role='admin', clinic_id=clinic_id, name='Clinic Admin')


@pytest.fixture
def auth_headers(client_login):
    return {'Authorization': f"Bearer {client_login['token']}"}


@pytest.fixture
def admin_headers(admin_login):
    return {'Authorization': f"Bearer {admin_login['token']}"}


@pytest.fixture
def pet(client, auth_headers):
    response = client.post('/api/pets', headers=auth_headers, json={
        'name': 'Buddy', 'species': 'Dog', 'breed': 'Golden Retriever', 'age': 3,
        'owner_name': 'Sarah Johnson', 'owner_phone': '555-0101'
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


@pytest.fixture
def png_file():
    def make(name='photo.png'):
        return io.BytesIO(PNG_BYTES), name
    return make
