"""Tests for the SMTP adapter."""
import smtplib

import pytest

from petsched.services.email_service import EmailService


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in = None
        self.messages = []
        self.closed = False
        FakeSMTP.instances.append(self)

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, username, password):
        self.logged_in = (username, password)

    def sendmail(self, from_address, to_addresses, message):
        self.messages.append((from_address, to_addresses, message))

    def quit(self):
        self.closed = True


class RefusingSMTP(FakeSMTP):
    def login(self, username, password):
        raise smtplib.SMTPAuthenticationError(535, b'Authentication failed')


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtplib, 'SMTP', FakeSMTP)
    return FakeSMTP


@pytest.fixture
def mailer():
    return EmailService('smtp.petsched.test', 587, 'clinic@petsched.test', 'app-password',
                        frontend_url='https://app.petsched.test')


APPOINTMENT = {'appointment_date': '2030-05-01', 'appointment_time': '10:00', 'service_type': 'checkup',
               'notes': 'Bring vaccination records'}
PET = {'name': 'Buddy', 'species': 'Dog'}
USER = {'name': 'Sarah Johnson', 'email': 'sarah@example.com'}


def test_unconfigured_service_does_not_send(smtp):
    result = EmailService(username=None, password=None).send_email('a@example.com', 'Hi', '<p>Hi</p>')
    assert result == {'success': False, 'error': 'SMTP is not configured'}
    assert smtp.instances == []


def test_send_email(smtp, mailer):
    result = mailer.send_email('sarah@example.com', 'Hello', '<p>Hello</p>')
    assert result['success'] is True
    assert result['message_id'].endswith('@petsched.test>')

    server = smtp.instances[0]
    assert (server.host, server.port) == ('smtp.petsched.test', 587)
    assert server.started_tls
    assert server.logged_in == ('clinic@petsched.test', 'app-password')
    assert server.closed
    from_address, to_addresses, message = server.messages[0]
    assert from_address == 'clinic@petsched.test'
    assert to_addresses == ['sarah@example.com']
    assert 'Subject: Hello' in message


def test_smtp_failure_is_reported_not_raised(monkeypatch, mailer):
    monkeypatch.setattr(smtplib, 'SMTP', RefusingSMTP)
    result = mailer.send_email('sarah@example.com', 'Hello', '<p>Hello</p>')
    assert result['success'] is False
    assert 'Authentication failed' in result['error']


def test_connection_failure_is_reported(monkeypatch, mailer):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError('Connection refused')

    monkeypatch.setattr(smtplib, 'SMTP', refuse)
    assert mailer.send_email('sarah@example.com', 'Hello', '<p>Hello</p>')['success'] is False


def test_confirmation_renders_appointment(app, smtp, mailer):
    with app.app_context():
        result = mailer.send_appointment_confirmation(APPOINTMENT, PET, USER)
    assert result['success'] is True
    message = smtp.instances[0].messages[0][2]
    assert 'Subject: Appointment Confirmed - Buddy' in message


def test_templates_render(app, mailer, monkeypatch):
    sent = []
    monkeypatch.setattr(mailer, 'send_email', lambda to, subject, html: sent.append((to, subject, html)))
    with app.app_context():
        mailer.send_appointment_confirmation(APPOINTMENT, PET, USER)
        mailer.send_appointment_reminder(APPOINTMENT, PET, USER)
        mailer.send_welcome_email(USER)

    (_, _, confirmation), (_, reminder_subject, reminder), (_, welcome_subject, welcome) = sent
    assert 'Hello Sarah Johnson!' in confirmation
    assert '2030-05-01' in confirmation
    assert 'Bring vaccination records' in confirmation
    assert reminder_subject == 'Appointment Reminder - Buddy'
    assert 'Bring vaccination records' not in reminder
    assert welcome_subject == 'Welcome to PetSched!'
    assert 'https://app.petsched.test' in welcome


def test_from_config():
    mailer = EmailService.from_config({'SMTP_HOST': 'smtp.example.com', 'SMTP_PORT': '465',
                                       'SMTP_USER': 'u@example.com', 'SMTP_PASS': 'pw'})
    assert mailer.port == 465
    assert mailer.from_address == 'u@example.com'
    assert mailer.configured
