# Service registry: every service is built once per app and shared by all requests
from flask import current_app

from petsched.database import create_database

from .appointment_service import AppointmentService
from .auth_service import AuthService
from .billing_service import BillingService
from .dashboard_service import DashboardService
from .email_service import EmailService
from .file_upload_service import FileUploadService
from .payment_service import PaymentService
from .pet_service import PetService


class ServiceRegistry:
    def __init__(self, database, payments, emails, uploads, price_ids=None):
        self.database = database
        self.payments = payments
        self.emails = emails
        self.uploads = uploads
        self.auth = AuthService(database)
        self.pets = PetService(database, uploads)
        self.appointments = AppointmentService(database, emails)
        self.billing = BillingService(database, payments, price_ids)
        self.dashboard = DashboardService(database)

    def close(self):
        self.database.close()


def build_services(config, database=None, payment_service=None, email_service=None, file_upload_service=None):
    """Wire the adapters and domain services from the app config; any argument overrides the default."""
    if database is None:
        database = create_database(config['DATABASE_URL'], production=config.get('APP_ENV') == 'production')
    database.connect()
    if payment_service is None:
        payment_service = PaymentService(config.get('STRIPE_SECRET_KEY'), config.get('STRIPE_WEBHOOK_SECRET'))
    if email_service is None:
        email_service = EmailService.from_config(config)
    if file_upload_service is None:
        file_upload_service = FileUploadService(config['UPLOAD_FOLDER'])
    return ServiceRegistry(database, payment_service, email_service, file_upload_service,
                           price_ids=config.get('STRIPE_PRICE_IDS'))


def get_services():
    return current_app.extensions['petsched']
