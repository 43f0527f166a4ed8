# Stripe adapter for one-off payments, customers and subscriptions
import logging
import math

import stripe

from petsched.errors import UpstreamError

logger = logging.getLogger(__name__)

SERVICE_PRICING = {
    'checkup': {
        'name': 'Regular Checkup',
        'price': 75,
        'duration': 60,
        'description': 'Comprehensive health examination',
    },
    'vaccination': {
        'name': 'Vaccination',
        'price': 45,
        'duration': 30,
        'description': 'Essential vaccinations',
    },
    'surgery': {
        'name': 'Surgery',
        'price': 300,
        'duration': 120,
        'description': 'Surgical procedures',
    },
    'emergency': {
        'name': 'Emergency Care',
        'price': 150,
        'duration': 90,
        'description': 'Urgent medical attention',
    },
    'grooming': {
        'name': 'Grooming',
        'price': 60,
        'duration': 60,
        'description': 'Pet grooming services',
    },
    'dental': {
        'name': 'Dental Care',
        'price': 120,
        'duration': 90,
        'description': 'Dental cleaning and care',
    },
    'consultation': {
        'name': 'Consultation',
        'price': 50,
        'duration': 30,
        'description': 'General consultation',
    },
}
DEFAULT_BASE_RATE = 75


def to_cents(amount):
    return int(round(float(amount) * 100))


class PaymentService:
    def __init__(self, secret_key, webhook_secret=None, currency='usd'):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.currency = currency

    def _call(self, description, fn, *args, **kwargs):
        if not self.secret_key:
            logger.warning("Stripe secret key not configured")
            raise UpstreamError('Payments are not currently available', error='Payment service unavailable',
                                status_code=500)
        try:
            return fn(*args, api_key=self.secret_key, **kwargs)
        except stripe.StripeError as e:
            logger.error(f"Stripe error while {description}: {e}")
            raise UpstreamError(e.user_message or str(e), error=f'Failed {description}')

    def create_payment_intent(self, appointment, amount):
        intent = self._call(
            'creating payment intent', stripe.PaymentIntent.create,
            amount=to_cents(amount),
            currency=self.currency,
            metadata={
                'appointment_id': str(appointment.get('id', '')),
                'pet_name': str(appointment.get('pet_name', '')),
                'service_type': str(appointment.get('service_type', '')),
            },
            automatic_payment_methods={'enabled': True},
        )
        return {'clientSecret': intent.client_secret, 'paymentIntentId': intent.id}

    def confirm_payment(self, payment_intent_id):
        intent = self._call('retrieving payment intent', stripe.PaymentIntent.retrieve, payment_intent_id)
        if intent.status != 'succeeded':
            raise UpstreamError(f'Payment not completed (status: {intent.status})',
                                error='Payment confirmation failed')
        return intent

    def create_customer(self, user_data):
        return self._call(
            'creating customer', stripe.Customer.create,
            email=user_data.get('email'),
            name=user_data.get('name'),
            metadata={key: str(value) for key, value in user_data.get('metadata', {}).items()},
        )

    def retrieve_customer(self, customer_id):
        return self._call('retrieving customer', stripe.Customer.retrieve, customer_id)

    def attach_default_payment_method(self, customer_id, payment_method_id):
        self._call('attaching payment method', stripe.PaymentMethod.attach,
                   payment_method_id, customer=customer_id)
        self._call('updating customer', stripe.Customer.modify, customer_id,
                   invoice_settings={'default_payment_method': payment_method_id})

    def create_subscription(self, customer_id, price_id):
        return self._call(
            'creating subscription', stripe.Subscription.create,
            customer=customer_id,
            items=[{'price': price_id}],
            payment_behavior='default_incomplete',
            payment_settings={'save_default_payment_method': 'on_subscription'},
            expand=['latest_invoice.payment_intent'],
        )

    def cancel_subscription(self, subscription_id):
        return self._call('cancelling subscription', stripe.Subscription.modify,
                          subscription_id, cancel_at_period_end=True)

    def get_payment_methods(self, customer_id):
        methods = self._call('listing payment methods', stripe.PaymentMethod.list,
                             customer=customer_id, type='card')
        return methods.data

    def create_refund(self, payment_intent_id, amount):
        return self._call('creating refund', stripe.Refund.create,
                          payment_intent=payment_intent_id, amount=to_cents(amount))

    def construct_webhook_event(self, payload, signature):
        """Verify a webhook body; raises ValueError or stripe.SignatureVerificationError."""
        if not self.webhook_secret:
            raise ValueError("Webhook secret not configured")
        return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)

    @staticmethod
    def calculate_appointment_cost(service_type, duration=60):
        pricing = SERVICE_PRICING.get(service_type.lower())
        base_rate = pricing['price'] if pricing else DEFAULT_BASE_RATE
        # half-up rounding
        return int(math.floor(base_rate * duration / 60 + 0.5))

    @staticmethod
    def get_service_pricing():
        return SERVICE_PRICING
