# Clinic subscriptions on top of the Stripe adapter
import logging

import stripe
from sqlalchemy.exc import IntegrityError

from petsched.errors import NotFoundError, ValidationError
from petsched.models.clinic_model import SubscriptionStatus, SubscriptionTier

logger = logging.getLogger(__name__)

# Prices in cents; -1 means unlimited
PRICING_TIERS = {
    SubscriptionTier.BASIC.value: {
        'price': 2900,
        'name': 'Basic',
        'features': {'maxPets': 100, 'maxAppointments': 1000, 'maxUsers': 2, 'maxLocations': 1},
    },
    SubscriptionTier.PROFESSIONAL.value: {
        'price': 7900,
        'name': 'Professional',
        'features': {'maxPets': 500, 'maxAppointments': 5000, 'maxUsers': 5, 'maxLocations': 3},
    },
    SubscriptionTier.ENTERPRISE.value: {
        'price': 19900,
        'name': 'Enterprise',
        'features': {'maxPets': -1, 'maxAppointments': -1, 'maxUsers': -1, 'maxLocations': -1},
    },
}

WEBHOOK_STATUS_UPDATES = {
    'invoice.payment_succeeded': SubscriptionStatus.ACTIVE.value,
    'invoice.payment_failed': SubscriptionStatus.SUSPENDED.value,
    'customer.subscription.deleted': SubscriptionStatus.CANCELLED.value,
}


def get_pricing():
    return [
        {'tier': tier, 'name': config['name'], 'price': config['price'] / 100, 'features': config['features']}
        for tier, config in PRICING_TIERS.items()
    ]


def subscription_id_for(event_type, obj):
    if event_type.startswith('customer.subscription.'):
        return obj.get('id')
    subscription_id = obj.get('subscription')
    if not subscription_id:
        # newer API versions nest it under the invoice parent
        details = (obj.get('parent') or {}).get('subscription_details') or {}
        subscription_id = details.get('subscription')
    return subscription_id


class BillingService:
    def __init__(self, database, payments, price_ids=None):
        self.database = database
        self.payments = payments
        self.price_ids = price_ids or {}

    def price_id_for(self, tier):
        return self.price_ids.get(tier) or f'price_{tier}'

    def _get_clinic(self, clinic_id):
        rows = self.database.query('SELECT * FROM clinics WHERE id = ?', [clinic_id]) if clinic_id else []
        if not rows:
            raise NotFoundError('Clinic not found', error='Clinic not found')
        return rows[0]

    def _count(self, table, clinic_id):
        rows = self.database.query(f'SELECT COUNT(*) AS count FROM {table} WHERE clinic_id = ?', [clinic_id])
        return rows[0]['count'] if rows else 0

    def get_subscription(self, clinic_id):
        clinic = self._get_clinic(clinic_id)
        tier = clinic.get('subscription_tier') or SubscriptionTier.BASIC.value
        features = PRICING_TIERS.get(tier, PRICING_TIERS[SubscriptionTier.BASIC.value])['features']
        return {
            'tier': tier,
            'status': clinic.get('subscription_status') or 'inactive',
            'features': features,
            'usage': {
                'pets': self._count('pets', clinic_id),
                'appointments': self._count('appointments', clinic_id),
                'users': self._count('users', clinic_id),
            },
            'limits': features,
        }

    def create_subscription(self, clinic_id, tier, payment_method_id):
        if tier not in PRICING_TIERS:
            raise ValidationError('Please select a valid subscription tier', error='Invalid tier')
        if not payment_method_id:
            raise ValidationError('paymentMethodId is required', error='Missing required fields')
        clinic = self._get_clinic(clinic_id)

        if clinic.get('stripe_customer_id'):
            customer = self.payments.retrieve_customer(clinic['stripe_customer_id'])
        else:
            customer = self.payments.create_customer({
                'email': clinic.get('email'),
                'name': clinic.get('name'),
                'metadata': {'clinic_id': clinic['id']},
            })
            self.database.run('UPDATE clinics SET stripe_customer_id = ? WHERE id = ?', [customer['id'], clinic['id']])

        self.payments.attach_default_payment_method(customer['id'], payment_method_id)
        subscription = self.payments.create_subscription(customer['id'], self.price_id_for(tier))

        self.database.run(
            """UPDATE clinics SET
               subscription_tier = ?,
               subscription_status = ?,
               stripe_subscription_id = ?,
               updated_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            [tier, SubscriptionStatus.ACTIVE.value, subscription['id'], clinic['id']]
        )
        logger.info(f"Clinic {clinic['id']} subscribed to {tier} ({subscription['id']})")
        return {'subscriptionId': subscription['id'], 'tier': tier, 'status': SubscriptionStatus.ACTIVE.value}

    def cancel_subscription(self, clinic_id):
        clinic = self._get_clinic(clinic_id)
        if not clinic.get('stripe_subscription_id'):
            raise ValidationError('No active subscription found', error='No active subscription')

        self.payments.cancel_subscription(clinic['stripe_subscription_id'])
        self.database.run('UPDATE clinics SET subscription_status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                          [SubscriptionStatus.CANCELLED.value, clinic['id']])
        logger.info(f"Clinic {clinic['id']} cancelled subscription {clinic['stripe_subscription_id']}")

    def handle_webhook(self, payload, signature):
        """Verify and apply a Stripe event; replays of an already seen event id are no-ops."""
        try:
            event = self.payments.construct_webhook_event(payload, signature)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise ValidationError(f'Webhook Error: {e}', error='Webhook signature verification failed')

        event_id = event['id']
        event_type = event['type']
        if self.database.query('SELECT id FROM webhook_events WHERE id = ?', [event_id]):
            logger.info(f"Ignoring replayed webhook event {event_id}")
            return {'received': True, 'duplicate': True}

        status = WEBHOOK_STATUS_UPDATES.get(event_type)
        if status:
            subscription_id = subscription_id_for(event_type, event['data']['object'])
            result = self.database.run(
                'UPDATE clinics SET subscription_status = ?, updated_at = CURRENT_TIMESTAMP '
                'WHERE stripe_subscription_id = ?',
                [status, subscription_id]
            )
            logger.info(f"{event_type}: {result.changes} clinic(s) on {subscription_id} set to {status}")
        else:
            logger.info(f"Unhandled event type {event_type}")

        try:
            self.database.run('INSERT INTO webhook_events (id, type, received_at) VALUES (?, ?, CURRENT_TIMESTAMP)',
                              [event_id, event_type])
        except IntegrityError:
            return {'received': True, 'duplicate': True}
        return {'received': True}
