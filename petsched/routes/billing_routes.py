from flask import request
from flask_restx import Namespace, Resource, fields

from petsched.models.user_model import Role
from petsched.services import get_services
from petsched.services.billing_service import PRICING_TIERS, get_pricing
from petsched.utils import api_response, current_user, role_required, token_required

billing_ns = Namespace('billing', description='Clinic subscriptions', path='/billing')

subscription_model = billing_ns.model('CreateSubscription', {
    'tier': fields.String(required=True, enum=list(PRICING_TIERS)),
    'paymentMethodId': fields.String(required=True, description='Stripe payment method id'),
})


@billing_ns.route('/pricing')
class Pricing(Resource):
    def get(self):
        """Subscription tiers and their limits"""
        return api_response(get_pricing())


@billing_ns.route('/subscription')
class Subscription(Resource):
    @billing_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        """Subscription status and usage of the caller's clinic"""
        return api_response(get_services().billing.get_subscription(current_user().get('clinic_id')))


@billing_ns.route('/create-subscription')
class CreateSubscription(Resource):
    @billing_ns.doc(security='BearerAuth')
    @billing_ns.expect(subscription_model)
    @role_required(Role.ADMIN)
    def post(self):
        data = request.get_json(silent=True) or {}
        result = get_services().billing.create_subscription(current_user().get('clinic_id'), data.get('tier'),
                                                            data.get('paymentMethodId'))
        return api_response(result, 'Subscription created successfully')


@billing_ns.route('/cancel-subscription')
class CancelSubscription(Resource):
    @billing_ns.doc(security='BearerAuth')
    @role_required(Role.ADMIN)
    def post(self):
        get_services().billing.cancel_subscription(current_user().get('clinic_id'))
        return api_response(message='Subscription cancelled successfully')


@billing_ns.route('/webhook')
class Webhook(Resource):
    @billing_ns.doc(params={'Stripe-Signature': {'in': 'header', 'description': 'Stripe signature header'}})
    def post(self):
        """Stripe webhook receiver; the raw body is verified against the signature"""
        payload = request.get_data()
        signature = request.headers.get('Stripe-Signature', '')
        return get_services().billing.handle_webhook(payload, signature), 200
