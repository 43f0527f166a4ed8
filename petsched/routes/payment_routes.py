from flask import request
from flask_restx import Namespace, Resource, fields

from petsched.errors import ValidationError
from petsched.models.user_model import Role
from petsched.services import get_services
from petsched.services.appointment_service import DEFAULT_DURATION, parse_duration_minutes
from petsched.services.payment_service import PaymentService
from petsched.utils import api_response, role_required

payment_ns = Namespace('payments', description='One-off payments through Stripe', path='/payments')

intent_model = payment_ns.model('CreateIntent', {
    'appointment': fields.Raw(required=True, description='Appointment the payment is for'),
    'amount': fields.Float(required=True, description='Amount in dollars'),
})

confirm_model = payment_ns.model('ConfirmPayment', {
    'paymentIntentId': fields.String(required=True),
})

customer_model = payment_ns.model('CreateCustomer', {
    'userData': fields.Raw(required=True, description='{"email": ..., "name": ...}'),
})

refund_model = payment_ns.model('Refund', {
    'paymentIntentId': fields.String(required=True),
    'amount': fields.Float(required=True, description='Amount in dollars'),
})

cost_model = payment_ns.model('CalculateCost', {
    'serviceType': fields.String(required=True),
    'duration': fields.Integer(default=60, description='Minutes'),
})


def parse_amount(value, message):
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(message, error='Missing required fields')
    if amount <= 0:
        raise ValidationError('Amount must be greater than zero', error='Invalid amount')
    return amount


@payment_ns.route('/pricing')
class ServicePricing(Resource):
    def get(self):
        return api_response(PaymentService.get_service_pricing())


@payment_ns.route('/calculate-cost')
class CalculateCost(Resource):
    @payment_ns.expect(cost_model)
    def post(self):
        data = request.get_json(silent=True) or {}
        service_type = data.get('serviceType')
        if service_type is None or service_type == '':
            raise ValidationError('Service type is required', error='Missing service type')
        if not isinstance(service_type, str):
            raise ValidationError('Service type must be a string', error='Invalid service type')
        duration = data.get('duration')
        duration = DEFAULT_DURATION if duration is None else parse_duration_minutes(duration)
        cost = PaymentService.calculate_appointment_cost(service_type, duration)
        return api_response({'serviceType': service_type, 'duration': duration, 'cost': cost})


@payment_ns.route('/create-intent')
class CreateIntent(Resource):
    @payment_ns.expect(intent_model)
    def post(self):
        data = request.get_json(silent=True) or {}
        appointment = data.get('appointment')
        if not appointment or data.get('amount') in (None, ''):
            raise ValidationError('Appointment and amount are required', error='Missing required fields')
        amount = parse_amount(data['amount'], 'Appointment and amount are required')
        result = get_services().payments.create_payment_intent(appointment, amount)
        return api_response(result)


@payment_ns.route('/confirm')
class ConfirmPayment(Resource):
    @payment_ns.expect(confirm_model)
    def post(self):
        data = request.get_json(silent=True) or {}
        if not data.get('paymentIntentId'):
            raise ValidationError('Payment intent ID is required', error='Missing payment intent ID')
        intent = get_services().payments.confirm_payment(data['paymentIntentId'])
        return api_response(intent, 'Payment confirmed successfully')


@payment_ns.route('/create-customer')
class CreateCustomer(Resource):
    @payment_ns.expect(customer_model)
    def post(self):
        data = request.get_json(silent=True) or {}
        user_data = data.get('userData') or {}
        if not user_data.get('email') or not user_data.get('name'):
            raise ValidationError('User email and name are required', error='Missing user data')
        customer = get_services().payments.create_customer(user_data)
        return api_response(customer, 'Customer created successfully')


@payment_ns.route('/payment-methods/<string:customer_id>')
class PaymentMethods(Resource):
    def get(self, customer_id):
        return api_response(get_services().payments.get_payment_methods(customer_id))


@payment_ns.route('/refund')
class Refund(Resource):
    @payment_ns.doc(security='BearerAuth')
    @payment_ns.expect(refund_model)
    @role_required(Role.ADMIN)
    def post(self):
        data = request.get_json(silent=True) or {}
        if not data.get('paymentIntentId') or data.get('amount') in (None, ''):
            raise ValidationError('Payment intent ID and amount are required', error='Missing required fields')
        amount = parse_amount(data['amount'], 'Payment intent ID and amount are required')
        refund = get_services().payments.create_refund(data['paymentIntentId'], amount)
        return api_response(refund, 'Refund created successfully')
