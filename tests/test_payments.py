"""Tests for the payments routes and the Stripe adapter."""
import pytest
import stripe

from petsched.errors import UpstreamError
from petsched.services.payment_service import PaymentService, to_cents


class TestPricing:
    def test_service_pricing_is_public(self, client):
        response = client.get('/api/payments/pricing')
        assert response.status_code == 200
        pricing = response.get_json()['data']
        assert pricing['checkup']['price'] == 75
        assert pricing['surgery']['price'] == 300
        assert len(pricing) == 7

    @pytest.mark.parametrize('service_type, duration, cost', [
        ('checkup', 60, 75),
        ('surgery', 120, 600),
        ('vaccination', 30, 23),
        ('Dental', 90, 180),
        ('acupuncture', 60, 75),
    ])
    def test_calculate_appointment_cost(self, service_type, duration, cost):
        assert PaymentService.calculate_appointment_cost(service_type, duration) == cost

    def test_calculate_cost_route(self, client):
        response = client.post('/api/payments/calculate-cost', json={'serviceType': 'emergency', 'duration': 30})
        assert response.status_code == 200
        assert response.get_json()['data'] == {'serviceType': 'emergency', 'duration': 30, 'cost': 75}

    def test_calculate_cost_defaults_to_an_hour(self, client):
        response = client.post('/api/payments/calculate-cost', json={'serviceType': 'grooming'})
        assert response.get_json()['data']['cost'] == 60

    def test_calculate_cost_requires_service_type(self, client):
        response = client.post('/api/payments/calculate-cost', json={})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing service type'

    def test_calculate_cost_rejects_non_string_service_type(self, client):
        response = client.post('/api/payments/calculate-cost', json={'serviceType': 5})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid service type'

    @pytest.mark.parametrize('duration', [0, -60, 'long', True])
    def test_calculate_cost_rejects_bad_duration(self, client, duration):
        response = client.post('/api/payments/calculate-cost', json={'serviceType': 'checkup', 'duration': duration})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid duration'


class TestPaymentRoutes:
    def test_create_intent_converts_dollars_to_cents(self, client, auth_headers, payments):
        response = client.post('/api/payments/create-intent', headers=auth_headers, json={
            'appointment': {'id': 'appt-1', 'pet_name': 'Buddy', 'service_type': 'checkup'}, 'amount': 75.5
        })
        assert response.status_code == 200
        assert response.get_json()['data'] == {'clientSecret': 'pi_test_123_secret_abc',
                                               'paymentIntentId': 'pi_test_123'}
        description, _, kwargs = payments.calls[-1]
        assert description == 'creating payment intent'
        assert kwargs['amount'] == 7550
        assert kwargs['metadata'] == {'appointment_id': 'appt-1', 'pet_name': 'Buddy', 'service_type': 'checkup'}

    def test_create_intent_requires_fields(self, client):
        assert client.post('/api/payments/create-intent', json={}).status_code == 400
        response = client.post('/api/payments/create-intent', json={'amount': 10})
        assert response.status_code == 400

    def test_payment_routes_need_no_token(self, client, payments):
        response = client.post('/api/payments/create-intent', json={'appointment': {'id': 'a1'}, 'amount': 10})
        assert response.status_code == 200
        assert client.post('/api/payments/confirm', json={'paymentIntentId': 'pi_1'}).status_code == 200
        assert client.post('/api/payments/create-customer',
                           json={'userData': {'email': 'o@example.com', 'name': 'O'}}).status_code == 200
        assert client.get('/api/payments/payment-methods/cus_test_123').status_code == 200

    def test_confirm(self, client, auth_headers, payments):
        response = client.post('/api/payments/confirm', headers=auth_headers, json={'paymentIntentId': 'pi_1'})
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'succeeded'

    def test_confirm_not_succeeded(self, client, auth_headers, payments):
        payments.intent_status = 'requires_payment_method'
        response = client.post('/api/payments/confirm', headers=auth_headers, json={'paymentIntentId': 'pi_1'})
        assert response.status_code == 400
        assert 'Payment not completed' in response.get_json()['message']

    def test_create_customer(self, client, auth_headers):
        response = client.post('/api/payments/create-customer', headers=auth_headers,
                               json={'userData': {'email': 'owner@example.com', 'name': 'Pet Owner'}})
        assert response.status_code == 200
        assert response.get_json()['data']['id'] == 'cus_test_123'

    def test_create_customer_requires_user_data(self, client, auth_headers):
        response = client.post('/api/payments/create-customer', headers=auth_headers,
                               json={'userData': {'email': 'owner@example.com'}})
        assert response.status_code == 400

    def test_payment_methods(self, client, auth_headers):
        response = client.get('/api/payments/payment-methods/cus_test_123', headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['data'] == [{'id': 'pm_card_visa', 'type': 'card'}]

    def test_refund_is_admin_only(self, client, auth_headers, admin_headers, payments):
        payload = {'paymentIntentId': 'pi_1', 'amount': 20}
        assert client.post('/api/payments/refund', headers=auth_headers, json=payload).status_code == 403
        response = client.post('/api/payments/refund', headers=admin_headers, json=payload)
        assert response.status_code == 200
        assert payments.calls[-1][2] == {'payment_intent': 'pi_1', 'amount': 2000}


class TestPaymentServiceErrors:
    def test_stripe_errors_become_upstream_errors(self):
        def declined(**kwargs):
            assert kwargs['api_key'] == 'sk_test_fake'
            raise stripe.StripeError('Your card was declined.')

        service = PaymentService('sk_test_fake')
        with pytest.raises(UpstreamError) as excinfo:
            service._call('creating refund', declined)
        assert excinfo.value.status_code == 400
        assert excinfo.value.message == 'Your card was declined.'
        assert excinfo.value.error == 'Failed creating refund'

    def test_unconfigured_key(self):
        service = PaymentService(None)
        with pytest.raises(UpstreamError) as excinfo:
            service.create_refund('pi_1', 10)
        assert excinfo.value.status_code == 500

    def test_webhook_requires_secret(self):
        with pytest.raises(ValueError):
            PaymentService('sk_test_fake').construct_webhook_event(b'{}', 't=1,v1=abc')

    def test_to_cents(self):
        assert to_cents(29) == 2900
        assert to_cents('19.99') == 1999
