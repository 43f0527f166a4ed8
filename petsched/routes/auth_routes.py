import logging

from flask import request
from flask_restx import Namespace, Resource, fields

from petsched.services import get_services
from petsched.utils import api_response, current_user, token_required

logger = logging.getLogger(__name__)

auth_ns = Namespace('auth', description='Authentication operations', path='/auth')

register_model = auth_ns.model('Register', {
    'email': fields.String(required=True, description='Email address'),
    'password': fields.String(required=True, description='Password, at least 6 characters'),
    'name': fields.String(required=True, description='Full name'),
    'role': fields.String(description='admin, vet or client (default client)'),
    'clinic_id': fields.String(description='Clinic the user belongs to'),
})

login_model = auth_ns.model('Login', {
    'email': fields.String(required=True, description='Email address'),
    'password': fields.String(required=True, description='Password'),
})

refresh_model = auth_ns.model('Refresh', {
    'refreshToken': fields.String(required=True, description='Refresh token issued at login'),
})

profile_model = auth_ns.model('Profile', {
    'name': fields.String(required=True),
    'email': fields.String(),
})

password_model = auth_ns.model('ChangePassword', {
    'currentPassword': fields.String(required=True),
    'newPassword': fields.String(required=True),
})


@auth_ns.route('/register')
class Register(Resource):
    @auth_ns.expect(register_model)
    def post(self):
        """Register a new user (role client unless given)"""
        data = request.get_json(silent=True) or {}
        services = get_services()
        user = services.auth.register(data.get('email'), data.get('password'), data.get('name'),
                                      role=data.get('role'), clinic_id=data.get('clinic_id'))

        try:
            result = services.emails.send_welcome_email(user)
        except Exception as e:
            logger.error(f"Welcome email to {user['email']} raised: {e}")
        else:
            if not result.get('success'):
                logger.warning(f"Welcome email to {user['email']} failed: {result.get('error')}")

        return api_response(user, 'User registered successfully', 201)


@auth_ns.route('/login')
class Login(Resource):
    @auth_ns.expect(login_model)
    def post(self):
        """Log in and receive an access token and a refresh token"""
        data = request.get_json(silent=True) or {}
        result = get_services().auth.login(data.get('email'), data.get('password'))
        return api_response(result, 'Login successful')


@auth_ns.route('/refresh')
class Refresh(Resource):
    @auth_ns.expect(refresh_model)
    def post(self):
        """Exchange a refresh token for a new token pair"""
        data = request.get_json(silent=True) or {}
        result = get_services().auth.refresh(data.get('refreshToken'))
        return api_response(result, 'Token refreshed successfully')


@auth_ns.route('/logout')
class Logout(Resource):
    @auth_ns.doc(security='BearerAuth')
    @token_required
    def post(self):
        get_services().auth.logout(current_user()['id'])
        return api_response(message='Logout successful')


@auth_ns.route('/profile')
class Profile(Resource):
    @auth_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        """Current user profile"""
        return api_response(get_services().auth.get_profile(current_user()['id']))

    @auth_ns.doc(security='BearerAuth')
    @auth_ns.expect(profile_model)
    @token_required
    def put(self):
        data = request.get_json(silent=True) or {}
        user = get_services().auth.update_profile(current_user()['id'], data.get('name'), data.get('email'))
        return api_response(user, 'Profile updated successfully')


@auth_ns.route('/change-password')
class ChangePassword(Resource):
    @auth_ns.doc(security='BearerAuth')
    @auth_ns.expect(password_model)
    @token_required
    def put(self):
        data = request.get_json(silent=True) or {}
        get_services().auth.change_password(current_user()['id'], data.get('currentPassword'),
                                            data.get('newPassword'))
        return api_response(message='Password changed successfully')
