# Credential service: password hashing, token issuance and the auth flows
import logging
import re
import uuid

from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError

from petsched import bcrypt
from petsched.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from petsched.models.user_model import Role

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$')
MIN_PASSWORD_LENGTH = 6
PUBLIC_USER_COLUMNS = 'id, email, name, role, clinic_id, created_at'


def hash_password(password):
    return bcrypt.generate_password_hash(password).decode('utf-8')


def compare_password(password, hashed_password):
    return bcrypt.check_password_hash(hashed_password, password)


def generate_token(user):
    return create_access_token(identity=user['id'], additional_claims={
        'email': user['email'],
        'role': user['role'],
        'clinic_id': user.get('clinic_id')
    })


def generate_refresh_token(user):
    # flask-jwt-extended marks these with type == 'refresh'
    return create_refresh_token(identity=user['id'])


def validate_password(password, field='Password'):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'{field} must be at least {MIN_PASSWORD_LENGTH} characters long',
                              error='Invalid password')


class AuthService:
    def __init__(self, database):
        self.database = database

    def _find_user(self, user_id, columns=PUBLIC_USER_COLUMNS):
        rows = self.database.query(f'SELECT {columns} FROM users WHERE id = ?', [user_id])
        return rows[0] if rows else None

    def register(self, email, password, name, role=None, clinic_id=None):
        if not email or not password or not name:
            raise ValidationError('Email, password, and name are required', error='Missing required fields')
        if not EMAIL_REGEX.match(email):
            raise ValidationError('Invalid email format', error='Invalid email')
        validate_password(password)
        role = role or Role.CLIENT.value
        if role not in [r.value for r in Role]:
            raise ValidationError(f"Role must be one of: {', '.join(r.value for r in Role)}",
                                  error='Invalid role')

        if self.database.query('SELECT id FROM users WHERE email = ?', [email]):
            raise ConflictError('User already exists', error='Registration failed', status_code=400)
        if clinic_id and not self.database.query('SELECT id FROM clinics WHERE id = ?', [clinic_id]):
            raise ValidationError(f'No clinic found with id: {clinic_id}', error='Registration failed')

        user_id = str(uuid.uuid4())
        try:
            self.database.run(
                """INSERT INTO users (id, email, password, name, role, clinic_id, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)""",
                [user_id, email, hash_password(password), name, role, clinic_id]
            )
        except IntegrityError:
            raise ConflictError('User already exists', error='Registration failed', status_code=400)

        logger.info(f"Registered user {user_id} ({role})")
        return self._find_user(user_id)

    def login(self, email, password):
        if not email or not password:
            raise ValidationError('Email and password are required', error='Missing credentials')
        users = self.database.query('SELECT * FROM users WHERE email = ?', [email])
        if not users or not compare_password(password, users[0]['password']):
            raise AuthenticationError('Invalid credentials', error='Login failed')
        user = users[0]

        token = generate_token(user)
        refresh_token = generate_refresh_token(user)
        self._store_refresh_token(user['id'], refresh_token)

        return {
            'user': {
                'id': user['id'],
                'email': user['email'],
                'name': user['name'],
                'role': user['role'],
                'clinic_id': user['clinic_id']
            },
            'token': token,
            'refreshToken': refresh_token
        }

    def refresh(self, refresh_token):
        if not refresh_token:
            raise ValidationError('Refresh token is required', error='Missing refresh token')
        try:
            decoded = decode_token(refresh_token)
        except (PyJWTError, JWTExtendedException) as e:
            logger.info(f"Rejected refresh token: {e}")
            raise AuthenticationError('Invalid refresh token', error='Token refresh failed')
        if decoded.get('type') != 'refresh':
            raise AuthenticationError('Invalid refresh token', error='Token refresh failed')

        users = self.database.query('SELECT * FROM users WHERE id = ? AND refresh_token = ?',
                                    [decoded['sub'], refresh_token])
        if not users:
            raise AuthenticationError('Invalid refresh token', error='Token refresh failed')
        user = users[0]

        new_token = generate_token(user)
        new_refresh_token = generate_refresh_token(user)
        self._store_refresh_token(user['id'], new_refresh_token)
        return {'token': new_token, 'refreshToken': new_refresh_token}

    def logout(self, user_id):
        self._store_refresh_token(user_id, None)

    def _store_refresh_token(self, user_id, refresh_token):
        self.database.run('UPDATE users SET refresh_token = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                          [refresh_token, user_id])

    def get_profile(self, user_id):
        user = self._find_user(user_id)
        if not user:
            raise NotFoundError('User profile not found', error='User not found')
        return user

    def update_profile(self, user_id, name, email=None):
        if not name:
            raise ValidationError('Name is required', error='Missing required fields')
        current = self.get_profile(user_id)
        if email:
            if not EMAIL_REGEX.match(email):
                raise ValidationError('Invalid email format', error='Invalid email')
            taken = self.database.query('SELECT id FROM users WHERE email = ? AND id != ?', [email, user_id])
            if taken:
                raise ValidationError('This email is already registered by another user',
                                      error='Email already taken')
        self.database.run('UPDATE users SET name = ?, email = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                          [name, email or current['email'], user_id])
        return self._find_user(user_id)

    def change_password(self, user_id, current_password, new_password):
        if not current_password or not new_password:
            raise ValidationError('Current password and new password are required',
                                  error='Missing required fields')
        validate_password(new_password, field='New password')
        user = self._find_user(user_id, columns='*')
        if not user:
            raise NotFoundError('User not found', error='User not found')
        if not compare_password(current_password, user['password']):
            raise ValidationError('Current password is incorrect', error='Invalid password')
        self.database.run('UPDATE users SET password = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                          [hash_password(new_password), user_id])
