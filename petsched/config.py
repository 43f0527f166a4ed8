import os
import re
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

DURATION_REGEX = re.compile(r'^\s*(\d+)\s*([smhd]?)\s*$')
DURATION_UNITS = {'': 'seconds', 's': 'seconds', 'm': 'minutes', 'h': 'hours', 'd': 'days'}


def parse_duration(value, default=None):
    """Parse '7d', '15m', '12h', '30s' or a plain number of seconds into a timedelta."""
    if value is None or value == '':
        return default
    if isinstance(value, timedelta):
        return value
    match = DURATION_REGEX.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{DURATION_UNITS[unit]: int(amount)})


def normalize_database_url(url):
    """Accept Heroku-style postgres:// URLs and pin relative SQLite paths to the working directory."""
    if url.startswith('postgres://'):
        url = 'postgresql://' + url[len('postgres://'):]
    if url.startswith('sqlite:///') and not url.startswith('sqlite:////') and url != 'sqlite:///:memory:':
        url = 'sqlite:///' + os.path.abspath(url[len('sqlite:///'):])
    return url


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    APP_ENV = os.getenv('APP_ENV', 'development')
    VERSION = '1.0.0'
    SECRET_KEY = os.getenv('SECRET_KEY', 'your-secret-key')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Database configuration
    DATABASE_URL = normalize_database_url(os.getenv('DATABASE_URL', 'sqlite:///petsched.db'))
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_SCHEMA = _env_bool('AUTO_CREATE_SCHEMA', True)

    # JWT configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET', 'super-secret')
    JWT_ACCESS_TOKEN_EXPIRES = parse_duration(os.getenv('JWT_EXPIRES_IN'), timedelta(days=7))
    JWT_REFRESH_TOKEN_EXPIRES = parse_duration(os.getenv('JWT_REFRESH_EXPIRES_IN'), timedelta(days=30))
    BCRYPT_LOG_ROUNDS = 12

    # CORS configuration
    CORS_ORIGIN = os.getenv('CORS_ORIGIN', 'http://localhost:3000')
    CORS_SUPPORTS_CREDENTIALS = True
    CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]
    CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]

    # Rate limiting
    RATE_LIMIT_WINDOW_MS = int(os.getenv('RATE_LIMIT_WINDOW_MS', 15 * 60 * 1000))
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv('RATE_LIMIT_MAX_REQUESTS', 100))
    RATELIMIT_ENABLED = _env_bool('RATELIMIT_ENABLED', True)
    RATELIMIT_DEFAULT = f"{RATE_LIMIT_MAX_REQUESTS} per {max(RATE_LIMIT_WINDOW_MS // 1000, 1)} seconds"
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')

    # Request bodies
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    # Email
    SMTP_HOST = os.getenv('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.getenv('SMTP_PORT', 587))
    SMTP_USER = os.getenv('SMTP_USER')
    SMTP_PASS = os.getenv('SMTP_PASS')
    SMTP_FROM = os.getenv('SMTP_FROM') or SMTP_USER
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:3000')

    # Stripe
    STRIPE_SECRET_KEY = os.getenv('STRIPE_SECRET_KEY')
    STRIPE_WEBHOOK_SECRET = os.getenv('STRIPE_WEBHOOK_SECRET')
    STRIPE_PRICE_IDS = {
        'basic': os.getenv('STRIPE_PRICE_BASIC', 'price_basic'),
        'professional': os.getenv('STRIPE_PRICE_PROFESSIONAL', 'price_professional'),
        'enterprise': os.getenv('STRIPE_PRICE_ENTERPRISE', 'price_enterprise'),
    }

    # Uploads
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))

    # flask-restx
    RESTX_ERROR_404_HELP = False
    ERROR_INCLUDE_MESSAGE = False


class DevelopmentConfig(Config):
    APP_ENV = 'development'
    DEBUG = True


class TestingConfig(Config):
    APP_ENV = 'test'
    TESTING = True
    DATABASE_URL = normalize_database_url('sqlite:///petsched-test.db')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    JWT_SECRET_KEY = 'test-secret'
    BCRYPT_LOG_ROUNDS = 4
    RATELIMIT_ENABLED = False
    STRIPE_WEBHOOK_SECRET = 'whsec_test'


class ProductionConfig(Config):
    APP_ENV = 'production'
    DEBUG = False


CONFIGS = {
    'development': DevelopmentConfig,
    'test': TestingConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def get_config(name=None):
    name = (name or os.getenv('APP_ENV', 'development')).lower()
    return CONFIGS.get(name, DevelopmentConfig)
