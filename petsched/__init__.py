import logging
import os

from flask import Blueprint, Flask, jsonify, request
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_restx import Api
from flask_sqlalchemy import SQLAlchemy

from petsched.config import get_config

__version__ = '1.0.0'

migrate = Migrate()
db = SQLAlchemy()
jwt = JWTManager()
bcrypt = Bcrypt()
limiter = Limiter(key_func=get_remote_address)

logger = logging.getLogger(__name__)


def create_api(app):
    blueprint = Blueprint('api', __name__, url_prefix='/api')
    api = Api(
        blueprint,
        title='PetSched API',
        version=__version__,
        description='Veterinary clinic scheduling API',
        doc='/docs',
        security=[{'BearerAuth': []}],
        authorizations={
            'BearerAuth': {
                'type': 'apiKey',
                'in': 'header',
                'name': 'Authorization',
                'description': 'Enter your JWT token as "Bearer <token>"'
            }
        }
    )

    from .errors import register_error_handlers
    register_error_handlers(api)

    from .routes import register_namespaces
    register_namespaces(api)

    app.register_blueprint(blueprint)
    return api


def create_app(config_class=None, **service_overrides):
    """Build the Flask app; ``service_overrides`` replace entries of the service registry."""
    app = Flask(__name__)
    app.config.from_object(config_class or get_config())

    logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)
    limiter.init_app(app)

    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    # Enable CORS
    CORS(app, resources={r"/api/*": {"origins": app.config.get('CORS_ORIGIN', '*')}},
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         allow_headers=app.config.get('CORS_ALLOW_HEADERS', ["Content-Type", "Authorization"]),
         methods=app.config.get('CORS_METHODS', ["GET", "POST", "PUT", "DELETE", "OPTIONS"]))

    from .security_headers import setup_security_headers
    setup_security_headers(app)

    from .services import build_services
    app.extensions['petsched'] = build_services(app.config, **service_overrides)

    create_api(app)

    @app.errorhandler(404)
    def route_not_found(error):
        return jsonify({
            'error': 'Route not found',
            'message': f'Cannot {request.method} {request.path}'
        }), 404

    @app.errorhandler(429)
    def too_many_requests(error):
        return jsonify({
            'error': 'Too many requests',
            'message': 'Please try again later'
        }), 429

    from .cli import register_commands
    register_commands(app)

    if app.config.get('AUTO_CREATE_SCHEMA', True):
        with app.app_context():
            from . import models  # noqa: F401
            db.create_all()
            logger.info('Database tables initialized successfully')

    return app
