from datetime import datetime, timezone

from flask import current_app
from flask_restx import Namespace, Resource

health_ns = Namespace('health', description='Liveness check', path='/health')


@health_ns.route('')
class Health(Resource):
    def get(self):
        return {
            'status': 'OK',
            'message': 'PetSched API is running',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'environment': current_app.config.get('APP_ENV'),
            'version': current_app.config.get('VERSION'),
        }, 200
