from flask_restx import Namespace, Resource

from petsched.services import get_services
from petsched.utils import api_response, token_required

dashboard_ns = Namespace('dashboard', description='Operations related to dashboard statistics', path='/dashboard')


@dashboard_ns.route('/stats')
class DashboardStats(Resource):
    @dashboard_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        """Pet and appointment counters, including the next 7 days"""
        return api_response(get_services().dashboard.get_stats())
