from flask import request
from flask_restx import Namespace, Resource, fields

from petsched.models.user_model import Role
from petsched.services import get_services
from petsched.services.appointment_service import DEFAULT_UPCOMING_DAYS
from petsched.utils import api_response, current_user, role_required, token_optional

appointment_ns = Namespace('appointments', description='Operations related to vet appointments',
                           path='/appointments')

appointment_model = appointment_ns.model('Appointment', {
    'pet_id': fields.String(required=True, description='ID of the pet'),
    'service_type': fields.String(required=True, description='e.g. checkup, vaccination'),
    'appointment_date': fields.String(required=True, description='Date as YYYY-MM-DD'),
    'appointment_time': fields.String(required=True, description='Time as HH:MM'),
    'duration_minutes': fields.Integer(default=60),
    'notes': fields.String(),
    'status': fields.String(enum=['scheduled', 'completed', 'cancelled'], default='scheduled'),
})


@appointment_ns.route('')
class AppointmentList(Resource):
    def get(self):
        """All appointments, newest slot first"""
        appointments = get_services().appointments.list_appointments()
        return api_response(appointments, count=len(appointments))

    @appointment_ns.doc(security='BearerAuth')
    @appointment_ns.expect(appointment_model)
    @token_optional
    def post(self):
        """Book an appointment; a bearer token, when sent, records the booking user"""
        data = request.get_json(silent=True) or {}
        appointment = get_services().appointments.create_appointment(data, current_user())
        return api_response(appointment, 'Appointment created successfully', 201)


@appointment_ns.route('/upcoming')
class UpcomingAppointments(Resource):
    @appointment_ns.doc(params={'days': 'Look-ahead window in days (default 7)'})
    def get(self):
        days = request.args.get('days', DEFAULT_UPCOMING_DAYS)
        appointments = get_services().appointments.get_upcoming(days)
        return api_response(appointments, count=len(appointments))


@appointment_ns.route('/pet/<string:pet_id>')
class PetAppointments(Resource):
    def get(self, pet_id):
        appointments = get_services().appointments.get_pet_appointments(pet_id)
        return api_response(appointments, count=len(appointments))


@appointment_ns.route('/<string:appointment_id>')
class AppointmentResource(Resource):
    def get(self, appointment_id):
        return api_response(get_services().appointments.get_appointment(appointment_id))

    @appointment_ns.expect(appointment_model)
    def put(self, appointment_id):
        """Update an appointment; omitted fields keep their stored values"""
        data = request.get_json(silent=True) or {}
        appointment = get_services().appointments.update_appointment(appointment_id, data)
        return api_response(appointment, 'Appointment updated successfully')

    def delete(self, appointment_id):
        result = get_services().appointments.delete_appointment(appointment_id)
        return api_response(result, 'Appointment deleted successfully')


@appointment_ns.route('/<string:appointment_id>/reminder')
class AppointmentReminder(Resource):
    @appointment_ns.doc(security='BearerAuth')
    @role_required(Role.ADMIN, Role.VET)
    def post(self, appointment_id):
        """Email the booking user a reminder"""
        result = get_services().appointments.send_reminder(appointment_id)
        return api_response(result, 'Reminder sent successfully')
