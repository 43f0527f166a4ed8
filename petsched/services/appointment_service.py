# Appointment scheduling: booking, rescheduling and the per-pet slot conflict rule
import logging
import re
import uuid
from datetime import date, datetime, timedelta

from dateutil.parser import isoparse
from sqlalchemy.exc import IntegrityError

from petsched.errors import ConflictError, NotFoundError, UpstreamError, ValidationError
from petsched.models.appointment_model import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

APPOINTMENT_SELECT = """
    SELECT
      a.*,
      p.name AS pet_name,
      p.species AS pet_species,
      p.breed AS pet_breed,
      p.owner_name
    FROM appointments a
    LEFT JOIN pets p ON a.pet_id = p.id
"""
NEWEST_FIRST = 'ORDER BY a.appointment_date DESC, a.appointment_time DESC'
TIME_FORMATS = ('%H:%M', '%H:%M:%S')
# isoparse alone would accept '2024-03' or '2024' as the first of the month/year
FULL_DATE_REGEX = re.compile(r'^\d{4}-\d{2}-\d{2}(?:[T ].+)?$')
DEFAULT_DURATION = 60
DEFAULT_UPCOMING_DAYS = 7


def parse_appointment_date(value):
    """Accept a full ISO date (or datetime) string and return it as YYYY-MM-DD."""
    text = str(value).strip()
    try:
        if not FULL_DATE_REGEX.match(text):
            raise ValueError(text)
        return isoparse(text).date().isoformat()
    except (ValueError, TypeError, OverflowError):
        raise ValidationError('appointment_date must be a valid date (YYYY-MM-DD)', error='Invalid date')


def parse_appointment_time(value):
    text = str(value).strip()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime('%H:%M')
        except ValueError:
            continue
    raise ValidationError('appointment_time must be a valid time (HH:MM)', error='Invalid time')


def parse_duration_minutes(value):
    if isinstance(value, bool):
        raise ValidationError('duration_minutes must be a positive integer', error='Invalid duration')
    try:
        duration = int(value)
    except (TypeError, ValueError):
        raise ValidationError('duration_minutes must be a positive integer', error='Invalid duration')
    if duration <= 0:
        raise ValidationError('duration_minutes must be a positive integer', error='Invalid duration')
    return duration


def validate_status(status):
    if status not in Appointment.VALID_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(Appointment.VALID_STATUSES)}",
                              error='Invalid status')
    return status


def scheduling_conflict():
    return ConflictError('An appointment already exists for this pet at this time', error='Scheduling conflict')


class AppointmentService:
    def __init__(self, database, emails):
        self.database = database
        self.emails = emails

    def list_appointments(self):
        return self.database.query(f'{APPOINTMENT_SELECT} {NEWEST_FIRST}')

    def get_appointment(self, appointment_id):
        rows = self.database.query(f'{APPOINTMENT_SELECT} WHERE a.id = ?', [appointment_id])
        if not rows:
            raise NotFoundError(f'No appointment found with id: {appointment_id}', error='Appointment not found')
        return rows[0]

    def get_pet_appointments(self, pet_id):
        return self.database.query(f'{APPOINTMENT_SELECT} WHERE a.pet_id = ? {NEWEST_FIRST}', [pet_id])

    def get_upcoming(self, days=DEFAULT_UPCOMING_DAYS, today=None):
        """Non-cancelled appointments from today through today + days, soonest first."""
        try:
            days = int(days)
        except (TypeError, ValueError):
            raise ValidationError('days must be a non-negative integer', error='Invalid days')
        if days < 0:
            raise ValidationError('days must be a non-negative integer', error='Invalid days')
        start = today or date.today()
        try:
            end = start + timedelta(days=days)
        except OverflowError:
            raise ValidationError(f'days must be at most {(date.max - start).days}', error='Invalid days')
        return self.database.query(
            f"""{APPOINTMENT_SELECT}
                WHERE a.appointment_date >= ? AND a.appointment_date <= ? AND a.status != ?
                ORDER BY a.appointment_date ASC, a.appointment_time ASC""",
            [start.isoformat(), end.isoformat(), AppointmentStatus.CANCELLED.value]
        )

    def _find_pet(self, pet_id):
        rows = self.database.query('SELECT * FROM pets WHERE id = ?', [pet_id])
        if not rows:
            raise NotFoundError(f'No pet found with id: {pet_id}', error='Pet not found')
        return rows[0]

    def _find_user(self, user_id):
        if not user_id:
            return None
        rows = self.database.query('SELECT id, email, name FROM users WHERE id = ?', [user_id])
        return rows[0] if rows else None

    def has_conflict(self, pet_id, appointment_date, appointment_time, exclude_id=None):
        sql = """SELECT id FROM appointments
                 WHERE pet_id = ? AND appointment_date = ? AND appointment_time = ? AND status != ?"""
        params = [pet_id, appointment_date, appointment_time, AppointmentStatus.CANCELLED.value]
        if exclude_id:
            sql += ' AND id != ?'
            params.append(exclude_id)
        return bool(self.database.query(sql, params))

    def create_appointment(self, data, user=None):
        if not all(data.get(field) for field in ('pet_id', 'service_type', 'appointment_date', 'appointment_time')):
            raise ValidationError('pet_id, service_type, appointment_date, and appointment_time are required',
                                  error='Missing required fields')
        appointment_date = parse_appointment_date(data['appointment_date'])
        appointment_time = parse_appointment_time(data['appointment_time'])
        duration = data.get('duration_minutes')
        duration = DEFAULT_DURATION if duration in (None, '') else parse_duration_minutes(duration)
        status = validate_status(data.get('status') or AppointmentStatus.SCHEDULED.value)
        user = user or {}

        pet = self._find_pet(data['pet_id'])
        if status != AppointmentStatus.CANCELLED.value and \
                self.has_conflict(pet['id'], appointment_date, appointment_time):
            raise scheduling_conflict()

        appointment_id = str(uuid.uuid4())
        try:
            self.database.run(
                """INSERT INTO appointments (id, pet_id, service_type, appointment_date, appointment_time,
                                             duration_minutes, notes, status, clinic_id, user_id,
                                             created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)""",
                [appointment_id, pet['id'], data['service_type'], appointment_date, appointment_time, duration,
                 data.get('notes'), status, user.get('clinic_id'), user.get('id')]
            )
        except IntegrityError:
            raise scheduling_conflict()
        logger.info(f"Booked appointment {appointment_id} for pet {pet['id']} on {appointment_date} {appointment_time}")

        appointment = self.get_appointment(appointment_id)
        self._send_confirmation(appointment, pet, user.get('id'))
        return appointment

    def _send_confirmation(self, appointment, pet, user_id):
        user = self._find_user(user_id)
        if not user:
            return
        try:
            result = self.emails.send_appointment_confirmation(appointment, pet, user)
        except Exception as e:
            logger.error(f"Confirmation email for appointment {appointment['id']} raised: {e}")
            return
        if not result.get('success'):
            logger.warning(f"Confirmation email for appointment {appointment['id']} failed: {result.get('error')}")

    def update_appointment(self, appointment_id, data):
        current = self.get_appointment(appointment_id)

        pet_id = data.get('pet_id') or current['pet_id']
        if pet_id != current['pet_id']:
            self._find_pet(pet_id)
        appointment_date = current['appointment_date']
        if data.get('appointment_date'):
            appointment_date = parse_appointment_date(data['appointment_date'])
        appointment_time = current['appointment_time']
        if data.get('appointment_time'):
            appointment_time = parse_appointment_time(data['appointment_time'])
        duration = current['duration_minutes']
        if data.get('duration_minutes') not in (None, ''):
            duration = parse_duration_minutes(data['duration_minutes'])
        status = validate_status(data.get('status') or current['status'])
        notes = data['notes'] if 'notes' in data else current['notes']

        slot_changed = (appointment_date != current['appointment_date']
                        or appointment_time != current['appointment_time'])
        if slot_changed and status != AppointmentStatus.CANCELLED.value and \
                self.has_conflict(pet_id, appointment_date, appointment_time, exclude_id=appointment_id):
            raise scheduling_conflict()

        try:
            self.database.run(
                """UPDATE appointments
                   SET pet_id = ?, service_type = ?, appointment_date = ?, appointment_time = ?,
                       duration_minutes = ?, notes = ?, status = ?, updated_at = CURRENT_TIMESTAMP
                   WHERE id = ?""",
                [pet_id, data.get('service_type') or current['service_type'], appointment_date, appointment_time,
                 duration, notes, status, appointment_id]
            )
        except IntegrityError:
            raise scheduling_conflict()
        return self.get_appointment(appointment_id)

    def delete_appointment(self, appointment_id):
        self.get_appointment(appointment_id)
        self.database.run('DELETE FROM appointments WHERE id = ?', [appointment_id])
        logger.info(f"Deleted appointment {appointment_id}")
        return {'id': appointment_id}

    def send_reminder(self, appointment_id):
        appointment = self.get_appointment(appointment_id)
        user = self._find_user(appointment.get('user_id'))
        if not user:
            raise ValidationError('Appointment has no booking user to remind', error='No recipient')
        pet = self._find_pet(appointment['pet_id'])
        result = self.emails.send_appointment_reminder(appointment, pet, user)
        if not result.get('success'):
            raise UpstreamError(result.get('error') or 'Email delivery failed', error='Failed to send reminder',
                                status_code=502)
        return {'id': appointment_id, 'sent_to': user['email'], 'message_id': result.get('message_id')}
