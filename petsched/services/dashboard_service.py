from datetime import date, timedelta

from petsched.models.appointment_model import AppointmentStatus


class DashboardService:
    def __init__(self, database):
        self.database = database

    def _scalar(self, sql, params=()):
        rows = self.database.query(sql, params)
        return rows[0]['count'] if rows else 0

    def get_stats(self, today=None, days=7):
        """Counters shown on the clinic dashboard."""
        today = today or date.today()
        by_status = {status.value: 0 for status in AppointmentStatus}
        for row in self.database.query('SELECT status, COUNT(*) AS count FROM appointments GROUP BY status'):
            by_status[row['status']] = row['count']

        upcoming = self._scalar(
            """SELECT COUNT(*) AS count FROM appointments
               WHERE appointment_date >= ? AND appointment_date <= ? AND status != ?""",
            [today.isoformat(), (today + timedelta(days=days)).isoformat(), AppointmentStatus.CANCELLED.value]
        )
        return {
            'total_pets': self._scalar('SELECT COUNT(*) AS count FROM pets'),
            'total_appointments': self._scalar('SELECT COUNT(*) AS count FROM appointments'),
            'appointments_by_status': by_status,
            'upcoming_appointments': upcoming,
            'todays_appointments': self._scalar(
                'SELECT COUNT(*) AS count FROM appointments WHERE appointment_date = ? AND status != ?',
                [today.isoformat(), AppointmentStatus.CANCELLED.value]
            ),
        }
