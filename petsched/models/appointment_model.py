import enum

from petsched import db

ACTIVE_SLOT = db.text("status != 'cancelled'")


class AppointmentStatus(enum.Enum):
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class Appointment(db.Model):
    __tablename__ = 'appointments'
    __table_args__ = (
        # One live appointment per pet and slot; cancelled rows do not count.
        db.Index('uq_appointments_pet_slot', 'pet_id', 'appointment_date', 'appointment_time',
                 unique=True, sqlite_where=ACTIVE_SLOT, postgresql_where=ACTIVE_SLOT),
    )
    id = db.Column(db.String(36), primary_key=True)
    pet_id = db.Column(db.String(36), db.ForeignKey('pets.id'), nullable=False, index=True)
    service_type = db.Column(db.String(100), nullable=False)
    appointment_date = db.Column(db.String(10), nullable=False)
    appointment_time = db.Column(db.String(8), nullable=False)
    duration_minutes = db.Column(db.Integer, default=60, server_default='60')
    notes = db.Column(db.Text)
    status = db.Column(db.String(20), default=AppointmentStatus.SCHEDULED.value,
                       server_default=AppointmentStatus.SCHEDULED.value)
    clinic_id = db.Column(db.String(36), db.ForeignKey('clinics.id'), nullable=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    VALID_STATUSES = [status.value for status in AppointmentStatus]

    def __repr__(self):
        return f'<Appointment {self.pet_id} {self.appointment_date} {self.appointment_time}>'
