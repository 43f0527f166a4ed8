import enum

from petsched import db


class Role(enum.Enum):
    ADMIN = 'admin'
    VET = 'vet'
    CLIENT = 'client'


class User(db.Model):
    __tablename__ = 'users'
    __table_args__ = (
        db.CheckConstraint("role IN ('admin', 'vet', 'client')", name='ck_users_role'),
    )
    id = db.Column(db.String(36), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=Role.CLIENT.value, server_default=Role.CLIENT.value)
    clinic_id = db.Column(db.String(36), db.ForeignKey('clinics.id'), nullable=True)
    refresh_token = db.Column(db.Text, nullable=True)
    email_verified = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'
