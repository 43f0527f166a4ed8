from petsched import db


class Pet(db.Model):
    __tablename__ = 'pets'
    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    species = db.Column(db.String(50), nullable=False)
    breed = db.Column(db.String(100))
    age = db.Column(db.Integer)
    owner_name = db.Column(db.String(255), nullable=False)
    owner_phone = db.Column(db.String(50))
    photo_url = db.Column(db.String(255))
    clinic_id = db.Column(db.String(36), db.ForeignKey('clinics.id'), nullable=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    def __repr__(self):
        return f'<Pet {self.name} ({self.species})>'
