# Pet service module for business logic
import logging
import uuid

from petsched.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('name', 'species', 'owner_name')
OPTIONAL_FIELDS = ('breed', 'age', 'owner_phone')


def parse_age(value):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationError('Age must be a non-negative integer', error='Invalid age')
    try:
        age = int(value)
    except (TypeError, ValueError):
        raise ValidationError('Age must be a non-negative integer', error='Invalid age')
    if age < 0 or (isinstance(value, float) and value != age):
        raise ValidationError('Age must be a non-negative integer', error='Invalid age')
    return age


class PetService:
    def __init__(self, database, uploads):
        self.database = database
        self.uploads = uploads

    def list_pets(self):
        return self.database.query('SELECT * FROM pets ORDER BY created_at DESC')

    def get_pet(self, pet_id):
        rows = self.database.query('SELECT * FROM pets WHERE id = ?', [pet_id])
        if not rows:
            raise NotFoundError(f'No pet found with id: {pet_id}', error='Pet not found')
        return rows[0]

    def create_pet(self, data, user=None):
        if not all(data.get(field) for field in REQUIRED_FIELDS):
            raise ValidationError('Name, species, and owner_name are required', error='Missing required fields')
        age = parse_age(data.get('age'))
        user = user or {}

        pet_id = str(uuid.uuid4())
        self.database.run(
            """INSERT INTO pets (id, name, species, breed, age, owner_name, owner_phone, clinic_id, user_id,
                                 created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)""",
            [pet_id, data['name'], data['species'], data.get('breed'), age, data['owner_name'],
             data.get('owner_phone'), user.get('clinic_id'), user.get('id')]
        )
        logger.info(f"Created pet {pet_id}")
        return self.get_pet(pet_id)

    def update_pet(self, pet_id, data):
        pet = self.get_pet(pet_id)
        for field in REQUIRED_FIELDS:
            if field in data and not data[field]:
                raise ValidationError(f'{field} cannot be empty', error='Missing required fields')

        values = {field: data[field] if field in data else pet[field] for field in REQUIRED_FIELDS + OPTIONAL_FIELDS}
        if 'age' in data:
            values['age'] = parse_age(data['age'])

        self.database.run(
            """UPDATE pets
               SET name = ?, species = ?, breed = ?, age = ?, owner_name = ?, owner_phone = ?,
                   updated_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            [values['name'], values['species'], values['breed'], values['age'], values['owner_name'],
             values['owner_phone'], pet_id]
        )
        return self.get_pet(pet_id)

    def delete_pet(self, pet_id):
        pet = self.get_pet(pet_id)
        count = self.database.query('SELECT COUNT(*) AS count FROM appointments WHERE pet_id = ?', [pet_id])
        if count[0]['count'] > 0:
            raise ConflictError('Pet has existing appointments. Please delete appointments first.',
                                error='Cannot delete pet', status_code=400)

        self.database.run('DELETE FROM pets WHERE id = ?', [pet_id])
        if pet.get('photo_url'):
            self.uploads.delete_by_url(pet['photo_url'])
        logger.info(f"Deleted pet {pet_id}")
        return {'id': pet_id}

    def update_photo(self, pet_id, file):
        pet = self.get_pet(pet_id)
        stored = self.uploads.save(file)
        try:
            self.database.run('UPDATE pets SET photo_url = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                              [stored['url'], pet_id])
        except Exception:
            self.uploads.delete_file(stored['filename'])
            raise
        if pet.get('photo_url') and pet['photo_url'] != stored['url']:
            self.uploads.delete_by_url(pet['photo_url'])
        return self.get_pet(pet_id)
