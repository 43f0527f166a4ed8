# Sample data for local development
import logging
import uuid

from petsched.services.auth_service import hash_password

logger = logging.getLogger(__name__)

DEMO_CLINIC = {
    'name': 'PetSched Demo Clinic',
    'address': '123 Main Street',
    'phone': '555-0100',
    'email': 'clinic@petsched.local',
    'website': 'http://localhost:3000',
}

SAMPLE_PETS = [
    {'name': 'Buddy', 'species': 'Dog', 'breed': 'Golden Retriever', 'age': 3,
     'owner_name': 'Sarah Johnson', 'owner_phone': '555-0101'},
    {'name': 'Whiskers', 'species': 'Cat', 'breed': 'Persian', 'age': 5,
     'owner_name': 'Mike Chen', 'owner_phone': '555-0102'},
    {'name': 'Rex', 'species': 'Dog', 'breed': 'German Shepherd', 'age': 2,
     'owner_name': 'Emily Davis', 'owner_phone': '555-0103'},
    {'name': 'Luna', 'species': 'Cat', 'breed': 'Siamese', 'age': 1,
     'owner_name': 'David Wilson', 'owner_phone': '555-0104'},
    {'name': 'Max', 'species': 'Dog', 'breed': 'Labrador Retriever', 'age': 4,
     'owner_name': 'Lisa Brown', 'owner_phone': '555-0105'},
    {'name': 'Bella', 'species': 'Cat', 'breed': 'Maine Coon', 'age': 6,
     'owner_name': 'James Miller', 'owner_phone': '555-0106'},
    {'name': 'Rocky', 'species': 'Dog', 'breed': 'Bulldog', 'age': 2,
     'owner_name': 'Amanda Taylor', 'owner_phone': '555-0107'},
    {'name': 'Shadow', 'species': 'Cat', 'breed': 'Russian Blue', 'age': 3,
     'owner_name': 'Robert Anderson', 'owner_phone': '555-0108'},
]

# (index into SAMPLE_PETS, service, date, time, minutes, notes)
SAMPLE_APPOINTMENTS = [
    (0, 'Grooming', '2024-01-15', '10:00', 90, 'Full grooming session - needs special shampoo for sensitive skin'),
    (1, 'Vaccination', '2024-01-16', '14:30', 30, 'Annual vaccination - FVRCP and rabies'),
    (2, 'Training', '2024-01-17', '09:00', 60, 'Basic obedience training session'),
    (3, 'Check-up', '2024-01-18', '11:00', 45, 'Regular health check-up'),
    (4, 'Dental Cleaning', '2024-01-19', '13:00', 120, 'Professional dental cleaning and examination'),
    (5, 'Grooming', '2024-01-20', '15:30', 75, 'Bath and brush - long hair maintenance'),
    (6, 'Vaccination', '2024-01-21', '10:30', 30, 'DHPP and rabies vaccination'),
    (7, 'Check-up', '2024-01-22', '16:00', 45, 'Annual wellness exam'),
    (0, 'Training', '2024-01-23', '14:00', 60, 'Advanced training - working on recall commands'),
    (1, 'Grooming', '2024-01-24', '11:30', 60, 'Bath and nail trim'),
]


def _ensure_clinic(database):
    rows = database.query('SELECT id FROM clinics WHERE email = ?', [DEMO_CLINIC['email']])
    if rows:
        return rows[0]['id']
    clinic_id = str(uuid.uuid4())
    database.run(
        """INSERT INTO clinics (id, name, address, phone, email, website, subscription_tier, subscription_status,
                                created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, 'basic', 'active', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)""",
        [clinic_id, DEMO_CLINIC['name'], DEMO_CLINIC['address'], DEMO_CLINIC['phone'], DEMO_CLINIC['email'],
         DEMO_CLINIC['website']]
    )
    return clinic_id


def _ensure_admin(database, clinic_id, email, password):
    rows = database.query('SELECT id FROM users WHERE email = ?', [email])
    if rows:
        return rows[0]['id']
    user_id = str(uuid.uuid4())
    database.run(
        """INSERT INTO users (id, email, password, name, role, clinic_id, created_at, updated_at)
           VALUES (?, ?, ?, ?, 'admin', ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)""",
        [user_id, email, hash_password(password), 'Demo Admin', clinic_id]
    )
    return user_id


def seed_database(database, admin_email='admin@petsched.local', admin_password='admin123'):
    """Replace all pets and appointments with the sample set; the demo clinic and admin are reused."""
    clinic_id = _ensure_clinic(database)
    admin_id = _ensure_admin(database, clinic_id, admin_email, admin_password)

    database.run('DELETE FROM appointments')
    database.run('DELETE FROM pets')

    pet_ids = []
    for pet in SAMPLE_PETS:
        pet_id = str(uuid.uuid4())
        database.run(
            """INSERT INTO pets (id, name, species, breed, age, owner_name, owner_phone, clinic_id, user_id,
                                 created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)""",
            [pet_id, pet['name'], pet['species'], pet['breed'], pet['age'], pet['owner_name'], pet['owner_phone'],
             clinic_id, admin_id]
        )
        pet_ids.append(pet_id)

    for pet_index, service_type, appointment_date, appointment_time, duration, notes in SAMPLE_APPOINTMENTS:
        database.run(
            """INSERT INTO appointments (id, pet_id, service_type, appointment_date, appointment_time,
                                         duration_minutes, notes, status, clinic_id, user_id,
                                         created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, 'scheduled', ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)""",
            [str(uuid.uuid4()), pet_ids[pet_index], service_type, appointment_date, appointment_time, duration,
             notes, clinic_id, admin_id]
        )

    logger.info(f"Seeded {len(SAMPLE_PETS)} pets and {len(SAMPLE_APPOINTMENTS)} appointments")
    return {'clinic_id': clinic_id, 'admin_id': admin_id, 'pets': len(SAMPLE_PETS),
            'appointments': len(SAMPLE_APPOINTMENTS)}
