from .appointment_model import Appointment, AppointmentStatus
from .clinic_model import Clinic, SubscriptionStatus, SubscriptionTier
from .pet_model import Pet
from .user_model import Role, User
from .webhook_event_model import WebhookEvent
