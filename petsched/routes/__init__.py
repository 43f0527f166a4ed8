from .appointment_routes import appointment_ns
from .auth_routes import auth_ns
from .billing_routes import billing_ns
from .dashboard_routes import dashboard_ns
from .health_routes import health_ns
from .payment_routes import payment_ns
from .pet_routes import pet_ns
from .upload_routes import upload_ns


def register_namespaces(api):
    api.add_namespace(health_ns)
    api.add_namespace(auth_ns)
    api.add_namespace(pet_ns)
    api.add_namespace(appointment_ns)
    api.add_namespace(billing_ns)
    api.add_namespace(payment_ns)
    api.add_namespace(upload_ns)
    api.add_namespace(dashboard_ns)
