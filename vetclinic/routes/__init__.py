# vetclinic/routes/__init__.py
from .auth_routes import auth_ns
from .profile_routes import profile_ns
from .owner_routes import owner_ns
from .vet_routes import vet_ns
from .admin_routes import admin_ns
from .message_routes import message_ns
from .reminder_routes import reminder_ns


def register_namespaces(api):
    api.add_namespace(auth_ns)
    api.add_namespace(profile_ns)
    api.add_namespace(owner_ns)
    api.add_namespace(vet_ns)
    api.add_namespace(admin_ns)
    api.add_namespace(message_ns)
    api.add_namespace(reminder_ns)
