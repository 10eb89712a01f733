# vetclinic/utils/role_utils.py
from vetclinic.models.user_model import Role

# Sections and actions available to each role
ROLE_PERMISSIONS = {
    Role.OWNER: {
        'interface_sections': [
            'dashboard', 'profile', 'pets', 'appointments', 'prescriptions', 'doctors', 'messages'
        ],
        'actions': [
            'manage_own_pets', 'book_appointment', 'reschedule_own_appointment',
            'cancel_own_appointment', 'view_own_prescriptions', 'contact_admin'
        ]
    },
    Role.VETERINARIAN: {
        'interface_sections': [
            'dashboard', 'profile', 'appointments', 'prescriptions', 'pets', 'messages'
        ],
        'actions': [
            'view_own_appointments', 'complete_appointment', 'cancel_appointment',
            'create_prescription', 'update_own_prescription', 'view_pets', 'contact_admin'
        ]
    },
    Role.ADMIN: {
        'interface_sections': [
            'dashboard', 'profile', 'users', 'owners', 'pets', 'veterinarians',
            'appointments', 'prescriptions', 'messages', 'reminders'
        ],
        'actions': [
            'view_all_users', 'update_user', 'delete_user', 'block_user', 'manage_owners',
            'view_all_pets', 'manage_veterinarians', 'view_all_appointments',
            'view_all_prescriptions', 'reply_message', 'trigger_reminders'
        ]
    }
}


def get_user_permissions(user):
    """Get user permissions based on their role"""
    if not user or not user.role:
        return {
            'interface_sections': ['login', 'register', 'contact'],
            'actions': ['send_contact_message']
        }
    return ROLE_PERMISSIONS[user.role]


def get_user_data_with_permissions(user):
    """Return user data with their permissions"""
    if not user:
        return None
    return {
        'id': user.id,
        'username': user.username,
        'fullName': user.full_name,
        'email': user.email,
        'role': user.role.value,
        'permissions': get_user_permissions(user),
        'blocked': user.blocked
    }
