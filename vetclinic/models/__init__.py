from .user_model import User, Role
from .owner_model import Owner
from .pet_model import Pet, Gender
from .appointment_model import Appointment, AppointmentStatus
from .prescription_model import Prescription
from .message_model import Message
from .reminder_model import ReminderLog
