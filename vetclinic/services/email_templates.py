"""
Plain-text email content for appointment confirmations and reminders.

Each builder takes the appointment, the display names involved and a
``clinic`` dict (name, address, phone, email) and returns ``(subject, body)``.
"""

TIME_FORMAT = '%I:%M %p'
DATE_FORMAT = '%b %d, %Y'
RULE = '━' * 51


def format_date(date_time):
    return date_time.strftime(DATE_FORMAT)


def format_time(date_time):
    return date_time.strftime(TIME_FORMAT)


def clinic_from_config(config):
    return {
        'name': config.get('CLINIC_NAME', 'VetCare Clinic'),
        'address': config.get('CLINIC_ADDRESS', ''),
        'phone': config.get('CLINIC_PHONE', ''),
        'email': config.get('MAIL_DEFAULT_SENDER', '')
    }


def _details(date_time, lines, clinic):
    block = [
        "📋 APPOINTMENT DETAILS:",
        RULE,
        f"📅 Date: {format_date(date_time)}",
        f"🕐 Time: {format_time(date_time)}",
    ]
    block.extend(lines)
    block.append(f"📍 Location: {clinic['name']}")
    block.append(f"   {clinic['address']}")
    return "\n".join(block) + "\n\n"


def _contact(clinic):
    return (
        "📞 CONTACT INFORMATION:\n"
        f"{RULE}\n"
        f"Phone: {clinic['phone']}\n"
        f"Email: {clinic['email']}\n\n"
    )


def owner_confirmation(appointment, owner_name, vet_name, pet_name, clinic):
    subject = (f"Appointment Confirmation - {pet_name} scheduled for "
               f"{format_date(appointment.date_time)} at {format_time(appointment.date_time)}")
    body = (
        f"Dear {owner_name},\n\n"
        "🎉 Your appointment has been successfully confirmed!\n\n"
        f"Thank you for choosing {clinic['name']} for your pet's care.\n\n"
        + _details(appointment.date_time, [
            f"🐾 Pet: {pet_name}",
            f"👨‍⚕️ Veterinarian: Dr. {vet_name}",
            f"📝 Reason: {appointment.reason}",
        ], clinic)
        + "⚠️  IMPORTANT REMINDERS:\n"
        f"{RULE}\n"
        "• Please arrive 10 minutes before your scheduled appointment time\n"
        "• Bring any relevant medical records or previous prescriptions\n"
        "• If you need to reschedule or cancel, please contact us at least 24 hours in advance\n\n"
        + _contact(clinic)
        + f"We look forward to providing excellent care for {pet_name}! 🐕🐱\n\n"
        "Best regards,\n"
        f"The {clinic['name']} Team\n"
        "Providing compassionate care for your beloved pets"
    )
    return subject, body


def vet_confirmation(appointment, vet_name, owner_name, pet_name, clinic):
    subject = f"New Appointment Confirmation - {pet_name} with {owner_name}"
    body = (
        f"Dear Dr. {vet_name},\n\n"
        "📋 A new appointment has been confirmed and added to your schedule.\n\n"
        + _details(appointment.date_time, [
            f"🐾 Pet: {pet_name}",
            f"👤 Owner: {owner_name}",
            f"📝 Reason: {appointment.reason}",
        ], clinic)
        + _contact(clinic)
        + "Please review the appointment details and prepare accordingly.\n\n"
        "Best regards,\n"
        f"The {clinic['name']} Team"
    )
    return subject, body


def owner_reminder(appointment, owner_name, vet_name, pet_name, clinic):
    subject = f"Appointment Reminder - {pet_name} in 1 hour"
    body = (
        f"Dear {owner_name},\n\n"
        "⏰ APPOINTMENT REMINDER\n\n"
        f"This is a friendly reminder that {pet_name}'s appointment is in 1 hour.\n\n"
        + _details(appointment.date_time, [
            f"👨‍⚕️ Veterinarian: Dr. {vet_name}",
        ], clinic)
        + "⚠️  REMINDER:\n"
        f"{RULE}\n"
        "• Please arrive 10 minutes before your scheduled appointment time\n"
        "• Bring any relevant medical records or previous prescriptions\n\n"
        + _contact(clinic)
        + f"We look forward to seeing you and {pet_name}!\n\n"
        "Best regards,\n"
        f"The {clinic['name']} Team"
    )
    return subject, body


def vet_reminder(appointment, vet_name, owner_name, pet_name, clinic):
    subject = f"Appointment Reminder - {pet_name} with {owner_name} in 1 hour"
    body = (
        f"Dear Dr. {vet_name},\n\n"
        "⏰ APPOINTMENT REMINDER\n\n"
        "You have an appointment in 1 hour.\n\n"
        + _details(appointment.date_time, [
            f"🐾 Pet: {pet_name}",
            f"👤 Owner: {owner_name}",
            f"📝 Reason: {appointment.reason}",
        ], clinic)
        + _contact(clinic)
        + "Please prepare for the appointment accordingly.\n\n"
        "Best regards,\n"
        f"The {clinic['name']} Team"
    )
    return subject, body


def message_reply(original_subject, sender_name, reply_content, clinic):
    subject = f"Re: {original_subject}"
    body = (
        f"Dear {sender_name},\n\n"
        f"{reply_content}\n\n"
        "Best regards,\n"
        f"The {clinic['name']} Team"
    )
    return subject, body
