from datetime import datetime
from vetclinic import db


class ReminderLog(db.Model):
    """One row per appointment per day once its reminders went out."""
    __tablename__ = 'reminder_log'
    __table_args__ = (db.UniqueConstraint('appointment_id', 'reminder_date', name='uq_reminder_appointment_date'),)
    id = db.Column(db.Integer, primary_key=True)
    appointment_id = db.Column(db.Integer, nullable=False)
    reminder_date = db.Column(db.Date, nullable=False)
    sent_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    def __repr__(self):
        return f'<ReminderLog appointment={self.appointment_id} date={self.reminder_date}>'
