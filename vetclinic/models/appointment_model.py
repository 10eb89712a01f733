from vetclinic import db


class AppointmentStatus:
    SCHEDULED = 'SCHEDULED'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'

    ALL = (SCHEDULED, COMPLETED, CANCELLED)


class Appointment(db.Model):
    __tablename__ = 'appointments'
    id = db.Column(db.Integer, primary_key=True)
    # Plain ids: the rows are resolved by lookup, not through foreign keys
    owner_id = db.Column(db.Integer, nullable=False)
    pet_id = db.Column(db.Integer, nullable=False)
    veterinarian_id = db.Column(db.Integer, nullable=False, index=True)
    date_time = db.Column(db.DateTime, nullable=False, index=True)
    reason = db.Column(db.String(255))
    status = db.Column(db.String(20), nullable=False, default=AppointmentStatus.SCHEDULED)

    def __repr__(self):
        return f'<Appointment {self.id} vet={self.veterinarian_id} at {self.date_time} ({self.status})>'
