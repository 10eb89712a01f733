from datetime import datetime
from vetclinic import db


class Prescription(db.Model):
    __tablename__ = 'prescriptions'
    id = db.Column(db.Integer, primary_key=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id'), nullable=False)
    pet_id = db.Column(db.Integer, db.ForeignKey('pets.id'), nullable=False)
    veterinarian_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    symptoms = db.Column(db.Text, nullable=False)
    diagnosis = db.Column(db.Text, nullable=False)
    medications = db.Column(db.Text, nullable=False)
    notes = db.Column(db.Text)
    date = db.Column(db.DateTime, nullable=False, default=datetime.now)

    appointment = db.relationship('Appointment', lazy='joined')
    pet = db.relationship('Pet', lazy='joined')
    veterinarian = db.relationship('User', foreign_keys=[veterinarian_id], lazy='joined')
    owner = db.relationship('User', foreign_keys=[owner_id], lazy='joined')

    def __repr__(self):
        return f'<Prescription {self.id} for Pet {self.pet_id}>'
