import enum
from vetclinic import db


class Gender(enum.Enum):
    MALE = 'MALE'
    FEMALE = 'FEMALE'
    UNKNOWN = 'UNKNOWN'


class Pet(db.Model):
    __tablename__ = 'pets'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    species = db.Column(db.String(50), nullable=False)
    breed = db.Column(db.String(50))
    date_of_birth = db.Column(db.Date, nullable=False)
    gender = db.Column(db.String(10), default=Gender.UNKNOWN.value)
    medical_history = db.Column(db.Text)
    image_url = db.Column(db.String(255))
    owner_id = db.Column(db.Integer, db.ForeignKey('owners.id'), nullable=False)
    owner = db.relationship('Owner', back_populates='pets')

    def __repr__(self):
        return f'<Pet {self.name} ({self.species})>'
