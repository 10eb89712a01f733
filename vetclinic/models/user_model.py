import enum
from vetclinic import db


class Role(enum.Enum):
    ADMIN = 'ADMIN'
    VETERINARIAN = 'VETERINARIAN'
    OWNER = 'OWNER'


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)
    full_name = db.Column(db.String(120))
    email = db.Column(db.String(120), unique=True, nullable=False)
    mobile = db.Column(db.String(20))
    role = db.Column(db.Enum(Role), nullable=False, default=Role.OWNER)
    blocked = db.Column(db.Boolean, nullable=False, default=False)
    address = db.Column(db.String(255))
    specialization = db.Column(db.String(120))
    working_hours = db.Column(db.String(120))
    profile_photo = db.Column(db.String(255))

    def __repr__(self):
        return f'<User {self.username} ({self.role})>'
