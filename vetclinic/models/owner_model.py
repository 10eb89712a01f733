from vetclinic import db


class Owner(db.Model):
    __tablename__ = 'owners'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column('full_name', db.String(120), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20))
    email = db.Column(db.String(120), unique=True, nullable=False)
    user_id = db.Column(db.Integer, unique=True)
    pets = db.relationship('Pet', back_populates='owner', cascade='all, delete-orphan', lazy=True)

    def __repr__(self):
        return f'<Owner {self.name} ({self.email})>'
