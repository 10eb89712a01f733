from datetime import datetime
from vetclinic import db


class Message(db.Model):
    __tablename__ = 'messages'
    id = db.Column(db.Integer, primary_key=True)
    sender_name = db.Column(db.String(120), nullable=False)
    sender_email = db.Column(db.String(120), nullable=False)
    subject = db.Column(db.String(200), nullable=False)
    content = db.Column(db.String(2000), nullable=False)
    sent_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    receiver_id = db.Column(db.Integer)
    receiver_name = db.Column(db.String(120))

    def __repr__(self):
        return f'<Message {self.id} from {self.sender_email}>'
