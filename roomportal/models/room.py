from roomportal.extensions import db
from roomportal.utils.dates import utcnow

class Room(db.Model):
    __tablename__ = 'rooms'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)
    capacity = db.Column(db.Integer, nullable=False)
    location = db.Column(db.String(128))
    phone = db.Column(db.String(32))
    no_of_chairs = db.Column(db.Integer, default=0)
    has_tv = db.Column(db.Boolean, nullable=False, default=False)
    has_monitor = db.Column(db.Boolean, nullable=False, default=False)
    has_board = db.Column(db.Boolean, nullable=False, default=False)
    is_working = db.Column(db.Boolean, nullable=False, default=True)

    # Bumped as the first write of every booking create/update on this room.
    # The row lock it takes serializes check-then-write per room.
    booking_version = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (db.CheckConstraint('capacity > 0', name='check_capacity_positive'),)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'capacity': self.capacity,
            'location': self.location,
            'phone': self.phone,
            'no_of_chairs': self.no_of_chairs,
            'has_tv': self.has_tv,
            'has_monitor': self.has_monitor,
            'has_board': self.has_board,
            'is_working': self.is_working
        }
