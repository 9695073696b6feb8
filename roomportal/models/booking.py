from roomportal.extensions import db
from roomportal.utils.dates import utcnow

class Booking(db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)
    # Plain references: bookings outlive the room or user they point at.
    room_id = db.Column(db.Integer, nullable=False)
    owner_id = db.Column(db.Integer, nullable=False, index=True)

    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)

    title = db.Column(db.String(255))
    is_cancelled = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.Index('ix_bookings_room_active_start', 'room_id', 'is_cancelled', 'start_time'),
        db.CheckConstraint('end_time > start_time', name='check_booking_interval'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'room_id': self.room_id,
            'owner_id': self.owner_id,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat(),
            'title': self.title,
            'is_cancelled': self.is_cancelled,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
