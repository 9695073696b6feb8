from roomportal.extensions import db
from roomportal.utils.dates import utcnow

class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(64), index=True)
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone_number = db.Column(db.String(32), index=True)
    role = db.Column(db.String(20), nullable=False, default='user') # user, admin

    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    # Login-only state, never exposed through to_dict
    otp_hash = db.Column(db.String(255))
    otp_expiry = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=utcnow)

    @property
    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {
            'id': self.id,
            'employee_id': self.employee_id,
            'name': self.name,
            'email': self.email,
            'phone_number': self.phone_number,
            'role': self.role,
            'is_verified': self.is_verified,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
