from roomportal.models.user import User
from roomportal.models.room import Room
from roomportal.models.booking import Booking

__all__ = ['User', 'Room', 'Booking']
