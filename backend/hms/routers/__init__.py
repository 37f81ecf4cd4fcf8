# API Routers
from hms.routers import (
    auth, rooms, guests, finances, reports, restaurant, facilities, users, activities, events
)

__all__ = [
    'auth', 'rooms', 'guests', 'finances', 'reports', 'restaurant',
    'facilities', 'users', 'activities', 'events'
]
