# Ontology Models
from hms.models.ontology import (
    RoomType, Room, Guest, Transaction, User, UserActivity, MenuItem, Facility
)

__all__ = [
    'RoomType', 'Room', 'Guest', 'Transaction', 'User', 'UserActivity',
    'MenuItem', 'Facility'
]
