"""
领域规则层 - 与持久化无关的纯函数
"""
from hms.domain.lifecycle import (
    BookingStateError, StayQuote, RoomOption, RoomTypeOption, RoomStatusView,
    calculate_stay, count_nights, available_rooms, room_type_options,
    derive_effective_status, build_status_board, room_status_for_booking,
    ensure_can_check_out, ensure_transition,
)

__all__ = [
    'BookingStateError', 'StayQuote', 'RoomOption', 'RoomTypeOption', 'RoomStatusView',
    'calculate_stay', 'count_nights', 'available_rooms', 'room_type_options',
    'derive_effective_status', 'build_status_board', 'room_status_for_booking',
    'ensure_can_check_out', 'ensure_transition',
]
