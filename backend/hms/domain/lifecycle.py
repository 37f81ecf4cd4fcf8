"""
房态 / 预订生命周期规则

纯函数层，不访问数据库、不修改入参：
- 可售房间筛选与房型选项
- 入住晚数与总价计算
- 按日期推导房间展示状态
- 预订状态迁移校验

入参只要求具备对应属性（ORM 对象或任意简单对象均可）。
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from hms.models.ontology import RoomStatus, BookingStatus

DateLike = Union[date, datetime, str]

# 仍占用房间的预订状态
ACTIVE_BOOKING_STATUSES = (BookingStatus.RESERVATION, BookingStatus.CHECKED_IN)

# 预订状态允许的迁移
BOOKING_TRANSITIONS: Dict[BookingStatus, Tuple[BookingStatus, ...]] = {
    BookingStatus.RESERVATION: (BookingStatus.CHECKED_IN,),
    BookingStatus.CHECKED_IN: (BookingStatus.CHECKED_OUT,),
    BookingStatus.CHECKED_OUT: (),
}


class BookingStateError(ValueError):
    """前置状态不满足（如对未入住的预订退房），不产生任何写入"""


# ============== 日期与计价 ==============

def to_calendar_date(value: DateLike) -> date:
    """归一化为日历日期（忽略时分秒）"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value).date()
    raise TypeError(f"无法解析日期: {value!r}")


def to_price(value: Any) -> Decimal:
    """转换并校验价格：必须是有限且非负的数"""
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f"价格无效: {value!r}")
    if not price.is_finite() or price < 0:
        raise ValueError(f"价格无效: {value!r}")
    return price


@dataclass(frozen=True)
class StayQuote:
    """入住报价"""
    nights: int
    price_per_night: Decimal
    total_price: Decimal

    @property
    def is_bookable(self) -> bool:
        return self.nights > 0


def count_nights(check_in: DateLike, check_out: DateLike) -> int:
    """
    入住晚数 = 两个日历日之差

    离店不晚于入住时返回 0，调用方必须据此拒绝提交。
    """
    days = (to_calendar_date(check_out) - to_calendar_date(check_in)).days
    return days if days > 0 else 0


def calculate_stay(check_in: DateLike, check_out: DateLike, price_per_night: Any) -> StayQuote:
    """计算晚数与总价，total_price = nights × price_per_night"""
    price = to_price(price_per_night)
    nights = count_nights(check_in, check_out)
    return StayQuote(nights=nights, price_per_night=price, total_price=price * max(nights, 0))


# ============== 可售房间 ==============

@dataclass(frozen=True)
class RoomOption:
    """可选房间"""
    id: int
    number: str
    price: Decimal
    type_name: str
    room_type_id: Optional[int] = None
    conflicting_booking_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class RoomTypeOption:
    """房型选项，price 为该房型最便宜的可售房间价格"""
    id: int
    name: str
    price: Decimal


def _type_name(room) -> str:
    type_name = getattr(room, "type_name", None)
    if type_name:
        return type_name
    room_type = getattr(room, "room_type", None)
    return room_type.name if room_type is not None else "-"


def is_offerable(room) -> bool:
    """只有存储状态为 available 的房间才可用于新预订"""
    return room.status == RoomStatus.AVAILABLE


def stays_overlap(check_in: DateLike, check_out: DateLike, other_in: DateLike, other_out: DateLike) -> bool:
    """两段入住区间是否重叠（离店日当天可再入住）"""
    return (to_calendar_date(check_in) < to_calendar_date(other_out)
            and to_calendar_date(other_in) < to_calendar_date(check_out))


def available_rooms(
    rooms: Iterable,
    room_type_id: Optional[int] = None,
    bookings: Iterable = (),
    check_in: Optional[DateLike] = None,
    check_out: Optional[DateLike] = None,
) -> Tuple[RoomOption, ...]:
    """
    可售房间列表，保持输入顺序

    传入入住区间时，为每个房间列出与之重叠的在住/预订记录 id，
    存储状态与实际预订的偏差由调用方展示，这里不做裁决。
    """
    active = [b for b in bookings if b.booking_status in ACTIVE_BOOKING_STATUSES]
    options = []
    for room in rooms:
        if not is_offerable(room):
            continue
        if room_type_id is not None and room.room_type_id != room_type_id:
            continue
        conflicts: Tuple[int, ...] = ()
        if check_in is not None and check_out is not None:
            conflicts = tuple(
                b.id for b in active
                if b.room_id == room.id and stays_overlap(check_in, check_out, b.check_in, b.check_out)
            )
        options.append(RoomOption(
            id=room.id,
            number=room.number,
            price=to_price(room.price),
            type_name=_type_name(room),
            room_type_id=room.room_type_id,
            conflicting_booking_ids=conflicts,
        ))
    return tuple(options)


def room_type_options(rooms: Iterable) -> List[RoomTypeOption]:
    """按房型分组可售房间，每个房型取最低价，按房型名称排序"""
    by_type: Dict[int, RoomTypeOption] = {}
    for room in rooms:
        if not is_offerable(room) or room.room_type_id is None:
            continue
        price = to_price(room.price)
        existing = by_type.get(room.room_type_id)
        if existing is None or price < existing.price:
            by_type[room.room_type_id] = RoomTypeOption(
                id=room.room_type_id, name=_type_name(room), price=price
            )
    return sorted(by_type.values(), key=lambda option: option.name)


# ============== 展示状态推导 ==============

def booking_covers(booking, on_date: DateLike) -> bool:
    """预订区间 [check_in, check_out] 是否包含该日（两端均包含）"""
    target = to_calendar_date(on_date)
    return to_calendar_date(booking.check_in) <= target <= to_calendar_date(booking.check_out)


def bookings_on(room_id: int, bookings: Iterable, on_date: DateLike) -> List:
    """某房间在指定日期命中的全部预订记录（含已退房），按入住日排序"""
    matches = [
        b for b in bookings
        if b.room_id == room_id and booking_covers(b, on_date)
    ]
    return sorted(matches, key=lambda b: to_calendar_date(b.check_in))


def derive_effective_status(room, bookings: Iterable, on_date: Optional[DateLike]) -> RoomStatus:
    """
    推导房间在指定日期的展示状态

    1. 存储状态为 cleaning 时始终显示 cleaning
    2. 无命中预订时沿用存储状态
    3. 命中任一已入住记录显示 occupied，否则显示 reserved
    """
    if room.status == RoomStatus.CLEANING:
        return RoomStatus.CLEANING
    if on_date is None:
        return RoomStatus(room.status)

    matches = bookings_on(room.id, bookings, on_date)
    if not matches:
        return RoomStatus(room.status)
    if any(b.booking_status == BookingStatus.CHECKED_IN for b in matches):
        return RoomStatus.OCCUPIED
    return RoomStatus.RESERVED


@dataclass(frozen=True)
class BookingSummary:
    """看板上展示的预订摘要"""
    id: int
    guest_name: str
    booking_status: BookingStatus
    payment_status: Optional[str]
    check_in: date
    check_out: date


@dataclass(frozen=True)
class RoomStatusView:
    """房态看板条目：存储状态与展示状态同时给出"""
    room_id: int
    number: str
    type_name: str
    stored_status: RoomStatus
    display_status: RoomStatus
    bookings: Tuple[BookingSummary, ...] = field(default_factory=tuple)

    @property
    def diverged(self) -> bool:
        return self.stored_status != self.display_status


def _summarize(booking) -> BookingSummary:
    payment_status = getattr(booking, "payment_status", None)
    return BookingSummary(
        id=booking.id,
        guest_name=booking.name,
        booking_status=BookingStatus(booking.booking_status),
        payment_status=getattr(payment_status, "value", payment_status),
        check_in=to_calendar_date(booking.check_in),
        check_out=to_calendar_date(booking.check_out),
    )


def build_status_board(rooms: Sequence, bookings: Sequence, on_date: Optional[DateLike]) -> List[RoomStatusView]:
    """房态看板，每个房间一条，顺序同输入"""
    bookings = list(bookings)
    board = []
    for room in rooms:
        matches = bookings_on(room.id, bookings, on_date) if on_date is not None else []
        board.append(RoomStatusView(
            room_id=room.id,
            number=room.number,
            type_name=_type_name(room),
            stored_status=RoomStatus(room.status),
            display_status=derive_effective_status(room, bookings, on_date),
            bookings=tuple(_summarize(b) for b in matches),
        ))
    return board


# ============== 状态迁移 ==============

def room_status_for_booking(booking_status: BookingStatus) -> RoomStatus:
    """新建预订后房间应处的状态"""
    if booking_status == BookingStatus.CHECKED_IN:
        return RoomStatus.OCCUPIED
    if booking_status == BookingStatus.RESERVATION:
        return RoomStatus.RESERVED
    raise ValueError(f"不能以 {BookingStatus(booking_status).value} 状态创建预订")


def ensure_transition(current: BookingStatus, target: BookingStatus) -> None:
    """校验预订状态迁移"""
    current = BookingStatus(current)
    target = BookingStatus(target)
    if target not in BOOKING_TRANSITIONS[current]:
        raise BookingStateError(f"预订状态不能从 {current.value} 变更为 {target.value}")


def ensure_can_check_out(booking) -> None:
    """只有已入住的预订才能退房"""
    if booking.booking_status != BookingStatus.CHECKED_IN:
        raise BookingStateError("该住客尚未办理入住，无法退房")
